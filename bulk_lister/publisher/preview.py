"""
Final Review Summary
====================
What the seller sees before pressing publish: one line per product with
its readiness and anything still missing, plus batch totals.
"""

from typing import Dict, Any, List

from ..schema.bulk_listing import Product
from ..schema.validation import form_issues


def summarize_product(product: Product) -> Dict[str, Any]:
    form = product.form_data
    ready, issues = form_issues(form)
    return {
        "group_id": product.group_id,
        "title": form.title or product.suggested_name,
        "price": f"${form.price:,.0f}",
        "photos": product.photo_count,
        "cover_url": product.cover_url,
        "condition": form.condition_rating.value,
        "delivery": _delivery_label(form),
        "ready": ready,
        "issues": issues,
    }


def _delivery_label(form) -> str:
    options = []
    if form.shipping_available:
        options.append(f"Shipping ${form.shipping_cost:,.2f}" if form.shipping_cost else "Free shipping")
    if form.pickup_available:
        options.append(f"Pickup ({form.pickup_location})" if form.pickup_location else "Pickup")
    return ", ".join(options) if options else "None"


def summarize(products: List[Product]) -> Dict[str, Any]:
    """Aggregate view for the final stage"""
    items = [summarize_product(p) for p in products]
    ready = sum(1 for item in items if item["ready"])
    return {
        "products": items,
        "total": len(items),
        "ready": ready,
        "total_value": sum(p.form_data.price or 0 for p in products),
        "can_publish": ready > 0,
    }
