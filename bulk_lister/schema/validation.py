"""Readiness checks for products in review"""

from typing import List, Tuple, Iterable

from .bulk_listing import ProductFormData


def validate_form_data(form: ProductFormData) -> bool:
    """A product is valid when title, brand and model are filled and price is positive."""
    return bool(
        form.title and form.title.strip()
        and form.brand and form.brand.strip()
        and form.model and form.model.strip()
        and (form.price or 0) > 0
    )


def form_issues(form: ProductFormData) -> Tuple[bool, List[str]]:
    """
    Explain why a product cannot be published yet.

    Returns (is_publishable, list_of_issues)
    """
    issues = []

    if not (form.title and form.title.strip()):
        issues.append("Title is required")
    if not (form.brand and form.brand.strip()):
        issues.append("Brand is required")
    if not (form.model and form.model.strip()):
        issues.append("Model is required")
    if (form.price or 0) <= 0:
        issues.append("Price must be greater than 0")
    if not form.has_delivery_option():
        issues.append("Enable shipping or pickup")

    return (len(issues) == 0, issues)


def ready_count(products: Iterable) -> int:
    """Number of products that would be submitted on publish"""
    return sum(1 for p in products if p.is_publishable)
