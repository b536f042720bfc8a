"""
Bulk Publisher
==============
Builds listing payloads from reviewed products and submits them to the
bulk listing-creation API in a single request.

Only publishable products (valid and with a delivery option) are sent.
If the whole request fails the products are left exactly as they were so
the seller can retry without uploading or analysing again.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional

from ..schema.bulk_listing import ItemType, Product

logger = logging.getLogger(__name__)

CATEGORY_MAP = {
    ItemType.BIKE: "Bicycles",
    ItemType.PART: "Parts",
    ItemType.APPAREL: "Apparel",
}
DEFAULT_CATEGORY = "Bicycles"


class PublishError(Exception):
    """The batch was rejected as a whole"""


@dataclass
class PublishResult:
    """Outcome of one bulk submission"""
    created_ids: List[str]
    submitted: int
    payloads: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return max(self.submitted - len(self.created_ids), 0)


def build_listing_payload(product: Product) -> Dict[str, Any]:
    """Flatten one product into the listing-creation wire format"""
    form = product.form_data

    images = [
        {
            "id": f"{product.group_id}-{index}",
            "url": url,
            "order": index,
            "isPrimary": index == 0,
        }
        for index, url in enumerate(product.image_urls)
    ]

    return {
        "title": form.title or product.suggested_name,
        "productDescription": form.description,
        "sellerNotes": form.seller_notes,
        "brand": form.brand,
        "model": form.model,
        "modelYear": form.model_year,
        "bikeType": form.bike_type,
        "frameSize": form.frame_size,
        "frameMaterial": form.frame_material,
        "groupset": form.groupset,
        "wheelSize": form.wheel_size,
        "colorPrimary": form.color_primary,
        "partTypeDetail": form.part_type_detail,
        "compatibilityNotes": form.compatibility_notes,
        "material": form.material,
        "size": form.size,
        "genderFit": form.gender_fit,
        "conditionRating": form.condition_rating.value,
        "conditionDetails": form.condition_details,
        "price": form.price,
        "originalRrp": form.original_rrp,
        "images": images,
        "primaryImageUrl": product.cover_url,
        "marketplace_category": CATEGORY_MAP.get(form.item_type, DEFAULT_CATEGORY),
        "isNegotiable": True,
        "shippingAvailable": form.shipping_available,
        "shippingCost": form.shipping_cost if form.shipping_available else None,
        "pickupLocation": form.pickup_location if form.pickup_available else None,
        "pickupOnly": not form.shipping_available and form.pickup_available,
    }


class BulkPublisher:
    """
    Submits products through a BulkListingsAdapter.

    Keeps a history of attempts for the session.
    """

    def __init__(self, adapter):
        self.adapter = adapter
        self.publish_history: List[Dict[str, Any]] = []

    def build_payloads(self, products: List[Product]) -> List[Dict[str, Any]]:
        """Payloads for every publishable product, in product order"""
        return [build_listing_payload(p) for p in products if p.is_publishable]

    def publish(self, products: List[Product]) -> PublishResult:
        """
        Publish all publishable products as one batch.

        Raises:
            PublishError: Nothing to publish, or the batch request failed
        """
        payloads = self.build_payloads(products)
        if not payloads:
            raise PublishError("No products are ready to publish")

        try:
            created = self.adapter.create_listings(payloads)
        except Exception as e:
            self._record(len(payloads), 0, str(e))
            logger.error("Bulk publish failed for %d listings: %s", len(payloads), e)
            raise PublishError(f"Failed to publish listings: {e}") from e

        self._record(len(payloads), len(created), None)
        if len(created) < len(payloads):
            logger.warning("Only %d of %d listings were created", len(created), len(payloads))
        else:
            logger.info("Created %d listings", len(created))
        return PublishResult(created_ids=created, submitted=len(payloads), payloads=payloads)

    def _record(self, submitted: int, created: int, error: Optional[str]):
        self.publish_history.append({
            "timestamp": datetime.now().isoformat(),
            "submitted": submitted,
            "created": created,
            "success": error is None,
            "error": error,
        })

    def get_success_rate(self) -> float:
        """Share of batch attempts that went through, as a percentage"""
        if not self.publish_history:
            return 0.0
        successes = sum(1 for h in self.publish_history if h["success"])
        return (successes / len(self.publish_history)) * 100
