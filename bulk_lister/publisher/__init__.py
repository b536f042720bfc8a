"""Bulk listing publisher"""

from .bulk_publisher import (
    BulkPublisher,
    PublishResult,
    PublishError,
    build_listing_payload,
    CATEGORY_MAP,
)
from .preview import summarize, summarize_product

__all__ = [
    "BulkPublisher",
    "PublishResult",
    "PublishError",
    "build_listing_payload",
    "CATEGORY_MAP",
    "summarize",
    "summarize_product",
]
