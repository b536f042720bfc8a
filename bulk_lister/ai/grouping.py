"""
Photo Grouping
==============
Splits the uploaded photos into candidate products.

The grouping service is asked once for the whole batch. If it fails for
any reason (network, timeout, bad response) every photo becomes its own
product instead, so the session never stalls here.
"""

import logging
from typing import List

from ..schema.bulk_listing import PhotoGroup, UploadedPhoto

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 50


def fallback_groups(photo_count: int) -> List[PhotoGroup]:
    """One group per photo"""
    return [
        PhotoGroup(
            id=f"group-{i + 1}",
            photo_indexes=[i],
            suggested_name=f"Product {i + 1}",
            confidence=FALLBACK_CONFIDENCE,
        )
        for i in range(photo_count)
    ]


def group_photos(adapter, photos: List[UploadedPhoto]) -> List[PhotoGroup]:
    """
    Group uploaded photos, falling back to one group per photo.

    Args:
        adapter: GroupingAdapter
        photos: Uploaded photos in submission order

    Returns:
        Photo groups (never empty when photos is non-empty)
    """
    if not photos:
        return []

    try:
        groups = adapter.group_photos([p.url for p in photos])
    except Exception as e:
        logger.warning("Grouping failed, using one product per photo: %s", e)
        return fallback_groups(len(photos))

    covered = {idx for group in groups for idx in group.photo_indexes}
    if len(covered) < len(photos):
        logger.warning(
            "Grouping left %d of %d photos ungrouped", len(photos) - len(covered), len(photos)
        )
    logger.info("Grouped %d photos into %d products", len(photos), len(groups))
    return groups
