"""
Photo Reassignment
==================
Manual fixes to the AI grouping while the seller reviews products.

- move_photo: move a photo (and its thumbnail) from one product to another
- create_product_from_photo: split a photo out into a brand new product
- prune_empty: drop products that no longer have any photos

Each operation changes the product list in place and keeps image and
thumbnail lists the same length. Photos are never lost or duplicated.
"""

import logging
import uuid
from typing import List, Optional

from ..schema.bulk_listing import Product, ProductFormData

logger = logging.getLogger(__name__)


def _check_index(products: List[Product], index: int, label: str):
    if not 0 <= index < len(products):
        raise IndexError(f"{label} product index {index} out of range (0-{len(products) - 1})")


def move_photo(products: List[Product], photo_url: str, from_index: int, to_index: int) -> bool:
    """
    Move a photo to the end of another product's photo list.

    Returns:
        True if the photo moved, False for a no-op (same product, or the
        photo is not in the source product)

    Raises:
        IndexError: If either product index is out of range
    """
    if from_index == to_index:
        return False
    _check_index(products, from_index, "Source")
    _check_index(products, to_index, "Target")

    source = products[from_index]
    thumbnail = source.remove_photo(photo_url)
    if thumbnail is None:
        logger.warning("Photo not found in product %s: %s", source.group_id, photo_url)
        return False

    products[to_index].add_photo(photo_url, thumbnail)
    logger.info("Moved photo from %s to %s", source.group_id, products[to_index].group_id)
    return True


def create_product_from_photo(products: List[Product], photo_url: str, from_index: int) -> Optional[Product]:
    """
    Split a photo out of its product into a new, empty product.

    Returns:
        The new product (appended to the list), or None if the photo is
        not in the source product

    Raises:
        IndexError: If the source index is out of range
    """
    _check_index(products, from_index, "Source")

    source = products[from_index]
    thumbnail = source.remove_photo(photo_url)
    if thumbnail is None:
        logger.warning("Photo not found in product %s: %s", source.group_id, photo_url)
        return None

    product = Product(
        group_id=f"new-{uuid.uuid4().hex[:12]}",
        image_urls=[photo_url],
        thumbnail_urls=[thumbnail],
        suggested_name=f"Product {len(products) + 1}",
        ai_data=None,
        form_data=ProductFormData(),
    )
    products.append(product)
    logger.info("Created %s from a photo of %s", product.group_id, source.group_id)
    return product


def prune_empty(products: List[Product]) -> List[Product]:
    """Remove products with no photos. Returns the removed products."""
    removed = [p for p in products if not p.image_urls]
    if removed:
        products[:] = [p for p in products if p.image_urls]
        logger.info("Removed %d empty products", len(removed))
    return removed


def total_photos(products: List[Product]) -> int:
    return sum(len(p.image_urls) for p in products)
