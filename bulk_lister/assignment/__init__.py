"""Manual photo-to-product assignment"""

from .photo_reassignment import (
    move_photo,
    create_product_from_photo,
    prune_empty,
    total_photos,
)

__all__ = [
    "move_photo",
    "create_product_from_photo",
    "prune_empty",
    "total_photos",
]
