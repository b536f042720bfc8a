"""
Bulk Listing Schema
===================
The records that flow through one bulk upload session, from the photos a
seller picks on disk to the products that get published.

RawPhoto -> UploadedPhoto -> PhotoGroup -> Product (with ProductFormData)

Nothing here outlives the session. The created listings are owned by the
listings service once publishing succeeds.
"""

import uuid
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import List, Optional, Dict, Any


class ItemType(Enum):
    """Marketplace item types the analysis service recognises"""
    BIKE = "bike"
    PART = "part"
    APPAREL = "apparel"

    @classmethod
    def parse(cls, value: Any) -> "ItemType":
        """Map a raw value to an item type, defaulting to bike"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for item_type in cls:
                if item_type.value == value.strip().lower():
                    return item_type
        return cls.BIKE


class ConditionRating(Enum):
    """Fixed condition scale shown to buyers"""
    NEW = "New"
    LIKE_NEW = "Like New"
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    WELL_USED = "Well Used"

    @classmethod
    def parse(cls, value: Any) -> "ConditionRating":
        """Map a raw value to a rating, defaulting to Good"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower().replace("_", " ")
            for rating in cls:
                if rating.value.lower() == wanted:
                    return rating
        return cls.GOOD


@dataclass
class PreviewHandle:
    """Local preview of a selected photo. Must be released."""
    handle_id: str
    path: str
    released: bool = False


@dataclass
class RawPhoto:
    """A photo selected on disk, not yet uploaded"""
    path: str
    content_type: str
    size: int
    preview: Optional[PreviewHandle] = None
    photo_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(frozen=True)
class UploadedPhoto:
    """Object storage record for one uploaded photo"""
    id: str
    url: str
    card_url: str = ""
    thumbnail_url: str = ""
    mobile_card_url: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UploadedPhoto":
        return cls(
            id=str(data.get("id") or ""),
            url=data["url"],
            card_url=data.get("cardUrl") or "",
            thumbnail_url=data.get("thumbnailUrl") or "",
            mobile_card_url=data.get("mobileCardUrl") or "",
        )

    @property
    def preview_url(self) -> str:
        """Smallest variant available, for thumbnails"""
        return self.thumbnail_url or self.card_url or self.url


@dataclass(frozen=True)
class PhotoGroup:
    """Photos believed to show the same product"""
    id: str
    photo_indexes: List[int]
    suggested_name: str
    confidence: int = 50


@dataclass
class ProductFormData:
    """
    Canonical listing fields edited during review.

    Identity, type-specific attributes (bike, part, apparel), condition,
    pricing and delivery terms. At least one delivery option must be
    enabled before a product can be published.
    """

    # Identity
    title: str = ""
    description: str = ""
    seller_notes: str = ""
    brand: str = ""
    model: str = ""
    model_year: str = ""
    item_type: ItemType = ItemType.BIKE

    # Bike
    bike_type: str = ""
    frame_size: str = ""
    frame_material: str = ""
    groupset: str = ""
    wheel_size: str = ""
    color_primary: str = ""

    # Part
    part_type_detail: str = ""
    compatibility_notes: str = ""
    material: str = ""

    # Apparel
    size: str = ""
    gender_fit: str = ""

    # Condition
    condition_rating: ConditionRating = ConditionRating.GOOD
    condition_details: str = ""

    # Pricing (whole currency units)
    price: float = 0
    original_rrp: float = 0

    # Delivery
    shipping_available: bool = False
    shipping_cost: float = 0
    pickup_available: bool = True
    pickup_location: str = ""

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def has_delivery_option(self) -> bool:
        return bool(self.shipping_available or self.pickup_available)


@dataclass
class Product:
    """
    A listing in progress.

    image_urls and thumbnail_urls are parallel lists; index 0 is the cover.
    Validity is always derived from form_data, never stored.
    """

    group_id: str
    image_urls: List[str] = field(default_factory=list)
    thumbnail_urls: List[str] = field(default_factory=list)
    suggested_name: str = ""
    ai_data: Optional[Dict[str, Any]] = None
    form_data: ProductFormData = field(default_factory=ProductFormData)

    def __post_init__(self):
        if len(self.image_urls) != len(self.thumbnail_urls):
            raise ValueError(
                f"Product {self.group_id}: image_urls and thumbnail_urls differ in length"
            )

    @property
    def is_valid(self) -> bool:
        from .validation import validate_form_data
        return validate_form_data(self.form_data)

    @property
    def is_publishable(self) -> bool:
        return self.is_valid and self.form_data.has_delivery_option()

    @property
    def cover_url(self) -> Optional[str]:
        return self.image_urls[0] if self.image_urls else None

    @property
    def photo_count(self) -> int:
        return len(self.image_urls)

    def update_field(self, name: str, value: Any) -> bool:
        """
        Set one form field and return the recomputed validity.

        Raises:
            KeyError: If the field does not exist
        """
        if name not in ProductFormData.field_names():
            raise KeyError(f"Unknown product field: {name}")

        if name == "item_type":
            value = ItemType.parse(value)
        elif name == "condition_rating":
            value = ConditionRating.parse(value)
        elif name in ("price", "original_rrp", "shipping_cost"):
            value = float(value or 0)
        elif name in ("shipping_available", "pickup_available"):
            value = bool(value)
        elif value is None:
            value = ""

        setattr(self.form_data, name, value)
        return self.is_valid

    def remove_photo(self, photo_url: str) -> Optional[str]:
        """Remove a photo and its thumbnail. Returns the thumbnail, or None if absent."""
        try:
            index = self.image_urls.index(photo_url)
        except ValueError:
            return None
        del self.image_urls[index]
        return self.thumbnail_urls.pop(index)

    def add_photo(self, photo_url: str, thumbnail_url: Optional[str] = None):
        self.image_urls.append(photo_url)
        self.thumbnail_urls.append(thumbnail_url or photo_url)

    def replace_cover(self, new_url: str):
        """Swap the cover image (and its thumbnail) for an enhanced one"""
        if not self.image_urls:
            raise ValueError(f"Product {self.group_id} has no cover image")
        self.image_urls[0] = new_url
        self.thumbnail_urls[0] = new_url


@dataclass
class Progress:
    """Cumulative progress of a batch stage"""
    current: int = 0
    total: int = 0
    phase: str = ""

    @property
    def percent(self) -> float:
        if not self.total:
            return 0.0
        return (self.current / self.total) * 100
