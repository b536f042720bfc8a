"""Records for the bulk listing pipeline"""

from .bulk_listing import (
    ItemType,
    ConditionRating,
    PreviewHandle,
    RawPhoto,
    UploadedPhoto,
    PhotoGroup,
    ProductFormData,
    Product,
    Progress,
)
from .validation import (
    validate_form_data,
    form_issues,
    ready_count,
)

__all__ = [
    "ItemType",
    "ConditionRating",
    "PreviewHandle",
    "RawPhoto",
    "UploadedPhoto",
    "PhotoGroup",
    "ProductFormData",
    "Product",
    "Progress",
    "validate_form_data",
    "form_issues",
    "ready_count",
]
