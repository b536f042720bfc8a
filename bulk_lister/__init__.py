"""
AI Bulk Lister
==============
Turns a batch of raw photos into validated, priced marketplace listings.

Main components:
- schema: Photos, groups, products and the validation gate
- adapters: Clients for the upload, AI and listing services
- storage: Compression, local previews and batched uploads
- ai: Photo grouping, parallel analysis and field normalization
- assignment: Manual photo-to-product reassignment
- enhancer: Background removal on product covers
- publisher: Bulk listing submission and final review summary
- workflow: The session controller that sequences everything
"""

from .schema import (
    ItemType,
    ConditionRating,
    RawPhoto,
    UploadedPhoto,
    PhotoGroup,
    ProductFormData,
    Product,
    validate_form_data,
)
from .config import PipelineConfig
from .workflow import BulkUploadWorkflow, Stage, WorkflowStateError

__version__ = "1.0.0"

__all__ = [
    "ItemType",
    "ConditionRating",
    "RawPhoto",
    "UploadedPhoto",
    "PhotoGroup",
    "ProductFormData",
    "Product",
    "validate_form_data",
    "PipelineConfig",
    "BulkUploadWorkflow",
    "Stage",
    "WorkflowStateError",
]
