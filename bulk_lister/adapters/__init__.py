"""Clients for the services the bulk pipeline depends on"""

from .base_adapter import (
    ServiceAdapter,
    ServiceError,
    ServiceUnavailableError,
    ServiceRejectedError,
    MalformedResponseError,
)
from .upload_adapter import UploadAdapter
from .ai_services import GroupingAdapter, AnalysisAdapter, EnhancementAdapter
from .listings_adapter import BulkListingsAdapter

__all__ = [
    "ServiceAdapter",
    "ServiceError",
    "ServiceUnavailableError",
    "ServiceRejectedError",
    "MalformedResponseError",
    "UploadAdapter",
    "GroupingAdapter",
    "AnalysisAdapter",
    "EnhancementAdapter",
    "BulkListingsAdapter",
]
