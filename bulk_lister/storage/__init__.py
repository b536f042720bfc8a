"""Local photo handling and upload for the bulk pipeline"""

from .compression import ImageCompressor, CompressedFile, guess_content_type
from .previews import PreviewRegistry
from .upload_dispatcher import UploadDispatcher, UploadError, UPLOAD_CONCURRENCY

__all__ = [
    "ImageCompressor",
    "CompressedFile",
    "guess_content_type",
    "PreviewRegistry",
    "UploadDispatcher",
    "UploadError",
    "UPLOAD_CONCURRENCY",
]
