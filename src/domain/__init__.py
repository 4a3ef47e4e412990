"""Domain layer: errors, schemas, messages."""

from .errors import ErrorCodes, UploadRejectError
from .schemas import (
    AssetDescriptor,
    GalleryView,
    UploadCandidate,
    UploadResult,
)

__all__ = [
    "ErrorCodes",
    "UploadRejectError",
    "AssetDescriptor",
    "GalleryView",
    "UploadCandidate",
    "UploadResult",
]
