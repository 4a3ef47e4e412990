"""
Image Host Provider Abstraction.

Provider 교체 가능하게 설계. 서비스는 ImageHostProvider에만 의존.
"""

from .base import (
    DeleteError,
    ImageHostProvider,
    ListError,
    ProviderError,
    StoreError,
)
from .cloudinary import CloudinaryProvider

__all__ = [
    "ImageHostProvider",
    "ProviderError",
    "StoreError",
    "ListError",
    "DeleteError",
    "CloudinaryProvider",
]
