"""
Core layer: 순수 로직 (I/O 없음).

역할:
- 썸네일 URL 재작성
- 로깅 설정
"""

from .logging import configure_logging, upload_log_context
from .thumbnails import DEFAULT_THUMBNAIL, ThumbnailSpec, derive_thumbnail_url

__all__ = [
    # thumbnails
    "ThumbnailSpec",
    "DEFAULT_THUMBNAIL",
    "derive_thumbnail_url",
    # logging
    "configure_logging",
    "upload_log_context",
]
