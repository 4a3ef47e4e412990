"""
Application Services.

역할:
- validate: 업로드 파일 검증 (네트워크 이전)
- intake: multipart 폼 → UploadCandidate
- upload: 동시 업로드 오케스트레이션
- gallery: 고정 폴더 목록 조회
"""

from .gallery import ListingService
from .upload import UploadService
from .validate import UploadPolicy, UploadValidator

__all__ = [
    "UploadPolicy",
    "UploadValidator",
    "UploadService",
    "ListingService",
]
