"""
썸네일 URL 재작성.

Provider URL 스킴:
    https://res.cloudinary.com/<cloud>/image/upload/v123/png-uploads/abc.png
    → https://res.cloudinary.com/<cloud>/image/upload/c_fill,h_300,w_300,q_auto,f_auto/v123/png-uploads/abc.png

순수 문자열 변환 (I/O 없음). Provider URL 스킴이 바뀌면 이 모듈만 교체.
"""

from dataclasses import dataclass
from typing import Any

from src.domain.constants import (
    THUMBNAIL_CROP,
    THUMBNAIL_FETCH_FORMAT,
    THUMBNAIL_HEIGHT,
    THUMBNAIL_QUALITY,
    THUMBNAIL_WIDTH,
    UPLOAD_PATH_MARKER,
)


@dataclass(frozen=True)
class ThumbnailSpec:
    """썸네일 변환 사양 (default.yaml gallery.thumbnail)."""
    width: int = THUMBNAIL_WIDTH
    height: int = THUMBNAIL_HEIGHT
    crop: str = THUMBNAIL_CROP
    quality: str = THUMBNAIL_QUALITY
    fetch_format: str = THUMBNAIL_FETCH_FORMAT

    @classmethod
    def from_config(cls, config: dict) -> "ThumbnailSpec":
        gallery = config.get("gallery", {}) or {}
        thumb = gallery.get("thumbnail", {}) or {}
        return cls(
            width=int(thumb.get("width", THUMBNAIL_WIDTH)),
            height=int(thumb.get("height", THUMBNAIL_HEIGHT)),
            crop=str(thumb.get("crop", THUMBNAIL_CROP)),
            quality=str(thumb.get("quality", THUMBNAIL_QUALITY)),
            fetch_format=str(thumb.get("fetch_format", THUMBNAIL_FETCH_FORMAT)),
        )

    def to_transformation(self) -> dict[str, Any]:
        """SDK eager 파라미터용."""
        return {
            "width": self.width,
            "height": self.height,
            "crop": self.crop,
            "quality": self.quality,
            "fetch_format": self.fetch_format,
        }

    def to_url_segment(self) -> str:
        """URL 변환 세그먼트 (예: c_fill,h_300,w_300,q_auto,f_auto)."""
        return (
            f"c_{self.crop},h_{self.height},w_{self.width},"
            f"q_{self.quality},f_{self.fetch_format}"
        )


DEFAULT_THUMBNAIL = ThumbnailSpec()


def derive_thumbnail_url(
    primary_url: str,
    spec: ThumbnailSpec = DEFAULT_THUMBNAIL,
    marker: str = UPLOAD_PATH_MARKER,
) -> str:
    """
    원본 URL에서 썸네일 URL 생성.

    첫 번째 marker("/upload/") 뒤에 변환 세그먼트를 삽입.
    marker가 없으면 원본 URL 그대로 반환 (깨진 URL을 만들지 않음).

    Args:
        primary_url: provider가 돌려준 원본 URL
        spec: 썸네일 변환 사양
        marker: provider 업로드 경로 마커

    Returns:
        썸네일 URL
    """
    if not primary_url or marker not in primary_url:
        return primary_url

    return primary_url.replace(marker, f"{marker}{spec.to_url_segment()}/", 1)
