"""
Gallery (Listing) Service: 고정 폴더의 이미지 목록.

규칙:
- 호출자 입장에서 항상 성공 (provider 실패 → 빈 목록 + 경고 로그)
- 목록 실패가 페이지 렌더링을 막지 않음
- 상태 없음: 같은 provider 상태면 같은 순서의 목록
"""

import logging

from src.app.providers.base import ImageHostProvider, ListError
from src.domain.constants import (
    DEFAULT_LIST_RETRIES,
    GALLERY_FOLDER,
    GALLERY_MAX_RESULTS,
)
from src.domain.schemas import AssetDescriptor, GalleryView
from src.utils.retry import retry_with_exponential_backoff

logger = logging.getLogger(__name__)


class ListingService:
    """
    갤러리 목록 서비스.

    Usage:
        listing = ListingService(provider, folder="png-uploads")
        assets = await listing.list_all()
    """

    def __init__(
        self,
        provider: ImageHostProvider,
        folder: str = GALLERY_FOLDER,
        max_results: int = GALLERY_MAX_RESULTS,
        retries: int = DEFAULT_LIST_RETRIES,
        retry_delay: float = 0.5,
    ):
        self.provider = provider
        self.folder = folder
        self.max_results = max_results
        self.retries = retries
        self.retry_delay = retry_delay

    @classmethod
    def from_config(cls, config: dict, provider: ImageHostProvider) -> "ListingService":
        gallery = config.get("gallery", {}) or {}
        provider_config = config.get("provider", {}) or {}
        return cls(
            provider=provider,
            folder=str(gallery.get("folder", GALLERY_FOLDER)),
            max_results=int(gallery.get("max_results", GALLERY_MAX_RESULTS)),
            retries=int(provider_config.get("list_retries", DEFAULT_LIST_RETRIES)),
            retry_delay=float(provider_config.get("list_retry_delay", 0.5)),
        )

    async def list_all(self) -> list[AssetDescriptor]:
        """
        폴더 전체 목록 (생성시간 내림차순, max_results 제한).

        Returns:
            AssetDescriptor 목록 (provider 실패 시 빈 목록)
        """
        try:
            assets = await retry_with_exponential_backoff(
                self.provider.list,
                self.folder,
                self.max_results,
                max_retries=self.retries,
                initial_delay=self.retry_delay,
                exceptions=(ListError,),
            )
        except ListError as e:
            logger.warning(f"Listing {self.folder} failed, rendering empty gallery: {e}")
            return []

        return list(assets)[: self.max_results]

    async def load_view(self) -> GalleryView:
        """페이지 렌더링용 뷰 모델."""
        return GalleryView(await self.list_all())

    def owns(self, asset_id: str) -> bool:
        """asset_id가 갤러리 폴더 안의 것인지 (삭제 범위 제한)."""
        return asset_id.startswith(f"{self.folder}/") and len(asset_id) > len(self.folder) + 1
