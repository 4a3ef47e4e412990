"""
Cloudinary Image Host Provider.

SDK 호출 정책:
- SDK는 동기(blocking) → asyncio.to_thread로 오프로드 (다른 요청을 막지 않음)
- 모든 호출은 timeout으로 제한 (멈춘 provider가 요청을 무한정 붙잡지 않음)
- 인증 정보는 호출마다 옵션으로 전달 (cloudinary.config() 전역 설정 사용 안 함)
"""

import asyncio
import io
import logging
import os
from collections.abc import Callable
from typing import Any
from urllib.parse import urlparse

from src.core.thumbnails import DEFAULT_THUMBNAIL, ThumbnailSpec, derive_thumbnail_url
from src.domain.constants import (
    DEFAULT_PROVIDER_TIMEOUT,
    GALLERY_FOLDER,
    GALLERY_SORT_DIRECTION,
    GALLERY_SORT_FIELD,
    PNG_MEDIA_TYPE,
)
from src.domain.errors import ErrorCodes
from src.domain.schemas import AssetDescriptor

from .base import (
    DeleteError,
    ImageHostProvider,
    ListError,
    ProviderError,
    StoreError,
)

logger = logging.getLogger(__name__)

# destroy 응답의 성공 값
DESTROY_OK = "ok"


def parse_cloudinary_url(url: str) -> dict[str, str]:
    """
    CLOUDINARY_URL 파싱.

    cloudinary://<api_key>:<api_secret>@<cloud_name>

    Returns:
        cloud_name, api_key, api_secret (형식이 틀리면 빈 dict)
    """
    parsed = urlparse(url or "")
    if parsed.scheme != "cloudinary" or not parsed.hostname:
        return {}
    return {
        "cloud_name": parsed.hostname,
        "api_key": parsed.username or "",
        "api_secret": parsed.password or "",
    }


class CloudinaryProvider(ImageHostProvider):
    """
    Cloudinary Provider.

    Usage:
        provider = CloudinaryProvider(folder="png-uploads", timeout=30.0)
        asset = await provider.store(png_bytes)
        assets = await provider.list("png-uploads", 50)
        await provider.delete(asset.asset_id)
    """

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        folder: str = GALLERY_FOLDER,
        thumbnail: ThumbnailSpec = DEFAULT_THUMBNAIL,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
    ):
        """
        Args:
            cloud_name: 클라우드 이름 (환경변수 CLOUDINARY_CLOUD_NAME 사용 가능)
            api_key: API 키 (환경변수 CLOUDINARY_API_KEY 사용 가능)
            api_secret: API 시크릿 (환경변수 CLOUDINARY_API_SECRET 사용 가능)
            folder: 업로드 폴더 (목록 조회 범위와 동일해야 함)
            thumbnail: 썸네일 변환 사양
            timeout: provider 호출 1회 제한 시간(초)
        """
        # 인증 정보 결정: 인자 > 개별 환경변수 > CLOUDINARY_URL
        from_url = parse_cloudinary_url(os.environ.get("CLOUDINARY_URL", ""))
        self.cloud_name = (
            cloud_name
            or os.environ.get("CLOUDINARY_CLOUD_NAME")
            or from_url.get("cloud_name")
        )
        self.api_key = (
            api_key
            or os.environ.get("CLOUDINARY_API_KEY")
            or from_url.get("api_key")
        )
        self.api_secret = (
            api_secret
            or os.environ.get("CLOUDINARY_API_SECRET")
            or from_url.get("api_secret")
        )

        self.folder = folder
        self.thumbnail = thumbnail
        self.timeout = timeout
        self._sdk: Any = None

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _get_sdk(self, error_cls: type[ProviderError] = ProviderError) -> Any:
        """cloudinary 패키지 (lazy import)."""
        if self._sdk is None:
            try:
                import cloudinary
                import cloudinary.search
                import cloudinary.uploader

                self._sdk = cloudinary
            except ImportError as e:
                raise error_cls(
                    ErrorCodes.PROVIDER_NOT_INSTALLED,
                    "cloudinary package not installed. Run: pip install cloudinary",
                ) from e
        return self._sdk

    def _credentials(self, error_cls: type[ProviderError]) -> dict[str, Any]:
        """호출 옵션용 인증 정보. 없으면 즉시 실패."""
        if not self.is_configured:
            raise error_cls(
                ErrorCodes.PROVIDER_NOT_CONFIGURED,
                "Cloudinary chưa được cấu hình. "
                "Hãy đặt CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET.",
            )
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
        }

    async def _call(
        self,
        error_cls: type[ProviderError],
        operation: str,
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """
        SDK 호출 (스레드 오프로드 + timeout).

        모든 SDK 예외는 error_cls로 감싸서 전파.
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, **kwargs),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            logger.error(f"Cloudinary {operation} timed out after {self.timeout}s")
            raise error_cls(
                ErrorCodes.PROVIDER_TIMEOUT,
                f"Cloudinary không phản hồi sau {self.timeout:g} giây",
                operation=operation,
            ) from e
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Cloudinary {operation} failed: {e}", exc_info=True)
            raise error_cls(
                f"{operation.upper()}_FAILED",
                str(e) or type(e).__name__,
                operation=operation,
            ) from e

    # =========================================================================
    # Operations
    # =========================================================================

    async def store(
        self,
        data: bytes,
        filename: str | None = None,
    ) -> AssetDescriptor:
        """
        PNG 업로드.

        - folder 태그 (목록 조회 범위)
        - format=png 고정
        - eager: 썸네일 변환을 provider가 미리 생성
        """
        sdk = self._get_sdk(StoreError)
        options = {
            **self._credentials(StoreError),
            "folder": self.folder,
            "resource_type": "image",
            "format": "png",
            "eager": [self.thumbnail.to_transformation()],
            "timeout": self.timeout,
        }

        try:
            response = await self._call(
                StoreError,
                "store",
                sdk.uploader.upload,
                io.BytesIO(data),
                **options,
            )
        except StoreError as e:
            # 스레드는 timeout 뒤에도 계속 돈다. 늦게 끝난 업로드는 롤백 대상이 아님
            if e.code == ErrorCodes.PROVIDER_TIMEOUT:
                logger.warning(
                    f"Possible orphan in {self.folder}: {filename or 'image'} "
                    f"may still finish uploading after the timeout"
                )
            raise

        descriptor = self._descriptor_from_upload(response)
        logger.info(
            f"Stored {filename or 'image'} ({len(data)} bytes, {PNG_MEDIA_TYPE}) "
            f"as {descriptor.asset_id}"
        )
        return descriptor

    async def list(
        self,
        folder: str,
        max_results: int,
    ) -> list[AssetDescriptor]:
        """폴더 검색 (created_at desc, max_results 제한)."""
        sdk = self._get_sdk(ListError)
        credentials = self._credentials(ListError)

        search = (
            sdk.search.Search()
            .expression(f"folder:{folder}")
            .sort_by(GALLERY_SORT_FIELD, GALLERY_SORT_DIRECTION)
            .max_results(max_results)
        )

        response = await self._call(ListError, "list", search.execute, **credentials)

        resources = (response or {}).get("resources", []) or []
        return [
            self._descriptor_from_resource(resource)
            for resource in resources[:max_results]
            if resource.get("public_id") and resource.get("secure_url")
        ]

    async def delete(self, asset_id: str) -> None:
        """destroy 호출. 결과가 'ok'가 아니면 실패."""
        sdk = self._get_sdk(DeleteError)
        options = {
            **self._credentials(DeleteError),
            "resource_type": "image",
            "invalidate": True,
        }

        response = await self._call(
            DeleteError,
            "delete",
            sdk.uploader.destroy,
            asset_id,
            **options,
        )

        outcome = (response or {}).get("result")
        if outcome != DESTROY_OK:
            raise DeleteError(
                ErrorCodes.DELETE_FAILED,
                str(outcome or "unknown result"),
                asset_id=asset_id,
            )
        logger.info(f"Deleted {asset_id}")

    # =========================================================================
    # Response Normalization
    # =========================================================================

    def _descriptor_from_upload(self, response: dict[str, Any]) -> AssetDescriptor:
        """upload 응답 → AssetDescriptor (eager 결과가 있으면 썸네일로 사용)."""
        public_id = (response or {}).get("public_id")
        secure_url = (response or {}).get("secure_url")
        if not public_id or not secure_url:
            raise StoreError(
                ErrorCodes.STORE_FAILED,
                "Cloudinary trả về phản hồi không hợp lệ",
                keys=sorted((response or {}).keys()),
            )

        thumbnail_url = None
        eager = response.get("eager") or []
        if eager:
            thumbnail_url = eager[0].get("secure_url")

        return AssetDescriptor(
            asset_id=public_id,
            primary_url=secure_url,
            thumbnail_url=thumbnail_url or derive_thumbnail_url(secure_url, self.thumbnail),
        )

    def _descriptor_from_resource(self, resource: dict[str, Any]) -> AssetDescriptor:
        """search 결과 1건 → AssetDescriptor (썸네일은 URL 재작성)."""
        secure_url = resource["secure_url"]
        return AssetDescriptor(
            asset_id=resource["public_id"],
            primary_url=secure_url,
            thumbnail_url=derive_thumbnail_url(secure_url, self.thumbnail),
        )
