"""
Image Host Provider 추상 인터페이스.

역할:
- store(bytes) → AssetDescriptor
- list(folder) → AssetDescriptor 목록 (생성시간 내림차순)
- delete(asset_id) → 확인

Provider가 system of record. 여기에는 로컬 상태가 없다.
구현체는 명시적으로 생성해서 서비스에 주입 (전역 SDK 설정 금지).
"""

from abc import ABC, abstractmethod
from typing import Any

from src.domain.schemas import AssetDescriptor

# =============================================================================
# Provider Exceptions
# =============================================================================

class ProviderError(Exception):
    """Provider 관련 에러."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class StoreError(ProviderError):
    """업로드(store) 실패."""
    pass


class ListError(ProviderError):
    """목록 조회 실패."""
    pass


class DeleteError(ProviderError):
    """삭제 실패."""
    pass


# =============================================================================
# Abstract Provider
# =============================================================================

class ImageHostProvider(ABC):
    """
    Image Host Provider 추상 인터페이스.

    모든 메서드는 provider 왕복 1회.
    """

    @abstractmethod
    async def store(
        self,
        data: bytes,
        filename: str | None = None,
    ) -> AssetDescriptor:
        """
        이미지 저장.

        Args:
            data: PNG 바이트
            filename: 원본 파일명 (로그용, 선택)

        Returns:
            AssetDescriptor (thumbnail_url 포함)

        Raises:
            StoreError
        """
        ...

    @abstractmethod
    async def list(
        self,
        folder: str,
        max_results: int,
    ) -> list[AssetDescriptor]:
        """
        폴더 내 이미지 목록.

        Args:
            folder: provider 논리 폴더
            max_results: 최대 개수

        Returns:
            생성시간 내림차순 AssetDescriptor 목록

        Raises:
            ListError
        """
        ...

    @abstractmethod
    async def delete(self, asset_id: str) -> None:
        """
        이미지 삭제.

        Args:
            asset_id: provider public_id

        Raises:
            DeleteError
        """
        ...
