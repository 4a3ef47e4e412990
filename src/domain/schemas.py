"""
Data schemas for the upload gallery.

규칙:
- 로컬 영속화 없음: 모든 엔티티는 요청마다 provider 응답/폼 입력에서 재구성
- AssetDescriptor는 불변 (frozen)
- wire 포맷 키: url, thumbUrl, publicId (클라이언트 스크립트와 계약)
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

# =============================================================================
# Upload Schemas
# =============================================================================

@dataclass
class UploadCandidate:
    """
    요청으로 들어온 파일 1개.

    store 호출이 끝나면 버려짐.
    """
    data: bytes
    media_type: str  # 클라이언트가 선언한 MIME 타입
    size: int
    filename: str | None = None

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        media_type: str,
        filename: str | None = None,
    ) -> "UploadCandidate":
        return cls(data=data, media_type=media_type, size=len(data), filename=filename)


@dataclass(frozen=True)
class AssetDescriptor:
    """
    Provider에 저장된 이미지 1개.

    asset_id: provider가 발급한 public_id (불투명, 유일)
    primary_url: 원본 URL
    thumbnail_url: 300x300 변환 URL (eager 결과 또는 URL 재작성)
    """
    asset_id: str
    primary_url: str
    thumbnail_url: str

    def to_dict(self) -> dict[str, str]:
        """JSON 응답용 (클라이언트 계약 키)."""
        return {
            "url": self.primary_url,
            "thumbUrl": self.thumbnail_url,
            "publicId": self.asset_id,
        }


@dataclass
class UploadResult:
    """
    업로드 요청 1건의 결과.

    실패 시 assets는 항상 비어 있음 (부분 성공은 노출하지 않음).
    """
    succeeded: bool
    assets: list[AssetDescriptor] = field(default_factory=list)
    error_message: str | None = None
    error_code: str | None = None

    @classmethod
    def success(cls, assets: list[AssetDescriptor]) -> "UploadResult":
        return cls(succeeded=True, assets=list(assets))

    @classmethod
    def failure(cls, code: str, message: str) -> "UploadResult":
        return cls(succeeded=False, error_code=code, error_message=message)

    def to_dict(self) -> dict[str, Any]:
        """ajax 응답 본문."""
        if self.succeeded:
            return {
                "success": True,
                "images": [asset.to_dict() for asset in self.assets],
            }
        return {
            "success": False,
            "error": self.error_message,
        }


# =============================================================================
# Gallery View Model
# =============================================================================

class GalleryView:
    """
    갤러리 뷰 모델 (생성시간 내림차순).

    gallery.js의 순수 함수들과 같은 규칙:
    - 추가: 새 항목을 앞에 붙이고 count 증가
    - 삭제: 일치하는 항목 정확히 1개 제거, count 감소
    - count == 0 일 때만 empty 상태

    서버 측에서는 최초 렌더링에 사용.
    """

    def __init__(self, items: Iterable[AssetDescriptor] = ()) -> None:
        self._items: list[AssetDescriptor] = list(items)

    @property
    def items(self) -> list[AssetDescriptor]:
        return list(self._items)

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def prepend(self, assets: Iterable[AssetDescriptor]) -> int:
        """
        새로 업로드된 항목을 앞에 추가.

        assets의 순서(제출 순서)를 유지한 채 기존 목록 앞에 붙인다.

        Returns:
            추가된 개수
        """
        new_items = list(assets)
        self._items = new_items + self._items
        return len(new_items)

    def remove(self, asset_id: str) -> bool:
        """
        asset_id와 일치하는 첫 항목 1개 제거.

        Returns:
            제거 여부 (없으면 False, 목록 변화 없음)
        """
        for index, item in enumerate(self._items):
            if item.asset_id == asset_id:
                del self._items[index]
                return True
        return False

    def __len__(self) -> int:
        return self.count

    def __iter__(self):
        return iter(self._items)

    def to_list(self) -> list[dict[str, str]]:
        return [item.to_dict() for item in self._items]
