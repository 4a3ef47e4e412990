"""
Validation Service: 업로드 파일 검증 (네트워크 호출 전).

규칙:
- 선언된 MIME 타입이 정확히 image/png가 아니면 거절
- 파일당 1MB 초과 거절
- 0개 → 거절, 10개 초과 → 거절
- images 외 필드로 들어온 파일 → 거절

판정 순서:
    unexpected field → 개수 → MIME 타입 → 크기
    (타입은 바이트를 읽기 전에, 크기는 읽으면서 판정.
     PNG가 아니면서 1MB 초과인 파일은 '지원하지 않는 타입'으로 보고)
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from src.domain.constants import (
    MAX_FILE_SIZE_BYTES,
    MAX_FILES_PER_REQUEST,
    PNG_MEDIA_TYPE,
    UPLOAD_FIELD_NAME,
)
from src.domain.errors import ErrorCodes, UploadRejectError
from src.domain.messages import client_messages
from src.domain.schemas import UploadCandidate


@dataclass(frozen=True)
class UploadPolicy:
    """업로드 제한 (default.yaml upload.*)."""
    field_name: str = UPLOAD_FIELD_NAME
    media_type: str = PNG_MEDIA_TYPE
    max_file_size: int = MAX_FILE_SIZE_BYTES
    max_files: int = MAX_FILES_PER_REQUEST

    @classmethod
    def from_config(cls, config: dict) -> "UploadPolicy":
        upload = config.get("upload", {}) or {}
        return cls(
            field_name=str(upload.get("field_name", UPLOAD_FIELD_NAME)),
            media_type=str(upload.get("media_type", PNG_MEDIA_TYPE)),
            max_file_size=int(upload.get("max_file_size", MAX_FILE_SIZE_BYTES)),
            max_files=int(upload.get("max_files", MAX_FILES_PER_REQUEST)),
        )

    def to_client_rules(self) -> dict:
        """gallery.js 사전 검증용 (서버와 같은 규칙)."""
        return {
            "fieldName": self.field_name,
            "mediaType": self.media_type,
            "maxFileSize": self.max_file_size,
            "maxFiles": self.max_files,
            "messages": client_messages(self.max_file_size),
        }


class UploadValidator:
    """
    업로드 검증기.

    모든 메서드는 동기 + I/O 없음. 거절은 UploadRejectError.
    """

    def __init__(self, policy: UploadPolicy | None = None):
        self.policy = policy or UploadPolicy()

    # =========================================================================
    # Request-level checks
    # =========================================================================

    def check_field(self, field_name: str) -> None:
        """파일 파트의 필드명 검사."""
        if field_name != self.policy.field_name:
            raise UploadRejectError(
                ErrorCodes.UNEXPECTED_FIELD,
                field=field_name,
                expected=self.policy.field_name,
            )

    def check_fields(self, field_names: Iterable[str]) -> None:
        for name in field_names:
            self.check_field(name)

    def check_count(self, count: int) -> None:
        """파일 개수 검사 (1..max_files)."""
        if count == 0:
            raise UploadRejectError(ErrorCodes.NO_FILES_SELECTED)
        if count > self.policy.max_files:
            raise UploadRejectError(
                ErrorCodes.TOO_MANY_FILES,
                count=count,
                max_files=self.policy.max_files,
            )

    # =========================================================================
    # Candidate-level checks
    # =========================================================================

    def check_media_type(self, media_type: str | None, filename: str | None = None) -> None:
        """선언된 MIME 타입 검사 (정확히 일치해야 함, 대소문자/파라미터 허용 안 함)."""
        if media_type != self.policy.media_type:
            raise UploadRejectError(
                ErrorCodes.UNSUPPORTED_MEDIA_TYPE,
                filename=filename,
                media_type=media_type,
            )

    def check_size(self, size: int, filename: str | None = None) -> None:
        if size > self.policy.max_file_size:
            raise UploadRejectError(
                ErrorCodes.FILE_TOO_LARGE,
                filename=filename,
                size=size,
                max_file_size=self.policy.max_file_size,
            )

    def validate_candidate(self, candidate: UploadCandidate) -> None:
        """
        파일 1개 검증.

        Raises:
            UploadRejectError: UNSUPPORTED_MEDIA_TYPE | FILE_TOO_LARGE
        """
        self.check_media_type(candidate.media_type, candidate.filename)
        self.check_size(candidate.size, candidate.filename)

    def validate_batch(self, candidates: Sequence[UploadCandidate]) -> None:
        """
        요청 전체 검증 (개수 → 각 파일).

        Raises:
            UploadRejectError: 첫 번째 위반
        """
        self.check_count(len(candidates))
        for candidate in candidates:
            self.validate_candidate(candidate)
