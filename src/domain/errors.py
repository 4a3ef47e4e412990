"""
Error definitions for the upload gallery.

규칙:
- 조용한 실패 금지 → UploadRejectError로 명시적 거절
- 로컬 검증 에러는 네트워크 호출 전에 발생 (provider 비용 없음)
- Provider 에러는 src/app/providers/base.py (ProviderError 계열)
"""

from typing import Any


class UploadRejectError(Exception):
    """
    업로드 검증 위반 시 발생하는 에러.

    항상 복구 가능한 사용자 입력 오류 (서버 장애 아님):
    - PNG가 아닌 파일
    - 1MB 초과
    - 파일 개수 초과 / 0개
    - images 외 필드로 전송된 파일

    Usage:
        raise UploadRejectError("FILE_TOO_LARGE", filename="a.png", size=2_000_000)
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            **self.context,
        }


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수. 새 코드 추가 시 src/domain/messages.py에도 메시지 추가."""

    # === Validation (로컬, 네트워크 이전) ===
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    TOO_MANY_FILES = "TOO_MANY_FILES"
    NO_FILES_SELECTED = "NO_FILES_SELECTED"
    UNEXPECTED_FIELD = "UNEXPECTED_FIELD"
    UPLOAD_FAILED = "UPLOAD_FAILED"  # multipart 파싱 실패 등 일반 오류

    # === Provider ===
    STORE_FAILED = "STORE_FAILED"
    LIST_FAILED = "LIST_FAILED"
    DELETE_FAILED = "DELETE_FAILED"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
    PROVIDER_NOT_CONFIGURED = "PROVIDER_NOT_CONFIGURED"
    PROVIDER_NOT_INSTALLED = "PROVIDER_NOT_INSTALLED"
