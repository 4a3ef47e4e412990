"""
Logging: 로거 설정 + 업로드 로그 컨텍스트.

규칙:
- 모듈 로거: logging.getLogger(__name__)
- 이미지 바이트는 절대 로그에 남기지 않음 (파일명/크기/타입만)
- 레벨은 default.yaml logging.level (기본 INFO)
"""

import logging
from collections.abc import Sequence
from typing import Any

from src.domain.schemas import UploadCandidate, UploadResult

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# 외부 라이브러리 로거 (요청마다 찍혀서 소음이 큼)
NOISY_LOGGERS = ("urllib3", "httpx", "multipart")


def configure_logging(config: dict) -> None:
    """
    루트 로거 설정.

    Args:
        config: 전체 설정 (logging.level 사용)
    """
    logging_config = config.get("logging", {}) or {}
    level_name = str(logging_config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("src").setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def upload_log_context(
    candidates: Sequence[UploadCandidate],
    result: UploadResult | None = None,
) -> dict[str, Any]:
    """
    업로드 요청 로그 컨텍스트.

    Args:
        candidates: 요청 파일들
        result: 업로드 결과 (있으면 성공 여부/에러 코드 포함)

    Returns:
        로그용 dict (바이트 제외)
    """
    context: dict[str, Any] = {
        "file_count": len(candidates),
        "total_bytes": sum(c.size for c in candidates),
        "media_types": sorted({c.media_type for c in candidates}),
    }

    if result is not None:
        context["succeeded"] = result.succeeded
        context["stored"] = len(result.assets)
        if not result.succeeded:
            context["error_code"] = result.error_code

    return context
