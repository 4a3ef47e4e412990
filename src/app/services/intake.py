"""
Intake Service: multipart 폼 → UploadCandidate 목록.

메모리 내 multipart 처리:
- 파일 파트만 대상 (일반 텍스트 필드는 무시)
- 파일을 선택하지 않은 빈 파트(filename="" + 0 bytes)는 건너뜀
- MIME 타입은 바이트를 읽기 전에 검사
- 크기는 한도 + 1 바이트까지만 읽어서 판정

모든 거절은 provider 호출 전에 UploadRejectError로.
"""

import logging

from fastapi import Request
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from src.app.services.validate import UploadValidator
from src.domain.errors import ErrorCodes, UploadRejectError
from src.domain.schemas import UploadCandidate

logger = logging.getLogger(__name__)


async def parse_form(request: Request) -> FormData:
    """
    요청 본문 파싱.

    깨진 multipart 본문은 일반 업로드 오류로 변환.
    """
    try:
        return await request.form()
    except (MultiPartException, StarletteHTTPException) as e:
        detail = getattr(e, "detail", None) or getattr(e, "message", None) or str(e)
        logger.warning(f"Multipart parsing failed: {detail}")
        raise UploadRejectError(ErrorCodes.UPLOAD_FAILED, detail=str(detail)) from e


def _is_empty_part(upload: UploadFile) -> bool:
    """파일 미선택 상태로 전송된 파트."""
    return not upload.filename and not upload.size


def file_parts(form: FormData) -> list[tuple[str, UploadFile]]:
    """폼에서 파일 파트만 (필드명, 파일) 순서대로."""
    parts: list[tuple[str, UploadFile]] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile) and not _is_empty_part(value):
            parts.append((key, value))
    return parts


async def read_candidate(
    upload: UploadFile,
    validator: UploadValidator,
) -> UploadCandidate:
    """
    파일 파트 1개 → UploadCandidate.

    Raises:
        UploadRejectError: UNSUPPORTED_MEDIA_TYPE | FILE_TOO_LARGE
    """
    filename = upload.filename or None
    validator.check_media_type(upload.content_type, filename)

    limit = validator.policy.max_file_size
    data = await upload.read(limit + 1)
    validator.check_size(len(data), filename)

    return UploadCandidate.from_bytes(
        data,
        media_type=upload.content_type or "",
        filename=filename,
    )


async def read_candidates(
    form: FormData,
    validator: UploadValidator,
) -> list[UploadCandidate]:
    """
    폼 전체 → UploadCandidate 목록 (제출 순서 유지).

    판정 순서: unexpected field → 개수 → (파일별) 타입 → 크기

    Raises:
        UploadRejectError: 첫 번째 위반
    """
    parts = file_parts(form)

    validator.check_fields(key for key, _ in parts)
    validator.check_count(len(parts))

    candidates: list[UploadCandidate] = []
    for _key, upload in parts:
        candidates.append(await read_candidate(upload, validator))
    return candidates


async def collect_upload(
    request: Request,
    validator: UploadValidator,
) -> list[UploadCandidate]:
    """요청 → 검증된 UploadCandidate 목록 (라우트 진입점)."""
    form = await parse_form(request)
    return await read_candidates(form, validator)
