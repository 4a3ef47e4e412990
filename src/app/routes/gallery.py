"""
Gallery Routes: 업로드 / 목록 / 삭제.

- GET /, GET /api → 갤러리 화면 (?deleted=true 배너)
- POST /api/upload-ajax → 백그라운드 업로드 (JSON)
- POST /api/upload → 폼 제출 업로드 (HTML 전체 문서)
- POST /api/delete → 삭제 (JSON {publicId}, 폼 제출도 허용)

라우트는 상태가 없다. 모든 상태는 provider에 있다.
"""

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from src.app.providers.base import ImageHostProvider, ProviderError
from src.app.services.gallery import ListingService
from src.app.services.intake import collect_upload
from src.app.services.upload import UploadService
from src.app.services.validate import UploadValidator
from src.domain.errors import ErrorCodes, UploadRejectError
from src.domain.messages import (
    DELETED_BANNER,
    EMPTY_GALLERY,
    INVALID_PUBLIC_ID,
    MISSING_PUBLIC_ID,
    delete_failed_message,
    reject_message,
    upload_success_message,
)
from src.domain.schemas import UploadResult

logger = logging.getLogger(__name__)

# Jinja2 템플릿 설정
_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = Jinja2Templates(directory=_templates_dir)

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_validator(request: Request) -> UploadValidator:
    return request.app.state.validator


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_listing_service(request: Request) -> ListingService:
    return request.app.state.listing_service


def get_provider(request: Request) -> ImageHostProvider:
    return request.app.state.provider


# =============================================================================
# Page Rendering
# =============================================================================

async def render_gallery_page(
    request: Request,
    error: str | None = None,
    success: str | None = None,
    deleted: bool = False,
    status_code: int = 200,
) -> HTMLResponse:
    """
    갤러리 전체 문서 렌더링.

    목록은 매번 provider에서 새로 읽는다 (목록 실패 → 빈 갤러리).
    """
    listing = get_listing_service(request)
    validator = get_validator(request)
    gallery = await listing.load_view()

    client_config = {
        **validator.policy.to_client_rules(),
        "uploadUrl": "/api/upload-ajax",
        "deleteUrl": "/api/delete",
        "gallery": gallery.to_list(),
    }

    return jinja_templates.TemplateResponse(
        request,
        "index.html",
        {
            "gallery": gallery,
            "error": error,
            "success": success,
            "deleted_message": DELETED_BANNER if deleted else None,
            "empty_message": EMPTY_GALLERY,
            "field_name": validator.policy.field_name,
            "media_type": validator.policy.media_type,
            "max_files": validator.policy.max_files,
            "client_config": client_config,
        },
        status_code=status_code,
    )


# =============================================================================
# Page Routes (HTML)
# =============================================================================

@router.get("/", response_class=HTMLResponse)
@router.get("/api", response_class=HTMLResponse)
async def gallery_page(request: Request, deleted: str | None = None) -> HTMLResponse:
    """갤러리 화면. deleted=true면 삭제 완료 배너 1회."""
    return await render_gallery_page(request, deleted=deleted == "true")


# =============================================================================
# Upload
# =============================================================================

async def _run_upload(request: Request) -> UploadResult:
    """폼 수집 → 검증 → 동시 업로드. 검증 거절은 실패 결과로."""
    validator = get_validator(request)
    try:
        candidates = await collect_upload(request, validator)
    except UploadRejectError as e:
        logger.info(f"Upload rejected: {e}")
        return UploadResult.failure(
            e.code,
            reject_message(e.code, validator.policy.max_file_size),
        )

    return await get_upload_service(request).upload(candidates)


def _upload_status(result: UploadResult) -> int:
    if result.succeeded:
        return 200
    if result.error_code == ErrorCodes.STORE_FAILED:
        return 500
    return 400


@api_router.post("/upload-ajax")
async def upload_ajax(request: Request) -> JSONResponse:
    """
    백그라운드 업로드.

    Returns:
        200 {success: true, images: [{url, thumbUrl, publicId}]}
        400 {success: false, error} (검증 거절, provider 호출 없음)
        500 {success: false, error} (provider 저장 실패)
    """
    result = await _run_upload(request)
    return JSONResponse(content=result.to_dict(), status_code=_upload_status(result))


@api_router.post("/upload", response_class=HTMLResponse)
async def upload_form(request: Request) -> HTMLResponse:
    """폼 제출 업로드. 결과와 상관없이 200 + 전체 문서 (배너로 결과 표시)."""
    result = await _run_upload(request)
    if result.succeeded:
        return await render_gallery_page(
            request, success=upload_success_message(len(result.assets))
        )
    return await render_gallery_page(request, error=result.error_message)


# =============================================================================
# Delete
# =============================================================================

def _is_form_request(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.startswith(FORM_CONTENT_TYPES)


async def _read_public_id(request: Request, is_form: bool) -> str | None:
    """본문에서 publicId 추출. 형식이 틀리면 None."""
    payload: Any
    if is_form:
        form = await request.form()
        payload = dict(form)
    else:
        body = await request.body()
        try:
            payload = json.loads(body) if body else None
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = None

    if not isinstance(payload, dict):
        return None

    public_id = payload.get("publicId")
    if not isinstance(public_id, str) or not public_id.strip():
        return None
    return public_id.strip()


@api_router.post("/delete")
async def delete_image(request: Request) -> Response:
    """
    이미지 삭제.

    Returns:
        200 {success: true}
        400 {error: "Thiếu publicId"} (provider 호출 없음)
        400 {error: "publicId không hợp lệ"} (갤러리 폴더 밖)
        500 {error: "Xóa ảnh thất bại: ..."}
        폼 제출 성공 시 303 → /?deleted=true
    """
    is_form = _is_form_request(request)
    public_id = await _read_public_id(request, is_form)

    error: str | None = None
    status_code = 200

    if public_id is None:
        error, status_code = MISSING_PUBLIC_ID, 400
    elif not get_listing_service(request).owns(public_id):
        logger.warning(f"Delete refused for {public_id!r}: outside gallery folder")
        error, status_code = INVALID_PUBLIC_ID, 400
    else:
        try:
            await get_provider(request).delete(public_id)
        except ProviderError as e:
            logger.error(f"Delete failed for {public_id}: {e}")
            error, status_code = delete_failed_message(e.message), 500

    if is_form:
        if error is None:
            return RedirectResponse(url="/?deleted=true", status_code=303)
        return await render_gallery_page(request, error=error, status_code=status_code)

    if error is not None:
        return JSONResponse(content={"error": error}, status_code=status_code)
    return JSONResponse(content={"success": True})
