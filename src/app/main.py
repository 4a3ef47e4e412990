"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uvicorn src.app.main:app --reload
- 프로덕션: uvicorn src.app.main:app

설정:
- default.yaml (APP_CONFIG_PATH로 경로 변경 가능)
- .env → Cloudinary 인증 정보 (CLOUDINARY_CLOUD_NAME / API_KEY / API_SECRET 또는 CLOUDINARY_URL)
"""

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from src.app.providers.base import ImageHostProvider
from src.app.providers.cloudinary import CloudinaryProvider
from src.app.routes import gallery
from src.app.services.gallery import ListingService
from src.app.services.upload import UploadService
from src.app.services.validate import UploadPolicy, UploadValidator
from src.core.logging import configure_logging
from src.core.thumbnails import ThumbnailSpec
from src.domain.constants import DEFAULT_PROVIDER_TIMEOUT, GALLERY_FOLDER
from src.domain.messages import GENERIC_UPLOAD_ERROR

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

# /api 아래지만 브라우저 폼이 직접 받는 경로 (HTML 응답)
HTML_FORM_PATHS = ("/api/upload",)

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        env_path = os.environ.get("APP_CONFIG_PATH")
        # 기본: 프로젝트 루트의 default.yaml
        config_path = Path(env_path) if env_path else PROJECT_ROOT / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] | None = yaml.safe_load(f)
        return data or {}


def wants_html(request: Request) -> bool:
    """
    에러 응답 형식 결정.

    페이지 경로, 폼 업로드 경로, 브라우저 폼 제출 (Accept가 text/html로 시작) → HTML.
    나머지 /api 요청 (fetch, XHR) → JSON.
    """
    path = request.url.path
    if not path.startswith("/api/") or path in HTML_FORM_PATHS:
        return True
    return request.headers.get("accept", "").startswith("text/html")


def build_provider(config: dict) -> CloudinaryProvider:
    """설정 → CloudinaryProvider (인증 정보는 환경변수)."""
    gallery_config = config.get("gallery", {}) or {}
    provider_config = config.get("provider", {}) or {}
    return CloudinaryProvider(
        folder=str(gallery_config.get("folder", GALLERY_FOLDER)),
        thumbnail=ThumbnailSpec.from_config(config),
        timeout=float(provider_config.get("timeout", DEFAULT_PROVIDER_TIMEOUT)),
    )


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    config: dict | None = None,
    provider: ImageHostProvider | None = None,
) -> FastAPI:
    """
    앱 생성.

    Args:
        config: 설정 dict (None이면 default.yaml)
        provider: Image host provider (None이면 Cloudinary, 테스트에서 주입)
    """
    load_dotenv()
    if config is None:
        config = load_config()
    configure_logging(config)

    if provider is None:
        provider = build_provider(config)

    validator = UploadValidator(UploadPolicy.from_config(config))

    app = FastAPI(
        title="PNG Gallery",
        description="PNG 업로드 → Cloudinary 저장 / 목록 / 삭제",
        version="0.1.0",
    )

    app.state.config = config
    app.state.provider = provider
    app.state.validator = validator
    app.state.upload_service = UploadService.from_config(config, provider, validator)
    app.state.listing_service = ListingService.from_config(config, provider)

    # -------------------------------------------------------------------------
    # Middleware / Exception handlers
    # -------------------------------------------------------------------------

    @app.middleware("http")
    async def request_log_middleware(request: Request, call_next):
        started = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        duration_ms = int((time.perf_counter() - started) * 1000)
        if request.url.path != "/health":
            logger.info(
                f"{request.method} {request.url.path} → {response.status_code} "
                f"({duration_ms}ms) rid={request_id}"
            )
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        if wants_html(request):
            return HTMLResponse(content=f"<p>{GENERIC_UPLOAD_ERROR}</p>", status_code=500)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": GENERIC_UPLOAD_ERROR},
        )

    # -------------------------------------------------------------------------
    # Static / Routes
    # -------------------------------------------------------------------------

    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    # 페이지 라우트 (HTML)
    app.include_router(gallery.router, tags=["Gallery"])
    # API 라우트
    app.include_router(gallery.api_router, prefix="/api", tags=["Gallery API"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    return app


# =============================================================================
# App Instance
# =============================================================================

app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
