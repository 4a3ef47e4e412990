"""
Pytest fixtures for the gallery tests.

구성:
- FakeImageHost: 메모리 기반 ImageHostProvider (실패 주입 + 호출 기록)
- PNG 바이트 팩토리
- create_app()으로 만든 앱 / TestClient
- 브라우저 테스트용 live server
"""

import asyncio
import base64
import threading
import time
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import uvicorn
import yaml

from src.app.providers.base import DeleteError, ImageHostProvider, ListError, StoreError
from src.core.thumbnails import derive_thumbnail_url
from src.domain.errors import ErrorCodes
from src.domain.schemas import AssetDescriptor

# 1x1 white pixel PNG (valid minimal PNG)
TINY_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)

CLOUD_BASE_URL = "https://res.cloudinary.com/demo/image/upload"


# =============================================================================
# Fake Provider
# =============================================================================

class FakeImageHost(ImageHostProvider):
    """
    메모리 기반 Image host.

    실패 주입:
    - store_errors: filename → provider 메시지 (해당 파일 store 실패)
    - list_failures: 남은 list 실패 횟수
    - delete_errors: asset_id → provider 메시지
    """

    def __init__(self, folder: str = "png-uploads", store_delay: float = 0.0):
        self.folder = folder
        self.store_delay = store_delay
        self.assets: list[AssetDescriptor] = []  # 최신 먼저

        self.store_errors: dict[str, str] = {}
        self.list_failures = 0
        self.delete_errors: dict[str, str] = {}

        self.store_calls: list[str | None] = []
        self.list_calls = 0
        self.delete_calls: list[str] = []

        self.in_flight = 0
        self.max_in_flight = 0
        self._counter = 0

    def seed(self, count: int) -> list[AssetDescriptor]:
        """이미 업로드된 이미지 count개 (최신 먼저)."""
        for _ in range(count):
            self.assets.insert(0, self._new_asset())
        return list(self.assets)

    def _new_asset(self) -> AssetDescriptor:
        self._counter += 1
        asset_id = f"{self.folder}/img{self._counter:03d}"
        url = f"{CLOUD_BASE_URL}/v1/{asset_id}.png"
        return AssetDescriptor(
            asset_id=asset_id,
            primary_url=url,
            thumbnail_url=derive_thumbnail_url(url),
        )

    async def store(self, data: bytes, filename: str | None = None) -> AssetDescriptor:
        self.store_calls.append(filename)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.store_delay)
        finally:
            self.in_flight -= 1

        if filename in self.store_errors:
            raise StoreError(ErrorCodes.STORE_FAILED, self.store_errors[filename])

        asset = self._new_asset()
        self.assets.insert(0, asset)
        return asset

    async def list(self, folder: str, max_results: int) -> list[AssetDescriptor]:
        self.list_calls += 1
        if self.list_failures > 0:
            self.list_failures -= 1
            raise ListError(ErrorCodes.LIST_FAILED, "Search API unavailable")
        return [a for a in self.assets if a.asset_id.startswith(f"{folder}/")][:max_results]

    async def delete(self, asset_id: str) -> None:
        self.delete_calls.append(asset_id)
        if asset_id in self.delete_errors:
            raise DeleteError(ErrorCodes.DELETE_FAILED, self.delete_errors[asset_id])
        for index, asset in enumerate(self.assets):
            if asset.asset_id == asset_id:
                del self.assets[index]
                return
        raise DeleteError(ErrorCodes.DELETE_FAILED, "not found")


# =============================================================================
# Path / Config Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def test_config() -> dict:
    """테스트용 설정 (재시도 지연 없음)."""
    return {
        "upload": {
            "field_name": "images",
            "media_type": "image/png",
            "max_file_size": 1024 * 1024,
            "max_files": 10,
            "rollback_on_failure": True,
        },
        "gallery": {
            "folder": "png-uploads",
            "max_results": 50,
        },
        "provider": {
            "timeout": 5,
            "list_retries": 1,
            "list_retry_delay": 0,
        },
        "logging": {"level": "WARNING"},
    }


# =============================================================================
# Provider / Data Fixtures
# =============================================================================

@pytest.fixture
def fake_provider() -> FakeImageHost:
    """빈 fake image host."""
    return FakeImageHost()


@pytest.fixture
def fake_provider_factory() -> Callable[..., FakeImageHost]:
    """옵션을 지정해서 fake image host 생성."""
    return FakeImageHost


@pytest.fixture
def make_png() -> Callable[[int | None], bytes]:
    """
    PNG 바이트 팩토리.

    size를 주면 정확히 그 크기가 되도록 뒤를 채운다.
    """
    def _make(size: int | None = None) -> bytes:
        if size is None or size <= len(TINY_PNG):
            return TINY_PNG
        return TINY_PNG + b"\x00" * (size - len(TINY_PNG))

    return _make


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app(test_config: dict, fake_provider: FakeImageHost):
    """fake provider가 주입된 앱."""
    from src.app.main import create_app

    return create_app(config=test_config, provider=fake_provider)


@pytest.fixture
def client(app):
    """TestClient."""
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Browser Test Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def live_provider() -> FakeImageHost:
    """live server가 사용하는 fake provider (세션 공유)."""
    return FakeImageHost()


@pytest.fixture(scope="session")
def live_server(live_provider: FakeImageHost) -> Generator[str, None, None]:
    """
    FastAPI 앱을 백그라운드에서 실행하는 fixture.

    Returns:
        서버 URL (예: "http://localhost:8765")
    """
    from src.app.main import create_app

    app = create_app(
        config={"provider": {"list_retry_delay": 0}, "logging": {"level": "WARNING"}},
        provider=live_provider,
    )

    # 테스트용 포트
    port = 8765
    host = "127.0.0.1"

    # 별도 스레드에서 서버 실행
    config = uvicorn.Config(app, host=host, port=port, log_level="error")
    server = uvicorn.Server(config)

    def run_server() -> None:
        asyncio.run(server.serve())

    thread = threading.Thread(target=run_server, daemon=True)
    thread.start()

    # 서버가 준비될 때까지 대기
    base_url = f"http://{host}:{port}"
    max_attempts = 30
    for _ in range(max_attempts):
        try:
            import httpx
            response = httpx.get(f"{base_url}/health", timeout=1.0)
            if response.status_code == 200:
                break
        except Exception:
            time.sleep(0.1)
    else:
        raise RuntimeError("Failed to start test server")

    yield base_url

    # 서버 종료
    server.should_exit = True
