"""
E2E 테스트용 Playwright 설정.

- base_url = live_server → page.goto("/") 로 갤러리 접속
- 테스트마다 빈 갤러리 (live_provider 초기화)
- 실패 시 스크린샷 + HTML + 콘솔 로그 저장 (Cloudinary 인증 정보 마스킹)

실행:
    pytest -m browser tests/e2e
"""

import re
from collections.abc import Generator
from datetime import datetime
from pathlib import Path

import pytest

ARTIFACTS_DIR = Path(__file__).parent / "artifacts"

# =============================================================================
# 민감 정보 마스킹
# =============================================================================

# 페이지나 콘솔에 Cloudinary 인증 정보가 섞여 나올 수 있는 형태
SENSITIVE_PATTERNS = [
    (r'cloudinary://[^\s\'"<>]+', "cloudinary://[MASKED]"),
    (r'(api[_-]?(?:key|secret))["\']?\s*[:=]\s*["\']?[\w-]{6,}', r"\1: [MASKED]"),
    (r"([?&]signature=)[0-9a-f]{20,}", r"\1[MASKED]"),
]


def mask_sensitive_data(content: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        content = re.sub(pattern, replacement, content, flags=re.IGNORECASE)
    return content


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def base_url(live_server: str) -> str:
    """pytest-playwright 컨텍스트의 기준 URL을 live server로."""
    return live_server


@pytest.fixture(scope="session")
def browser_context_args(browser_context_args: dict) -> dict:
    return {**browser_context_args, "viewport": {"width": 1280, "height": 720}}


@pytest.fixture(autouse=True)
def gallery_host(live_provider):
    """테스트마다 빈 갤러리에서 시작."""
    live_provider.assets.clear()
    live_provider.store_errors.clear()
    live_provider.delete_errors.clear()
    live_provider.store_calls.clear()
    live_provider.delete_calls.clear()
    live_provider.list_failures = 0
    yield live_provider


@pytest.fixture
def console_logs(page) -> list[str]:
    """브라우저 콘솔 + 페이지 에러 수집 (실패 아티팩트용)."""
    logs: list[str] = []
    page.on("console", lambda msg: logs.append(f"[{msg.type}] {msg.text}"))
    page.on("pageerror", lambda err: logs.append(f"[PAGE_ERROR] {err}"))
    return logs


@pytest.fixture
def open_gallery(page, console_logs):
    """
    갤러리 열기 (gallery.js 초기화까지 대기).

    Usage:
        open_gallery()                 # "/"
        open_gallery("/?deleted=true")
    """
    page.set_default_timeout(10000)

    def _open(path: str = "/"):
        page.goto(path)
        page.wait_for_function("() => window.GallerySync !== undefined")
        return page

    return _open


# =============================================================================
# 실패 시 디버깅 정보 저장
# =============================================================================

def _save_failure_artifacts(page, console_logs: list[str], test_name: str) -> None:
    ARTIFACTS_DIR.mkdir(exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    # test_foo[chromium] → test_foo
    base = ARTIFACTS_DIR / f"{test_name.split('[')[0]}_{timestamp}"

    try:
        page.screenshot(path=f"{base}.png", full_page=True)
        Path(f"{base}.html").write_text(
            mask_sensitive_data(page.content()), encoding="utf-8"
        )
    except Exception as e:
        print(f"\nArtifact capture failed: {e}")

    if console_logs:
        Path(f"{base}.log").write_text(
            mask_sensitive_data("\n".join(console_logs)), encoding="utf-8"
        )
    print(f"\nArtifacts: {base}.*")


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call) -> Generator[None, None, None]:
    outcome = yield
    report = outcome.get_result()

    if report.when != "call" or not report.failed:
        return

    page = item.funcargs.get("page")
    if page is not None:
        _save_failure_artifacts(page, item.funcargs.get("console_logs") or [], item.name)
