"""Test configuration and fixtures for zapscan."""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from zapscan.config import ScanSettings
from zapscan.modules.scan import ScanCache, ScanMode, ScanSession, normalize_target

BASE_URL = "http://zap.test"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
    """Keep tests away from the real ~/.zapscan and any ZAPSCAN_* variables."""
    for key in list(os.environ):
        if key.startswith("ZAPSCAN_"):
            monkeypatch.delenv(key, raising=False)
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)


@pytest.fixture
def settings() -> ScanSettings:
    """Settings pointing at the mocked relay."""
    return ScanSettings(proxy_url=BASE_URL)


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture
def no_sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def cache() -> ScanCache:
    return ScanCache()


@pytest.fixture
def quick_session() -> ScanSession:
    return ScanSession(target=normalize_target("https://example.com/app"), mode=ScanMode.QUICK)


@pytest.fixture
def full_session() -> ScanSession:
    return ScanSession(target=normalize_target("https://example.com/app"), mode=ScanMode.FULL)


@pytest.fixture
def alerts_payload() -> dict:
    """Two alerts as the engine reports them: one High, one Medium."""
    return {
        "alerts": [
            {
                "id": "11",
                "name": "SQL Injection",
                "risk": "High",
                "description": "SQL injection may be possible.",
                "confidence": "Medium",
                "url": "https://example.com/app?id=1",
            },
            {
                "id": "12",
                "name": "Content Security Policy Header Not Set",
                "risk": "Medium",
                "description": "CSP header is missing.",
                "confidence": "High",
                "url": "https://example.com/app",
            },
        ]
    }
