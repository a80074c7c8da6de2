import pytest

from app.config import CaptureConfig
from tests.fakes import FakeLauncher, RecordingSleep


@pytest.fixture
def fake_launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def capture_config() -> CaptureConfig:
    return CaptureConfig(
        radar_url="http://radar.test",
        screenshot_token="shared-secret",
        auth_token="",
        engine_path="/usr/bin/chromium",
    )


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
