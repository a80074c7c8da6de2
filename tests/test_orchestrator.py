import asyncio
import base64
import dataclasses
import json
import logging
from urllib.parse import parse_qs, unquote, urlsplit

import pytest

from app.domain import CaptureMode
from app.services.orchestrator import CaptureFailure, CaptureOrchestrator, CaptureResult
from tests.fakes import PNG_BYTES, FakeLauncher, FakePage


def _orchestrator(config, launcher, sleep, **overrides):
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return CaptureOrchestrator(config, launcher=launcher, sleep=sleep)


@pytest.mark.anyio
async def test_entry_capture_succeeds(capture_config, fake_launcher, recording_sleep):
    orchestrator = _orchestrator(capture_config, fake_launcher, recording_sleep)

    result = await orchestrator.capture({"flightId": "AE5F12", "lat": 18.5, "lon": -69.9})

    assert isinstance(result, CaptureResult)
    assert base64.b64decode(result.image) == PNG_BYTES
    assert result.flight_label == "AE5F12"
    assert result.mode is CaptureMode.ENTRY
    assert result.waypoint_count == 0
    assert result.ready is True
    assert result.elapsed_ms >= 0
    assert recording_sleep.calls == [8.0]
    assert (fake_launcher.launches, fake_launcher.closes) == (1, 1)
    url = fake_launcher.page.goto_calls[0]["url"]
    assert url.startswith("http://radar.test?")
    assert "screenshot_token=shared-secret" in url
    assert fake_launcher.page.goto_calls[0]["timeout"] == 30000


@pytest.mark.anyio
async def test_exit_capture_reduces_trail_and_extends_waits(
    capture_config, fake_launcher, recording_sleep
):
    orchestrator = _orchestrator(capture_config, fake_launcher, recording_sleep)
    trail = [{"lat": 1 + i * 0.01, "lon": 2 + i * 0.01, "alt": 100} for i in range(250)]

    result = await orchestrator.capture(
        {"callsign": "BAT91", "mode": "exit", "waypoints": trail, "duration": "3min", "delay": 500}
    )

    assert isinstance(result, CaptureResult)
    assert result.flight_label == "BAT91"
    assert result.mode is CaptureMode.EXIT
    assert 0 < result.waypoint_count <= 101
    assert recording_sleep.calls == [10.0]
    goto = fake_launcher.page.goto_calls[0]
    assert goto["timeout"] == 60000
    query = parse_qs(urlsplit(goto["url"]).query)
    assert query["mode"] == ["exit"]
    assert query["duration"] == ["3min"]
    assert len(json.loads(unquote(query["waypoints"][0]))) == result.waypoint_count


@pytest.mark.anyio
async def test_entry_capture_ignores_trail(capture_config, fake_launcher, recording_sleep):
    orchestrator = _orchestrator(capture_config, fake_launcher, recording_sleep)

    result = await orchestrator.capture(
        {"flightId": "AE5F12", "waypoints": [{"lat": 1, "lon": 2}]}
    )

    assert result.waypoint_count == 0
    assert "waypoints" not in fake_launcher.page.goto_calls[0]["url"]


@pytest.mark.anyio
async def test_wrong_token_is_unauthorized_without_browser(
    capture_config, fake_launcher, recording_sleep
):
    orchestrator = _orchestrator(
        capture_config, fake_launcher, recording_sleep, auth_token="secret"
    )

    result = await orchestrator.capture({"flightId": "AE5F12"}, "wrong")

    assert isinstance(result, CaptureFailure)
    assert result.code == "unauthorized"
    assert result.elapsed_ms >= 0
    assert fake_launcher.launches == 0


@pytest.mark.anyio
async def test_missing_token_is_unauthorized(capture_config, fake_launcher, recording_sleep):
    orchestrator = _orchestrator(
        capture_config, fake_launcher, recording_sleep, auth_token="secret"
    )

    result = await orchestrator.capture({"flightId": "AE5F12"})

    assert isinstance(result, CaptureFailure)
    assert result.code == "unauthorized"


@pytest.mark.anyio
async def test_matching_token_is_accepted(capture_config, fake_launcher, recording_sleep):
    orchestrator = _orchestrator(
        capture_config, fake_launcher, recording_sleep, auth_token="secret"
    )

    result = await orchestrator.capture({"flightId": "AE5F12"}, "secret")

    assert isinstance(result, CaptureResult)


@pytest.mark.anyio
async def test_invalid_request_never_touches_browser(
    capture_config, fake_launcher, recording_sleep
):
    orchestrator = _orchestrator(capture_config, fake_launcher, recording_sleep)

    result = await orchestrator.capture({"lat": 18.5})

    assert isinstance(result, CaptureFailure)
    assert result.code == "validation_error"
    assert "flightId or callsign" in result.message
    assert fake_launcher.launches == 0


@pytest.mark.anyio
async def test_bad_waypoint_is_a_validation_error(
    capture_config, fake_launcher, recording_sleep
):
    orchestrator = _orchestrator(capture_config, fake_launcher, recording_sleep)

    result = await orchestrator.capture(
        {"callsign": "BAT91", "mode": "exit", "waypoints": [{"lat": "x", "lon": 2}]}
    )

    assert isinstance(result, CaptureFailure)
    assert result.code == "validation_error"
    assert fake_launcher.launches == 0


@pytest.mark.anyio
async def test_oversized_waypoint_is_a_validation_error(
    capture_config, fake_launcher, recording_sleep
):
    orchestrator = _orchestrator(capture_config, fake_launcher, recording_sleep)

    result = await orchestrator.capture(
        {"callsign": "BAT91", "mode": "exit", "waypoints": [{"lat": 10**400, "lon": 2}]}
    )

    assert isinstance(result, CaptureFailure)
    assert result.code == "validation_error"
    assert fake_launcher.launches == 0


@pytest.mark.anyio
async def test_missing_engine_fails_before_launch(
    capture_config, fake_launcher, recording_sleep
):
    orchestrator = _orchestrator(
        capture_config, fake_launcher, recording_sleep, engine_path=None
    )

    result = await orchestrator.capture({"flightId": "AE5F12"})

    assert isinstance(result, CaptureFailure)
    assert result.code == "engine_unavailable"
    assert fake_launcher.launches == 0


@pytest.mark.anyio
async def test_render_failure_releases_browser_once(capture_config, recording_sleep):
    launcher = FakeLauncher(FakePage(fail_on="goto"))
    orchestrator = _orchestrator(capture_config, launcher, recording_sleep)

    result = await orchestrator.capture({"flightId": "AE5F12"})

    assert isinstance(result, CaptureFailure)
    assert result.code == "render_error"
    assert "Timeout 30000ms exceeded" in result.message
    assert result.elapsed_ms >= 0
    assert (launcher.launches, launcher.closes) == (1, 1)


@pytest.mark.anyio
async def test_render_failure_never_exposes_screenshot_token(
    capture_config, recording_sleep, caplog
):
    caplog.set_level(logging.DEBUG)
    launcher = FakeLauncher(FakePage(fail_on="goto"))
    orchestrator = _orchestrator(capture_config, launcher, recording_sleep)

    result = await orchestrator.capture({"flightId": "AE5F12"})

    assert isinstance(result, CaptureFailure)
    assert result.code == "render_error"
    assert "navigating to" in result.message
    assert "shared-secret" not in result.message
    assert "screenshot_token=***" in result.message
    assert "shared-secret" not in caplog.text


@pytest.mark.anyio
async def test_secret_with_reserved_characters_is_masked(capture_config, recording_sleep, caplog):
    caplog.set_level(logging.DEBUG)
    launcher = FakeLauncher(FakePage(fail_on="goto"))
    orchestrator = _orchestrator(
        capture_config, launcher, recording_sleep, screenshot_token="s3cr3t/+&="
    )

    result = await orchestrator.capture({"flightId": "AE5F12"})

    assert isinstance(result, CaptureFailure)
    assert "s3cr3t" not in result.message
    assert "s3cr3t" not in caplog.text


@pytest.mark.anyio
async def test_marker_selection_follows_config(capture_config, fake_launcher, recording_sleep):
    orchestrator = _orchestrator(
        capture_config, fake_launcher, recording_sleep, select_marker=True
    )

    await orchestrator.capture({"flightId": "AE5F12"})

    assert fake_launcher.page.clicked == ['[data-flight-id="AE5F12"]']


@pytest.mark.anyio
async def test_concurrent_captures_are_bounded(capture_config, recording_sleep):
    launcher = FakeLauncher(FakePage(goto_delay=0.05))
    orchestrator = _orchestrator(capture_config, launcher, recording_sleep, max_concurrency=1)

    results = await asyncio.gather(
        orchestrator.capture({"flightId": "AE5F12"}),
        orchestrator.capture({"callsign": "BAT91"}),
    )

    assert all(isinstance(result, CaptureResult) for result in results)
    assert launcher.launches == 2
    assert launcher.max_active == 1
