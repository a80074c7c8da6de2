"""Capture use case: authorize, normalize, reduce, navigate, render."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from app.config import CaptureConfig
from app.domain import (
    CaptureError,
    CaptureMode,
    EngineUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from app.models.capture import CaptureRequest
from app.security import token_matches
from app.services.navigation import (
    build_navigation_url,
    effective_delay_ms,
    navigation_timeout_ms,
    redact_token,
    scrub_secret,
)
from app.services.normalizer import normalize_request
from app.services.render_session import BrowserLauncher, ChromiumLauncher, RenderSession
from app.services.waypoints import Waypoint, reduce_waypoints

logger = logging.getLogger("screenshot.orchestrator")


@dataclass
class CaptureResult:
    """A finished capture."""

    image: str
    elapsed_ms: int
    flight_label: str
    mode: CaptureMode
    waypoint_count: int
    ready: bool
    warnings: list[str] = field(default_factory=list)


@dataclass
class CaptureFailure:
    """A capture that did not produce an image, tagged with its error code."""

    code: str
    message: str
    elapsed_ms: int


class CaptureOrchestrator:
    """Run one capture per call and convert every failure into a CaptureFailure."""

    def __init__(
        self,
        config: CaptureConfig,
        *,
        launcher: BrowserLauncher | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._launcher = launcher or ChromiumLauncher(config.engine_path)
        self._sleep = sleep
        self._clock = clock
        self._slots = asyncio.Semaphore(config.max_concurrency)

    async def capture(
        self, raw: Any, caller_token: Optional[str] = None
    ) -> CaptureResult | CaptureFailure:
        started = self._clock()
        try:
            if not token_matches(caller_token, self.config.auth_token):
                raise UnauthorizedError("Unauthorized")

            request = normalize_request(raw)
            waypoints = self._reduce_trail(request)
            if self.config.engine_path is None:
                raise EngineUnavailableError("No browser executable available on this host")

            logger.info(
                "Generating %s screenshot for %s (%s waypoints)",
                request.mode.value,
                request.flight_label,
                len(waypoints),
            )
            async with self._slots:
                outcome = await self._render(request, waypoints)
        except CaptureError as exc:
            elapsed = self._elapsed_ms(started)
            message = self._scrub(exc)
            logger.warning("Capture failed (%s) after %sms: %s", exc.code, elapsed, message)
            return CaptureFailure(code=exc.code, message=message, elapsed_ms=elapsed)
        except Exception as exc:  # pragma: no cover - safeguard
            elapsed = self._elapsed_ms(started)
            message = self._scrub(exc)
            # no traceback: library errors quote the navigation URL
            logger.error(
                "Unexpected capture failure after %sms: %s: %s",
                elapsed,
                type(exc).__name__,
                message,
            )
            return CaptureFailure(code=CaptureError.code, message=message, elapsed_ms=elapsed)

        elapsed = self._elapsed_ms(started)
        logger.info("Screenshot for %s generated in %sms", request.flight_label, elapsed)
        return CaptureResult(
            image=outcome.image,
            elapsed_ms=elapsed,
            flight_label=request.flight_label,
            mode=request.mode,
            waypoint_count=len(waypoints),
            ready=outcome.ready,
            warnings=outcome.warnings,
        )

    def _reduce_trail(self, request: CaptureRequest) -> list[Waypoint]:
        if request.mode is not CaptureMode.EXIT:
            return []
        try:
            return reduce_waypoints(request.waypoints)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    async def _render(self, request: CaptureRequest, waypoints: list[Waypoint]):
        url = build_navigation_url(
            request,
            waypoints,
            base_url=self.config.radar_url,
            screenshot_token=self.config.screenshot_token,
        )
        logger.debug("Navigating to %s", redact_token(url, self.config.screenshot_token))

        session = RenderSession(
            self._launcher,
            selector_timeout_ms=self.config.selector_timeout_ms,
            map_selector=self.config.map_selector,
            ready_flag=self.config.ready_flag,
            secret=self.config.screenshot_token,
            sleep=self._sleep,
        )
        async with session:
            return await session.capture(
                url,
                width=request.width,
                height=request.height,
                delay_ms=effective_delay_ms(request),
                navigation_timeout_ms=navigation_timeout_ms(
                    request,
                    waypoints,
                    default_ms=self.config.navigation_timeout_ms,
                    extended_ms=self.config.extended_navigation_timeout_ms,
                ),
                select_flight=(
                    (request.flight_id, request.callsign) if self.config.select_marker else None
                ),
            )

    def _scrub(self, exc: BaseException) -> str:
        return scrub_secret(str(exc), self.config.screenshot_token)

    def _elapsed_ms(self, started: float) -> int:
        return int(round((self._clock() - started) * 1000))


__all__ = ["CaptureFailure", "CaptureOrchestrator", "CaptureResult"]
