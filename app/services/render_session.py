"""Headless browser session that renders the radar page and captures it."""

from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from app.domain import RenderError
from app.services.navigation import scrub_secret

logger = logging.getLogger("screenshot.render")

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
]

MARKER_CLICK_TIMEOUT_MS = 5000
MARKER_PANEL_DELAY_MS = 1000

# Warnings recorded on degraded, non-fatal steps
WARN_MAP_NOT_FOUND = "map_selector_timeout"
WARN_MARKER_NOT_SELECTED = "marker_not_selected"
WARN_READINESS_UNAVAILABLE = "readiness_unavailable"


class SessionState(str, Enum):
    IDLE = "idle"
    ACQUIRED = "acquired"
    OPENED = "opened"
    NAVIGATED = "navigated"
    SETTLED = "settled"
    CAPTURED = "captured"
    FAILED = "failed"
    RELEASED = "released"


class BrowserHandle(Protocol):
    """The slice of a launched browser the session relies on."""

    async def new_page(self) -> Any: ...

    async def close(self) -> None: ...


class BrowserLauncher(Protocol):
    """Starts one isolated browser process per call."""

    async def launch(self) -> BrowserHandle: ...


class ChromiumHandle:
    """Launched Chromium plus the Playwright driver that owns it."""

    def __init__(self, playwright: Playwright, browser: Browser) -> None:
        self._playwright = playwright
        self._browser = browser

    async def new_page(self) -> Any:
        return await self._browser.new_page()

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


class ChromiumLauncher:
    """Launch headless Chromium through Playwright."""

    def __init__(
        self,
        executable_path: str | None,
        *,
        headless: bool = True,
        args: list[str] | None = None,
    ) -> None:
        self.executable_path = executable_path
        self.headless = headless
        self.args = list(args) if args is not None else list(CHROMIUM_ARGS)

    async def launch(self) -> ChromiumHandle:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=self.headless,
                executable_path=self.executable_path,
                args=self.args,
            )
        except BaseException:
            await playwright.stop()
            raise
        logger.debug("Launched Chromium from %s", self.executable_path or "bundled build")
        return ChromiumHandle(playwright, browser)


@dataclass
class RenderOutcome:
    """Result of a successful render: the PNG plus advisory signals."""

    image: str
    ready: bool
    warnings: list[str] = field(default_factory=list)


def _marker_selector(flight_id: Optional[str], callsign: Optional[str]) -> Optional[str]:
    parts = []
    if flight_id:
        parts.append(f'[data-flight-id="{flight_id}"]')
    if callsign:
        parts.append(f'[data-callsign="{callsign}"]')
    return ", ".join(parts) or None


class RenderSession:
    """Own one browser process for exactly one capture.

    Use as an async context manager: the browser is acquired on entry and
    released exactly once on exit, whichever step failed.
    """

    def __init__(
        self,
        launcher: BrowserLauncher,
        *,
        selector_timeout_ms: int = 15000,
        map_selector: str = ".mapboxgl-map",
        ready_flag: str = "__SCREENSHOT_READY__",
        secret: str = "",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._launcher = launcher
        self._selector_timeout_ms = selector_timeout_ms
        self._map_selector = map_selector
        self._ready_flag = ready_flag
        self._secret = secret
        self._sleep = sleep
        self._browser: BrowserHandle | None = None
        self.state = SessionState.IDLE

    async def __aenter__(self) -> "RenderSession":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.release()
        return False

    async def acquire(self) -> None:
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"Render session cannot be acquired from state {self.state.value}")
        try:
            self._browser = await self._launcher.launch()
        except (PlaywrightError, OSError) as exc:
            self.state = SessionState.FAILED
            message = self._scrub(exc)
            logger.error("Browser launch failed: %s", message)
            raise RenderError(f"Failed to launch browser: {message}") from exc
        self._transition(SessionState.ACQUIRED)

    async def release(self) -> None:
        if self._browser is None or self.state is SessionState.RELEASED:
            return
        browser, self._browser = self._browser, None
        self._transition(SessionState.RELEASED)
        try:
            await browser.close()
        except (PlaywrightError, OSError) as exc:
            logger.warning("Browser did not close cleanly: %s", self._scrub(exc))

    async def capture(
        self,
        url: str,
        *,
        width: int,
        height: int,
        delay_ms: int,
        navigation_timeout_ms: int,
        select_flight: tuple[Optional[str], Optional[str]] | None = None,
    ) -> RenderOutcome:
        """Drive the page through open, navigate, settle and capture."""

        if self._browser is None or self.state is not SessionState.ACQUIRED:
            raise RuntimeError("Render session must be acquired before capturing")

        warnings: list[str] = []
        try:
            page = await self._step("open", self._open(width, height))
            self._transition(SessionState.OPENED)

            await self._step(
                "navigate",
                page.goto(url, wait_until="networkidle", timeout=navigation_timeout_ms),
            )
            self._transition(SessionState.NAVIGATED)

            if not await self._wait_for_surface(page):
                warnings.append(WARN_MAP_NOT_FOUND)

            await self._sleep(delay_ms / 1000)
            self._transition(SessionState.SETTLED)

            if select_flight is not None and not await self._select_marker(page, *select_flight):
                warnings.append(WARN_MARKER_NOT_SELECTED)

            ready = await self._check_readiness(page, warnings)

            png = await self._step("capture", page.screenshot(type="png", full_page=False))
            self._transition(SessionState.CAPTURED)
        except Exception:
            self.state = SessionState.FAILED
            raise

        return RenderOutcome(
            image=base64.b64encode(png).decode("ascii"),
            ready=ready,
            warnings=warnings,
        )

    async def _open(self, width: int, height: int) -> Any:
        page = await self._browser.new_page()
        await page.set_viewport_size({"width": width, "height": height})
        return page

    async def _step(self, name: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await awaitable
        except PlaywrightError as exc:
            message = self._scrub(exc)
            logger.error("Render step %s failed: %s", name, message)
            raise RenderError(f"{name.capitalize()} failed: {message}") from exc

    async def _wait_for_surface(self, page: Any) -> bool:
        try:
            await page.wait_for_selector(self._map_selector, timeout=self._selector_timeout_ms)
        except PlaywrightError as exc:
            logger.warning(
                "Map selector %s not found, continuing: %s", self._map_selector, self._scrub(exc)
            )
            return False
        return True

    async def _select_marker(
        self, page: Any, flight_id: Optional[str], callsign: Optional[str]
    ) -> bool:
        selector = _marker_selector(flight_id, callsign)
        if selector is None:
            return False
        try:
            await page.click(selector, timeout=MARKER_CLICK_TIMEOUT_MS)
        except PlaywrightError as exc:
            logger.warning("Could not click flight marker %s: %s", selector, self._scrub(exc))
            return False
        await self._sleep(MARKER_PANEL_DELAY_MS / 1000)
        return True

    async def _check_readiness(self, page: Any, warnings: list[str]) -> bool:
        try:
            flag = await page.evaluate("(flag) => window[flag] === true", self._ready_flag)
        except PlaywrightError as exc:
            logger.warning("Readiness flag could not be read: %s", self._scrub(exc))
            warnings.append(WARN_READINESS_UNAVAILABLE)
            return False
        if not flag:
            logger.warning("Radar page did not report readiness; capturing anyway")
        return bool(flag)

    def _scrub(self, exc: BaseException) -> str:
        return scrub_secret(str(exc), self._secret)

    def _transition(self, state: SessionState) -> None:
        logger.debug("Render session %s -> %s", self.state.value, state.value)
        self.state = state


__all__ = [
    "BrowserHandle",
    "BrowserLauncher",
    "CHROMIUM_ARGS",
    "ChromiumHandle",
    "ChromiumLauncher",
    "RenderOutcome",
    "RenderSession",
    "SessionState",
]
