"""Discover a Chromium-compatible executable on the host."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import shutil
from typing import Callable, Mapping, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

logger = logging.getLogger("screenshot.engine_locator")

DEFAULT_ENV_VARS = ("CHROMIUM_EXECUTABLE_PATH", "PUPPETEER_EXECUTABLE_PATH")

DEFAULT_CANDIDATES = (
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/usr/bin/google-chrome-stable",
    "/usr/bin/google-chrome",
    "/snap/bin/chromium",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
)

DEFAULT_COMMANDS = ("chromium", "chromium-browser", "google-chrome-stable", "google-chrome")


class EngineLocator:
    """Return the first usable browser executable, or None.

    Lookup order: an explicit override, the environment variables, the fixed
    candidate paths, a PATH search for the command names, then the Chromium
    build Playwright downloaded with `playwright install chromium`.
    """

    def __init__(
        self,
        *,
        override: str | None = None,
        env_vars: Sequence[str] = DEFAULT_ENV_VARS,
        candidates: Sequence[str] = DEFAULT_CANDIDATES,
        commands: Sequence[str] = DEFAULT_COMMANDS,
        environ: Mapping[str, str] | None = None,
        which: Callable[[str], str | None] = shutil.which,
        bundled_path: str | None = None,
    ) -> None:
        self.override = override
        self.env_vars = tuple(env_vars)
        self.candidates = tuple(candidates)
        self.commands = tuple(commands)
        self._environ = environ if environ is not None else os.environ
        self._which = which
        self.bundled_path = bundled_path

    def locate(self) -> str | None:
        for source, path in self._configured_paths():
            if _is_executable(path):
                logger.info("Using browser executable %s (from %s)", path, source)
                return path
            logger.warning("Configured browser path %s from %s does not exist", path, source)

        for path in self.candidates:
            if _is_executable(path):
                logger.info("Using browser executable %s", path)
                return path

        for command in self.commands:
            found = self._which(command)
            if found:
                logger.info("Using browser executable %s (found on PATH)", found)
                return found

        if self.bundled_path and _is_executable(self.bundled_path):
            logger.info("Using Playwright bundled browser %s", self.bundled_path)
            return self.bundled_path

        logger.error("No Chromium-compatible browser executable found")
        return None

    def _configured_paths(self) -> list[tuple[str, str]]:
        paths: list[tuple[str, str]] = []
        if self.override:
            paths.append(("override", self.override))
        for name in self.env_vars:
            value = self._environ.get(name)
            if value:
                paths.append((name, value))
        return paths


async def bundled_chromium_path() -> str | None:
    """Ask Playwright where its own Chromium build lives; None without a driver."""

    try:
        playwright = await async_playwright().start()
    except (PlaywrightError, OSError) as exc:
        logger.warning("Playwright driver unavailable: %s", exc)
        return None
    try:
        return playwright.chromium.executable_path
    finally:
        await playwright.stop()


def _is_executable(path: str) -> bool:
    candidate = Path(path)
    return candidate.is_file() and os.access(candidate, os.X_OK)


__all__ = ["DEFAULT_CANDIDATES", "EngineLocator", "bundled_chromium_path"]
