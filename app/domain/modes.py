"""Capture presentation modes."""

from __future__ import annotations

from enum import Enum


class CaptureMode(str, Enum):
    """Presentation variants understood by the radar page."""

    ENTRY = "entry"
    EXIT = "exit"


DEFAULT_MODE: CaptureMode = CaptureMode.ENTRY

# Zoom and post-load delay applied when the caller leaves them unset.
DEFAULT_ZOOM: dict[CaptureMode, str] = {
    CaptureMode.ENTRY: "5",
    CaptureMode.EXIT: "6",
}
DEFAULT_DELAY_MS: dict[CaptureMode, int] = {
    CaptureMode.ENTRY: 8000,
    CaptureMode.EXIT: 10000,
}

# Exit pages also draw the trail, so they never settle for less than this.
EXIT_MIN_DELAY_MS = 10000

__all__ = [
    "CaptureMode",
    "DEFAULT_DELAY_MS",
    "DEFAULT_MODE",
    "DEFAULT_ZOOM",
    "EXIT_MIN_DELAY_MS",
]
