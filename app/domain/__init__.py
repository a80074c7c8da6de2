"""Domain types shared across the capture pipeline."""

from .errors import (
    CaptureError,
    EngineUnavailableError,
    RenderError,
    UnauthorizedError,
    ValidationError,
)
from .modes import (
    DEFAULT_DELAY_MS,
    DEFAULT_MODE,
    DEFAULT_ZOOM,
    EXIT_MIN_DELAY_MS,
    CaptureMode,
)

__all__ = [
    "CaptureError",
    "CaptureMode",
    "DEFAULT_DELAY_MS",
    "DEFAULT_MODE",
    "DEFAULT_ZOOM",
    "EXIT_MIN_DELAY_MS",
    "EngineUnavailableError",
    "RenderError",
    "UnauthorizedError",
    "ValidationError",
]
