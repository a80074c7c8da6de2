"""Error taxonomy for the capture pipeline."""

from __future__ import annotations


class CaptureError(Exception):
    """Base class for every failure the capture pipeline reports."""

    code = "capture_error"


class ValidationError(CaptureError):
    """Raised when a capture request is malformed or incomplete."""

    code = "validation_error"


class UnauthorizedError(CaptureError):
    """Raised when the caller token does not match the service token."""

    code = "unauthorized"


class EngineUnavailableError(CaptureError):
    """Raised when no browser executable could be discovered on the host."""

    code = "engine_unavailable"


class RenderError(CaptureError):
    """Raised when the browser session fails to produce a capture."""

    code = "render_error"


__all__ = [
    "CaptureError",
    "EngineUnavailableError",
    "RenderError",
    "UnauthorizedError",
    "ValidationError",
]
