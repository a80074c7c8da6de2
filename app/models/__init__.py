"""Pydantic models for the screenshot service."""

from .capture import CaptureErrorResponse, CaptureRequest, CaptureResponse

__all__ = [
    "CaptureErrorResponse",
    "CaptureRequest",
    "CaptureResponse",
]
