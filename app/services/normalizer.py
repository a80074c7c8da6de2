"""Turn an untyped request body into a validated CaptureRequest."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from app.domain import ValidationError
from app.models.capture import CaptureRequest

logger = logging.getLogger("screenshot.normalizer")


def _describe(exc: PydanticValidationError) -> str:
    messages: list[str] = []
    for error in exc.errors():
        ctx_error = (error.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error is not None else error.get("msg", "invalid value")
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "invalid capture request"


def normalize_request(raw: Any) -> CaptureRequest:
    """Validate and coerce a raw body, raising ValidationError when it is unusable."""

    if not isinstance(raw, Mapping):
        raise ValidationError("Request body must be a JSON object")

    try:
        request = CaptureRequest.model_validate(dict(raw))
    except PydanticValidationError as exc:
        message = _describe(exc)
        logger.info("Rejected capture request: %s", message)
        raise ValidationError(message) from exc

    return request


__all__ = ["normalize_request"]
