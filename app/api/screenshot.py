"""Screenshot capture endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from app.config import CaptureConfig, settings
from app.models import CaptureErrorResponse, CaptureResponse
from app.security import caller_token
from app.services import (
    CaptureFailure,
    CaptureOrchestrator,
    EngineLocator,
    build_static_map_url,
    bundled_chromium_path,
)

router = APIRouter(tags=["screenshot"])

logger = logging.getLogger("screenshot.api")

_FAILURE_STATUS = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "engine_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def build_orchestrator() -> CaptureOrchestrator:
    """Discover the browser engine and freeze the current settings into an orchestrator."""

    locator = EngineLocator(
        override=settings.chromium_executable_path,
        env_vars=(),
        bundled_path=await bundled_chromium_path(),
    )
    return CaptureOrchestrator(CaptureConfig.from_settings(settings, locator.locate()))


async def get_orchestrator(request: Request) -> CaptureOrchestrator:
    """Return the orchestrator built at startup, creating one on first use otherwise."""

    orchestrator: CaptureOrchestrator | None = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        orchestrator = await build_orchestrator()
        request.app.state.orchestrator = orchestrator
    return orchestrator


@router.post(
    "/screenshot",
    response_model=CaptureResponse,
    responses={
        400: {"model": CaptureErrorResponse},
        401: {"model": CaptureErrorResponse},
        500: {"model": CaptureErrorResponse},
        503: {"model": CaptureErrorResponse},
    },
    summary="Capture the radar map for a flight",
)
async def create_screenshot(
    request: Request,
    token: Optional[str] = Depends(caller_token),
    orchestrator: CaptureOrchestrator = Depends(get_orchestrator),
):
    """Render the radar page for one flight and return it as a base64 PNG."""

    try:
        raw: Any = await request.json()
    except ValueError:
        raw = None

    outcome = await orchestrator.capture(raw, token)

    if isinstance(outcome, CaptureFailure):
        body = CaptureErrorResponse(
            error=outcome.message, code=outcome.code, elapsed=outcome.elapsed_ms
        )
        return JSONResponse(
            status_code=_FAILURE_STATUS.get(
                outcome.code, status.HTTP_500_INTERNAL_SERVER_ERROR
            ),
            content=body.model_dump(),
        )

    return CaptureResponse(
        image=outcome.image,
        elapsed=outcome.elapsed_ms,
        flight=outcome.flight_label,
        mode=outcome.mode,
        waypoint_count=outcome.waypoint_count,
        ready=outcome.ready,
        warnings=outcome.warnings,
    )


@router.get("/screenshot/static", summary="Redirect to a static Mapbox snapshot")
def static_screenshot(
    lat: Optional[str] = Query(default=None),
    lon: Optional[str] = Query(default=None),
    zoom: str = Query(default="8"),
    width: int = Query(default=600, ge=1, le=1280),
    height: int = Query(default=400, ge=1, le=1280),
    marker: str = Query(default="true"),
) -> RedirectResponse:
    """Send the caller straight to the Mapbox Static Images API."""

    if not lat or not lon:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="lat and lon are required"
        )
    if not settings.mapbox_token:
        logger.error("Static screenshot requested but MAPBOX_TOKEN is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="MAPBOX_TOKEN is not configured",
        )

    url = build_static_map_url(
        lat=lat,
        lon=lon,
        zoom=zoom,
        width=width,
        height=height,
        marker=marker.lower() == "true",
        access_token=settings.mapbox_token,
    )
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)
