"""Health check endpoint."""

from fastapi import APIRouter, Depends, Response, status

from app.api.screenshot import get_orchestrator
from app.config import settings
from app.services import CaptureOrchestrator

router = APIRouter()

SERVICE_NAME = "sae-screenshot-service"
SERVICE_VERSION = "1.0.0"


@router.get("/health", summary="Health check")
def health_check(
    response: Response,
    orchestrator: CaptureOrchestrator = Depends(get_orchestrator),
) -> dict[str, str | None]:
    """Report service status and the browser executable captures will use."""

    engine = orchestrator.config.engine_path
    if engine is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "ok" if engine else "unavailable",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "env": settings.screenshot_env,
        "engine": engine,
    }
