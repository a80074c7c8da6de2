from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api import api_router
from app.api.screenshot import build_orchestrator
from app.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("screenshot")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Discover the browser engine and build the orchestrator once at startup."""

    orchestrator = await build_orchestrator()
    app.state.orchestrator = orchestrator
    config = orchestrator.config

    logger.info("SAE-RADAR URL: %s", config.radar_url)
    logger.info("Auth: %s", "enabled" if config.auth_token else "disabled")
    if config.engine_path is None:
        logger.error("No browser engine found; captures will fail until one is installed")

    yield


app = FastAPI(title="SAE Screenshot Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)
