"""API routers for the screenshot service."""

from fastapi import APIRouter

from .health import router as health_router
from .screenshot import router as screenshot_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(screenshot_router)

__all__ = ["api_router"]
