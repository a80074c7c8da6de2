"""Service-layer helpers for the screenshot service."""

from .engine_locator import EngineLocator, bundled_chromium_path
from .navigation import build_navigation_url, effective_delay_ms, navigation_timeout_ms
from .normalizer import normalize_request
from .orchestrator import CaptureFailure, CaptureOrchestrator, CaptureResult
from .render_session import ChromiumLauncher, RenderOutcome, RenderSession
from .static_map import build_static_map_url
from .waypoints import MAX_WAYPOINTS, Waypoint, normalize_waypoint, reduce_waypoints

__all__ = [
    "CaptureFailure",
    "CaptureOrchestrator",
    "CaptureResult",
    "ChromiumLauncher",
    "EngineLocator",
    "MAX_WAYPOINTS",
    "RenderOutcome",
    "RenderSession",
    "Waypoint",
    "build_navigation_url",
    "bundled_chromium_path",
    "build_static_map_url",
    "effective_delay_ms",
    "navigation_timeout_ms",
    "normalize_request",
    "normalize_waypoint",
    "reduce_waypoints",
]
