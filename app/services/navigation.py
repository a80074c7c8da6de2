"""Build the radar page URL a capture navigates to."""

from __future__ import annotations

import json
from typing import Optional, Sequence
from urllib.parse import quote, quote_plus, urlencode

from app.domain import EXIT_MIN_DELAY_MS, CaptureMode
from app.models.capture import CaptureRequest
from app.services.waypoints import Waypoint

TOKEN_PARAM = "screenshot_token"

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _set(params: dict[str, str], key: str, value: Optional[object]) -> None:
    if value is not None:
        params[key] = str(value)


def encode_waypoints(waypoints: Sequence[Waypoint]) -> str:
    """Serialize a trail as compact JSON and percent-encode it."""

    payload = json.dumps([point.as_dict() for point in waypoints], separators=(",", ":"))
    return quote(payload, safe=_URI_COMPONENT_SAFE)


def effective_delay_ms(request: CaptureRequest) -> int:
    """Post-load settle time; exit pages never wait less than EXIT_MIN_DELAY_MS."""

    requested = request.delay or 0
    if request.mode is CaptureMode.EXIT:
        return max(requested, EXIT_MIN_DELAY_MS)
    return requested


def navigation_timeout_ms(
    request: CaptureRequest,
    waypoints: Sequence[Waypoint],
    *,
    default_ms: int,
    extended_ms: int,
) -> int:
    """Pick the navigation ceiling; trail and statistics pages load more slowly."""

    if request.mode is CaptureMode.EXIT or waypoints:
        return max(default_ms, extended_ms)
    return default_ms


def build_navigation_url(
    request: CaptureRequest,
    waypoints: Sequence[Waypoint],
    *,
    base_url: str,
    screenshot_token: str,
) -> str:
    """Return the fully-qualified radar URL for a capture.

    Optional fields are only emitted when present, so the page never sees
    empty parameters. Route fields are entry-only; statistics and the trail
    are exit-only.
    """

    params: dict[str, str] = {}

    _set(params, "flight", request.flight_id)
    _set(params, "callsign", request.callsign)
    _set(params, "lat", request.lat)
    _set(params, "lon", request.lon)
    _set(params, "alt", request.altitude)
    _set(params, "speed", request.speed)
    _set(params, "heading", request.heading)
    _set(params, "type", request.aircraft_type)
    _set(params, "registration", request.registration)
    _set(params, "operator", request.operator)

    if request.mode is CaptureMode.ENTRY:
        _set(params, "origin", request.origin)
        _set(params, "originName", request.origin_name)
        _set(params, "destination", request.destination)
        _set(params, "destinationName", request.destination_name)

    params["mode"] = request.mode.value
    _set(params, "zoom", request.zoom)

    if request.mode is CaptureMode.EXIT:
        _set(params, "duration", request.duration)
        _set(params, "detections", request.detections)
        _set(params, "avgAlt", request.avg_altitude)
        _set(params, "minAlt", request.min_altitude)
        _set(params, "maxAlt", request.max_altitude)
        _set(params, "avgSpeed", request.avg_speed)
        _set(params, "maxSpeed", request.max_speed)
        _set(params, "zone", request.zone_name)
        if waypoints:
            params["waypoints"] = encode_waypoints(waypoints)

    params["screenshot"] = "true"
    params[TOKEN_PARAM] = screenshot_token

    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode(params)}"


def scrub_secret(text: str, secret: str) -> str:
    """Mask a secret in free text, in raw and percent-encoded form."""

    if not secret:
        return text
    for form in sorted({quote_plus(secret), quote(secret, safe=""), secret}, key=len, reverse=True):
        text = text.replace(form, "***")
    return text


def redact_token(url: str, screenshot_token: str) -> str:
    """Hide the shared secret before a URL is logged."""

    if not screenshot_token:
        return url
    encoded = urlencode({TOKEN_PARAM: screenshot_token})
    return url.replace(encoded, f"{TOKEN_PARAM}=***")


__all__ = [
    "build_navigation_url",
    "effective_delay_ms",
    "encode_waypoints",
    "navigation_timeout_ms",
    "redact_token",
    "scrub_secret",
]
