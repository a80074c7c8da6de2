"""Capture request and response models."""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from app.domain import DEFAULT_DELAY_MS, DEFAULT_MODE, DEFAULT_ZOOM, CaptureMode


def _query_number(value: Any) -> Optional[str]:
    """Render a numeric-looking value the way it should appear in a query string."""

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("must be a number")
    if isinstance(value, int):
        try:
            float(value)
        except OverflowError:
            raise ValueError("must be a finite number") from None
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        # 100.0 goes on the wire as "100"
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return None
        # float() accepts "1_000"; the page does not
        if "_" in cleaned:
            raise ValueError("must be a number")
        try:
            parsed = float(cleaned)
        except ValueError:
            raise ValueError("must be a number") from None
        if not math.isfinite(parsed):
            raise ValueError("must be a finite number")
        return cleaned
    raise ValueError("must be a number")


class CaptureRequest(BaseModel):
    """Validated input for a single capture."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    # Identity
    flight_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("flightId", "flight_id", "icao24"),
        description="ICAO24 hex identifier",
    )
    callsign: Optional[str] = Field(default=None, description="Flight callsign")

    # Position and kinematics, kept in their query-string form
    lat: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("lat", "latitude")
    )
    lon: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("lon", "lng", "longitude")
    )
    altitude: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("alt", "altitude"),
        description="Altitude in feet",
    )
    speed: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("speed", "groundSpeed"),
        description="Ground speed in knots",
    )
    heading: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("heading", "track"),
        description="Heading in degrees; 0 is a real value",
    )

    # Aircraft
    aircraft_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("aircraftType", "type", "typeCode")
    )
    registration: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("registration", "reg")
    )
    operator: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("operator", "airline")
    )

    # Route (entry mode)
    origin: Optional[str] = None
    origin_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("originName", "origin_name")
    )
    destination: Optional[str] = None
    destination_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("destinationName", "destination_name")
    )

    # Render options
    width: int = Field(default=1280, ge=1, le=4096)
    height: int = Field(default=720, ge=1, le=4096)
    zoom: Optional[str] = None
    delay: Optional[int] = Field(
        default=None, ge=0, le=120000, description="Post-load delay in milliseconds"
    )
    mode: CaptureMode = DEFAULT_MODE

    # Exit-mode statistics
    duration: Optional[str] = Field(default=None, description='Free text, e.g. "1h 25min"')
    detections: Optional[int] = Field(
        default=None, ge=0, validation_alias=AliasChoices("detections", "detectionCount")
    )
    avg_altitude: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("avgAltitude", "avg_altitude")
    )
    min_altitude: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("minAltitude", "min_altitude")
    )
    max_altitude: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("maxAltitude", "max_altitude")
    )
    avg_speed: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("avgSpeed", "avg_speed")
    )
    max_speed: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("maxSpeed", "max_speed")
    )
    zone_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("zoneName", "zone_name", "zone")
    )

    # Raw trail; reduced and normalized downstream
    waypoints: Optional[list[dict[str, Any]]] = Field(
        default=None, validation_alias=AliasChoices("waypoints", "trail")
    )

    @field_validator(
        "flight_id",
        "callsign",
        "aircraft_type",
        "registration",
        "operator",
        "origin",
        "origin_name",
        "destination",
        "destination_name",
        "duration",
        "zone_name",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator(
        "lat",
        "lon",
        "altitude",
        "speed",
        "zoom",
        "avg_altitude",
        "min_altitude",
        "max_altitude",
        "avg_speed",
        "max_speed",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value: Any) -> Optional[str]:
        return _query_number(value)

    @field_validator("heading", mode="before")
    @classmethod
    def _coerce_heading(cls, value: Any) -> Optional[str]:
        rendered = _query_number(value)
        if rendered is not None and not 0 <= float(rendered) < 360:
            raise ValueError("heading must be between 0 and 359 degrees")
        return rendered

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_MODE
        if isinstance(value, str):
            return value.strip().lower() or DEFAULT_MODE
        return value

    @model_validator(mode="after")
    def _require_identity_and_defaults(self) -> "CaptureRequest":
        if self.flight_id is None and self.callsign is None:
            raise ValueError("flightId or callsign is required")
        if self.zoom is None:
            self.zoom = DEFAULT_ZOOM[self.mode]
        if self.delay is None:
            self.delay = DEFAULT_DELAY_MS[self.mode]
        return self

    @property
    def flight_label(self) -> str:
        """Callsign when present, otherwise the hex identifier."""

        return self.callsign or self.flight_id or ""


class CaptureResponse(BaseModel):
    """Successful capture returned to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    image: str = Field(..., description="Base64-encoded PNG")
    content_type: str = Field(default="image/png", alias="contentType")
    elapsed: int = Field(..., description="Milliseconds from request entry to response")
    flight: str = Field(..., description="Callsign if present, else flightId")
    mode: CaptureMode
    waypoint_count: int = Field(default=0, alias="waypointCount")
    ready: bool = Field(..., description="Readiness flag reported by the radar page")
    warnings: list[str] = Field(default_factory=list)


class CaptureErrorResponse(BaseModel):
    """Uniform failure payload for the capture endpoint."""

    success: bool = False
    error: str
    code: str
    elapsed: int


__all__ = ["CaptureErrorResponse", "CaptureRequest", "CaptureResponse"]
