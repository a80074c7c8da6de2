"""Trail normalization and downsampling."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
import math
from typing import Any, Iterable, Mapping

logger = logging.getLogger("screenshot.waypoints")

MAX_WAYPOINTS = 100

_LAT_KEYS = ("lat", "latitude")
_LON_KEYS = ("lon", "lng", "longitude")
_ALT_KEYS = ("alt", "altitude")


@dataclass(frozen=True)
class Waypoint:
    """One trail sample: decimal degrees and altitude in feet."""

    lat: float
    lon: float
    alt: int = 0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _first_present(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _parse_altitude(raw: Any) -> int:
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return 0


def _parse_coordinate(raw: Any, name: str) -> float:
    if raw is None or isinstance(raw, bool):
        raise ValueError(f"waypoint {name} is missing")
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"waypoint {name} is not numeric: {raw!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"waypoint {name} is not finite: {raw!r}")
    return value


def normalize_waypoint(record: Mapping[str, Any]) -> Waypoint:
    """Build a Waypoint from a record using any of the accepted field aliases.

    Latitude and longitude must be numeric-like; altitude falls back to 0 when
    it is missing or cannot be parsed.
    """

    if not isinstance(record, Mapping):
        raise ValueError(f"waypoint must be an object, got {type(record).__name__}")

    return Waypoint(
        lat=_parse_coordinate(_first_present(record, _LAT_KEYS), "latitude"),
        lon=_parse_coordinate(_first_present(record, _LON_KEYS), "longitude"),
        alt=_parse_altitude(_first_present(record, _ALT_KEYS)),
    )


def reduce_waypoints(
    records: Iterable[Mapping[str, Any]] | None, limit: int = MAX_WAYPOINTS
) -> list[Waypoint]:
    """Normalize a trail and stride it down to roughly ``limit`` points.

    Trails at or under the limit come back unchanged. Longer trails keep every
    ``ceil(n / limit)``-th point and always end with the original last point,
    so the output never exceeds ``limit + 1`` entries.
    """

    if not records:
        return []

    normalized = [normalize_waypoint(record) for record in records]
    count = len(normalized)
    if count <= limit:
        return normalized

    step = math.ceil(count / limit)
    indices = list(range(0, count, step))
    if indices[-1] != count - 1:
        indices.append(count - 1)

    reduced = [normalized[index] for index in indices]
    logger.debug("Reduced trail from %s to %s waypoints (step=%s)", count, len(reduced), step)
    return reduced


__all__ = ["MAX_WAYPOINTS", "Waypoint", "normalize_waypoint", "reduce_waypoints"]
