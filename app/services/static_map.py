"""Mapbox Static Images URL for the lightweight, browser-free snapshot."""

from __future__ import annotations

MAPBOX_STATIC_BASE = "https://api.mapbox.com/styles/v1/mapbox/dark-v11/static/"


def build_static_map_url(
    *,
    lat: str,
    lon: str,
    access_token: str,
    zoom: str = "8",
    width: int = 600,
    height: int = 400,
    marker: bool = True,
) -> str:
    url = MAPBOX_STATIC_BASE
    if marker:
        url += f"pin-s-airport+ff0000({lon},{lat})/"
    url += f"{lon},{lat},{zoom},0/{width}x{height}@2x?access_token={access_token}"
    return url


__all__ = ["MAPBOX_STATIC_BASE", "build_static_map_url"]
