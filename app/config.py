"""Configuration settings for the screenshot service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger("screenshot.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def _ssm_client():
    return boto3.client(
        "ssm",
        region_name=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1",
    )


@lru_cache(maxsize=None)
def get_ssm_secret(prefix: str, name: str) -> str:
    """Fetch a decrypted secret from AWS SSM Parameter Store.

    Values are cached in-memory so each parameter is read at most once per
    process. Any failure results in a runtime error for the caller to handle.
    """

    parameter = f"{prefix.rstrip('/')}/{name}"
    try:
        response = _ssm_client().get_parameter(Name=parameter, WithDecryption=True)
        value = response.get("Parameter", {}).get("Value")
    except (ClientError, BotoCoreError) as exc:  # pragma: no cover - AWS error passthrough
        logger.error("Failed to load %s from SSM: %s", parameter, exc)
        raise RuntimeError(f"Unable to load {parameter} from SSM") from exc

    if not value:
        logger.error("Received empty value for %s from SSM", parameter)
        raise RuntimeError(f"{parameter} not configured in SSM")

    return value


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    screenshot_env: str = os.getenv("SCREENSHOT_ENV", "local")
    log_level: str = os.getenv("SCREENSHOT_LOG_LEVEL", "INFO")

    # Remote map application
    radar_url: str = os.getenv("SAE_RADAR_URL", "http://localhost:5173")

    # Secrets; may be filled from SSM when a prefix is configured
    auth_token: str = os.getenv("AUTH_TOKEN", "")
    screenshot_token: str = os.getenv("SCREENSHOT_TOKEN", "")
    mapbox_token: str = os.getenv("MAPBOX_TOKEN", "")
    ssm_prefix: str | None = os.getenv("SCREENSHOT_SSM_PREFIX")

    # Browser engine
    chromium_executable_path: str | None = os.getenv("CHROMIUM_EXECUTABLE_PATH") or os.getenv(
        "PUPPETEER_EXECUTABLE_PATH"
    )
    max_concurrency: int = int(os.getenv("SCREENSHOT_MAX_CONCURRENCY", "2"))
    navigation_timeout_ms: int = int(os.getenv("SCREENSHOT_NAV_TIMEOUT_MS", "30000"))
    extended_navigation_timeout_ms: int = int(
        os.getenv("SCREENSHOT_EXTENDED_NAV_TIMEOUT_MS", "60000")
    )
    selector_timeout_ms: int = int(os.getenv("SCREENSHOT_SELECTOR_TIMEOUT_MS", "15000"))
    map_selector: str = os.getenv("SCREENSHOT_MAP_SELECTOR", ".mapboxgl-map")
    ready_flag: str = os.getenv("SCREENSHOT_READY_FLAG", "__SCREENSHOT_READY__")
    select_marker: bool = _get_bool("SCREENSHOT_SELECT_MARKER", default=False)

    cors_allow_origins: list[str] = field(
        default_factory=lambda: [
            origin.strip()
            for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
            if origin.strip()
        ]
    )


@dataclass(frozen=True)
class CaptureConfig:
    """Read-only snapshot of everything a capture needs, built once at startup."""

    radar_url: str
    screenshot_token: str
    auth_token: str
    engine_path: str | None
    max_concurrency: int = 2
    navigation_timeout_ms: int = 30000
    extended_navigation_timeout_ms: int = 60000
    selector_timeout_ms: int = 15000
    map_selector: str = ".mapboxgl-map"
    ready_flag: str = "__SCREENSHOT_READY__"
    select_marker: bool = False

    @classmethod
    def from_settings(cls, source: Settings, engine_path: str | None) -> "CaptureConfig":
        return cls(
            radar_url=source.radar_url,
            screenshot_token=source.screenshot_token,
            auth_token=source.auth_token,
            engine_path=engine_path,
            max_concurrency=max(1, source.max_concurrency),
            navigation_timeout_ms=source.navigation_timeout_ms,
            extended_navigation_timeout_ms=source.extended_navigation_timeout_ms,
            selector_timeout_ms=source.selector_timeout_ms,
            map_selector=source.map_selector,
            ready_flag=source.ready_flag,
            select_marker=source.select_marker,
        )


def _load_secrets(target: Settings) -> None:
    """Fill unset secrets from SSM when a parameter prefix is configured."""

    if not target.ssm_prefix:
        return

    for attribute, name in (
        ("auth_token", "auth_token"),
        ("screenshot_token", "screenshot_token"),
        ("mapbox_token", "mapbox_token"),
    ):
        if getattr(target, attribute):
            continue
        try:
            setattr(target, attribute, get_ssm_secret(target.ssm_prefix, name))
        except RuntimeError:
            logger.warning("%s not available from SSM at import time", name)


settings = Settings()
_load_secrets(settings)

if not settings.screenshot_token:
    logger.warning("SCREENSHOT_TOKEN is not configured; the radar page may refuse access")

__all__ = ["settings", "Settings", "CaptureConfig", "get_ssm_secret"]
