from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


_UPSTREAM_URL_ENV = "UPSTREAM_BASE_URL"
_UPSTREAM_TOKEN_ENV = "UPSTREAM_AUTH_TOKEN"
_DEVICE_ID_ENV = "DEFAULT_DEVICE_ID"
_TIMEOUT_ENV = "UPSTREAM_TIMEOUT_SECONDS"
_MAX_ATTEMPTS_ENV = "UPSTREAM_MAX_ATTEMPTS"
_READINGS_LIMIT_ENV = "READINGS_LIMIT"
_HISTORICAL_LIMIT_ENV = "HISTORICAL_LIMIT"
_TIMEZONE_ENV = "DASHBOARD_TIMEZONE"
_FORECAST_SEED_ENV = "FORECAST_SEED"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_UPSTREAM_URL = "https://iot.skd-ka.de/api/v1"
DEFAULT_DEVICE_ID = "c055eef5-b6dc-406e-ad5a-65dec60db90e"
DEFAULT_TIMEZONE = "Europe/Berlin"
MAX_UPSTREAM_ATTEMPTS = 3


@dataclass(frozen=True)
class Settings:
    upstream_base_url: str
    upstream_auth_token: Optional[str]
    default_device_id: str
    upstream_timeout: float
    upstream_max_attempts: int
    readings_limit: int
    historical_limit: int
    timezone_name: str
    forecast_seed: Optional[int]
    log_level: str

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)


def _env(name: str) -> Optional[str]:
    """Stripped value of ``name``; unset and blank both read as ``None``."""
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip() or None


def _read_str_env(name: str, default: str) -> str:
    return _env(name) or default


def _read_positive_int(name: str, default: int, maximum: Optional[int] = None) -> int:
    candidate = _env(name)
    if candidate is None:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    if parsed <= 0:
        return default
    return parsed if maximum is None else min(parsed, maximum)


def _read_positive_float(name: str, default: float) -> float:
    candidate = _env(name)
    if candidate is None:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_optional_int(name: str) -> Optional[int]:
    candidate = _env(name)
    if candidate is None:
        return None
    try:
        return int(candidate)
    except ValueError:
        return None


def _read_timezone(default: str) -> str:
    candidate = _read_str_env(_TIMEZONE_ENV, default)
    try:
        ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError):
        return default
    return candidate


@lru_cache
def get_settings() -> Settings:
    return Settings(
        upstream_base_url=_read_str_env(_UPSTREAM_URL_ENV, DEFAULT_UPSTREAM_URL).rstrip("/"),
        upstream_auth_token=_env(_UPSTREAM_TOKEN_ENV),
        default_device_id=_read_str_env(_DEVICE_ID_ENV, DEFAULT_DEVICE_ID),
        upstream_timeout=_read_positive_float(_TIMEOUT_ENV, 10.0),
        upstream_max_attempts=_read_positive_int(
            _MAX_ATTEMPTS_ENV, MAX_UPSTREAM_ATTEMPTS, maximum=MAX_UPSTREAM_ATTEMPTS
        ),
        readings_limit=_read_positive_int(_READINGS_LIMIT_ENV, 100),
        historical_limit=_read_positive_int(_HISTORICAL_LIMIT_ENV, 1000),
        timezone_name=_read_timezone(DEFAULT_TIMEZONE),
        forecast_seed=_read_optional_int(_FORECAST_SEED_ENV),
        log_level=(_env(_LOG_LEVEL_ENV) or "INFO").upper(),
    )
