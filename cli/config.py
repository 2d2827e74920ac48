from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 30.0

_BASE_URL_ENV = "API_BASE_URL"
_DEVICE_ID_ENV = "CLI_DEVICE_ID"
_TIMEOUT_ENV = "CLI_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    device_id: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_timeout() -> float:
    raw = _env(_TIMEOUT_ENV)
    try:
        timeout = float(raw) if raw else DEFAULT_TIMEOUT
    except ValueError:
        return DEFAULT_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_TIMEOUT


def load_config(
    base_url: Optional[str] = None,
    device_id: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    """Merge command-line options over environment variables over defaults."""
    url = base_url or _env(_BASE_URL_ENV) or DEFAULT_BASE_URL
    return CLIConfig(
        base_url=url.rstrip("/"),
        device_id=device_id or _env(_DEVICE_ID_ENV),
        timeout=timeout if timeout is not None else _env_timeout(),
    )
