"""Client for the upstream IoT readings API."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx

from models.records import Reading
from settings import MAX_UPSTREAM_ATTEMPTS, Settings

logger = logging.getLogger(__name__)

_CORE_FIELDS = ("temperature", "humidity", "pressure", "rain")
_OPTIONAL_FIELDS = ("battery", "irradiation", "irr_max", "t_min", "t_max", "gps_lat", "gps_lon")
_RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})


class ReadingSourceError(Exception):
    """Raised when the upstream API cannot supply usable readings."""


def parse_timestamp(value: str) -> datetime:
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def _optional_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (bool, dict, list)):
        return None
    return str(value)


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_item(item: Dict[str, Any]) -> Reading:
    """Build a :class:`Reading` from one upstream record, or raise ``ValueError``."""
    if not isinstance(item, dict):
        raise ValueError("record is not an object")
    data = item.get("data")
    if not isinstance(data, dict):
        raise ValueError("missing data")
    measured_at = item.get("measured_at")
    if not isinstance(measured_at, str):
        raise ValueError("missing measured_at")

    core: Dict[str, float] = {}
    for name in _CORE_FIELDS:
        value = data.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"invalid {name}")
        core[name] = float(value)

    optional = {name: _optional_float(data.get(name)) for name in _OPTIONAL_FIELDS}
    return Reading(
        measured_at=parse_timestamp(measured_at),
        device_id=_optional_str(item.get("device_id")),
        device_name=_optional_str(data.get("device_name")),
        reading_id=_optional_str(item.get("id")),
        **core,
        **optional,
    )


def parse_payload(payload: Any) -> Tuple[List[Reading], int]:
    """Return readings newest first plus the number of records that were skipped."""
    if not isinstance(payload, dict) or not isinstance(payload.get("body"), list):
        raise ReadingSourceError("Upstream payload has no 'body' list.")

    readings: List[Reading] = []
    skipped = 0
    for item in payload["body"]:
        try:
            readings.append(parse_item(item))
        except ValueError as exc:
            skipped += 1
            logger.debug("Skipping upstream record", extra={"reason": str(exc)})

    readings.sort(key=lambda reading: reading.measured_at, reverse=True)
    return readings, skipped


def to_upstream_item(reading: Reading) -> Dict[str, Any]:
    """Render a reading in the upstream record shape."""
    timestamp = reading.measured_at.isoformat()
    return {
        "id": reading.reading_id,
        "device_id": reading.device_id,
        "measured_at": timestamp,
        "inserted_at": timestamp,
        "data": {
            "temperature": reading.temperature,
            "humidity": reading.humidity,
            "pressure": reading.pressure,
            "rain": reading.rain,
            "battery": reading.battery,
            "irradiation": reading.irradiation,
            "irr_max": reading.irr_max,
            "t_min": reading.t_min,
            "t_max": reading.t_max,
            "gps_lat": reading.gps_lat,
            "gps_lon": reading.gps_lon,
            "device_name": reading.device_name,
        },
    }


class ReadingSource:
    """Fetches newest-first readings for a device with a bounded retry budget."""

    def __init__(
        self,
        base_url: str,
        auth_token: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = MAX_UPSTREAM_ATTEMPTS,
        backoff: float = 0.5,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.max_attempts = max(1, min(max_attempts, MAX_UPSTREAM_ATTEMPTS))
        self.backoff = backoff
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReadingSource":
        return cls(
            base_url=settings.upstream_base_url,
            auth_token=settings.upstream_auth_token,
            timeout=settings.upstream_timeout,
            max_attempts=settings.upstream_max_attempts,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_payload(self, device_id: str, limit: int) -> Dict[str, Any]:
        """Return the raw upstream JSON document."""
        url = f"{self.base_url}/devices/{device_id}/readings"
        params: Dict[str, Any] = {
            "limit": limit,
            "sort": "measured_at",
            "sort_direction": "desc",
        }
        if self.auth_token:
            params["auth"] = self.auth_token

        for attempt in range(1, self.max_attempts + 1):
            context = {"device_id": device_id, "limit": limit, "attempt": attempt}
            try:
                response = await self._client.get(url, params=params)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                if status_code not in _RETRYABLE_STATUS or attempt == self.max_attempts:
                    raise ReadingSourceError(
                        f"Upstream responded with status {status_code}."
                    ) from exc
                logger.warning(
                    "Upstream request failed, retrying",
                    extra={**context, "status_code": status_code},
                )
            except httpx.TransportError as exc:
                if attempt == self.max_attempts:
                    raise ReadingSourceError(f"Upstream unreachable: {exc}") from exc
                logger.warning(
                    "Upstream request failed, retrying",
                    extra={**context, "reason": type(exc).__name__},
                )
            except ValueError as exc:
                raise ReadingSourceError("Upstream returned invalid JSON.") from exc

            await asyncio.sleep(self.backoff * 2 ** (attempt - 1))

        raise ReadingSourceError("Upstream retry budget exhausted.")

    async def fetch_readings(self, device_id: str, limit: int) -> List[Reading]:
        payload = await self.fetch_payload(device_id, limit)
        readings, skipped = parse_payload(payload)
        if skipped:
            logger.warning(
                "Dropped malformed upstream records",
                extra={"device_id": device_id, "skipped": skipped},
            )
        if not readings:
            raise ReadingSourceError("Upstream returned no usable readings.")
        return readings[:limit]
