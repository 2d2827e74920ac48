"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


CHANNELS = ("temperature", "humidity", "pressure")


@dataclass(frozen=True, slots=True)
class Reading:
    """A single weather-station observation.

    ``temperature`` is in °C, ``humidity`` in %, ``pressure`` in Pa and
    ``rain`` in mm. The remaining fields are passed through from the device
    payload and are not used by the statistics or forecast engines.
    """

    measured_at: datetime
    temperature: float
    humidity: float
    pressure: float
    rain: float
    battery: Optional[float] = None
    irradiation: Optional[float] = None
    irr_max: Optional[float] = None
    t_min: Optional[float] = None
    t_max: Optional[float] = None
    gps_lat: Optional[float] = None
    gps_lon: Optional[float] = None
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    reading_id: Optional[str] = None

    def channel(self, name: str) -> float:
        return getattr(self, name)
