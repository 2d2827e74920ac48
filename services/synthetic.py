"""Plausible stand-in readings for when the upstream station cannot be reached."""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from models.records import Reading

READING_INTERVAL = timedelta(minutes=30)
LIVE_READING_COUNT = 50

SYNTHETIC_DEVICE_ID = "c055eef5-b6dc-406e-ad5a-65dec60db90e"
SYNTHETIC_DEVICE_NAME = "Barani MeteoHelix IoT Pro - 2212LH010 - Kaiserplatz"
SYNTHETIC_LAT = 49.010414
SYNTHETIC_LON = 8.388769

BASE_TEMPERATURE = 18.5
BASE_PRESSURE = 100475.0


def _uniform(rng: random.Random, low: float, high: float) -> float:
    return low + rng.random() * (high - low)


def generate_live_readings(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    count: int = LIVE_READING_COUNT,
    device_id: Optional[str] = None,
) -> List[Reading]:
    """Short newest-first series with a gentle temperature wave."""
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    readings: List[Reading] = []

    for i in range(count):
        measured_at = now - i * READING_INTERVAL
        temperature = BASE_TEMPERATURE + math.sin(i * 0.2) * 3 + _uniform(rng, -1, 1)
        readings.append(
            Reading(
                measured_at=measured_at,
                temperature=temperature,
                humidity=86.4 + _uniform(rng, -5, 5),
                pressure=BASE_PRESSURE + _uniform(rng, -500, 500),
                rain=rng.random() * 0.5,
                battery=4.15 - i * 0.01,
                irradiation=58 + _uniform(rng, -7, 8),
                irr_max=66 + _uniform(rng, -10, 10),
                t_min=temperature - 1,
                t_max=temperature + 1,
                gps_lat=SYNTHETIC_LAT,
                gps_lon=SYNTHETIC_LON,
                device_id=device_id or SYNTHETIC_DEVICE_ID,
                device_name=SYNTHETIC_DEVICE_NAME,
                reading_id=f"synthetic-{i}",
            )
        )
    return readings


def generate_historical_readings(
    limit: int,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    device_id: Optional[str] = None,
) -> List[Reading]:
    """Newest-first series with a diurnal cycle, slow drift and occasional rain."""
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    readings: List[Reading] = []

    for i in range(limit):
        measured_at = now - i * READING_INTERVAL
        hour = measured_at.hour

        daily = math.sin((hour - 6) * math.pi / 12) * 5
        drift = math.sin(i * 0.01) * 2
        temperature = BASE_TEMPERATURE + daily + drift + _uniform(rng, -1, 1)
        humidity = 70 - daily * 2 + _uniform(rng, -5, 5)
        sun = math.sin((hour - 12) * math.pi / 12)
        rain = rng.random() * 2 if rng.random() > 0.9 else 0.0

        readings.append(
            Reading(
                measured_at=measured_at,
                temperature=temperature,
                humidity=max(0.0, min(100.0, humidity)),
                pressure=BASE_PRESSURE + math.sin(i * 0.005) * 1000 + _uniform(rng, -500, 500),
                rain=rain,
                battery=4.15 - i * 0.001,
                irradiation=max(0.0, 58 + sun * 40 + _uniform(rng, -7, 8)),
                irr_max=max(0.0, 66 + sun * 50 + _uniform(rng, -10, 10)),
                t_min=temperature - 1,
                t_max=temperature + 1,
                gps_lat=SYNTHETIC_LAT,
                gps_lon=SYNTHETIC_LON,
                device_id=device_id or SYNTHETIC_DEVICE_ID,
                device_name=SYNTHETIC_DEVICE_NAME,
                reading_id=f"synthetic-historical-{i}",
            )
        )
    return readings
