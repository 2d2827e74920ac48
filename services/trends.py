"""Small numeric helpers shared by the statistics and forecast engines.

The thresholds and amplitudes below are empirical tuning knobs, not physical
constants.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Dict, Literal, Sequence

from models.records import CHANNELS, Reading

Trend = Literal["increasing", "decreasing", "stable"]
Direction = Literal["rising", "falling", "stable"]

TREND_THRESHOLD_RATIO = 0.05
DIRECTION_THRESHOLD = 0.5
DELTA_WINDOW = 24

SEASONAL_TEMPERATURE_AMPLITUDE = 10.0
SEASONAL_HUMIDITY_AMPLITUDE = 20.0
DAYS_PER_YEAR = 365


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    """Standard deviation over the whole population (no Bessel correction)."""
    if not values:
        return 0.0
    centre = mean(values)
    return math.sqrt(sum((value - centre) ** 2 for value in values) / len(values))


def classify_trend(values: Sequence[float]) -> Trend:
    """Compare the first third of ``values`` against the last third.

    ``values`` are expected newest first, so the leading slice is the recent one.
    """
    n = len(values)
    if n < 2:
        return "stable"

    third = n // 3
    recent = values[:third]
    older = values[n - third:] if third else []

    older_mean = mean(older)
    change = mean(recent) - older_mean
    threshold = abs(older_mean) * TREND_THRESHOLD_RATIO

    if change > threshold:
        return "increasing"
    if change < -threshold:
        return "decreasing"
    return "stable"


def window_delta(readings: Sequence[Reading], window: int = DELTA_WINDOW) -> Dict[str, float]:
    """Per-channel mean of the newest ``window`` readings minus the ``window`` before."""
    recent = readings[:window]
    previous = readings[window : window * 2]
    if not recent or not previous:
        return {channel: 0.0 for channel in CHANNELS}
    return {
        channel: mean([r.channel(channel) for r in recent])
        - mean([r.channel(channel) for r in previous])
        for channel in CHANNELS
    }


def direction(change: float) -> Direction:
    if abs(change) < DIRECTION_THRESHOLD:
        return "stable"
    return "rising" if change > 0 else "falling"


def day_of_year(day: date) -> int:
    return day.timetuple().tm_yday


def seasonal_offsets(day: date) -> Dict[str, float]:
    phase = 2 * math.pi * day_of_year(day) / DAYS_PER_YEAR
    return {
        "temperature": SEASONAL_TEMPERATURE_AMPLITUDE * math.sin(phase),
        "humidity": SEASONAL_HUMIDITY_AMPLITUDE * math.sin(phase + math.pi),
        "pressure": 0.0,
    }
