"""Current-conditions view over the newest readings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Sequence

from models.records import Reading

BatteryStatus = Literal["ok", "warning", "low", "unknown"]

LOW_BATTERY_VOLTS = 3.5
WARNING_BATTERY_VOLTS = 3.8
CHART_POINTS = 24
METRICS = ("temperature", "humidity", "pressure", "rain")


@dataclass
class Change:
    percent: float
    direction: Literal["increase", "decrease"]


@dataclass
class ChartPoint:
    measured_at: str
    temperature: float
    humidity: float
    pressure_kpa: float


@dataclass
class LiveSnapshot:
    latest: Optional[Reading] = None
    changes: Dict[str, Optional[Change]] = field(default_factory=dict)
    battery_status: BatteryStatus = "unknown"
    chart: List[ChartPoint] = field(default_factory=list)


def percent_change(current: float, previous: Optional[float]) -> Optional[Change]:
    """Relative change against ``previous``; ``None`` when there is nothing to compare."""
    if not previous:
        return None
    change = (current - previous) / abs(previous) * 100
    return Change(percent=abs(change), direction="increase" if change > 0 else "decrease")


def battery_status(volts: Optional[float]) -> BatteryStatus:
    if volts is None:
        return "unknown"
    if volts < LOW_BATTERY_VOLTS:
        return "low"
    if volts < WARNING_BATTERY_VOLTS:
        return "warning"
    return "ok"


def build_snapshot(readings: Sequence[Reading]) -> LiveSnapshot:
    if not readings:
        return LiveSnapshot()

    latest = readings[0]
    previous = readings[1] if len(readings) > 1 else None
    changes = {
        metric: percent_change(
            getattr(latest, metric), getattr(previous, metric) if previous else None
        )
        for metric in METRICS
    }
    chart = [
        ChartPoint(
            measured_at=reading.measured_at.isoformat(),
            temperature=reading.temperature,
            humidity=reading.humidity,
            pressure_kpa=reading.pressure / 1000,
        )
        for reading in reversed(readings[:CHART_POINTS])
    ]
    return LiveSnapshot(
        latest=latest,
        changes=changes,
        battery_status=battery_status(latest.battery),
        chart=chart,
    )
