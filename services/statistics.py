"""Bucketed descriptive statistics over historical readings."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Dict, List, Literal, Optional, Sequence

from models.records import CHANNELS, Reading
from services.trends import Trend, classify_trend, mean, population_std

RainIntensity = Literal["low", "medium", "high"]
KeyFunc = Callable[[Reading], Optional[int]]

HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7
MAX_DAY_OFFSET = 6

HEAVY_RAIN_AVERAGE = 1.0
MEDIUM_RAIN_AVERAGE = 0.3


@dataclass
class ChannelSummary:
    """Statistics for one measurement channel within one bucket."""

    average: float = 0.0
    min: float = 0.0
    max: float = 0.0
    count: int = 0
    standard_deviation: float = 0.0
    trend: Trend = "stable"


@dataclass
class RainSummary:
    average: float = 0.0
    probability: float = 0.0
    count: int = 0
    intensity: RainIntensity = "low"


@dataclass
class BucketSummary:
    """All channel statistics for one bucket key (an hour, weekday or day offset)."""

    key: int
    temperature: ChannelSummary = field(default_factory=ChannelSummary)
    humidity: ChannelSummary = field(default_factory=ChannelSummary)
    pressure: ChannelSummary = field(default_factory=ChannelSummary)
    rain: RainSummary = field(default_factory=RainSummary)

    @property
    def count(self) -> int:
        return self.rain.count


def _local(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    return moment.astimezone(tz)


def hour_of_day(tz: Optional[tzinfo] = None) -> KeyFunc:
    """Bucket by local hour (0-23). ``tz=None`` uses the process local zone."""

    def key(reading: Reading) -> int:
        return _local(reading.measured_at, tz).hour

    return key


def weekday(tz: Optional[tzinfo] = None) -> KeyFunc:
    """Bucket by local weekday, Monday=0."""

    def key(reading: Reading) -> int:
        return _local(reading.measured_at, tz).weekday()

    return key


def day_offset(now: datetime) -> KeyFunc:
    """Bucket by whole days before ``now``: 0 is the last 24h, 6 the oldest kept.

    Readings more than seven days away map to ``None`` and are skipped.
    """

    def key(reading: Reading) -> Optional[int]:
        distance = abs(now - reading.measured_at)
        offset = max(0, math.ceil(distance / timedelta(days=1)) - 1)
        return offset if offset <= MAX_DAY_OFFSET else None

    return key


def summarize_channel(values: Sequence[float]) -> ChannelSummary:
    if not values:
        return ChannelSummary()
    return ChannelSummary(
        average=mean(values),
        min=min(values),
        max=max(values),
        count=len(values),
        standard_deviation=population_std(values),
        trend=classify_trend(values),
    )


def classify_rain_intensity(average: float) -> RainIntensity:
    if average > HEAVY_RAIN_AVERAGE:
        return "high"
    if average > MEDIUM_RAIN_AVERAGE:
        return "medium"
    return "low"


def summarize_rain(values: Sequence[float]) -> RainSummary:
    if not values:
        return RainSummary()
    average = mean(values)
    return RainSummary(
        average=average,
        probability=sum(1 for value in values if value > 0) / len(values),
        count=len(values),
        intensity=classify_rain_intensity(average),
    )


class StatisticsEngine:
    """Pure bucketing component; holds no state between calls."""

    def aggregate(
        self,
        readings: Sequence[Reading],
        key: KeyFunc,
        bucket_count: int,
        limit: Optional[int] = None,
    ) -> List[BucketSummary]:
        window = readings[:limit] if limit is not None else readings
        buckets: Dict[int, List[Reading]] = {index: [] for index in range(bucket_count)}

        for reading in window:
            bucket = key(reading)
            if bucket is None or bucket not in buckets:
                continue
            buckets[bucket].append(reading)

        summaries: List[BucketSummary] = []
        for index in range(bucket_count):
            members = buckets[index]
            summary = BucketSummary(key=index)
            for channel in CHANNELS:
                setattr(
                    summary,
                    channel,
                    summarize_channel([reading.channel(channel) for reading in members]),
                )
            summary.rain = summarize_rain([reading.rain for reading in members])
            summaries.append(summary)
        return summaries

    def hourly(
        self,
        readings: Sequence[Reading],
        tz: Optional[tzinfo] = None,
        limit: Optional[int] = None,
    ) -> List[BucketSummary]:
        return self.aggregate(readings, hour_of_day(tz), HOURS_PER_DAY, limit=limit)

    def by_weekday(
        self,
        readings: Sequence[Reading],
        tz: Optional[tzinfo] = None,
        limit: Optional[int] = None,
    ) -> List[BucketSummary]:
        return self.aggregate(readings, weekday(tz), DAYS_PER_WEEK, limit=limit)

    def by_day_offset(
        self,
        readings: Sequence[Reading],
        now: datetime,
        limit: Optional[int] = None,
    ) -> List[BucketSummary]:
        return self.aggregate(readings, day_offset(now), DAYS_PER_WEEK, limit=limit)


def compute_hourly_aggregates(
    readings: Sequence[Reading], tz: Optional[tzinfo] = None, limit: Optional[int] = None
) -> List[BucketSummary]:
    return StatisticsEngine().hourly(readings, tz=tz, limit=limit)


def compute_weekday_aggregates(
    readings: Sequence[Reading], tz: Optional[tzinfo] = None, limit: Optional[int] = None
) -> List[BucketSummary]:
    return StatisticsEngine().by_weekday(readings, tz=tz, limit=limit)


def compute_day_offset_aggregates(
    readings: Sequence[Reading], now: datetime, limit: Optional[int] = None
) -> List[BucketSummary]:
    return StatisticsEngine().by_day_offset(readings, now=now, limit=limit)
