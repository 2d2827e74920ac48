"""Unit tests for the bucketed statistics engine."""

from __future__ import annotations

import random
from dataclasses import asdict
from datetime import datetime, timedelta, timezone

import pytest

from models.records import Reading
from services.statistics import (
    ChannelSummary,
    RainSummary,
    StatisticsEngine,
    classify_rain_intensity,
    compute_day_offset_aggregates,
    compute_hourly_aggregates,
    compute_weekday_aggregates,
)
from services.synthetic import generate_historical_readings

UTC = timezone.utc


def _reading(
    measured_at: datetime,
    temperature: float = 20.0,
    humidity: float = 60.0,
    pressure: float = 101325.0,
    rain: float = 0.0,
) -> Reading:
    """Helper to build deterministic readings."""

    return Reading(
        measured_at=measured_at,
        temperature=temperature,
        humidity=humidity,
        pressure=pressure,
        rain=rain,
    )


def _at_ten(minute: int) -> datetime:
    return datetime(2024, 1, 1, 10, minute, tzinfo=UTC)


def test_identical_readings_produce_flat_summary() -> None:
    readings = [_reading(_at_ten(40 - 10 * i)) for i in range(5)]

    buckets = compute_hourly_aggregates(readings, tz=UTC)

    temperature = buckets[10].temperature
    assert temperature.average == 20
    assert temperature.min == 20
    assert temperature.max == 20
    assert temperature.count == 5
    assert temperature.standard_deviation == 0
    assert temperature.trend == "stable"


def test_rain_summary_for_single_wet_reading() -> None:
    rains = [0, 0, 2, 0, 0]
    readings = [_reading(_at_ten(40 - 10 * i), rain=value) for i, value in enumerate(rains)]

    rain = compute_hourly_aggregates(readings, tz=UTC)[10].rain

    assert rain.average == pytest.approx(0.4)
    assert rain.probability == pytest.approx(0.2)
    assert rain.count == 5
    assert rain.intensity == "medium"


def test_empty_bucket_is_all_zero() -> None:
    buckets = compute_hourly_aggregates([_reading(_at_ten(0))], tz=UTC)

    empty = buckets[3]
    assert empty.key == 3
    for channel in ("temperature", "humidity", "pressure"):
        assert asdict(getattr(empty, channel)) == {
            "average": 0.0,
            "min": 0.0,
            "max": 0.0,
            "count": 0,
            "standard_deviation": 0.0,
            "trend": "stable",
        }
    assert empty.rain == RainSummary()


def test_one_summary_per_hour_and_no_reading_lost() -> None:
    now = datetime(2024, 3, 1, 12, tzinfo=UTC)
    readings = generate_historical_readings(300, now=now, rng=random.Random(1))

    buckets = compute_hourly_aggregates(readings, tz=UTC)

    assert [bucket.key for bucket in buckets] == list(range(24))
    assert sum(bucket.rain.count for bucket in buckets) == len(readings)
    assert sum(bucket.temperature.count for bucket in buckets) == len(readings)


def test_extrema_bound_the_average() -> None:
    now = datetime(2024, 3, 1, 12, tzinfo=UTC)
    readings = generate_historical_readings(500, now=now, rng=random.Random(2))

    for bucket in compute_hourly_aggregates(readings, tz=UTC):
        for channel in (bucket.temperature, bucket.humidity, bucket.pressure):
            if channel.count == 0:
                continue
            assert channel.min <= channel.average <= channel.max
            assert channel.standard_deviation >= 0


def test_single_reading_bucket_is_stable() -> None:
    buckets = compute_hourly_aggregates([_reading(_at_ten(0), temperature=30.0)], tz=UTC)

    assert buckets[10].temperature.count == 1
    assert buckets[10].temperature.trend == "stable"


def test_bucket_trend_uses_newest_first_order() -> None:
    temperatures = [30.0, 30.0, 25.0, 25.0, 20.0, 20.0]
    readings = [
        _reading(_at_ten(50 - 10 * i), temperature=value) for i, value in enumerate(temperatures)
    ]

    temperature = compute_hourly_aggregates(readings, tz=UTC)[10].temperature

    assert temperature.trend == "increasing"
    assert temperature.average == pytest.approx(25.0)


def test_hour_bucketing_respects_timezone() -> None:
    reading = _reading(datetime(2024, 1, 1, 10, 0, tzinfo=UTC))

    plus_two = timezone(timedelta(hours=2))
    buckets = compute_hourly_aggregates([reading], tz=plus_two)

    assert buckets[12].temperature.count == 1
    assert buckets[10].temperature.count == 0


def test_weekday_buckets_start_on_monday() -> None:
    monday = datetime(2024, 1, 1, 12, tzinfo=UTC)
    readings = [
        _reading(monday + timedelta(days=6), temperature=10.0),
        _reading(monday, temperature=30.0),
    ]

    buckets = compute_weekday_aggregates(readings, tz=UTC)

    assert len(buckets) == 7
    assert buckets[0].temperature.average == 30.0
    assert buckets[6].temperature.average == 10.0
    assert all(bucket.temperature.count == 0 for bucket in buckets[1:6])


def test_day_offset_buckets() -> None:
    now = datetime(2024, 1, 8, 12, tzinfo=UTC)
    readings = [
        _reading(now),
        _reading(now - timedelta(hours=1)),
        _reading(now - timedelta(hours=24)),
        _reading(now - timedelta(hours=30)),
        _reading(now - timedelta(days=6, hours=12)),
        _reading(now - timedelta(days=8)),
    ]

    buckets = compute_day_offset_aggregates(readings, now=now)

    counts = [bucket.temperature.count for bucket in buckets]
    assert counts == [3, 1, 0, 0, 0, 0, 1]


def test_limit_bounds_the_window() -> None:
    readings = [_reading(_at_ten(59 - i)) for i in range(10)]

    buckets = StatisticsEngine().hourly(readings, tz=UTC, limit=4)

    assert buckets[10].temperature.count == 4


def test_rain_intensity_thresholds() -> None:
    assert classify_rain_intensity(1.01) == "high"
    assert classify_rain_intensity(1.0) == "medium"
    assert classify_rain_intensity(0.31) == "medium"
    assert classify_rain_intensity(0.3) == "low"
    assert classify_rain_intensity(0.0) == "low"


def test_channel_summary_defaults_are_zero() -> None:
    assert ChannelSummary() == ChannelSummary(
        average=0.0, min=0.0, max=0.0, count=0, standard_deviation=0.0, trend="stable"
    )
