"""Tests for the heuristic forecast engine."""

from __future__ import annotations

import math
import random
from dataclasses import asdict
from datetime import date, datetime, timedelta, timezone

import pytest

from models.records import Reading
from services.statistics import StatisticsEngine
from services.forecast import (
    FALLBACK_BASELINE,
    ForecastEngine,
    classify_condition,
    classify_rain,
    confidence,
    forecast,
    risk_level,
    time_decay,
    uv_index,
    wind_speed,
)
from services.trends import seasonal_offsets

UTC = timezone.utc
NOW = datetime(2024, 1, 10, 12, tzinfo=UTC)


def _week(
    now: datetime = NOW,
    hours: int = 168,
    temperature: float = 15.0,
    humidity: float = 70.0,
    pressure: float = 101000.0,
    rain: float = 0.0,
) -> list[Reading]:
    """Hourly readings, newest first, ending one hour before ``now``."""

    return [
        Reading(
            measured_at=now - timedelta(hours=i + 1),
            temperature=temperature,
            humidity=humidity,
            pressure=pressure,
            rain=rain,
        )
        for i in range(hours)
    ]


def _engine(seed: int = 0) -> ForecastEngine:
    return ForecastEngine(rng=random.Random(seed), tz=UTC)


def _seasonal_shift(target: date, channel: str) -> float:
    return seasonal_offsets(target)[channel] - seasonal_offsets(NOW.date())[channel]


def test_seven_day_horizon_has_consecutive_dates() -> None:
    result = _engine().forecast(_week(), 7, now=NOW)

    assert len(result.predictions) == 7
    dates = [prediction.date for prediction in result.predictions]
    assert dates[0] == NOW.date() + timedelta(days=1)
    for earlier, later in zip(dates, dates[1:]):
        assert later - earlier == timedelta(days=1)


@pytest.mark.parametrize("days", [7, 14, 30])
def test_supported_horizons(days: int) -> None:
    result = _engine().forecast(_week(), days, now=NOW)

    assert len(result.predictions) == days


def test_unsupported_horizon_is_rejected() -> None:
    with pytest.raises(ValueError):
        _engine().forecast(_week(), 10, now=NOW)


def test_too_few_readings_yield_empty_forecast() -> None:
    result = _engine().forecast(_week(hours=23), 7, now=NOW)

    assert result.predictions == []
    assert result.hotspots == []


def test_prediction_starts_from_weekday_baseline() -> None:
    result = _engine().forecast(_week(), 7, now=NOW)

    first = result.predictions[0]
    assert first.temperature.predicted == pytest.approx(
        15.0 + _seasonal_shift(first.date, "temperature")
    )
    assert first.pressure.predicted == pytest.approx(101000.0)
    assert first.pressure.min == pytest.approx(100000.0)
    assert first.pressure.max == pytest.approx(102000.0)


def test_missing_weekday_falls_back_to_defaults() -> None:
    monday = datetime(2024, 1, 8, 12, tzinfo=UTC)
    readings = [
        Reading(
            measured_at=monday - timedelta(minutes=i),
            temperature=5.0,
            humidity=40.0,
            pressure=100000.0,
            rain=1.0,
        )
        for i in range(30)
    ]

    result = _engine().forecast(readings, 7, now=monday)

    tuesday = result.predictions[0]
    assert tuesday.day_name == "Tuesday"
    shift = seasonal_offsets(tuesday.date)["temperature"] - seasonal_offsets(monday.date())["temperature"]
    assert tuesday.temperature.predicted == pytest.approx(FALLBACK_BASELINE["temperature"] + shift)
    assert tuesday.pressure.predicted == pytest.approx(FALLBACK_BASELINE["pressure"])
    assert tuesday.temperature.confidence == 0.0
    assert tuesday.rain.probability == 0.0
    assert tuesday.rain.intensity == "none"


def test_humidity_is_clamped() -> None:
    soaked = _engine().forecast(_week(humidity=180.0), 14, now=NOW)
    parched = _engine().forecast(_week(humidity=-50.0), 14, now=NOW)

    for prediction in soaked.predictions + parched.predictions:
        assert 0.0 <= prediction.humidity.predicted <= 100.0
        assert 0.0 <= prediction.humidity.min <= prediction.humidity.max <= 100.0


def test_confidence_decays_with_lead_time() -> None:
    result = _engine().forecast(_week(), 30, now=NOW)

    scores = [prediction.temperature.confidence for prediction in result.predictions]
    for days_ahead, score in enumerate(scores, start=1):
        assert score == pytest.approx(max(0.2, 1 - days_ahead / 30))
    for earlier, later in zip(scores, scores[1:]):
        assert later <= earlier
    assert scores[-1] == pytest.approx(0.2)
    assert all(
        p.temperature.confidence == p.humidity.confidence == p.pressure.confidence
        for p in result.predictions
    )


def test_time_decay_is_strictly_decreasing_until_floor() -> None:
    decays = [time_decay(i) for i in range(1, 31)]

    for i in range(23):
        assert decays[i] > decays[i + 1]
    assert decays[-1] == 0.2
    assert confidence(2, 1) == pytest.approx(0.4 * (1 - 1 / 30))
    assert confidence(50, 1) == pytest.approx(1 - 1 / 30)


def test_recent_warming_decays_out_of_the_trend_label() -> None:
    readings = _week(hours=120)
    warm = [
        Reading(
            measured_at=reading.measured_at,
            temperature=25.0,
            humidity=reading.humidity,
            pressure=reading.pressure,
            rain=reading.rain,
        )
        for reading in readings[:24]
    ]

    result = _engine().forecast(warm + readings[24:], 30, now=NOW)

    assert result.predictions[0].temperature.trend == "rising"
    assert result.predictions[-1].temperature.trend == "stable"
    assert result.predictions[0].humidity.trend == "stable"


def test_time_of_day_spread() -> None:
    result = _engine(seed=3).forecast(_week(), 14, now=NOW)

    for prediction in result.predictions:
        temperature = prediction.temperature
        predicted = temperature.predicted
        assert predicted - 2 <= temperature.morning < predicted
        assert predicted + 3 <= temperature.afternoon < predicted + 5
        assert predicted - 1 <= temperature.evening < predicted + 1
        assert temperature.min == min(temperature.morning, temperature.evening)
        assert temperature.max == temperature.afternoon
        assert 5.0 <= prediction.wind_speed <= 50.0


def test_seeded_generator_makes_forecast_reproducible() -> None:
    readings = _week()

    first = forecast(readings, 14, now=NOW, rng=random.Random(42), tz=UTC)
    second = forecast(readings, 14, now=NOW, rng=random.Random(42), tz=UTC)

    assert [asdict(p) for p in first.predictions] == [asdict(p) for p in second.predictions]


def test_persistent_rain_raises_heavy_rain_hotspot() -> None:
    result = _engine().forecast(_week(rain=1.5), 7, now=NOW)

    first = result.predictions[0]
    assert first.rain.probability == pytest.approx(0.8668778997501817)
    assert first.rain.intensity == "heavy"
    assert first.rain.amount == pytest.approx(first.rain.probability * 5)
    assert first.rain.afternoon == 1.0
    assert first.rain.morning == pytest.approx(first.rain.probability * 0.7)

    rain_hotspots = [h for h in result.hotspots if h.type == "rain_heavy"]
    assert [h.date for h in rain_hotspots] == [first.date]
    assert rain_hotspots[0].severity == "high"
    assert rain_hotspots[0].confidence == 0.8


def test_low_pressure_is_flagged_and_stormy() -> None:
    result = _engine().forecast(_week(pressure=97000.0), 7, now=NOW)

    drops = [h for h in result.hotspots if h.type == "pressure_drop"]
    assert len(drops) == 7
    assert all(h.severity == "critical" for h in drops)
    assert all(p.weather_condition == "stormy" for p in result.predictions)
    assert all(p.uv_index == 0 for p in result.predictions)


def test_extreme_heat_is_flagged_critical() -> None:
    result = _engine().forecast(_week(temperature=45.0, humidity=30.0), 7, now=NOW)

    heat = [h for h in result.hotspots if h.type == "temperature_extreme"]
    assert len(heat) == 7
    assert all(h.severity == "critical" for h in heat)
    assert all(p.risk_level == "medium" for p in result.predictions)


def test_mild_week_has_no_hotspots() -> None:
    result = _engine().forecast(_week(), 7, now=NOW)

    assert result.hotspots == []
    assert all(p.risk_level == "low" for p in result.predictions)


def test_classify_condition_precedence() -> None:
    assert classify_condition(5.0, 95.0, 98000.0) == "foggy"
    assert classify_condition(15.0, 90.0, 99500.0) == "rainy"
    assert classify_condition(15.0, 50.0, 98500.0) == "stormy"
    assert classify_condition(15.0, 75.0, 101325.0) == "cloudy"
    assert classify_condition(15.0, 50.0, 101325.0) == "sunny"


def test_classify_rain_thresholds() -> None:
    assert classify_rain(0.71) == "heavy"
    assert classify_rain(0.7) == "moderate"
    assert classify_rain(0.41) == "moderate"
    assert classify_rain(0.2) == "light"
    assert classify_rain(0.1) == "none"


def test_risk_level_scoring() -> None:
    assert risk_level(40.0, 96.0, 97000.0, 0.9) == "high"
    assert risk_level(40.0, 50.0, 101325.0, 0.0) == "medium"
    assert risk_level(20.0, 96.0, 101325.0, 0.9) == "medium"
    assert risk_level(20.0, 96.0, 101325.0, 0.0) == "low"


def test_uv_index_by_season_and_condition() -> None:
    assert uv_index(date(2024, 7, 1), "sunny") == 7
    assert uv_index(date(2024, 5, 1), "cloudy") == 4
    assert uv_index(date(2024, 8, 31), "rainy") == 2
    assert uv_index(date(2024, 9, 1), "sunny") == 3
    assert uv_index(date(2024, 1, 15), "foggy") == 1


def test_weekly_delta_is_scaled_on_weekends() -> None:
    readings = _week()
    warm = [
        Reading(
            measured_at=reading.measured_at,
            temperature=25.0,
            humidity=reading.humidity,
            pressure=reading.pressure,
            rain=reading.rain,
        )
        for reading in readings[:24]
    ]
    readings = warm + readings[24:]
    baselines = StatisticsEngine().by_weekday(readings, tz=UTC)
    delta = 10.0

    result = _engine().forecast(readings, 7, now=NOW)

    weekend_days = 0
    for days_ahead, prediction in enumerate(result.predictions, start=1):
        day = prediction.date.weekday()
        factor = 1.2 if day in (5, 6) else 1.0
        weekend_days += day in (5, 6)
        expected = (
            baselines[day].temperature.average
            + delta * math.exp(-days_ahead / 7)
            + _seasonal_shift(prediction.date, "temperature")
            + delta * factor
        )
        assert prediction.temperature.predicted == pytest.approx(expected)
        assert prediction.pressure.predicted == pytest.approx(101000.0)
    assert weekend_days == 2


def test_wind_speed_formula_and_cap() -> None:
    assert wind_speed(pressure=50000.0, temperature=-40.0, jitter=0.0) == 50.0
    assert wind_speed(pressure=101325.0, temperature=20.0, jitter=3.0) == pytest.approx(8.0)
    assert wind_speed(pressure=100325.0, temperature=30.0, jitter=2.5) == pytest.approx(9.5)
