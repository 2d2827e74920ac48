"""Heuristic day-by-day forecast built from weekday baselines.

This is not a weather model. Each future day starts from the historical mean
of the same weekday and is nudged by a decaying short-term trend, a relative
seasonal offset and a weekend factor. Randomness (time-of-day spread and wind)
comes from an injected :class:`random.Random` so callers can pin it.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Literal, Optional, Sequence

from models.records import CHANNELS, Reading
from services.statistics import BucketSummary, StatisticsEngine
from services.trends import Direction, direction, seasonal_offsets, window_delta

logger = logging.getLogger(__name__)

WeatherCondition = Literal["sunny", "cloudy", "rainy", "stormy", "foggy"]
RiskLevel = Literal["low", "medium", "high"]
RainForecastIntensity = Literal["none", "light", "moderate", "heavy"]
HotspotType = Literal["temperature_extreme", "rain_heavy", "pressure_drop"]
Severity = Literal["high", "critical"]

SUPPORTED_HORIZONS = (7, 14, 30)
MIN_READINGS = 24

FALLBACK_BASELINE: Dict[str, float] = {
    "temperature": 20.0,
    "humidity": 60.0,
    "pressure": 101325.0,
}
STANDARD_PRESSURE = 101325.0

TREND_DECAY_DAYS = 7.0
WEEKLY_WINDOW = 48
WEEKEND_FACTOR = 1.2
WEEKEND_SCALED_CHANNELS = ("temperature", "humidity")
WEEKEND_DAYS = (5, 6)

FULL_CONFIDENCE_READINGS = 5
CONFIDENCE_HORIZON_DAYS = 30.0
MIN_TIME_DECAY = 0.2

MORNING_OFFSET = -2.0
AFTERNOON_OFFSET = 3.0
EVENING_OFFSET = -1.0
TIME_OF_DAY_JITTER = 2.0
HUMIDITY_SPREAD = 10.0
PRESSURE_SPREAD = 1000.0

RAIN_AMOUNT_SCALE = 5.0
RAIN_PERIOD_FACTORS = {"morning": 0.7, "afternoon": 1.2, "evening": 0.8}

SUMMER_MONTHS = range(5, 9)
SUMMER_UV = 7
DEFAULT_UV = 3
UV_MULTIPLIERS: Dict[str, float] = {
    "sunny": 1.0,
    "cloudy": 0.6,
    "rainy": 0.3,
    "stormy": 0.2,
    "foggy": 0.4,
}

BASE_WIND = 5.0
WIND_JITTER = 10.0
MAX_WIND = 50.0

HEAVY_RAIN_CONFIDENCE = 0.8

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass
class ChannelForecast:
    predicted: float
    confidence: float
    trend: Direction
    min: float
    max: float


@dataclass
class TemperatureForecast(ChannelForecast):
    morning: float = 0.0
    afternoon: float = 0.0
    evening: float = 0.0


@dataclass
class RainForecast:
    probability: float
    intensity: RainForecastIntensity
    amount: float
    morning: float = 0.0
    afternoon: float = 0.0
    evening: float = 0.0


@dataclass
class Prediction:
    """Forecast for one calendar day."""

    date: date
    day_name: str
    temperature: TemperatureForecast
    humidity: ChannelForecast
    pressure: ChannelForecast
    rain: RainForecast
    weather_condition: WeatherCondition
    risk_level: RiskLevel
    uv_index: int
    wind_speed: float


@dataclass
class Hotspot:
    date: date
    day_name: str
    type: HotspotType
    severity: Severity
    description: str
    confidence: float


@dataclass
class ForecastResult:
    predictions: List[Prediction] = field(default_factory=list)
    hotspots: List[Hotspot] = field(default_factory=list)


def trend_decay(days_ahead: int) -> float:
    return math.exp(-days_ahead / TREND_DECAY_DAYS)


def time_decay(days_ahead: int) -> float:
    return max(MIN_TIME_DECAY, 1 - days_ahead / CONFIDENCE_HORIZON_DAYS)


def confidence(readings_on_weekday: int, days_ahead: int) -> float:
    data_quality = min(1.0, readings_on_weekday / FULL_CONFIDENCE_READINGS)
    return data_quality * time_decay(days_ahead)


def classify_condition(temperature: float, humidity: float, pressure: float) -> WeatherCondition:
    if humidity > 90 and temperature < 10:
        return "foggy"
    if humidity > 85 and pressure < 100000:
        return "rainy"
    if pressure < 99000:
        return "stormy"
    if humidity > 70:
        return "cloudy"
    return "sunny"


def classify_rain(probability: float) -> RainForecastIntensity:
    if probability > 0.7:
        return "heavy"
    if probability > 0.4:
        return "moderate"
    if probability > 0.1:
        return "light"
    return "none"


def risk_level(temperature: float, humidity: float, pressure: float, rain_probability: float) -> RiskLevel:
    score = 0
    if temperature > 35 or temperature < -10:
        score += 3
    if humidity > 95:
        score += 2
    if pressure < 98000:
        score += 2
    if rain_probability > 0.8:
        score += 2
    if score >= 6:
        return "high"
    if score >= 3:
        return "medium"
    return "low"


def uv_index(day: date, condition: WeatherCondition) -> int:
    base = SUMMER_UV if day.month in SUMMER_MONTHS else DEFAULT_UV
    return math.floor(base * UV_MULTIPLIERS.get(condition, 1.0))


def wind_speed(pressure: float, temperature: float, jitter: float) -> float:
    estimate = (
        BASE_WIND
        + jitter
        + abs(pressure - STANDARD_PRESSURE) / 1000
        + abs(temperature - 20) / 10
    )
    return min(MAX_WIND, estimate)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def detect_hotspots(predictions: Sequence[Prediction]) -> List[Hotspot]:
    """Flag days where temperature, rain or pressure cross a severity threshold."""
    hotspots: List[Hotspot] = []
    for prediction in predictions:
        temperature = prediction.temperature
        if temperature.max > 35 or temperature.min < -10:
            critical = temperature.max > 40 or temperature.min < -15
            hotspots.append(
                Hotspot(
                    date=prediction.date,
                    day_name=prediction.day_name,
                    type="temperature_extreme",
                    severity="critical" if critical else "high",
                    description=(
                        f"Extreme temperature: {temperature.min:.1f}°C - {temperature.max:.1f}°C"
                    ),
                    confidence=temperature.confidence,
                )
            )

        rain = prediction.rain
        if rain.probability > 0.8 and rain.intensity == "heavy":
            hotspots.append(
                Hotspot(
                    date=prediction.date,
                    day_name=prediction.day_name,
                    type="rain_heavy",
                    severity="critical" if rain.probability > 0.9 else "high",
                    description=f"Heavy rain expected: {rain.probability * 100:.0f}% probability",
                    confidence=HEAVY_RAIN_CONFIDENCE,
                )
            )

        pressure = prediction.pressure
        if pressure.predicted < 99000:
            hotspots.append(
                Hotspot(
                    date=prediction.date,
                    day_name=prediction.day_name,
                    type="pressure_drop",
                    severity="critical" if pressure.predicted < 98000 else "high",
                    description=f"Low pressure system: {pressure.predicted / 100:.0f} hPa",
                    confidence=pressure.confidence,
                )
            )
    return hotspots


class ForecastEngine:
    """Projects weekday baselines forward into per-day predictions."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        statistics: Optional[StatisticsEngine] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.statistics = statistics or StatisticsEngine()
        self.tz = tz

    def forecast(
        self,
        readings: Sequence[Reading],
        horizon_days: int,
        now: Optional[datetime] = None,
    ) -> ForecastResult:
        if horizon_days not in SUPPORTED_HORIZONS:
            raise ValueError(
                f"Unsupported forecast horizon {horizon_days}; "
                f"expected one of {', '.join(str(h) for h in SUPPORTED_HORIZONS)}."
            )
        if len(readings) < MIN_READINGS:
            logger.info(
                "Not enough readings to forecast",
                extra={"reading_count": len(readings), "horizon_days": horizon_days},
            )
            return ForecastResult()

        reference = (now or datetime.now(timezone.utc)).astimezone(self.tz)
        baselines = self.statistics.by_weekday(readings, tz=self.tz)
        trend = window_delta(readings)
        weekly = window_delta(readings[:WEEKLY_WINDOW])
        seasonal_now = seasonal_offsets(reference.date())

        predictions = [
            self._predict_day(
                reference + timedelta(days=days_ahead),
                days_ahead,
                baselines,
                trend,
                weekly,
                seasonal_now,
            )
            for days_ahead in range(1, horizon_days + 1)
        ]
        return ForecastResult(predictions=predictions, hotspots=detect_hotspots(predictions))

    def _predict_day(
        self,
        moment: datetime,
        days_ahead: int,
        baselines: Sequence[BucketSummary],
        trend: Dict[str, float],
        weekly: Dict[str, float],
        seasonal_now: Dict[str, float],
    ) -> Prediction:
        target = moment.date()
        day = target.weekday()
        bucket = baselines[day]
        decay = trend_decay(days_ahead)
        seasonal_target = seasonal_offsets(target)
        weekend = day in WEEKEND_DAYS

        predicted: Dict[str, float] = {}
        trend_adjustment: Dict[str, float] = {}
        for channel in CHANNELS:
            summary = getattr(bucket, channel)
            baseline = summary.average if summary.count else FALLBACK_BASELINE[channel]
            trend_adjustment[channel] = trend[channel] * decay
            seasonal = seasonal_target[channel] - seasonal_now[channel]
            factor = WEEKEND_FACTOR if weekend and channel in WEEKEND_SCALED_CHANNELS else 1.0
            predicted[channel] = baseline + trend_adjustment[channel] + seasonal + weekly[channel] * factor
        predicted["humidity"] = _clamp(predicted["humidity"], 0.0, 100.0)

        score = confidence(bucket.count, days_ahead)
        temperature = predicted["temperature"]
        humidity = predicted["humidity"]
        pressure = predicted["pressure"]

        condition = classify_condition(temperature, humidity, pressure)
        rain = self._predict_rain(bucket, days_ahead)

        morning = temperature + MORNING_OFFSET + self.rng.random() * TIME_OF_DAY_JITTER
        afternoon = temperature + AFTERNOON_OFFSET + self.rng.random() * TIME_OF_DAY_JITTER
        evening = temperature + EVENING_OFFSET + self.rng.random() * TIME_OF_DAY_JITTER

        return Prediction(
            date=target,
            day_name=DAY_NAMES[day],
            temperature=TemperatureForecast(
                predicted=temperature,
                confidence=score,
                trend=direction(trend_adjustment["temperature"]),
                min=min(morning, evening),
                max=afternoon,
                morning=morning,
                afternoon=afternoon,
                evening=evening,
            ),
            humidity=ChannelForecast(
                predicted=humidity,
                confidence=score,
                trend=direction(trend_adjustment["humidity"]),
                min=_clamp(humidity - HUMIDITY_SPREAD, 0.0, 100.0),
                max=_clamp(humidity + HUMIDITY_SPREAD, 0.0, 100.0),
            ),
            pressure=ChannelForecast(
                predicted=pressure,
                confidence=score,
                trend=direction(trend_adjustment["pressure"]),
                min=pressure - PRESSURE_SPREAD,
                max=pressure + PRESSURE_SPREAD,
            ),
            rain=rain,
            weather_condition=condition,
            risk_level=risk_level(temperature, humidity, pressure, rain.probability),
            uv_index=uv_index(target, condition),
            wind_speed=wind_speed(pressure, temperature, self.rng.random() * WIND_JITTER),
        )

    @staticmethod
    def _predict_rain(bucket: BucketSummary, days_ahead: int) -> RainForecast:
        probability = bucket.rain.probability * trend_decay(days_ahead)
        periods = {
            period: min(1.0, probability * factor)
            for period, factor in RAIN_PERIOD_FACTORS.items()
        }
        return RainForecast(
            probability=probability,
            intensity=classify_rain(probability),
            amount=probability * RAIN_AMOUNT_SCALE,
            **periods,
        )


def forecast(
    readings: Sequence[Reading],
    horizon_days: int,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    tz: Optional[tzinfo] = None,
) -> ForecastResult:
    return ForecastEngine(rng=rng, tz=tz).forecast(readings, horizon_days, now=now)
