"""One-line observations shown next to the aggregate and forecast views."""

from __future__ import annotations

from typing import List, Sequence

from services.forecast import Hotspot, Prediction
from services.statistics import BucketSummary

RAIN_DAY_PROBABILITY = 0.3


def hourly_insights(buckets: Sequence[BucketSummary]) -> List[str]:
    populated = [bucket for bucket in buckets if bucket.count]
    if not populated:
        return []

    insights: List[str] = []
    average = sum(bucket.temperature.average for bucket in populated) / len(populated)
    insights.append(f"Average temperature: {average:.1f}°C")

    increasing = sum(1 for bucket in populated if bucket.temperature.trend == "increasing")
    decreasing = sum(1 for bucket in populated if bucket.temperature.trend == "decreasing")
    if increasing > decreasing:
        insights.append("Temperature is mostly trending up")
    elif decreasing > increasing:
        insights.append("Temperature is mostly trending down")

    rain = sum(bucket.rain.probability for bucket in buckets) / len(buckets)
    insights.append(f"Rain probability: {rain * 100:.0f}%")
    return insights


def forecast_insights(predictions: Sequence[Prediction], hotspots: Sequence[Hotspot]) -> List[str]:
    if not predictions:
        return []

    total = len(predictions)
    insights: List[str] = []

    average = sum(p.temperature.predicted for p in predictions) / total
    insights.append(f"Average temperature: {average:.1f}°C")

    spread = max(p.temperature.max for p in predictions) - min(p.temperature.min for p in predictions)
    insights.append(f"Temperature range: {spread:.1f}°C")

    rain_days = sum(1 for p in predictions if p.rain.probability > RAIN_DAY_PROBABILITY)
    insights.append(f"Rain days: {rain_days} of {total}")

    high_risk = sum(1 for p in predictions if p.risk_level == "high")
    if high_risk:
        insights.append(f"High-risk days: {high_risk}")

    if hotspots:
        insights.append(f"Weather warnings: {len(hotspots)} detected")

    sunny = sum(1 for p in predictions if p.weather_condition == "sunny")
    insights.append(f"Sunny days: {sunny} of {total}")
    return insights
