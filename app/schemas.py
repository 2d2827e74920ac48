"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class DataSource(str, Enum):
    """Where the readings behind a response came from."""

    upstream = "upstream"
    synthetic = "synthetic"


class BucketKind(str, Enum):
    hour = "hour"
    weekday = "weekday"
    day_offset = "day_offset"


class ReadingOut(BaseModel):
    measured_at: dt.datetime
    temperature: float
    humidity: float
    pressure: float = Field(..., description="Air pressure in Pa.")
    rain: float = Field(..., description="Rain amount in mm.")
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


class ChannelAggregate(BaseModel):
    average: float
    min: float
    max: float
    count: int = Field(..., ge=0)
    standard_deviation: float = Field(..., ge=0)
    trend: Literal["increasing", "decreasing", "stable"]


class RainAggregate(BaseModel):
    average: float
    probability: float = Field(..., ge=0, le=1)
    count: int = Field(..., ge=0)
    intensity: Literal["low", "medium", "high"]


class BucketAggregate(BaseModel):
    key: int = Field(..., ge=0, description="Hour (0-23), weekday (Monday=0) or days ago (0-6).")
    temperature: ChannelAggregate
    humidity: ChannelAggregate
    pressure: ChannelAggregate
    rain: RainAggregate


class AggregatesResponse(BaseModel):
    device_id: str
    source: DataSource
    bucket: BucketKind
    reading_count: int = Field(..., ge=0)
    buckets: List[BucketAggregate]
    insights: List[str] = Field(default_factory=list)


class Change(BaseModel):
    percent: float
    direction: Literal["increase", "decrease"]


class ChartPoint(BaseModel):
    measured_at: str
    temperature: float
    humidity: float
    pressure_kpa: float


class LiveSnapshotResponse(BaseModel):
    device_id: str
    source: DataSource
    online: bool
    latest: Optional[ReadingOut] = None
    changes: Dict[str, Optional[Change]] = Field(default_factory=dict)
    battery_status: Literal["ok", "warning", "low", "unknown"]
    chart: List[ChartPoint] = Field(default_factory=list)


class ChannelPrediction(BaseModel):
    predicted: float
    confidence: float = Field(..., ge=0, le=1)
    trend: Literal["rising", "falling", "stable"]
    min: float
    max: float


class TemperaturePrediction(ChannelPrediction):
    morning: float
    afternoon: float
    evening: float


class RainPrediction(BaseModel):
    probability: float = Field(..., ge=0, le=1)
    intensity: Literal["none", "light", "moderate", "heavy"]
    amount: float = Field(..., ge=0, description="Heuristic rain amount in mm.")
    morning: float
    afternoon: float
    evening: float


class PredictionOut(BaseModel):
    date: dt.date
    day_name: str
    temperature: TemperaturePrediction
    humidity: ChannelPrediction
    pressure: ChannelPrediction
    rain: RainPrediction
    weather_condition: Literal["sunny", "cloudy", "rainy", "stormy", "foggy"]
    risk_level: Literal["low", "medium", "high"]
    uv_index: int = Field(..., ge=0)
    wind_speed: float = Field(..., ge=0)


class HotspotOut(BaseModel):
    date: dt.date
    day_name: str
    type: Literal["temperature_extreme", "rain_heavy", "pressure_drop"]
    severity: Literal["high", "critical"]
    description: str
    confidence: float


class ForecastResponse(BaseModel):
    """Full forecast for one device and horizon."""

    device_id: str
    source: DataSource
    horizon_days: int
    generated_at: dt.datetime
    predictions: List[PredictionOut] = Field(default_factory=list)
    hotspots: List[HotspotOut] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)


class LocationOut(BaseModel):
    id: str
    name: str
    device_id: str
    lat: float
    lon: float
    description: str
