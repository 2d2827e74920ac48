"""Orchestrates the reading source, its synthetic fallback and the engines."""

from __future__ import annotations

import logging
import random
from dataclasses import asdict
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from app.schemas import (
    AggregatesResponse,
    BucketAggregate,
    BucketKind,
    DataSource,
    ForecastResponse,
    HotspotOut,
    LiveSnapshotResponse,
    PredictionOut,
    ReadingOut,
)
from models.records import Reading
from services.forecast import ForecastEngine
from services.insights import forecast_insights, hourly_insights
from services.live import build_snapshot
from services.source import ReadingSource, ReadingSourceError, to_upstream_item
from services.statistics import BucketSummary, StatisticsEngine
from services.synthetic import generate_historical_readings, generate_live_readings
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _bucket_models(buckets: Sequence[BucketSummary]) -> List[BucketAggregate]:
    return [BucketAggregate.model_validate(asdict(bucket)) for bucket in buckets]


class DashboardService:
    """Loads readings for a device and turns them into API payloads.

    Upstream failures never reach the engines: they are logged and replaced by
    synthetic readings, and the response is tagged with its ``source``.
    """

    def __init__(
        self,
        source: ReadingSource,
        settings: Settings,
        statistics: Optional[StatisticsEngine] = None,
        clock: Clock = _utcnow,
    ) -> None:
        self.source = source
        self.settings = settings
        self.statistics = statistics or StatisticsEngine()
        self.clock = clock

    async def aclose(self) -> None:
        await self.source.aclose()

    def _device(self, device_id: Optional[str]) -> str:
        return device_id or self.settings.default_device_id

    def _synthetic(self, device_id: str, limit: int, historical: bool) -> List[Reading]:
        now = self.clock()
        if historical:
            return generate_historical_readings(limit, now=now, device_id=device_id)
        return generate_live_readings(now=now, device_id=device_id)

    async def load_readings(
        self,
        device_id: Optional[str] = None,
        limit: Optional[int] = None,
        historical: bool = False,
    ) -> Tuple[List[Reading], DataSource]:
        """Return newest-first readings and where they came from."""
        device = self._device(device_id)
        default_limit = self.settings.historical_limit if historical else self.settings.readings_limit
        count = limit or default_limit
        try:
            readings = await self.source.fetch_readings(device, count)
        except ReadingSourceError as exc:
            logger.warning(
                "Falling back to synthetic readings",
                extra={"device_id": device, "limit": count, "reason": str(exc)},
            )
            return self._synthetic(device, count, historical), DataSource.synthetic

        logger.info(
            "Loaded upstream readings",
            extra={"device_id": device, "reading_count": len(readings), "source": "upstream"},
        )
        return readings, DataSource.upstream

    async def proxy_payload(
        self,
        device_id: Optional[str] = None,
        limit: Optional[int] = None,
        historical: bool = False,
    ) -> Dict[str, Any]:
        """Upstream document as-is, or a synthetic one in the same shape."""
        device = self._device(device_id)
        default_limit = self.settings.historical_limit if historical else self.settings.readings_limit
        count = limit or default_limit
        try:
            payload = await self.source.fetch_payload(device, count)
        except ReadingSourceError as exc:
            logger.warning(
                "Proxy falling back to synthetic payload",
                extra={"device_id": device, "limit": count, "reason": str(exc)},
            )
        else:
            if isinstance(payload, dict) and isinstance(payload.get("body"), list):
                return payload
            logger.warning(
                "Proxy falling back to synthetic payload",
                extra={"device_id": device, "reason": "malformed body"},
            )
        readings = self._synthetic(device, count, historical)
        return {"body": [to_upstream_item(reading) for reading in readings]}

    async def live_snapshot(self, device_id: Optional[str] = None) -> LiveSnapshotResponse:
        device = self._device(device_id)
        readings, source = await self.load_readings(device)
        snapshot = build_snapshot(readings)
        return LiveSnapshotResponse(
            device_id=device,
            source=source,
            online=source is DataSource.upstream,
            latest=ReadingOut.model_validate(asdict(snapshot.latest)) if snapshot.latest else None,
            changes={
                metric: asdict(change) if change else None
                for metric, change in snapshot.changes.items()
            },
            battery_status=snapshot.battery_status,
            chart=[asdict(point) for point in snapshot.chart],
        )

    async def hourly_aggregates(
        self, device_id: Optional[str] = None, limit: Optional[int] = None
    ) -> AggregatesResponse:
        device = self._device(device_id)
        readings, source = await self.load_readings(device, limit, historical=True)
        buckets = self.statistics.hourly(readings, tz=self.settings.timezone)
        return AggregatesResponse(
            device_id=device,
            source=source,
            bucket=BucketKind.hour,
            reading_count=len(readings),
            buckets=_bucket_models(buckets),
            insights=hourly_insights(buckets),
        )

    async def weekday_aggregates(
        self, device_id: Optional[str] = None, limit: Optional[int] = None
    ) -> AggregatesResponse:
        device = self._device(device_id)
        readings, source = await self.load_readings(device, limit, historical=True)
        buckets = self.statistics.by_weekday(readings, tz=self.settings.timezone)
        return AggregatesResponse(
            device_id=device,
            source=source,
            bucket=BucketKind.weekday,
            reading_count=len(readings),
            buckets=_bucket_models(buckets),
        )

    async def daily_aggregates(
        self, device_id: Optional[str] = None, limit: Optional[int] = None
    ) -> AggregatesResponse:
        device = self._device(device_id)
        readings, source = await self.load_readings(device, limit, historical=True)
        buckets = self.statistics.by_day_offset(readings, now=self.clock())
        return AggregatesResponse(
            device_id=device,
            source=source,
            bucket=BucketKind.day_offset,
            reading_count=len(readings),
            buckets=_bucket_models(buckets),
        )

    async def forecast(self, device_id: Optional[str] = None, days: int = 7) -> ForecastResponse:
        device = self._device(device_id)
        readings, source = await self.load_readings(device, historical=True)
        now = self.clock()
        engine = ForecastEngine(
            rng=random.Random(self.settings.forecast_seed),
            statistics=self.statistics,
            tz=self.settings.timezone,
        )
        result = engine.forecast(readings, days, now=now)
        logger.info(
            "Computed forecast",
            extra={"device_id": device, "horizon_days": days, "reading_count": len(readings)},
        )
        return ForecastResponse(
            device_id=device,
            source=source,
            horizon_days=days,
            generated_at=now,
            predictions=[PredictionOut.model_validate(asdict(p)) for p in result.predictions],
            hotspots=[HotspotOut.model_validate(asdict(h)) for h in result.hotspots],
            insights=forecast_insights(result.predictions, result.hotspots),
        )


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the dashboard against the configured upstream."""
    settings = get_settings()
    return DashboardService(source=ReadingSource.from_settings(settings), settings=settings)
