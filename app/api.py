"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import AggregatesResponse, ForecastResponse, LiveSnapshotResponse, LocationOut
from models.locations import LOCATIONS, get_location
from services.dashboard import DashboardService, build_default_dashboard

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


@router.get(
    "/api/weather",
    summary="Proxy the newest readings from the upstream station API.",
)
async def proxy_weather(
    device_id: Optional[str] = Query(None, alias="deviceId"),
    limit: Optional[int] = Query(None, ge=1, le=5000),
    dashboard: DashboardService = Depends(get_dashboard),
) -> Dict[str, Any]:
    return await dashboard.proxy_payload(device_id, limit)


@router.get(
    "/api/weather/historical",
    summary="Proxy a longer window of readings for statistics and forecasting.",
)
async def proxy_historical_weather(
    device_id: Optional[str] = Query(None, alias="deviceId"),
    limit: Optional[int] = Query(None, ge=1, le=5000),
    dashboard: DashboardService = Depends(get_dashboard),
) -> Dict[str, Any]:
    return await dashboard.proxy_payload(device_id, limit, historical=True)


@router.get(
    "/readings/latest",
    response_model=LiveSnapshotResponse,
    summary="Latest reading, change against the previous one and a 24-point chart.",
)
async def latest_readings(
    device_id: Optional[str] = None,
    dashboard: DashboardService = Depends(get_dashboard),
) -> LiveSnapshotResponse:
    return await dashboard.live_snapshot(device_id)


@router.get(
    "/aggregates/hourly",
    response_model=AggregatesResponse,
    summary="Statistics for each hour of the day.",
)
async def hourly_aggregates(
    device_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=5000),
    dashboard: DashboardService = Depends(get_dashboard),
) -> AggregatesResponse:
    return await dashboard.hourly_aggregates(device_id, limit)


@router.get(
    "/aggregates/weekday",
    response_model=AggregatesResponse,
    summary="Statistics for each weekday (Monday=0).",
)
async def weekday_aggregates(
    device_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=5000),
    dashboard: DashboardService = Depends(get_dashboard),
) -> AggregatesResponse:
    return await dashboard.weekday_aggregates(device_id, limit)


@router.get(
    "/aggregates/daily",
    response_model=AggregatesResponse,
    summary="Statistics for each of the last seven days (0 = today).",
)
async def daily_aggregates(
    device_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=5000),
    dashboard: DashboardService = Depends(get_dashboard),
) -> AggregatesResponse:
    return await dashboard.daily_aggregates(device_id, limit)


@router.get(
    "/forecast",
    response_model=ForecastResponse,
    summary="Heuristic multi-day forecast with hotspot warnings.",
)
async def forecast(
    device_id: Optional[str] = None,
    days: int = Query(7, description="Forecast horizon: 7, 14 or 30 days."),
    dashboard: DashboardService = Depends(get_dashboard),
) -> ForecastResponse:
    try:
        return await dashboard.forecast(device_id, days)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc


@router.get(
    "/locations",
    response_model=List[LocationOut],
    summary="Weather stations available to the dashboard.",
)
async def list_locations() -> List[LocationOut]:
    return [LocationOut.model_validate(location, from_attributes=True) for location in LOCATIONS]


@router.get(
    "/locations/{location_id}",
    response_model=LocationOut,
    summary="Look up a single weather station.",
)
async def location_detail(location_id: str) -> LocationOut:
    try:
        location = get_location(location_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return LocationOut.model_validate(location, from_attributes=True)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
