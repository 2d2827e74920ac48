from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from models.locations import LOCATIONS, find_location_by_device, get_default_location
from services.dashboard import DashboardService, build_default_dashboard


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


def _hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


templates.env.filters["hour_label"] = _hour_label


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    device_id: Optional[str] = None,
    dashboard: DashboardService = Depends(get_dashboard),
) -> HTMLResponse:
    device = device_id or get_default_location().device_id
    snapshot = await dashboard.live_snapshot(device)
    hourly = await dashboard.hourly_aggregates(device)
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "snapshot": snapshot,
            "hourly": hourly,
            "locations": LOCATIONS,
            "location": find_location_by_device(device),
        },
    )


@router.get("/ui/forecast", name="ui_forecast", response_class=HTMLResponse)
async def ui_forecast(
    request: Request,
    device_id: Optional[str] = None,
    days: int = Query(7),
    dashboard: DashboardService = Depends(get_dashboard),
) -> HTMLResponse:
    device = device_id or get_default_location().device_id
    try:
        result = await dashboard.forecast(device, days)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    return templates.TemplateResponse(
        request,
        "ui/forecast.html",
        {
            "forecast": result,
            "locations": LOCATIONS,
            "location": find_location_by_device(device),
        },
    )
