from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import typer

_UNITS = {"temperature": "°C", "humidity": "%", "pressure": "Pa", "rain": "mm"}
_SEVERITY_COLORS = {"critical": typer.colors.RED, "high": typer.colors.YELLOW}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _fmt(value: Optional[float], digits: int = 1) -> str:
    if value is None:
        return "-"
    return f"{value:.{digits}f}"


def _echo_insights(insights: List[str]) -> None:
    for insight in insights:
        typer.echo(f"  * {insight}")


def render_latest(payload: Dict[str, Any]) -> None:
    echo_heading("Current Conditions")
    echo_key_values(
        [
            ("device_id", payload.get("device_id")),
            ("source", payload.get("source")),
            ("battery", payload.get("battery_status")),
        ]
    )
    latest = payload.get("latest")
    typer.echo()
    if not latest:
        typer.echo("No readings available.")
        return

    typer.echo(f"measured_at: {latest.get('measured_at')}")
    changes = payload.get("changes") or {}
    for metric, unit in _UNITS.items():
        line = f"{metric}: {_fmt(latest.get(metric))} {unit}"
        change = changes.get(metric)
        if change:
            arrow = "+" if change.get("direction") == "increase" else "-"
            line += f" ({arrow}{_fmt(change.get('percent'))}%)"
        typer.echo(line)


def render_hourly(payload: Dict[str, Any], hour: Optional[int] = None) -> None:
    echo_heading(f"Hourly Averages ({payload.get('reading_count')} readings, {payload.get('source')})")
    _echo_insights(payload.get("insights") or [])
    typer.echo()

    buckets = payload.get("buckets") or []
    if hour is not None:
        buckets = [bucket for bucket in buckets if bucket.get("key") == hour]

    for bucket in buckets:
        temperature = bucket.get("temperature") or {}
        humidity = bucket.get("humidity") or {}
        rain = bucket.get("rain") or {}
        if not temperature.get("count"):
            typer.echo(f"{bucket.get('key'):02d}:00  no readings")
            continue
        typer.echo(
            f"{bucket.get('key'):02d}:00  "
            f"{_fmt(temperature.get('average'))}°C "
            f"(±{_fmt(temperature.get('standard_deviation'))}, {temperature.get('trend')})  "
            f"{_fmt(humidity.get('average'))}%  "
            f"rain {_fmt((rain.get('probability') or 0) * 100, 0)}% {rain.get('intensity')}  "
            f"n={temperature.get('count')}"
        )


def render_forecast(payload: Dict[str, Any]) -> None:
    echo_heading(f"{payload.get('horizon_days')}-Day Forecast ({payload.get('source')})")
    predictions = payload.get("predictions") or []
    if not predictions:
        typer.echo("Not enough readings to build a forecast.")
        return

    _echo_insights(payload.get("insights") or [])
    typer.echo()
    for prediction in predictions:
        temperature = prediction.get("temperature") or {}
        rain = prediction.get("rain") or {}
        typer.echo(
            f"{prediction.get('date')} {prediction.get('day_name', ''):<9}  "
            f"{prediction.get('weather_condition'):<6}  "
            f"{_fmt(temperature.get('min'))}..{_fmt(temperature.get('max'))}°C  "
            f"rain {_fmt((rain.get('probability') or 0) * 100, 0)}%  "
            f"risk {prediction.get('risk_level')}  "
            f"conf {_fmt((temperature.get('confidence') or 0) * 100, 0)}%"
        )

    hotspots = payload.get("hotspots") or []
    typer.echo()
    echo_heading("Warnings")
    if not hotspots:
        typer.echo("No warnings.")
        return
    for hotspot in hotspots:
        typer.secho(
            f"  - {hotspot.get('date')} [{hotspot.get('severity')}] {hotspot.get('description')}",
            fg=_SEVERITY_COLORS.get(hotspot.get("severity")),
        )


def render_locations(locations: List[Dict[str, Any]]) -> None:
    echo_heading("Locations")
    for location in locations:
        typer.echo(
            f"  - {location.get('id')}: {location.get('name')} "
            f"({location.get('device_id')}) {location.get('description')}"
        )
