from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_forecast, render_hourly, render_latest, render_locations


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Query the weather station dashboard from the terminal.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    device_id: Optional[str] = typer.Option(
        None,
        "--device-id",
        "-d",
        help="Station device id (defaults to CLI_DEVICE_ID env or the server default).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, device_id=device_id, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the newest reading and its change against the previous one."""
    state = _get_state(ctx)
    render_latest(state.client.get_latest())


@app.command("hourly")
def hourly_command(
    ctx: typer.Context,
    hour: Optional[int] = typer.Option(
        None, "--hour", min=0, max=23, help="Only show this hour of the day."
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", min=1, help="Number of historical readings to aggregate."
    ),
) -> None:
    """Show per-hour averages, spread and trend."""
    state = _get_state(ctx)
    render_hourly(state.client.get_hourly(limit=limit), hour=hour)


@app.command("forecast")
def forecast_command(
    ctx: typer.Context,
    days: int = typer.Option(7, "--days", help="Forecast horizon: 7, 14 or 30."),
) -> None:
    """Show the day-by-day forecast and any warnings."""
    if days not in (7, 14, 30):
        raise typer.BadParameter("days must be one of 7, 14 or 30.", param_hint="--days")
    state = _get_state(ctx)
    render_forecast(state.client.get_forecast(days))


@app.command("locations")
def locations_command(ctx: typer.Context) -> None:
    """List the stations the dashboard knows about."""
    state = _get_state(ctx)
    render_locations(state.client.get_locations())
