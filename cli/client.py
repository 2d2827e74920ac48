from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the dashboard service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def _params(self, **extra: Any) -> Dict[str, Any]:
        params = {key: value for key, value in extra.items() if value is not None}
        if self._config.device_id:
            params["device_id"] = self._config.device_id
        return params

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1)
        return response.json()

    def get_latest(self) -> Dict[str, Any]:
        return self._get("/readings/latest", self._params())

    def get_hourly(self, limit: Optional[int] = None) -> Dict[str, Any]:
        return self._get("/aggregates/hourly", self._params(limit=limit))

    def get_forecast(self, days: int) -> Dict[str, Any]:
        return self._get("/forecast", self._params(days=days))

    def get_locations(self) -> List[Dict[str, Any]]:
        return self._get("/locations")

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except ValueError:
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
