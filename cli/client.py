from __future__ import annotations

from typing import Any, Dict
from urllib.parse import quote

import httpx
import typer

from cli.config import CLIConfig

# Response key -> route segment under /api/data/.
TOTAL_ROUTES: Dict[str, str] = {
    "fiveMinutesTotal": "five-minutes-total",
    "hourlyTotal": "hourly-total",
    "todayTotal": "today-total",
    "dailyTotal": "daily-total",
    "yesterdayTotal": "yesterday-total",
}


class ApiClient:
    """Minimal HTTP client for the dashboard API."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def get_latest(self, device_id: str) -> Dict[str, Any]:
        return self._get_json(f"/api/data/{quote(device_id, safe='')}")

    def get_total(self, device_id: str, key: str) -> float:
        route = TOTAL_ROUTES.get(key)
        if route is None:
            raise typer.BadParameter(f"Unknown total {key!r}.")
        payload = self._get_json(f"/api/data/{route}/{quote(device_id, safe='')}")
        return float(payload[key])

    def get_totals(self, device_id: str) -> Dict[str, float]:
        return {key: self.get_total(device_id, key) for key in TOTAL_ROUTES}

    def get_monthly_total(self, device_id: str, year: int, month: int) -> float:
        payload = self._get_json(
            f"/api/data/monthly-total/{quote(device_id, safe='')}/{year}/{month}"
        )
        return float(payload["monthlyTotal"])

    def _get_json(self, path: str) -> Dict[str, Any]:
        try:
            response = self._client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
