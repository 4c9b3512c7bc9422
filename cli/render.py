from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

import typer

from models.records import Sample
from services.aggregator import heat_transfer
from services.errors import ComputationAnomaly

TOTAL_LABELS = {
    "fiveMinutesTotal": "five_minutes",
    "hourlyTotal": "hourly",
    "todayTotal": "today_so_far",
    "dailyTotal": "daily",
    "yesterdayTotal": "yesterday",
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_latest(payload: Dict[str, Any]) -> None:
    echo_heading("Latest Data")
    echo_key_values(
        [
            ("device", payload.get("device")),
            ("time", payload.get("time")),
            ("Flow1", payload.get("Flow1")),
            ("Flow2", payload.get("Flow2")),
            ("tempC3", payload.get("tempC3")),
            ("tempC4", payload.get("tempC4")),
        ]
    )
    try:
        reading = heat_transfer(Sample.from_document(payload))
    except (ValueError, ComputationAnomaly):
        typer.echo("heat_transfer_kw: n/a")
        return
    echo_key_values(
        [
            ("flow_rate_lpm", f"{reading.flow_rate_lpm:.2f}"),
            ("delta_t", f"{reading.delta_t:.2f}"),
            ("heat_transfer_kw", f"{reading.kilowatts:.2f}"),
        ]
    )


def render_totals(totals: Mapping[str, float]) -> None:
    echo_heading("Cumulative Data (kW)")
    echo_key_values(
        (TOTAL_LABELS.get(key, key), f"{value:.2f}") for key, value in totals.items()
    )
