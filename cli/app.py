from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_latest, render_totals
from datastore.sample_store import build_default_store
from models.records import Sample


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for reading heat-transfer data from the dashboard service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _device(state: CLIState, device_id: Optional[str]) -> str:
    return device_id or state.config.device_id


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
        "--device",
        "-d",
        help="Device identifier (defaults to CLI_DEVICE_ID env or hainetukaishu).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between refreshes for the watch command.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(
        base_url=base_url,
        device_id=device_id,
        poll_interval=poll_interval,
    )
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("latest")
def latest_command(
    ctx: typer.Context,
    device_id: Optional[str] = typer.Argument(None, help="Device to query."),
) -> None:
    """Show the most recent sample and its instantaneous heat transfer."""
    state = _get_state(ctx)
    render_latest(state.client.get_latest(_device(state, device_id)))


@app.command("totals")
def totals_command(
    ctx: typer.Context,
    device_id: Optional[str] = typer.Argument(None, help="Device to query."),
) -> None:
    """Show the rolling and calendar heat-transfer totals."""
    state = _get_state(ctx)
    render_totals(state.client.get_totals(_device(state, device_id)))


@app.command("monthly")
def monthly_command(
    ctx: typer.Context,
    year: int = typer.Argument(..., help="Calendar year, e.g. 2024."),
    month: int = typer.Argument(..., min=1, max=12, help="Month number (1-12)."),
    device_id: Optional[str] = typer.Option(None, "--device-id", help="Device to query."),
) -> None:
    """Show the heat-transfer total for a calendar month."""
    state = _get_state(ctx)
    total = state.client.get_monthly_total(_device(state, device_id), year, month)
    typer.echo(f"monthly_total {year:04d}-{month:02d}: {total:.2f} kW")


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    device_id: Optional[str] = typer.Argument(None, help="Device to query."),
    count: int = typer.Option(0, "--count", "-n", min=0, help="Stop after N refreshes (0 runs until interrupted)."),
) -> None:
    """Poll the latest sample and totals on a fixed interval."""
    state = _get_state(ctx)
    device = _device(state, device_id)
    iteration = 0
    while True:
        render_latest(state.client.get_latest(device))
        typer.echo()
        render_totals(state.client.get_totals(device))
        iteration += 1
        if count and iteration >= count:
            return
        typer.echo()
        time.sleep(state.config.poll_interval)


@app.command("import")
def import_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON array of sample documents."),
) -> None:
    """Load sample documents into the local sample store."""
    try:
        documents = json.loads(file.read_text())
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{file} is not valid JSON: {exc}") from exc
    if not isinstance(documents, list):
        raise typer.BadParameter(f"{file} must contain a JSON array of samples.")

    try:
        samples = [Sample.from_document(document) for document in documents]
    except (AttributeError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    store = build_default_store()
    imported = store.put_samples(samples)
    typer.secho(f"Imported {imported} samples into {store.name!r}.", fg=typer.colors.GREEN)
