from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from models.records import Sample
from services.aggregator import HeatTransfer
from services.errors import ComputationAnomaly, NotFoundError
from services.telemetry import TelemetryService, build_default_service
from settings import Settings, get_settings


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_service() -> TelemetryService:
    return build_default_service()


def get_ui_settings() -> Settings:
    return get_settings()


def _initial_reading(
    service: TelemetryService, device_id: str
) -> tuple[Optional[Sample], Optional[HeatTransfer]]:
    try:
        return service.fetch_reading(device_id)
    except NotFoundError:
        return None, None
    except ComputationAnomaly:
        return service.fetch_latest(device_id), None


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    service: TelemetryService = Depends(get_service),
    settings: Settings = Depends(get_ui_settings),
) -> HTMLResponse:
    return _render_dashboard(request, settings.device_id, service, settings)


@router.get("/ui/{device_id}", name="ui_device", response_class=HTMLResponse)
async def ui_device(
    request: Request,
    device_id: str,
    service: TelemetryService = Depends(get_service),
    settings: Settings = Depends(get_ui_settings),
) -> HTMLResponse:
    return _render_dashboard(request, device_id, service, settings)


def _render_dashboard(
    request: Request,
    device_id: str,
    service: TelemetryService,
    settings: Settings,
) -> HTMLResponse:
    sample, reading = _initial_reading(service, device_id)
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "device_id": device_id,
            "sample": sample,
            "reading": reading,
            "poll_interval_ms": settings.poll_interval_ms,
        },
    )
