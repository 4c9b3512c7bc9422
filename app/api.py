"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from app.schemas import (
    DailyTotal,
    ErrorResponse,
    FiveMinutesTotal,
    HourlyTotal,
    LatestReading,
    MonthlyTotal,
    SampleDocument,
    SeriesResponse,
    TodayTotal,
    YesterdayTotal,
    round_total,
)
from services.telemetry import TelemetryService, build_default_service
from services.windows import WindowSpec

router = APIRouter()

_ERROR_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def get_service() -> TelemetryService:
    return build_default_service()


@router.get(
    "/api/data/five-minutes-total/{device_id}",
    response_model=FiveMinutesTotal,
    responses=_ERROR_RESPONSES,
    summary="Heat transfer summed over the last five minutes.",
)
async def five_minutes_total(
    device_id: str,
    service: TelemetryService = Depends(get_service),
) -> FiveMinutesTotal:
    total = service.fetch_and_aggregate(device_id, WindowSpec.last_minutes(5))
    return FiveMinutesTotal(fiveMinutesTotal=round_total(total))


@router.get(
    "/api/data/hourly-total/{device_id}",
    response_model=HourlyTotal,
    responses=_ERROR_RESPONSES,
    summary="Heat transfer summed over the last hour.",
)
async def hourly_total(
    device_id: str,
    service: TelemetryService = Depends(get_service),
) -> HourlyTotal:
    total = service.fetch_and_aggregate(device_id, WindowSpec.last_minutes(60))
    return HourlyTotal(hourlyTotal=round_total(total))


@router.get(
    "/api/data/daily-total/{device_id}",
    response_model=DailyTotal,
    responses=_ERROR_RESPONSES,
    summary="Heat transfer summed over the current calendar day.",
)
async def daily_total(
    device_id: str,
    service: TelemetryService = Depends(get_service),
) -> DailyTotal:
    total = service.fetch_and_aggregate(device_id, WindowSpec.full_today())
    return DailyTotal(dailyTotal=round_total(total))


@router.get(
    "/api/data/today-total/{device_id}",
    response_model=TodayTotal,
    responses=_ERROR_RESPONSES,
    summary="Heat transfer summed from local midnight until now.",
)
async def today_total(
    device_id: str,
    service: TelemetryService = Depends(get_service),
) -> TodayTotal:
    total = service.fetch_and_aggregate(device_id, WindowSpec.today_so_far())
    return TodayTotal(todayTotal=round_total(total))


@router.get(
    "/api/data/yesterday-total/{device_id}",
    response_model=YesterdayTotal,
    responses=_ERROR_RESPONSES,
    summary="Heat transfer summed over the previous calendar day.",
)
async def yesterday_total(
    device_id: str,
    service: TelemetryService = Depends(get_service),
) -> YesterdayTotal:
    total = service.fetch_and_aggregate(device_id, WindowSpec.full_yesterday())
    return YesterdayTotal(yesterdayTotal=round_total(total))


@router.get(
    "/api/data/monthly-total/{device_id}/{year}/{month}",
    response_model=MonthlyTotal,
    responses=_ERROR_RESPONSES,
    summary="Heat transfer summed over a calendar month.",
)
async def monthly_total(
    device_id: str,
    year: int,
    month: int,
    service: TelemetryService = Depends(get_service),
) -> MonthlyTotal:
    total = service.fetch_and_aggregate(device_id, WindowSpec.full_month(year, month))
    return MonthlyTotal(monthlyTotal=round_total(total))


@router.get(
    "/api/data/reading/{device_id}",
    response_model=LatestReading,
    responses=_ERROR_RESPONSES,
    summary="Flow rate, temperature difference and heat transfer of the latest sample.",
)
async def latest_reading(
    device_id: str,
    service: TelemetryService = Depends(get_service),
) -> LatestReading:
    sample, reading = service.fetch_reading(device_id)
    return LatestReading(
        device=sample.device,
        time=sample.time,
        flowRateLpm=round_total(reading.flow_rate_lpm),
        deltaT=round_total(reading.delta_t),
        heatTransfer=round_total(reading.kilowatts),
    )


@router.get(
    "/api/data/series/{device_id}",
    response_model=SeriesResponse,
    responses=_ERROR_RESPONSES,
    summary="Samples recorded over the last N minutes, oldest first.",
)
async def series(
    device_id: str,
    minutes: int = Query(60, gt=0, le=60 * 24 * 31),
    service: TelemetryService = Depends(get_service),
) -> SeriesResponse:
    samples = service.fetch_series(device_id, WindowSpec.last_minutes(minutes))
    return SeriesResponse(samples=[SampleDocument.from_sample(s) for s in samples])


@router.get(
    "/api/data/{device_id}",
    response_model=SampleDocument,
    response_model_by_alias=True,
    responses=_ERROR_RESPONSES,
    summary="Most recent sample for a device.",
)
async def latest_sample(
    device_id: str,
    service: TelemetryService = Depends(get_service),
) -> SampleDocument:
    return SampleDocument.from_sample(service.fetch_latest(device_id))


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
