"""Resolve window specifications into concrete UTC time ranges.

Calendar windows (today, yesterday, a named month) are aligned to local
midnight in the configured time zone and converted to UTC, so a local day
may span 23 or 25 hours across DST transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional

import pytz

from models.records import format_timestamp
from services.errors import InvalidWindowError

__all__ = [
    "Window",
    "WindowKind",
    "WindowSpec",
    "resolve",
]

_END_OF_DAY = time(23, 59, 59, 999000)


class WindowKind(str, Enum):
    """Supported window shapes."""

    rolling = "rolling"
    today_so_far = "today_so_far"
    today = "today"
    yesterday = "yesterday"
    month = "month"


@dataclass(frozen=True)
class WindowSpec:
    kind: WindowKind
    minutes: Optional[int] = None
    year: Optional[int] = None
    month: Optional[int] = None

    @classmethod
    def last_minutes(cls, minutes: int) -> "WindowSpec":
        return cls(kind=WindowKind.rolling, minutes=minutes)

    @classmethod
    def today_so_far(cls) -> "WindowSpec":
        return cls(kind=WindowKind.today_so_far)

    @classmethod
    def full_today(cls) -> "WindowSpec":
        return cls(kind=WindowKind.today)

    @classmethod
    def full_yesterday(cls) -> "WindowSpec":
        return cls(kind=WindowKind.yesterday)

    @classmethod
    def full_month(cls, year: int, month: int) -> "WindowSpec":
        return cls(kind=WindowKind.month, year=year, month=month)

    def describe(self) -> str:
        if self.kind is WindowKind.rolling:
            return f"last-{self.minutes}-minutes"
        if self.kind is WindowKind.month:
            return f"month-{self.year:04d}-{self.month:02d}"
        return self.kind.value


@dataclass(frozen=True)
class Window:
    """Inclusive ``[start, end]`` range in UTC."""

    start: datetime
    end: datetime

    @property
    def start_time(self) -> str:
        return format_timestamp(self.start)

    @property
    def end_time(self) -> str:
        return format_timestamp(self.end)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def _get_timezone(timezone_name: str) -> pytz.BaseTzInfo:
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError as exc:
        raise InvalidWindowError(f"Unknown time zone: {timezone_name}") from exc


def _local_instant(tz: pytz.BaseTzInfo, day: date, at: time) -> datetime:
    try:
        return tz.localize(datetime.combine(day, at)).astimezone(pytz.UTC)
    except OverflowError as exc:
        raise InvalidWindowError(f"{day.isoformat()} is outside the supported date range.") from exc


def _full_day(tz: pytz.BaseTzInfo, day: date) -> Window:
    return Window(
        start=_local_instant(tz, day, time.min),
        end=_local_instant(tz, day, _END_OF_DAY),
    )


def _full_month(tz: pytz.BaseTzInfo, year: int, month: int) -> Window:
    if not 1 <= month <= 12:
        raise InvalidWindowError(f"Month must be between 1 and 12, got {month}.")
    if not 1 <= year <= 9998:
        raise InvalidWindowError(f"Year out of range: {year}.")

    first_day = date(year, month, 1)
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    last_day = next_month - timedelta(days=1)

    return Window(
        start=_local_instant(tz, first_day, time.min),
        end=_local_instant(tz, last_day, _END_OF_DAY),
    )


def resolve(
    spec: WindowSpec,
    now: Optional[datetime] = None,
    timezone_name: str = "UTC",
) -> Window:
    """Compute the concrete UTC range for ``spec`` relative to ``now``."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(pytz.UTC)

    tz = _get_timezone(timezone_name)
    local_today = now.astimezone(tz).date()

    if spec.kind is WindowKind.rolling:
        if spec.minutes is None or spec.minutes <= 0:
            raise InvalidWindowError(
                f"Rolling window length must be a positive number of minutes, got {spec.minutes}."
            )
        try:
            start = now - timedelta(milliseconds=spec.minutes * 60_000)
        except OverflowError as exc:
            raise InvalidWindowError(
                f"Rolling window of {spec.minutes} minutes reaches before year 1."
            ) from exc
        return Window(start=start, end=now)

    if spec.kind is WindowKind.today_so_far:
        return Window(start=_local_instant(tz, local_today, time.min), end=now)

    if spec.kind is WindowKind.today:
        return _full_day(tz, local_today)

    if spec.kind is WindowKind.yesterday:
        return _full_day(tz, local_today - timedelta(days=1))

    if spec.kind is WindowKind.month:
        if spec.year is None or spec.month is None:
            raise InvalidWindowError("Monthly window requires both year and month.")
        return _full_month(tz, spec.year, spec.month)

    raise InvalidWindowError(f"Unknown window kind: {spec.kind}")
