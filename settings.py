from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import pytz


_STORE_NAME_ENV = "SAMPLE_STORE_NAME"
_STORE_PATH_ENV = "SAMPLE_STORE_PERSISTENCE_PATH"
_DEVICE_ID_ENV = "DASHBOARD_DEVICE_ID"
_TIMEZONE_ENV = "DASHBOARD_TIMEZONE"
_POLL_INTERVAL_ENV = "DASHBOARD_POLL_INTERVAL_MS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    store_name: str
    store_persistence_path: Optional[str]
    device_id: str
    timezone: str
    poll_interval_ms: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_timezone(default: str) -> str:
    candidate = _read_str_env(_TIMEZONE_ENV, default)
    if candidate not in pytz.all_timezones_set:
        return default
    return candidate


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        store_name=_read_str_env(_STORE_NAME_ENV, "telemetry"),
        store_persistence_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/samples.json"),
        device_id=_read_str_env(_DEVICE_ID_ENV, "hainetukaishu"),
        timezone=_read_timezone("UTC"),
        poll_interval_ms=_read_positive_int(_POLL_INTERVAL_ENV, 5000),
        log_level=_read_log_level("INFO"),
    )
