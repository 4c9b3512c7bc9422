from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Any, Iterable

from settings import get_settings

# Fields the telemetry service and error handlers pass through ``extra=``.
TELEMETRY_CONTEXT_KEYS = (
    "device_id",
    "window",
    "start_time",
    "end_time",
    "sample_count",
    "total_kw",
    "reason",
    "status",
)

_configured = False


def _render(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


class ContextualFormatter(logging.Formatter):
    """UTC formatter that suffixes records with their telemetry context."""

    converter = time.gmtime

    def __init__(self, *args: Any, extra_keys: Iterable[str] = TELEMETRY_CONTEXT_KEYS, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.extra_keys = tuple(extra_keys)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = " ".join(
            f"{key}={_render(getattr(record, key))}"
            for key in self.extra_keys
            if getattr(record, key, None) is not None
        )
        return f"{message} | {context}" if context else message


def configure_logging(level: str | int | None = None) -> None:
    """Route root and uvicorn loggers through the contextual formatter once per process."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else get_settings().log_level
    handler = {"handlers": ["console"], "level": log_level, "propagate": False}

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "telemetry": {
                    "()": ContextualFormatter,
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "telemetry",
                }
            },
            "loggers": {"uvicorn": dict(handler), "uvicorn.access": dict(handler)},
            "root": {"handlers": ["console"], "level": log_level},
        }
    )

    _configured = True
