"""Translate service exceptions into ``{"error": ...}`` JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.errors import (
    ComputationAnomaly,
    DataSourceError,
    InvalidWindowError,
    NotFoundError,
    TelemetryError,
)

logger = logging.getLogger(__name__)

HTTP_422_UNPROCESSABLE = 422

_STATUS_BY_ERROR: dict[type[TelemetryError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidWindowError: HTTP_422_UNPROCESSABLE,
    DataSourceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ComputationAnomaly: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def status_for(exc: TelemetryError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TelemetryError)
    async def telemetry_error_handler(request: Request, exc: TelemetryError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed: %s",
                request.url.path,
                extra={"status": status_code, "reason": str(exc)},
            )
        return _error_response(status_code, exc.public_message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return _error_response(HTTP_422_UNPROCESSABLE, details or "Invalid request.")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error: %s",
            request.url.path,
            exc_info=exc,
            extra={"status": status.HTTP_500_INTERNAL_SERVER_ERROR, "reason": repr(exc)},
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, TelemetryError.public_message)
