"""Exception hierarchy raised by the telemetry services."""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for errors surfaced to the HTTP layer."""

    public_message = "Telemetry request failed."


class NotFoundError(TelemetryError, LookupError):
    """No sample exists for the device in the requested scope."""

    def __init__(self, device_id: str) -> None:
        super().__init__(f"No data found for deviceId: {device_id}")
        self.device_id = device_id

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return str(self)


class DataSourceError(TelemetryError):
    """The sample store could not be queried."""

    public_message = "Failed to fetch data from the sample store."


class ComputationAnomaly(TelemetryError, ArithmeticError):
    """Aggregation produced a value that cannot be represented in JSON."""

    public_message = "Failed to compute heat transfer for the requested window."


class InvalidWindowError(TelemetryError, ValueError):
    """A window specification cannot be resolved."""

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return str(self)
