"""Windowed heat-transfer queries over the sample store."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import Optional

from datastore.sample_store import SampleStore, build_default_store
from models.records import Sample
from services.aggregator import Aggregator, HeatTransfer, heat_transfer
from services.errors import DataSourceError, NotFoundError
from services.windows import Window, WindowSpec, resolve
from settings import get_settings

logger = logging.getLogger(__name__)


class TelemetryService:
    """Resolves windows, reads samples and reduces them to heat-transfer totals."""

    def __init__(
        self,
        store: SampleStore,
        aggregator: Aggregator,
        timezone_name: str = "UTC",
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.timezone_name = timezone_name

    def resolve_window(self, spec: WindowSpec, now: Optional[datetime] = None) -> Window:
        return resolve(spec, now=now, timezone_name=self.timezone_name)

    def fetch_and_aggregate(
        self,
        device_id: str,
        spec: WindowSpec,
        now: Optional[datetime] = None,
    ) -> float:
        """Total heat transfer (kW summed over samples) for ``device_id`` in ``spec``."""
        window = self.resolve_window(spec, now)
        samples = self._query(device_id, window, spec)
        summary = self.aggregator.summarize(samples)
        logger.debug(
            "Aggregated heat transfer",
            extra={
                "device_id": device_id,
                "window": spec.describe(),
                "sample_count": summary.sample_count,
                "total_kw": summary.total_kw,
            },
        )
        return summary.total_kw

    def fetch_series(
        self,
        device_id: str,
        spec: WindowSpec,
        now: Optional[datetime] = None,
    ) -> list[Sample]:
        """Samples in the window, oldest first, with missing readings set to ``0``."""
        window = self.resolve_window(spec, now)
        return [sample.coalesced() for sample in self._query(device_id, window, spec)]

    def fetch_latest(self, device_id: str) -> Sample:
        try:
            sample = self.store.latest(device_id)
        except Exception as exc:
            logger.exception(
                "Latest sample lookup failed",
                extra={"device_id": device_id, "reason": str(exc)},
            )
            raise DataSourceError(f"Latest sample lookup failed for {device_id!r}") from exc

        if sample is None:
            raise NotFoundError(device_id)
        return sample.coalesced()

    def fetch_reading(self, device_id: str) -> tuple[Sample, HeatTransfer]:
        """Latest sample with its instantaneous heat transfer."""
        sample = self.fetch_latest(device_id)
        return sample, heat_transfer(sample)

    def _query(self, device_id: str, window: Window, spec: WindowSpec) -> list[Sample]:
        try:
            return self.store.query_range(device_id, window.start, window.end)
        except Exception as exc:
            logger.exception(
                "Sample query failed",
                extra={
                    "device_id": device_id,
                    "window": spec.describe(),
                    "start_time": window.start_time,
                    "end_time": window.end_time,
                    "reason": str(exc),
                },
            )
            raise DataSourceError(f"Sample query failed for {device_id!r}") from exc


@lru_cache
def build_default_service() -> TelemetryService:
    """Factory that wires the service with the default store."""
    settings = get_settings()
    return TelemetryService(
        store=build_default_store(),
        aggregator=Aggregator(),
        timezone_name=settings.timezone,
    )
