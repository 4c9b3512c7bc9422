"""Heat-transfer aggregation for sensor samples."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable

from models.records import Sample
from services.errors import ComputationAnomaly

WATER_DENSITY_KG_M3 = 1000.0
WATER_SPECIFIC_HEAT_J_KGK = 4186.0
LPM_PER_M3S = 1000.0 * 60.0


@dataclass(frozen=True)
class HeatTransfer:
    """Instantaneous heat transfer derived from one sample."""

    flow_rate_lpm: float
    delta_t: float
    kilowatts: float


@dataclass
class AggregationSummary:
    """Sum of per-sample heat transfer over a window."""

    sample_count: int = 0
    total_kw: float = 0.0


def _number(value: Any, field: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ComputationAnomaly(f"{field} is not numeric: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ComputationAnomaly(f"{field} is not numeric: {value!r}") from exc


def heat_transfer(sample: Sample) -> HeatTransfer:
    """Compute the heat transfer rate of a single sample in kW.

    Missing flow and temperature readings count as zero. The temperature
    differential keeps its sign, so a reversed gradient yields a negative rate.
    """
    flow_rate_lpm = _number(sample.flow1, "Flow1") + _number(sample.flow2, "Flow2")
    delta_t = _number(sample.temp_c3, "tempC3") - _number(sample.temp_c4, "tempC4")

    flow_rate_m3s = flow_rate_lpm / LPM_PER_M3S
    mass_flow_rate = flow_rate_m3s * WATER_DENSITY_KG_M3
    watts = mass_flow_rate * WATER_SPECIFIC_HEAT_J_KGK * delta_t
    kilowatts = watts / 1000

    if not math.isfinite(kilowatts):
        raise ComputationAnomaly(
            f"Non-finite heat transfer for sample at {sample.time}: {kilowatts}"
        )
    return HeatTransfer(flow_rate_lpm=flow_rate_lpm, delta_t=delta_t, kilowatts=kilowatts)


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def summarize(self, samples: Iterable[Sample]) -> AggregationSummary:
        summary = AggregationSummary()
        for sample in samples:
            summary.sample_count += 1
            summary.total_kw += heat_transfer(sample).kilowatts

        # Sum of finite terms can still overflow.
        if not math.isfinite(summary.total_kw):
            raise ComputationAnomaly(f"Non-finite heat transfer total: {summary.total_kw}")
        return summary

    def aggregate(self, samples: Iterable[Sample]) -> float:
        """Sum per-sample heat transfer (kW); ``0`` for no samples.

        This is a sum over discrete readings, not a time integral, so the
        result scales with the sampling rate.
        """
        return self.summarize(samples).total_kw


def aggregate(samples: Iterable[Sample]) -> float:
    return Aggregator().aggregate(samples)
