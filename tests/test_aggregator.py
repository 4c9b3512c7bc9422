"""Unit tests for the heat-transfer aggregation."""

from __future__ import annotations

import math

import pytest

from models.records import Sample
from services.aggregator import Aggregator, aggregate, heat_transfer
from services.errors import ComputationAnomaly


def _sample(**values) -> Sample:
    """Helper to build a sample at a fixed timestamp."""

    return Sample(device="d1", time="2024-01-01T00:00:00.000Z", **values)


def test_aggregate_empty_sequence_is_zero() -> None:
    assert aggregate([]) == 0


def test_single_sample_heat_transfer() -> None:
    sample = _sample(flow1=60, flow2=0, temp_c3=50, temp_c4=40)

    assert aggregate([sample]) == pytest.approx(41.86)


def test_missing_fields_count_as_zero_and_keep_sign() -> None:
    sample = _sample(flow1=None, flow2=30, temp_c3=None, temp_c4=5)

    reading = heat_transfer(sample)

    assert reading.flow_rate_lpm == 30
    assert reading.delta_t == -5
    assert aggregate([sample]) == pytest.approx(-10.465)


def test_zero_values_are_not_replaced() -> None:
    sample = _sample(flow1=0, flow2=0, temp_c3=80, temp_c4=20)

    assert aggregate([sample]) == 0


def test_aggregate_is_plain_sum_over_samples() -> None:
    samples = [
        _sample(flow1=60, flow2=0, temp_c3=50, temp_c4=40),
        _sample(flow1=30, flow2=30, temp_c3=45, temp_c4=40),
        _sample(flow1=12, flow2=0, temp_c3=40, temp_c4=50),
    ]

    expected = sum(heat_transfer(sample).kilowatts for sample in samples)

    assert aggregate(samples) == pytest.approx(expected)
    assert Aggregator().summarize(samples).sample_count == 3


def test_numeric_strings_are_accepted() -> None:
    sample = _sample(flow1="60", flow2="0", temp_c3="50", temp_c4="40")

    assert aggregate([sample]) == pytest.approx(41.86)


@pytest.mark.parametrize(
    "values",
    [
        {"flow1": "fast", "temp_c3": 50},
        {"flow1": 10, "temp_c3": math.nan},
        {"flow1": math.inf, "temp_c3": 10},
        {"flow1": True, "temp_c3": 10},
    ],
)
def test_non_numeric_or_non_finite_values_raise(values) -> None:
    with pytest.raises(ComputationAnomaly):
        aggregate([_sample(**values)])


def test_overflowing_total_raises() -> None:
    # Each sample is finite on its own; the running sum is not.
    large = _sample(flow1=1e300, temp_c3=1.4e6)
    assert math.isfinite(heat_transfer(large).kilowatts)

    with pytest.raises(ComputationAnomaly):
        aggregate([large] * 2000)
