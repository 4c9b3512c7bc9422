"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models.records import Sample

Reading = Union[float, int, str]


def round_total(value: float) -> float:
    """Round an aggregate to the two decimals exposed by the API."""
    return round(value, 2)


class SampleDocument(BaseModel):
    """A stored sensor reading, keyed by the device's document field names."""

    model_config = ConfigDict(populate_by_name=True)

    device: str
    time: str
    flow1: Optional[Reading] = Field(default=None, alias="Flow1")
    flow2: Optional[Reading] = Field(default=None, alias="Flow2")
    temp_c1: Optional[Reading] = Field(default=None, alias="tempC1")
    temp_c2: Optional[Reading] = Field(default=None, alias="tempC2")
    temp_c3: Optional[Reading] = Field(default=None, alias="tempC3")
    temp_c4: Optional[Reading] = Field(default=None, alias="tempC4")

    @classmethod
    def from_sample(cls, sample: Sample) -> "SampleDocument":
        return cls.model_validate(sample.to_document())


class LatestReading(BaseModel):
    """Instantaneous heat transfer derived from the most recent sample."""

    device: str
    time: str
    flow_rate_lpm: float = Field(..., alias="flowRateLpm")
    delta_t: float = Field(..., alias="deltaT")
    heat_transfer: float = Field(..., alias="heatTransfer", description="kW")


class SeriesResponse(BaseModel):
    samples: List[SampleDocument] = Field(default_factory=list)


class FiveMinutesTotal(BaseModel):
    five_minutes_total: float = Field(..., alias="fiveMinutesTotal")


class HourlyTotal(BaseModel):
    hourly_total: float = Field(..., alias="hourlyTotal")


class DailyTotal(BaseModel):
    daily_total: float = Field(..., alias="dailyTotal")


class YesterdayTotal(BaseModel):
    yesterday_total: float = Field(..., alias="yesterdayTotal")


class TodayTotal(BaseModel):
    today_total: float = Field(..., alias="todayTotal")


class MonthlyTotal(BaseModel):
    monthly_total: float = Field(..., alias="monthlyTotal")


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    error: str
