"""Macroeconomic domain models."""

from __future__ import annotations

import datetime as dt
import math
from typing import Literal

from pydantic import Field, field_validator

from macrodash.domain.models.base import ValueObject

LiquidityTrend = Literal["Expanding", "Contracting", "Unknown"]
RatesTrend = Literal["Easing", "Tightening", "Unknown"]
MacroRisk = Literal["Low", "Medium", "High", "Unknown"]
CacheState = Literal["fresh", "stale", "error"]


class Observation(ValueObject):
    """Value object representing one dated observation of a series."""

    date: dt.date = Field(..., description="Calendar date of the observation")
    value: float = Field(..., description="Observed value")

    @field_validator("value")
    @classmethod
    def _must_be_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("observation value must be finite")
        return value


class DatedValue(ValueObject):
    """A derived metric that may be unavailable."""

    date: dt.date | None = None
    value: float | None = None


class LiquidityPoint(ValueObject):
    """One row of the composite net liquidity series."""

    date: dt.date
    net_liquidity_index: float
    walcl: float
    rrp: float
    tga: float


class TrendInput(ValueObject):
    """Current value and trailing average of one regime signal."""

    current: float | None = None
    average: float | None = None


class Regime(ValueObject):
    """Qualitative liquidity/rates/risk classification."""

    liquidity: LiquidityTrend = "Unknown"
    rates: RatesTrend = "Unknown"
    macro_risk: MacroRisk = "Unknown"
    rationale: list[str] = Field(default_factory=list)


class SeriesStatus(ValueObject):
    """Fetch outcome of one indicator during a refresh cycle."""

    ok: bool
    error: str | None = None


class CalendarEvent(ValueObject):
    """Scheduled macro release or earnings date."""

    id: str
    type: Literal["macro", "earnings"]
    title: str
    subtitle: str | None = None
    date_iso: dt.date
    date: str
    note: str


class MacroMetrics(ValueObject):
    """Latest observation per indicator plus derived headline metrics."""

    fed_balance_sheet: Observation | None = None
    reverse_repo: Observation | None = None
    treasury_general_account: Observation | None = None
    ten_year_yield: Observation | None = None
    two_year_yield: Observation | None = None
    real_ten_year_yield: Observation | None = None
    dxy_broad: Observation | None = None
    curve_spread: DatedValue = Field(default_factory=DatedValue)
    net_liquidity_index: DatedValue = Field(default_factory=DatedValue)


class MacroPayload(ValueObject):
    """Aggregate root handed to dashboard consumers."""

    metrics: MacroMetrics = Field(default_factory=MacroMetrics)
    liquidity_series: list[LiquidityPoint] = Field(default_factory=list)
    regime: Regime = Field(default_factory=Regime)
    events: list[CalendarEvent] = Field(default_factory=list)
    series_status: dict[str, SeriesStatus] = Field(default_factory=dict)
    ok_series_count: int = 0
    total_series_count: int = 0
    generated_at: dt.datetime
    cache_state: CacheState | None = None
    cache_age_minutes: float | None = None


class CacheSnapshot(ValueObject):
    """The single persisted artifact: a payload and when it was cached."""

    cached_at: int = Field(..., description="Epoch milliseconds")
    payload: MacroPayload
