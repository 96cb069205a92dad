"""Bitcoin market domain models."""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from macrodash.domain.models.base import ValueObject


class BtcQuote(ValueObject):
    """Spot price snapshot.

    Serialized with CoinGecko's own snake_case keys, which the dashboard front
    end reads directly.
    """

    usd: float
    usd_24h_change: float | None = Field(default=None, alias="usd_24h_change")
    last_updated_at: int | None = Field(default=None, alias="last_updated_at")


class BtcReturns(ValueObject):
    """Trailing percent returns."""

    day1: float | None = None
    day7: float | None = None
    day30: float | None = None
    ytd: float | None = None


class FearGreedReading(ValueObject):
    value: float | None = None
    classification: str = "Unknown"
    updated_at: dt.datetime | None = None
    source: str = "alternative.me"


class StockToFlowPoint(ValueObject):
    """Month-end close with stock-to-flow model and RSI."""

    date: dt.date
    price: float
    stock_to_flow: float | None = None
    model_price: float | None = None
    rsi: float | None = None


class SmaPoint(ValueObject):
    date: dt.date
    price: float
    sma: float | None = None


class BtcModelSeries(ValueObject):
    """Stock-to-flow/RSI monthly series and the daily moving average."""

    monthly: list[StockToFlowPoint]
    daily: list[SmaPoint]
    sma_window: int
    rsi_period: int
