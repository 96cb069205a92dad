"""Domain models for macrodash."""

from macrodash.domain.models.bitcoin import (
    BtcModelSeries,
    BtcQuote,
    BtcReturns,
    FearGreedReading,
    SmaPoint,
    StockToFlowPoint,
)
from macrodash.domain.models.macro import (
    CacheSnapshot,
    CacheState,
    CalendarEvent,
    DatedValue,
    LiquidityPoint,
    MacroMetrics,
    MacroPayload,
    Observation,
    Regime,
    SeriesStatus,
    TrendInput,
)

__all__ = [
    "Observation",
    "DatedValue",
    "LiquidityPoint",
    "TrendInput",
    "Regime",
    "SeriesStatus",
    "CalendarEvent",
    "MacroMetrics",
    "MacroPayload",
    "CacheSnapshot",
    "CacheState",
    # Bitcoin
    "BtcQuote",
    "BtcReturns",
    "FearGreedReading",
    "StockToFlowPoint",
    "SmaPoint",
    "BtcModelSeries",
]
