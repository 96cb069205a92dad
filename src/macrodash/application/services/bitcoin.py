"""Bitcoin history resolution and market views."""

from __future__ import annotations

import asyncio
import datetime as dt
from collections.abc import Iterable, Sequence

import structlog

from macrodash.domain.exceptions import DataProviderError, InsufficientHistoryError
from macrodash.domain.models.bitcoin import (
    BtcModelSeries,
    BtcQuote,
    BtcReturns,
    FearGreedReading,
    SmaPoint,
    StockToFlowPoint,
)
from macrodash.domain.models.macro import Observation
from macrodash.domain.ports.data_providers import BitcoinHistoryProvider
from macrodash.infrastructure.analysis.metrics import relative_strength_index, simple_moving_average
from macrodash.infrastructure.analysis.returns import compute_returns
from macrodash.infrastructure.analysis.stock_to_flow import model_price, stock_to_flow_ratio
from macrodash.infrastructure.data_providers.bitcoin import CoinGeckoProvider, FearGreedProvider

logger = structlog.get_logger(__name__)


def merge_histories(batches: Iterable[Sequence[Observation]]) -> list[Observation]:
    """Merge provider batches by date; later batches overwrite earlier ones."""
    by_date: dict[dt.date, Observation] = {}
    for batch in batches:
        for point in batch:
            by_date[point.date] = point
    return [by_date[d] for d in sorted(by_date)]


def month_end_closes(history: Sequence[Observation]) -> list[Observation]:
    """Last observation of each calendar month, ascending."""
    by_month: dict[tuple[int, int], Observation] = {}
    for point in sorted(history, key=lambda p: p.date):
        by_month[(point.date.year, point.date.month)] = point
    return [by_month[k] for k in sorted(by_month)]


class BtcHistoryResolver:
    """Builds one daily BTC/USD series from up to three independent providers.

    Providers are queried concurrently, each with its own deadline. Their order
    is the merge precedence: for a date present in several batches the provider
    listed last wins.
    """

    def __init__(
        self,
        providers: Sequence[BitcoinHistoryProvider],
        floor_date: dt.date = dt.date(2017, 9, 1),
    ) -> None:
        self._providers = list(providers)
        self._floor_date = floor_date

    @property
    def provider_names(self) -> list[str]:
        return [p.get_provider_name() for p in self._providers]

    @property
    def floor_date(self) -> dt.date:
        return self._floor_date

    async def get_daily_history(self) -> list[Observation]:
        """Resolve the merged history.

        Raises:
            InsufficientHistoryError: If the merge is empty or has no point at or
                before the floor date.
        """
        batches = await asyncio.gather(*(self._fetch(p) for p in self._providers))
        merged = merge_histories(batches)

        if not merged:
            raise InsufficientHistoryError("No BTC history available from any provider")
        if merged[0].date > self._floor_date:
            raise InsufficientHistoryError(
                f"BTC history starts {merged[0].date.isoformat()}, "
                f"needs coverage back to {self._floor_date.isoformat()}"
            )

        logger.debug(
            "Resolved BTC history",
            points=len(merged),
            first=merged[0].date.isoformat(),
            last=merged[-1].date.isoformat(),
        )
        return merged

    async def _fetch(self, provider: BitcoinHistoryProvider) -> list[Observation]:
        name = provider.get_provider_name()
        try:
            points = await provider.get_daily_history()
        except DataProviderError as e:
            logger.warning(
                "BTC history provider failed",
                provider=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []
        logger.debug("BTC history provider ok", provider=name, points=len(points))
        return points


class BitcoinMarketService:
    """Read-only BTC views for the dashboard."""

    def __init__(
        self,
        resolver: BtcHistoryResolver,
        quote_provider: CoinGeckoProvider,
        fear_greed_provider: FearGreedProvider,
        quote_timeout_seconds: float = 10.0,
        sma_window: int = 200,
        rsi_period: int = 14,
    ) -> None:
        self._resolver = resolver
        self._quote_provider = quote_provider
        self._fear_greed_provider = fear_greed_provider
        self._quote_timeout_seconds = quote_timeout_seconds
        self._sma_window = sma_window
        self._rsi_period = rsi_period

    async def get_quote(self) -> BtcQuote:
        return await self._quote_provider.get_quote(self._quote_timeout_seconds)

    async def get_fear_greed(self) -> FearGreedReading:
        return await self._fear_greed_provider.get_reading()

    async def get_history(self, days: int | None = None) -> list[Observation]:
        history = await self._resolver.get_daily_history()
        if days is None or days <= 0:
            return history
        cutoff = history[-1].date - dt.timedelta(days=days)
        return [p for p in history if p.date >= cutoff]

    async def get_returns(self) -> BtcReturns:
        return compute_returns(await self._resolver.get_daily_history())

    async def get_model(self) -> BtcModelSeries:
        history = await self._resolver.get_daily_history()
        return build_model_series(history, self._sma_window, self._rsi_period)


def build_model_series(
    history: Sequence[Observation],
    sma_window: int = 200,
    rsi_period: int = 14,
) -> BtcModelSeries:
    monthly = month_end_closes(history)
    rsi = relative_strength_index([p.value for p in monthly], rsi_period)
    monthly_points = []
    for point, rsi_value in zip(monthly, rsi, strict=True):
        ratio = stock_to_flow_ratio(point.date)
        monthly_points.append(
            StockToFlowPoint(
                date=point.date,
                price=point.value,
                stock_to_flow=round(ratio, 2) if ratio is not None else None,
                model_price=model_price(ratio),
                rsi=round(rsi_value, 2) if rsi_value is not None else None,
            )
        )

    sma = simple_moving_average([p.value for p in history], sma_window)
    daily_points = [
        SmaPoint(date=p.date, price=p.value, sma=s) for p, s in zip(history, sma, strict=True)
    ]
    return BtcModelSeries(
        monthly=monthly_points,
        daily=daily_points,
        sma_window=sma_window,
        rsi_period=rsi_period,
    )
