"""Bitcoin price providers: CoinGecko, Binance, CryptoCompare and alternative.me.

Each provider has an explicit response schema and an adapter that maps the raw
response into ``Observation`` values, failing fast on schema mismatch.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ValidationError

from macrodash.domain.exceptions import TransportFailureError
from macrodash.domain.models.bitcoin import BtcQuote, FearGreedReading
from macrodash.domain.models.macro import Observation
from macrodash.domain.ports.data_providers import BitcoinHistoryProvider
from macrodash.infrastructure.fetcher import HttpFetcher

logger = structlog.get_logger(__name__)


def _utc_date(epoch_seconds: float) -> dt.date:
    return dt.datetime.fromtimestamp(epoch_seconds, tz=dt.UTC).date()


def _epoch_ms(day: dt.date) -> int:
    return int(dt.datetime(day.year, day.month, day.day, tzinfo=dt.UTC).timestamp() * 1000)


def _validate(schema: type[BaseModel], payload: Any, provider: str) -> Any:
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise TransportFailureError(
            f"Unexpected {provider} response schema: {e.error_count()} errors"
        ) from e


# CoinGecko


class CoinGeckoMarketChart(BaseModel):
    prices: list[tuple[float, float]]


class CoinGeckoSimplePriceEntry(BaseModel):
    usd: float
    usd_24h_change: float | None = None
    last_updated_at: int | None = None


class CoinGeckoSimplePrice(BaseModel):
    bitcoin: CoinGeckoSimplePriceEntry


def parse_coingecko_market_chart(payload: Any) -> list[Observation]:
    chart = _validate(CoinGeckoMarketChart, payload, "CoinGecko")
    # Intraday samples collapse to the last one seen for each day.
    by_date: dict[dt.date, float] = {}
    for ts_ms, price in chart.prices:
        if price > 0:
            by_date[_utc_date(ts_ms / 1000)] = price
    return [Observation(date=d, value=v) for d, v in sorted(by_date.items())]


class CoinGeckoProvider(BitcoinHistoryProvider):
    def __init__(
        self,
        fetcher: HttpFetcher,
        base_url: str = "https://api.coingecko.com/api/v3",
        timeout_seconds: float = 12.0,
        history_days: int | Literal["max"] = "max",
    ) -> None:
        self._fetcher = fetcher
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._history_days = history_days

    def get_provider_name(self) -> str:
        return "coingecko"

    async def get_daily_history(self) -> list[Observation]:
        payload = await self._fetcher.fetch(
            f"{self._base_url}/coins/bitcoin/market_chart",
            self._timeout_seconds,
            params={"vs_currency": "usd", "days": str(self._history_days), "interval": "daily"},
        )
        return parse_coingecko_market_chart(payload)

    async def get_quote(self, timeout_seconds: float = 10.0) -> BtcQuote:
        payload = await self._fetcher.fetch(
            f"{self._base_url}/simple/price",
            timeout_seconds,
            params={
                "ids": "bitcoin",
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_last_updated_at": "true",
            },
        )
        entry = _validate(CoinGeckoSimplePrice, payload, "CoinGecko").bitcoin
        return BtcQuote(
            usd=entry.usd,
            usd_24h_change=entry.usd_24h_change,
            last_updated_at=entry.last_updated_at,
        )


# Binance


def parse_binance_klines(payload: Any) -> list[Observation]:
    """Klines are positional arrays: [open_time_ms, open, high, low, close, ...]."""
    if not isinstance(payload, list):
        raise TransportFailureError("Unexpected Binance response schema: expected a list")
    points: list[Observation] = []
    for row in payload:
        if not isinstance(row, list) or len(row) < 5:
            raise TransportFailureError("Unexpected Binance kline row")
        try:
            points.append(Observation(date=_utc_date(float(row[0]) / 1000), value=float(row[4])))
        except (TypeError, ValueError) as e:
            raise TransportFailureError("Unexpected Binance kline values") from e
    return points


# First daily BTCUSDT kline on Binance.
BINANCE_HISTORY_START = dt.date(2017, 8, 17)


class BinanceProvider(BitcoinHistoryProvider):
    """Daily closes, paged backwards from today with ``endTime``.

    Each page holds at most ``limit`` klines. Paging stops at a short page, at
    ``history_start`` or after ``max_pages`` requests.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        base_url: str = "https://api.binance.com/api/v3",
        timeout_seconds: float = 12.0,
        symbol: str = "BTCUSDT",
        limit: int = 1000,
        history_start: dt.date = BINANCE_HISTORY_START,
        max_pages: int = 8,
    ) -> None:
        self._fetcher = fetcher
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._symbol = symbol
        self._limit = limit
        self._history_start = history_start
        self._max_pages = max_pages

    def get_provider_name(self) -> str:
        return "binance"

    async def get_daily_history(self) -> list[Observation]:
        by_date: dict[dt.date, Observation] = {}
        end_time_ms: int | None = None
        for _ in range(self._max_pages):
            params: dict[str, Any] = {
                "symbol": self._symbol,
                "interval": "1d",
                "limit": self._limit,
            }
            if end_time_ms is not None:
                params["endTime"] = end_time_ms
            payload = await self._fetcher.fetch(
                f"{self._base_url}/klines",
                self._timeout_seconds,
                params=params,
            )
            page = parse_binance_klines(payload)
            for point in page:
                by_date[point.date] = point
            if len(page) < self._limit or page[0].date <= self._history_start:
                break
            end_time_ms = _epoch_ms(page[0].date) - 1

        logger.debug("Fetched Binance klines", points=len(by_date))
        return [by_date[d] for d in sorted(by_date)]


# CryptoCompare


class CryptoCompareBar(BaseModel):
    time: int
    close: float


class CryptoCompareData(BaseModel):
    Data: list[CryptoCompareBar]


class CryptoCompareHistoday(BaseModel):
    Response: str
    Message: str = ""
    Data: CryptoCompareData | None = None


def parse_cryptocompare_histoday(payload: Any) -> list[Observation]:
    resp = _validate(CryptoCompareHistoday, payload, "CryptoCompare")
    if resp.Response != "Success" or resp.Data is None:
        raise TransportFailureError(f"CryptoCompare error: {resp.Message or resp.Response}")
    # Bars before the first recorded trade carry a zero close.
    return [
        Observation(date=_utc_date(bar.time), value=bar.close)
        for bar in resp.Data.Data
        if bar.close > 0
    ]


class CryptoCompareProvider(BitcoinHistoryProvider):
    def __init__(
        self,
        fetcher: HttpFetcher,
        base_url: str = "https://min-api.cryptocompare.com/data/v2",
        timeout_seconds: float = 14.0,
    ) -> None:
        self._fetcher = fetcher
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def get_provider_name(self) -> str:
        return "cryptocompare"

    async def get_daily_history(self) -> list[Observation]:
        payload = await self._fetcher.fetch(
            f"{self._base_url}/histoday",
            self._timeout_seconds,
            params={"fsym": "BTC", "tsym": "USD", "allData": "true"},
        )
        return parse_cryptocompare_histoday(payload)


# alternative.me Fear & Greed


class FearGreedItem(BaseModel):
    value: str
    value_classification: str | None = None
    timestamp: str | None = None


class FearGreedResponse(BaseModel):
    data: list[FearGreedItem]


def parse_fear_greed(payload: Any) -> FearGreedReading:
    resp = _validate(FearGreedResponse, payload, "alternative.me")
    if not resp.data:
        return FearGreedReading()
    item = resp.data[0]
    try:
        value: float | None = float(item.value)
    except ValueError:
        value = None
    updated_at = None
    if item.timestamp and item.timestamp.isdigit():
        updated_at = dt.datetime.fromtimestamp(int(item.timestamp), tz=dt.UTC)
    return FearGreedReading(
        value=value,
        classification=item.value_classification or "Unknown",
        updated_at=updated_at,
    )


class FearGreedProvider:
    def __init__(
        self,
        fetcher: HttpFetcher,
        url: str = "https://api.alternative.me/fng/",
        timeout_seconds: float = 9.0,
    ) -> None:
        self._fetcher = fetcher
        self._url = url
        self._timeout_seconds = timeout_seconds

    async def get_reading(self) -> FearGreedReading:
        payload = await self._fetcher.fetch(
            self._url,
            self._timeout_seconds,
            params={"limit": 1, "format": "json"},
        )
        return parse_fear_greed(payload)
