"""Unit tests for Bitcoin price provider adapters."""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable

import httpx
import pytest

from macrodash.domain.exceptions import TransportFailureError
from macrodash.infrastructure.data_providers.bitcoin import (
    BinanceProvider,
    CoinGeckoProvider,
    FearGreedProvider,
    parse_binance_klines,
    parse_coingecko_market_chart,
    parse_cryptocompare_histoday,
    parse_fear_greed,
)
from macrodash.infrastructure.fetcher import HttpFetcher

DAY_MS = 86_400_000
JAN_1_2024_MS = 1_704_067_200_000


def _kline_handler(
    closes: list[float], requests: list[dict[str, str]]
) -> Callable[[httpx.Request], httpx.Response]:
    """Serve daily klines from 2024-01-01, honouring ``limit`` and ``endTime``."""
    rows = [
        [JAN_1_2024_MS + i * DAY_MS, "1", "1", "1", str(close), "1"]
        for i, close in enumerate(closes)
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        requests.append(params)
        end = int(params.get("endTime", 10**15))
        eligible = [row for row in rows if row[0] <= end]
        return httpx.Response(200, json=eligible[-int(params["limit"]) :])

    return handler


@pytest.mark.unit
class TestCoinGecko:
    def test_market_chart_keeps_last_sample_per_day(self) -> None:
        payload = {
            "prices": [
                [JAN_1_2024_MS, 42000.0],
                [JAN_1_2024_MS + 3_600_000, 42500.0],
                [JAN_1_2024_MS + DAY_MS, 43000.0],
            ]
        }
        points = parse_coingecko_market_chart(payload)
        assert [(p.date, p.value) for p in points] == [
            (dt.date(2024, 1, 1), 42500.0),
            (dt.date(2024, 1, 2), 43000.0),
        ]

    def test_market_chart_schema_mismatch(self) -> None:
        with pytest.raises(TransportFailureError):
            parse_coingecko_market_chart({"status": {"error_code": 429}})

    async def test_history_requests_full_range(self) -> None:
        seen: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={"prices": [[JAN_1_2024_MS, 42000.0]]})

        provider = CoinGeckoProvider(HttpFetcher(transport=httpx.MockTransport(handler)))
        points = await provider.get_daily_history()

        assert seen["days"] == "max"
        assert points[0].date == dt.date(2024, 1, 1)

    async def test_get_quote(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v3/simple/price"
            return httpx.Response(
                200,
                json={
                    "bitcoin": {
                        "usd": 65000.0,
                        "usd_24h_change": -1.25,
                        "last_updated_at": 1_700_000_000,
                    }
                },
            )

        provider = CoinGeckoProvider(HttpFetcher(transport=httpx.MockTransport(handler)))
        quote = await provider.get_quote()

        assert quote.usd == 65000.0
        assert quote.usd_24h_change == -1.25
        assert quote.to_json_dict() == {
            "usd": 65000.0,
            "usd_24h_change": -1.25,
            "last_updated_at": 1_700_000_000,
        }


@pytest.mark.unit
class TestBinance:
    def test_klines_use_open_time_and_close(self) -> None:
        payload = [
            [JAN_1_2024_MS, "42000", "43000", "41000", "42800.5", "100"],
            [JAN_1_2024_MS + DAY_MS, "42800", "44000", "42000", "43900", "100"],
        ]
        points = parse_binance_klines(payload)
        assert [(p.date, p.value) for p in points] == [
            (dt.date(2024, 1, 1), 42800.5),
            (dt.date(2024, 1, 2), 43900.0),
        ]

    def test_error_object_is_rejected(self) -> None:
        with pytest.raises(TransportFailureError):
            parse_binance_klines({"code": -1121, "msg": "Invalid symbol."})

    async def test_pages_backwards_until_short_page(self) -> None:
        requests: list[dict[str, str]] = []
        closes = [100.0 + i for i in range(8)]
        provider = BinanceProvider(
            HttpFetcher(transport=httpx.MockTransport(_kline_handler(closes, requests))),
            limit=3,
            history_start=dt.date(2023, 1, 1),
        )

        points = await provider.get_daily_history()

        assert [p.value for p in points] == closes
        assert points[0].date == dt.date(2024, 1, 1)
        assert len(requests) == 3
        assert "endTime" not in requests[0]
        # next page ends just before the earliest kline already seen (2024-01-06)
        assert int(requests[1]["endTime"]) == JAN_1_2024_MS + 5 * DAY_MS - 1

    async def test_stops_paging_at_history_start(self) -> None:
        requests: list[dict[str, str]] = []
        provider = BinanceProvider(
            HttpFetcher(transport=httpx.MockTransport(_kline_handler([1.0] * 8, requests))),
            limit=3,
            history_start=dt.date(2024, 1, 5),
        )

        points = await provider.get_daily_history()

        assert len(requests) == 2
        assert points[0].date == dt.date(2024, 1, 3)
        assert len(points) == 6

    async def test_max_pages_bounds_requests(self) -> None:
        requests: list[dict[str, str]] = []
        provider = BinanceProvider(
            HttpFetcher(transport=httpx.MockTransport(_kline_handler([1.0] * 8, requests))),
            limit=2,
            history_start=dt.date(2023, 1, 1),
            max_pages=2,
        )

        points = await provider.get_daily_history()

        assert len(requests) == 2
        assert len(points) == 4


@pytest.mark.unit
class TestCryptoCompare:
    def test_drops_zero_closes(self) -> None:
        payload = {
            "Response": "Success",
            "Data": {
                "Data": [
                    {"time": 1_279_238_400, "close": 0},
                    {"time": 1_279_324_800, "close": 0.04951},
                ]
            },
        }
        points = parse_cryptocompare_histoday(payload)
        assert len(points) == 1
        assert points[0].date == dt.date(2010, 7, 17)

    def test_error_response(self) -> None:
        with pytest.raises(TransportFailureError, match="rate limit"):
            parse_cryptocompare_histoday({"Response": "Error", "Message": "rate limit"})


@pytest.mark.unit
class TestFearGreed:
    def test_parse_reading(self) -> None:
        reading = parse_fear_greed(
            {"data": [{"value": "72", "value_classification": "Greed", "timestamp": "1700000000"}]}
        )
        assert reading.value == 72.0
        assert reading.classification == "Greed"
        assert reading.updated_at == dt.datetime(2023, 11, 14, 22, 13, 20, tzinfo=dt.UTC)

    def test_empty_data(self) -> None:
        reading = parse_fear_greed({"data": []})
        assert reading.value is None
        assert reading.classification == "Unknown"

    async def test_provider_passes_limit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["limit"] == "1"
            return httpx.Response(200, json={"data": [{"value": "30"}]})

        provider = FearGreedProvider(HttpFetcher(transport=httpx.MockTransport(handler)))
        reading = await provider.get_reading()
        assert reading.value == 30.0
