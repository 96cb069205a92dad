"""Unit tests for FRED macroeconomic provider."""

from __future__ import annotations

import datetime as dt

import httpx
import pytest

from macrodash.domain.exceptions import TransportFailureError
from macrodash.infrastructure.data_providers.fred import (
    FredMacroeconomicProvider,
    parse_fred_csv,
    parse_fred_observations,
)
from macrodash.infrastructure.fetcher import HttpFetcher

CSV_BODY = "observation_date,WALCL\n2025-01-01,100\n2025-01-08,.\n2025-01-15,110.5\n"
JSON_BODY = {
    "observations": [
        {"date": "2025-01-01", "value": "4.00"},
        {"date": "2025-01-02", "value": "."},
        {"date": "2025-01-03", "value": "4.10"},
    ]
}


def _provider(handler, api_key: str | None) -> FredMacroeconomicProvider:  # type: ignore[no-untyped-def]
    fetcher = HttpFetcher(transport=httpx.MockTransport(handler))
    return FredMacroeconomicProvider(
        fetcher=fetcher,
        api_key=api_key,
        base_url="https://api.example.com/fred",
        csv_url="https://csv.example.com/fredgraph.csv",
    )


@pytest.mark.unit
class TestFredMacroeconomicProvider:
    async def test_get_time_series_parses_and_skips_missing(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            assert request.url.path == "/fred/series/observations"
            return httpx.Response(200, json=JSON_BODY)

        provider = _provider(handler, api_key="test-key")
        points = await provider.get_time_series("DGS10", dt.date(2025, 1, 1))

        assert [p.value for p in points] == [4.0, 4.1]
        assert points[0].date == dt.date(2025, 1, 1)
        params = requests[0].url.params
        assert params["series_id"] == "DGS10"
        assert params["api_key"] == "test-key"
        assert params["observation_start"] == "2025-01-01"

    async def test_missing_api_key_uses_csv_export(self) -> None:
        hosts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            return httpx.Response(200, text=CSV_BODY)

        provider = _provider(handler, api_key=None)
        points = await provider.get_time_series("WALCL", dt.date(2025, 1, 1))

        assert hosts == ["csv.example.com"]
        assert [(p.date, p.value) for p in points] == [
            (dt.date(2025, 1, 1), 100.0),
            (dt.date(2025, 1, 15), 110.5),
        ]

    async def test_api_failure_falls_back_to_csv(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.example.com":
                return httpx.Response(500)
            return httpx.Response(200, text=CSV_BODY)

        provider = _provider(handler, api_key="test-key")
        points = await provider.get_time_series("WALCL", dt.date(2025, 1, 10))

        assert [p.value for p in points] == [110.5]

    async def test_both_paths_failing_raises(self) -> None:
        provider = _provider(lambda request: httpx.Response(502), api_key="test-key")
        with pytest.raises(TransportFailureError):
            await provider.get_time_series("WALCL", dt.date(2025, 1, 1))


@pytest.mark.unit
class TestFredParsers:
    def test_schema_mismatch_fails_fast(self) -> None:
        with pytest.raises(TransportFailureError):
            parse_fred_observations({"error_message": "Bad Request"})

    def test_csv_with_single_column_is_rejected(self) -> None:
        with pytest.raises(TransportFailureError):
            parse_fred_csv("only_one_column\n1\n", "WALCL")

    def test_csv_is_sorted_ascending(self) -> None:
        points = parse_fred_csv("DATE,DGS2\n2025-02-01,4.2\n2025-01-01,4.1\n", "DGS2")
        assert [p.date for p in points] == [dt.date(2025, 1, 1), dt.date(2025, 2, 1)]
