"""FRED (Federal Reserve Economic Data) macroeconomic data provider implementation."""

from __future__ import annotations

import datetime as dt
import math
from io import StringIO

import pandas as pd
import structlog
from pydantic import BaseModel, ValidationError

from macrodash.domain.exceptions import (
    DataProviderError,
    MissingCredentialError,
    TransportFailureError,
)
from macrodash.domain.models.macro import Observation
from macrodash.domain.ports.data_providers import MacroeconomicDataProvider
from macrodash.infrastructure.fetcher import HttpFetcher

logger = structlog.get_logger(__name__)


class FredObservation(BaseModel):
    date: str
    value: str


class FredObservationsResponse(BaseModel):
    """Schema of ``/series/observations?file_type=json``."""

    observations: list[FredObservation]


def parse_fred_observations(payload: object) -> list[Observation]:
    """Map a FRED JSON response to observations, skipping missing values (".")."""
    try:
        parsed = FredObservationsResponse.model_validate(payload)
    except ValidationError as e:
        raise TransportFailureError(f"Unexpected FRED response schema: {e.error_count()} errors") from e

    points: list[Observation] = []
    for obs in parsed.observations:
        if not obs.date or not obs.value or obs.value == ".":
            continue
        try:
            points.append(
                Observation(date=dt.date.fromisoformat(obs.date), value=float(obs.value))
            )
        except (ValueError, ValidationError):
            continue
    return points


def parse_fred_csv(text: str, series_id: str) -> list[Observation]:
    """Parse the public ``fredgraph.csv`` export (date column, value column)."""
    try:
        df = pd.read_csv(StringIO(text))
    except (ValueError, pd.errors.ParserError) as e:
        raise TransportFailureError(f"Unreadable FRED CSV for {series_id}") from e
    if df.shape[1] < 2:
        raise TransportFailureError(f"Unexpected FRED CSV format for {series_id}")

    df = df.iloc[:, :2]
    df.columns = ["date", "value"]
    df["date"] = pd.to_datetime(df["date"], errors="coerce").dt.date
    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    df = df.dropna(subset=["date", "value"]).sort_values("date")

    return [
        Observation(date=d, value=float(v))
        for d, v in zip(df["date"], df["value"], strict=True)
        if math.isfinite(v)
    ]


class FredMacroeconomicProvider(MacroeconomicDataProvider):
    """FRED implementation of MacroeconomicDataProvider.

    Uses the JSON API when an API key is configured and falls back to the public
    CSV export (no key required) when the key is missing or the API call fails.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        api_key: str | None,
        base_url: str = "https://api.stlouisfed.org/fred",
        csv_url: str = "https://fred.stlouisfed.org/graph/fredgraph.csv",
        timeout_seconds: float = 12.0,
    ) -> None:
        self._fetcher = fetcher
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._csv_url = csv_url
        self._timeout_seconds = timeout_seconds

    def get_provider_name(self) -> str:
        return "fred"

    async def get_time_series(
        self,
        series_id: str,
        start_date: dt.date,
    ) -> list[Observation]:
        try:
            return await self._get_from_api(series_id, start_date)
        except MissingCredentialError:
            logger.debug("FRED API key not set; using CSV export", series_id=series_id)
        except DataProviderError as e:
            logger.warning(
                "FRED API request failed; falling back to CSV export",
                series_id=series_id,
                error=str(e),
                error_type=type(e).__name__,
            )
        return await self._get_from_csv(series_id, start_date)

    async def _get_from_api(self, series_id: str, start_date: dt.date) -> list[Observation]:
        if not self._api_key:
            raise MissingCredentialError("FRED API key not configured (set FRED_API_KEY)")

        payload = await self._fetcher.fetch(
            f"{self._base_url}/series/observations",
            self._timeout_seconds,
            params={
                "series_id": series_id,
                "api_key": self._api_key,
                "file_type": "json",
                "sort_order": "asc",
                "observation_start": start_date.isoformat(),
            },
        )
        return parse_fred_observations(payload)

    async def _get_from_csv(self, series_id: str, start_date: dt.date) -> list[Observation]:
        text = await self._fetcher.fetch(
            self._csv_url,
            self._timeout_seconds,
            params={"id": series_id, "cosd": start_date.isoformat()},
            as_text=True,
        )
        points = parse_fred_csv(text, series_id)
        return [p for p in points if p.date >= start_date]
