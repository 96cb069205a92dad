"""Data provider and storage ports."""

from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod

from macrodash.domain.models.macro import CacheSnapshot, Observation


class DataProvider(ABC):
    """Common interface for external data providers."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short provider identifier used in logs and status maps."""


class MacroeconomicDataProvider(DataProvider):
    """Key-value indicator source returning dated observations per series id."""

    @abstractmethod
    async def get_time_series(
        self,
        series_id: str,
        start_date: dt.date,
    ) -> list[Observation]:
        """Get observations for ``series_id`` from ``start_date`` onwards, ascending.

        Raises:
            DataProviderError: If every retrieval path for the series failed.
        """


class BitcoinHistoryProvider(DataProvider):
    """Provider of daily BTC/USD closing prices."""

    @abstractmethod
    async def get_daily_history(self) -> list[Observation]:
        """Get daily closes in ascending date order.

        Raises:
            DataProviderError: On timeout, transport failure or schema mismatch.
        """


class SnapshotStore(ABC):
    """Byte-oriented store holding the single cache snapshot document."""

    @abstractmethod
    async def read(self) -> CacheSnapshot | None:
        """Return the snapshot, or None when nothing has been stored yet.

        Raises:
            CacheUnavailableError: If the store exists but cannot be read or parsed.
        """

    @abstractmethod
    async def write(self, snapshot: CacheSnapshot) -> None:
        """Replace the stored snapshot.

        Raises:
            CacheUnavailableError: If the store cannot be written.
        """
