"""Stale-while-revalidate cache for the macro payload.

States:
    NoCache: no readable snapshot; the request refreshes synchronously.
    Fresh:   snapshot age <= TTL; served as is.
    Stale:   snapshot age > TTL; served immediately while one background
             refresh runs.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import timedelta

import structlog

from macrodash.application.services.macro import MacroAggregator
from macrodash.domain.exceptions import CacheUnavailableError
from macrodash.domain.models.macro import CacheSnapshot, CacheState, MacroPayload
from macrodash.domain.ports.data_providers import SnapshotStore
from macrodash.infrastructure.cache.single_flight import SingleFlight

logger = structlog.get_logger(__name__)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class MacroCacheManager:
    def __init__(
        self,
        aggregator: MacroAggregator,
        store: SnapshotStore,
        ttl: timedelta = timedelta(minutes=15),
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        self._aggregator = aggregator
        self._store = store
        self._ttl_ms = int(ttl.total_seconds() * 1000)
        self._clock = clock
        self._refresh_flight: SingleFlight[MacroPayload] = SingleFlight("macro_refresh")

    @property
    def pending_refresh(self) -> asyncio.Task[MacroPayload] | None:
        """The in-flight refresh, if any."""
        return self._refresh_flight.current

    async def get_macro_payload(self) -> MacroPayload:
        """Serve the cached payload, refreshing as the cache state requires.

        Only blocks on upstream fetches when no snapshot exists. Never raises:
        a failed cold refresh yields an empty payload tagged ``error``.
        """
        snapshot = await self._read_snapshot()

        if snapshot is not None:
            age_ms = max(0, self._clock() - snapshot.cached_at)
            if age_ms <= self._ttl_ms:
                return self._tag(snapshot.payload, "fresh", age_ms)

            logger.info("Macro cache stale; refreshing in background", age_ms=age_ms)
            self.trigger_refresh()
            return self._tag(snapshot.payload, "stale", age_ms)

        try:
            payload = await self.refresh()
        except Exception as e:
            logger.error("Macro refresh failed with no cache available", error=str(e), exc_info=True)
            return self._aggregator.empty_payload(str(e) or "Macro data unavailable").model_copy(
                update={"cache_state": "error"}
            )
        if payload.ok_series_count == 0:
            return payload.model_copy(update={"cache_state": "error", "cache_age_minutes": None})
        return payload

    async def refresh(self) -> MacroPayload:
        """Refresh now, joining a refresh that is already in flight."""
        return await self._refresh_flight.run(self._do_refresh)

    def trigger_refresh(self) -> asyncio.Task[MacroPayload]:
        """Fire-and-forget refresh; the caller does not wait for it."""
        return self._refresh_flight.start(self._do_refresh)

    async def _do_refresh(self) -> MacroPayload:
        payload = await self._aggregator.build_payload()
        payload = payload.model_copy(update={"cache_state": "fresh", "cache_age_minutes": 0.0})

        if payload.ok_series_count > 0:
            try:
                await self._store.write(CacheSnapshot(cached_at=self._clock(), payload=payload))
            except CacheUnavailableError as e:
                logger.warning("Could not persist macro cache", error=str(e))
        else:
            logger.warning(
                "Every macro series failed; keeping previous snapshot",
                total_series=payload.total_series_count,
            )
        return payload

    async def _read_snapshot(self) -> CacheSnapshot | None:
        try:
            return await self._store.read()
        except CacheUnavailableError as e:
            logger.warning("Macro cache unreadable; treating as cold", error=str(e))
            return None

    @staticmethod
    def _tag(payload: MacroPayload, state: CacheState, age_ms: int) -> MacroPayload:
        return payload.model_copy(
            update={"cache_state": state, "cache_age_minutes": round(age_ms / 60000, 1)}
        )
