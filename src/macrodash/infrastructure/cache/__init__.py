"""Macro payload cache: snapshot store, single-flight refresh and TTL policy."""

from macrodash.infrastructure.cache.manager import MacroCacheManager
from macrodash.infrastructure.cache.single_flight import SingleFlight
from macrodash.infrastructure.cache.store import LocalFileSnapshotStore

__all__ = ["LocalFileSnapshotStore", "MacroCacheManager", "SingleFlight"]
