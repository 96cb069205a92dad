"""Local JSON file holding the single cache snapshot."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

import structlog
from pydantic import ValidationError

from macrodash.domain.exceptions import CacheUnavailableError
from macrodash.domain.models.macro import CacheSnapshot
from macrodash.domain.ports.data_providers import SnapshotStore

logger = structlog.get_logger(__name__)


class LocalFileSnapshotStore(SnapshotStore):
    """Reads and writes the snapshot wholesale; file IO runs in a worker thread."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def read(self) -> CacheSnapshot | None:
        return await asyncio.to_thread(self._read_sync)

    async def write(self, snapshot: CacheSnapshot) -> None:
        await asyncio.to_thread(self._write_sync, snapshot)

    def _read_sync(self) -> CacheSnapshot | None:
        if not self._path.exists():
            return None
        try:
            raw = self._path.read_text(encoding="utf-8")
            return CacheSnapshot.model_validate(json.loads(raw))
        except (OSError, ValueError, ValidationError) as e:
            raise CacheUnavailableError(f"Cannot read cache file {self._path}: {e}") from e

    def _write_sync(self, snapshot: CacheSnapshot) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(snapshot.to_json_dict(), indent=2), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            raise CacheUnavailableError(f"Cannot write cache file {self._path}: {e}") from e
        logger.debug("Wrote macro cache snapshot", path=str(self._path))
