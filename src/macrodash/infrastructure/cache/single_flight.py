"""Coalesce concurrent calls of one async operation into a single execution."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Idle or InProgress(shared task).

    While a task is in flight every caller shares it; the handle is cleared when
    the task finishes, successfully or not.
    """

    def __init__(self, name: str = "operation") -> None:
        self._name = name
        self._task: asyncio.Task[T] | None = None

    @property
    def in_progress(self) -> bool:
        return self._task is not None

    @property
    def current(self) -> asyncio.Task[T] | None:
        return self._task

    def start(self, operation: Callable[[], Awaitable[T]]) -> asyncio.Task[T]:
        """Return the in-flight task, starting ``operation`` if idle."""
        if self._task is None:
            logger.debug("Starting single-flight operation", operation=self._name)
            task = asyncio.ensure_future(operation())
            task.add_done_callback(self._on_done)
            self._task = task
        else:
            logger.debug("Joining in-flight operation", operation=self._name)
        return self._task

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Start or join the operation and wait for its result.

        Cancelling one waiter does not cancel the shared task.
        """
        return await asyncio.shield(self.start(operation))

    def _on_done(self, task: asyncio.Task[T]) -> None:
        if self._task is task:
            self._task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "Single-flight operation failed",
                operation=self._name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
