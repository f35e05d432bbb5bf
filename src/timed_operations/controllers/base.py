"""Abstract base class shared by the Throttle and Debounce controllers."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable
from typing import TYPE_CHECKING, Any

from timed_operations.timers import TimerTable

if TYPE_CHECKING:
    from timed_operations.callbacks import CallbackSet
    from timed_operations.outcome import Operation


def report_task_failure(task: asyncio.Task[Any]) -> None:
    """Forward an exception escaping a fire-and-forget task to its loop."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        task.get_loop().call_exception_handler(
            {
                "message": "Unhandled exception in timed operation callback",
                "exception": exc,
                "task": task,
            }
        )


class BaseController(ABC):
    """Base class for per-key timing controllers.

    Every controller owns a :class:`TimerTable` mapping call keys to their
    single live timer. Passing a table explicitly lets callers share or
    inspect state; by default each controller gets a fresh one.

    Subclasses must implement :meth:`run`, :meth:`run_sync` and
    :meth:`clear`.

    Args:
        table: Timer table to use. A new one is created when omitted.
    """

    __slots__ = ("_table",)

    def __init__(self, *, table: TimerTable | None = None) -> None:
        self._table = table if table is not None else TimerTable()

    @property
    def table(self) -> TimerTable:
        return self._table

    @abstractmethod
    async def run(
        self,
        call_id: Hashable,
        operation: Operation,
        callbacks: CallbackSet[Any],
        **options: Any,
    ) -> Any:
        """Submit an asynchronous operation for *call_id*."""

    @abstractmethod
    def run_sync(
        self,
        call_id: Hashable,
        operation: Callable[[], Any],
        callbacks: CallbackSet[Any],
        **options: Any,
    ) -> Any:
        """Submit a synchronous operation for *call_id*."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every timer this controller holds."""

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={len(self._table)})"
