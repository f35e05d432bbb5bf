"""Trailing-edge debounce keyed by call id."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable
from functools import partial
from typing import TYPE_CHECKING, Any

from timed_operations._sync import get_shared_loop
from timed_operations.config import DebounceConfig, validate_duration
from timed_operations.controllers.base import BaseController, report_task_failure
from timed_operations.outcome import Operation, execute_async, execute_sync, release

if TYPE_CHECKING:
    from timed_operations.callbacks import CallbackSet
    from timed_operations.timers import TimerHandle, TimerTable

logger = logging.getLogger(__name__)


class Debounce(BaseController):
    """Run only the last operation submitted for a call id in a quiet period.

    How it works:
        - Each call cancels the pending timer for its key and starts a new
          one. The superseded operation is never invoked and none of its
          callbacks fire.
        - When the timer expires the operation runs, one callback fires and
          the key is removed from the table.
        - If a new call arrives while an async operation is already in
          flight, the stale run completes but its callback is suppressed.

    Example::

        delay=0.3s

        t=0.0s run("typing", op1) -> timer until t=0.3s
        t=0.1s run("typing", op2) -> op1 discarded, timer until t=0.4s
        t=0.2s run("typing", op3) -> op2 discarded, timer until t=0.5s
        t=0.5s timer expires      -> op3 runs, on_success fires

    Args:
        config: Default quiet-period delay.
        table: Timer table to use. A new one is created when omitted.
    """

    __slots__ = ("_closed", "_config")

    def __init__(self, config: DebounceConfig | None = None, *, table: TimerTable | None = None) -> None:
        super().__init__(table=table)
        self._config = config or DebounceConfig()
        self._closed = False

    @property
    def config(self) -> DebounceConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def _resolve_delay(self, delay: float | None) -> float:
        if delay is None:
            return self._config.delay
        return validate_duration("delay", delay)

    def _schedule(
        self,
        loop: asyncio.AbstractEventLoop,
        call_id: Hashable,
        delay: float,
        fire: Callable[..., Any],
        operation: Any,
        callbacks: CallbackSet[Any],
    ) -> TimerHandle:
        handle = self._table.replace(call_id, delay)
        handle.on_cancel(partial(release, operation))
        try:
            handle.arm(loop, delay, fire, call_id, handle, operation, callbacks)
        except Exception:
            self._table.discard(call_id, handle)
            release(operation)
            raise
        return handle

    async def run(
        self,
        call_id: Hashable,
        operation: Operation,
        callbacks: CallbackSet[Any],
        *,
        delay: float | None = None,
    ) -> TimerHandle:
        """Schedule an asynchronous operation for *call_id*.

        Returns as soon as the timer is armed. The operation runs on the
        current event loop once *delay* seconds pass without another call
        for the same key.

        Args:
            call_id: Key identifying the operation stream.
            operation: Zero-argument callable returning an awaitable, or an
                       awaitable. A superseded coroutine is closed unawaited.
            callbacks: Handlers for the outcome.
            delay: Quiet period in seconds, defaults to the config value.

        Returns:
            The handle of the scheduled timer.
        """
        self._ensure_open()
        delay = self._resolve_delay(delay)
        loop = asyncio.get_running_loop()
        return self._schedule(loop, call_id, delay, self._fire_async, operation, callbacks)

    def run_sync(
        self,
        call_id: Hashable,
        operation: Callable[[], Any],
        callbacks: CallbackSet[Any],
        *,
        delay: float | None = None,
    ) -> TimerHandle:
        """Schedule a synchronous operation for *call_id*.

        The timer lives on the shared background loop thread, which is also
        where the operation and its callback run.
        """
        self._ensure_open()
        delay = self._resolve_delay(delay)
        loop = get_shared_loop().loop
        return self._schedule(loop, call_id, delay, self._fire_sync, operation, callbacks)

    def _fire_sync(
        self,
        call_id: Hashable,
        handle: TimerHandle,
        operation: Callable[[], Any],
        callbacks: CallbackSet[Any],
    ) -> None:
        try:
            outcome = execute_sync(operation)
            if not handle.cancelled:
                callbacks.dispatch(outcome)
        finally:
            self._table.discard(call_id, handle)

    def _fire_async(
        self,
        call_id: Hashable,
        handle: TimerHandle,
        operation: Operation,
        callbacks: CallbackSet[Any],
    ) -> None:
        task = asyncio.get_running_loop().create_task(self._complete(call_id, handle, operation, callbacks))
        task.add_done_callback(report_task_failure)
        handle.task = task

    async def _complete(
        self,
        call_id: Hashable,
        handle: TimerHandle,
        operation: Operation,
        callbacks: CallbackSet[Any],
    ) -> None:
        try:
            outcome = await execute_async(operation, on_waiting=callbacks.on_waiting)
            if handle.cancelled:
                logger.debug("discarding stale result for %r", call_id)
                return
            callbacks.dispatch(outcome)
        finally:
            self._table.discard(call_id, handle)

    def pending(self, call_id: Hashable) -> bool:
        """Whether *call_id* has a timer waiting to fire or an operation in flight."""
        return call_id in self._table

    def cancel(self, call_id: Hashable) -> bool:
        """Cancel the pending operation for *call_id* without running it."""
        cancelled = self._table.cancel(call_id)
        if cancelled:
            logger.debug("cancelled pending call for %r", call_id)
        return cancelled

    def cancel_all(self) -> None:
        self._table.clear()

    def clear(self) -> None:
        self.cancel_all()

    async def close(self) -> None:
        """Close the controller and cancel every pending operation."""
        if self._closed:
            return
        self._closed = True
        self.cancel_all()

    async def __aenter__(self) -> Debounce:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Debounce is closed")

    def __repr__(self) -> str:
        return f"Debounce(delay={self._config.delay}, keys={len(self._table)}, closed={self._closed})"
