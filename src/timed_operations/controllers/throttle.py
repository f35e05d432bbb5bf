"""Leading-edge cooldown throttle keyed by call id."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable
from typing import TYPE_CHECKING, Any

from timed_operations.config import ThrottleConfig, validate_duration, validate_timeout
from timed_operations.controllers.base import BaseController
from timed_operations.outcome import Operation, Outcome, dispatch_async, dispatch_sync, release

if TYPE_CHECKING:
    from timed_operations.callbacks import CallbackSet
    from timed_operations.timers import TimerHandle, TimerTable

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Throttle(BaseController):
    """Run an operation at most once per window for each call id.

    How it works:
        - The first call for a key runs immediately and opens a window.
        - Calls for the same key inside the window are rejected through
          ``on_throttle``. They are dropped, never queued.
        - Once the window ends the key is removed from the table and the
          next call is accepted again.

    The window opens when the call is accepted, not when the operation
    finishes. A slow async operation does not extend it, so a call that
    arrives after the window may run concurrently with the first one.

    Example::

        window=0.5s

        t=0.0s run("search") -> executes, window open until t=0.5s
        t=0.1s run("search") -> on_throttle, operation not invoked
        t=0.6s run("search") -> executes, new window until t=1.1s

    Args:
        config: Default window and timeout.
        table: Timer table to use. A new one is created when omitted.
    """

    __slots__ = ("_config",)

    def __init__(self, config: ThrottleConfig | None = None, *, table: TimerTable | None = None) -> None:
        super().__init__(table=table)
        self._config = config or ThrottleConfig()

    @property
    def config(self) -> ThrottleConfig:
        return self._config

    def _resolve_window(self, window: float | None) -> float:
        if window is None:
            return self._config.window
        return validate_duration("window", window)

    def _acquire(self, call_id: Hashable, window: float, callbacks: CallbackSet[Any]) -> TimerHandle | None:
        handle = self._table.try_acquire(call_id, window)
        if handle is None:
            logger.debug("throttled call for %r", call_id)
            callbacks.throttled()
        return handle

    def run_sync(
        self,
        call_id: Hashable,
        operation: Callable[[], Any],
        callbacks: CallbackSet[Any],
        *,
        window: float | None = None,
    ) -> Outcome | None:
        """Run a synchronous operation unless *call_id* is throttled.

        Args:
            call_id: Key identifying the operation stream.
            operation: Zero-argument callable to run.
            callbacks: Handlers for the outcome.
            window: Cooldown window in seconds, defaults to the config value.

        Returns:
            The classified outcome, or None when the call was throttled.
        """
        window = self._resolve_window(window)
        if self._acquire(call_id, window, callbacks) is None:
            return None
        return dispatch_sync(operation, callbacks)

    async def run(
        self,
        call_id: Hashable,
        operation: Operation,
        callbacks: CallbackSet[Any],
        *,
        window: float | None = None,
        timeout: float | None = _UNSET,
    ) -> Outcome | None:
        """Run an asynchronous operation unless *call_id* is throttled.

        Args:
            call_id: Key identifying the operation stream.
            operation: Zero-argument callable returning an awaitable, or an
                       awaitable. A coroutine passed to a throttled call is
                       closed without running.
            callbacks: Handlers for the outcome.
            window: Cooldown window in seconds, defaults to the config value.
            timeout: Seconds to wait for the result, defaults to the config
                     value. None waits forever.

        Returns:
            The classified outcome, or None when the call was throttled.
        """
        window = self._resolve_window(window)
        timeout = self._config.timeout if timeout is _UNSET else validate_timeout(timeout)
        loop = asyncio.get_running_loop()

        try:
            handle = self._acquire(call_id, window, callbacks)
        except BaseException:
            release(operation)
            raise
        if handle is None:
            release(operation)
            return None

        try:
            handle.arm(loop, window, self._expire, call_id, handle)
        except Exception:
            self._table.discard(call_id, handle)
            release(operation)
            raise

        return await dispatch_async(operation, callbacks, timeout=timeout)

    def _expire(self, call_id: Hashable, handle: TimerHandle) -> None:
        if self._table.discard(call_id, handle):
            logger.debug("throttle window ended for %r", call_id)

    def is_throttled(self, call_id: Hashable) -> bool:
        handle = self._table.get(call_id)
        return handle is not None and handle.active

    def remaining(self, call_id: Hashable) -> float:
        """Seconds left in the window for *call_id*, 0.0 if none is open."""
        handle = self._table.get(call_id)
        return 0.0 if handle is None else handle.remaining()

    def reset(self, call_id: Hashable) -> bool:
        """Close the window for *call_id* so its next call is accepted."""
        return self._table.cancel(call_id)

    def clear(self) -> None:
        self._table.clear()

    def __repr__(self) -> str:
        return f"Throttle(window={self._config.window}, timeout={self._config.timeout}, keys={len(self._table)})"
