"""Per-key timer bookkeeping shared by Throttle and Debounce."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable, Hashable, Iterator
from typing import Any

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def _current_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class TimerHandle:
    """One scheduled or active timer owned by a :class:`TimerTable`.

    A handle is active from the moment it is registered until either
    ``fires_at`` passes or it is cancelled. When armed, the expiry callback
    runs on an asyncio loop; cancelling the handle before that prevents the
    callback from running at all.
    """

    __slots__ = (
        "_cancelled",
        "_clock",
        "_finalizer",
        "_fired",
        "_loop",
        "_timer",
        "fires_at",
        "key",
        "task",
    )

    def __init__(self, key: Hashable, fires_at: float, clock: Clock = time.monotonic) -> None:
        self.key = key
        self.fires_at = fires_at
        self.task: asyncio.Task[Any] | None = None
        self._clock = clock
        self._cancelled = False
        self._fired = False
        self._finalizer: Callable[[], None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._timer: asyncio.TimerHandle | None = None

    @property
    def active(self) -> bool:
        return not self._cancelled and self._clock() < self.fires_at

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    def remaining(self) -> float:
        """Seconds until expiry, 0.0 once expired or cancelled."""
        if self._cancelled:
            return 0.0
        return max(0.0, self.fires_at - self._clock())

    def on_cancel(self, finalizer: Callable[[], None]) -> None:
        """Run *finalizer* if the handle is cancelled before it fires."""
        self._finalizer = finalizer

    def arm(
        self,
        loop: asyncio.AbstractEventLoop,
        delay: float,
        callback: Callable[..., Any],
        *args: Any,
    ) -> None:
        """Schedule *callback* on *loop* after *delay* seconds.

        Safe to call from a thread other than the loop's own.
        """
        self._loop = loop
        if _current_loop() is loop:
            self._schedule(delay, callback, args)
        else:
            loop.call_soon_threadsafe(self._schedule, delay, callback, args)

    def _schedule(self, delay: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        if self._cancelled:
            return
        assert self._loop is not None
        self._timer = self._loop.call_later(delay, self._fire, callback, args)

    def _fire(self, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self._timer = None
        if self._cancelled:
            return
        self._fired = True
        callback(*args)

    def cancel(self) -> None:
        """Cancel the pending expiry callback."""
        if self._cancelled:
            return
        self._cancelled = True

        if not self._fired and self._finalizer is not None:
            self._finalizer()
        self._finalizer = None

        loop = self._loop
        if loop is None or loop.is_closed():
            return
        if _current_loop() is loop:
            self._cancel_timer()
        else:
            loop.call_soon_threadsafe(self._cancel_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "fired" if self._fired else "pending"
        return f"TimerHandle(key={self.key!r}, remaining={self.remaining():.3f}, state={state})"


class TimerTable:
    """Thread-safe mapping from call key to its single :class:`TimerHandle`.

    Each controller owns one table. Handles are removed once their window
    ends or their operation completes, so idle keys do not accumulate.

    Args:
        clock: Monotonic time source in seconds. Tests inject a fake one.
        sweep_every: Number of acquires between full sweeps of expired keys.
    """

    __slots__ = ("_acquires", "_clock", "_entries", "_lock", "_sweep_every")

    def __init__(self, clock: Clock = time.monotonic, *, sweep_every: int = 256) -> None:
        if sweep_every <= 0:
            raise ValueError(f"sweep_every must be positive, got {sweep_every}")
        self._clock = clock
        self._entries: dict[Hashable, TimerHandle] = {}
        self._lock = threading.Lock()
        self._sweep_every = sweep_every
        self._acquires = 0

    @property
    def clock(self) -> Clock:
        return self._clock

    def _new_handle(self, key: Hashable, duration: float) -> TimerHandle:
        return TimerHandle(key, self._clock() + duration, self._clock)

    def get(self, key: Hashable) -> TimerHandle | None:
        with self._lock:
            return self._entries.get(key)

    def try_acquire(self, key: Hashable, duration: float) -> TimerHandle | None:
        """Register a handle for *key* unless an active one already exists.

        Only *key* is checked for expiry. Other expired keys are dropped by
        a full sweep once every ``sweep_every`` acquires.

        Returns the new handle, or None when *key* is still inside its window.
        """
        with self._lock:
            self._acquires += 1
            if self._acquires >= self._sweep_every:
                self._acquires = 0
                self._sweep_locked()
            current = self._entries.get(key)
            if current is not None and current.active:
                return None
            handle = self._new_handle(key, duration)
            self._entries[key] = handle
            return handle

    def replace(self, key: Hashable, duration: float) -> TimerHandle:
        """Cancel any handle for *key* and register a fresh one."""
        with self._lock:
            previous = self._entries.pop(key, None)
            handle = self._new_handle(key, duration)
            self._entries[key] = handle
        if previous is not None:
            logger.debug("superseding timer for %r", key)
            previous.cancel()
        return handle

    def discard(self, key: Hashable, handle: TimerHandle) -> bool:
        """Remove *handle* if it is still the current entry for *key*."""
        with self._lock:
            if self._entries.get(key) is not handle:
                return False
            del self._entries[key]
            return True

    def cancel(self, key: Hashable) -> bool:
        with self._lock:
            handle = self._entries.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def sweep(self) -> int:
        """Drop every expired or cancelled handle. Returns how many were dropped."""
        with self._lock:
            return self._sweep_locked()

    def _sweep_locked(self) -> int:
        expired = [key for key, handle in self._entries.items() if not handle.active]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            handles = list(self._entries.values())
            self._entries.clear()
        for handle in handles:
            handle.cancel()

    def keys(self) -> list[Hashable]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"TimerTable(entries={len(self)})"
