"""Background event loop hosting the timers of synchronous callers.

Synchronous ``Debounce.run_sync`` calls have no loop of their own, so their
timers are armed on a shared loop running in a daemon thread. Operations and
callbacks scheduled this way execute on that thread.
"""

import asyncio
import atexit
import threading


class _EventLoopThread:
    """Manages a background event loop for synchronous timer scheduling."""

    __slots__ = ("_lock", "_loop", "_started", "_thread")

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()
        self._lock = threading.Lock()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The background loop, started on first access."""
        self.start()
        assert self._loop is not None
        return self._loop

    def start(self) -> None:
        """Start the background event loop thread (idempotent)."""
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, name="timed-operations-loop", daemon=True)
            self._thread.start()
        self._started.wait()

    def _run(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._started.set()
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()

    def shutdown(self) -> None:
        """Stop the background event loop and join the thread."""
        with self._lock:
            if self._loop is not None and not self._loop.is_closed():
                self._loop.call_soon_threadsafe(self._loop.stop)
            if self._thread is not None:
                self._thread.join(timeout=5.0)
                self._thread = None
                self._loop = None
                self._started.clear()


# Module-level shared event loop thread for sync operations
_shared_loop = _EventLoopThread()
atexit.register(_shared_loop.shutdown)


def get_shared_loop() -> _EventLoopThread:
    """Return the shared background event loop thread, starting it if needed."""
    _shared_loop.start()
    return _shared_loop
