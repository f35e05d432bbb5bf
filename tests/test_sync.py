"""Tests for the background event loop thread."""

import asyncio
import threading

from timed_operations._sync import _EventLoopThread, get_shared_loop


def _loop_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name == "timed-operations-loop"]


class TestEventLoopThread:
    def test_start_and_schedule(self):
        elt = _EventLoopThread()
        elt.start()
        try:
            fired = threading.Event()
            elt.loop.call_soon_threadsafe(fired.set)
            assert fired.wait(timeout=1.0)
        finally:
            elt.shutdown()

    def test_start_is_idempotent(self):
        elt = _EventLoopThread()
        elt.start()
        loop = elt.loop
        elt.start()
        assert elt.loop is loop
        elt.shutdown()

    def test_loop_property_auto_starts(self):
        elt = _EventLoopThread()
        try:
            fired = threading.Event()
            elt.loop.call_soon_threadsafe(fired.set)
            assert fired.wait(timeout=1.0)
        finally:
            elt.shutdown()

    def test_shutdown_without_start(self):
        elt = _EventLoopThread()
        elt.shutdown()  # Should not raise

    def test_shutdown_closes_loop(self):
        elt = _EventLoopThread()
        loop = elt.loop
        before = len(_loop_threads())
        elt.shutdown()
        assert loop.is_closed()
        assert len(_loop_threads()) == before - 1

    def test_restart_after_shutdown(self):
        elt = _EventLoopThread()
        first = elt.loop
        elt.shutdown()
        try:
            second = elt.loop
            assert second is not first
            assert isinstance(second, asyncio.AbstractEventLoop)
            assert not second.is_closed()
        finally:
            elt.shutdown()


class TestGetSharedLoop:
    def test_returns_event_loop_thread(self):
        assert isinstance(get_shared_loop(), _EventLoopThread)

    def test_is_shared(self):
        assert get_shared_loop() is get_shared_loop()

    def test_runs_timers(self):
        fired = threading.Event()
        loop = get_shared_loop().loop
        loop.call_soon_threadsafe(loop.call_later, 0.01, fired.set)
        assert fired.wait(timeout=1.0)

