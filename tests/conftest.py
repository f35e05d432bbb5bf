"""Shared fixtures for timed operations tests."""

import asyncio
from typing import Any

import pytest

from timed_operations.callbacks import CallbackSet
from timed_operations.config import DebounceConfig, ThrottleConfig
from timed_operations.controllers.debounce import Debounce
from timed_operations.controllers.throttle import Throttle
from timed_operations.timers import TimerTable


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Recorder:
    """Collects every callback invocation as ``(kind, payload)`` pairs."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    @property
    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]

    def _note(self, kind: str):
        return lambda: self.events.append((kind, None))

    def callbacks(self, **overrides: Any) -> CallbackSet[Any]:
        handlers: dict[str, Any] = {
            "on_success": lambda value: self.events.append(("success", value)),
            "on_error": lambda exc: self.events.append(("error", exc)),
            "on_throttle": self._note("throttle"),
            "on_waiting": self._note("waiting"),
            "on_null": self._note("null"),
            "on_empty": self._note("empty"),
            "on_timeout": self._note("timeout"),
        }
        handlers.update(overrides)
        return CallbackSet(**handlers)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def throttle():
    return Throttle(ThrottleConfig(window=0.05))


@pytest.fixture
def fake_throttle(clock):
    return Throttle(ThrottleConfig(window=0.5), table=TimerTable(clock))


@pytest.fixture
async def debounce():
    async with Debounce(DebounceConfig(delay=0.05)) as d:
        yield d


@pytest.fixture
async def loop_errors():
    """Capture exceptions reported to the running loop's exception handler."""
    loop = asyncio.get_running_loop()
    captured: list[dict[str, Any]] = []
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: captured.append(context))
    yield captured
    loop.set_exception_handler(previous)
