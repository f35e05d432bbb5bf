"""Timed operations: per-key Throttle and Debounce for sync and async code.

Both controllers run an operation, classify how it ended (success, null,
empty, error, timeout) and call the matching handler of a CallbackSet.

Throttle usage:

    from timed_operations import CallbackSet, Throttle, ThrottleConfig

    throttle = Throttle(ThrottleConfig(window=0.5))

    await throttle.run(
        "search",
        lambda: api.search(query),
        CallbackSet(
            on_success=show_results,
            on_throttle=lambda: print("slow down"),
        ),
    )

Debounce usage:

    from timed_operations import CallbackSet, Debounce

    debounce = Debounce()

    await debounce.run("typing", lambda: api.suggest(text), CallbackSet(on_success=show))
    # only the last call made within one second actually runs

Decorator usage:

    from timed_operations import debounce

    @debounce(delay=0.3)
    async def autosave(document: str) -> None:
        await storage.write(document)
"""

from timed_operations.callbacks import CallbackSet
from timed_operations.config import DebounceConfig, OutcomeKind, ThrottleConfig
from timed_operations.controllers.base import BaseController
from timed_operations.controllers.debounce import Debounce
from timed_operations.controllers.throttle import Throttle
from timed_operations.decorator import debounce, throttle
from timed_operations.outcome import Outcome, classify, dispatch_async, dispatch_sync
from timed_operations.timers import TimerHandle, TimerTable

__all__ = [
    "BaseController",
    "CallbackSet",
    "Debounce",
    "DebounceConfig",
    "Outcome",
    "OutcomeKind",
    "Throttle",
    "ThrottleConfig",
    "TimerHandle",
    "TimerTable",
    "classify",
    "debounce",
    "dispatch_async",
    "dispatch_sync",
    "throttle",
]

__version__ = "0.1.0"
