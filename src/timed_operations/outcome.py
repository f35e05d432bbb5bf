"""Run an operation once and classify how it ended.

Both controllers hand their operations to this module. An operation is a
zero-argument callable returning a value (or, for the async entry points,
an awaitable), or an awaitable on its own. The result is mapped to an
:class:`Outcome` with the precedence Error > Null > Empty > Success, and
then exactly one handler of a :class:`CallbackSet` is invoked.

Errors raised by the operation are captured. Errors raised by a handler
are not: they propagate to whoever invoked the dispatch.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Collection
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

from timed_operations.config import OutcomeKind

if TYPE_CHECKING:
    from timed_operations.callbacks import CallbackSet

logger = logging.getLogger(__name__)

Operation: TypeAlias = Callable[[], Any] | Awaitable[Any]

# Text and byte strings are values, not collections.
_SCALAR_SEQUENCES = (str, bytes, bytearray)


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of one operation run."""

    kind: OutcomeKind
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def __repr__(self) -> str:
        if self.kind is OutcomeKind.SUCCESS:
            return f"Outcome(success, value={self.value!r})"
        if self.kind is OutcomeKind.ERROR:
            return f"Outcome(error, error={self.error!r})"
        return f"Outcome({self.kind.value})"


def classify(value: Any) -> Outcome:
    """Map a returned value to NULL, EMPTY or SUCCESS."""
    if value is None:
        return Outcome(OutcomeKind.NULL)
    if isinstance(value, Collection) and not isinstance(value, _SCALAR_SEQUENCES) and len(value) == 0:
        return Outcome(OutcomeKind.EMPTY)
    return Outcome(OutcomeKind.SUCCESS, value=value)


def release(operation: Any) -> None:
    """Close a coroutine that will never be awaited."""
    if inspect.iscoroutine(operation):
        operation.close()


def _failed(exc: Exception) -> Outcome:
    logger.debug("operation raised %r", exc)
    return Outcome(OutcomeKind.ERROR, error=exc)


def execute_sync(operation: Callable[[], Any]) -> Outcome:
    """Call *operation* once and classify the result."""
    try:
        value = operation()
    except Exception as exc:
        return _failed(exc)

    if inspect.isawaitable(value):
        release(value)
        return _failed(TypeError("synchronous run received an awaitable, use the async entry point"))

    return classify(value)


async def execute_async(
    operation: Operation,
    *,
    timeout: float | None = None,
    on_waiting: Callable[[], Any] | None = None,
) -> Outcome:
    """Invoke or await *operation* once and classify the result.

    Args:
        operation: Zero-argument callable or awaitable.
        timeout: Seconds to wait for an awaitable result. None waits forever.
        on_waiting: Called right before the pending result is awaited.
    """
    if inspect.isawaitable(operation):
        pending: Any = operation
    else:
        try:
            pending = operation()
        except Exception as exc:
            return _failed(exc)

    if not inspect.isawaitable(pending):
        return classify(pending)

    if on_waiting is not None:
        try:
            on_waiting()
        except BaseException:
            release(pending)
            raise

    scope = asyncio.timeout(timeout)
    try:
        async with scope:
            value = await pending
    except TimeoutError as exc:
        if scope.expired():
            logger.debug("operation timed out after %ss", timeout)
            return Outcome(OutcomeKind.TIMEOUT)
        return _failed(exc)
    except Exception as exc:
        return _failed(exc)

    return classify(value)


def dispatch_sync(operation: Callable[[], Any], callbacks: CallbackSet[Any]) -> Outcome:
    """Run *operation* and invoke the matching handler of *callbacks*."""
    outcome = execute_sync(operation)
    callbacks.dispatch(outcome)
    return outcome


async def dispatch_async(
    operation: Operation,
    callbacks: CallbackSet[Any],
    *,
    timeout: float | None = None,
) -> Outcome:
    """Await *operation* and invoke the matching handler of *callbacks*."""
    outcome = await execute_async(operation, timeout=timeout, on_waiting=callbacks.on_waiting)
    callbacks.dispatch(outcome)
    return outcome
