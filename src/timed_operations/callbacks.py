"""Callback sets routed by operation outcome."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from timed_operations.config import OutcomeKind

if TYPE_CHECKING:
    from timed_operations.outcome import Outcome

T = TypeVar("T")


def _ignore(*_: Any) -> None:
    return None


@dataclass(frozen=True, slots=True)
class CallbackSet(Generic[T]):
    """Handlers for every way an operation run can end.

    Only ``on_success`` is required. Every other handler defaults to
    ``None`` and is skipped when its outcome occurs.

    Attributes:
        on_success: Called with the result of a successful run.
        on_throttle: Called when Throttle rejects a call inside its window.
        on_error: Called with the exception raised by the operation.
        on_waiting: Called right before an awaited operation is awaited.
        on_null: Called when the operation returned ``None``.
        on_empty: Called when the operation returned an empty collection.
        on_timeout: Called when an awaited operation exceeded its timeout.

    Example::

        callbacks = CallbackSet(
            on_success=lambda hits: render(hits),
            on_empty=lambda: render_placeholder(),
            on_error=lambda exc: log.warning("search failed: %s", exc),
        )
    """

    on_success: Callable[[T], Any]
    on_throttle: Callable[[], Any] | None = None
    on_error: Callable[[Exception], Any] | None = None
    on_waiting: Callable[[], Any] | None = None
    on_null: Callable[[], Any] | None = None
    on_empty: Callable[[], Any] | None = None
    on_timeout: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            handler = getattr(self, f.name)
            if f.name == "on_success" and handler is None:
                raise TypeError("on_success is required")
            if handler is not None and not callable(handler):
                raise TypeError(f"{f.name} must be callable, got {type(handler).__name__}")

    @classmethod
    def ignore(cls) -> CallbackSet[Any]:
        """Return a set that discards every outcome."""
        return cls(on_success=_ignore)

    def throttled(self) -> None:
        if self.on_throttle is not None:
            self.on_throttle()

    def waiting(self) -> None:
        if self.on_waiting is not None:
            self.on_waiting()

    def dispatch(self, outcome: Outcome) -> None:
        """Invoke the one handler matching *outcome*.

        Exceptions raised by the handler propagate to the caller.
        """
        kind = outcome.kind
        if kind is OutcomeKind.SUCCESS:
            self.on_success(outcome.value)
        elif kind is OutcomeKind.ERROR:
            if self.on_error is not None:
                assert outcome.error is not None
                self.on_error(outcome.error)
        elif kind is OutcomeKind.NULL:
            if self.on_null is not None:
                self.on_null()
        elif kind is OutcomeKind.EMPTY:
            if self.on_empty is not None:
                self.on_empty()
        elif kind is OutcomeKind.TIMEOUT:
            if self.on_timeout is not None:
                self.on_timeout()
        elif kind is OutcomeKind.WAITING:
            self.waiting()
