"""Decorator API for throttling and debouncing plain functions."""

import inspect
from collections.abc import Callable
from functools import partial, wraps
from typing import Any, TypeVar, cast, overload

from timed_operations.callbacks import CallbackSet
from timed_operations.config import DebounceConfig, ThrottleConfig
from timed_operations.controllers.debounce import Debounce
from timed_operations.controllers.throttle import Throttle

F = TypeVar("F", bound=Callable[..., Any])


def _default_call_id(fn: Callable[..., Any]) -> str:
    return f"{fn.__module__}.{fn.__qualname__}"


@overload
def throttle(
    func: F,
    /,
) -> F: ...


@overload
def throttle(
    *,
    window: float = 1.0,
    timeout: float | None = None,
    call_id: Any = None,
    callbacks: CallbackSet[Any] | None = None,
) -> Callable[[F], F]: ...


def throttle(
    func: F | None = None,
    /,
    *,
    window: float = 1.0,
    timeout: float | None = None,
    call_id: Any = None,
    callbacks: CallbackSet[Any] | None = None,
) -> F | Callable[[F], F]:
    """Decorator that throttles calls to a function.

    The decorated function keeps its arguments but now returns the
    :class:`~timed_operations.outcome.Outcome` of the call, or ``None`` when
    the call fell inside the window and was rejected. Sync functions stay
    sync and async functions stay async.

    Args:
        func: The function to decorate (when used without parentheses).
        window: Cooldown window in seconds.
        timeout: Timeout in seconds for async functions, or None.
        call_id: Throttle key. Defaults to the function's qualified name.
        callbacks: Outcome handlers. Defaults to discarding every outcome.

    Examples:
    ```python
        @throttle(window=0.5, callbacks=CallbackSet(on_success=print))
        async def refresh(user_id: str) -> dict:
            return await api.fetch(user_id)

        @throttle
        def save() -> None:
            store.flush()
    ```
    """
    config = ThrottleConfig(window=window, timeout=timeout)

    def decorator(fn: F) -> F:
        controller = Throttle(config)
        key = call_id if call_id is not None else _default_call_id(fn)
        handlers = callbacks or CallbackSet.ignore()

        if inspect.iscoroutinefunction(fn):

            @wraps(fn)
            async def wrapper(*args: Any, **kwargs: Any) -> Any:
                return await controller.run(key, partial(fn, *args, **kwargs), handlers)

        else:

            @wraps(fn)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                return controller.run_sync(key, partial(fn, *args, **kwargs), handlers)

        wrapper.throttle = controller  # type: ignore[attr-defined]
        wrapper.reset = partial(controller.reset, key)  # type: ignore[attr-defined]

        return cast("F", wrapper)

    if func is not None:
        return decorator(func)

    return decorator


@overload
def debounce(
    func: F,
    /,
) -> F: ...


@overload
def debounce(
    *,
    delay: float = 1.0,
    call_id: Any = None,
    callbacks: CallbackSet[Any] | None = None,
) -> Callable[[F], F]: ...


def debounce(
    func: F | None = None,
    /,
    *,
    delay: float = 1.0,
    call_id: Any = None,
    callbacks: CallbackSet[Any] | None = None,
) -> F | Callable[[F], F]:
    """Decorator that debounces calls to a function.

    Calling the decorated function schedules it instead of running it, and
    returns the :class:`~timed_operations.timers.TimerHandle` of the
    scheduled run. Only the arguments of the last call in a quiet period are
    used. Async functions run on the caller's event loop; sync functions run
    on the shared background loop thread.

    Args:
        func: The function to decorate (when used without parentheses).
        delay: Quiet-period delay in seconds.
        call_id: Debounce key. Defaults to the function's qualified name.
        callbacks: Outcome handlers. Defaults to discarding every outcome.

    Examples:
    ```python
        @debounce(delay=0.3, callbacks=CallbackSet(on_success=show_results))
        async def search(query: str) -> list[str]:
            return await index.lookup(query)

        await search("py")
        await search("pyth")
        await search("python")  # only this one runs
    ```
    """
    config = DebounceConfig(delay=delay)

    def decorator(fn: F) -> F:
        controller = Debounce(config)
        key = call_id if call_id is not None else _default_call_id(fn)
        handlers = callbacks or CallbackSet.ignore()

        if inspect.iscoroutinefunction(fn):

            @wraps(fn)
            async def wrapper(*args: Any, **kwargs: Any) -> Any:
                return await controller.run(key, partial(fn, *args, **kwargs), handlers)

        else:

            @wraps(fn)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                return controller.run_sync(key, partial(fn, *args, **kwargs), handlers)

        wrapper.debounce = controller  # type: ignore[attr-defined]
        wrapper.cancel = partial(controller.cancel, key)  # type: ignore[attr-defined]
        wrapper.close = controller.close  # type: ignore[attr-defined]

        return cast("F", wrapper)

    if func is not None:
        return decorator(func)

    return decorator
