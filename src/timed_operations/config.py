"""Configuration types for the timed operations library."""

from dataclasses import dataclass
from enum import StrEnum


class OutcomeKind(StrEnum):
    """Classification of a single operation run.

    NULL:    The operation returned ``None``.
    EMPTY:   The operation returned an empty collection.
    SUCCESS: The operation returned any other value.
    ERROR:   The operation raised.
    TIMEOUT: An awaited operation did not settle within its timeout.
    WAITING: The operation is still pending.
    """

    NULL = "null"
    EMPTY = "empty"
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"
    WAITING = "waiting"


def validate_duration(name: str, value: float) -> float:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def validate_timeout(value: float | None) -> float | None:
    if value is not None and value <= 0:
        raise ValueError(f"timeout must be positive or None, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class ThrottleConfig:
    """Configuration for a Throttle instance.

    Attributes:
        window: Cooldown window in seconds. It opens when an accepted call
                starts, not when it completes.
        timeout: Default timeout in seconds for awaited operations.
                 None means no timeout.
    """

    window: float = 1.0
    timeout: float | None = None

    def __post_init__(self) -> None:
        validate_duration("window", self.window)
        validate_timeout(self.timeout)


@dataclass(frozen=True, slots=True)
class DebounceConfig:
    """Configuration for a Debounce instance.

    Attributes:
        delay: Quiet-period delay in seconds. The operation runs this long
               after the last call for its key.
    """

    delay: float = 1.0

    def __post_init__(self) -> None:
        validate_duration("delay", self.delay)
