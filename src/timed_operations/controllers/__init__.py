from timed_operations.controllers.base import BaseController
from timed_operations.controllers.debounce import Debounce
from timed_operations.controllers.throttle import Throttle

__all__ = [
    "BaseController",
    "Debounce",
    "Throttle",
]
