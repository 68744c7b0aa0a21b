"""Time source used by every time-dependent engine component."""
import time
from typing import Callable

# Returns epoch milliseconds
Clock = Callable[[], float]


def system_clock() -> float:
    """Read the wall clock in milliseconds."""
    return time.time() * 1000
