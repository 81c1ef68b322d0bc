"""Time and identifier source interfaces."""

from datetime import datetime
from typing import Callable, Protocol


class Clock(Protocol):
    """Interface for reading the current local wall-clock time."""

    def now(self) -> datetime:
        ...


# Returns a collision-resistant string without coordination
IdGenerator = Callable[[], str]
