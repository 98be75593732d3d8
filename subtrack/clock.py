"""
Time Sources

The tracker never reads the system clock directly. A Clock is injected into
the orchestrator and queried once per operation, so renewal and staleness
checks always see the time of the current request.
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current Unix time in whole seconds."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> int:
        return int(time.time())


class FixedClock:
    """
    A clock that only moves when told to.

    Used by tests and by replay tooling.
    """

    def __init__(self, start: int = 0):
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        self._now = timestamp

    def advance(self, seconds: int) -> None:
        self._now += seconds
