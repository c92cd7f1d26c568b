"""Time sources for the governance ledger."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Protocol

from ..datastructures.type_aliases import DurationSeconds, Timestamp


class Clock(Protocol):
    """Anything that can report the current time in epoch seconds."""

    def now(self) -> Timestamp: ...


class SystemClock:
    """Wall clock backed by ``time.time()``."""

    def now(self) -> Timestamp:
        return time.time()


@dataclass(slots=True)
class ManualClock:
    """
    Deterministic clock for tests and simulations.

    Time only moves when ``advance`` or ``set`` is called.
    """

    current: Timestamp = 1_700_000_000.0
    _lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.current < 0:
            raise ValueError("Clock time cannot be negative")

    def now(self) -> Timestamp:
        with self._lock:
            return self.current

    def advance(self, seconds: DurationSeconds) -> Timestamp:
        """Move time forward and return the new reading."""
        if seconds < 0:
            raise ValueError("Cannot move a clock backwards")
        with self._lock:
            self.current += seconds
            return self.current

    def set(self, timestamp: Timestamp) -> None:
        if timestamp < 0:
            raise ValueError("Clock time cannot be negative")
        with self._lock:
            self.current = timestamp
