"""
Block-time sources.

The contract never reads the wall clock directly; it asks an injected
``Clock``. ``ManualClock`` is the local-chain equivalent of
``evm_increaseTime``.
"""

import time
from abc import ABC, abstractmethod
from typing import Optional


class Clock(ABC):
    @abstractmethod
    def now(self) -> int:
        """Current block timestamp in whole seconds."""


class SystemClock(Clock):
    def now(self) -> int:
        return int(time.time())


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[int] = None):
        self._now = int(time.time()) if start is None else int(start)

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")
        self._now += int(seconds)
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError("Cannot move the clock backwards")
        self._now = int(timestamp)
