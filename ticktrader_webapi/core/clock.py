"""
Core Module - Clock.

============================================================
RESPONSIBILITY
============================================================
Provides a testable clock abstraction for request signing.

- The signer reads time only through this clock
- Enables deterministic signatures in tests
- Millisecond timestamps are computed with integer arithmetic

============================================================
DESIGN PRINCIPLES
============================================================
- UTC only
- Mockable for testing
- Thread-safe

============================================================
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Generator, Optional
import threading
import time


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MILLISECOND = timedelta(milliseconds=1)


# ============================================================
# CLOCK PROTOCOL
# ============================================================

class ClockProtocol(ABC):
    """Abstract interface for the wall clock."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current UTC datetime."""
        pass

    def timestamp_ms(self) -> int:
        """Get current Unix timestamp in whole milliseconds."""
        return to_millis(self.now())


# ============================================================
# SYSTEM CLOCK (PRODUCTION)
# ============================================================

class SystemClock(ClockProtocol):
    """Production clock using actual system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def timestamp_ms(self) -> int:
        return time.time_ns() // 1_000_000


# ============================================================
# MOCK CLOCK (TESTING)
# ============================================================

class MockClock(ClockProtocol):
    """
    Mock clock for testing.

    Allows time manipulation for deterministic tests.
    """

    def __init__(self, initial_time: Optional[datetime] = None):
        """
        Initialize mock clock.

        Args:
            initial_time: Starting time (defaults to current UTC)
        """
        self._time = _ensure_utc(initial_time or datetime.now(timezone.utc))
        self._lock = threading.Lock()

    @classmethod
    def from_millis(cls, timestamp_ms: int) -> "MockClock":
        """Create a clock frozen at the given epoch milliseconds."""
        return cls(from_millis(timestamp_ms))

    def now(self) -> datetime:
        with self._lock:
            return self._time

    def set_time(self, new_time: datetime) -> None:
        """Set the current time."""
        with self._lock:
            self._time = _ensure_utc(new_time)

    def advance(self, seconds: float = 0, **kwargs) -> None:
        """
        Advance time by the specified amount.

        Args:
            seconds: Number of seconds to advance
            **kwargs: Passed to timedelta (milliseconds, minutes, etc.)
        """
        with self._lock:
            self._time = self._time + timedelta(seconds=seconds, **kwargs)

    @contextmanager
    def freeze(self, at_time: Optional[datetime] = None) -> Generator[None, None, None]:
        """
        Context manager to freeze time, restoring the previous time on exit.

        Args:
            at_time: Time to freeze at (defaults to current)
        """
        with self._lock:
            original_time = self._time
            if at_time:
                self._time = _ensure_utc(at_time)

        try:
            yield
        finally:
            with self._lock:
                self._time = original_time


# ============================================================
# TIMESTAMP UTILITIES
# ============================================================

def _ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_millis(dt: datetime) -> int:
    """Convert datetime to epoch milliseconds without float rounding."""
    return (_ensure_utc(dt) - EPOCH) // ONE_MILLISECOND


def from_millis(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to a UTC datetime."""
    return EPOCH + timedelta(milliseconds=timestamp_ms)


_default_clock = SystemClock()


def default_clock() -> ClockProtocol:
    """Shared stateless system clock."""
    return _default_clock


__all__ = [
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "to_millis",
    "from_millis",
    "default_clock",
]
