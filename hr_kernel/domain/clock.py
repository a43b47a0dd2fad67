"""
Clock -- injectable source of "now" for payroll services.

Engines take ``calculation_date`` as an argument and never read time.
PayrollService asks its Clock, so a run stamped at month end can be
replayed in tests with a DeterministicClock pinned to the same instant.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """Constructor-injected time source. ``now()`` is timezone-aware."""

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """Clock frozen at ``fixed_time`` until moved with ``advance``."""

    def __init__(self, fixed_time: datetime | None = None):
        self._now = fixed_time or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta = timedelta(days=1)) -> None:
        self._now += delta
