"""
Leave Day Engine (``hr_engines.leave_days``).

Responsibility
--------------
Pure calendar arithmetic for leave requests:

* ``calculate_leave_days`` -- classify each day of a leave span as a
  working day, a weekend day (Friday/Saturday by default) or a public
  holiday; only working days are deducted from the leave balance.
* ``overlap_days_in_month`` -- the calendar days of a leave span that fall
  inside a payroll month, used to charge unpaid leave to the month it
  was actually taken in.

Architecture position
---------------------
**Engines layer** -- ZERO I/O.  Holidays are passed in by the caller.

Failure modes
-------------
* ``end_date < start_date`` raises ``InvalidLeaveRangeError``.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from hr_kernel.exceptions import InvalidLeaveRangeError
from hr_modules.payroll.models import PublicHoliday, parse_payroll_month

# Python weekday numbers: Monday=0 ... Friday=4, Saturday=5
SAUDI_WEEKEND: frozenset[int] = frozenset({4, 5})


class DayType(str, Enum):
    WORKING = "working"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"


@dataclass(frozen=True)
class LeaveDay:
    """Classification of one calendar day."""
    date: date
    day_of_week: str
    day_type: DayType
    holiday_name: str | None = None


@dataclass(frozen=True)
class LeaveDaysBreakdown:
    """Day-by-day classification of a leave span."""
    start_date: date
    end_date: date
    days: tuple[LeaveDay, ...]
    overlapping_holidays: tuple[PublicHoliday, ...] = ()

    @property
    def total_days(self) -> int:
        return len(self.days)

    @property
    def working_days(self) -> int:
        return sum(1 for d in self.days if d.day_type == DayType.WORKING)

    @property
    def weekend_days(self) -> int:
        return sum(1 for d in self.days if d.day_type == DayType.WEEKEND)

    @property
    def holiday_days(self) -> int:
        return sum(1 for d in self.days if d.day_type == DayType.HOLIDAY)

    @property
    def leave_days_to_deduct(self) -> int:
        return self.working_days


def calculate_leave_days(
    start_date: date,
    end_date: date,
    holidays: Iterable[PublicHoliday] = (),
    weekend_days: frozenset[int] = SAUDI_WEEKEND,
) -> LeaveDaysBreakdown:
    """
    Classify every day from ``start_date`` to ``end_date`` inclusive.

    A public holiday that falls on a weekend counts as a holiday.

    Raises:
        InvalidLeaveRangeError: If ``end_date`` precedes ``start_date``.
    """
    if end_date < start_date:
        raise InvalidLeaveRangeError(start_date.isoformat(), end_date.isoformat())

    by_date = {h.date: h for h in holidays}
    days: list[LeaveDay] = []
    current = start_date
    while current <= end_date:
        holiday = by_date.get(current)
        if holiday is not None:
            day_type = DayType.HOLIDAY
        elif current.weekday() in weekend_days:
            day_type = DayType.WEEKEND
        else:
            day_type = DayType.WORKING
        days.append(
            LeaveDay(
                date=current,
                day_of_week=calendar.day_name[current.weekday()],
                day_type=day_type,
                holiday_name=holiday.name if holiday else None,
            )
        )
        current += timedelta(days=1)

    overlapping = tuple(
        sorted(
            (h for h in by_date.values() if start_date <= h.date <= end_date),
            key=lambda h: h.date,
        )
    )
    return LeaveDaysBreakdown(
        start_date=start_date,
        end_date=end_date,
        days=tuple(days),
        overlapping_holidays=overlapping,
    )


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def overlap_days_in_month(start_date: date, end_date: date, month: str) -> int:
    """
    Calendar days of ``[start_date, end_date]`` inside the ``YYYY-MM`` month.

    Returns 0 when the span and the month do not intersect.

    Raises:
        InvalidLeaveRangeError: If ``end_date`` precedes ``start_date``.
        InvalidPayrollMonthError: If ``month`` is malformed.
    """
    if end_date < start_date:
        raise InvalidLeaveRangeError(start_date.isoformat(), end_date.isoformat())
    month_start, month_end = month_bounds(*parse_payroll_month(month))
    overlap_start = max(start_date, month_start)
    overlap_end = min(end_date, month_end)
    if overlap_start > overlap_end:
        return 0
    return (overlap_end - overlap_start).days + 1
