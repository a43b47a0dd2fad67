"""
Tests for leave day classification and month overlap.
"""

from datetime import date

import pytest

from hr_engines.leave_days import (
    DayType,
    calculate_leave_days,
    month_bounds,
    overlap_days_in_month,
)
from hr_kernel.exceptions import InvalidLeaveRangeError, InvalidPayrollMonthError
from hr_modules.payroll.models import PublicHoliday


class TestCalculateLeaveDays:

    def test_friday_saturday_weekend(self):
        # 2024-05-01 is a Wednesday
        result = calculate_leave_days(date(2024, 5, 1), date(2024, 5, 7))

        assert result.total_days == 7
        assert result.working_days == 5
        assert result.weekend_days == 2
        assert result.holiday_days == 0
        assert result.leave_days_to_deduct == 5
        assert [d.day_of_week for d in result.days[2:4]] == ["Friday", "Saturday"]

    def test_holiday_on_working_day(self):
        holiday = PublicHoliday(date(2024, 5, 6), "Company Day")
        result = calculate_leave_days(date(2024, 5, 1), date(2024, 5, 7), [holiday])

        assert result.working_days == 4
        assert result.holiday_days == 1
        assert result.overlapping_holidays == (holiday,)
        assert result.days[5].holiday_name == "Company Day"

    def test_holiday_on_weekend_counts_as_holiday(self):
        result = calculate_leave_days(
            date(2024, 5, 3), date(2024, 5, 4),
            [PublicHoliday(date(2024, 5, 3), "Friday Holiday")],
        )

        assert [d.day_type for d in result.days] == [DayType.HOLIDAY, DayType.WEEKEND]
        assert result.leave_days_to_deduct == 0

    def test_holidays_outside_span_ignored(self):
        result = calculate_leave_days(
            date(2024, 5, 1), date(2024, 5, 2),
            [PublicHoliday(date(2024, 9, 23), "National Day")],
        )

        assert result.overlapping_holidays == ()
        assert result.working_days == 2

    def test_single_day(self):
        result = calculate_leave_days(date(2024, 5, 1), date(2024, 5, 1))

        assert result.total_days == 1
        assert result.days[0].day_type == DayType.WORKING

    def test_custom_weekend(self):
        # Saturday/Sunday weekend
        result = calculate_leave_days(
            date(2024, 5, 1), date(2024, 5, 7), weekend_days=frozenset({5, 6}),
        )

        assert result.weekend_days == 2
        assert result.days[2].day_type == DayType.WORKING

    def test_reversed_range_rejected(self):
        with pytest.raises(InvalidLeaveRangeError) as exc_info:
            calculate_leave_days(date(2024, 5, 7), date(2024, 5, 1))

        assert exc_info.value.start_date == "2024-05-07"


class TestMonthOverlap:

    def test_month_bounds_leap_february(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_span_inside_month(self):
        assert overlap_days_in_month(date(2024, 5, 10), date(2024, 5, 12), "2024-05") == 3

    def test_span_crossing_month_end(self):
        start, end = date(2024, 5, 28), date(2024, 6, 3)

        assert overlap_days_in_month(start, end, "2024-05") == 4
        assert overlap_days_in_month(start, end, "2024-06") == 3

    def test_span_outside_month(self):
        assert overlap_days_in_month(date(2024, 4, 1), date(2024, 4, 5), "2024-05") == 0

    def test_invalid_month(self):
        with pytest.raises(InvalidPayrollMonthError):
            overlap_days_in_month(date(2024, 5, 1), date(2024, 5, 2), "2024-13")
