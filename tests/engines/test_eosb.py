"""
Tests for the end-of-service benefit engine.

Covers service period splitting, the three service tiers, resignation
rules, proportional months/days, housing inclusion, deductions and the
failure modes.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from hr_engines.eosb import TerminationType, calculate_eosb, service_period
from hr_kernel.exceptions import InvalidServicePeriodError, MissingHireDateError

HIRE_DATE = date(2012, 1, 1)


def _after(years: int = 0, months: int = 0, days: int = 0) -> date:
    return HIRE_DATE + timedelta(days=years * 365 + months * 30 + days)


@pytest.fixture
def employee(employee_factory):
    return employee_factory(hire_date=HIRE_DATE)


class TestServicePeriod:

    def test_split(self):
        period = service_period(HIRE_DATE, _after(2, 1, 15))

        assert (period.years, period.months, period.days) == (2, 1, 15)
        assert period.total_days == 2 * 365 + 45

    def test_same_day(self):
        period = service_period(HIRE_DATE, HIRE_DATE)

        assert (period.years, period.months, period.days) == (0, 0, 0)

    def test_reversed_rejected(self):
        with pytest.raises(InvalidServicePeriodError):
            service_period(HIRE_DATE, HIRE_DATE - timedelta(days=1))


class TestTermination:
    """Non-resignation: a full month's base per year in every tier."""

    def test_seven_years_with_leftover(self, employee):
        result = calculate_eosb(
            employee, TerminationType.TERMINATION_WITHOUT_CAUSE, _after(7, 3, 10),
        )

        assert result.years_0_to_5 == 5
        assert result.years_5_to_10 == 2
        assert result.years_above_10 == 0
        assert result.eosb_amount_0_to_5 == Decimal("50000.00")
        assert result.eosb_amount_5_to_10 == Decimal("20000.00")
        # 10000 x 3/12 + 10000 x 10/365
        assert result.proportional_amount == Decimal("2773.97")
        assert result.total_eosb_amount == Decimal("72773.97")
        assert result.net_eosb_amount == result.total_eosb_amount

    def test_twelve_years_all_tiers(self, employee):
        result = calculate_eosb(employee, "contract_end", _after(12))

        assert result.termination_type is TerminationType.CONTRACT_END
        assert result.eosb_amount_0_to_5 == Decimal("50000.00")
        assert result.eosb_amount_5_to_10 == Decimal("50000.00")
        assert result.eosb_amount_above_10 == Decimal("20000.00")
        assert result.total_eosb_amount == Decimal("120000.00")

    def test_housing_included(self, employee):
        result = calculate_eosb(
            employee, TerminationType.RETIREMENT, _after(2),
            include_housing_allowance=True,
        )

        assert result.calculation_base == Decimal("13000.00")
        assert result.total_eosb_amount == Decimal("26000.00")

    def test_last_basic_salary_override(self, employee):
        result = calculate_eosb(
            employee, TerminationType.DEATH, _after(1),
            last_basic_salary=Decimal("12000"),
        )

        assert result.last_basic_salary == Decimal("12000.00")
        assert result.total_eosb_amount == Decimal("12000.00")

    def test_deductions(self, employee):
        result = calculate_eosb(
            employee, TerminationType.CONTRACT_END, _after(3),
            deductions=Decimal("1500"),
        )

        assert result.total_eosb_amount == Decimal("30000.00")
        assert result.deductions == Decimal("1500.00")
        assert result.net_eosb_amount == Decimal("28500.00")


class TestResignation:

    def test_under_two_years_only_proportional(self, employee):
        result = calculate_eosb(employee, TerminationType.RESIGNATION, _after(1, 6))

        assert result.eosb_amount_0_to_5 == Decimal("0")
        assert result.years_0_to_5 == 0
        # Half rate for the 6 leftover months
        assert result.proportional_amount == Decimal("2500.00")
        assert result.total_eosb_amount == Decimal("2500.00")
        assert "No EOSB: Service less than 2 years (resignation)" in result.calculation_details

    def test_three_years_half_month_per_year(self, employee):
        result = calculate_eosb(employee, TerminationType.RESIGNATION, _after(3))

        assert result.eosb_amount_0_to_5 == Decimal("15000.00")
        assert result.total_eosb_amount == Decimal("15000.00")

    def test_seven_years(self, employee):
        result = calculate_eosb(employee, TerminationType.RESIGNATION, _after(7, 3, 10))

        assert result.eosb_amount_0_to_5 == Decimal("25000.00")
        assert result.eosb_amount_5_to_10 == Decimal("20000.00")
        # Full rate for the leftover once past 5 years
        assert result.proportional_amount == Decimal("2773.97")
        assert result.total_eosb_amount == Decimal("47773.97")


class TestFailureModes:

    def test_missing_hire_date(self, employee_factory):
        with pytest.raises(MissingHireDateError) as exc_info:
            calculate_eosb(employee_factory(), TerminationType.RESIGNATION, date(2024, 1, 1))

        assert exc_info.value.code == "MISSING_HIRE_DATE"

    def test_termination_before_hire(self, employee):
        with pytest.raises(InvalidServicePeriodError):
            calculate_eosb(employee, TerminationType.RESIGNATION, date(2011, 1, 1))

    def test_unknown_termination_type(self, employee):
        with pytest.raises(ValueError):
            calculate_eosb(employee, "fired_into_space", _after(3))
