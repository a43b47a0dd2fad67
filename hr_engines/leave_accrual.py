"""
Monthly Leave Accrual Engine (``hr_engines.leave_accrual``).

Responsibility
--------------
Work out how many leave days one employee earns for one month under each
active accrual policy, and the balance each credit produces:

* A policy with a non-empty ``employment_types`` list only covers
  employees of those types; other policies are ignored for the employee.
* Employment months = whole 30.44-day months from hire date to the
  accrual date.  An employee still inside ``probation_period_months`` is
  skipped unless the policy accrues during probation.
* Days earned = ``monthly_accrual_rate``.  When the employee was hired
  inside the accrual month and the policy prorates new hires, the rate is
  scaled by ``(days_in_month - hire_day + 1) / days_in_month``.  Days are
  rounded half-up to 2 places.
* The credit is added to the (employee, leave type, year) balance, in
  both ``total_entitled`` and ``remaining``; a missing balance starts at
  zero.

Architecture position
---------------------
**Engines layer** -- pure, ZERO I/O.  Current balances and the accrual
date are supplied by the caller; persisting the new balances and history
entries is the service's job.

Failure modes
-------------
* No hire date raises ``MissingHireDateError``.
* A malformed period raises ``InvalidPayrollMonthError``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from hr_engines.leave_days import month_bounds
from hr_engines.tracer import traced_engine
from hr_kernel.exceptions import MissingHireDateError
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import (
    Employee,
    LeaveAccrual,
    LeaveAccrualPolicy,
    LeaveBalance,
    parse_payroll_month,
)

logger = get_logger("engines.leave_accrual")

AVERAGE_MONTH_DAYS = Decimal("30.44")

PROBATION_REASON = "Employee in probation period"
NOT_YET_HIRED_REASON = "Hired after accrual period"

_CENT = Decimal("0.01")
_FACTOR_PLACES = Decimal("0.0001")
_ZERO = Decimal("0")
_ONE = Decimal("1")


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


class AccrualOutcome(str, Enum):
    ACCRUED = "accrued"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class PolicyAccrual:
    """Result of applying one policy; ``accrual`` and ``balance`` are set when days were credited."""

    leave_type: str
    outcome: AccrualOutcome
    days_accrued: Decimal = _ZERO
    reason: str | None = None
    accrual: LeaveAccrual | None = None
    balance: LeaveBalance | None = None


@dataclass(frozen=True)
class EmployeeAccrualResult:
    employee_id: str
    employee_name: str
    accrual_period: str
    employment_months: int
    entries: tuple[PolicyAccrual, ...] = ()

    @property
    def accrued(self) -> tuple[PolicyAccrual, ...]:
        return tuple(e for e in self.entries if e.outcome == AccrualOutcome.ACCRUED)

    @property
    def skipped(self) -> tuple[PolicyAccrual, ...]:
        return tuple(e for e in self.entries if e.outcome == AccrualOutcome.SKIPPED)

    @property
    def total_days_accrued(self) -> Decimal:
        return sum((e.days_accrued for e in self.accrued), _ZERO)


def employment_months(hire_date: date, as_of: date) -> int:
    """Whole average-length months of service; negative before the hire date."""
    return math.floor(Decimal((as_of - hire_date).days) / AVERAGE_MONTH_DAYS)


def proration_factor(hire_date: date, period_start: date, period_end: date) -> Decimal:
    """Share of the month from the hire day onward, or 1 when hired before the month."""
    if hire_date < period_start:
        return _ONE
    days_in_month = period_end.day
    return Decimal(days_in_month - hire_date.day + 1) / Decimal(days_in_month)


@traced_engine(
    "leave_accrual", "1.0",
    fingerprint_fields=("accrual_period", "accrual_date"),
)
def calculate_leave_accrual(
    employee: Employee,
    policies: Iterable[LeaveAccrualPolicy],
    accrual_period: str,
    accrual_date: date,
    balances: Iterable[LeaveBalance] = (),
) -> EmployeeAccrualResult:
    """
    Apply every covering policy to one employee for one ``YYYY-MM`` period.

    Args:
        employee: Supplies ``hire_date`` and ``employment_type``.
        policies: Accrual policies; inactive ones are ignored.
        accrual_period: The month being accrued.
        accrual_date: The day the accrual runs; employment months are
            counted up to it.
        balances: The employee's current balances.  Only those for the
            period's year are credited.

    Raises:
        MissingHireDateError: If the employee has no hire date.
    """
    if employee.hire_date is None:
        raise MissingHireDateError(employee.id)
    year, month = parse_payroll_month(accrual_period)
    period_start, period_end = month_bounds(year, month)
    months = employment_months(employee.hire_date, accrual_date)

    current = {
        b.leave_type: b
        for b in balances
        if b.year == year and b.employee_id == employee.id
    }
    entries: list[PolicyAccrual] = []

    for policy in policies:
        if not policy.is_active or not policy.covers(employee):
            continue
        if employee.hire_date > period_end:
            entries.append(PolicyAccrual(
                policy.leave_type, AccrualOutcome.SKIPPED, reason=NOT_YET_HIRED_REASON,
            ))
            continue
        if months < policy.probation_period_months and not policy.accrue_during_probation:
            entries.append(PolicyAccrual(
                policy.leave_type, AccrualOutcome.SKIPPED, reason=PROBATION_REASON,
            ))
            continue

        factor = _ONE
        if policy.prorate_for_new_hires:
            factor = proration_factor(employee.hire_date, period_start, period_end)
        prorated = factor != _ONE
        days = _round2(policy.monthly_accrual_rate * factor)

        before = current.get(policy.leave_type) or LeaveBalance(
            employee_id=employee.id, leave_type=policy.leave_type, year=year,
        )
        after = before.credited(days)
        current[policy.leave_type] = after

        accrual = LeaveAccrual(
            employee_id=employee.id,
            leave_type=policy.leave_type,
            accrual_date=accrual_date,
            accrual_period=accrual_period,
            days_accrued=days,
            balance_before=before.total_entitled,
            balance_after=after.total_entitled,
            accrual_rate=policy.monthly_accrual_rate,
            employment_months=months,
            is_prorated=prorated,
            proration_factor=factor.quantize(_FACTOR_PLACES, rounding=ROUND_HALF_UP),
            notes="Prorated for mid-month hire" if prorated else "Standard monthly accrual",
        )
        entries.append(PolicyAccrual(
            policy.leave_type, AccrualOutcome.ACCRUED, days, accrual=accrual, balance=after,
        ))

    result = EmployeeAccrualResult(
        employee_id=employee.id,
        employee_name=employee.full_name,
        accrual_period=accrual_period,
        employment_months=months,
        entries=tuple(entries),
    )
    logger.info(
        "leave_accrual_calculated",
        extra={
            "employee_id": employee.id,
            "accrual_period": accrual_period,
            "employment_months": months,
            "accrued_count": len(result.accrued),
            "skipped_count": len(result.skipped),
            "total_days_accrued": str(result.total_days_accrued),
        },
    )
    return result
