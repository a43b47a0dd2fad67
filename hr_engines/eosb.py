"""
End-of-Service Benefit Engine (``hr_engines.eosb``).

Responsibility
--------------
Compute the Saudi labor-law end-of-service benefit (EOSB) owed when an
employee leaves:

* Service period split into whole years (365 days), months (30 days) and
  days.
* Calculation base = last basic salary, plus the housing allowance when
  requested.
* Resignation:
    - under 2 years: nothing for the whole years;
    - 2 to 5 years: half a month's base per year;
    - 5 to 10 years: 5 half months, then a full month per year beyond 5;
    - 10+ years: 5 half months, 5 full months, a full month per year
      beyond 10.
* Every other termination type: a full month's base per year in every
  tier.
* The leftover months and days earn a proportional amount, at half rate
  for a resignation under 5 years.
* Net = total - deductions.

Architecture position
---------------------
**Engines layer** -- pure, ZERO I/O.  ``termination_date`` is always
supplied by the caller.

Failure modes
-------------
* No hire date raises ``MissingHireDateError``.
* Termination before hire raises ``InvalidServicePeriodError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from hr_engines.tracer import traced_engine
from hr_kernel.exceptions import InvalidServicePeriodError, MissingHireDateError
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import Employee

logger = get_logger("engines.eosb")

_CENT = Decimal("0.01")
_ZERO = Decimal("0")
_TWO = Decimal("2")


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


class TerminationType(str, Enum):
    RESIGNATION = "resignation"
    TERMINATION_WITH_CAUSE = "termination_with_cause"
    TERMINATION_WITHOUT_CAUSE = "termination_without_cause"
    CONTRACT_END = "contract_end"
    RETIREMENT = "retirement"
    DEATH = "death"


@dataclass(frozen=True)
class ServicePeriod:
    years: int
    months: int
    days: int
    total_days: int


@dataclass(frozen=True)
class EOSBResult:
    """Benefit breakdown by service tier."""

    employee_id: str
    termination_type: TerminationType
    hire_date: date
    termination_date: date
    service: ServicePeriod
    last_basic_salary: Decimal
    include_housing_allowance: bool
    calculation_base: Decimal
    years_0_to_5: int
    years_5_to_10: int
    years_above_10: int
    eosb_amount_0_to_5: Decimal
    eosb_amount_5_to_10: Decimal
    eosb_amount_above_10: Decimal
    proportional_amount: Decimal
    total_eosb_amount: Decimal
    deductions: Decimal
    net_eosb_amount: Decimal
    calculation_details: tuple[str, ...] = ()


def service_period(hire_date: date, termination_date: date) -> ServicePeriod:
    """Split the days between two dates into 365-day years and 30-day months."""
    if termination_date < hire_date:
        raise InvalidServicePeriodError(hire_date.isoformat(), termination_date.isoformat())
    total = (termination_date - hire_date).days
    years, remainder = divmod(total, 365)
    months, days = divmod(remainder, 30)
    return ServicePeriod(years=years, months=months, days=days, total_days=total)


@traced_engine(
    "eosb", "1.0",
    fingerprint_fields=("termination_type", "termination_date", "last_basic_salary"),
)
def calculate_eosb(
    employee: Employee,
    termination_type: TerminationType,
    termination_date: date,
    last_basic_salary: Decimal | None = None,
    include_housing_allowance: bool = False,
    deductions: Decimal = _ZERO,
) -> EOSBResult:
    """
    Compute an employee's end-of-service benefit.

    Args:
        employee: Supplies ``hire_date``, ``basic_salary`` and
            ``housing_allowance``.
        termination_type: How the employment ended.
        termination_date: Last day of service.
        last_basic_salary: Overrides ``employee.basic_salary`` when given.
        include_housing_allowance: Add the housing allowance to the base.
        deductions: Amounts owed by the employee, subtracted from the total.

    Raises:
        MissingHireDateError: If the employee has no hire date.
        InvalidServicePeriodError: If ``termination_date`` precedes hire.
    """
    if employee.hire_date is None:
        raise MissingHireDateError(employee.id)
    termination_type = TerminationType(termination_type)
    service = service_period(employee.hire_date, termination_date)
    years = service.years

    basic = last_basic_salary
    if basic is None:
        basic = employee.basic_salary if employee.basic_salary is not None else _ZERO
    base = basic
    if include_housing_allowance and employee.housing_allowance is not None:
        base += employee.housing_allowance
    half = base / _TWO

    years_0_to_5 = min(years, 5)
    years_5_to_10 = min(max(years - 5, 0), 5)
    years_above_10 = max(years - 10, 0)
    details: list[str] = []

    if termination_type == TerminationType.RESIGNATION:
        if years < 2:
            years_0_to_5 = years_5_to_10 = years_above_10 = 0
            tier_0_5 = tier_5_10 = tier_10 = _ZERO
            details.append("No EOSB: Service less than 2 years (resignation)")
        else:
            tier_0_5 = years_0_to_5 * half
            tier_5_10 = years_5_to_10 * base
            tier_10 = years_above_10 * base
    else:
        tier_0_5 = years_0_to_5 * base
        tier_5_10 = years_5_to_10 * base
        tier_10 = years_above_10 * base

    tier_0_5 = _round2(tier_0_5)
    tier_5_10 = _round2(tier_5_10)
    tier_10 = _round2(tier_10)
    if tier_0_5:
        details.append(f"Years 0-5: {years_0_to_5} years = {tier_0_5}")
    if tier_5_10:
        details.append(f"Years 5-10: {years_5_to_10} years = {tier_5_10}")
    if tier_10:
        details.append(f"Years 10+: {years_above_10} years = {tier_10}")

    # Leftover months and days
    rate = half if termination_type == TerminationType.RESIGNATION and years < 5 else base
    proportional = _round2(
        rate * service.months / 12 + rate * service.days / 365
    )
    if proportional:
        details.append(
            f"Proportional: {service.months} months {service.days} days = {proportional}"
        )

    total = tier_0_5 + tier_5_10 + tier_10 + proportional
    deductions = _round2(deductions)
    net = total - deductions

    logger.info(
        "eosb_calculated",
        extra={
            "employee_id": employee.id,
            "termination_type": termination_type.value,
            "years_of_service": years,
            "total_eosb_amount": str(total),
            "net_eosb_amount": str(net),
        },
    )

    return EOSBResult(
        employee_id=employee.id,
        termination_type=termination_type,
        hire_date=employee.hire_date,
        termination_date=termination_date,
        service=service,
        last_basic_salary=_round2(basic),
        include_housing_allowance=include_housing_allowance,
        calculation_base=_round2(base),
        years_0_to_5=years_0_to_5,
        years_5_to_10=years_5_to_10,
        years_above_10=years_above_10,
        eosb_amount_0_to_5=tier_0_5,
        eosb_amount_5_to_10=tier_5_10,
        eosb_amount_above_10=tier_10,
        proportional_amount=proportional,
        total_eosb_amount=total,
        deductions=deductions,
        net_eosb_amount=net,
        calculation_details=tuple(details),
    )
