"""
Monthly Payroll Calculation Engine (``hr_engines.payroll_calculation``).

Responsibility
--------------
Produce one employee's full payroll breakdown for one calendar month from
already-approved source records:

1. Fixed allowances = basic + housing + transport.
2. Overtime pay = approved overtime hours x hourly rate x 1.5, where
   hourly rate = basic / (working_days x 8).
3. Attendance: present (present/late) and absent day counts, late minutes;
   absence deduction = absent days x daily rate; late deduction =
   late minutes x (daily rate / 480) x 0.5.
4. Approved unpaid leave days are added to the absence deduction.
5. Gross = fixed allowances + overtime pay.
6. GOSI (``hr_engines.gosi``) when the employee is GOSI-applicable.
7. Total deductions = GOSI employee share + absence + late + loan +
   advance + other.
8. Net = gross - total deductions.
9. Monetary fields are rounded to 2 decimals; days/hours/minutes are not.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads:
``calculation_date`` is a required argument.  Multipliers and day lengths
come from a ``PayrollPolicy`` value.

Invariants enforced
-------------------
* Decimal-only arithmetic; every rate division is performed last so exact
  results stay exact before the single rounding step.
* Each component is rounded once (ROUND_HALF_UP).  Aggregates are summed
  from the rounded components, so ``gross == fixed + variable`` and
  ``net == gross - total_deductions`` hold exactly.
* Deterministic: identical inputs give identical outputs.

Failure modes
-------------
* ``working_days <= 0`` raises ``InvalidWorkingDaysError`` instead of
  producing infinite or undefined rates.
* Missing salary inputs compute as 0 and are listed in
  ``PayrollCalculation.missing_fields`` for the validator to report.
* Empty time/attendance/leave lists simply contribute 0.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from hr_engines.gosi import DEFAULT_GOSI_RATES, GOSIRates, calculate_gosi
from hr_engines.tracer import traced_engine
from hr_kernel.exceptions import InvalidWorkingDaysError
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import (
    AttendanceRecord,
    AttendanceStatus,
    DeductionOptions,
    Employee,
    LeaveRequest,
    PayrollCalculation,
    TimeEntry,
)

logger = get_logger("engines.payroll_calculation")

_CENT = Decimal("0.01")
_ZERO = Decimal("0")


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PayrollPolicy:
    """Labor-law parameters of the monthly calculation."""

    default_working_days: int = 30
    hours_per_day: Decimal = Decimal("8")
    overtime_multiplier: Decimal = Decimal("1.5")
    late_penalty_factor: Decimal = Decimal("0.5")

    def __post_init__(self) -> None:
        if self.default_working_days <= 0:
            raise ValueError("default_working_days must be positive")
        if self.hours_per_day <= 0:
            raise ValueError("hours_per_day must be positive")
        if self.overtime_multiplier < 0:
            raise ValueError("overtime_multiplier cannot be negative")
        if self.late_penalty_factor < 0:
            raise ValueError("late_penalty_factor cannot be negative")

    @property
    def minutes_per_day(self) -> Decimal:
        return self.hours_per_day * 60


DEFAULT_PAYROLL_POLICY = PayrollPolicy()


def _salary_component(employee: Employee, name: str, missing: list[str]) -> Decimal:
    value = getattr(employee, name)
    if value is None:
        missing.append(name)
        return _ZERO
    return value


@traced_engine(
    "payroll_calculation", "1.0",
    fingerprint_fields=("employee", "time_entries", "attendance", "leaves", "deductions"),
)
def calculate_monthly_payroll(
    employee: Employee,
    time_entries: Sequence[TimeEntry] = (),
    attendance: Sequence[AttendanceRecord] = (),
    leaves: Sequence[LeaveRequest] = (),
    deductions: DeductionOptions | None = None,
    *,
    calculation_date: datetime,
    month: str | None = None,
    policy: PayrollPolicy = DEFAULT_PAYROLL_POLICY,
    gosi_rates: GOSIRates = DEFAULT_GOSI_RATES,
    currency: str = "SAR",
) -> PayrollCalculation:
    """
    Calculate one employee's payroll for one month.

    Args:
        employee: Fixed compensation terms and GOSI flags.
        time_entries: Entries for the period; only approved ones count.
        attendance: Daily attendance records for the period.
        leaves: Leave requests; only approved unpaid leave reduces pay.
        deductions: Working days and loan/advance/other deductions.
            Defaults to ``policy.default_working_days`` and no deductions.
        calculation_date: Timestamp recorded on the result.
        month: Optional ``YYYY-MM`` label recorded on the result.
        policy: Overtime multiplier, late penalty and day length.
        gosi_rates: GOSI rates and cap.
        currency: ISO 4217 code the amounts are expressed in.

    Returns:
        PayrollCalculation snapshot.

    Raises:
        InvalidWorkingDaysError: If ``deductions.working_days`` <= 0.
    """
    options = deductions or DeductionOptions(working_days=policy.default_working_days)
    working_days = options.working_days
    if working_days is None or working_days <= 0:
        raise InvalidWorkingDaysError(working_days, employee.id)
    days = Decimal(working_days)

    # 1. Fixed allowances
    missing: list[str] = []
    basic = _salary_component(employee, "basic_salary", missing)
    housing = _salary_component(employee, "housing_allowance", missing)
    transport = _salary_component(employee, "transport_allowance", missing)

    # 2. Time-based pay (approved entries only)
    approved = [entry for entry in time_entries if entry.is_approved]
    total_hours = sum((entry.hours for entry in approved), _ZERO)
    overtime_hours = sum((entry.overtime_hours for entry in approved), _ZERO)
    monthly_hours = days * policy.hours_per_day
    overtime_pay = basic * overtime_hours * policy.overtime_multiplier / monthly_hours

    # 3. Attendance deductions
    present_days = sum(
        1 for record in attendance
        if record.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)
    )
    absent_days = sum(
        1 for record in attendance if record.status == AttendanceStatus.ABSENT
    )
    late_minutes = sum((record.late_by for record in attendance), _ZERO)
    late_deduction = (
        basic * late_minutes * policy.late_penalty_factor
        / (days * policy.minutes_per_day)
    )

    # 4. Unpaid leave accumulates into the absence deduction
    unpaid_leave_days = sum(
        (leave.total_days for leave in leaves if leave.is_approved_unpaid), _ZERO
    )
    absence_deduction = basic * (absent_days + unpaid_leave_days) / days

    # 5. Gross, from rounded components
    basic_r = _round2(basic)
    housing_r = _round2(housing)
    transport_r = _round2(transport)
    total_fixed = basic_r + housing_r + transport_r
    overtime_r = _round2(overtime_pay)
    total_variable = overtime_r
    gross = total_fixed + total_variable

    # 6. GOSI
    gosi_employee = gosi_employer = gosi_base = _ZERO
    if employee.gosi_applicable:
        gosi = calculate_gosi(
            employee, employee.basic_salary, employee.housing_allowance, gosi_rates,
        )
        gosi_employee = gosi.employee_share
        gosi_employer = gosi.employer_share
        gosi_base = gosi.gosi_base

    # 7. Total deductions
    absence_r = _round2(absence_deduction)
    late_r = _round2(late_deduction)
    loan_r = _round2(options.loan_deduction)
    advance_r = _round2(options.advance_deduction)
    other_r = _round2(options.other_deductions)
    total_deductions = gosi_employee + absence_r + late_r + loan_r + advance_r + other_r

    # 8. Net
    net = gross - total_deductions

    calculation = PayrollCalculation(
        employee_id=employee.id,
        employee_name=employee.full_name,
        calculation_date=calculation_date,
        basic_salary=basic_r,
        housing_allowance=housing_r,
        transport_allowance=transport_r,
        regular_hours_pay=_ZERO,
        overtime_pay=overtime_r,
        total_fixed_allowances=total_fixed,
        total_variable_earnings=total_variable,
        gross_salary=gross,
        gosi_employee=gosi_employee,
        gosi_employer=gosi_employer,
        gosi_calculation_base=gosi_base,
        absence_deduction=absence_r,
        late_deduction=late_r,
        loan_deduction=loan_r,
        advance_deduction=advance_r,
        other_deductions=other_r,
        total_deductions=total_deductions,
        net_salary=net,
        working_days=working_days,
        present_days=present_days,
        absent_days=absent_days,
        unpaid_leave_days=unpaid_leave_days,
        total_hours_worked=total_hours,
        overtime_hours=overtime_hours,
        late_minutes=late_minutes,
        month=month,
        currency=currency,
        missing_fields=tuple(missing),
    )

    logger.info(
        "payroll_calculated",
        extra={
            "employee_id": employee.id,
            "payroll_month": month,
            "gross_salary": str(gross),
            "total_deductions": str(total_deductions),
            "net_salary": str(net),
            "missing_fields": list(missing),
        },
    )
    return calculation


def calculate_bulk_payroll(
    employees: Sequence[Employee],
    time_entries_map: Mapping[str, Sequence[TimeEntry]],
    attendance_map: Mapping[str, Sequence[AttendanceRecord]],
    leaves_map: Mapping[str, Sequence[LeaveRequest]],
    *,
    calculation_date: datetime,
    month: str | None = None,
    deductions_map: Mapping[str, DeductionOptions] | None = None,
    policy: PayrollPolicy = DEFAULT_PAYROLL_POLICY,
    gosi_rates: GOSIRates = DEFAULT_GOSI_RATES,
    currency: str = "SAR",
) -> list[PayrollCalculation]:
    """
    Calculate payroll for every employee, in order.

    Plain iteration: one ``calculate_monthly_payroll`` call per employee
    with that employee's records (empty when absent from a map) and the
    policy's default working days unless ``deductions_map`` overrides them.
    Errors propagate; partial-failure handling belongs to the caller.
    """
    default_options = DeductionOptions(working_days=policy.default_working_days)
    deductions_map = deductions_map or {}

    return [
        calculate_monthly_payroll(
            employee,
            time_entries_map.get(employee.id, ()),
            attendance_map.get(employee.id, ()),
            leaves_map.get(employee.id, ()),
            deductions_map.get(employee.id, default_options),
            calculation_date=calculation_date,
            month=month,
            policy=policy,
            gosi_rates=gosi_rates,
            currency=currency,
        )
        for employee in employees
    ]
