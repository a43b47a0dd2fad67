"""
Payroll Domain Models (``hr_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of payroll:
employees, approved time entries, daily attendance, leave requests,
loans and recurring deductions (inputs), leave accrual policies, balances
and accrual history, and the per-employee ``PayrollCalculation`` snapshot
plus the monthly run summary (outputs).

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
the engines in ``hr_engines`` and by ``PayrollService``.  Records arriving
from the HR platform as plain dicts are converted with the ``from_record``
class methods.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary, hour and leave-day fields use ``Decimal`` -- NEVER
  ``float``; plain ints and strings are converted on construction.
* Salary fields are ``Decimal | None``: ``None`` means the source record
  did not carry the field, ``Decimal("0")`` means it is legitimately zero.

Failure modes
-------------
* Negative salary components or accrual rates raise ``ValueError`` at
  construction.
* Unparseable numbers or dates in platform records raise ``ValueError``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from hr_kernel.domain.values import Money
from hr_kernel.exceptions import InvalidPayrollMonthError
from hr_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.models")

ZERO = Decimal("0")


class EmployeeStatus(str, Enum):
    """Employment states."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"
    TERMINATED = "terminated"


class EmploymentType(str, Enum):
    """Contract kinds; accrual policies filter on these."""
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    TEMPORARY = "temporary"


class TimeEntryStatus(str, Enum):
    """Time entry approval states; only APPROVED entries are paid."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class AttendanceStatus(str, Enum):
    """Daily attendance outcomes."""
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class LeaveType(str, Enum):
    """Leave types; only UNPAID reduces pay."""
    ANNUAL = "annual"
    SICK = "sick"
    UNPAID = "unpaid"
    MATERNITY = "maternity"
    HAJJ = "hajj"
    EMERGENCY = "emergency"


class LeaveStatus(str, Enum):
    """Leave request approval states."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LoanStatus(str, Enum):
    """Loan request lifecycle."""
    PENDING = "pending"
    APPROVED = "approved"
    DISBURSED = "disbursed"
    REPAID = "repaid"
    REJECTED = "rejected"


class DeductionType(str, Enum):
    """Recurring payroll deduction categories."""
    LOAN_REPAYMENT = "loan_repayment"
    ADVANCE_SALARY = "advance_salary"
    GOSI_EMPLOYEE = "gosi_employee"
    PENALTY = "penalty"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Record parsing helpers
# ---------------------------------------------------------------------------


def to_decimal(value: Any) -> Decimal | None:
    """Convert a platform value to Decimal, keeping ``None`` as missing."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert boolean {value!r} to Decimal")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid numeric value: {value!r}") from e


def to_date(value: Any) -> date | None:
    """Parse an ISO date (or datetime prefix) from a platform value."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Cannot parse date from {value!r}")


def _decimal_or_zero(value: Any) -> Decimal:
    converted = to_decimal(value)
    return ZERO if converted is None else converted


def _coerce_amounts(obj: Any, names: tuple[str, ...], *, optional: bool = False) -> None:
    """Normalize numeric fields of a frozen dataclass to Decimal.

    ``optional`` fields keep ``None``; the others read it as zero.
    """
    convert = to_decimal if optional else _decimal_or_zero
    for name in names:
        value = getattr(obj, name)
        if not isinstance(value, Decimal):
            object.__setattr__(obj, name, convert(value))


_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_payroll_month(month: Any) -> tuple[int, int]:
    """
    Parse a ``YYYY-MM`` payroll month into ``(year, month)``.

    Raises:
        InvalidPayrollMonthError: If the value is missing or malformed.
    """
    if not isinstance(month, str):
        raise InvalidPayrollMonthError(month)
    match = _MONTH_RE.match(month)
    if match is None:
        raise InvalidPayrollMonthError(month)
    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise InvalidPayrollMonthError(month)
    return year, month_number


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Employee:
    """An employee and the fixed compensation terms payroll is computed from."""
    id: str
    first_name: str = ""
    last_name: str = ""
    basic_salary: Decimal | None = None
    housing_allowance: Decimal | None = None
    transport_allowance: Decimal | None = None
    nationality: str | None = None
    gosi_applicable: bool = False
    gosi_salary_basis: Decimal | None = None
    status: str = EmployeeStatus.ACTIVE.value
    hire_date: date | None = None
    employee_number: str | None = None
    national_id: str | None = None
    gosi_number: str | None = None
    bank_account: str | None = None
    company_id: str | None = None
    employment_type: str = EmploymentType.FULL_TIME.value

    def __post_init__(self):
        _coerce_amounts(
            self,
            ("basic_salary", "housing_allowance", "transport_allowance", "gosi_salary_basis"),
            optional=True,
        )
        for name in ("basic_salary", "housing_allowance", "transport_allowance"):
            value = getattr(self, name)
            if value is not None and value < 0:
                logger.warning(
                    "employee_negative_salary_component",
                    extra={"employee_id": self.id, "field": name, "value": str(value)},
                )
                raise ValueError(f"{name} cannot be negative")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Employee:
        """Build from a platform record; ``salary`` is a legacy alias of ``basic_salary``."""
        basic = record.get("basic_salary")
        if basic is None:
            basic = record.get("salary")
        return cls(
            id=str(record["id"]),
            first_name=record.get("first_name") or "",
            last_name=record.get("last_name") or "",
            basic_salary=to_decimal(basic),
            housing_allowance=to_decimal(record.get("housing_allowance")),
            transport_allowance=to_decimal(record.get("transport_allowance")),
            nationality=record.get("nationality"),
            gosi_applicable=bool(record.get("gosi_applicable", False)),
            gosi_salary_basis=to_decimal(record.get("gosi_salary_basis")),
            status=record.get("status") or EmployeeStatus.ACTIVE.value,
            hire_date=to_date(record.get("hire_date")),
            employee_number=record.get("employee_id") or record.get("employee_number"),
            national_id=record.get("national_id"),
            gosi_number=record.get("gosi_number"),
            bank_account=record.get("bank_account"),
            company_id=record.get("company_id"),
            employment_type=record.get("employment_type") or EmploymentType.FULL_TIME.value,
        )


@dataclass(frozen=True)
class TimeEntry:
    """A work record for the period; counts only when approved."""
    hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    status: str = TimeEntryStatus.SUBMITTED.value
    work_date: date | None = None
    employee_id: str | None = None

    def __post_init__(self):
        _coerce_amounts(self, ("hours", "overtime_hours"))

    @property
    def is_approved(self) -> bool:
        return self.status == TimeEntryStatus.APPROVED

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> TimeEntry:
        return cls(
            hours=_decimal_or_zero(record.get("hours")),
            overtime_hours=_decimal_or_zero(record.get("overtime_hours")),
            status=record.get("status") or TimeEntryStatus.SUBMITTED.value,
            work_date=to_date(record.get("date") or record.get("work_date")),
            employee_id=record.get("employee_id"),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """A daily presence record; ``late_by`` is in minutes."""
    status: str
    late_by: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    date: date | None = None
    employee_id: str | None = None

    def __post_init__(self):
        _coerce_amounts(self, ("late_by", "overtime_hours"))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> AttendanceRecord:
        return cls(
            status=record.get("status") or "",
            late_by=_decimal_or_zero(record.get("late_by")),
            overtime_hours=_decimal_or_zero(record.get("overtime_hours")),
            date=to_date(record.get("date")),
            employee_id=record.get("employee_id"),
        )


@dataclass(frozen=True)
class LeaveRequest:
    """A leave span; only approved unpaid leave reduces pay."""
    leave_type: str
    total_days: Decimal = ZERO
    status: str = LeaveStatus.PENDING.value
    start_date: date | None = None
    end_date: date | None = None
    employee_id: str | None = None

    def __post_init__(self):
        _coerce_amounts(self, ("total_days",))

    @property
    def is_approved_unpaid(self) -> bool:
        return self.leave_type == LeaveType.UNPAID and self.status == LeaveStatus.APPROVED

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> LeaveRequest:
        return cls(
            leave_type=record.get("leave_type") or "",
            total_days=_decimal_or_zero(record.get("total_days")),
            status=record.get("status") or LeaveStatus.PENDING.value,
            start_date=to_date(record.get("start_date")),
            end_date=to_date(record.get("end_date")),
            employee_id=record.get("employee_id"),
        )


@dataclass(frozen=True)
class LoanRequest:
    """An employee loan repaid through a fixed monthly deduction."""
    employee_id: str
    monthly_deduction: Decimal = ZERO
    status: str = LoanStatus.PENDING.value

    def __post_init__(self):
        _coerce_amounts(self, ("monthly_deduction",))

    @property
    def is_repaying(self) -> bool:
        return self.status in (LoanStatus.APPROVED, LoanStatus.DISBURSED)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> LoanRequest:
        return cls(
            employee_id=str(record["employee_id"]),
            monthly_deduction=_decimal_or_zero(record.get("monthly_deduction")),
            status=record.get("status") or LoanStatus.PENDING.value,
        )


@dataclass(frozen=True)
class PayrollDeduction:
    """A recurring deduction active between ``start_month`` and ``end_month`` (YYYY-MM)."""
    employee_id: str
    deduction_type: str
    amount: Decimal
    is_active: bool = True
    start_month: str | None = None
    end_month: str | None = None

    def __post_init__(self):
        _coerce_amounts(self, ("amount",))

    def applies_to(self, month: str) -> bool:
        """YYYY-MM strings compare chronologically as plain strings."""
        if not self.is_active:
            return False
        if self.start_month and self.start_month > month:
            return False
        if self.end_month and self.end_month < month:
            return False
        return True

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> PayrollDeduction:
        return cls(
            employee_id=str(record["employee_id"]),
            deduction_type=record.get("deduction_type") or DeductionType.OTHER.value,
            amount=_decimal_or_zero(record.get("amount")),
            is_active=bool(record.get("is_active", True)),
            start_month=record.get("start_month"),
            end_month=record.get("end_month"),
        )


@dataclass(frozen=True)
class PublicHoliday:
    """A non-working public holiday."""
    date: date
    name: str


@dataclass(frozen=True)
class DeductionOptions:
    """
    Per-calculation deduction settings.

    ``working_days`` drives both the daily and the hourly rate; the engine
    rejects values <= 0 with ``InvalidWorkingDaysError``.
    """
    working_days: int = 30
    loan_deduction: Decimal = ZERO
    advance_deduction: Decimal = ZERO
    other_deductions: Decimal = ZERO

    def __post_init__(self):
        _coerce_amounts(self, ("loan_deduction", "advance_deduction", "other_deductions"))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DeductionOptions:
        working_days = data.get("working_days")
        return cls(
            working_days=30 if working_days is None else int(working_days),
            loan_deduction=_decimal_or_zero(data.get("loan_deduction")),
            advance_deduction=_decimal_or_zero(data.get("advance_deduction")),
            other_deductions=_decimal_or_zero(data.get("other_deductions")),
        )


# ---------------------------------------------------------------------------
# Leave accrual
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeaveAccrualPolicy:
    """
    How many leave days an employee earns per month for one leave type.

    An empty ``employment_types`` applies the policy to every employee.
    Probation is measured in whole employment months.
    """
    leave_type: str = LeaveType.ANNUAL.value
    monthly_accrual_rate: Decimal = Decimal("1.75")
    annual_entitlement: Decimal = Decimal("21")
    probation_period_months: int = 3
    accrue_during_probation: bool = False
    prorate_for_new_hires: bool = True
    employment_types: tuple[str, ...] = (EmploymentType.FULL_TIME.value,)
    is_active: bool = True
    name: str = ""
    id: str | None = None

    def __post_init__(self):
        _coerce_amounts(self, ("monthly_accrual_rate", "annual_entitlement"))
        if self.monthly_accrual_rate < 0:
            raise ValueError("monthly_accrual_rate cannot be negative")
        object.__setattr__(
            self, "employment_types", tuple(getattr(t, "value", t) for t in self.employment_types),
        )

    def covers(self, employee: Employee) -> bool:
        return not self.employment_types or employee.employment_type in self.employment_types

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> LeaveAccrualPolicy:
        probation = record.get("probation_period_months")
        return cls(
            leave_type=record.get("leave_type") or LeaveType.ANNUAL.value,
            monthly_accrual_rate=_decimal_or_zero(record.get("monthly_accrual_rate")),
            annual_entitlement=_decimal_or_zero(record.get("annual_entitlement")),
            probation_period_months=0 if probation is None else int(probation),
            accrue_during_probation=bool(record.get("accrue_during_probation", False)),
            prorate_for_new_hires=bool(record.get("prorate_for_new_hires", True)),
            employment_types=tuple(record.get("employment_type") or ()),
            is_active=bool(record.get("is_active", True)),
            name=record.get("policy_name") or record.get("name") or "",
            id=None if record.get("id") is None else str(record["id"]),
        )


@dataclass(frozen=True)
class LeaveBalance:
    """An employee's entitlement for one leave type in one calendar year."""
    employee_id: str
    leave_type: str
    year: int
    total_entitled: Decimal = ZERO
    used: Decimal = ZERO
    pending: Decimal = ZERO
    remaining: Decimal = ZERO
    carried_forward: Decimal = ZERO

    def __post_init__(self):
        _coerce_amounts(self, ("total_entitled", "used", "pending", "remaining", "carried_forward"))

    def credited(self, days: Decimal) -> LeaveBalance:
        """Return the balance with ``days`` added to the entitlement and the remainder."""
        return replace(
            self,
            total_entitled=self.total_entitled + days,
            remaining=self.remaining + days,
        )


@dataclass(frozen=True)
class LeaveAccrual:
    """History entry for one monthly accrual; balances are ``total_entitled`` values."""
    employee_id: str
    leave_type: str
    accrual_date: date
    accrual_period: str
    days_accrued: Decimal
    balance_before: Decimal
    balance_after: Decimal
    accrual_rate: Decimal
    employment_months: int
    is_prorated: bool = False
    proration_factor: Decimal = Decimal("1")
    notes: str = ""


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollCalculation:
    """
    One employee's payroll for one month.

    Derived, immutable snapshot.  Monetary fields are rounded to 2 decimal
    places; gross, total deductions and net are derived from the rounded
    components so that ``gross_salary == total_fixed_allowances +
    total_variable_earnings`` and ``net_salary == gross_salary -
    total_deductions`` hold exactly.
    """
    employee_id: str
    employee_name: str
    calculation_date: datetime

    basic_salary: Decimal = ZERO
    housing_allowance: Decimal = ZERO
    transport_allowance: Decimal = ZERO

    regular_hours_pay: Decimal = ZERO
    overtime_pay: Decimal = ZERO

    total_fixed_allowances: Decimal = ZERO
    total_variable_earnings: Decimal = ZERO
    gross_salary: Decimal = ZERO

    gosi_employee: Decimal = ZERO
    gosi_employer: Decimal = ZERO
    gosi_calculation_base: Decimal = ZERO
    absence_deduction: Decimal = ZERO
    late_deduction: Decimal = ZERO
    loan_deduction: Decimal = ZERO
    advance_deduction: Decimal = ZERO
    other_deductions: Decimal = ZERO
    total_deductions: Decimal = ZERO

    net_salary: Decimal = ZERO

    working_days: int = 30
    present_days: int = 0
    absent_days: int = 0
    unpaid_leave_days: Decimal = ZERO
    total_hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    late_minutes: Decimal = ZERO

    month: str | None = None
    currency: str = "SAR"
    missing_fields: tuple[str, ...] = field(default_factory=tuple)

    MONETARY_FIELDS = (
        "basic_salary",
        "housing_allowance",
        "transport_allowance",
        "regular_hours_pay",
        "overtime_pay",
        "total_fixed_allowances",
        "total_variable_earnings",
        "gross_salary",
        "gosi_employee",
        "gosi_employer",
        "gosi_calculation_base",
        "absence_deduction",
        "late_deduction",
        "loan_deduction",
        "advance_deduction",
        "other_deductions",
        "total_deductions",
        "net_salary",
    )

    def money(self, field_name: str) -> Money:
        """Return a monetary field as Money in the calculation's currency."""
        if field_name not in self.MONETARY_FIELDS:
            raise KeyError(f"{field_name} is not a monetary field")
        return Money.of(getattr(self, field_name), self.currency)

    def to_record(self) -> dict[str, Any]:
        """Flat dict in the shape the HR platform's Payroll entity stores."""
        record: dict[str, Any] = {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "month": self.month,
            "currency": self.currency,
        }
        for name in self.MONETARY_FIELDS:
            record[name] = getattr(self, name)
        record.update(
            working_days=self.working_days,
            present_days=self.present_days,
            absent_days=self.absent_days,
            unpaid_leave_days=self.unpaid_leave_days,
            total_hours_worked=self.total_hours_worked,
            overtime_hours=self.overtime_hours,
            late_minutes=self.late_minutes,
            calculation_date=self.calculation_date.isoformat(),
        )
        return record


@dataclass(frozen=True)
class PayrollRunError:
    """An employee whose payroll could not be produced in a run."""
    employee_id: str
    employee_name: str
    error_code: str
    error: str


@dataclass(frozen=True)
class PayrollRunSummary:
    """Outcome of a monthly payroll run."""
    month: str
    calculations: tuple[PayrollCalculation, ...] = ()
    errors: tuple[PayrollRunError, ...] = ()
    warnings: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    currency: str = "SAR"

    @property
    def processed_count(self) -> int:
        return len(self.calculations)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def total_gross(self) -> Decimal:
        return sum((c.gross_salary for c in self.calculations), ZERO)

    @property
    def total_net(self) -> Decimal:
        return sum((c.net_salary for c in self.calculations), ZERO)

    @property
    def total_gosi_employer(self) -> Decimal:
        return sum((c.gosi_employer for c in self.calculations), ZERO)
