"""
Payroll ORM Persistence Models (``hr_modules.payroll.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the frozen dataclass DTOs defined in
    ``hr_modules.payroll.models`` (source records, leave accrual policies,
    balances and history, payrolls) plus the generated GOSI reports.  Each
    ORM class mirrors a DTO and provides ``to_dto()`` / ``from_dto()``
    conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` (kernel DB base) which provides:
    id (UUID PK, auto-generated), created_at, updated_at,
    created_by_id (NOT NULL UUID), updated_by_id (nullable UUID).

Invariants enforced:
    - All monetary fields use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Enum fields stored as String(50) containing the enum .value string.
    - Employee-owned rows reference ``hr_employees.id`` by ForeignKey.
    - DTO ids are the string form of the row UUID.
    - Payroll amounts read back are quantized to 2 decimal places.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hr_kernel.db.base import TrackedBase

_CENT = Decimal("0.01")


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _cents(value: Decimal | None) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else value


# ---------------------------------------------------------------------------
# EmployeeModel
# ---------------------------------------------------------------------------

class EmployeeModel(TrackedBase):
    """
    ORM model for ``Employee``.

    Guarantees:
        - ``employee_number`` is unique when present.
        - Salary components are nullable: NULL means "not provided".
    """

    __tablename__ = "hr_employees"

    employee_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    basic_salary: Mapped[Decimal | None] = mapped_column(nullable=True)
    housing_allowance: Mapped[Decimal | None] = mapped_column(nullable=True)
    transport_allowance: Mapped[Decimal | None] = mapped_column(nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gosi_applicable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    gosi_salary_basis: Mapped[Decimal | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    national_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    gosi_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bank_account: Mapped[str | None] = mapped_column(String(100), nullable=True)
    company_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employment_type: Mapped[str] = mapped_column(String(50), nullable=False, default="full_time")

    __table_args__ = (
        UniqueConstraint("employee_number", name="uq_hr_employee_number"),
        Index("idx_hr_employee_status", "status"),
        Index("idx_hr_employee_company", "company_id"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import Employee
        return Employee(
            id=str(self.id),
            first_name=self.first_name,
            last_name=self.last_name,
            basic_salary=self.basic_salary,
            housing_allowance=self.housing_allowance,
            transport_allowance=self.transport_allowance,
            nationality=self.nationality,
            gosi_applicable=self.gosi_applicable,
            gosi_salary_basis=self.gosi_salary_basis,
            status=self.status,
            hire_date=self.hire_date,
            employee_number=self.employee_number,
            national_id=self.national_id,
            gosi_number=self.gosi_number,
            bank_account=self.bank_account,
            company_id=self.company_id,
            employment_type=self.employment_type,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "EmployeeModel":
        return cls(
            id=_as_uuid(dto.id),
            employee_number=dto.employee_number,
            first_name=dto.first_name,
            last_name=dto.last_name,
            basic_salary=dto.basic_salary,
            housing_allowance=dto.housing_allowance,
            transport_allowance=dto.transport_allowance,
            nationality=dto.nationality,
            gosi_applicable=dto.gosi_applicable,
            gosi_salary_basis=dto.gosi_salary_basis,
            status=_enum_value(dto.status),
            hire_date=dto.hire_date,
            national_id=dto.national_id,
            gosi_number=dto.gosi_number,
            bank_account=dto.bank_account,
            company_id=dto.company_id,
            employment_type=_enum_value(dto.employment_type),
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<EmployeeModel {self.employee_number}: {self.first_name} {self.last_name}>"


# ---------------------------------------------------------------------------
# Employee-owned source records
# ---------------------------------------------------------------------------

class TimeEntryModel(TrackedBase):
    """ORM model for ``TimeEntry``."""

    __tablename__ = "hr_time_entries"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    overtime_hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_hr_time_entry_employee_date", "employee_id", "work_date"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import TimeEntry
        return TimeEntry(
            hours=self.hours,
            overtime_hours=self.overtime_hours,
            status=self.status,
            work_date=self.work_date,
            employee_id=str(self.employee_id),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "TimeEntryModel":
        return cls(
            employee_id=_as_uuid(dto.employee_id),
            work_date=dto.work_date,
            hours=dto.hours,
            overtime_hours=dto.overtime_hours,
            status=_enum_value(dto.status),
            created_by_id=created_by_id,
        )


class AttendanceModel(TrackedBase):
    """ORM model for ``AttendanceRecord``."""

    __tablename__ = "hr_attendance"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    late_by: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    overtime_hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    __table_args__ = (
        UniqueConstraint("employee_id", "attendance_date", name="uq_hr_attendance_day"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import AttendanceRecord
        return AttendanceRecord(
            status=self.status,
            late_by=self.late_by,
            overtime_hours=self.overtime_hours,
            date=self.attendance_date,
            employee_id=str(self.employee_id),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "AttendanceModel":
        return cls(
            employee_id=_as_uuid(dto.employee_id),
            attendance_date=dto.date,
            status=_enum_value(dto.status),
            late_by=dto.late_by,
            overtime_hours=dto.overtime_hours,
            created_by_id=created_by_id,
        )


class LeaveRequestModel(TrackedBase):
    """ORM model for ``LeaveRequest``."""

    __tablename__ = "hr_leave_requests"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    leave_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_days: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    __table_args__ = (
        Index("idx_hr_leave_employee_span", "employee_id", "start_date", "end_date"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import LeaveRequest
        return LeaveRequest(
            leave_type=self.leave_type,
            total_days=self.total_days,
            status=self.status,
            start_date=self.start_date,
            end_date=self.end_date,
            employee_id=str(self.employee_id),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LeaveRequestModel":
        return cls(
            employee_id=_as_uuid(dto.employee_id),
            leave_type=_enum_value(dto.leave_type),
            status=_enum_value(dto.status),
            start_date=dto.start_date,
            end_date=dto.end_date,
            total_days=dto.total_days,
            created_by_id=created_by_id,
        )


class LoanRequestModel(TrackedBase):
    """ORM model for ``LoanRequest``."""

    __tablename__ = "hr_loan_requests"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    monthly_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_hr_loan_employee_status", "employee_id", "status"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import LoanRequest
        return LoanRequest(
            employee_id=str(self.employee_id),
            monthly_deduction=self.monthly_deduction,
            status=self.status,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LoanRequestModel":
        return cls(
            employee_id=_as_uuid(dto.employee_id),
            monthly_deduction=dto.monthly_deduction,
            status=_enum_value(dto.status),
            created_by_id=created_by_id,
        )


class PayrollDeductionModel(TrackedBase):
    """ORM model for ``PayrollDeduction`` (recurring deductions)."""

    __tablename__ = "hr_payroll_deductions"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    deduction_type: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    start_month: Mapped[str | None] = mapped_column(String(7), nullable=True)
    end_month: Mapped[str | None] = mapped_column(String(7), nullable=True)

    __table_args__ = (
        Index("idx_hr_deduction_employee_active", "employee_id", "is_active"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import PayrollDeduction
        return PayrollDeduction(
            employee_id=str(self.employee_id),
            deduction_type=self.deduction_type,
            amount=self.amount,
            is_active=self.is_active,
            start_month=self.start_month,
            end_month=self.end_month,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PayrollDeductionModel":
        return cls(
            employee_id=_as_uuid(dto.employee_id),
            deduction_type=_enum_value(dto.deduction_type),
            amount=dto.amount,
            is_active=dto.is_active,
            start_month=dto.start_month,
            end_month=dto.end_month,
            created_by_id=created_by_id,
        )


class PublicHolidayModel(TrackedBase):
    """ORM model for ``PublicHoliday`` (one-off dated holidays)."""

    __tablename__ = "hr_public_holidays"

    holiday_date: Mapped[date] = mapped_column(Date, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    __table_args__ = (
        UniqueConstraint("holiday_date", name="uq_hr_public_holiday_date"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import PublicHoliday
        return PublicHoliday(date=self.holiday_date, name=self.name)

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PublicHolidayModel":
        return cls(holiday_date=dto.date, name=dto.name, created_by_id=created_by_id)


# ---------------------------------------------------------------------------
# Leave accrual
# ---------------------------------------------------------------------------

class LeaveAccrualPolicyModel(TrackedBase):
    """
    ORM model for ``LeaveAccrualPolicy``.

    Employment types are stored as JSON text since the dataclass uses
    ``tuple[str, ...]``; NULL means the policy covers every type.
    """

    __tablename__ = "hr_leave_accrual_policies"

    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    leave_type: Mapped[str] = mapped_column(String(50), nullable=False)
    monthly_accrual_rate: Mapped[Decimal] = mapped_column(nullable=False)
    annual_entitlement: Mapped[Decimal] = mapped_column(nullable=False)
    probation_period_months: Mapped[int] = mapped_column(nullable=False, default=0)
    accrue_during_probation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    prorate_for_new_hires: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    employment_types_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_hr_accrual_policy_active", "is_active"),
    )

    def to_dto(self):
        import json

        from hr_modules.payroll.models import LeaveAccrualPolicy

        employment_types = ()
        if self.employment_types_json:
            employment_types = tuple(json.loads(self.employment_types_json))
        return LeaveAccrualPolicy(
            id=str(self.id),
            name=self.name,
            leave_type=self.leave_type,
            monthly_accrual_rate=self.monthly_accrual_rate,
            annual_entitlement=self.annual_entitlement,
            probation_period_months=self.probation_period_months,
            accrue_during_probation=self.accrue_during_probation,
            prorate_for_new_hires=self.prorate_for_new_hires,
            employment_types=employment_types,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LeaveAccrualPolicyModel":
        import json

        employment_types_json = None
        if dto.employment_types:
            employment_types_json = json.dumps(list(dto.employment_types))
        row = cls(
            name=dto.name,
            leave_type=_enum_value(dto.leave_type),
            monthly_accrual_rate=dto.monthly_accrual_rate,
            annual_entitlement=dto.annual_entitlement,
            probation_period_months=dto.probation_period_months,
            accrue_during_probation=dto.accrue_during_probation,
            prorate_for_new_hires=dto.prorate_for_new_hires,
            employment_types_json=employment_types_json,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )
        if dto.id is not None:
            row.id = _as_uuid(dto.id)
        return row


class LeaveBalanceModel(TrackedBase):
    """
    ORM model for ``LeaveBalance``.

    Guarantees:
        - One row per (employee, leave type, year).
    """

    __tablename__ = "hr_leave_balances"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    leave_type: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    total_entitled: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    used: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    pending: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    remaining: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    carried_forward: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type", "year", name="uq_hr_leave_balance"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import LeaveBalance
        return LeaveBalance(
            employee_id=str(self.employee_id),
            leave_type=self.leave_type,
            year=self.year,
            total_entitled=self.total_entitled.normalize(),
            used=self.used.normalize(),
            pending=self.pending.normalize(),
            remaining=self.remaining.normalize(),
            carried_forward=self.carried_forward.normalize(),
        )

    def apply(self, dto, updated_by_id: UUID) -> None:
        """Overwrite the amounts from ``dto``."""
        self.total_entitled = dto.total_entitled
        self.used = dto.used
        self.pending = dto.pending
        self.remaining = dto.remaining
        self.carried_forward = dto.carried_forward
        self.updated_by_id = updated_by_id

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LeaveBalanceModel":
        return cls(
            employee_id=_as_uuid(dto.employee_id),
            leave_type=_enum_value(dto.leave_type),
            year=dto.year,
            total_entitled=dto.total_entitled,
            used=dto.used,
            pending=dto.pending,
            remaining=dto.remaining,
            carried_forward=dto.carried_forward,
            created_by_id=created_by_id,
        )


class LeaveAccrualModel(TrackedBase):
    """ORM model for ``LeaveAccrual`` history entries (append-only)."""

    __tablename__ = "hr_leave_accruals"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    leave_type: Mapped[str] = mapped_column(String(50), nullable=False)
    accrual_date: Mapped[date] = mapped_column(Date, nullable=False)
    accrual_period: Mapped[str] = mapped_column(String(7), nullable=False)
    days_accrued: Mapped[Decimal] = mapped_column(nullable=False)
    balance_before: Mapped[Decimal] = mapped_column(nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(nullable=False)
    accrual_rate: Mapped[Decimal] = mapped_column(nullable=False)
    employment_months: Mapped[int] = mapped_column(nullable=False)
    is_prorated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    proration_factor: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("1"))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_hr_leave_accrual_period", "accrual_period"),
        Index("idx_hr_leave_accrual_employee", "employee_id", "leave_type"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import LeaveAccrual
        return LeaveAccrual(
            employee_id=str(self.employee_id),
            leave_type=self.leave_type,
            accrual_date=self.accrual_date,
            accrual_period=self.accrual_period,
            days_accrued=self.days_accrued.normalize(),
            balance_before=self.balance_before.normalize(),
            balance_after=self.balance_after.normalize(),
            accrual_rate=self.accrual_rate.normalize(),
            employment_months=self.employment_months,
            is_prorated=self.is_prorated,
            proration_factor=self.proration_factor.normalize(),
            notes=self.notes or "",
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "LeaveAccrualModel":
        return cls(
            employee_id=_as_uuid(dto.employee_id),
            leave_type=_enum_value(dto.leave_type),
            accrual_date=dto.accrual_date,
            accrual_period=dto.accrual_period,
            days_accrued=dto.days_accrued,
            balance_before=dto.balance_before,
            balance_after=dto.balance_after,
            accrual_rate=dto.accrual_rate,
            employment_months=dto.employment_months,
            is_prorated=dto.is_prorated,
            proration_factor=dto.proration_factor,
            notes=dto.notes,
            created_by_id=created_by_id,
        )


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class PayrollRecordModel(TrackedBase):
    """
    ORM model for a persisted ``PayrollCalculation``.

    Contract:
        One row per employee per month; re-running a month replaces the
        row (see ``SqlHRGateway.create_payroll``).  ``status`` starts at
        ``calculated``; ``payment_method`` is ``bank_transfer`` when the
        employee has a bank account, else ``cash``.
    """

    __tablename__ = "hr_payroll_records"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("hr_employees.id"), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    month: Mapped[str] = mapped_column(String(7), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    calculation_date: Mapped[datetime] = mapped_column(nullable=False)

    basic_salary: Mapped[Decimal] = mapped_column(nullable=False)
    housing_allowance: Mapped[Decimal] = mapped_column(nullable=False)
    transport_allowance: Mapped[Decimal] = mapped_column(nullable=False)
    regular_hours_pay: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_pay: Mapped[Decimal] = mapped_column(nullable=False)
    total_fixed_allowances: Mapped[Decimal] = mapped_column(nullable=False)
    total_variable_earnings: Mapped[Decimal] = mapped_column(nullable=False)
    gross_salary: Mapped[Decimal] = mapped_column(nullable=False)
    gosi_employee: Mapped[Decimal] = mapped_column(nullable=False)
    gosi_employer: Mapped[Decimal] = mapped_column(nullable=False)
    gosi_calculation_base: Mapped[Decimal] = mapped_column(nullable=False)
    absence_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    late_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    loan_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    advance_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    other_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(nullable=False)

    working_days: Mapped[int] = mapped_column(nullable=False)
    present_days: Mapped[int] = mapped_column(nullable=False)
    absent_days: Mapped[int] = mapped_column(nullable=False)
    unpaid_leave_days: Mapped[Decimal] = mapped_column(nullable=False)
    total_hours_worked: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_hours: Mapped[Decimal] = mapped_column(nullable=False)
    late_minutes: Mapped[Decimal] = mapped_column(nullable=False)

    status: Mapped[str] = mapped_column(String(50), nullable=False, default="calculated")
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False, default="cash")

    __table_args__ = (
        UniqueConstraint("employee_id", "month", name="uq_hr_payroll_employee_month"),
        Index("idx_hr_payroll_month", "month"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import PayrollCalculation
        money = {
            name: _cents(getattr(self, name))
            for name in PayrollCalculation.MONETARY_FIELDS
        }
        return PayrollCalculation(
            employee_id=str(self.employee_id),
            employee_name=self.employee_name,
            calculation_date=self.calculation_date,
            working_days=self.working_days,
            present_days=self.present_days,
            absent_days=self.absent_days,
            unpaid_leave_days=self.unpaid_leave_days.normalize(),
            total_hours_worked=self.total_hours_worked.normalize(),
            overtime_hours=self.overtime_hours.normalize(),
            late_minutes=self.late_minutes.normalize(),
            month=self.month,
            currency=self.currency,
            **money,
        )

    @classmethod
    def from_dto(
        cls,
        dto,
        created_by_id: UUID,
        payment_method: str = "cash",
    ) -> "PayrollRecordModel":
        from hr_modules.payroll.models import PayrollCalculation
        money = {name: getattr(dto, name) for name in PayrollCalculation.MONETARY_FIELDS}
        return cls(
            employee_id=_as_uuid(dto.employee_id),
            employee_name=dto.employee_name,
            month=dto.month,
            currency=dto.currency,
            calculation_date=dto.calculation_date,
            working_days=dto.working_days,
            present_days=dto.present_days,
            absent_days=dto.absent_days,
            unpaid_leave_days=dto.unpaid_leave_days,
            total_hours_worked=dto.total_hours_worked,
            overtime_hours=dto.overtime_hours,
            late_minutes=dto.late_minutes,
            payment_method=payment_method,
            created_by_id=created_by_id,
            **money,
        )

    def __repr__(self) -> str:
        return f"<PayrollRecordModel {self.employee_id} {self.month}: net={self.net_salary}>"


class GOSIReportModel(TrackedBase):
    """ORM model for a generated monthly GOSI contribution report."""

    __tablename__ = "hr_gosi_reports"

    report_month: Mapped[str] = mapped_column(String(7), nullable=False)
    company_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    report_type: Mapped[str] = mapped_column(String(50), nullable=False)
    total_employees: Mapped[int] = mapped_column(nullable=False)
    saudi_employees: Mapped[int] = mapped_column(nullable=False)
    non_saudi_employees: Mapped[int] = mapped_column(nullable=False)
    total_wages: Mapped[Decimal] = mapped_column(nullable=False)
    total_employee_contribution: Mapped[Decimal] = mapped_column(nullable=False)
    total_employer_contribution: Mapped[Decimal] = mapped_column(nullable=False)
    total_contribution: Mapped[Decimal] = mapped_column(nullable=False)
    occupational_hazards: Mapped[Decimal] = mapped_column(nullable=False)
    saned_contribution: Mapped[Decimal] = mapped_column(nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="generated")
    payment_status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    report_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_hr_gosi_report_month", "report_month"),
    )

    @classmethod
    def from_report(cls, report, created_by_id: UUID, report_text: str | None = None) -> "GOSIReportModel":
        return cls(
            report_month=report.report_month,
            company_id=report.company_id,
            report_type=report.report_type,
            total_employees=report.total_employees,
            saudi_employees=report.saudi_employees,
            non_saudi_employees=report.non_saudi_employees,
            total_wages=report.total_wages,
            total_employee_contribution=report.total_employee_contribution,
            total_employer_contribution=report.total_employer_contribution,
            total_contribution=report.total_contribution,
            occupational_hazards=report.occupational_hazards,
            saned_contribution=report.saned_contribution,
            due_date=report.due_date,
            report_text=report_text,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<GOSIReportModel {self.report_month} total={self.total_contribution}>"
