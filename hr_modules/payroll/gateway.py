"""
HR Data Gateway (``hr_modules.payroll.gateway``).

Responsibility:
    The capability interface ``PayrollService`` uses to read employee,
    attendance, leave and deduction records, to write payroll and GOSI
    report records, and to keep leave balances and accrual history.
    ``HRGateway`` is a ``Protocol`` so any backend (the HR platform's
    API, a test double) can be injected;
    ``SqlHRGateway`` implements it over the SQLAlchemy models in
    ``hr_modules.payroll.orm``.

Architecture position:
    **Modules layer** -- the only payroll component that touches a
    session.  Returns DTOs from ``hr_modules.payroll.models``; ORM objects
    never leak to the service or the engines.

Invariants enforced:
    - The gateway never commits; the caller owns the transaction
      (``hr_kernel.db.session_scope``).
    - Every created row records ``created_by_id = actor_id``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hr_engines.gosi_report import GOSIMonthlyReport
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import (
    AttendanceRecord,
    Employee,
    LeaveAccrual,
    LeaveAccrualPolicy,
    LeaveBalance,
    LeaveRequest,
    LoanRequest,
    PayrollCalculation,
    PayrollDeduction,
    PublicHoliday,
    TimeEntry,
)
from hr_modules.payroll.orm import (
    AttendanceModel,
    EmployeeModel,
    GOSIReportModel,
    LeaveAccrualModel,
    LeaveAccrualPolicyModel,
    LeaveBalanceModel,
    LeaveRequestModel,
    LoanRequestModel,
    PayrollDeductionModel,
    PayrollRecordModel,
    PublicHolidayModel,
    TimeEntryModel,
)

logger = get_logger("modules.payroll.gateway")


@runtime_checkable
class HRGateway(Protocol):
    """Read/write access to HR records, injected into ``PayrollService``."""

    def list_employees(
        self,
        statuses: Iterable[str] | None = None,
        employee_ids: Iterable[str] | None = None,
        company_id: str | None = None,
    ) -> list[Employee]: ...

    def get_employee(self, employee_id: str) -> Employee | None: ...

    def list_time_entries(self, employee_id: str, start: date, end: date) -> list[TimeEntry]: ...

    def list_attendance(self, employee_id: str, start: date, end: date) -> list[AttendanceRecord]: ...

    def list_leave_requests(self, employee_id: str, start: date, end: date) -> list[LeaveRequest]: ...

    def list_loan_requests(self, employee_id: str) -> list[LoanRequest]: ...

    def list_payroll_deductions(self, employee_id: str) -> list[PayrollDeduction]: ...

    def list_public_holidays(self, start: date, end: date) -> list[PublicHoliday]: ...

    def create_payroll(self, calculation: PayrollCalculation, payment_method: str) -> str: ...

    def list_payrolls(self, month: str) -> list[PayrollCalculation]: ...

    def create_gosi_report(self, report: GOSIMonthlyReport, report_text: str) -> str: ...

    def list_leave_accrual_policies(self, active_only: bool = True) -> list[LeaveAccrualPolicy]: ...

    def list_leave_balances(self, employee_id: str, year: int) -> list[LeaveBalance]: ...

    def save_leave_balance(self, balance: LeaveBalance) -> LeaveBalance: ...

    def create_leave_accrual(self, accrual: LeaveAccrual) -> str: ...

    def count_leave_accruals(self, accrual_period: str) -> int: ...


def _uuid(value: str) -> UUID:
    return UUID(str(value))


def _known_uuids(values: Iterable[str]) -> list[UUID]:
    """Parse ids, dropping any that are not UUIDs (they match no row)."""
    keys: list[UUID] = []
    for value in values:
        try:
            keys.append(_uuid(value))
        except ValueError:
            logger.warning("employee_id_malformed", extra={"requested_id": str(value)})
    return keys


class SqlHRGateway:
    """``HRGateway`` over a SQLAlchemy session."""

    def __init__(self, session: Session, actor_id: UUID):
        self._session = session
        self._actor_id = actor_id

    # -- employees ---------------------------------------------------------

    def add_employee(self, employee: Employee) -> Employee:
        self._session.add(EmployeeModel.from_dto(employee, self._actor_id))
        self._session.flush()
        return employee

    def list_employees(
        self,
        statuses: Iterable[str] | None = None,
        employee_ids: Iterable[str] | None = None,
        company_id: str | None = None,
    ) -> list[Employee]:
        stmt = select(EmployeeModel)
        if statuses is not None:
            stmt = stmt.where(EmployeeModel.status.in_(list(statuses)))
        if employee_ids is not None:
            stmt = stmt.where(EmployeeModel.id.in_(_known_uuids(employee_ids)))
        if company_id is not None:
            stmt = stmt.where(EmployeeModel.company_id == company_id)
        stmt = stmt.order_by(EmployeeModel.last_name, EmployeeModel.first_name)
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def get_employee(self, employee_id: str) -> Employee | None:
        try:
            key = _uuid(employee_id)
        except ValueError:
            return None
        row = self._session.get(EmployeeModel, key)
        return row.to_dto() if row is not None else None

    # -- source records ----------------------------------------------------

    def add_records(self, records: Iterable) -> None:
        """Persist source DTOs (time entries, attendance, leaves, loans,
        deductions, holidays, accrual policies, opening leave balances).
        """
        for record in records:
            model = _SOURCE_MODELS[type(record)]
            self._session.add(model.from_dto(record, self._actor_id))
        self._session.flush()

    def list_time_entries(self, employee_id: str, start: date, end: date) -> list[TimeEntry]:
        stmt = (
            select(TimeEntryModel)
            .where(TimeEntryModel.employee_id == _uuid(employee_id))
            .where(TimeEntryModel.work_date.between(start, end))
            .order_by(TimeEntryModel.work_date)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def list_attendance(self, employee_id: str, start: date, end: date) -> list[AttendanceRecord]:
        stmt = (
            select(AttendanceModel)
            .where(AttendanceModel.employee_id == _uuid(employee_id))
            .where(AttendanceModel.attendance_date.between(start, end))
            .order_by(AttendanceModel.attendance_date)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def list_leave_requests(self, employee_id: str, start: date, end: date) -> list[LeaveRequest]:
        """Leave requests whose span overlaps ``[start, end]``."""
        stmt = (
            select(LeaveRequestModel)
            .where(LeaveRequestModel.employee_id == _uuid(employee_id))
            .where(LeaveRequestModel.start_date <= end)
            .where(LeaveRequestModel.end_date >= start)
            .order_by(LeaveRequestModel.start_date)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def list_loan_requests(self, employee_id: str) -> list[LoanRequest]:
        stmt = select(LoanRequestModel).where(LoanRequestModel.employee_id == _uuid(employee_id))
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def list_payroll_deductions(self, employee_id: str) -> list[PayrollDeduction]:
        stmt = select(PayrollDeductionModel).where(
            PayrollDeductionModel.employee_id == _uuid(employee_id)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def list_public_holidays(self, start: date, end: date) -> list[PublicHoliday]:
        stmt = (
            select(PublicHolidayModel)
            .where(PublicHolidayModel.holiday_date.between(start, end))
            .order_by(PublicHolidayModel.holiday_date)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    # -- outputs -----------------------------------------------------------

    def create_payroll(self, calculation: PayrollCalculation, payment_method: str = "cash") -> str:
        """Persist a payroll, replacing any earlier row for the same employee and month."""
        previous = self._session.scalars(
            select(PayrollRecordModel)
            .where(PayrollRecordModel.employee_id == _uuid(calculation.employee_id))
            .where(PayrollRecordModel.month == calculation.month)
        ).one_or_none()
        if previous is not None:
            self._session.delete(previous)
            self._session.flush()
            logger.info(
                "payroll_record_replaced",
                extra={
                    "payroll_record_id": str(previous.id),
                    "employee_id": calculation.employee_id,
                    "payroll_month": calculation.month,
                },
            )

        row = PayrollRecordModel.from_dto(calculation, self._actor_id, payment_method)
        self._session.add(row)
        self._session.flush()
        logger.info(
            "payroll_record_created",
            extra={
                "payroll_record_id": str(row.id),
                "employee_id": calculation.employee_id,
                "payroll_month": calculation.month,
            },
        )
        return str(row.id)

    def list_payrolls(self, month: str) -> list[PayrollCalculation]:
        stmt = (
            select(PayrollRecordModel)
            .where(PayrollRecordModel.month == month)
            .order_by(PayrollRecordModel.created_at, PayrollRecordModel.employee_name)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def create_gosi_report(self, report: GOSIMonthlyReport, report_text: str) -> str:
        row = GOSIReportModel.from_report(report, self._actor_id, report_text)
        self._session.add(row)
        self._session.flush()
        logger.info(
            "gosi_report_created",
            extra={"gosi_report_id": str(row.id), "payroll_month": report.report_month},
        )
        return str(row.id)

    # -- leave accrual -----------------------------------------------------

    def list_leave_accrual_policies(self, active_only: bool = True) -> list[LeaveAccrualPolicy]:
        stmt = select(LeaveAccrualPolicyModel)
        if active_only:
            stmt = stmt.where(LeaveAccrualPolicyModel.is_active.is_(True))
        stmt = stmt.order_by(LeaveAccrualPolicyModel.leave_type, LeaveAccrualPolicyModel.name)
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def _balance_row(self, employee_id: str, leave_type: str, year: int) -> LeaveBalanceModel | None:
        return self._session.scalars(
            select(LeaveBalanceModel)
            .where(LeaveBalanceModel.employee_id == _uuid(employee_id))
            .where(LeaveBalanceModel.leave_type == leave_type)
            .where(LeaveBalanceModel.year == year)
        ).one_or_none()

    def list_leave_balances(self, employee_id: str, year: int) -> list[LeaveBalance]:
        stmt = (
            select(LeaveBalanceModel)
            .where(LeaveBalanceModel.employee_id == _uuid(employee_id))
            .where(LeaveBalanceModel.year == year)
            .order_by(LeaveBalanceModel.leave_type)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def save_leave_balance(self, balance: LeaveBalance) -> LeaveBalance:
        """Insert or overwrite the (employee, leave type, year) balance."""
        row = self._balance_row(balance.employee_id, balance.leave_type, balance.year)
        if row is None:
            self._session.add(LeaveBalanceModel.from_dto(balance, self._actor_id))
        else:
            row.apply(balance, self._actor_id)
        self._session.flush()
        logger.info(
            "leave_balance_saved",
            extra={
                "employee_id": balance.employee_id,
                "leave_type": balance.leave_type,
                "year": balance.year,
                "total_entitled": str(balance.total_entitled),
                "created": row is None,
            },
        )
        return balance

    def create_leave_accrual(self, accrual: LeaveAccrual) -> str:
        row = LeaveAccrualModel.from_dto(accrual, self._actor_id)
        self._session.add(row)
        self._session.flush()
        return str(row.id)

    def list_leave_accruals(self, accrual_period: str) -> list[LeaveAccrual]:
        stmt = (
            select(LeaveAccrualModel)
            .where(LeaveAccrualModel.accrual_period == accrual_period)
            .order_by(LeaveAccrualModel.created_at, LeaveAccrualModel.leave_type)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def count_leave_accruals(self, accrual_period: str) -> int:
        stmt = (
            select(func.count())
            .select_from(LeaveAccrualModel)
            .where(LeaveAccrualModel.accrual_period == accrual_period)
        )
        return self._session.scalar(stmt) or 0


_SOURCE_MODELS = {
    TimeEntry: TimeEntryModel,
    AttendanceRecord: AttendanceModel,
    LeaveRequest: LeaveRequestModel,
    LoanRequest: LoanRequestModel,
    PayrollDeduction: PayrollDeductionModel,
    PublicHoliday: PublicHolidayModel,
    LeaveAccrualPolicy: LeaveAccrualPolicyModel,
    LeaveBalance: LeaveBalanceModel,
}
