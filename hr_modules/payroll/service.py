"""
Payroll Module Service (``hr_modules.payroll.service``).

Responsibility
--------------
Orchestrates payroll operations -- single-employee payroll, the monthly
payroll run, the GOSI monthly report, end-of-service benefit, leave day
calculations and the monthly leave accrual -- by fetching records through an injected
``HRGateway``, delegating all computation to ``hr_engines`` and writing
the results back through the gateway.

Architecture position
---------------------
**Modules layer** -- thin HR glue.  ``PayrollService`` is the sole public
entry point for payroll operations.  It owns no arithmetic: every amount
comes from an engine.  Policy (rates, thresholds, calendar) comes from
``PayrollConfig.policy``; time comes from the injected ``Clock``.

Invariants enforced
-------------------
* Only employees whose status is eligible (``active`` by default) are
  processed in a monthly run.
* Unpaid leave is charged only for the days that fall inside the month.
* Loan deductions = approved/disbursed loans' monthly installment plus
  active ``loan_repayment`` deductions; ``gosi_employee`` deductions are
  ignored because GOSI is computed.
* A failing employee never aborts a monthly run; the failure is recorded
  in ``PayrollRunSummary.errors``.
* With ``reject_invalid_payroll`` set, a payroll with a hard validation
  error (negative net) is recorded as an error and not persisted.
* A leave accrual period is processed once unless ``force_reprocess`` is
  set; a forced rerun credits the balances again.

Failure modes
-------------
* ``InvalidPayrollMonthError`` -- malformed ``YYYY-MM`` month.
* ``EmployeeNotFoundError`` -- unknown employee ID (single-employee calls).
* Engine errors propagate from single-employee calls.
* ``NoActiveAccrualPoliciesError`` / ``LeaveAccrualAlreadyProcessedError``
  -- leave accrual run refused before any balance is touched.

Audit relevance
---------------
Structured log events are emitted at the start and end of every run with
run IDs, counts and totals; each run binds ``run_id`` and
``payroll_month`` into ``LogContext`` so engine traces correlate.

Usage::

    with session_scope() as session:
        gateway = SqlHRGateway(session, actor_id=actor_id)
        service = PayrollService(gateway, PayrollConfig(), clock=clock)
        summary = service.process_monthly_payroll("2024-05")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from uuid import uuid4

from hr_engines.eosb import EOSBResult, TerminationType, calculate_eosb
from hr_engines.gosi_report import (
    GOSIMonthlyReport,
    build_gosi_report,
    render_gosi_report_text,
)
from hr_engines.leave_accrual import EmployeeAccrualResult, calculate_leave_accrual
from hr_engines.leave_days import (
    LeaveDaysBreakdown,
    calculate_leave_days,
    month_bounds,
    overlap_days_in_month,
)
from hr_engines.payroll_calculation import calculate_monthly_payroll
from hr_engines.payroll_validation import (
    PayrollValidationResult,
    validate_payroll_calculation,
)
from hr_kernel.domain.clock import Clock, SystemClock
from hr_kernel.exceptions import (
    EmployeeNotFoundError,
    HRKernelError,
    LeaveAccrualAlreadyProcessedError,
    NoActiveAccrualPoliciesError,
)
from hr_kernel.logging_config import LogContext, get_logger
from hr_modules.payroll.config import PayrollConfig
from hr_modules.payroll.gateway import HRGateway
from hr_modules.payroll.models import (
    DeductionOptions,
    DeductionType,
    Employee,
    EmployeeStatus,
    LeaveRequest,
    PayrollCalculation,
    PayrollRunError,
    PayrollRunSummary,
    PublicHoliday,
    parse_payroll_month,
)

logger = get_logger("modules.payroll.service")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class EmployeePayrollResult:
    """A computed payroll and its validation outcome."""
    calculation: PayrollCalculation
    validation: PayrollValidationResult


@dataclass(frozen=True)
class GOSIReportResult:
    report: GOSIMonthlyReport
    report_text: str
    report_id: str


@dataclass(frozen=True)
class LeaveAccrualRunSummary:
    """Outcome of a monthly leave accrual run."""
    accrual_period: str
    results: tuple[EmployeeAccrualResult, ...] = ()
    errors: tuple[PayrollRunError, ...] = ()

    @property
    def processed_count(self) -> int:
        """Employees credited under at least one policy."""
        return sum(1 for r in self.results if r.accrued)

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if not r.accrued)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def total_days_accrued(self) -> Decimal:
        return sum((r.total_days_accrued for r in self.results), _ZERO)


class PayrollService:
    """
    Orchestrates payroll operations through the HR gateway.

    Contract:
        Engines are pure; this class supplies the records, the policy and
        the clock, and persists what the engines produce.
    """

    def __init__(
        self,
        gateway: HRGateway,
        config: PayrollConfig | None = None,
        clock: Clock | None = None,
    ):
        self._gateway = gateway
        self._config = config or PayrollConfig.with_defaults()
        self._clock = clock or SystemClock()

    @property
    def config(self) -> PayrollConfig:
        return self._config

    # =========================================================================
    # Input assembly
    # =========================================================================

    def _deduction_options(self, employee: Employee, month: str) -> DeductionOptions:
        loan = _ZERO
        advance = _ZERO
        other = _ZERO

        for loan_request in self._gateway.list_loan_requests(employee.id):
            if loan_request.is_repaying:
                loan += loan_request.monthly_deduction

        for deduction in self._gateway.list_payroll_deductions(employee.id):
            if not deduction.applies_to(month):
                continue
            if deduction.deduction_type == DeductionType.LOAN_REPAYMENT:
                loan += deduction.amount
            elif deduction.deduction_type == DeductionType.ADVANCE_SALARY:
                advance += deduction.amount
            elif deduction.deduction_type != DeductionType.GOSI_EMPLOYEE:
                other += deduction.amount

        return DeductionOptions(
            working_days=self._config.policy.payroll.default_working_days,
            loan_deduction=loan,
            advance_deduction=advance,
            other_deductions=other,
        )

    def _month_leaves(self, employee: Employee, month: str, start: date, end: date) -> list[LeaveRequest]:
        """Approved unpaid leave with ``total_days`` clipped to the month."""
        clipped: list[LeaveRequest] = []
        for leave in self._gateway.list_leave_requests(employee.id, start, end):
            if not leave.is_approved_unpaid:
                continue
            if leave.start_date is None or leave.end_date is None:
                clipped.append(leave)
                continue
            days = overlap_days_in_month(leave.start_date, leave.end_date, month)
            if days:
                clipped.append(replace(leave, total_days=Decimal(days)))
        return clipped

    def _calculate(
        self,
        employee: Employee,
        month: str,
        options: DeductionOptions | None,
    ) -> EmployeePayrollResult:
        start, end = month_bounds(*parse_payroll_month(month))
        policy = self._config.policy

        calculation = calculate_monthly_payroll(
            employee,
            self._gateway.list_time_entries(employee.id, start, end),
            self._gateway.list_attendance(employee.id, start, end),
            self._month_leaves(employee, month, start, end),
            options or self._deduction_options(employee, month),
            calculation_date=self._clock.now(),
            month=month,
            policy=policy.payroll,
            gosi_rates=policy.gosi,
            currency=self._config.currency,
        )
        validation = validate_payroll_calculation(calculation, policy.validation)
        return EmployeePayrollResult(calculation=calculation, validation=validation)

    # =========================================================================
    # Single employee
    # =========================================================================

    def calculate_employee_payroll(
        self,
        employee_id: str,
        month: str,
        options: DeductionOptions | None = None,
    ) -> EmployeePayrollResult:
        """
        Compute and validate one employee's payroll without persisting it.

        When ``options`` is omitted, deductions are assembled from the
        employee's loans and recurring deductions for the month.

        Raises:
            InvalidPayrollMonthError: Malformed month.
            EmployeeNotFoundError: Unknown employee.
        """
        parse_payroll_month(month)
        employee = self._gateway.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        with LogContext.bind(employee_id=employee.id, payroll_month=month):
            return self._calculate(employee, month, options)

    # =========================================================================
    # Monthly run
    # =========================================================================

    def process_monthly_payroll(
        self,
        month: str,
        employee_ids: Sequence[str] | None = None,
        actor_id: str | None = None,
    ) -> PayrollRunSummary:
        """
        Run payroll for every eligible employee for ``month``.

        Args:
            month: ``YYYY-MM``.
            employee_ids: Optional filter; an empty sequence means all.
            actor_id: Who triggered the run (log context only).

        Returns:
            PayrollRunSummary with the accepted calculations and the
            per-employee errors.

        Raises:
            InvalidPayrollMonthError: Malformed month.
        """
        parse_payroll_month(month)
        run_id = str(uuid4())

        with LogContext.bind(
            run_id=run_id,
            payroll_month=month,
            actor_id=str(actor_id) if actor_id is not None else None,
        ):
            employees = self._gateway.list_employees(
                statuses=self._config.eligible_statuses,
                employee_ids=employee_ids or None,
            )
            logger.info(
                "payroll_run_started",
                extra={"employee_count": len(employees)},
            )

            calculations: list[PayrollCalculation] = []
            errors: list[PayrollRunError] = []
            warnings: dict[str, tuple[str, ...]] = {}

            for employee in employees:
                with LogContext.bind(employee_id=employee.id):
                    try:
                        result = self._calculate(employee, month, None)
                        if self._config.reject_invalid_payroll:
                            result.validation.raise_for_errors()
                        if self._config.persist_results:
                            self._gateway.create_payroll(
                                result.calculation,
                                "bank_transfer" if employee.bank_account else "cash",
                            )
                    except (HRKernelError, ValueError, ArithmeticError) as e:
                        code = getattr(e, "code", type(e).__name__)
                        logger.warning(
                            "payroll_employee_failed",
                            extra={"error_code": code, "error": str(e)},
                        )
                        errors.append(
                            PayrollRunError(
                                employee_id=employee.id,
                                employee_name=employee.full_name,
                                error_code=code,
                                error=str(e),
                            )
                        )
                        continue

                calculations.append(result.calculation)
                if result.validation.warnings:
                    warnings[employee.id] = result.validation.warnings

            summary = PayrollRunSummary(
                month=month,
                calculations=tuple(calculations),
                errors=tuple(errors),
                warnings=warnings,
                currency=self._config.currency,
            )
            logger.info(
                "payroll_run_completed",
                extra={
                    "processed_count": summary.processed_count,
                    "error_count": summary.error_count,
                    "total_gross": str(summary.total_gross),
                    "total_net": str(summary.total_net),
                    "total_gosi_employer": str(summary.total_gosi_employer),
                },
            )
            return summary

    # =========================================================================
    # GOSI report
    # =========================================================================

    def generate_gosi_report(
        self,
        month: str,
        company_id: str | None = None,
    ) -> GOSIReportResult:
        """
        Build, render and persist the GOSI report from the month's payrolls.

        Raises:
            InvalidPayrollMonthError: Malformed month.
        """
        parse_payroll_month(month)
        with LogContext.bind(payroll_month=month):
            payrolls = self._gateway.list_payrolls(month)
            employees = {e.id: e for e in self._gateway.list_employees()}
            report = build_gosi_report(
                month,
                payrolls,
                employees,
                company_id=company_id,
                rates=self._config.policy.gosi,
            )
            text = render_gosi_report_text(report)
            report_id = self._gateway.create_gosi_report(report, text)
            logger.info(
                "gosi_report_generated",
                extra={
                    "gosi_report_id": report_id,
                    "total_employees": report.total_employees,
                    "total_contribution": str(report.total_contribution),
                    "due_date": report.due_date,
                },
            )
            return GOSIReportResult(report=report, report_text=text, report_id=report_id)

    # =========================================================================
    # Leave accrual
    # =========================================================================

    def process_monthly_leave_accrual(
        self,
        accrual_period: str | None = None,
        force_reprocess: bool = False,
        actor_id: str | None = None,
    ) -> LeaveAccrualRunSummary:
        """
        Credit every active employee's leave balances for one month.

        Args:
            accrual_period: ``YYYY-MM``; defaults to the clock's month.
            force_reprocess: Run even if the period already has accruals.
            actor_id: Who triggered the run (log context only).

        Returns:
            LeaveAccrualRunSummary with one result per employee and the
            per-employee errors.  No active employees yields an empty
            summary.

        Raises:
            InvalidPayrollMonthError: Malformed period.
            NoActiveAccrualPoliciesError: No active policy is configured.
            LeaveAccrualAlreadyProcessedError: The period already has
                accruals and ``force_reprocess`` is not set.
        """
        accrual_date = self._clock.today()
        period = accrual_period or accrual_date.strftime("%Y-%m")
        year, _ = parse_payroll_month(period)
        run_id = str(uuid4())

        with LogContext.bind(
            run_id=run_id,
            accrual_period=period,
            actor_id=str(actor_id) if actor_id is not None else None,
        ):
            employees = self._gateway.list_employees(statuses=(EmployeeStatus.ACTIVE.value,))
            if not employees:
                logger.info("leave_accrual_no_active_employees")
                return LeaveAccrualRunSummary(accrual_period=period)

            policies = self._gateway.list_leave_accrual_policies()
            if not policies:
                raise NoActiveAccrualPoliciesError(period)

            if not force_reprocess:
                existing = self._gateway.count_leave_accruals(period)
                if existing:
                    raise LeaveAccrualAlreadyProcessedError(period, existing)

            logger.info(
                "leave_accrual_run_started",
                extra={
                    "employee_count": len(employees),
                    "policy_count": len(policies),
                    "force_reprocess": force_reprocess,
                },
            )

            results: list[EmployeeAccrualResult] = []
            errors: list[PayrollRunError] = []

            for employee in employees:
                with LogContext.bind(employee_id=employee.id):
                    try:
                        result = calculate_leave_accrual(
                            employee,
                            policies,
                            period,
                            accrual_date,
                            self._gateway.list_leave_balances(employee.id, year),
                        )
                        for entry in result.accrued:
                            self._gateway.save_leave_balance(entry.balance)
                            self._gateway.create_leave_accrual(entry.accrual)
                    except (HRKernelError, ValueError, ArithmeticError) as e:
                        code = getattr(e, "code", type(e).__name__)
                        logger.warning(
                            "leave_accrual_employee_failed",
                            extra={"error_code": code, "error": str(e)},
                        )
                        errors.append(
                            PayrollRunError(
                                employee_id=employee.id,
                                employee_name=employee.full_name,
                                error_code=code,
                                error=str(e),
                            )
                        )
                        continue
                results.append(result)

            summary = LeaveAccrualRunSummary(
                accrual_period=period,
                results=tuple(results),
                errors=tuple(errors),
            )
            logger.info(
                "leave_accrual_run_completed",
                extra={
                    "processed_count": summary.processed_count,
                    "skipped_count": summary.skipped_count,
                    "error_count": summary.error_count,
                    "total_days_accrued": str(summary.total_days_accrued),
                },
            )
            return summary

    # =========================================================================
    # EOSB and leave
    # =========================================================================

    def calculate_eosb(
        self,
        employee_id: str,
        termination_type: TerminationType | str,
        termination_date: date | None = None,
        last_basic_salary: Decimal | None = None,
        include_housing_allowance: bool = False,
        deductions: Decimal = _ZERO,
    ) -> EOSBResult:
        """
        End-of-service benefit for an employee.

        ``termination_date`` defaults to today's date from the clock.

        Raises:
            EmployeeNotFoundError: Unknown employee.
            MissingHireDateError: Employee has no hire date.
            InvalidServicePeriodError: Termination precedes hire.
        """
        employee = self._gateway.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        with LogContext.bind(employee_id=employee.id):
            return calculate_eosb(
                employee,
                TerminationType(termination_type),
                termination_date or self._clock.today(),
                last_basic_salary=last_basic_salary,
                include_housing_allowance=include_housing_allowance,
                deductions=deductions,
            )

    def public_holidays(self, start: date, end: date) -> tuple[PublicHoliday, ...]:
        """Gateway holidays merged with the policy's recurring holidays; gateway wins per date."""
        by_date = {h.date: h for h in self._config.policy.holidays_between(start, end)}
        by_date.update({h.date: h for h in self._gateway.list_public_holidays(start, end)})
        return tuple(by_date[d] for d in sorted(by_date))

    def calculate_leave_days(self, start_date: date, end_date: date) -> LeaveDaysBreakdown:
        """
        Working days a leave from ``start_date`` to ``end_date`` consumes.

        Raises:
            InvalidLeaveRangeError: ``end_date`` precedes ``start_date``.
        """
        holidays = self.public_holidays(start_date, end_date) if start_date <= end_date else ()
        return calculate_leave_days(
            start_date,
            end_date,
            holidays,
            self._config.policy.weekend_days,
        )
