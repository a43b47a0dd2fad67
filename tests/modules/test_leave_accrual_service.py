"""
Integration tests for the monthly leave accrual run over the SQL gateway.

The clock reads 31 May 2024, so the default period is 2024-05.  Staff:
- Faisal: full time since 2020, accrues the full monthly rate
- Sara: hired 1 April 2024, still in probation
- Ravi: part time, not covered by the full-time policy
- Khalid: no hire date, fails
- Layla: terminated, never processed
"""

from datetime import date
from decimal import Decimal

import pytest

from hr_kernel.exceptions import (
    InvalidPayrollMonthError,
    LeaveAccrualAlreadyProcessedError,
    NoActiveAccrualPoliciesError,
)
from hr_modules.payroll.config import PayrollConfig
from hr_modules.payroll.gateway import SqlHRGateway
from hr_modules.payroll.models import LeaveAccrualPolicy, LeaveBalance
from hr_modules.payroll.service import PayrollService

PERIOD = "2024-05"


@pytest.fixture
def gateway(session, actor_id):
    return SqlHRGateway(session, actor_id=actor_id)


@pytest.fixture
def service(gateway, deterministic_clock):
    return PayrollService(gateway, PayrollConfig(), clock=deterministic_clock)


@pytest.fixture
def staff(gateway, employee_factory):
    return {
        "faisal": gateway.add_employee(employee_factory(hire_date=date(2020, 1, 1))),
        "sara": gateway.add_employee(employee_factory(
            first_name="Sara", last_name="Otaibi", hire_date=date(2024, 4, 1),
        )),
        "ravi": gateway.add_employee(employee_factory(
            first_name="Ravi", last_name="Menon", nationality="Indian",
            employment_type="part_time", hire_date=date(2019, 6, 1),
        )),
        "khalid": gateway.add_employee(employee_factory(first_name="Khalid", last_name="Shammari")),
        "layla": gateway.add_employee(employee_factory(
            first_name="Layla", last_name="Bakr", status="terminated", hire_date=date(2020, 1, 1),
        )),
    }


@pytest.fixture
def annual_policy(gateway):
    gateway.add_records([
        LeaveAccrualPolicy(name="Annual Leave"),
        LeaveAccrualPolicy(name="Old sick leave", leave_type="sick", is_active=False),
    ])


class TestAccrualRun:

    def test_credits_covered_employees(self, service, gateway, staff, annual_policy):
        summary = service.process_monthly_leave_accrual()

        assert summary.accrual_period == PERIOD
        assert summary.processed_count == 1
        assert summary.skipped_count == 2
        assert summary.error_count == 1
        assert summary.total_days_accrued == Decimal("1.75")
        assert summary.errors[0].employee_id == staff["khalid"].id
        assert summary.errors[0].error_code == "MISSING_HIRE_DATE"
        assert staff["layla"].id not in {r.employee_id for r in summary.results}

        balances = gateway.list_leave_balances(staff["faisal"].id, 2024)
        assert balances == [LeaveBalance(
            employee_id=staff["faisal"].id, leave_type="annual", year=2024,
            total_entitled=Decimal("1.75"), remaining=Decimal("1.75"),
        )]
        assert gateway.count_leave_accruals(PERIOD) == 1

    def test_probation_skipped_without_balance(self, service, gateway, staff, annual_policy):
        summary = service.process_monthly_leave_accrual()

        sara = next(r for r in summary.results if r.employee_id == staff["sara"].id)
        assert sara.skipped[0].reason == "Employee in probation period"
        assert gateway.list_leave_balances(staff["sara"].id, 2024) == []

    def test_existing_balance_incremented(self, service, gateway, staff, annual_policy):
        gateway.add_records([LeaveBalance(
            employee_id=staff["faisal"].id, leave_type="annual", year=2024,
            total_entitled=Decimal("7"), used=Decimal("3"), remaining=Decimal("4"),
        )])

        service.process_monthly_leave_accrual()

        (balance,) = gateway.list_leave_balances(staff["faisal"].id, 2024)
        assert balance.total_entitled == Decimal("8.75")
        assert balance.remaining == Decimal("5.75")
        assert balance.used == Decimal("3")
        (accrual,) = gateway.list_leave_accruals(PERIOD)
        assert accrual.balance_before == Decimal("7")
        assert accrual.balance_after == Decimal("8.75")
        assert accrual.employment_months == 52

    def test_explicit_period(self, service, gateway, staff, annual_policy):
        service.process_monthly_leave_accrual("2024-04")

        (accrual,) = gateway.list_leave_accruals("2024-04")
        assert accrual.accrual_period == "2024-04"
        assert accrual.accrual_date == date(2024, 5, 31)
        assert gateway.count_leave_accruals(PERIOD) == 0

    def test_malformed_period(self, service, staff, annual_policy):
        with pytest.raises(InvalidPayrollMonthError):
            service.process_monthly_leave_accrual("May 2024")

    def test_run_logged(self, service, staff, annual_policy, captured_logs):
        service.process_monthly_leave_accrual(actor_id="hr-admin")

        completed = next(
            r for r in captured_logs() if r["message"] == "leave_accrual_run_completed"
        )
        assert completed["processed_count"] == 1
        assert completed["error_count"] == 1
        assert completed["accrual_period"] == PERIOD
        assert completed["actor_id"] == "hr-admin"


class TestMidMonthHire:

    def test_prorated_through_gateway(self, service, gateway, employee_factory):
        gateway.add_records([LeaveAccrualPolicy(name="No probation", probation_period_months=0)])
        new_hire = gateway.add_employee(employee_factory(hire_date=date(2024, 5, 16)))
        april_hire = gateway.add_employee(employee_factory(
            first_name="Sara", last_name="Otaibi", hire_date=date(2024, 4, 1),
        ))

        summary = service.process_monthly_leave_accrual()

        assert summary.processed_count == 2
        assert summary.total_days_accrued == Decimal("2.65")
        accruals = {a.employee_id: a for a in gateway.list_leave_accruals(PERIOD)}
        assert accruals[new_hire.id].days_accrued == Decimal("0.9")
        assert accruals[new_hire.id].is_prorated is True
        assert accruals[new_hire.id].proration_factor == Decimal("0.5161")
        assert accruals[april_hire.id].days_accrued == Decimal("1.75")
        assert accruals[april_hire.id].is_prorated is False
        (balance,) = gateway.list_leave_balances(new_hire.id, 2024)
        assert balance.remaining == Decimal("0.9")


class TestRunGuards:

    def test_second_run_refused(self, service, gateway, staff, annual_policy):
        service.process_monthly_leave_accrual()

        with pytest.raises(LeaveAccrualAlreadyProcessedError) as exc_info:
            service.process_monthly_leave_accrual()

        assert exc_info.value.code == "LEAVE_ACCRUAL_EXISTS"
        assert exc_info.value.existing_count == 1
        assert exc_info.value.period == PERIOD
        (balance,) = gateway.list_leave_balances(staff["faisal"].id, 2024)
        assert balance.total_entitled == Decimal("1.75")

    def test_force_reprocess_credits_again(self, service, gateway, staff, annual_policy):
        service.process_monthly_leave_accrual()
        service.process_monthly_leave_accrual(force_reprocess=True)

        (balance,) = gateway.list_leave_balances(staff["faisal"].id, 2024)
        assert balance.total_entitled == Decimal("3.5")
        assert gateway.count_leave_accruals(PERIOD) == 2

    def test_no_active_policies(self, service, gateway, staff):
        gateway.add_records([LeaveAccrualPolicy(is_active=False)])

        with pytest.raises(NoActiveAccrualPoliciesError) as exc_info:
            service.process_monthly_leave_accrual()

        assert exc_info.value.code == "NO_ACCRUAL_POLICIES"

    def test_no_active_employees(self, service):
        summary = service.process_monthly_leave_accrual()

        assert summary.results == ()
        assert summary.processed_count == 0
        assert summary.total_days_accrued == Decimal("0")
