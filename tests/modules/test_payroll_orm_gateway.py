"""
Tests for the SQLAlchemy payroll gateway.

Uses an in-memory SQLite database (``session`` fixture).  Verifies DTO
round-trips, range filtering and payroll/GOSI report persistence.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from hr_engines.gosi_report import build_gosi_report
from hr_engines.payroll_calculation import calculate_monthly_payroll
from hr_modules.payroll.gateway import HRGateway, SqlHRGateway
from hr_modules.payroll.models import (
    AttendanceRecord,
    LeaveAccrual,
    LeaveAccrualPolicy,
    LeaveBalance,
    LeaveRequest,
    LoanRequest,
    PayrollDeduction,
    PublicHoliday,
    TimeEntry,
)
from hr_modules.payroll.orm import GOSIReportModel, LeaveBalanceModel, PayrollRecordModel


@pytest.fixture
def gateway(session, actor_id):
    return SqlHRGateway(session, actor_id=actor_id)


@pytest.fixture
def stored_employee(gateway, employee_factory):
    return gateway.add_employee(
        employee_factory(
            employee_number="EMP-1",
            hire_date=date(2020, 1, 1),
            bank_account="SA0380000000608010167519",
        )
    )


class TestEmployees:

    def test_satisfies_protocol(self, gateway):
        assert isinstance(gateway, HRGateway)

    def test_round_trip(self, gateway, stored_employee):
        loaded = gateway.get_employee(stored_employee.id)

        assert loaded.id == stored_employee.id
        assert loaded.basic_salary == Decimal("10000")
        assert loaded.transport_allowance == Decimal("500")
        assert loaded.hire_date == date(2020, 1, 1)
        assert loaded.nationality == "Saudi"
        assert loaded.gosi_applicable is True

    def test_missing_salary_stays_none(self, gateway, employee_factory):
        employee = gateway.add_employee(employee_factory(housing_allowance=None))

        assert gateway.get_employee(employee.id).housing_allowance is None

    def test_unknown_and_malformed_ids(self, gateway):
        assert gateway.get_employee(str(uuid4())) is None
        assert gateway.get_employee("not-a-uuid") is None

    def test_list_filters(self, gateway, employee_factory):
        active = gateway.add_employee(employee_factory(last_name="A", company_id="acme"))
        gateway.add_employee(employee_factory(last_name="B", status="terminated"))
        other = gateway.add_employee(employee_factory(last_name="C", company_id="globex"))

        assert [e.id for e in gateway.list_employees(statuses=["active"])] == [active.id, other.id]
        assert [e.id for e in gateway.list_employees(company_id="globex")] == [other.id]
        assert [e.id for e in gateway.list_employees(employee_ids=[active.id])] == [active.id]
        assert len(gateway.list_employees()) == 3

    def test_list_skips_malformed_ids(self, gateway, stored_employee, captured_logs):
        assert gateway.list_employees(employee_ids=["EMP-1"]) == []
        assert [e.id for e in gateway.list_employees(
            employee_ids=["EMP-1", stored_employee.id],
        )] == [stored_employee.id]

        logged = [r for r in captured_logs() if r["message"] == "employee_id_malformed"]
        assert logged[0]["requested_id"] == "EMP-1"


class TestSourceRecords:

    def test_time_entries_in_range(self, gateway, stored_employee):
        gateway.add_records([
            TimeEntry(hours=Decimal("8"), overtime_hours=Decimal("2"), status="approved",
                      work_date=date(2024, 5, 2), employee_id=stored_employee.id),
            TimeEntry(hours=Decimal("8"), status="approved",
                      work_date=date(2024, 6, 1), employee_id=stored_employee.id),
        ])

        entries = gateway.list_time_entries(stored_employee.id, date(2024, 5, 1), date(2024, 5, 31))

        assert len(entries) == 1
        assert entries[0].overtime_hours == Decimal("2")
        assert entries[0].is_approved is True

    def test_attendance_in_range(self, gateway, stored_employee):
        gateway.add_records([
            AttendanceRecord(status="late", late_by=Decimal("15"),
                             date=date(2024, 5, 2), employee_id=stored_employee.id),
            AttendanceRecord(status="absent", date=date(2024, 4, 30),
                             employee_id=stored_employee.id),
        ])

        records = gateway.list_attendance(stored_employee.id, date(2024, 5, 1), date(2024, 5, 31))

        assert [r.status for r in records] == ["late"]
        assert records[0].late_by == Decimal("15")

    def test_leaves_overlapping_range(self, gateway, stored_employee):
        gateway.add_records([
            LeaveRequest(leave_type="unpaid", status="approved", total_days=Decimal("5"),
                         start_date=date(2024, 4, 28), end_date=date(2024, 5, 2),
                         employee_id=stored_employee.id),
            LeaveRequest(leave_type="annual", status="approved", total_days=Decimal("3"),
                         start_date=date(2024, 6, 2), end_date=date(2024, 6, 4),
                         employee_id=stored_employee.id),
        ])

        leaves = gateway.list_leave_requests(stored_employee.id, date(2024, 5, 1), date(2024, 5, 31))

        assert len(leaves) == 1
        assert leaves[0].start_date == date(2024, 4, 28)

    def test_loans_and_deductions(self, gateway, stored_employee):
        gateway.add_records([
            LoanRequest(employee_id=stored_employee.id, monthly_deduction=Decimal("500"),
                        status="approved"),
            PayrollDeduction(employee_id=stored_employee.id, deduction_type="advance_salary",
                             amount=Decimal("200"), start_month="2024-01"),
        ])

        loans = gateway.list_loan_requests(stored_employee.id)
        deductions = gateway.list_payroll_deductions(stored_employee.id)

        assert loans[0].monthly_deduction == Decimal("500")
        assert deductions[0].applies_to("2024-05") is True

    def test_public_holidays(self, gateway):
        gateway.add_records([
            PublicHoliday(date(2024, 4, 10), "Eid al-Fitr"),
            PublicHoliday(date(2024, 6, 16), "Eid al-Adha"),
        ])

        holidays = gateway.list_public_holidays(date(2024, 6, 1), date(2024, 6, 30))

        assert holidays == [PublicHoliday(date(2024, 6, 16), "Eid al-Adha")]


class TestOutputs:

    def test_payroll_round_trip(self, gateway, stored_employee, session, calculation_date):
        calc = calculate_monthly_payroll(
            stored_employee,
            [TimeEntry(overtime_hours=Decimal("5"), status="approved")],
            [AttendanceRecord(status="absent")] * 2,
            calculation_date=calculation_date,
            month="2024-05",
        )

        record_id = gateway.create_payroll(calc, "bank_transfer")
        loaded = gateway.list_payrolls("2024-05")

        assert len(loaded) == 1
        for name in type(calc).MONETARY_FIELDS:
            assert getattr(loaded[0], name) == getattr(calc, name), name
        assert loaded[0].absent_days == 2
        assert loaded[0].overtime_hours == Decimal("5")
        assert loaded[0].employee_name == "Faisal Al-Harbi"

        row = session.scalars(select(PayrollRecordModel)).one()
        assert str(row.id) == record_id
        assert row.payment_method == "bank_transfer"
        assert row.status == "calculated"

    def test_payroll_replaced_for_same_month(
        self, gateway, stored_employee, session, calculation_date, captured_logs,
    ):
        first = calculate_monthly_payroll(stored_employee, calculation_date=calculation_date, month="2024-05")
        second = calculate_monthly_payroll(
            stored_employee,
            [AttendanceRecord(status="absent")],
            calculation_date=calculation_date,
            month="2024-05",
        )

        first_id = gateway.create_payroll(first)
        second_id = gateway.create_payroll(second)

        rows = session.scalars(select(PayrollRecordModel)).all()
        assert [str(r.id) for r in rows] == [second_id]
        assert gateway.list_payrolls("2024-05")[0].net_salary == second.net_salary
        replaced = next(r for r in captured_logs() if r["message"] == "payroll_record_replaced")
        assert replaced["payroll_record_id"] == first_id

    def test_list_payrolls_filters_month(self, gateway, stored_employee, calculation_date):
        gateway.create_payroll(
            calculate_monthly_payroll(stored_employee, calculation_date=calculation_date, month="2024-04")
        )

        assert gateway.list_payrolls("2024-05") == []

    def test_create_gosi_report(self, gateway, stored_employee, session, calculation_date):
        calc = calculate_monthly_payroll(
            stored_employee, calculation_date=calculation_date, month="2024-05",
        )
        report = build_gosi_report("2024-05", [calc], {stored_employee.id: stored_employee})

        report_id = gateway.create_gosi_report(report, "text")

        row = session.scalars(select(GOSIReportModel)).one()
        assert str(row.id) == report_id
        assert row.total_contribution == Decimal("2860.00")
        assert row.due_date == date(2024, 5, 10)
        assert row.payment_status == "pending"
        assert row.report_text == "text"


class TestLeaveAccrual:

    def test_employment_type_round_trip(self, gateway, employee_factory):
        employee = gateway.add_employee(employee_factory(employment_type="part_time"))

        assert gateway.get_employee(employee.id).employment_type == "part_time"

    def test_policy_round_trip(self, gateway):
        gateway.add_records([
            LeaveAccrualPolicy(name="Annual", employment_types=("full_time", "contract")),
            LeaveAccrualPolicy(name="Any", leave_type="sick", employment_types=()),
            LeaveAccrualPolicy(name="Retired", leave_type="hajj", is_active=False),
        ])

        policies = gateway.list_leave_accrual_policies()

        assert [p.name for p in policies] == ["Annual", "Any"]
        assert policies[0].employment_types == ("full_time", "contract")
        assert policies[0].monthly_accrual_rate == Decimal("1.75")
        assert policies[1].employment_types == ()
        assert len(gateway.list_leave_accrual_policies(active_only=False)) == 3

    def test_save_balance_inserts_then_updates(self, gateway, stored_employee, session):
        opening = LeaveBalance(employee_id=stored_employee.id, leave_type="annual", year=2024,
                               total_entitled=Decimal("1.75"), remaining=Decimal("1.75"))

        gateway.save_leave_balance(opening)
        gateway.save_leave_balance(opening.credited(Decimal("1.75")))

        assert session.scalars(select(LeaveBalanceModel)).all()[0].total_entitled == Decimal("3.5")
        assert len(session.scalars(select(LeaveBalanceModel)).all()) == 1
        assert gateway.list_leave_balances(stored_employee.id, 2024)[0].remaining == Decimal("3.5")
        assert gateway.list_leave_balances(stored_employee.id, 2023) == []

    def test_accrual_history(self, gateway, stored_employee):
        accrual = LeaveAccrual(
            employee_id=stored_employee.id, leave_type="annual",
            accrual_date=date(2024, 5, 31), accrual_period="2024-05",
            days_accrued=Decimal("0.90"), balance_before=Decimal("0"),
            balance_after=Decimal("0.90"), accrual_rate=Decimal("1.75"),
            employment_months=0, is_prorated=True, proration_factor=Decimal("0.5161"),
            notes="Prorated for mid-month hire",
        )

        gateway.create_leave_accrual(accrual)

        assert gateway.count_leave_accruals("2024-05") == 1
        assert gateway.count_leave_accruals("2024-04") == 0
        assert gateway.list_leave_accruals("2024-05") == [accrual]
