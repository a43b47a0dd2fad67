"""
GOSI Monthly Report Engine (``hr_engines.gosi_report``).

Responsibility
--------------
Aggregate one month of persisted payroll calculations, joined with the
employee master data, into the monthly GOSI contribution report, and
render it as the fixed-width text document filed with GOSI.

Architecture position
---------------------
**Engines layer** -- pure, ZERO I/O.  The service fetches payrolls and
employees through the gateway and persists the resulting report.

Invariants enforced
-------------------
* Wage base per line = ``gosi_calculation_base``, falling back to
  ``basic_salary`` when the base is zero.
* Occupational hazards = 2% of total wages; SANED = 2% of national wages.
* ``total_contribution == total_employee_contribution +
  total_employer_contribution``.
* Payroll rows whose employee is unknown are skipped entirely; they are
  neither counted nor summed.
* Due date is the 10th of the report month.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from hr_engines.gosi import DEFAULT_GOSI_RATES, GOSIRates, is_saudi_national
from hr_engines.tracer import traced_engine
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import Employee, PayrollCalculation, parse_payroll_month

logger = get_logger("engines.gosi_report")

_CENT = Decimal("0.01")
_ZERO = Decimal("0")

REPORT_HAZARDS_RATE = Decimal("0.02")
REPORT_SANED_RATE = Decimal("0.02")
GOSI_DUE_DAY = 10


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class GOSIReportLine:
    """One employee's row in the report."""
    employee_id: str
    employee_name: str
    employee_number: str | None
    national_id: str | None
    nationality: str | None
    gosi_number: str | None
    is_saudi: bool
    wage_base: Decimal
    gosi_employee: Decimal
    gosi_employer: Decimal


@dataclass(frozen=True)
class GOSIMonthlyReport:
    report_month: str
    company_id: str | None
    due_date: date
    saudi_lines: tuple[GOSIReportLine, ...]
    non_saudi_lines: tuple[GOSIReportLine, ...]
    total_wages: Decimal
    total_employee_contribution: Decimal
    total_employer_contribution: Decimal
    occupational_hazards: Decimal
    saned_contribution: Decimal
    currency: str = "SAR"
    report_type: str = "monthly_contribution"

    @property
    def total_employees(self) -> int:
        return len(self.saudi_lines) + len(self.non_saudi_lines)

    @property
    def saudi_employees(self) -> int:
        return len(self.saudi_lines)

    @property
    def non_saudi_employees(self) -> int:
        return len(self.non_saudi_lines)

    @property
    def total_contribution(self) -> Decimal:
        return self.total_employee_contribution + self.total_employer_contribution

    def to_record(self) -> dict:
        """Flat dict in the shape the HR platform's GOSIReport entity stores."""
        return {
            "report_month": self.report_month,
            "company_id": self.company_id,
            "report_type": self.report_type,
            "total_employees": self.total_employees,
            "saudi_employees": self.saudi_employees,
            "non_saudi_employees": self.non_saudi_employees,
            "total_wages": self.total_wages,
            "total_employee_contribution": self.total_employee_contribution,
            "total_employer_contribution": self.total_employer_contribution,
            "total_contribution": self.total_contribution,
            "occupational_hazards": self.occupational_hazards,
            "saned_contribution": self.saned_contribution,
            "due_date": self.due_date.isoformat(),
            "status": "generated",
            "payment_status": "pending",
        }


def _wage_base(payroll: PayrollCalculation) -> Decimal:
    if payroll.gosi_calculation_base:
        return payroll.gosi_calculation_base
    return payroll.basic_salary


@traced_engine("gosi_report", "1.0", fingerprint_fields=("month", "company_id"))
def build_gosi_report(
    month: str,
    payrolls: Iterable[PayrollCalculation],
    employees: Mapping[str, Employee],
    company_id: str | None = None,
    rates: GOSIRates = DEFAULT_GOSI_RATES,
) -> GOSIMonthlyReport:
    """
    Build the GOSI report for ``month``.

    Args:
        month: ``YYYY-MM`` report month.
        payrolls: Payroll calculations persisted for the month.
        employees: Employee master data keyed by employee id.
        company_id: When set, only employees of that company are included.
        rates: Supplies the national-alias set.

    Raises:
        InvalidPayrollMonthError: If ``month`` is malformed.
    """
    year, month_number = parse_payroll_month(month)

    saudi: list[GOSIReportLine] = []
    non_saudi: list[GOSIReportLine] = []
    skipped = 0

    for payroll in payrolls:
        employee = employees.get(payroll.employee_id)
        if employee is None:
            skipped += 1
            continue
        if company_id is not None and employee.company_id != company_id:
            continue
        line = GOSIReportLine(
            employee_id=employee.id,
            employee_name=employee.full_name,
            employee_number=employee.employee_number,
            national_id=employee.national_id,
            nationality=employee.nationality,
            gosi_number=employee.gosi_number,
            is_saudi=is_saudi_national(employee.nationality, rates),
            wage_base=_wage_base(payroll),
            gosi_employee=payroll.gosi_employee,
            gosi_employer=payroll.gosi_employer,
        )
        (saudi if line.is_saudi else non_saudi).append(line)

    lines = saudi + non_saudi
    total_wages = sum((ln.wage_base for ln in lines), _ZERO)
    saudi_wages = sum((ln.wage_base for ln in saudi), _ZERO)

    if skipped:
        logger.warning(
            "gosi_report_unknown_employees_skipped",
            extra={"payroll_month": month, "skipped": skipped},
        )

    return GOSIMonthlyReport(
        report_month=month,
        company_id=company_id,
        due_date=date(year, month_number, GOSI_DUE_DAY),
        saudi_lines=tuple(saudi),
        non_saudi_lines=tuple(non_saudi),
        total_wages=_round2(total_wages),
        total_employee_contribution=_round2(
            sum((ln.gosi_employee for ln in lines), _ZERO)
        ),
        total_employer_contribution=_round2(
            sum((ln.gosi_employer for ln in lines), _ZERO)
        ),
        occupational_hazards=_round2(total_wages * REPORT_HAZARDS_RATE),
        saned_contribution=_round2(saudi_wages * REPORT_SANED_RATE),
    )


# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------

_WIDTH = 80
_LINE = "─" * _WIDTH
_DOUBLE_LINE = "═" * _WIDTH


def _fmt(amount: Decimal, currency: str) -> str:
    return f"{_round2(amount or _ZERO)} {currency}"


def render_gosi_report_text(report: GOSIMonthlyReport) -> str:
    """Render the report as the fixed-width text document."""
    cur = report.currency

    def label(name: str, value: object) -> str:
        return f"{name:<30}{value}"

    out = [
        "",
        _DOUBLE_LINE,
        "GOSI MONTHLY CONTRIBUTION REPORT".center(_WIDTH).rstrip(),
        report.report_month.center(_WIDTH).rstrip(),
        _DOUBLE_LINE,
        "",
        "SUMMARY",
        _LINE,
        label("Total Employees:", report.total_employees),
        label("Saudi Employees:", report.saudi_employees),
        label("Non-Saudi Employees:", report.non_saudi_employees),
        "",
        label("Total Wages:", _fmt(report.total_wages, cur)),
        label("Employee Contribution:", _fmt(report.total_employee_contribution, cur)),
        label("Employer Contribution:", _fmt(report.total_employer_contribution, cur)),
        label("Occupational Hazards (2%):", _fmt(report.occupational_hazards, cur)),
        label("SANED Contribution (2%):", _fmt(report.saned_contribution, cur)),
        "",
        _DOUBLE_LINE,
        label("TOTAL CONTRIBUTION:", _fmt(report.total_contribution, cur)),
        _DOUBLE_LINE,
        "",
        f"Due Date: {report.due_date.isoformat()}",
        "",
        f"SAUDI EMPLOYEES ({report.saudi_employees})",
        _LINE,
    ]

    for i, ln in enumerate(report.saudi_lines, start=1):
        out += [
            "",
            f"{i}. {ln.employee_name} ({ln.employee_number or 'N/A'})",
            f"   National ID: {ln.national_id or 'N/A'}",
            f"   GOSI Number: {ln.gosi_number or 'N/A'}",
            f"   Wage Base:   {_fmt(ln.wage_base, cur)}",
            f"   Employee:    {_fmt(ln.gosi_employee, cur)}",
            f"   Employer:    {_fmt(ln.gosi_employer, cur)}",
        ]

    if report.non_saudi_lines:
        out += [
            "",
            _LINE,
            f"NON-SAUDI EMPLOYEES ({report.non_saudi_employees})",
            _LINE,
        ]
        for i, ln in enumerate(report.non_saudi_lines, start=1):
            out += [
                "",
                f"{i}. {ln.employee_name} ({ln.employee_number or 'N/A'})",
                f"   Nationality: {ln.nationality or 'N/A'}",
                f"   Wage Base:   {_fmt(ln.wage_base, cur)}",
                f"   Employer:    {_fmt(ln.gosi_employer, cur)} (Occupational Hazards only)",
            ]

    out += ["", _DOUBLE_LINE, "End of Report", _DOUBLE_LINE, ""]
    return "\n".join(out)
