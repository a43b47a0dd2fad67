"""
Module: hr_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for higher layers
    (hr_config, hr_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import hr_kernel and the payroll value objects in
    ``hr_modules.payroll.models``.  MUST NOT import the payroll service,
    gateway or ORM.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Calculation dates are passed in by the caller.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - Typed ``hr_kernel.exceptions`` errors for invalid arguments
      (working days, leave ranges, service periods, months).
    - Business-rule findings are returned as results, never raised.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``hr_engines.tracer``), emitting HR_ENGINE_TRACE log records with the
    engine name, version, input fingerprint and duration.

Usage:
    from hr_engines import calculate_monthly_payroll, calculate_gosi
    from hr_engines import validate_payroll_calculation
    from hr_engines.eosb import calculate_eosb, TerminationType
"""

from hr_kernel.logging_config import get_logger

logger = get_logger("engines")

from hr_engines.eosb import (
    EOSBResult,
    ServicePeriod,
    TerminationType,
    calculate_eosb,
    service_period,
)
from hr_engines.gosi import (
    DEFAULT_GOSI_RATES,
    GOSIBreakdown,
    GOSIContribution,
    GOSIRates,
    calculate_gosi,
    is_saudi_national,
)
from hr_engines.gosi_report import (
    GOSIMonthlyReport,
    GOSIReportLine,
    build_gosi_report,
    render_gosi_report_text,
)
from hr_engines.leave_accrual import (
    AccrualOutcome,
    EmployeeAccrualResult,
    PolicyAccrual,
    calculate_leave_accrual,
    employment_months,
    proration_factor,
)
from hr_engines.leave_days import (
    SAUDI_WEEKEND,
    DayType,
    LeaveDay,
    LeaveDaysBreakdown,
    calculate_leave_days,
    month_bounds,
    overlap_days_in_month,
)
from hr_engines.payroll_calculation import (
    DEFAULT_PAYROLL_POLICY,
    PayrollPolicy,
    calculate_bulk_payroll,
    calculate_monthly_payroll,
)
from hr_engines.payroll_validation import (
    DEFAULT_VALIDATION_THRESHOLDS,
    PayrollValidationResult,
    ValidationThresholds,
    validate_payroll_calculation,
)

__all__ = [
    # GOSI
    "GOSIRates",
    "GOSIBreakdown",
    "GOSIContribution",
    "DEFAULT_GOSI_RATES",
    "calculate_gosi",
    "is_saudi_national",
    # Payroll
    "PayrollPolicy",
    "DEFAULT_PAYROLL_POLICY",
    "calculate_monthly_payroll",
    "calculate_bulk_payroll",
    # Validation
    "ValidationThresholds",
    "DEFAULT_VALIDATION_THRESHOLDS",
    "PayrollValidationResult",
    "validate_payroll_calculation",
    # Leave
    "SAUDI_WEEKEND",
    "DayType",
    "LeaveDay",
    "LeaveDaysBreakdown",
    "calculate_leave_days",
    "month_bounds",
    "overlap_days_in_month",
    # Leave accrual
    "AccrualOutcome",
    "PolicyAccrual",
    "EmployeeAccrualResult",
    "calculate_leave_accrual",
    "employment_months",
    "proration_factor",
    # EOSB
    "TerminationType",
    "ServicePeriod",
    "EOSBResult",
    "calculate_eosb",
    "service_period",
    # GOSI report
    "GOSIReportLine",
    "GOSIMonthlyReport",
    "build_gosi_report",
    "render_gosi_report_text",
]
