"""
Payroll Module (``hr_modules.payroll``).

Responsibility
--------------
Thin HR glue for Saudi payroll: monthly payroll runs over an injected
``HRGateway``, GOSI monthly reporting, end-of-service benefit and leave
day calculations and monthly leave accrual.

Architecture position
---------------------
**Modules layer** -- value objects (``models``), service settings
(``config``), persistence (``orm``, ``gateway``) and the
``PayrollService`` facade (``service``).  The engines import
``hr_modules.payroll.models`` directly, so this package init re-exports
the models only; import the service, gateway and ORM from their
submodules.

Failure modes
-------------
* ``EmployeeNotFoundError`` for unknown employee IDs.
* ``InvalidPayrollMonthError`` for malformed ``YYYY-MM`` months.
* Per-employee failures in a monthly run are collected, not raised.
"""

from hr_modules.payroll.models import (
    AttendanceRecord,
    AttendanceStatus,
    DeductionOptions,
    DeductionType,
    Employee,
    EmployeeStatus,
    EmploymentType,
    LeaveAccrual,
    LeaveAccrualPolicy,
    LeaveBalance,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    LoanRequest,
    LoanStatus,
    PayrollCalculation,
    PayrollDeduction,
    PayrollRunError,
    PayrollRunSummary,
    PublicHoliday,
    TimeEntry,
    TimeEntryStatus,
    parse_payroll_month,
)

__all__ = [
    "AttendanceRecord",
    "AttendanceStatus",
    "DeductionOptions",
    "DeductionType",
    "Employee",
    "EmployeeStatus",
    "EmploymentType",
    "LeaveAccrual",
    "LeaveAccrualPolicy",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "LoanRequest",
    "LoanStatus",
    "PayrollCalculation",
    "PayrollDeduction",
    "PayrollRunError",
    "PayrollRunSummary",
    "PublicHoliday",
    "TimeEntry",
    "TimeEntryStatus",
    "parse_payroll_month",
]
