"""
Typed Exception Hierarchy for the HR Kernel.

Every error raised by the kernel, the engines and the HR modules is a
subclass of ``HRKernelError``.  Each class carries a ``code`` class
attribute (machine-readable, API-safe) and stores its context as
attributes rather than only inside the message string, so callers can
catch by type and report by field:

    try:
        calculation = calculate_monthly_payroll(employee, ...)
    except InvalidWorkingDaysError as e:
        api_response(code=e.code, working_days=e.working_days)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    HRKernelError (base)
    |
    +-- PayrollError
    |   +-- InvalidWorkingDaysError
    |   +-- InvalidPayrollMonthError
    |   +-- EmployeeNotFoundError
    |   +-- PayrollValidationError
    |
    +-- LeaveError
    |   +-- InvalidLeaveRangeError
    |   +-- LeaveAccrualAlreadyProcessedError
    |   +-- NoActiveAccrualPoliciesError
    |
    +-- EOSBError
    |   +-- MissingHireDateError
    |   +-- InvalidServicePeriodError
    |
    +-- ConfigError
        +-- PolicyNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                      | When Raised
-----------|---------------------------|-------------------------------------------
Payroll    | INVALID_WORKING_DAYS      | working_days <= 0 (rates would divide by 0)
           | INVALID_PAYROLL_MONTH     | Month string is not YYYY-MM
           | EMPLOYEE_NOT_FOUND        | Employee ID unknown to the gateway
           | PAYROLL_VALIDATION_FAILED | Hard validation error (negative net salary)
-----------|---------------------------|-------------------------------------------
Leave      | INVALID_LEAVE_RANGE       | end_date precedes start_date
           | LEAVE_ACCRUAL_EXISTS      | Accruals already recorded for the period
           | NO_ACCRUAL_POLICIES       | No active leave accrual policy configured
-----------|---------------------------|-------------------------------------------
EOSB       | MISSING_HIRE_DATE         | Employee has no hire date
           | INVALID_SERVICE_PERIOD    | Termination date precedes hire date
-----------|---------------------------|-------------------------------------------
Config     | POLICY_NOT_FOUND          | No YAML policy set with the given name
"""


class HRKernelError(Exception):
    """
    Base exception for all HR kernel errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "HR_KERNEL_ERROR"


# Payroll-related exceptions


class PayrollError(HRKernelError):
    """Base exception for payroll calculation and processing errors."""

    code: str = "PAYROLL_ERROR"


class InvalidWorkingDaysError(PayrollError):
    """Working days must be positive; daily and hourly rates divide by it."""

    code: str = "INVALID_WORKING_DAYS"

    def __init__(self, working_days: object, employee_id: str | None = None):
        self.working_days = working_days
        self.employee_id = employee_id
        super().__init__(
            f"working_days must be a positive number, got {working_days!r}"
            + (f" (employee {employee_id})" if employee_id else "")
        )


class InvalidPayrollMonthError(PayrollError):
    """Payroll month is not a valid ``YYYY-MM`` string."""

    code: str = "INVALID_PAYROLL_MONTH"

    def __init__(self, month: object):
        self.month = month
        super().__init__(f"Month is required (format: YYYY-MM), got {month!r}")


class EmployeeNotFoundError(PayrollError):
    """Employee ID does not exist."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


class PayrollValidationError(PayrollError):
    """A computed payroll failed a hard validation rule."""

    code: str = "PAYROLL_VALIDATION_FAILED"

    def __init__(self, employee_id: str | None, errors: tuple[str, ...]):
        self.employee_id = employee_id
        self.errors = errors
        super().__init__(
            f"Payroll for employee {employee_id} failed validation: "
            + "; ".join(errors)
        )


# Leave-related exceptions


class LeaveError(HRKernelError):
    """Base exception for leave calculation errors."""

    code: str = "LEAVE_ERROR"


class InvalidLeaveRangeError(LeaveError):
    """Leave end date precedes its start date."""

    code: str = "INVALID_LEAVE_RANGE"

    def __init__(self, start_date: str, end_date: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"end_date ({end_date}) must not precede start_date ({start_date})"
        )


class LeaveAccrualAlreadyProcessedError(LeaveError):
    """Monthly accrual already ran for the period."""

    code: str = "LEAVE_ACCRUAL_EXISTS"

    def __init__(self, period: str, existing_count: int):
        self.period = period
        self.existing_count = existing_count
        super().__init__(
            f"Leave accrual already processed for {period} "
            f"({existing_count} records); use force_reprocess to run again"
        )


class NoActiveAccrualPoliciesError(LeaveError):
    """No active leave accrual policy exists."""

    code: str = "NO_ACCRUAL_POLICIES"

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"No active leave accrual policies found (period {period})")


# End-of-service benefit exceptions


class EOSBError(HRKernelError):
    """Base exception for end-of-service benefit errors."""

    code: str = "EOSB_ERROR"


class MissingHireDateError(EOSBError):
    """A service-based calculation (EOSB, leave accrual) needs the hire date."""

    code: str = "MISSING_HIRE_DATE"

    def __init__(self, employee_id: str | None = None):
        self.employee_id = employee_id
        super().__init__(f"Hire date is required (employee {employee_id})")


class InvalidServicePeriodError(EOSBError):
    """Termination date precedes the hire date."""

    code: str = "INVALID_SERVICE_PERIOD"

    def __init__(self, hire_date: str, termination_date: str):
        self.hire_date = hire_date
        self.termination_date = termination_date
        super().__init__(
            f"Termination date {termination_date} precedes hire date {hire_date}"
        )


# Configuration exceptions


class ConfigError(HRKernelError):
    """Base exception for policy configuration errors."""

    code: str = "CONFIG_ERROR"


class PolicyNotFoundError(ConfigError):
    """No policy set with the requested name exists."""

    code: str = "POLICY_NOT_FOUND"

    def __init__(self, name: str, config_dir: str):
        self.name = name
        self.config_dir = config_dir
        super().__init__(f"No policy set named {name!r} in {config_dir}")
