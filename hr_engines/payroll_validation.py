"""
Payroll Validation Engine (``hr_engines.payroll_validation``).

Responsibility
--------------
Post-hoc sanity check of a computed ``PayrollCalculation``.  Every rule is
evaluated unconditionally:

* net salary < 0                      -> error
* overtime hours > 60                 -> warning
* absent days > 10                    -> warning
* GOSI calculation base > 45,000      -> warning (only reachable through a
                                         ``gosi_salary_basis`` override)
* salary field missing from source    -> warning, one per field

Architecture position
---------------------
**Engines layer** -- pure functional core.  Returns results, never
raises for business-rule findings.  Callers that want a hard stop use
``PayrollValidationResult.raise_for_errors()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from hr_kernel.exceptions import PayrollValidationError
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import PayrollCalculation

logger = get_logger("engines.payroll_validation")


@dataclass(frozen=True)
class ValidationThresholds:
    """Limits above which a payroll is flagged."""

    max_overtime_hours: Decimal = Decimal("60")
    max_absent_days: int = 10
    gosi_base_cap: Decimal = Decimal("45000")


DEFAULT_VALIDATION_THRESHOLDS = ValidationThresholds()


@dataclass(frozen=True)
class PayrollValidationResult:
    """Advisory outcome: ``is_valid`` is False only when there are errors."""

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    employee_id: str | None = None

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def raise_for_errors(self) -> None:
        """Raise ``PayrollValidationError`` if any hard error was found."""
        if self.errors:
            raise PayrollValidationError(self.employee_id, self.errors)


def _format_amount(value: Decimal) -> str:
    return f"{value:,.0f}" if value == value.to_integral_value() else f"{value:,}"


def validate_payroll_calculation(
    calculation: PayrollCalculation,
    thresholds: ValidationThresholds = DEFAULT_VALIDATION_THRESHOLDS,
) -> PayrollValidationResult:
    """
    Validate a computed payroll.

    Args:
        calculation: The payroll to check.
        thresholds: Overtime, absence and GOSI-base limits.

    Returns:
        PayrollValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if calculation.net_salary < 0:
        errors.append("Net salary cannot be negative")

    if calculation.overtime_hours > thresholds.max_overtime_hours:
        warnings.append(
            f"Unusual overtime hours detected "
            f"(>{_format_amount(thresholds.max_overtime_hours)} hours)"
        )

    if calculation.absent_days > thresholds.max_absent_days:
        warnings.append(
            f"High absence rate detected (>{thresholds.max_absent_days} days)"
        )

    if calculation.gosi_calculation_base > thresholds.gosi_base_cap:
        warnings.append(
            f"GOSI calculation base exceeds maximum "
            f"({_format_amount(thresholds.gosi_base_cap)} {calculation.currency})"
        )

    for name in calculation.missing_fields:
        warnings.append(f"Missing salary data: {name} was not provided")

    result = PayrollValidationResult(
        errors=tuple(errors),
        warnings=tuple(warnings),
        employee_id=calculation.employee_id,
    )

    if errors or warnings:
        logger.info(
            "payroll_validation_findings",
            extra={
                "employee_id": calculation.employee_id,
                "payroll_month": calculation.month,
                "errors": list(errors),
                "warnings": list(warnings),
            },
        )
    return result
