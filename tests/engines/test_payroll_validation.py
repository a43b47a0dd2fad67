"""
Tests for the payroll validation engine.

Covers:
- Negative net salary error
- Overtime, absence and GOSI-base warnings (strict thresholds)
- Missing salary data warnings
- Advisory result and raise_for_errors
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from hr_engines.payroll_validation import (
    ValidationThresholds,
    validate_payroll_calculation,
)
from hr_kernel.exceptions import PayrollValidationError
from hr_modules.payroll.models import PayrollCalculation


def _calc(**overrides) -> PayrollCalculation:
    fields = {
        "employee_id": "emp-1",
        "employee_name": "Faisal Al-Harbi",
        "calculation_date": datetime(2024, 5, 31, tzinfo=timezone.utc),
        "gross_salary": Decimal("13500.00"),
        "net_salary": Decimal("12200.00"),
        "gosi_calculation_base": Decimal("13000.00"),
    }
    fields.update(overrides)
    return PayrollCalculation(**fields)


class TestErrors:

    def test_clean_payroll_is_valid(self):
        result = validate_payroll_calculation(_calc())

        assert result.is_valid is True
        assert result.errors == ()
        assert result.warnings == ()

    def test_negative_net_is_error(self):
        result = validate_payroll_calculation(_calc(net_salary=Decimal("-0.01")))

        assert result.is_valid is False
        assert result.errors == ("Net salary cannot be negative",)

    def test_zero_net_is_valid(self):
        assert validate_payroll_calculation(_calc(net_salary=Decimal("0"))).is_valid

    def test_raise_for_errors(self):
        result = validate_payroll_calculation(_calc(net_salary=Decimal("-100")))

        with pytest.raises(PayrollValidationError) as exc_info:
            result.raise_for_errors()

        assert exc_info.value.employee_id == "emp-1"
        assert exc_info.value.errors == ("Net salary cannot be negative",)

    def test_raise_for_errors_noop_when_valid(self):
        validate_payroll_calculation(_calc()).raise_for_errors()


class TestWarnings:

    def test_overtime_threshold_is_strict(self):
        at_limit = validate_payroll_calculation(_calc(overtime_hours=Decimal("60")))
        over = validate_payroll_calculation(_calc(overtime_hours=Decimal("60.5")))

        assert at_limit.warnings == ()
        assert over.warnings == ("Unusual overtime hours detected (>60 hours)",)
        assert over.is_valid is True

    def test_absence_threshold_is_strict(self):
        assert validate_payroll_calculation(_calc(absent_days=10)).warnings == ()
        assert validate_payroll_calculation(_calc(absent_days=11)).warnings == (
            "High absence rate detected (>10 days)",
        )

    def test_gosi_base_above_cap(self):
        result = validate_payroll_calculation(
            _calc(gosi_calculation_base=Decimal("60000.00"))
        )

        assert result.warnings == ("GOSI calculation base exceeds maximum (45,000 SAR)",)

    def test_missing_fields_reported(self):
        result = validate_payroll_calculation(
            _calc(missing_fields=("basic_salary", "housing_allowance"))
        )

        assert result.warnings == (
            "Missing salary data: basic_salary was not provided",
            "Missing salary data: housing_allowance was not provided",
        )

    def test_all_rules_evaluated(self):
        result = validate_payroll_calculation(
            _calc(
                net_salary=Decimal("-5"),
                overtime_hours=Decimal("80"),
                absent_days=15,
                gosi_calculation_base=Decimal("50000"),
            )
        )

        assert len(result.errors) == 1
        assert len(result.warnings) == 3

    def test_custom_thresholds(self):
        thresholds = ValidationThresholds(
            max_overtime_hours=Decimal("20"), max_absent_days=2,
        )
        result = validate_payroll_calculation(
            _calc(overtime_hours=Decimal("25"), absent_days=3), thresholds,
        )

        assert result.warnings == (
            "Unusual overtime hours detected (>20 hours)",
            "High absence rate detected (>2 days)",
        )

    def test_findings_logged(self, captured_logs):
        validate_payroll_calculation(_calc(net_salary=Decimal("-1")))

        record = next(
            r for r in captured_logs() if r["message"] == "payroll_validation_findings"
        )
        assert record["employee_id"] == "emp-1"
        assert record["errors"] == ["Net salary cannot be negative"]
