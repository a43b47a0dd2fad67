"""
Tests for the policy set loader and the get_active_policy entrypoint.
"""

from datetime import date
from decimal import Decimal

import pytest
import yaml

from hr_config import RecurringHoliday, get_active_policy
from hr_config.loader import (
    compute_checksum,
    parse_policy_set,
    parse_weekend,
)
from hr_engines.gosi import DEFAULT_GOSI_RATES
from hr_engines.payroll_calculation import DEFAULT_PAYROLL_POLICY
from hr_kernel.exceptions import PolicyNotFoundError


class TestDefaultPolicy:

    def test_statutory_values(self):
        policy = get_active_policy()

        assert policy.policy_id == "sa_default"
        assert policy.version == 1
        assert policy.currency == "SAR"
        assert policy.gosi == DEFAULT_GOSI_RATES
        assert policy.payroll == DEFAULT_PAYROLL_POLICY
        assert policy.validation.gosi_base_cap == Decimal("45000")
        assert policy.weekend_days == frozenset({4, 5})
        assert RecurringHoliday(9, 23, "Saudi National Day") in policy.recurring_holidays

    def test_checksum_deterministic(self):
        first = get_active_policy()
        second = get_active_policy()

        assert first.checksum == second.checksum
        assert len(first.checksum) == 64

    def test_config_trace_emitted(self, captured_logs):
        policy = get_active_policy()

        trace = next(r for r in captured_logs() if r["message"] == "HR_CONFIG_TRACE")
        assert trace["trace_type"] == "HR_CONFIG_TRACE"
        assert trace["policy_id"] == "sa_default"
        assert trace["checksum"] == policy.checksum


class TestCustomPolicies:

    def test_missing_policy(self, tmp_path):
        with pytest.raises(PolicyNotFoundError) as exc_info:
            get_active_policy("nowhere", config_dir=tmp_path)

        assert exc_info.value.code == "POLICY_NOT_FOUND"
        assert exc_info.value.name == "nowhere"

    def test_partial_policy_uses_defaults(self, tmp_path):
        (tmp_path / "lean.yaml").write_text(
            "policy_id: lean\nversion: 2\ngosi:\n  contribution_cap: 40000\n"
        )

        policy = get_active_policy("lean", config_dir=tmp_path)

        assert policy.gosi.contribution_cap == Decimal("40000")
        assert policy.gosi.national_employee_rate == Decimal("0.10")
        assert policy.payroll == DEFAULT_PAYROLL_POLICY
        assert policy.recurring_holidays == ()

    def test_yaml_floats_become_exact_decimals(self):
        policy = parse_policy_set(
            yaml.safe_load("policy_id: x\nversion: 1\ngosi:\n  saned_rate: 0.01\n")
        )

        assert policy.gosi.saned_rate == Decimal("0.01")

    def test_aliases_lowercased(self):
        policy = parse_policy_set(
            {"policy_id": "x", "version": 1, "gosi": {"national_aliases": ["Saudi", "KSA"]}}
        )

        assert policy.gosi.national_aliases == frozenset({"saudi", "ksa"})

    def test_out_of_range_rate(self):
        with pytest.raises(ValueError):
            parse_policy_set({"policy_id": "x", "version": 1, "gosi": {"saned_rate": "2"}})

    def test_non_numeric_rate(self):
        with pytest.raises(ValueError, match="gosi.saned_rate"):
            parse_policy_set({"policy_id": "x", "version": 1, "gosi": {"saned_rate": "lots"}})

    def test_missing_required_key(self):
        with pytest.raises(KeyError):
            parse_policy_set({"version": 1})

    def test_impossible_holiday(self):
        with pytest.raises(ValueError):
            parse_policy_set(
                {"policy_id": "x", "version": 1,
                 "public_holidays": [{"month": 2, "day": 30, "name": "Nope"}]}
            )

    def test_unknown_currency(self):
        with pytest.raises(ValueError):
            parse_policy_set({"policy_id": "x", "version": 1, "currency": "ZZZ"})

    def test_checksum_changes_with_content(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


class TestWeekendAndHolidays:

    def test_weekend_names_and_numbers(self):
        assert parse_weekend(["Friday", 5]) == frozenset({4, 5})

    def test_weekend_unknown_day(self):
        with pytest.raises(ValueError):
            parse_weekend(["funday"])

    def test_leap_day_holiday_skipped_in_common_years(self):
        policy = parse_policy_set(
            {"policy_id": "x", "version": 1,
             "public_holidays": [{"month": 2, "day": 29, "name": "Leap"}]}
        )

        assert policy.holidays_between(date(2023, 1, 1), date(2023, 12, 31)) == ()
        assert len(policy.holidays_between(date(2024, 1, 1), date(2024, 12, 31))) == 1
