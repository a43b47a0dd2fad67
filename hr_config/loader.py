"""
Policy Loader (``hr_config.loader``).

Responsibility
--------------
Load a policy-set YAML file and parse it into a ``PolicySet``.  This is
internal tooling; the single public entry point for runtime policy is
``hr_config.get_active_policy()``.

Invariants enforced
-------------------
* Rates and amounts are parsed through ``Decimal(str(value))``; YAML
  floats never reach the engines as ``float``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  canonical JSON of the raw YAML document.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys (``policy_id``, ``version``)  -> ``KeyError``.
* Out-of-range rates or impossible holiday dates  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from hr_config.schema import PolicySet, RecurringHoliday
from hr_engines.gosi import GOSIRates
from hr_engines.payroll_calculation import PayrollPolicy
from hr_engines.payroll_validation import ValidationThresholds
from hr_kernel.domain.currency import CurrencyRegistry

_WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{name}: expected a number, got {value!r}") from e


def _decimal_fields(data: dict[str, Any], section: str) -> dict[str, Decimal]:
    return {key: parse_decimal(value, f"{section}.{key}") for key, value in data.items()}


def parse_gosi(data: dict[str, Any]) -> GOSIRates:
    """Parse GOSI rates; ``national_aliases`` is lower-cased."""
    data = dict(data)
    aliases = data.pop("national_aliases", None)
    kwargs: dict[str, Any] = _decimal_fields(data, "gosi")
    if aliases is not None:
        kwargs["national_aliases"] = frozenset(str(a).lower() for a in aliases)
    return GOSIRates(**kwargs)


def parse_payroll(data: dict[str, Any]) -> PayrollPolicy:
    data = dict(data)
    kwargs: dict[str, Any] = {}
    if "default_working_days" in data:
        kwargs["default_working_days"] = int(data.pop("default_working_days"))
    kwargs.update(_decimal_fields(data, "payroll"))
    return PayrollPolicy(**kwargs)


def parse_validation(data: dict[str, Any]) -> ValidationThresholds:
    data = dict(data)
    kwargs: dict[str, Any] = {}
    if "max_absent_days" in data:
        kwargs["max_absent_days"] = int(data.pop("max_absent_days"))
    kwargs.update(_decimal_fields(data, "validation"))
    return ValidationThresholds(**kwargs)


def parse_weekend(days: list[Any]) -> frozenset[int]:
    """Weekend days given as names (``friday``) or Python weekday numbers."""
    parsed: set[int] = set()
    for day in days:
        if isinstance(day, int):
            if not 0 <= day <= 6:
                raise ValueError(f"weekend day out of range: {day}")
            parsed.add(day)
        else:
            try:
                parsed.add(_WEEKDAYS[str(day).lower()])
            except KeyError as e:
                raise ValueError(f"Unknown weekday: {day!r}") from e
    return frozenset(parsed)


def parse_holiday(data: dict[str, Any]) -> RecurringHoliday:
    return RecurringHoliday(
        month=int(data["month"]),
        day=int(data["day"]),
        name=str(data["name"]),
    )


def parse_policy_set(data: dict[str, Any], checksum: str = "") -> PolicySet:
    """
    Parse a ``PolicySet`` from a YAML document.

    Sections other than ``policy_id`` and ``version`` are optional and
    default to the statutory values.
    """
    currency = CurrencyRegistry.validate(data.get("currency", "SAR"))

    kwargs: dict[str, Any] = {
        "policy_id": data["policy_id"],
        "version": int(data["version"]),
        "currency": currency,
        "description": data.get("description", ""),
        "checksum": checksum,
    }
    if "gosi" in data:
        kwargs["gosi"] = parse_gosi(data["gosi"])
    if "payroll" in data:
        kwargs["payroll"] = parse_payroll(data["payroll"])
    if "validation" in data:
        kwargs["validation"] = parse_validation(data["validation"])
    if "weekend_days" in data:
        kwargs["weekend_days"] = parse_weekend(data["weekend_days"])
    if "public_holidays" in data:
        kwargs["recurring_holidays"] = tuple(
            parse_holiday(h) for h in data["public_holidays"]
        )
    return PolicySet(**kwargs)


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def load_policy_set(path: Path) -> PolicySet:
    """Load, checksum and parse one policy-set file."""
    data = load_yaml_file(path)
    return parse_policy_set(data, checksum=compute_checksum(data))
