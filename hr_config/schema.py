"""
Policy Set Schema (``hr_config.schema``).

Responsibility
--------------
Frozen dataclass describing one payroll policy set: the GOSI rates, the
payroll labor-law parameters, the validation thresholds and the
calendar (weekend days, recurring public holidays) that govern a
jurisdiction.

Architecture position
---------------------
**Config layer** -- pure data.  Composed from engine value types
(``GOSIRates``, ``PayrollPolicy``, ``ValidationThresholds``) so the parsed
policy can be handed to the engines without translation.

Invariants enforced
-------------------
* All objects are ``frozen=True``.
* ``checksum`` is the SHA-256 of the canonical JSON of the source YAML.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from hr_engines.gosi import DEFAULT_GOSI_RATES, GOSIRates
from hr_engines.leave_days import SAUDI_WEEKEND
from hr_engines.payroll_calculation import DEFAULT_PAYROLL_POLICY, PayrollPolicy
from hr_engines.payroll_validation import (
    DEFAULT_VALIDATION_THRESHOLDS,
    ValidationThresholds,
)
from hr_modules.payroll.models import PublicHoliday


@dataclass(frozen=True)
class RecurringHoliday:
    """A public holiday on the same calendar day every year."""

    month: int
    day: int
    name: str

    def __post_init__(self) -> None:
        # Validates the day against a leap year so Feb 29 is accepted.
        date(2024, self.month, self.day)

    def on(self, year: int) -> PublicHoliday | None:
        try:
            return PublicHoliday(date=date(year, self.month, self.day), name=self.name)
        except ValueError:
            return None


@dataclass(frozen=True)
class PolicySet:
    """A named, versioned payroll policy."""

    policy_id: str
    version: int
    currency: str = "SAR"
    gosi: GOSIRates = DEFAULT_GOSI_RATES
    payroll: PayrollPolicy = DEFAULT_PAYROLL_POLICY
    validation: ValidationThresholds = DEFAULT_VALIDATION_THRESHOLDS
    weekend_days: frozenset[int] = SAUDI_WEEKEND
    recurring_holidays: tuple[RecurringHoliday, ...] = field(default_factory=tuple)
    description: str = ""
    checksum: str = ""

    def holidays_between(self, start: date, end: date) -> tuple[PublicHoliday, ...]:
        """Recurring holidays materialized for every year touched by ``[start, end]``."""
        found: list[PublicHoliday] = []
        for year in range(start.year, end.year + 1):
            for recurring in self.recurring_holidays:
                holiday = recurring.on(year)
                if holiday is not None and start <= holiday.date <= end:
                    found.append(holiday)
        return tuple(sorted(found, key=lambda h: h.date))
