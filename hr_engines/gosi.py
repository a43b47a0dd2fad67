"""
GOSI Contribution Engine (``hr_engines.gosi``).

Responsibility
--------------
Compute the Saudi General Organization for Social Insurance (GOSI) split
between employee and employer for one salary snapshot:

* Contribution base = basic salary + housing allowance, capped at 45,000.
* Saudi nationals: employee 10% (annuities), employer 12%
  (9% annuities + 2% occupational hazards + 1% SANED).
* Expatriates: employee 0%, employer 2% (occupational hazards only).

An employee record carrying a positive ``gosi_salary_basis`` uses that
figure as the base verbatim, without the cap.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Rates arrive as a ``GOSIRates`` value (loaded from the YAML policy set by
``hr_config``); ``DEFAULT_GOSI_RATES`` carries the 2024 statutory figures.

Invariants enforced
-------------------
* Decimal-only arithmetic.
* ``total_gosi == employee_share + employer_share`` exactly (the total is
  summed from the rounded shares).
* Nationality matching is an exact match of the lower-cased string
  against the configured aliases; no trimming, no fuzzy matching.

Failure modes
-------------
* Missing salary inputs (``None``) contribute 0 and are listed in
  ``missing_fields``; the calculator itself never raises for them.
* ``GOSIRates`` construction raises ``ValueError`` for rates outside
  [0, 1] or a non-positive cap.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from hr_engines.tracer import traced_engine
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import Employee

logger = get_logger("engines.gosi")

_CENT = Decimal("0.01")
_ZERO = Decimal("0")


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class GOSIRates:
    """Contribution rates and cap (rates as decimals, e.g. 0.10 for 10%)."""

    national_employee_rate: Decimal = Decimal("0.10")
    national_employer_rate: Decimal = Decimal("0.12")
    expatriate_employee_rate: Decimal = Decimal("0")
    expatriate_employer_rate: Decimal = Decimal("0.02")

    # Branch split, for reporting
    annuities_employee_rate: Decimal = Decimal("0.10")
    annuities_employer_rate: Decimal = Decimal("0.09")
    occupational_hazards_rate: Decimal = Decimal("0.02")
    saned_rate: Decimal = Decimal("0.01")

    contribution_cap: Decimal = Decimal("45000")
    national_aliases: frozenset[str] = field(
        default_factory=lambda: frozenset({"saudi", "saudi arabia", "ksa"})
    )

    def __post_init__(self) -> None:
        for name in (
            "national_employee_rate",
            "national_employer_rate",
            "expatriate_employee_rate",
            "expatriate_employer_rate",
            "annuities_employee_rate",
            "annuities_employer_rate",
            "occupational_hazards_rate",
            "saned_rate",
        ):
            rate = getattr(self, name)
            if not Decimal("0") <= rate <= Decimal("1"):
                raise ValueError(f"{name} must be between 0 and 1, got {rate}")
        if self.contribution_cap <= 0:
            raise ValueError("contribution_cap must be positive")


DEFAULT_GOSI_RATES = GOSIRates()


@dataclass(frozen=True)
class GOSIBreakdown:
    """Per-branch split of the contribution."""

    annuities_employee: Decimal = _ZERO
    annuities_employer: Decimal = _ZERO
    occupational_hazards: Decimal = _ZERO
    saned: Decimal = _ZERO


@dataclass(frozen=True)
class GOSIContribution:
    """GOSI split for one employee and one salary snapshot."""

    gosi_base: Decimal
    employee_share: Decimal
    employer_share: Decimal
    total_gosi: Decimal
    is_saudi: bool
    breakdown: GOSIBreakdown = field(default_factory=GOSIBreakdown)
    uses_salary_basis: bool = False
    missing_fields: tuple[str, ...] = ()


def is_saudi_national(
    nationality: str | None,
    rates: GOSIRates = DEFAULT_GOSI_RATES,
) -> bool:
    """True when the lower-cased nationality exactly matches a national alias."""
    if not nationality:
        return False
    return nationality.lower() in rates.national_aliases


@traced_engine(
    "gosi", "1.0",
    fingerprint_fields=("basic_salary", "housing_allowance"),
)
def calculate_gosi(
    employee: Employee,
    basic_salary: Decimal | None,
    housing_allowance: Decimal | None,
    rates: GOSIRates = DEFAULT_GOSI_RATES,
) -> GOSIContribution:
    """
    Compute the GOSI employee/employer split.

    Args:
        employee: Supplies ``nationality`` and the optional
            ``gosi_salary_basis`` override.
        basic_salary: Basic salary for the period (``None`` if unknown).
        housing_allowance: Housing allowance (``None`` if unknown).
        rates: Contribution rates and cap.

    Returns:
        GOSIContribution with every monetary field rounded to 2 decimals.
    """
    missing = tuple(
        name for name, value in (
            ("basic_salary", basic_salary),
            ("housing_allowance", housing_allowance),
        )
        if value is None
    )
    basic = basic_salary if basic_salary is not None else _ZERO
    housing = housing_allowance if housing_allowance is not None else _ZERO

    basis = employee.gosi_salary_basis
    uses_salary_basis = basis is not None and basis > 0
    if uses_salary_basis:
        gosi_base = basis
    else:
        gosi_base = min(basic + housing, rates.contribution_cap)

    is_saudi = is_saudi_national(employee.nationality, rates)

    if is_saudi:
        employee_share = gosi_base * rates.national_employee_rate
        employer_share = gosi_base * rates.national_employer_rate
        breakdown = GOSIBreakdown(
            annuities_employee=_round2(gosi_base * rates.annuities_employee_rate),
            annuities_employer=_round2(gosi_base * rates.annuities_employer_rate),
            occupational_hazards=_round2(gosi_base * rates.occupational_hazards_rate),
            saned=_round2(gosi_base * rates.saned_rate),
        )
    else:
        employee_share = gosi_base * rates.expatriate_employee_rate
        employer_share = gosi_base * rates.expatriate_employer_rate
        breakdown = GOSIBreakdown(
            occupational_hazards=_round2(gosi_base * rates.occupational_hazards_rate),
        )

    employee_share = _round2(employee_share)
    employer_share = _round2(employer_share)

    if missing:
        logger.warning(
            "gosi_missing_salary_data",
            extra={"employee_id": employee.id, "missing_fields": list(missing)},
        )

    return GOSIContribution(
        gosi_base=_round2(gosi_base),
        employee_share=employee_share,
        employer_share=employer_share,
        total_gosi=employee_share + employer_share,
        is_saudi=is_saudi,
        breakdown=breakdown,
        uses_salary_basis=uses_salary_basis,
        missing_fields=missing,
    )
