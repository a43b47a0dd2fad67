"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides Currency and Money, the value types every payroll amount is
    expressed in when it leaves an engine.  Engines compute over raw
    ``Decimal`` at full precision and wrap results in Money at the
    boundary.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except hr_kernel.domain.currency.

Invariants enforced:
    - Money amounts are always ``Decimal`` (never float).
    - Currency codes are validated against CurrencyRegistry at construction.
    - Arithmetic never silently mixes currencies.
    - Conversion to integer minor units (halalas for SAR) is exact only
      for amounts already rounded to the currency's precision.

Failure modes:
    - ValueError on construction with invalid amounts or currencies.
    - ValueError when arithmetic mixes different currencies.
    - ValueError from ``to_minor_units`` when the amount has more
      precision than the currency supports.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from hr_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True, slots=True)
class Currency:
    """ISO 4217 code, uppercased on construction; unknown codes are rejected."""

    code: str

    def __post_init__(self) -> None:
        info = CurrencyRegistry.get_info(self.code)
        if info is None:
            raise ValueError(f"Unsupported currency code: {self.code!r}")
        object.__setattr__(self, "code", info.code)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def minor_unit_factor(self) -> int:
        return 10 ** self.decimal_places

    @property
    def quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.decimal_places)

    def __str__(self) -> str:
        return self.code


def _as_currency(currency: str | Currency) -> Currency:
    return currency if isinstance(currency, Currency) else Currency(currency)


@dataclass(frozen=True, slots=True)
class Money:
    """
    A Decimal amount in one currency.

    Money never rounds on its own; payroll engines call ``round()`` once per
    component so that totals are sums of already-rounded parts.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.amount, float):
            raise TypeError("Money amount must not be float; pass Decimal or str")
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except InvalidOperation as e:
                raise ValueError(f"Invalid amount: {self.amount!r}") from e
        if not isinstance(self.currency, (str, Currency)):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")
        object.__setattr__(self, "currency", _as_currency(self.currency))

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def from_minor_units(cls, minor_units: int, currency: str | Currency) -> Money:
        """Build Money from halalas (or fils, cents...)."""
        currency = _as_currency(currency)
        return cls(Decimal(minor_units).scaleb(-currency.decimal_places), currency)

    @property
    def is_zero(self) -> bool:
        return self.amount.is_zero()

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Quantize to the currency's minor unit (half-up unless told otherwise)."""
        return Money(self.amount.quantize(self.currency.quantum, rounding=rounding), self.currency)

    def to_minor_units(self) -> int:
        """
        Exact integer count of minor units.

        Raises:
            ValueError: If the amount is finer than the currency's minor unit;
                call round() first.
        """
        scaled = self.amount.scaleb(self.currency.decimal_places)
        if scaled != scaled.to_integral_value():
            raise ValueError(
                f"{self} is finer than one {self.currency.code} minor unit; call round() first"
            )
        return int(scaled)

    def _check_same_currency(self, other: Money, op: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {op} {self.currency} and {other.currency} amounts"
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __mul__(self, factor: Decimal | int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (Decimal, int)):
            return NotImplemented
        return Money(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        return self == other or self < other

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
