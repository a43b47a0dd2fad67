"""
Currencies payroll can be paid in, with their minor-unit precision.

Salaries are paid in SAR, but expatriate loans and advances are sometimes
recorded in the employee's home currency, so the registry covers the GCC
plus the usual expatriate home currencies. Precision drives rounding:
SAR pays to the halala (2 places), while KWD, BHD, OMR and JOD use fils (3).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    name: str

    @property
    def minor_unit_factor(self) -> int:
        return 10 ** self.decimal_places

    @property
    def quantum(self) -> Decimal:
        """Smallest payable amount, e.g. ``Decimal("0.01")`` for SAR."""
        return Decimal(1).scaleb(-self.decimal_places)

    @property
    def quantize_string(self) -> str:
        return str(self.quantum)


def _normalize(code: object) -> str | None:
    if not isinstance(code, str):
        return None
    return code.strip().upper() or None


class CurrencyRegistry:
    """Lookup of supported ISO 4217 codes."""

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        info.code: info
        for info in (
            CurrencyInfo("SAR", 2, "Saudi Riyal"),
            CurrencyInfo("AED", 2, "UAE Dirham"),
            CurrencyInfo("QAR", 2, "Qatari Riyal"),
            CurrencyInfo("BHD", 3, "Bahraini Dinar"),
            CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
            CurrencyInfo("OMR", 3, "Omani Rial"),
            CurrencyInfo("EGP", 2, "Egyptian Pound"),
            CurrencyInfo("INR", 2, "Indian Rupee"),
            CurrencyInfo("PKR", 2, "Pakistani Rupee"),
            CurrencyInfo("PHP", 2, "Philippine Peso"),
            CurrencyInfo("BDT", 2, "Bangladeshi Taka"),
            CurrencyInfo("JOD", 3, "Jordanian Dinar"),
            CurrencyInfo("USD", 2, "US Dollar"),
            CurrencyInfo("EUR", 2, "Euro"),
            CurrencyInfo("GBP", 2, "Pound Sterling"),
            CurrencyInfo("JPY", 0, "Japanese Yen"),
        )
    }

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        normalized = _normalize(code)
        return cls._CURRENCIES.get(normalized) if normalized else None

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Decimal places for ``code``; unknown codes fall back to 2."""
        info = cls.get_info(code)
        return cls.DEFAULT_DECIMAL_PLACES if info is None else info.decimal_places

    @classmethod
    def validate(cls, code: str) -> str:
        """Return the normalized code or raise ValueError."""
        normalized = _normalize(code)
        if normalized is None or len(normalized) != 3:
            raise ValueError(f"Currency code must be 3 letters: {code!r}")
        if normalized not in cls._CURRENCIES:
            raise ValueError(f"Unsupported currency code: {code!r}")
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
