"""
Unit tests for the Money value object.

Verifies:
- Float constructor prohibition
- Rounding to currency precision (ROUND_HALF_UP)
- Minor unit (halala) conversion
- Same-currency arithmetic
"""

from decimal import ROUND_HALF_EVEN, Decimal

import pytest

from hr_kernel.domain.values import Currency, Money


class TestConstruction:

    def test_of_string(self):
        assert Money.of("12345.83", "SAR").amount == Decimal("12345.83")

    def test_of_int(self):
        assert Money.of(100, "sar").currency == Currency("SAR")

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            Money(amount=0.1, currency="SAR")

    def test_invalid_currency(self):
        with pytest.raises(ValueError):
            Money.of("1", "XXX")

    def test_zero(self):
        assert Money.zero("SAR").is_zero


class TestRounding:

    def test_half_up_default(self):
        assert Money.of("666.665", "SAR").round().amount == Decimal("666.67")

    def test_explicit_mode(self):
        assert Money.of("0.125", "SAR").round(ROUND_HALF_EVEN).amount == Decimal("0.12")

    def test_three_decimal_currency(self):
        assert Money.of("1.2345", "KWD").round().amount == Decimal("1.235")

    def test_zero_decimal_currency(self):
        assert Money.of("99.5", "JPY").round().amount == Decimal("100")


class TestMinorUnits:

    def test_to_halalas(self):
        assert Money.of("12345.83", "SAR").to_minor_units() == 1234583

    def test_unrounded_rejected(self):
        with pytest.raises(ValueError, match="round"):
            Money.of("0.005", "SAR").to_minor_units()

    def test_from_minor_units(self):
        assert Money.from_minor_units(1234583, "SAR") == Money.of("12345.83", "SAR")


class TestArithmetic:

    def test_add_sub(self):
        gross = Money.of("14312.50", "SAR")
        deductions = Money.of("1966.67", "SAR")

        assert gross - deductions == Money.of("12345.83", "SAR")
        assert (gross + deductions).amount == Decimal("16279.17")

    def test_mixed_currency_rejected(self):
        with pytest.raises(ValueError):
            Money.of("1", "SAR") + Money.of("1", "USD")

    def test_multiply(self):
        assert (Money.of("13000", "SAR") * Decimal("0.10")).amount == Decimal("1300.00")
        assert (2 * Money.of("5", "SAR")).amount == Decimal("10")

    def test_compare_and_negate(self):
        assert Money.of("1", "SAR") < Money.of("2", "SAR")
        assert (-Money.of("1", "SAR")).is_negative

    def test_str(self):
        assert str(Money.of("1.50", "SAR")) == "1.50 SAR"
