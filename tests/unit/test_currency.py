"""
Unit tests for the currency registry.
"""

import pytest

from hr_kernel.domain.currency import CurrencyRegistry
from hr_kernel.domain.values import Currency


class TestCurrencyRegistry:

    @pytest.mark.parametrize("code,places", [("SAR", 2), ("KWD", 3), ("BHD", 3), ("JPY", 0)])
    def test_decimal_places(self, code, places):
        assert CurrencyRegistry.get_decimal_places(code) == places

    def test_unknown_uses_default_places(self):
        assert CurrencyRegistry.get_decimal_places("ZZZ") == 2

    def test_validate_normalizes(self):
        assert CurrencyRegistry.validate(" sar ") == "SAR"

    @pytest.mark.parametrize("code", ["", "SA", "SARR", "ZZZ", None])
    def test_validate_rejects(self, code):
        with pytest.raises(ValueError):
            CurrencyRegistry.validate(code)

    def test_is_valid(self):
        assert CurrencyRegistry.is_valid("aed") is True
        assert CurrencyRegistry.is_valid("XYZ") is False
        assert CurrencyRegistry.is_valid(None) is False

    def test_all_codes_include_gcc(self):
        assert {"SAR", "AED", "QAR", "BHD", "KWD", "OMR"} <= CurrencyRegistry.all_codes()

    def test_info(self):
        info = CurrencyRegistry.get_info("SAR")

        assert info.name == "Saudi Riyal"
        assert info.minor_unit_factor == 100
        assert info.quantize_string == "0.00"


class TestCurrencyValue:

    def test_normalized(self):
        assert Currency("sar").code == "SAR"

    def test_invalid(self):
        with pytest.raises(ValueError):
            Currency("nope")

    def test_minor_unit_factor(self):
        assert Currency("KWD").minor_unit_factor == 1000
