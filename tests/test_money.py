import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import money
from errors import MoneyOverflowError, MoneyParseError, MoneyRangeError, MoneyUnderflowError
from money import Money, MAX_UNITS, SCALE


class TestMoneyConstruction:
    def test_zero(self):
        assert Money(0) == money.ZERO
        assert str(money.ZERO) == "0.0000"

    def test_max_value(self):
        assert money.MAX.units == 2 ** 64 - 1
        assert str(money.MAX) == "1844674407370955.1615"

    def test_from_parts(self):
        assert Money.from_parts(1, 1) == Money(10001)

    def test_fractional_out_of_range(self):
        with pytest.raises(MoneyRangeError):
            Money.from_parts(0, SCALE)

    def test_whole_out_of_range(self):
        with pytest.raises(MoneyRangeError):
            Money.from_parts(MAX_UNITS, 0)

    def test_negative_units_rejected(self):
        with pytest.raises(MoneyRangeError):
            Money(-1)

    def test_units_above_max_rejected(self):
        with pytest.raises(MoneyRangeError):
            Money(MAX_UNITS + 1)


class TestMoneyParse:
    @pytest.mark.parametrize(
        "text, units",
        [
            ("0", 0),
            ("1", 10000),
            ("1.", 10000),
            ("1.5", 15000),
            ("0.0001", 1),
            ("  2.25  ", 22500),
            ("1844674407370955.1615", MAX_UNITS),
        ],
    )
    def test_valid_amounts(self, text, units):
        assert Money.parse(text).units == units

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "-1", "+1", "abc", "0.NaN", ".5", "1.2.3", "1e5", "1_000", "\u0661\u0662", "1.\u0665", "\uff11"],
    )
    def test_invalid_amounts(self, text):
        with pytest.raises(MoneyParseError):
            Money.parse(text)

    def test_too_many_fractional_digits_not_rounded(self):
        with pytest.raises(MoneyParseError, match="more than 4 fractional digits"):
            Money.parse("1.00001")

    def test_out_of_range_keeps_cause(self):
        with pytest.raises(MoneyParseError) as excinfo:
            Money.parse("1844674407370955.1616")
        assert isinstance(excinfo.value.__cause__, MoneyRangeError)

    def test_thousands_of_digits_rejected_as_parse_error(self):
        with pytest.raises(MoneyParseError, match="exceeds the maximum amount"):
            Money.parse("9" * 5000)

    def test_leading_zeros_do_not_count_towards_size(self):
        assert Money.parse("0" * 5000 + "1.5") == Money.parse("1.5")

    def test_whole_part_too_large(self):
        with pytest.raises(MoneyParseError):
            Money.parse("10000000000000000.0")


class TestMoneyArithmetic:
    def test_add(self):
        assert Money.parse("1.1").checked_add(Money.parse("2.2")) == Money.parse("3.3")

    def test_add_zero_to_max(self):
        assert money.MAX.checked_add(money.ZERO) == money.MAX

    def test_add_overflow(self):
        with pytest.raises(MoneyOverflowError):
            money.MAX.checked_add(Money(1))

    def test_sub(self):
        assert Money.parse("1.1").checked_sub(Money.parse("1.1")) == money.ZERO

    def test_sub_underflow(self):
        with pytest.raises(MoneyUnderflowError):
            Money.parse("1.1").checked_sub(Money.parse("2.2"))

    def test_ordering(self):
        assert Money.parse("0.9999") < Money.parse("1")
        assert max(Money(5), Money(3)) == Money(5)

    def test_arithmetic_returns_new_value(self):
        original = Money.parse("1")
        original.checked_add(Money.parse("1"))
        assert original == Money.parse("1")


class TestMoneyFormat:
    @pytest.mark.parametrize(
        "text, rendered",
        [("1", "1.0000"), ("1.5", "1.5000"), ("0.0001", "0.0001"), ("12.3456", "12.3456")],
    )
    def test_four_fractional_digits(self, text, rendered):
        assert str(Money.parse(text)) == rendered
