"""Tests for Decimal money helpers."""

from decimal import Decimal

import pytest

from ecomarket.money import MAX_AMOUNT, MAX_BALANCE, parse_amount, round_money, to_decimal


class TestToDecimal:
    def test_float_goes_through_str(self) -> None:
        assert to_decimal(0.1) == Decimal("0.1")

    def test_none_and_garbage_are_zero(self) -> None:
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("abc") == Decimal("0")

    def test_decimal_passthrough(self) -> None:
        value = Decimal("3.14")
        assert to_decimal(value) is value


class TestRoundMoney:
    def test_half_up(self) -> None:
        assert round_money("2.345") == Decimal("2.35")
        assert round_money("2.344") == Decimal("2.34")

    def test_integer(self) -> None:
        assert round_money(7) == Decimal("7.00")


class TestParseAmount:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (10, Decimal("10.00")),
            (0, Decimal("0.00")),
            (12.5, Decimal("12.50")),
            ("25", Decimal("25.00")),
            (" 3.999 ", Decimal("4.00")),
            (Decimal("0.01"), Decimal("0.01")),
        ],
    )
    def test_valid(self, raw, expected) -> None:
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [-1, "-0.5", "", "  ", "ten", None, True, False, float("nan"), float("inf"), "NaN", [5]],
    )
    def test_invalid(self, raw) -> None:
        assert parse_amount(raw) is None

    @pytest.mark.parametrize("raw", ["1e30", 1e27, 10**40, "1e16", "1000000000000000.01"])
    def test_above_limit(self, raw) -> None:
        assert parse_amount(raw) is None

    def test_limit_is_inclusive(self) -> None:
        assert parse_amount(MAX_AMOUNT) == MAX_AMOUNT

    def test_custom_limit(self) -> None:
        assert parse_amount("1e20") is None
        assert parse_amount("1e20", limit=MAX_BALANCE) == Decimal("100000000000000000000.00")
        assert parse_amount("5", limit=Decimal("4")) is None
