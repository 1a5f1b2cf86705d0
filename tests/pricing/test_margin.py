"""Tests for margin and price-from-margin arithmetic."""

import math

import pytest

from cart_pricing.errors import InvalidInputError, NonFiniteResultError
from cart_pricing.pricing.margin import (
    is_valid_number,
    margin,
    parse_amount,
    price_from_margin,
    round_half_up,
)


class TestMargin:
    """Test suite for margin(price, cost)."""

    @pytest.mark.parametrize("price,cost,expected", [
        (10.0, 6.0, 40.0),
        (20.0, 15.0, 25.0),
        (3.0, 1.0, 66.67),
        (100.0, 0.0, 100.0),
        (50.0, 75.0, -50.0),
        (7.0, 7.0, 0.0),
    ])
    def test_margin_formula(self, price, cost, expected) -> None:
        assert margin(price, cost) == expected

    def test_margin_matches_rounded_formula(self) -> None:
        for price, cost in [(12.34, 5.67), (999.99, 123.45), (0.5, 0.49), (1.0, 2.5)]:
            expected = round(((price - cost) / price) * 100, 2)
            assert margin(price, cost) == pytest.approx(expected, abs=0.01)

    def test_zero_price_is_zero_margin(self) -> None:
        assert margin(0, 10.0) == 0
        assert margin(0.0, 0.0) == 0

    def test_invalid_numbers_are_zero_margin(self) -> None:
        assert margin(float("nan"), 5.0) == 0
        assert margin(10.0, float("nan")) == 0
        assert margin("10", 5.0) == 0
        assert margin(None, 5.0) == 0
        assert margin(10.0, None) == 0
        assert margin(True, 0.5) == 0

    def test_overflowing_ratio_is_zero_margin(self) -> None:
        # 1 over a subnormal price overflows to -inf
        assert margin(1e-320, 1.0) == 0
        assert margin(5e-324, 10.0) == 0

    def test_large_finite_margin_is_rounded(self) -> None:
        assert margin(1e-300, 1.0) == pytest.approx(-1e302)

    def test_decimals_setting(self) -> None:
        assert margin(3.0, 1.0, decimals=4) == 66.6667
        assert margin(3.0, 1.0, decimals=0) == 67.0


class TestPriceFromMargin:
    """Test suite for price_from_margin(margin_pct, cost)."""

    @pytest.mark.parametrize("margin_pct,cost,expected", [
        (40.0, 6.0, 10.0),
        (25.0, 15.0, 20.0),
        (0.0, 12.5, 12.5),
        (-50.0, 75.0, 50.0),
        (50.0, 0.0, 0.0),
        (33.33, 10.0, 15.0),
    ])
    def test_price_formula(self, margin_pct, cost, expected) -> None:
        assert price_from_margin(margin_pct, cost) == expected

    def test_round_trip_within_tolerance(self) -> None:
        for price, cost in [(10.0, 6.0), (10.01, 3.0), (19.99, 12.0), (2.5, 2.75), (40.0, 1.0)]:
            m = margin(price, cost)
            assert price_from_margin(m, cost) == pytest.approx(price, abs=0.011)

    def test_round_trip_at_full_margin_is_explicit(self) -> None:
        # Zero cost means a 100% margin, which has no finite price
        assert margin(25.0, 0.0) == 100.0
        with pytest.raises(NonFiniteResultError):
            price_from_margin(margin(25.0, 0.0), 0.0)

    def test_hundred_percent_margin_rejected(self) -> None:
        with pytest.raises(NonFiniteResultError) as exc_info:
            price_from_margin(100.0, 10.0)

        assert exc_info.value.margin_pct == 100.0
        assert exc_info.value.cost == 10.0

    def test_margin_above_hundred_rejected(self) -> None:
        with pytest.raises(NonFiniteResultError):
            price_from_margin(150.0, 10.0)

    def test_clamp_policy(self) -> None:
        price = price_from_margin(100.0, 10.0, ceiling_policy="clamp", max_margin_pct=90.0)
        assert price == 100.0
        assert math.isfinite(price_from_margin(250.0, 10.0, ceiling_policy="clamp"))

    def test_non_numeric_inputs_rejected(self) -> None:
        with pytest.raises(NonFiniteResultError):
            price_from_margin(float("nan"), 10.0)
        with pytest.raises(NonFiniteResultError):
            price_from_margin(20.0, float("nan"))

    def test_overflowing_price_rejected(self) -> None:
        with pytest.raises(NonFiniteResultError) as exc_info:
            price_from_margin(50.0, 1e308)

        assert exc_info.value.margin_pct == 50.0
        assert exc_info.value.cost == 1e308

    def test_large_cost_solves_price(self) -> None:
        assert price_from_margin(50.0, 1e30) == 2e30


class TestRoundingAndParsing:
    """Test suite for rounding and input parsing helpers."""

    def test_round_half_up(self) -> None:
        assert round_half_up(1.005, 2) == 1.01
        assert round_half_up(2.675, 2) == 2.68
        assert round_half_up(-1.005, 2) == -1.01
        assert round_half_up(10.0, 2) == 10.0

    def test_round_half_up_extremes(self) -> None:
        assert round_half_up(1e300, 2) == 1e300
        assert round_half_up(1e-320, 2) == 0.0
        assert round_half_up(float("-inf"), 2) == float("-inf")

    @pytest.mark.parametrize("raw,expected", [
        ("12.5", 12.5),
        (" 7 ", 7.0),
        ("1,250.00", 1250.0),
        (3, 3.0),
        (4.25, 4.25),
        ("-5", -5.0),
    ])
    def test_parse_amount(self, raw, expected) -> None:
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "12abc", "nan", "inf", None, True, [1]])
    def test_parse_amount_rejects(self, raw) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            parse_amount(raw)
        assert exc_info.value.raw_value == raw

    def test_is_valid_number(self) -> None:
        assert is_valid_number(1)
        assert is_valid_number(0.0)
        assert not is_valid_number(float("inf"))
        assert not is_valid_number(False)
        assert not is_valid_number("1")
