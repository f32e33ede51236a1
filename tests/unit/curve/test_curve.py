"""Tests for constant-liquidity segment math.

The default segment has liquidity T << 64, so between price 1.0 and 4.0
(sqrt 1.0 to 2.0) it holds exactly T quote and T / 2 base.
"""

import pytest

from bonding_curve.curve import (
    get_delta_amount_base_unsigned,
    get_delta_amount_base_unsigned_256,
    get_delta_amount_quote_unsigned,
    get_delta_amount_quote_unsigned_256,
    get_initial_liquidity_from_delta_base,
    get_initial_liquidity_from_delta_quote,
    get_initialize_amounts,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from bonding_curve.errors import InvalidPriceRange, MathOverflow, TypeCastFailed
from bonding_curve.math.fixed_point import Rounding
from tests.helpers import LIQUIDITY, ONE, THRESHOLD


class TestDeltaAmounts:
    """Tests for amounts between two prices."""

    def test_quote_between_one_and_four(self):
        """The default segment absorbs exactly the threshold."""
        assert get_delta_amount_quote_unsigned(ONE, 2 * ONE, LIQUIDITY, Rounding.UP) == THRESHOLD
        assert get_delta_amount_quote_unsigned(ONE, 2 * ONE, LIQUIDITY, Rounding.DOWN) == THRESHOLD

    def test_base_between_one_and_four(self):
        """The default segment releases exactly half the threshold in base."""
        assert get_delta_amount_base_unsigned(
            ONE, 2 * ONE, LIQUIDITY, Rounding.DOWN
        ) == THRESHOLD // 2

    def test_rounding_direction(self):
        """UP and DOWN differ by one on an inexact range."""
        down = get_delta_amount_base_unsigned(ONE, ONE + 1, 3 << 64, Rounding.DOWN)
        up = get_delta_amount_base_unsigned(ONE, ONE + 1, 3 << 64, Rounding.UP)
        assert up == down + 1

    def test_empty_range_is_zero(self):
        """Equal prices move nothing."""
        assert get_delta_amount_quote_unsigned_256(ONE, ONE, LIQUIDITY, Rounding.UP) == 0
        assert get_delta_amount_base_unsigned_256(ONE, ONE, LIQUIDITY, Rounding.UP) == 0

    def test_inverted_range_raises(self):
        """Lower above upper is rejected."""
        with pytest.raises(InvalidPriceRange):
            get_delta_amount_base_unsigned_256(2 * ONE, ONE, LIQUIDITY, Rounding.UP)
        with pytest.raises(InvalidPriceRange):
            get_delta_amount_quote_unsigned_256(2 * ONE, ONE, LIQUIDITY, Rounding.UP)

    def test_zero_liquidity_raises(self):
        """Narrowed deltas refuse zero liquidity."""
        with pytest.raises(MathOverflow):
            get_delta_amount_base_unsigned(ONE, 2 * ONE, 0, Rounding.UP)
        with pytest.raises(MathOverflow):
            get_delta_amount_quote_unsigned(ONE, 2 * ONE, 0, Rounding.UP)

    def test_u64_narrowing(self):
        """Amounts past u64 fail to narrow but the wide variant still works."""
        huge_liquidity = 1 << 127
        wide = get_delta_amount_quote_unsigned_256(ONE, 1 << 100, huge_liquidity, Rounding.UP)
        assert wide > 2**64
        with pytest.raises(TypeCastFailed):
            get_delta_amount_quote_unsigned(ONE, 1 << 100, huge_liquidity, Rounding.UP)


class TestNextSqrtPrice:
    """Tests for price movement within a segment."""

    def test_quote_input_moves_up(self):
        """Spending T quote moves the price from 1.0 to 4.0."""
        assert get_next_sqrt_price_from_input(ONE, LIQUIDITY, THRESHOLD, False) == 2 * ONE

    def test_base_input_moves_down(self):
        """Selling T / 2 base moves the price from 4.0 back to 1.0."""
        assert get_next_sqrt_price_from_input(2 * ONE, LIQUIDITY, THRESHOLD // 2, True) == ONE

    def test_zero_base_input_keeps_price(self):
        """No input, no movement."""
        assert get_next_sqrt_price_from_input(ONE, LIQUIDITY, 0, True) == ONE

    def test_quote_output_moves_down(self):
        """Taking T quote out moves the price from 4.0 to 1.0."""
        assert get_next_sqrt_price_from_output(2 * ONE, LIQUIDITY, THRESHOLD, True) == ONE

    def test_base_output_moves_up(self):
        """Taking T / 2 base out moves the price from 1.0 to 4.0."""
        assert get_next_sqrt_price_from_output(ONE, LIQUIDITY, THRESHOLD // 2, False) == 2 * ONE

    def test_zero_price_or_liquidity_raises(self):
        """Zero price or zero liquidity is rejected."""
        with pytest.raises(MathOverflow):
            get_next_sqrt_price_from_input(0, LIQUIDITY, 1, False)
        with pytest.raises(MathOverflow):
            get_next_sqrt_price_from_output(ONE, 0, 1, True)

    def test_quote_output_beyond_segment_raises(self):
        """Taking more quote than the price can give underflows."""
        with pytest.raises(MathOverflow):
            get_next_sqrt_price_from_output(ONE, LIQUIDITY, 2 * THRESHOLD, True)


class TestLiquidity:
    """Tests for liquidity derived from amounts."""

    def test_liquidity_from_quote(self):
        """T quote over [1.0, 4.0] is the default liquidity."""
        assert get_initial_liquidity_from_delta_quote(THRESHOLD, ONE, 2 * ONE) == LIQUIDITY

    def test_liquidity_from_base(self):
        """T / 2 base over [1.0, 4.0] is the default liquidity."""
        assert get_initial_liquidity_from_delta_base(THRESHOLD // 2, 2 * ONE, ONE) == LIQUIDITY

    def test_initialize_amounts(self):
        """A position at price 4.0 spanning [1.0, 16.0] needs T / 4 base and T quote."""
        base_amount, quote_amount = get_initialize_amounts(ONE, 4 * ONE, 2 * ONE, LIQUIDITY)
        assert base_amount == THRESHOLD // 4
        assert quote_amount == THRESHOLD
