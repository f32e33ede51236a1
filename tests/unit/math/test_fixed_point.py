"""Tests for Q64.64 fixed-point helpers."""

import math
import random

import pytest

from bonding_curve.constants import MAX_EXPONENTIAL, ONE_Q64, U64_MAX, U128_MAX, U256_MAX
from bonding_curve.errors import DivideByZero, TypeCastFailed
from bonding_curve.math.fixed_point import (
    Rounding,
    mul_div_u256,
    mul_shr,
    pow_q64,
    safe_mul_div_cast_u64,
    safe_mul_div_cast_u128,
    safe_shl_div_cast,
    sqrt_u256,
)


class TestMulDiv:
    """Tests for multiply-then-divide helpers."""

    def test_rounding_up_and_down(self):
        """Rounding policy only matters when there is a remainder."""
        assert mul_div_u256(10, 10, 3, Rounding.DOWN) == 33
        assert mul_div_u256(10, 10, 3, Rounding.UP) == 34
        assert mul_div_u256(10, 9, 3, Rounding.UP) == 30

    def test_zero_denominator_raises(self):
        """A zero denominator raises DivideByZero."""
        with pytest.raises(DivideByZero):
            mul_div_u256(1, 1, 0, Rounding.DOWN)

    def test_wide_intermediate(self):
        """The product may exceed u128 as long as the quotient fits."""
        assert safe_mul_div_cast_u128(U128_MAX, U128_MAX, U128_MAX, Rounding.DOWN) == U128_MAX

    def test_u64_cast_overflow(self):
        """Narrowing to u64 fails when the quotient is too large."""
        assert safe_mul_div_cast_u64(U64_MAX, 1, 1, Rounding.DOWN) == U64_MAX
        with pytest.raises(TypeCastFailed):
            safe_mul_div_cast_u64(U64_MAX, 2, 1, Rounding.DOWN)

    def test_shl_div(self):
        """safe_shl_div_cast computes (x << offset) / y."""
        assert safe_shl_div_cast(1, 2, 64, Rounding.DOWN) == 1 << 63
        assert safe_shl_div_cast(1, 3, 0, Rounding.UP) == 1


class TestMulShr:
    """Tests for mul_shr rounding."""

    def test_round_up_on_shifted_bits(self):
        """UP adds one only when shifted-out bits are set."""
        assert mul_shr(3, 1, 1, Rounding.DOWN) == 1
        assert mul_shr(3, 1, 1, Rounding.UP) == 2
        assert mul_shr(4, 1, 1, Rounding.UP) == 2

    def test_q64_identity(self):
        """Multiplying by one in Q64.64 is exact."""
        assert mul_shr(12345, ONE_Q64, 64, Rounding.UP) == 12345


class TestSqrt:
    """Tests for the integer square root."""

    def test_small_values(self):
        """Small inputs round down."""
        assert [sqrt_u256(v) for v in (0, 1, 2, 3, 4)] == [0, 1, 1, 1, 2]

    def test_matches_isqrt_for_random_u128(self):
        """Agrees with math.isqrt across random u128 values."""
        rng = random.Random(7)
        for _ in range(1000):
            value = rng.randrange(0, U128_MAX)
            assert sqrt_u256(value) == math.isqrt(value)

    def test_u256_products_are_bracketed(self):
        """root^2 <= value < (root + 1)^2 for u256 products."""
        rng = random.Random(11)
        for _ in range(200):
            value = rng.randrange(0, U128_MAX) * rng.randrange(0, U128_MAX)
            root = sqrt_u256(value)
            assert root * root <= value < (root + 1) * (root + 1)

    def test_u256_max(self):
        """The largest u256 value converges."""
        assert sqrt_u256(U256_MAX) == math.isqrt(U256_MAX)


class TestPowQ64:
    """Tests for Q64.64 exponentiation."""

    def test_zero_exponent_is_one(self):
        """Anything to the zeroth power is one."""
        assert pow_q64(12345, 0) == ONE_Q64

    def test_half_squared(self):
        """0.5^2 is exactly 0.25."""
        assert pow_q64(ONE_Q64 // 2, 2) == ONE_Q64 // 4

    def test_exponent_out_of_range(self):
        """Exponents at or above MAX_EXPONENTIAL are rejected."""
        assert pow_q64(ONE_Q64 // 2, MAX_EXPONENTIAL) is None

    def test_underflow_returns_none(self):
        """A result that rounds to zero is reported as None."""
        assert pow_q64(1, 2) is None

    def test_close_to_float(self):
        """0.99^10 agrees with floating point to high precision."""
        base = ONE_Q64 - (100 << 64) // 10_000
        result = pow_q64(base, 10)
        assert result is not None
        assert abs(result / ONE_Q64 - 0.99**10) < 1e-12
