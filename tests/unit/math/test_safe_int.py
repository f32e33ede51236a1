"""Tests for SafeInt safe arithmetic wrapper."""

import pytest

from bonding_curve.constants import U64_MAX, U128_MAX, U256_MAX
from bonding_curve.errors import ArithmeticFault, DivideByZero, MathOverflow, TypeCastFailed
from bonding_curve.safe_int import Rounding, S, SafeInt, checked_add_u64, checked_sub


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        s = SafeInt(42)
        assert s.value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        s1 = SafeInt(42)
        s2 = SafeInt(s1)
        assert s2.value == 42

    def test_from_negative_raises(self):
        """Negative values are rejected at construction."""
        with pytest.raises(MathOverflow):
            SafeInt(-10)

    def test_u256_max_allowed(self):
        """The largest u256 value is a valid intermediate."""
        assert SafeInt(U256_MAX).value == U256_MAX

    def test_beyond_u256_raises(self):
        """Values past u256 are rejected."""
        with pytest.raises(MathOverflow):
            SafeInt(U256_MAX + 1)

    def test_from_invalid_type_raises(self):
        """SafeInt rejects invalid types."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)  # type: ignore

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt
        assert isinstance(S(42), SafeInt)

    def test_zero_constructor(self):
        """SafeInt.zero() creates zero value."""
        assert SafeInt.zero().value == 0


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add(self):
        """Addition works correctly."""
        assert (S(10) + S(5)).value == 15
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15

    def test_add_overflow_raises(self):
        """Sums past u256 raise."""
        with pytest.raises(MathOverflow):
            S(U256_MAX) + 1

    def test_sub_positive_result(self):
        """Subtraction with positive result works."""
        assert (S(10) - S(3)).value == 7
        assert (S(10) - 3).value == 7
        assert (10 - S(3)).value == 7

    def test_sub_zero_result(self):
        """Subtraction resulting in zero works."""
        assert (S(5) - S(5)).value == 0

    def test_sub_underflow_raises(self):
        """Subtraction underflow raises MathOverflow."""
        with pytest.raises(MathOverflow) as exc_info:
            S(5) - S(10)
        assert "Underflow" in str(exc_info.value)
        assert "5 - 10" in str(exc_info.value)

    def test_rsub_underflow_raises(self):
        """Reverse subtraction underflow raises MathOverflow."""
        with pytest.raises(MathOverflow):
            5 - S(10)

    def test_mul(self):
        """Multiplication works correctly."""
        assert (S(6) * S(7)).value == 42
        assert (S(6) * 7).value == 42
        assert (6 * S(7)).value == 42

    def test_mul_u128_square_fits(self):
        """A product of two u128 values fits the u256 intermediate."""
        assert (S(U128_MAX) * U128_MAX).value == U128_MAX * U128_MAX

    def test_mul_overflow_raises(self):
        """Products past u256 raise."""
        with pytest.raises(MathOverflow):
            S(1 << 200) * (1 << 100)

    def test_floordiv(self):
        """Floor division rounds down."""
        assert (S(10) // 3).value == 3

    def test_floordiv_by_zero_raises(self):
        """Division by zero raises DivideByZero."""
        with pytest.raises(DivideByZero):
            S(10) // 0

    def test_mod_by_zero_raises(self):
        """Modulo by zero raises DivideByZero."""
        with pytest.raises(DivideByZero):
            S(10) % 0

    def test_lshift_overflow_raises(self):
        """Left shifts past u256 raise."""
        assert (S(1) << 255).value == 1 << 255
        with pytest.raises(MathOverflow):
            S(1) << 256

    def test_rshift(self):
        """Right shift rounds down."""
        assert (S(7) >> 1).value == 3


class TestSafeIntRounding:
    """Tests for rounding helpers."""

    def test_ceiling_div(self):
        """ceiling_div rounds up only when there is a remainder."""
        assert S(10).ceiling_div(3).value == 4
        assert S(9).ceiling_div(3).value == 3
        assert S(0).ceiling_div(3).value == 0

    def test_ceiling_div_by_zero_raises(self):
        """ceiling_div by zero raises DivideByZero."""
        with pytest.raises(DivideByZero):
            S(1).ceiling_div(0)

    def test_div_rounding(self):
        """div_rounding follows the requested policy."""
        assert S(10).div_rounding(4, Rounding.UP).value == 3
        assert S(10).div_rounding(4, Rounding.DOWN).value == 2


class TestSafeIntNarrowing:
    """Tests for explicit narrowing."""

    def test_to_u64_at_max(self):
        """to_u64 accepts the u64 maximum."""
        assert S(U64_MAX).to_u64() == U64_MAX

    def test_to_u64_overflow_raises(self):
        """to_u64 rejects values past u64."""
        with pytest.raises(TypeCastFailed):
            S(U64_MAX + 1).to_u64()

    def test_to_u128_overflow_raises(self):
        """to_u128 rejects values past u128."""
        assert S(U128_MAX).to_u128() == U128_MAX
        with pytest.raises(TypeCastFailed):
            S(U128_MAX + 1).to_u128()

    def test_faults_are_arithmetic_errors(self):
        """Every arithmetic failure is also an ArithmeticError."""
        with pytest.raises(ArithmeticError):
            S(1) - 2
        assert issubclass(TypeCastFailed, ArithmeticFault)


class TestSafeIntComparison:
    """Tests for comparisons and conversions."""

    def test_compare_with_int(self):
        """SafeInt compares against plain ints."""
        assert S(5) == 5
        assert S(5) != 6
        assert S(5) < 6
        assert S(5) <= 5
        assert S(6) > 5
        assert S(6) >= 6

    def test_min_max(self):
        """min and max return SafeInt."""
        assert S(3).min(7).value == 3
        assert S(3).max(7).value == 7

    def test_bool_and_index(self):
        """SafeInt is falsy at zero and usable as an index."""
        assert not S(0)
        assert S(1)
        assert [10, 20, 30][S(2)] == 30

    def test_hash_matches_int(self):
        """Equal SafeInts hash the same as their ints."""
        assert hash(S(42)) == hash(42)


class TestCheckedHelpers:
    """Tests for checked_add_u64 and checked_sub."""

    def test_checked_add_u64(self):
        """checked_add_u64 adds within u64."""
        assert checked_add_u64(U64_MAX - 1, 1) == U64_MAX

    def test_checked_add_u64_overflow(self):
        """checked_add_u64 raises past u64."""
        with pytest.raises(MathOverflow):
            checked_add_u64(U64_MAX, 1)

    def test_checked_sub_underflow(self):
        """checked_sub raises below zero."""
        assert checked_sub(5, 5) == 0
        with pytest.raises(MathOverflow):
            checked_sub(4, 5)
