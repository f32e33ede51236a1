"""Q64.64 fixed-point helpers.

Square-root prices are unsigned integers with 64 fractional bits. Every
multiply-then-divide goes through a u256 intermediate and an explicit
rounding policy before narrowing back to u128 or u64.
"""

from __future__ import annotations

from bonding_curve.constants import (
    MAX_EXPONENTIAL,
    MAX_SQRT_ITERATIONS,
    ONE_Q64,
    RESOLUTION,
    U128_MAX,
)
from bonding_curve.errors import DivideByZero, MathOverflow
from bonding_curve.safe_int import Rounding, S

__all__ = [
    "Rounding",
    "mul_div_u256",
    "safe_mul_div_cast_u64",
    "safe_mul_div_cast_u128",
    "safe_shl_div_cast",
    "mul_shr",
    "sqrt_u256",
    "pow_q64",
]


def mul_div_u256(x: int, y: int, denominator: int, rounding: Rounding) -> int:
    """Compute x * y / denominator with a u256 intermediate.

    Raises:
        DivideByZero: If denominator is zero
        MathOverflow: If the product leaves u256
    """
    if denominator == 0:
        raise DivideByZero(f"mul_div denominator is zero: {x} * {y} / 0")
    return (S(x) * y).div_rounding(denominator, rounding).to_u256()


def safe_mul_div_cast_u64(x: int, y: int, denominator: int, rounding: Rounding) -> int:
    """mul_div_u256 narrowed to u64."""
    return S(mul_div_u256(x, y, denominator, rounding)).to_u64()


def safe_mul_div_cast_u128(x: int, y: int, denominator: int, rounding: Rounding) -> int:
    """mul_div_u256 narrowed to u128."""
    return S(mul_div_u256(x, y, denominator, rounding)).to_u128()


def safe_shl_div_cast(x: int, y: int, offset: int, rounding: Rounding) -> int:
    """Compute (x << offset) / y, narrowed to u128."""
    return S(mul_div_u256(x, 1 << offset, y, rounding)).to_u128()


def mul_shr(x: int, y: int, offset: int, rounding: Rounding) -> int:
    """Compute (x * y) >> offset, narrowed to u128.

    Rounding UP adds one when any of the shifted-out bits is set.
    """
    product = S(x) * y
    result = product >> offset
    if rounding is Rounding.UP and product % (1 << offset):
        result = result + 1
    return result.to_u128()


def sqrt_u256(value: int) -> int:
    """Floor integer square root of a u256 value.

    Newton iteration seeded from the bit length, so the estimate starts above
    the root and decreases monotonically.
    """
    if value < 2:
        return S(value).to_u256()

    estimate = 1 << ((S(value).to_u256().bit_length() + 1) // 2)
    for _ in range(MAX_SQRT_ITERATIONS):
        next_estimate = (estimate + value // estimate) >> 1
        if next_estimate >= estimate:
            return estimate
        estimate = next_estimate
    raise MathOverflow(f"sqrt did not converge for {value}")


def pow_q64(base: int, exp: int) -> int | None:
    """Raise a Q64.64 base to an integer power.

    Binary exponentiation over the bits of exp. A base of at least one is
    inverted first so every intermediate square stays below one and fits
    u128. Returns None when the exponent is out of range or the result
    underflows to zero.
    """
    if exp == 0:
        return ONE_Q64

    invert = exp < 0
    exp = abs(exp)
    if exp >= MAX_EXPONENTIAL:
        return None

    squared_base = base
    result = ONE_Q64

    if squared_base >= result:
        if squared_base == 0:
            return None
        squared_base = U128_MAX // squared_base
        invert = not invert

    bit = 1
    while bit < MAX_EXPONENTIAL:
        if exp & bit:
            result = (result * squared_base) >> RESOLUTION
        squared_base = (squared_base * squared_base) >> RESOLUTION
        bit <<= 1

    if result == 0:
        return None

    if invert:
        result = U128_MAX // result

    return result
