"""Fee arithmetic helpers.

Fee numerators are fractions of FEE_DENOMINATOR (1e9). Basis points are
fractions of MAX_BASIS_POINT (1e4).
"""

from __future__ import annotations

from bonding_curve.constants import (
    BASIS_POINT_MAX,
    FEE_DENOMINATOR,
    MAX_BASIS_POINT,
    ONE_Q64,
    RESOLUTION,
    U16_MAX,
)
from bonding_curve.errors import InvalidFee, InverseFeeMismatch, MathOverflow, TypeCastFailed
from bonding_curve.math.fixed_point import Rounding, pow_q64, safe_mul_div_cast_u64
from bonding_curve.safe_int import S


def to_numerator(bps: int, denominator: int) -> int:
    """Convert basis points to a numerator over denominator."""
    return (S(bps) * denominator // MAX_BASIS_POINT).to_u64()


def to_bps(numerator: int, denominator: int) -> int:
    """Convert a numerator over denominator to basis points (rounded down)."""
    return (S(numerator) * MAX_BASIS_POINT // denominator).to_u64()


def validate_fee_fraction(numerator: int, denominator: int) -> None:
    """Require numerator / denominator to be a proper fraction.

    Raises:
        InvalidFee: If denominator is zero or numerator >= denominator
    """
    if denominator == 0 or numerator >= denominator:
        raise InvalidFee(f"Invalid fee fraction {numerator}/{denominator}")


def get_excluded_fee_amount(trade_fee_numerator: int, included_fee_amount: int) -> tuple[int, int]:
    """Split an amount that still carries its fee.

    Returns:
        (excluded_fee_amount, trading_fee) with the fee rounded up
    """
    trading_fee = safe_mul_div_cast_u64(
        included_fee_amount, trade_fee_numerator, FEE_DENOMINATOR, Rounding.UP
    )
    excluded_fee_amount = (S(included_fee_amount) - trading_fee).to_u64()
    return excluded_fee_amount, trading_fee


def get_included_fee_amount(trade_fee_numerator: int, excluded_fee_amount: int) -> tuple[int, int]:
    """Gross up a post-fee amount.

    Returns:
        (included_fee_amount, fee_amount)

    Raises:
        InverseFeeMismatch: If removing the fee again does not give back
            excluded_fee_amount
    """
    denominator = S(FEE_DENOMINATOR) - trade_fee_numerator
    included_fee_amount = safe_mul_div_cast_u64(
        excluded_fee_amount, FEE_DENOMINATOR, denominator.value, Rounding.UP
    )

    inverse_amount, _ = get_excluded_fee_amount(trade_fee_numerator, included_fee_amount)
    if inverse_amount < excluded_fee_amount:
        raise InverseFeeMismatch(
            f"Inverse amount {inverse_amount} below excluded amount {excluded_fee_amount}"
        )

    fee_amount = (S(included_fee_amount) - excluded_fee_amount).to_u64()
    return included_fee_amount, fee_amount


def get_fee_in_period(cliff_fee_numerator: int, reduction_factor: int, period: int) -> int:
    """Cliff fee after `period` exponential reductions of reduction_factor bps.

    fee = cliff * (1 - reduction_factor / 10000) ^ period, evaluated in Q64.64.
    """
    if period == 0:
        return cliff_fee_numerator

    if period == 1:
        future_fee_bps = S(MAX_BASIS_POINT) - reduction_factor
        return (S(cliff_fee_numerator) * future_fee_bps // MAX_BASIS_POINT).to_u64()

    if period > U16_MAX:
        raise TypeCastFailed(f"Period does not fit u16: {period}")

    bps = (S(reduction_factor) << RESOLUTION) // BASIS_POINT_MAX
    base = S(ONE_Q64) - bps
    result = pow_q64(base.value, period)
    if result is None:
        raise MathOverflow(f"pow overflow: base={base}, period={period}")

    return ((S(result) * cliff_fee_numerator) >> RESOLUTION).to_u64()
