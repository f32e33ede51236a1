"""Mathematical utilities for the bonding curve.

This package provides the arithmetic primitives the curve and fee engines use:
- Q64.64 multiply/divide/shift helpers with explicit rounding
- Integer square root over u256
- Q64.64 power for exponential fee decay
- Fee numerator conversions and fee-inclusive/exclusive amount splits
"""

from bonding_curve.math.fee_math import (
    get_excluded_fee_amount,
    get_fee_in_period,
    get_included_fee_amount,
    to_bps,
    to_numerator,
    validate_fee_fraction,
)
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

__all__ = [
    "Rounding",
    "get_excluded_fee_amount",
    "get_fee_in_period",
    "get_included_fee_amount",
    "mul_div_u256",
    "mul_shr",
    "pow_q64",
    "safe_mul_div_cast_u64",
    "safe_mul_div_cast_u128",
    "safe_shl_div_cast",
    "sqrt_u256",
    "to_bps",
    "to_numerator",
    "validate_fee_fraction",
]
