"""Constant-liquidity segment math.

Within one segment the pool behaves like a concentrated constant-product
position with liquidity L between two sqrt prices:

    base  = L * (upper - lower) / (lower * upper)
    quote = L * (upper - lower) / 2^128

All prices are Q64.64. Rounding is always chosen by the caller so the pool
never gives value away to the trader.
"""

from __future__ import annotations

from dataclasses import dataclass

from bonding_curve.constants import RESOLUTION
from bonding_curve.errors import InvalidPriceRange, MathOverflow
from bonding_curve.math.fixed_point import Rounding, mul_div_u256
from bonding_curve.safe_int import S

__all__ = [
    "LiquidityDistributionParameters",
    "get_delta_amount_base_unsigned",
    "get_delta_amount_base_unsigned_256",
    "get_delta_amount_quote_unsigned",
    "get_delta_amount_quote_unsigned_256",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    "get_initial_liquidity_from_delta_quote",
    "get_initial_liquidity_from_delta_base",
    "get_initialize_amounts",
]


@dataclass(frozen=True)
class LiquidityDistributionParameters:
    """One curve point: liquidity active up to sqrt_price."""

    sqrt_price: int
    liquidity: int


def _check_range(lower_sqrt_price: int, upper_sqrt_price: int) -> None:
    if lower_sqrt_price > upper_sqrt_price:
        raise InvalidPriceRange(f"lower {lower_sqrt_price} above upper {upper_sqrt_price}")


# =============================================================================
# Delta amounts
# =============================================================================


def get_delta_amount_base_unsigned_256(
    lower_sqrt_price: int,
    upper_sqrt_price: int,
    liquidity: int,
    rounding: Rounding,
) -> int:
    """Base amount to move the price across [lower, upper], unnarrowed."""
    _check_range(lower_sqrt_price, upper_sqrt_price)
    numerator = S(upper_sqrt_price) - lower_sqrt_price
    denominator = S(lower_sqrt_price) * upper_sqrt_price
    return mul_div_u256(liquidity, numerator.value, denominator.value, rounding)


def get_delta_amount_base_unsigned(
    lower_sqrt_price: int,
    upper_sqrt_price: int,
    liquidity: int,
    rounding: Rounding,
) -> int:
    """Base amount to move the price across [lower, upper], narrowed to u64.

    Raises:
        MathOverflow: If liquidity is zero
        InvalidPriceRange: If lower is above upper
        TypeCastFailed: If the amount does not fit u64
    """
    if liquidity == 0:
        raise MathOverflow("Zero liquidity")
    result = get_delta_amount_base_unsigned_256(
        lower_sqrt_price, upper_sqrt_price, liquidity, rounding
    )
    return S(result).to_u64()


def get_delta_amount_quote_unsigned_256(
    lower_sqrt_price: int,
    upper_sqrt_price: int,
    liquidity: int,
    rounding: Rounding,
) -> int:
    """Quote amount to move the price across [lower, upper], unnarrowed."""
    _check_range(lower_sqrt_price, upper_sqrt_price)
    product = S(liquidity) * (S(upper_sqrt_price) - lower_sqrt_price)
    return product.div_rounding(1 << (RESOLUTION * 2), rounding).to_u256()


def get_delta_amount_quote_unsigned(
    lower_sqrt_price: int,
    upper_sqrt_price: int,
    liquidity: int,
    rounding: Rounding,
) -> int:
    """Quote amount to move the price across [lower, upper], narrowed to u64."""
    if liquidity == 0:
        raise MathOverflow("Zero liquidity")
    result = get_delta_amount_quote_unsigned_256(
        lower_sqrt_price, upper_sqrt_price, liquidity, rounding
    )
    return S(result).to_u64()


# =============================================================================
# Next price
# =============================================================================


def _next_sqrt_price_from_base_input(sqrt_price: int, liquidity: int, amount: int) -> int:
    # sqrt_price' = L * sqrt_price / (L + amount * sqrt_price), rounded up
    if amount == 0:
        return sqrt_price
    denominator = S(liquidity) + S(amount) * sqrt_price
    return S(mul_div_u256(liquidity, sqrt_price, denominator.value, Rounding.UP)).to_u128()


def _next_sqrt_price_from_quote_input(sqrt_price: int, liquidity: int, amount: int) -> int:
    # sqrt_price' = sqrt_price + (amount << 128) / L, rounded down
    quotient = (S(amount) << (RESOLUTION * 2)) // liquidity
    return (S(sqrt_price) + quotient).to_u128()


def _next_sqrt_price_from_quote_output(sqrt_price: int, liquidity: int, amount: int) -> int:
    # sqrt_price' = sqrt_price - ceil((amount << 128) / L)
    quotient = (S(amount) << (RESOLUTION * 2)).ceiling_div(liquidity)
    return (S(sqrt_price) - quotient).to_u128()


def _next_sqrt_price_from_base_output(sqrt_price: int, liquidity: int, amount: int) -> int:
    # sqrt_price' = L * sqrt_price / (L - amount * sqrt_price), rounded down
    if amount == 0:
        return sqrt_price
    denominator = S(liquidity) - S(amount) * sqrt_price
    return S(mul_div_u256(liquidity, sqrt_price, denominator.value, Rounding.DOWN)).to_u128()


def get_next_sqrt_price_from_input(
    sqrt_price: int,
    liquidity: int,
    amount_in: int,
    base_for_quote: bool,
) -> int:
    """Price after spending amount_in within one segment.

    Selling base moves the price down; buying base with quote moves it up.
    Both round so the trader cannot overshoot the target price.
    """
    if sqrt_price == 0 or liquidity == 0:
        raise MathOverflow("Zero price or liquidity")
    if base_for_quote:
        return _next_sqrt_price_from_base_input(sqrt_price, liquidity, amount_in)
    return _next_sqrt_price_from_quote_input(sqrt_price, liquidity, amount_in)


def get_next_sqrt_price_from_output(
    sqrt_price: int,
    liquidity: int,
    amount_out: int,
    is_quote: bool,
) -> int:
    """Price after receiving amount_out within one segment."""
    if sqrt_price == 0 or liquidity == 0:
        raise MathOverflow("Zero price or liquidity")
    if is_quote:
        return _next_sqrt_price_from_quote_output(sqrt_price, liquidity, amount_out)
    return _next_sqrt_price_from_base_output(sqrt_price, liquidity, amount_out)


# =============================================================================
# Liquidity from amounts
# =============================================================================


def get_initial_liquidity_from_delta_quote(
    quote_amount: int,
    sqrt_min_price: int,
    sqrt_price: int,
) -> int:
    """L = (quote << 128) / (sqrt_price - sqrt_min_price)."""
    price_delta = S(sqrt_price) - sqrt_min_price
    return ((S(quote_amount) << (RESOLUTION * 2)) // price_delta).to_u128()


def get_initial_liquidity_from_delta_base(
    base_amount: int,
    sqrt_max_price: int,
    sqrt_price: int,
) -> int:
    """L = base * sqrt_price * sqrt_max_price / (sqrt_max_price - sqrt_price)."""
    price_delta = S(sqrt_max_price) - sqrt_price
    product = S(base_amount) * sqrt_price * sqrt_max_price
    return (product // price_delta).to_u128()


def get_initialize_amounts(
    sqrt_min_price: int,
    sqrt_max_price: int,
    sqrt_price: int,
    liquidity: int,
) -> tuple[int, int]:
    """Base and quote needed to seed a position at sqrt_price (rounded up)."""
    base_amount = get_delta_amount_base_unsigned(sqrt_price, sqrt_max_price, liquidity, Rounding.UP)
    quote_amount = get_delta_amount_quote_unsigned(
        sqrt_min_price, sqrt_price, liquidity, Rounding.UP
    )
    return base_amount, quote_amount
