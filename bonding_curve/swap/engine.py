"""Swap resolution against the piecewise-liquidity curve.

The curve is a list of points (sqrt_price_i, L_i): liquidity L_i is active
between sqrt_price_{i-1} and sqrt_price_i (the start price for i = 0).

Selling base walks the price down from the current price, buying base walks
it up. Each segment is consumed whole while the remaining budget covers it;
the first segment that cannot be covered is entered partially and the walk
stops. A budget exactly equal to a segment's capacity moves to the boundary
and continues with zero left.

Three resolution modes share the walks:
- exact input: fee numerator computed once from the input amount
- partial fill: buys stop at the migration price, the rest is returned
- exact output: walks backwards from the requested output
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bonding_curve.constants import MAX_SQRT_PRICE
from bonding_curve.curve import (
    LiquidityDistributionParameters,
    get_delta_amount_base_unsigned,
    get_delta_amount_base_unsigned_256,
    get_delta_amount_quote_unsigned,
    get_delta_amount_quote_unsigned_256,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from bonding_curve.enums import TradeDirection
from bonding_curve.errors import NotEnoughLiquidity
from bonding_curve.fees.mode import FeeMode
from bonding_curve.math.fixed_point import Rounding
from bonding_curve.safe_int import checked_add_u64, checked_sub
from bonding_curve.swap.types import SwapAmount, SwapResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bonding_curve.state.config import PoolConfig
    from bonding_curve.state.pool import VirtualPool


# =============================================================================
# Curve walks, exact input
# =============================================================================


def get_swap_amount_from_base_to_quote(
    sqrt_price: int,
    curve: Sequence[LiquidityDistributionParameters],
    amount_in: int,
) -> SwapAmount:
    """Sell amount_in base starting at sqrt_price.

    Below the first curve point the first segment's liquidity stays active.
    """
    total_output_amount = 0
    current_sqrt_price = sqrt_price
    amount_left = amount_in

    for i in range(len(curve) - 2, -1, -1):
        lower_sqrt_price = curve[i].sqrt_price
        if lower_sqrt_price >= current_sqrt_price:
            continue

        liquidity = curve[i + 1].liquidity
        max_amount_in = get_delta_amount_base_unsigned_256(
            lower_sqrt_price, current_sqrt_price, liquidity, Rounding.UP
        )
        if amount_left < max_amount_in:
            next_sqrt_price = get_next_sqrt_price_from_input(
                current_sqrt_price, liquidity, amount_left, True
            )
            output_amount = get_delta_amount_quote_unsigned(
                next_sqrt_price, current_sqrt_price, liquidity, Rounding.DOWN
            )
            total_output_amount = checked_add_u64(total_output_amount, output_amount)
            current_sqrt_price = next_sqrt_price
            amount_left = 0
            break

        output_amount = get_delta_amount_quote_unsigned(
            lower_sqrt_price, current_sqrt_price, liquidity, Rounding.DOWN
        )
        total_output_amount = checked_add_u64(total_output_amount, output_amount)
        current_sqrt_price = lower_sqrt_price
        amount_left = checked_sub(amount_left, max_amount_in)

    if amount_left != 0:
        liquidity = curve[0].liquidity
        next_sqrt_price = get_next_sqrt_price_from_input(
            current_sqrt_price, liquidity, amount_left, True
        )
        output_amount = get_delta_amount_quote_unsigned(
            next_sqrt_price, current_sqrt_price, liquidity, Rounding.DOWN
        )
        total_output_amount = checked_add_u64(total_output_amount, output_amount)
        current_sqrt_price = next_sqrt_price

    return SwapAmount(output_amount=total_output_amount, next_sqrt_price=current_sqrt_price)


def get_swap_amount_from_quote_to_base(
    sqrt_price: int,
    curve: Sequence[LiquidityDistributionParameters],
    amount_in: int,
    sqrt_price_limit: int = MAX_SQRT_PRICE,
) -> SwapAmount:
    """Buy base with amount_in quote, never moving the price past sqrt_price_limit.

    Input the walk cannot spend is returned as amount_left.
    """
    total_output_amount = 0
    current_sqrt_price = sqrt_price
    amount_left = amount_in

    for point in curve:
        if current_sqrt_price >= sqrt_price_limit:
            break
        reference_sqrt_price = min(sqrt_price_limit, point.sqrt_price)
        if reference_sqrt_price <= current_sqrt_price:
            continue

        max_amount_in = get_delta_amount_quote_unsigned_256(
            current_sqrt_price, reference_sqrt_price, point.liquidity, Rounding.UP
        )
        if amount_left < max_amount_in:
            next_sqrt_price = get_next_sqrt_price_from_input(
                current_sqrt_price, point.liquidity, amount_left, False
            )
            output_amount = get_delta_amount_base_unsigned(
                current_sqrt_price, next_sqrt_price, point.liquidity, Rounding.DOWN
            )
            total_output_amount = checked_add_u64(total_output_amount, output_amount)
            current_sqrt_price = next_sqrt_price
            amount_left = 0
            break

        output_amount = get_delta_amount_base_unsigned(
            current_sqrt_price, reference_sqrt_price, point.liquidity, Rounding.DOWN
        )
        total_output_amount = checked_add_u64(total_output_amount, output_amount)
        current_sqrt_price = reference_sqrt_price
        amount_left = checked_sub(amount_left, max_amount_in)

    return SwapAmount(
        output_amount=total_output_amount,
        next_sqrt_price=current_sqrt_price,
        amount_left=amount_left,
    )


# =============================================================================
# Curve walks, exact output
# =============================================================================


def get_in_amount_from_base_to_quote(
    sqrt_price: int,
    curve: Sequence[LiquidityDistributionParameters],
    sqrt_start_price: int,
    amount_out: int,
) -> SwapAmount:
    """Base needed to receive amount_out quote.

    SwapAmount.output_amount carries the required input here.

    Raises:
        NotEnoughLiquidity: If the price would have to drop below the start price
    """
    total_amount_in = 0
    current_sqrt_price = sqrt_price
    amount_left = amount_out

    for i in range(len(curve) - 2, -1, -1):
        lower_sqrt_price = curve[i].sqrt_price
        if lower_sqrt_price >= current_sqrt_price:
            continue

        liquidity = curve[i + 1].liquidity
        max_amount_out = get_delta_amount_quote_unsigned_256(
            lower_sqrt_price, current_sqrt_price, liquidity, Rounding.DOWN
        )
        if amount_left < max_amount_out:
            next_sqrt_price = get_next_sqrt_price_from_output(
                current_sqrt_price, liquidity, amount_left, True
            )
            amount_in = get_delta_amount_base_unsigned(
                next_sqrt_price, current_sqrt_price, liquidity, Rounding.UP
            )
            total_amount_in = checked_add_u64(total_amount_in, amount_in)
            current_sqrt_price = next_sqrt_price
            amount_left = 0
            break

        amount_in = get_delta_amount_base_unsigned(
            lower_sqrt_price, current_sqrt_price, liquidity, Rounding.UP
        )
        total_amount_in = checked_add_u64(total_amount_in, amount_in)
        current_sqrt_price = lower_sqrt_price
        amount_left = checked_sub(amount_left, max_amount_out)

    if amount_left != 0:
        liquidity = curve[0].liquidity
        next_sqrt_price = get_next_sqrt_price_from_output(
            current_sqrt_price, liquidity, amount_left, True
        )
        if next_sqrt_price < sqrt_start_price:
            raise NotEnoughLiquidity(
                f"Output {amount_out} would move the price below the start price"
            )
        amount_in = get_delta_amount_base_unsigned(
            next_sqrt_price, current_sqrt_price, liquidity, Rounding.UP
        )
        total_amount_in = checked_add_u64(total_amount_in, amount_in)
        current_sqrt_price = next_sqrt_price

    return SwapAmount(output_amount=total_amount_in, next_sqrt_price=current_sqrt_price)


def get_in_amount_from_quote_to_base(
    sqrt_price: int,
    curve: Sequence[LiquidityDistributionParameters],
    amount_out: int,
) -> SwapAmount:
    """Quote needed to receive amount_out base.

    SwapAmount.output_amount carries the required input here.

    Raises:
        NotEnoughLiquidity: If the curve holds less than amount_out base
    """
    total_amount_in = 0
    current_sqrt_price = sqrt_price
    amount_left = amount_out

    for point in curve:
        if point.sqrt_price <= current_sqrt_price:
            continue

        max_amount_out = get_delta_amount_base_unsigned_256(
            current_sqrt_price, point.sqrt_price, point.liquidity, Rounding.DOWN
        )
        if amount_left < max_amount_out:
            next_sqrt_price = get_next_sqrt_price_from_output(
                current_sqrt_price, point.liquidity, amount_left, False
            )
            amount_in = get_delta_amount_quote_unsigned(
                current_sqrt_price, next_sqrt_price, point.liquidity, Rounding.UP
            )
            total_amount_in = checked_add_u64(total_amount_in, amount_in)
            current_sqrt_price = next_sqrt_price
            amount_left = 0
            break

        amount_in = get_delta_amount_quote_unsigned(
            current_sqrt_price, point.sqrt_price, point.liquidity, Rounding.UP
        )
        total_amount_in = checked_add_u64(total_amount_in, amount_in)
        current_sqrt_price = point.sqrt_price
        amount_left = checked_sub(amount_left, max_amount_out)

    if amount_left != 0:
        raise NotEnoughLiquidity(f"Curve cannot deliver {amount_out} base")

    return SwapAmount(output_amount=total_amount_in, next_sqrt_price=current_sqrt_price)


# =============================================================================
# Resolution modes
# =============================================================================


def get_included_fee_input_amount(
    pool: VirtualPool,
    config: PoolConfig,
    excluded_fee_amount: int,
    trade_direction: TradeDirection,
    current_point: int,
) -> tuple[int, int]:
    """Gross up a curve input so an exact-input trade of the result charges the same fee.

    An amount-dependent base fee charges the rate of the included amount, which
    can sit above the rate recovered from excluded_fee_amount. The numerator
    is re-read from each grossed-up amount until the fee it charges leaves at
    least excluded_fee_amount.

    Returns:
        (included_fee_amount, fee_amount), fee_amount as exact input charges it
    """
    pool_fees = config.pool_fees
    trade_fee_numerator = pool_fees.get_total_fee_numerator_from_excluded_fee_amount(
        pool.volatility_tracker,
        current_point,
        pool.activation_point,
        excluded_fee_amount,
        trade_direction,
    )
    while True:
        included_fee_amount, _ = pool_fees.get_included_fee_amount(
            trade_fee_numerator, excluded_fee_amount
        )
        charged_numerator = pool_fees.get_total_fee_numerator_from_included_fee_amount(
            pool.volatility_tracker,
            current_point,
            pool.activation_point,
            included_fee_amount,
            trade_direction,
        )
        remaining_amount, fee_amount = pool_fees.get_excluded_fee_amount(
            charged_numerator, included_fee_amount
        )
        if remaining_amount >= excluded_fee_amount:
            return included_fee_amount, fee_amount
        # Only a higher charged numerator leaves less; it is capped at MAX_FEE_NUMERATOR
        trade_fee_numerator = charged_numerator


def get_swap_result_from_exact_input(
    pool: VirtualPool,
    config: PoolConfig,
    amount_in: int,
    fee_mode: FeeMode,
    trade_direction: TradeDirection,
    current_point: int,
) -> SwapResult:
    """Price a trade that spends exactly amount_in.

    Raises:
        NotEnoughLiquidity: If a buy cannot be filled up to MAX_SQRT_PRICE
    """
    pool_fees = config.pool_fees
    trading_fee = protocol_fee = referral_fee = 0

    trade_fee_numerator = pool_fees.get_total_fee_numerator_from_included_fee_amount(
        pool.volatility_tracker, current_point, pool.activation_point, amount_in, trade_direction
    )

    if fee_mode.fees_on_input:
        fee_result = pool_fees.get_fee_on_amount(
            trade_fee_numerator, amount_in, fee_mode.has_referral
        )
        actual_amount_in = fee_result.amount
        trading_fee, protocol_fee, referral_fee = fee_result[1:]
    else:
        actual_amount_in = amount_in

    if trade_direction == TradeDirection.BASE_TO_QUOTE:
        swap_amount = get_swap_amount_from_base_to_quote(
            pool.sqrt_price, config.curve, actual_amount_in
        )
    else:
        swap_amount = get_swap_amount_from_quote_to_base(
            pool.sqrt_price, config.curve, actual_amount_in
        )
        if swap_amount.amount_left != 0:
            raise NotEnoughLiquidity(
                f"{swap_amount.amount_left} quote left after walking the whole curve"
            )

    if fee_mode.fees_on_input:
        output_amount = swap_amount.output_amount
    else:
        fee_result = pool_fees.get_fee_on_amount(
            trade_fee_numerator, swap_amount.output_amount, fee_mode.has_referral
        )
        output_amount = fee_result.amount
        trading_fee, protocol_fee, referral_fee = fee_result[1:]

    return SwapResult(
        included_fee_input_amount=amount_in,
        excluded_fee_input_amount=actual_amount_in,
        amount_left=0,
        output_amount=output_amount,
        next_sqrt_price=swap_amount.next_sqrt_price,
        trading_fee=trading_fee,
        protocol_fee=protocol_fee,
        referral_fee=referral_fee,
    )


def get_swap_result_from_partial_input(
    pool: VirtualPool,
    config: PoolConfig,
    amount_in: int,
    fee_mode: FeeMode,
    trade_direction: TradeDirection,
    current_point: int,
) -> SwapResult:
    """Price a trade that spends at most amount_in.

    Buys stop at the migration price. When input is left over, the fee is
    recomputed on the consumed amount only.
    """
    pool_fees = config.pool_fees
    trading_fee = protocol_fee = referral_fee = 0

    trade_fee_numerator = pool_fees.get_total_fee_numerator_from_included_fee_amount(
        pool.volatility_tracker, current_point, pool.activation_point, amount_in, trade_direction
    )

    if fee_mode.fees_on_input:
        fee_result = pool_fees.get_fee_on_amount(
            trade_fee_numerator, amount_in, fee_mode.has_referral
        )
        actual_amount_in = fee_result.amount
        trading_fee, protocol_fee, referral_fee = fee_result[1:]
    else:
        actual_amount_in = amount_in

    if trade_direction == TradeDirection.BASE_TO_QUOTE:
        swap_amount = get_swap_amount_from_base_to_quote(
            pool.sqrt_price, config.curve, actual_amount_in
        )
    else:
        swap_amount = get_swap_amount_from_quote_to_base(
            pool.sqrt_price, config.curve, actual_amount_in, config.migration_sqrt_price
        )

    included_fee_input_amount = amount_in
    excluded_fee_input_amount = actual_amount_in
    if swap_amount.amount_left > 0:
        excluded_fee_input_amount = checked_sub(actual_amount_in, swap_amount.amount_left)
        if fee_mode.fees_on_input:
            included_fee_input_amount, fee = get_included_fee_input_amount(
                pool, config, excluded_fee_input_amount, trade_direction, current_point
            )
            excluded_fee_input_amount = checked_sub(included_fee_input_amount, fee)
            trading_fee, protocol_fee, referral_fee = pool_fees.split_fees(
                fee, fee_mode.has_referral
            )
        else:
            included_fee_input_amount = excluded_fee_input_amount

    if fee_mode.fees_on_input:
        output_amount = swap_amount.output_amount
    else:
        fee_result = pool_fees.get_fee_on_amount(
            trade_fee_numerator, swap_amount.output_amount, fee_mode.has_referral
        )
        output_amount = fee_result.amount
        trading_fee, protocol_fee, referral_fee = fee_result[1:]

    return SwapResult(
        included_fee_input_amount=included_fee_input_amount,
        excluded_fee_input_amount=excluded_fee_input_amount,
        amount_left=swap_amount.amount_left,
        output_amount=output_amount,
        next_sqrt_price=swap_amount.next_sqrt_price,
        trading_fee=trading_fee,
        protocol_fee=protocol_fee,
        referral_fee=referral_fee,
    )


def get_swap_result_from_exact_output(
    pool: VirtualPool,
    config: PoolConfig,
    amount_out: int,
    fee_mode: FeeMode,
    trade_direction: TradeDirection,
    current_point: int,
) -> SwapResult:
    """Price a trade that delivers exactly amount_out.

    Fees on output are grossed up first so the curve delivers amount_out
    plus the fee. Fees on input are grossed up from the curve's input.
    """
    pool_fees = config.pool_fees
    trading_fee = protocol_fee = referral_fee = 0

    if fee_mode.fees_on_input:
        curve_amount_out = amount_out
    else:
        trade_fee_numerator = pool_fees.get_total_fee_numerator_from_excluded_fee_amount(
            pool.volatility_tracker,
            current_point,
            pool.activation_point,
            amount_out,
            trade_direction,
        )
        curve_amount_out, _ = pool_fees.get_included_fee_amount(trade_fee_numerator, amount_out)
        fee_result = pool_fees.get_fee_on_amount(
            trade_fee_numerator, curve_amount_out, fee_mode.has_referral
        )
        trading_fee, protocol_fee, referral_fee = fee_result[1:]

    if trade_direction == TradeDirection.BASE_TO_QUOTE:
        swap_amount = get_in_amount_from_base_to_quote(
            pool.sqrt_price, config.curve, config.sqrt_start_price, curve_amount_out
        )
    else:
        swap_amount = get_in_amount_from_quote_to_base(
            pool.sqrt_price, config.curve, curve_amount_out
        )
    excluded_fee_input_amount = swap_amount.output_amount

    if fee_mode.fees_on_input:
        included_fee_input_amount, fee = get_included_fee_input_amount(
            pool, config, excluded_fee_input_amount, trade_direction, current_point
        )
        # Any excess over the curve's input stays in the reserve
        excluded_fee_input_amount = checked_sub(included_fee_input_amount, fee)
        trading_fee, protocol_fee, referral_fee = pool_fees.split_fees(
            fee, fee_mode.has_referral
        )
    else:
        included_fee_input_amount = excluded_fee_input_amount

    return SwapResult(
        included_fee_input_amount=included_fee_input_amount,
        excluded_fee_input_amount=excluded_fee_input_amount,
        amount_left=0,
        output_amount=amount_out,
        next_sqrt_price=swap_amount.next_sqrt_price,
        trading_fee=trading_fee,
        protocol_fee=protocol_fee,
        referral_fee=referral_fee,
    )
