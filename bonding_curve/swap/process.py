"""Trade dispatch: validate, price, apply and complete the curve."""

from __future__ import annotations

import copy
from dataclasses import fields
from typing import TYPE_CHECKING

import structlog

from bonding_curve.enums import MigrationProgress, SwapMode, TradeDirection
from bonding_curve.errors import (
    AmountIsZero,
    ExceededSlippage,
    InsufficientLiquidityForMigration,
    PoolIsCompleted,
    SwapAmountIsOverAThreshold,
)
from bonding_curve.fees.mode import FeeMode
from bonding_curve.safe_int import S

if TYPE_CHECKING:
    from bonding_curve.state.config import PoolConfig
    from bonding_curve.state.pool import VirtualPool
    from bonding_curve.swap.types import SwapParameters, SwapResult

logger = structlog.get_logger()


def process_swap(
    pool: VirtualPool,
    config: PoolConfig,
    params: SwapParameters,
    trade_direction: TradeDirection,
    has_referral: bool,
    current_point: int,
    current_timestamp: int,
) -> SwapResult:
    """Execute one trade against pool, mutating it in place.

    The trade is priced, checked and applied on a copy of the pool; pool is
    only written once every check has passed, so a raised error leaves it
    untouched.

    Args:
        pool: Pool state, updated only on success
        config: The pool's configuration
        params: Amounts and swap mode
        trade_direction: Which token the trader sells
        has_referral: Whether a referrer takes part of the protocol fee
        current_point: Slot or timestamp used for fee schedules
        current_timestamp: Wall clock used for volatility tracking and completion

    Returns:
        The priced trade as applied to the pool

    Raises:
        AmountIsZero: If amount_0 is zero
        PoolIsCompleted: If the curve already reached the migration threshold
        ExceededSlippage: If the result is worse than amount_1 allows
        SwapAmountIsOverAThreshold: If a buy overshoots the threshold too far
        InsufficientLiquidityForMigration: If a completing trade leaves too little base
    """
    swap_mode = SwapMode.parse(params.swap_mode)

    if params.amount_0 == 0:
        raise AmountIsZero("Swap amount is zero")

    if pool.is_curve_complete(config.migration_quote_threshold):
        raise PoolIsCompleted(
            f"quote_reserve {pool.quote_reserve} reached threshold "
            f"{config.migration_quote_threshold}"
        )

    staged = copy.deepcopy(pool)
    staged.update_pre_swap(config, current_timestamp)

    fee_mode = FeeMode.get_fee_mode(config.collect_fee_mode, trade_direction, has_referral)

    if swap_mode is SwapMode.EXACT_OUT:
        swap_result = staged.get_swap_result_from_exact_output(
            config, params.amount_0, fee_mode, trade_direction, current_point
        )
        if swap_result.included_fee_input_amount > params.amount_1:
            raise ExceededSlippage(
                f"Input {swap_result.included_fee_input_amount} above maximum {params.amount_1}"
            )
    else:
        if swap_mode is SwapMode.PARTIAL_FILL:
            swap_result = staged.get_swap_result_from_partial_input(
                config, params.amount_0, fee_mode, trade_direction, current_point
            )
        else:
            swap_result = staged.get_swap_result_from_exact_input(
                config, params.amount_0, fee_mode, trade_direction, current_point
            )
        if swap_result.output_amount < params.amount_1:
            raise ExceededSlippage(
                f"Output {swap_result.output_amount} below minimum {params.amount_1}"
            )

    if trade_direction == TradeDirection.QUOTE_TO_BASE:
        _check_swallow(staged, config, swap_result)

    staged.apply_swap_result(config, swap_result, fee_mode, trade_direction, current_timestamp)

    logger.debug(
        "swap_applied",
        swap_mode=swap_mode.name,
        trade_direction=TradeDirection(trade_direction).name,
        amount_in=swap_result.included_fee_input_amount,
        amount_out=swap_result.output_amount,
        amount_left=swap_result.amount_left,
        next_sqrt_price=swap_result.next_sqrt_price,
        total_fee=swap_result.total_fee,
    )

    if staged.is_curve_complete(config.migration_quote_threshold):
        _complete_curve(staged, config, current_timestamp)

    _commit(pool, staged)
    return swap_result


def _commit(pool: VirtualPool, staged: VirtualPool) -> None:
    for pool_field in fields(pool):
        setattr(pool, pool_field.name, getattr(staged, pool_field.name))


def _check_swallow(pool: VirtualPool, config: PoolConfig, swap_result: SwapResult) -> None:
    """A buy may push the quote reserve past the threshold by at most the swallow amount."""
    quote_reserve_after = S(pool.quote_reserve) + swap_result.excluded_fee_input_amount
    if quote_reserve_after <= config.migration_quote_threshold:
        return

    overshoot = (quote_reserve_after - config.migration_quote_threshold).value
    max_swallow_amount = config.get_max_swallow_quote_amount()
    if overshoot > max_swallow_amount:
        raise SwapAmountIsOverAThreshold(
            f"Quote reserve would exceed the threshold by {overshoot}, limit {max_swallow_amount}"
        )


def _complete_curve(pool: VirtualPool, config: PoolConfig, current_timestamp: int) -> None:
    """Check the base left covers migration and move the pool past the curve."""
    base_fee = pool.get_protocol_and_trading_base_fee()
    base_vault_balance = S(pool.base_reserve) + base_fee
    required_base_balance = (
        S(config.migration_base_threshold) + base_fee + config.locked_vesting.get_total_amount()
    )
    if base_vault_balance < required_base_balance:
        logger.warning(
            "insufficient_liquidity_for_migration",
            base_vault_balance=base_vault_balance.value,
            required_base_balance=required_base_balance.value,
        )
        raise InsufficientLiquidityForMigration(
            f"Base vault {base_vault_balance} below required {required_base_balance}"
        )

    pool.finish_curve_timestamp = current_timestamp
    if config.locked_vesting.has_vesting():
        pool.migration_progress = MigrationProgress.POST_BONDING_CURVE
    else:
        pool.migration_progress = MigrationProgress.LOCKED_VESTING

    logger.info(
        "curve_completed",
        quote_reserve=pool.quote_reserve,
        base_reserve=pool.base_reserve,
        threshold=config.migration_quote_threshold,
        migration_progress=pool.migration_progress.name,
    )
