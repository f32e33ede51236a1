"""Migration threshold solver and base supply derivation.

At config creation the curve is walked once to find where the quote reserve
reaches the migration threshold. From that price follow:
- the base sold on the curve before migration
- the base deposited with the threshold quote into the destination pool
- the total supply a launch needs, with and without the swap buffer
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from bonding_curve.constants import (
    MAX_SQRT_PRICE,
    MIN_SQRT_PRICE,
    RESOLUTION,
    SWAP_BUFFER_PERCENTAGE,
    U64_MAX,
)
from bonding_curve.curve import (
    LiquidityDistributionParameters,
    get_delta_amount_base_unsigned_256,
    get_delta_amount_quote_unsigned_256,
    get_initial_liquidity_from_delta_quote,
    get_next_sqrt_price_from_input,
)
from bonding_curve.enums import MigrationOption
from bonding_curve.errors import MathOverflow, NotEnoughLiquidity
from bonding_curve.math.fixed_point import Rounding, safe_mul_div_cast_u64
from bonding_curve.safe_int import S, checked_sub

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bonding_curve.models.params import ConfigParameters
    from bonding_curve.state.config import LockedVestingParams, PoolConfig

logger = structlog.get_logger()


# =============================================================================
# Curve walks
# =============================================================================


def get_migration_threshold_price(
    migration_threshold: int,
    sqrt_start_price: int,
    curve: Sequence[LiquidityDistributionParameters],
) -> int:
    """Sqrt price at which the curve has absorbed migration_threshold quote.

    Raises:
        NotEnoughLiquidity: If the whole curve absorbs less than the threshold
    """
    next_sqrt_price = sqrt_start_price

    total_amount = get_delta_amount_quote_unsigned_256(
        next_sqrt_price, curve[0].sqrt_price, curve[0].liquidity, Rounding.UP
    )
    if total_amount > migration_threshold:
        return get_next_sqrt_price_from_input(
            next_sqrt_price, curve[0].liquidity, migration_threshold, False
        )

    amount_left = checked_sub(migration_threshold, total_amount)
    next_sqrt_price = curve[0].sqrt_price
    for point in curve[1:]:
        max_amount = get_delta_amount_quote_unsigned_256(
            next_sqrt_price, point.sqrt_price, point.liquidity, Rounding.UP
        )
        if max_amount > amount_left:
            next_sqrt_price = get_next_sqrt_price_from_input(
                next_sqrt_price, point.liquidity, amount_left, False
            )
            amount_left = 0
            break
        amount_left = checked_sub(amount_left, max_amount)
        next_sqrt_price = point.sqrt_price

    if amount_left != 0:
        raise NotEnoughLiquidity(
            f"Curve absorbs {migration_threshold - amount_left} of {migration_threshold} quote"
        )
    return next_sqrt_price


def get_base_token_for_swap(
    sqrt_start_price: int,
    sqrt_migration_price: int,
    curve: Sequence[LiquidityDistributionParameters],
) -> int:
    """Base sold on the curve between the start and migration prices (rounded up)."""
    total_amount = S(0)
    for i, point in enumerate(curve):
        lower_sqrt_price = sqrt_start_price if i == 0 else curve[i - 1].sqrt_price
        if point.sqrt_price > sqrt_migration_price:
            total_amount += get_delta_amount_base_unsigned_256(
                lower_sqrt_price, sqrt_migration_price, point.liquidity, Rounding.UP
            )
            break
        total_amount += get_delta_amount_base_unsigned_256(
            lower_sqrt_price, point.sqrt_price, point.liquidity, Rounding.UP
        )
    return total_amount.value


def get_migration_base_token(
    migration_threshold: int,
    sqrt_migration_price: int,
    migration_option: MigrationOption,
) -> int:
    """Base paired with the threshold quote in the destination pool.

    Constant product: base = quote / price.
    Concentrated: liquidity covering [MIN, migration] with the quote, and the
    base that liquidity holds over [migration, MAX].

    Raises:
        MathOverflow: If the base amount does not fit u64
    """
    if MigrationOption.parse(migration_option) is MigrationOption.METEORA_DAMM:
        price = S(sqrt_migration_price) * sqrt_migration_price
        quote = S(migration_threshold) << (RESOLUTION * 2)
        base_amount = (quote // price).value
    else:
        liquidity = get_initial_liquidity_from_delta_quote(
            migration_threshold, MIN_SQRT_PRICE, sqrt_migration_price
        )
        base_amount = get_delta_amount_base_unsigned_256(
            sqrt_migration_price, MAX_SQRT_PRICE, liquidity, Rounding.UP
        )

    if base_amount > U64_MAX:
        raise MathOverflow(f"Migration base amount does not fit u64: {base_amount}")
    return base_amount


# =============================================================================
# Supply
# =============================================================================


def get_swap_amount_with_buffer(
    swap_base_amount: int,
    sqrt_start_price: int,
    curve: Sequence[LiquidityDistributionParameters],
) -> int:
    """swap_base_amount plus SWAP_BUFFER_PERCENTAGE, capped at the base on the whole curve."""
    swap_amount_buffer = S(swap_base_amount) * SWAP_BUFFER_PERCENTAGE // 100 + swap_base_amount
    max_base_amount_on_curve = get_base_token_for_swap(sqrt_start_price, MAX_SQRT_PRICE, curve)
    amount = min(swap_amount_buffer.value, max_base_amount_on_curve)
    if amount > U64_MAX:
        raise MathOverflow(f"Swap amount with buffer does not fit u64: {amount}")
    return amount


def get_total_token_supply(
    swap_base_amount: int,
    migration_base_threshold: int,
    locked_vesting_params: LockedVestingParams,
) -> int:
    total_amount = (
        S(swap_base_amount) + migration_base_threshold + locked_vesting_params.get_total_amount()
    )
    if total_amount > U64_MAX:
        raise MathOverflow(f"Total token supply does not fit u64: {total_amount}")
    return total_amount.value


def get_migration_quote_amount(
    migration_quote_threshold: int, migration_fee_percentage: int
) -> tuple[int, int]:
    """Split the threshold into (quote_amount, fee) for migration.

    The quote deposited is rounded up so the fee never exceeds its share.
    """
    quote_amount = safe_mul_div_cast_u64(
        migration_quote_threshold, (S(100) - migration_fee_percentage).value, 100, Rounding.UP
    )
    fee = checked_sub(migration_quote_threshold, quote_amount)
    return quote_amount, fee


# =============================================================================
# Config derivation
# =============================================================================


def build_pool_config(params: ConfigParameters) -> PoolConfig:
    """Validate config parameters and derive the migration values.

    Raises:
        ConfigError: If any parameter is invalid
        InvalidTokenSupply: If a fixed supply cannot cover swap, migration and vesting
        NotEnoughLiquidity: If the curve cannot absorb the migration threshold
    """
    from bonding_curve.state.config import PoolConfig

    params.validate_config()

    curve = params.to_curve()
    locked_vesting = params.locked_vesting.to_locked_vesting_params()
    migration_option = MigrationOption.parse(params.migration_option)

    sqrt_migration_price = get_migration_threshold_price(
        params.migration_quote_threshold, params.sqrt_start_price, curve
    )
    swap_base_amount = S(
        get_base_token_for_swap(params.sqrt_start_price, sqrt_migration_price, curve)
    ).to_u64()
    swap_base_amount_buffer = get_swap_amount_with_buffer(
        swap_base_amount, params.sqrt_start_price, curve
    )
    migration_base_amount = get_migration_base_token(
        params.migration_quote_threshold, sqrt_migration_price, migration_option
    )

    minimum_base_supply_with_buffer = get_total_token_supply(
        swap_base_amount_buffer, migration_base_amount, locked_vesting
    )
    minimum_base_supply_without_buffer = get_total_token_supply(
        swap_base_amount, migration_base_amount, locked_vesting
    )

    fixed_token_supply = params.token_supply is not None
    pre_migration_token_supply = post_migration_token_supply = 0
    if params.token_supply is not None:
        pre_migration_token_supply = params.token_supply.pre_migration_token_supply
        post_migration_token_supply = params.token_supply.post_migration_token_supply
        params.token_supply.validate_against(
            minimum_base_supply_without_buffer, minimum_base_supply_with_buffer
        )

    config = PoolConfig(
        pool_fees=params.pool_fees.to_pool_fees_config(),
        collect_fee_mode=params.collect_fee_mode,
        migration_option=params.migration_option,
        activation_type=params.activation_type,
        token_type=params.token_type,
        token_decimal=params.token_decimal,
        partner_lp_percentage=params.partner_lp_percentage,
        partner_locked_lp_percentage=params.partner_locked_lp_percentage,
        creator_lp_percentage=params.creator_lp_percentage,
        creator_locked_lp_percentage=params.creator_locked_lp_percentage,
        creator_trading_fee_percentage=params.creator_trading_fee_percentage,
        migration_fee_option=params.migration_fee_option,
        migration_fee_percentage=params.migration_fee.fee_percentage,
        creator_migration_fee_percentage=params.migration_fee.creator_fee_percentage,
        swap_base_amount=swap_base_amount,
        migration_quote_threshold=params.migration_quote_threshold,
        migration_base_threshold=migration_base_amount,
        migration_sqrt_price=sqrt_migration_price,
        sqrt_start_price=params.sqrt_start_price,
        locked_vesting=locked_vesting,
        fixed_token_supply=fixed_token_supply,
        pre_migration_token_supply=pre_migration_token_supply,
        post_migration_token_supply=post_migration_token_supply,
        curve=curve,
    )

    logger.info(
        "config_derived",
        migration_sqrt_price=sqrt_migration_price,
        swap_base_amount=swap_base_amount,
        migration_base_threshold=migration_base_amount,
        fixed_token_supply=fixed_token_supply,
    )
    return config
