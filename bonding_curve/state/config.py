"""Immutable pool configuration shared by every pool created from it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from bonding_curve.constants import MAX_SWALLOW_PERCENTAGE, U64_MAX
from bonding_curve.curve import LiquidityDistributionParameters
from bonding_curve.enums import CollectFeeMode, MigrationFeeOption, MigrationOption, TokenType
from bonding_curve.errors import InvalidVestingParameters
from bonding_curve.fees.config import PoolFeesConfig
from bonding_curve.math.fixed_point import Rounding, safe_mul_div_cast_u64, safe_mul_div_cast_u128
from bonding_curve.migration import (
    get_migration_quote_amount,
    get_swap_amount_with_buffer,
    get_total_token_supply,
)
from bonding_curve.safe_int import S, checked_sub


@dataclass(frozen=True)
class LockedVestingParams:
    """Creator allocation locked at migration and released over time."""

    amount_per_period: int = 0
    cliff_duration_from_migration_time: int = 0
    frequency: int = 0
    number_of_period: int = 0
    cliff_unlock_amount: int = 0

    def get_total_amount(self) -> int:
        total_amount = (
            S(self.cliff_unlock_amount) + S(self.amount_per_period) * self.number_of_period
        )
        return total_amount.to_u64()

    def has_vesting(self) -> bool:
        return self != LockedVestingParams()

    def validate(self) -> None:
        """Raises InvalidVestingParameters when vesting is set but releases nothing."""
        if not self.has_vesting():
            return
        if self.frequency == 0 or self.get_total_amount() == 0:
            raise InvalidVestingParameters(
                f"Vesting needs a nonzero frequency and amount: frequency={self.frequency}, "
                f"total={self.get_total_amount()}"
            )


def _percent(amount: int, percentage: int) -> int:
    return safe_mul_div_cast_u64(amount, percentage, 100, Rounding.DOWN)


def _percent_u128(amount: int, percentage: int) -> int:
    return safe_mul_div_cast_u128(amount, percentage, 100, Rounding.DOWN)


class LiquidityDistributionU64(NamedTuple):
    partner_locked_lp: int
    partner_lp: int
    creator_locked_lp: int
    creator_lp: int


class LiquidityDistributionItem(NamedTuple):
    unlocked_liquidity: int
    locked_liquidity: int

    def get_total_liquidity(self) -> int:
        return self.unlocked_liquidity + self.locked_liquidity


class LiquidityDistribution(NamedTuple):
    partner: LiquidityDistributionItem
    creator: LiquidityDistributionItem


class PartnerAndCreatorSplitFee(NamedTuple):
    partner_fee: int
    creator_fee: int


class MigrationFeeDistribution(NamedTuple):
    partner_migration_fee: int
    creator_migration_fee: int


@dataclass(frozen=True)
class PoolConfig:
    """Pool configuration.

    Built once by build_pool_config; the migration fields are derived from
    the curve and the quote threshold.
    """

    pool_fees: PoolFeesConfig
    curve: tuple[LiquidityDistributionParameters, ...]
    sqrt_start_price: int
    migration_quote_threshold: int
    migration_base_threshold: int = 0
    migration_sqrt_price: int = 0
    swap_base_amount: int = 0
    collect_fee_mode: int = CollectFeeMode.QUOTE_TOKEN
    migration_option: int = MigrationOption.METEORA_DAMM
    activation_type: int = 0
    token_type: int = TokenType.SPL_TOKEN
    token_decimal: int = 6
    partner_lp_percentage: int = 0
    partner_locked_lp_percentage: int = 0
    creator_lp_percentage: int = 0
    creator_locked_lp_percentage: int = 0
    creator_trading_fee_percentage: int = 0
    migration_fee_option: int = MigrationFeeOption.FIXED_BPS_25
    migration_fee_percentage: int = 0
    creator_migration_fee_percentage: int = 0
    locked_vesting: LockedVestingParams = field(default_factory=LockedVestingParams)
    fixed_token_supply: bool = False
    pre_migration_token_supply: int = 0
    post_migration_token_supply: int = 0

    # =========================================================================
    # Supply
    # =========================================================================

    def get_initial_base_supply(self) -> int:
        """Base minted into the pool at initialization."""
        if self.fixed_token_supply:
            return self.pre_migration_token_supply

        swap_amount_with_buffer = get_swap_amount_with_buffer(
            self.swap_base_amount, self.sqrt_start_price, self.curve
        )
        return get_total_token_supply(
            swap_amount_with_buffer, self.migration_base_threshold, self.locked_vesting
        )

    def _get_max_burnable_amount_post_migration(self) -> int:
        if self.fixed_token_supply:
            return checked_sub(self.pre_migration_token_supply, self.post_migration_token_supply)
        return U64_MAX

    def get_burnable_amount_post_migration(self, leftover: int) -> int:
        """Part of the base left in the vault after migration that may be burned."""
        return min(self._get_max_burnable_amount_post_migration(), leftover)

    def get_max_swallow_quote_amount(self) -> int:
        """Largest quote overshoot past the threshold a single buy may cause."""
        return _percent(self.migration_quote_threshold, MAX_SWALLOW_PERCENTAGE)

    # =========================================================================
    # Migration splits
    # =========================================================================

    def get_migration_quote_amount_for_config(self) -> tuple[int, int]:
        return get_migration_quote_amount(
            self.migration_quote_threshold, self.migration_fee_percentage
        )

    def get_migration_fee_distribution(self) -> MigrationFeeDistribution:
        _, fee = self.get_migration_quote_amount_for_config()
        creator_migration_fee = _percent(fee, self.creator_migration_fee_percentage)
        return MigrationFeeDistribution(
            partner_migration_fee=checked_sub(fee, creator_migration_fee),
            creator_migration_fee=creator_migration_fee,
        )

    def get_lp_distribution(self, lp_amount: int) -> LiquidityDistributionU64:
        """Split LP tokens; the creator's unlocked share takes the rounding dust."""
        partner_locked_lp = _percent(lp_amount, self.partner_locked_lp_percentage)
        partner_lp = _percent(lp_amount, self.partner_lp_percentage)
        creator_locked_lp = _percent(lp_amount, self.creator_locked_lp_percentage)
        creator_lp = (S(lp_amount) - partner_locked_lp - partner_lp - creator_locked_lp).to_u64()
        return LiquidityDistributionU64(
            partner_locked_lp, partner_lp, creator_locked_lp, creator_lp
        )

    def get_liquidity_distribution(self, liquidity: int) -> LiquidityDistribution:
        """Split concentrated liquidity the same way as get_lp_distribution."""
        partner_locked = _percent_u128(liquidity, self.partner_locked_lp_percentage)
        partner_unlocked = _percent_u128(liquidity, self.partner_lp_percentage)
        creator_locked = _percent_u128(liquidity, self.creator_locked_lp_percentage)
        creator_unlocked = (
            S(liquidity) - partner_locked - partner_unlocked - creator_locked
        ).to_u128()
        return LiquidityDistribution(
            partner=LiquidityDistributionItem(
                unlocked_liquidity=partner_unlocked, locked_liquidity=partner_locked
            ),
            creator=LiquidityDistributionItem(
                unlocked_liquidity=creator_unlocked, locked_liquidity=creator_locked
            ),
        )

    def split_partner_and_creator_fee(self, fee: int) -> PartnerAndCreatorSplitFee:
        if self.creator_trading_fee_percentage == 0:
            return PartnerAndCreatorSplitFee(partner_fee=fee, creator_fee=0)
        creator_fee = _percent(fee, self.creator_trading_fee_percentage)
        return PartnerAndCreatorSplitFee(
            partner_fee=checked_sub(fee, creator_fee), creator_fee=creator_fee
        )
