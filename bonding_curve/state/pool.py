"""Mutable per-pool state: reserves, fee accumulators and lifecycle flags."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from bonding_curve.constants import PARTNER_SURPLUS_SHARE
from bonding_curve.enums import MigrationProgress, TradeDirection
from bonding_curve.errors import (
    LeftoverHasBeenWithdraw,
    NotPermitToDoThisAction,
    PoolIsIncompleted,
    SurplusHasBeenWithdraw,
)
from bonding_curve.fees.dynamic import VolatilityTracker
from bonding_curve.fees.mode import FeeMode
from bonding_curve.safe_int import S, checked_add_u64, checked_sub
from bonding_curve.state.config import PoolConfig
from bonding_curve.swap import engine
from bonding_curve.swap.types import SwapResult

logger = structlog.get_logger()


@dataclass
class PoolMetrics:
    """Lifetime fee totals; never decreased by claims."""

    total_protocol_base_fee: int = 0
    total_protocol_quote_fee: int = 0
    total_trading_base_fee: int = 0
    total_trading_quote_fee: int = 0

    def accumulate_fee(self, protocol_fee: int, trading_fee: int, is_base_token: bool) -> None:
        if is_base_token:
            self.total_protocol_base_fee = checked_add_u64(
                self.total_protocol_base_fee, protocol_fee
            )
            self.total_trading_base_fee = checked_add_u64(
                self.total_trading_base_fee, trading_fee
            )
        else:
            self.total_protocol_quote_fee = checked_add_u64(
                self.total_protocol_quote_fee, protocol_fee
            )
            self.total_trading_quote_fee = checked_add_u64(
                self.total_trading_quote_fee, trading_fee
            )


@dataclass
class VirtualPool:
    """State of one bonding curve pool.

    Reserves track what the curve owns. Fees are held separately until
    claimed, so the vault balance is reserve plus unclaimed fees.
    """

    sqrt_price: int = 0
    base_reserve: int = 0
    quote_reserve: int = 0
    protocol_base_fee: int = 0
    protocol_quote_fee: int = 0
    trading_base_fee: int = 0
    trading_quote_fee: int = 0
    activation_point: int = 0
    volatility_tracker: VolatilityTracker = field(default_factory=VolatilityTracker)
    metrics: PoolMetrics = field(default_factory=PoolMetrics)
    migration_progress: MigrationProgress = MigrationProgress.PRE_BONDING_CURVE
    finish_curve_timestamp: int = 0
    is_migrated: bool = False
    is_partner_withdraw_surplus: bool = False
    is_protocol_withdraw_surplus: bool = False
    is_withdraw_leftover: bool = False

    @classmethod
    def initialize(cls, config: PoolConfig, activation_point: int) -> VirtualPool:
        """New pool at the start price holding the initial base supply."""
        pool = cls(
            sqrt_price=config.sqrt_start_price,
            base_reserve=config.get_initial_base_supply(),
            activation_point=activation_point,
            volatility_tracker=VolatilityTracker(sqrt_price_reference=config.sqrt_start_price),
        )
        logger.info(
            "pool_initialized",
            sqrt_price=pool.sqrt_price,
            base_reserve=pool.base_reserve,
            activation_point=activation_point,
        )
        return pool

    # =========================================================================
    # Swap resolution
    # =========================================================================

    def get_swap_result_from_exact_input(
        self,
        config: PoolConfig,
        amount_in: int,
        fee_mode: FeeMode,
        trade_direction: TradeDirection,
        current_point: int,
    ) -> SwapResult:
        return engine.get_swap_result_from_exact_input(
            self, config, amount_in, fee_mode, trade_direction, current_point
        )

    def get_swap_result_from_partial_input(
        self,
        config: PoolConfig,
        amount_in: int,
        fee_mode: FeeMode,
        trade_direction: TradeDirection,
        current_point: int,
    ) -> SwapResult:
        return engine.get_swap_result_from_partial_input(
            self, config, amount_in, fee_mode, trade_direction, current_point
        )

    def get_swap_result_from_exact_output(
        self,
        config: PoolConfig,
        amount_out: int,
        fee_mode: FeeMode,
        trade_direction: TradeDirection,
        current_point: int,
    ) -> SwapResult:
        return engine.get_swap_result_from_exact_output(
            self, config, amount_out, fee_mode, trade_direction, current_point
        )

    def apply_swap_result(
        self,
        config: PoolConfig,
        swap_result: SwapResult,
        fee_mode: FeeMode,
        trade_direction: TradeDirection,
        current_timestamp: int,
    ) -> None:
        """Move the price, reserves and fee accumulators by one priced trade.

        The referral fee leaves the pool immediately and is not accumulated.
        """
        old_sqrt_price = self.sqrt_price
        self.sqrt_price = swap_result.next_sqrt_price

        trading_fee = swap_result.trading_fee
        protocol_fee = swap_result.protocol_fee
        if fee_mode.fees_on_base_token:
            self.trading_base_fee = checked_add_u64(self.trading_base_fee, trading_fee)
            self.protocol_base_fee = checked_add_u64(self.protocol_base_fee, protocol_fee)
        else:
            self.trading_quote_fee = checked_add_u64(self.trading_quote_fee, trading_fee)
            self.protocol_quote_fee = checked_add_u64(self.protocol_quote_fee, protocol_fee)
        self.metrics.accumulate_fee(protocol_fee, trading_fee, fee_mode.fees_on_base_token)

        if fee_mode.fees_on_input:
            actual_output_amount = swap_result.output_amount
        else:
            actual_output_amount = (S(swap_result.output_amount) + swap_result.total_fee).to_u64()

        actual_input_amount = swap_result.excluded_fee_input_amount
        if trade_direction == TradeDirection.BASE_TO_QUOTE:
            self.base_reserve = checked_add_u64(self.base_reserve, actual_input_amount)
            self.quote_reserve = checked_sub(self.quote_reserve, actual_output_amount)
        else:
            self.quote_reserve = checked_add_u64(self.quote_reserve, actual_input_amount)
            self.base_reserve = checked_sub(self.base_reserve, actual_output_amount)

        self.update_post_swap(config, old_sqrt_price, current_timestamp)

    # =========================================================================
    # Dynamic fee bookkeeping
    # =========================================================================

    def update_pre_swap(self, config: PoolConfig, current_timestamp: int) -> None:
        dynamic_fee = config.pool_fees.dynamic_fee
        if dynamic_fee is not None:
            self.volatility_tracker.update_references(
                dynamic_fee, self.sqrt_price, current_timestamp
            )

    def update_post_swap(
        self, config: PoolConfig, old_sqrt_price: int, current_timestamp: int
    ) -> None:
        dynamic_fee = config.pool_fees.dynamic_fee
        if dynamic_fee is None:
            return

        self.volatility_tracker.update_volatility_accumulator(dynamic_fee, self.sqrt_price)

        # Only a crossed bin counts as activity for the filter period
        delta_bin_id = VolatilityTracker.get_delta_bin_id(
            dynamic_fee.bin_step_u128, old_sqrt_price, self.sqrt_price
        )
        if delta_bin_id > 0:
            self.volatility_tracker.last_update_timestamp = current_timestamp

    # =========================================================================
    # Claims and surplus
    # =========================================================================

    def claim_protocol_fee(self) -> tuple[int, int]:
        """Take all protocol fees as (base, quote)."""
        amounts = (self.protocol_base_fee, self.protocol_quote_fee)
        self.protocol_base_fee = 0
        self.protocol_quote_fee = 0
        logger.info("protocol_fee_claimed", base_amount=amounts[0], quote_amount=amounts[1])
        return amounts

    def claim_trading_fee(self, max_base_amount: int, max_quote_amount: int) -> tuple[int, int]:
        """Take up to the given trading fees as (base, quote)."""
        base_amount = min(self.trading_base_fee, max_base_amount)
        quote_amount = min(self.trading_quote_fee, max_quote_amount)
        self.trading_base_fee = checked_sub(self.trading_base_fee, base_amount)
        self.trading_quote_fee = checked_sub(self.trading_quote_fee, quote_amount)
        logger.info("trading_fee_claimed", base_amount=base_amount, quote_amount=quote_amount)
        return base_amount, quote_amount

    def get_protocol_and_trading_base_fee(self) -> int:
        return checked_add_u64(self.trading_base_fee, self.protocol_base_fee)

    def is_curve_complete(self, migration_threshold: int) -> bool:
        return self.quote_reserve >= migration_threshold

    def get_total_surplus(self, migration_threshold: int) -> int:
        return checked_sub(self.quote_reserve, migration_threshold)

    @staticmethod
    def get_partner_surplus(total_surplus: int) -> int:
        return (S(total_surplus) * PARTNER_SURPLUS_SHARE // 100).to_u64()

    def get_protocol_surplus(self, migration_threshold: int) -> int:
        total_surplus = self.get_total_surplus(migration_threshold)
        return checked_sub(total_surplus, self.get_partner_surplus(total_surplus))

    def withdraw_partner_surplus(self, config: PoolConfig) -> int:
        """Partner's share of the quote collected past the threshold.

        Raises:
            NotPermitToDoThisAction: If the curve is not complete
            SurplusHasBeenWithdraw: If the partner already withdrew
        """
        self._require_curve_complete(config)
        if self.is_partner_withdraw_surplus:
            raise SurplusHasBeenWithdraw("Partner surplus already withdrawn")
        amount = self.get_partner_surplus(self.get_total_surplus(config.migration_quote_threshold))
        self.update_partner_withdraw_surplus()
        logger.info("partner_surplus_withdrawn", amount=amount)
        return amount

    def withdraw_protocol_surplus(self, config: PoolConfig) -> int:
        """Protocol's share of the quote collected past the threshold.

        Raises:
            NotPermitToDoThisAction: If the curve is not complete
            SurplusHasBeenWithdraw: If the protocol already withdrew
        """
        self._require_curve_complete(config)
        if self.is_protocol_withdraw_surplus:
            raise SurplusHasBeenWithdraw("Protocol surplus already withdrawn")
        amount = self.get_protocol_surplus(config.migration_quote_threshold)
        self.update_protocol_withdraw_surplus()
        logger.info("protocol_surplus_withdrawn", amount=amount)
        return amount

    def withdraw_leftover(self, config: PoolConfig, base_vault_amount: int) -> int:
        """Base left in the vault after migration, excluding unclaimed base fees.

        Only fixed-supply pools have a leftover, and only once the
        destination pool exists.

        Raises:
            NotPermitToDoThisAction: If the pool is not migrated or supply is not fixed
            LeftoverHasBeenWithdraw: If the leftover was already withdrawn
        """
        is_created = self.migration_progress == MigrationProgress.CREATED_POOL
        if not is_created or not config.fixed_token_supply:
            raise NotPermitToDoThisAction(
                f"Leftover unavailable: progress={self.migration_progress.name}, "
                f"fixed_token_supply={config.fixed_token_supply}"
            )
        if self.is_withdraw_leftover:
            raise LeftoverHasBeenWithdraw("Leftover already withdrawn")
        amount = checked_sub(base_vault_amount, self.get_protocol_and_trading_base_fee())
        self.update_withdraw_leftover()
        logger.info("leftover_withdrawn", amount=amount)
        return amount

    def _require_curve_complete(self, config: PoolConfig) -> None:
        if not self.is_curve_complete(config.migration_quote_threshold):
            raise NotPermitToDoThisAction(
                f"Curve not complete: quote_reserve={self.quote_reserve}, "
                f"threshold={config.migration_quote_threshold}"
            )

    def update_after_create_pool(self, config: PoolConfig) -> None:
        """Record that liquidity moved to the destination pool.

        Raises:
            PoolIsIncompleted: If the curve has not reached the threshold
        """
        if not self.is_curve_complete(config.migration_quote_threshold):
            raise PoolIsIncompleted(
                f"quote_reserve {self.quote_reserve} below threshold "
                f"{config.migration_quote_threshold}"
            )
        self.is_migrated = True
        self.migration_progress = MigrationProgress.CREATED_POOL
        logger.info(
            "pool_migrated", quote_reserve=self.quote_reserve, base_reserve=self.base_reserve
        )

    def update_partner_withdraw_surplus(self) -> None:
        self.is_partner_withdraw_surplus = True

    def update_protocol_withdraw_surplus(self) -> None:
        self.is_protocol_withdraw_surplus = True

    def update_withdraw_leftover(self) -> None:
        self.is_withdraw_leftover = True
