"""Stateless quotes against a snapshot of a pool.

Each quote prices a trade on a copy of the pool, so the caller's state is
never touched. The copy still gets its volatility references refreshed,
since the real swap would do that before pricing.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass

import structlog

from bonding_curve.activation import get_current_point
from bonding_curve.enums import SwapMode, TradeDirection
from bonding_curve.errors import AmountIsZero, PoolIsCompleted
from bonding_curve.fees.mode import FeeMode
from bonding_curve.state.config import PoolConfig
from bonding_curve.state.pool import VirtualPool
from bonding_curve.swap.types import SwapResult

logger = structlog.get_logger()


@dataclass(frozen=True)
class QuoteContext:
    """Clock and referral inputs shared by every quote mode."""

    current_slot: int = 0
    current_timestamp: int = 0
    has_referral: bool = False


class Quoter:
    """Prices trades without mutating pool state.

    Override get_quoter in the API to swap in another implementation.
    """

    def quote(
        self,
        pool: VirtualPool,
        config: PoolConfig,
        amount: int,
        trade_direction: TradeDirection,
        swap_mode: SwapMode,
        context: QuoteContext,
    ) -> SwapResult:
        """Price one trade.

        Args:
            pool: Pool state to price against (left unchanged)
            config: The pool's configuration
            amount: Input amount for EXACT_IN and PARTIAL_FILL, output amount for EXACT_OUT
            trade_direction: Which token the trader sells
            swap_mode: Resolution mode
            context: Clock and referral flag

        Raises:
            AmountIsZero: If amount is zero
            PoolIsCompleted: If the curve already reached its threshold
            TradeError: If the curve cannot fill the trade
        """
        if amount == 0:
            raise AmountIsZero("Quote amount is zero")
        if pool.is_curve_complete(config.migration_quote_threshold):
            raise PoolIsCompleted("Pool already reached the migration threshold")

        snapshot = copy.deepcopy(pool)
        snapshot.update_pre_swap(config, context.current_timestamp)

        current_point = get_current_point(
            config.activation_type, context.current_slot, context.current_timestamp
        )
        fee_mode = FeeMode.get_fee_mode(
            config.collect_fee_mode, trade_direction, context.has_referral
        )

        match SwapMode.parse(swap_mode):
            case SwapMode.EXACT_IN:
                result = snapshot.get_swap_result_from_exact_input(
                    config, amount, fee_mode, trade_direction, current_point
                )
            case SwapMode.PARTIAL_FILL:
                result = snapshot.get_swap_result_from_partial_input(
                    config, amount, fee_mode, trade_direction, current_point
                )
            case SwapMode.EXACT_OUT:
                result = snapshot.get_swap_result_from_exact_output(
                    config, amount, fee_mode, trade_direction, current_point
                )

        logger.debug(
            "quote_computed",
            swap_mode=SwapMode(swap_mode).name,
            trade_direction=TradeDirection(trade_direction).name,
            amount=amount,
            included_fee_input_amount=result.included_fee_input_amount,
            output_amount=result.output_amount,
        )
        return result

    def quote_exact_in(
        self,
        pool: VirtualPool,
        config: PoolConfig,
        amount_in: int,
        trade_direction: TradeDirection,
        context: QuoteContext,
    ) -> SwapResult:
        return self.quote(pool, config, amount_in, trade_direction, SwapMode.EXACT_IN, context)

    def quote_partial_fill(
        self,
        pool: VirtualPool,
        config: PoolConfig,
        amount_in: int,
        trade_direction: TradeDirection,
        context: QuoteContext,
    ) -> SwapResult:
        return self.quote(pool, config, amount_in, trade_direction, SwapMode.PARTIAL_FILL, context)

    def quote_exact_out(
        self,
        pool: VirtualPool,
        config: PoolConfig,
        amount_out: int,
        trade_direction: TradeDirection,
        context: QuoteContext,
    ) -> SwapResult:
        return self.quote(pool, config, amount_out, trade_direction, SwapMode.EXACT_OUT, context)


_default_quoter = Quoter()


def get_default_quoter() -> Quoter:
    return _default_quoter
