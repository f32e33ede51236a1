"""Pool fee configuration: base fee, optional dynamic fee and the fee split."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from bonding_curve.constants import HOST_FEE_PERCENT, MAX_FEE_NUMERATOR, PROTOCOL_FEE_PERCENT
from bonding_curve.enums import TradeDirection
from bonding_curve.fees.base_fee import BaseFeeConfig
from bonding_curve.fees.dynamic import (
    DynamicFeeConfig,
    VolatilityTracker,
    get_variable_fee_numerator,
)
from bonding_curve.math import fee_math
from bonding_curve.safe_int import S


class FeeOnAmountResult(NamedTuple):
    """Amount left after the fee, and how the fee is split."""

    amount: int
    trading_fee: int
    protocol_fee: int
    referral_fee: int


@dataclass(frozen=True)
class PoolFeesConfig:
    """Fee settings shared by every pool created from one config.

    Attributes:
        base_fee: Scheduler or rate limiter settings
        dynamic_fee: Volatility fee settings, None when disabled
        protocol_fee_percent: Share of the total fee kept by the protocol
        referral_fee_percent: Share of the protocol fee given to a referrer
    """

    base_fee: BaseFeeConfig
    dynamic_fee: DynamicFeeConfig | None = None
    protocol_fee_percent: int = PROTOCOL_FEE_PERCENT
    referral_fee_percent: int = HOST_FEE_PERCENT

    def validate(self, collect_fee_mode: int, activation_type: int) -> None:
        self.base_fee.validate(collect_fee_mode, activation_type)
        if self.dynamic_fee is not None:
            self.dynamic_fee.validate()

    # =========================================================================
    # Total fee numerator
    # =========================================================================

    def _get_total_fee_numerator(
        self, base_fee_numerator: int, volatility_tracker: VolatilityTracker
    ) -> int:
        variable_fee_numerator = get_variable_fee_numerator(self.dynamic_fee, volatility_tracker)
        total_fee_numerator = S(variable_fee_numerator) + base_fee_numerator
        return min(total_fee_numerator.value, MAX_FEE_NUMERATOR)

    def get_total_fee_numerator_from_included_fee_amount(
        self,
        volatility_tracker: VolatilityTracker,
        current_point: int,
        activation_point: int,
        included_fee_amount: int,
        trade_direction: TradeDirection,
    ) -> int:
        base_fee = self.base_fee.to_base_fee()
        base_fee_numerator = base_fee.get_base_fee_numerator_from_included_fee_amount(
            current_point, activation_point, trade_direction, included_fee_amount
        )
        return self._get_total_fee_numerator(base_fee_numerator, volatility_tracker)

    def get_total_fee_numerator_from_excluded_fee_amount(
        self,
        volatility_tracker: VolatilityTracker,
        current_point: int,
        activation_point: int,
        excluded_fee_amount: int,
        trade_direction: TradeDirection,
    ) -> int:
        base_fee = self.base_fee.to_base_fee()
        base_fee_numerator = base_fee.get_base_fee_numerator_from_excluded_fee_amount(
            current_point, activation_point, trade_direction, excluded_fee_amount
        )
        return self._get_total_fee_numerator(base_fee_numerator, volatility_tracker)

    # =========================================================================
    # Fee amounts
    # =========================================================================

    @staticmethod
    def get_excluded_fee_amount(
        trade_fee_numerator: int, included_fee_amount: int
    ) -> tuple[int, int]:
        return fee_math.get_excluded_fee_amount(trade_fee_numerator, included_fee_amount)

    @staticmethod
    def get_included_fee_amount(
        trade_fee_numerator: int, excluded_fee_amount: int
    ) -> tuple[int, int]:
        return fee_math.get_included_fee_amount(trade_fee_numerator, excluded_fee_amount)

    def split_fees(self, fee_amount: int, has_referral: bool) -> tuple[int, int, int]:
        """Split a fee into (trading_fee, protocol_fee, referral_fee).

        The referral share comes out of the protocol share.
        """
        protocol_fee = (S(fee_amount) * self.protocol_fee_percent // 100).to_u64()
        trading_fee = (S(fee_amount) - protocol_fee).to_u64()

        referral_fee = 0
        if has_referral:
            referral_fee = (S(protocol_fee) * self.referral_fee_percent // 100).to_u64()
        protocol_fee = (S(protocol_fee) - referral_fee).to_u64()

        return trading_fee, protocol_fee, referral_fee

    def get_fee_on_amount(
        self,
        trade_fee_numerator: int,
        amount: int,
        has_referral: bool,
    ) -> FeeOnAmountResult:
        """Take the fee out of amount and split it."""
        excluded_fee_amount, fee = self.get_excluded_fee_amount(trade_fee_numerator, amount)
        trading_fee, protocol_fee, referral_fee = self.split_fees(fee, has_referral)
        return FeeOnAmountResult(
            amount=excluded_fee_amount,
            trading_fee=trading_fee,
            protocol_fee=protocol_fee,
            referral_fee=referral_fee,
        )
