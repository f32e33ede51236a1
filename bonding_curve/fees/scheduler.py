"""Time-decaying base fee.

The fee starts at the cliff numerator at activation and steps down once per
period until number_of_period periods have passed:

    linear:      fee = cliff - reduction_factor * period
    exponential: fee = cliff * (1 - reduction_factor / 10000) ^ period
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from bonding_curve.constants import FEE_DENOMINATOR, MAX_FEE_NUMERATOR, MIN_FEE_NUMERATOR
from bonding_curve.enums import TradeDirection
from bonding_curve.errors import ExceedMaxFeeBps, InvalidFeeScheduler
from bonding_curve.math.fee_math import get_fee_in_period, validate_fee_fraction
from bonding_curve.safe_int import S


class FeeSchedulerMode(IntEnum):
    LINEAR = 0
    EXPONENTIAL = 1


@dataclass(frozen=True)
class FeeScheduler:
    """Period-based fee decay.

    Attributes:
        cliff_fee_numerator: Fee at period 0
        number_of_period: Number of reductions before the fee stops decaying
        period_frequency: Points (slots or seconds) per period; 0 disables decay
        reduction_factor: Linear step in numerator units, or exponential step in bps
        mode: Linear or exponential decay
    """

    cliff_fee_numerator: int
    number_of_period: int = 0
    period_frequency: int = 0
    reduction_factor: int = 0
    mode: FeeSchedulerMode = FeeSchedulerMode.LINEAR

    def get_max_base_fee_numerator(self) -> int:
        return self.cliff_fee_numerator

    def get_min_base_fee_numerator(self) -> int:
        return self.get_base_fee_numerator_by_period(self.number_of_period)

    def get_base_fee_numerator_by_period(self, period: int) -> int:
        period = min(period, self.number_of_period)

        if self.mode is FeeSchedulerMode.LINEAR:
            return (S(self.cliff_fee_numerator) - S(self.reduction_factor) * period).to_u64()

        return get_fee_in_period(self.cliff_fee_numerator, self.reduction_factor, period)

    def validate(self, collect_fee_mode: int, activation_type: int) -> None:
        """Check the decay stays inside the allowed fee range.

        Raises:
            InvalidFeeScheduler: If the factors are partially set
            InvalidFee: If an endpoint fee is not a proper fraction
            ExceedMaxFeeBps: If an endpoint fee is outside [MIN, MAX]
        """
        factors = (self.number_of_period, self.period_frequency, self.reduction_factor)
        if any(factors) and not all(factors):
            raise InvalidFeeScheduler(
                f"Scheduler factors must be all zero or all nonzero: {factors}"
            )

        min_fee_numerator = self.get_min_base_fee_numerator()
        max_fee_numerator = self.get_max_base_fee_numerator()
        validate_fee_fraction(min_fee_numerator, FEE_DENOMINATOR)
        validate_fee_fraction(max_fee_numerator, FEE_DENOMINATOR)

        if min_fee_numerator < MIN_FEE_NUMERATOR or max_fee_numerator > MAX_FEE_NUMERATOR:
            raise ExceedMaxFeeBps(
                f"Scheduler fee range [{min_fee_numerator}, {max_fee_numerator}] "
                f"outside [{MIN_FEE_NUMERATOR}, {MAX_FEE_NUMERATOR}]"
            )

    def get_base_fee_numerator(
        self,
        current_point: int,
        activation_point: int,
        trade_direction: TradeDirection,
        input_amount: int,
    ) -> int:
        if self.period_frequency == 0:
            return self.cliff_fee_numerator

        period = (S(current_point) - activation_point) // self.period_frequency
        return self.get_base_fee_numerator_by_period(period.value)

    def get_base_fee_numerator_from_included_fee_amount(
        self,
        current_point: int,
        activation_point: int,
        trade_direction: TradeDirection,
        included_fee_amount: int,
    ) -> int:
        return self.get_base_fee_numerator(
            current_point, activation_point, trade_direction, included_fee_amount
        )

    def get_base_fee_numerator_from_excluded_fee_amount(
        self,
        current_point: int,
        activation_point: int,
        trade_direction: TradeDirection,
        excluded_fee_amount: int,
    ) -> int:
        # The schedule depends on time only
        return self.get_base_fee_numerator(
            current_point, activation_point, trade_direction, excluded_fee_amount
        )
