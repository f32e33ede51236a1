"""Base fee configuration and strategy dispatch.

A pool stores its base fee as a cliff numerator plus three generic factors.
Their meaning depends on base_fee_mode:

    mode                   first_factor       second_factor         third_factor
    scheduler (lin/exp)    number_of_period   period_frequency      reduction_factor
    rate limiter           fee_increment_bps  max_limiter_duration  reference_amount
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from bonding_curve.enums import BaseFeeMode
from bonding_curve.fees.rate_limiter import FeeRateLimiter
from bonding_curve.fees.scheduler import FeeScheduler, FeeSchedulerMode

BaseFee = Union[FeeScheduler, FeeRateLimiter]


@dataclass(frozen=True)
class BaseFeeConfig:
    cliff_fee_numerator: int
    first_factor: int = 0
    second_factor: int = 0
    third_factor: int = 0
    base_fee_mode: BaseFeeMode = BaseFeeMode.FEE_SCHEDULER_LINEAR

    def to_base_fee(self) -> BaseFee:
        """Build the strategy object for this configuration.

        Raises:
            InvalidBaseFeeMode: If base_fee_mode is unknown
        """
        match BaseFeeMode.parse(self.base_fee_mode):
            case BaseFeeMode.FEE_SCHEDULER_LINEAR:
                return self._to_fee_scheduler(FeeSchedulerMode.LINEAR)
            case BaseFeeMode.FEE_SCHEDULER_EXPONENTIAL:
                return self._to_fee_scheduler(FeeSchedulerMode.EXPONENTIAL)
            case BaseFeeMode.RATE_LIMITER:
                return FeeRateLimiter(
                    cliff_fee_numerator=self.cliff_fee_numerator,
                    fee_increment_bps=self.first_factor,
                    max_limiter_duration=self.second_factor,
                    reference_amount=self.third_factor,
                )

    def _to_fee_scheduler(self, mode: FeeSchedulerMode) -> FeeScheduler:
        return FeeScheduler(
            cliff_fee_numerator=self.cliff_fee_numerator,
            number_of_period=self.first_factor,
            period_frequency=self.second_factor,
            reduction_factor=self.third_factor,
            mode=mode,
        )

    def get_fee_rate_limiter(self) -> FeeRateLimiter | None:
        """The rate limiter, or None for scheduler modes."""
        base_fee = self.to_base_fee()
        if isinstance(base_fee, FeeRateLimiter):
            return base_fee
        return None

    def validate(self, collect_fee_mode: int, activation_type: int) -> None:
        self.to_base_fee().validate(collect_fee_mode, activation_type)
