"""Fee models for the bonding curve.

- Base fee: time-decaying scheduler or amount-based rate limiter
- Dynamic fee: volatility accumulator on top of the base fee
- Fee mode: which leg and token pays the fee
- Pool fee config: total numerator and protocol/referral split
"""

from bonding_curve.fees.base_fee import BaseFee, BaseFeeConfig
from bonding_curve.fees.config import FeeOnAmountResult, PoolFeesConfig
from bonding_curve.fees.dynamic import (
    DynamicFeeConfig,
    VolatilityTracker,
    calculate_dynamic_fee_params,
    convert_collect_fee_mode_to_dammv2,
    get_variable_fee_numerator,
)
from bonding_curve.fees.mode import FeeMode
from bonding_curve.fees.rate_limiter import FeeRateLimiter
from bonding_curve.fees.scheduler import FeeScheduler, FeeSchedulerMode

__all__ = [
    # Base fee
    "BaseFee",
    "BaseFeeConfig",
    "FeeRateLimiter",
    "FeeScheduler",
    "FeeSchedulerMode",
    # Dynamic fee
    "DynamicFeeConfig",
    "VolatilityTracker",
    "calculate_dynamic_fee_params",
    "convert_collect_fee_mode_to_dammv2",
    "get_variable_fee_numerator",
    # Pool fees
    "FeeMode",
    "FeeOnAmountResult",
    "PoolFeesConfig",
]
