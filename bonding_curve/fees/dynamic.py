"""Volatility-driven variable fee.

Price movement is measured in bins of bin_step bps. The accumulator grows
with the number of bins crossed since the reference price and decays once
trading slows down:

    variable_fee = ceil((volatility_accumulator * bin_step)^2 * control / 1e11)
"""

from __future__ import annotations

from dataclasses import dataclass

from bonding_curve.constants import (
    BASIS_POINT_MAX,
    BIN_STEP_BPS_DEFAULT,
    BIN_STEP_BPS_U128_DEFAULT,
    DECAY_PERIOD_DEFAULT,
    DYNAMIC_FEE_SCALING_FACTOR,
    FILTER_PERIOD_DEFAULT,
    MAX_DYNAMIC_FEE_PERCENT,
    MAX_VOLATILITY_ACCUMULATOR,
    ONE_Q64,
    REDUCTION_FACTOR_DEFAULT,
    RESOLUTION,
    SQUARE_VFA_BIN,
    U24_MAX,
    U32_MAX,
)
from bonding_curve.enums import CollectFeeMode
from bonding_curve.errors import InvalidCollectFeeMode, InvalidInput, TypeCastFailed
from bonding_curve.math.fixed_point import Rounding, safe_shl_div_cast
from bonding_curve.safe_int import S


@dataclass(frozen=True)
class DynamicFeeConfig:
    """Variable fee parameters.

    Attributes:
        bin_step: Bin width in bps
        bin_step_u128: Bin width as a Q64.64 fraction
        filter_period: Seconds under which trades count as high frequency
        decay_period: Seconds after which the reference accumulator resets
        reduction_factor: Share (bps) of the accumulator kept as reference
        max_volatility_accumulator: Accumulator ceiling
        variable_fee_control: Scale applied to the squared movement
    """

    bin_step: int
    bin_step_u128: int
    filter_period: int
    decay_period: int
    reduction_factor: int
    max_volatility_accumulator: int
    variable_fee_control: int

    def validate(self) -> None:
        """Check parameters against the supported ranges.

        Raises:
            InvalidInput: If any parameter is out of range
        """
        if self.bin_step != BIN_STEP_BPS_DEFAULT:
            raise InvalidInput(f"bin_step must be {BIN_STEP_BPS_DEFAULT}, got {self.bin_step}")
        if self.bin_step_u128 != BIN_STEP_BPS_U128_DEFAULT:
            raise InvalidInput(f"bin_step_u128 must be {BIN_STEP_BPS_U128_DEFAULT}")
        if self.filter_period >= self.decay_period:
            raise InvalidInput(
                f"filter_period {self.filter_period} must be below decay_period {self.decay_period}"
            )
        if self.reduction_factor > BASIS_POINT_MAX:
            raise InvalidInput(f"reduction_factor above {BASIS_POINT_MAX}: {self.reduction_factor}")
        if self.variable_fee_control > U24_MAX:
            raise InvalidInput(f"variable_fee_control above u24: {self.variable_fee_control}")
        if self.max_volatility_accumulator > U24_MAX:
            raise InvalidInput(
                f"max_volatility_accumulator above u24: {self.max_volatility_accumulator}"
            )

    def get_variable_fee_numerator(self, volatility_tracker: VolatilityTracker) -> int:
        square_vfa_bin = (S(volatility_tracker.volatility_accumulator) * self.bin_step) * (
            S(volatility_tracker.volatility_accumulator) * self.bin_step
        )
        v_fee = square_vfa_bin * self.variable_fee_control
        return v_fee.ceiling_div(DYNAMIC_FEE_SCALING_FACTOR).to_u128()


def get_variable_fee_numerator(
    dynamic_fee: DynamicFeeConfig | None,
    volatility_tracker: VolatilityTracker,
) -> int:
    """Variable fee numerator, zero when the pool has no dynamic fee."""
    if dynamic_fee is None:
        return 0
    return dynamic_fee.get_variable_fee_numerator(volatility_tracker)


@dataclass
class VolatilityTracker:
    """Per-pool volatility state."""

    last_update_timestamp: int = 0
    sqrt_price_reference: int = 0
    volatility_accumulator: int = 0
    volatility_reference: int = 0

    @staticmethod
    def get_delta_bin_id(bin_step_u128: int, sqrt_price_a: int, sqrt_price_b: int) -> int:
        """Bins between two sqrt prices, doubled to express price bins.

        Uses (1 + b)^n ~ 1 + b*n, which holds while b is small.
        """
        upper, lower = max(sqrt_price_a, sqrt_price_b), min(sqrt_price_a, sqrt_price_b)
        price_ratio = safe_shl_div_cast(upper, lower, RESOLUTION, Rounding.DOWN)
        delta_bin_id = (S(price_ratio) - ONE_Q64) // bin_step_u128
        return (delta_bin_id * 2).to_u128()

    def update_volatility_accumulator(self, dynamic_fee: DynamicFeeConfig, sqrt_price: int) -> None:
        delta_bin_id = self.get_delta_bin_id(
            dynamic_fee.bin_step_u128, sqrt_price, self.sqrt_price_reference
        )
        volatility_accumulator = S(self.volatility_reference) + S(delta_bin_id) * BASIS_POINT_MAX
        self.volatility_accumulator = min(
            volatility_accumulator.value, dynamic_fee.max_volatility_accumulator
        )

    def update_references(
        self, dynamic_fee: DynamicFeeConfig, sqrt_price_current: int, current_timestamp: int
    ) -> None:
        elapsed = (S(current_timestamp) - self.last_update_timestamp).value

        # High frequency trades keep the old reference
        if elapsed < dynamic_fee.filter_period:
            return

        self.sqrt_price_reference = sqrt_price_current
        if elapsed < dynamic_fee.decay_period:
            self.volatility_reference = (
                S(self.volatility_accumulator) * dynamic_fee.reduction_factor // BASIS_POINT_MAX
            ).to_u128()
        else:
            self.volatility_reference = 0


# =============================================================================
# Destination pool parameters
# =============================================================================


def calculate_dynamic_fee_params(base_fee_numerator: int) -> DynamicFeeConfig:
    """Dynamic fee for the destination pool.

    Sized so a 15% price move (MAX_VOLATILITY_ACCUMULATOR) adds
    MAX_DYNAMIC_FEE_PERCENT of the base fee.
    """
    max_dynamic_fee_numerator = S(base_fee_numerator) * MAX_DYNAMIC_FEE_PERCENT // 100
    v_fee = (
        max_dynamic_fee_numerator * DYNAMIC_FEE_SCALING_FACTOR - (DYNAMIC_FEE_SCALING_FACTOR - 1)
    )
    variable_fee_control = (v_fee // SQUARE_VFA_BIN).value
    if variable_fee_control > U32_MAX:
        raise TypeCastFailed(f"variable_fee_control does not fit u32: {variable_fee_control}")

    return DynamicFeeConfig(
        bin_step=BIN_STEP_BPS_DEFAULT,
        bin_step_u128=BIN_STEP_BPS_U128_DEFAULT,
        filter_period=FILTER_PERIOD_DEFAULT,
        decay_period=DECAY_PERIOD_DEFAULT,
        reduction_factor=REDUCTION_FACTOR_DEFAULT,
        max_volatility_accumulator=MAX_VOLATILITY_ACCUMULATOR,
        variable_fee_control=variable_fee_control,
    )


def convert_collect_fee_mode_to_dammv2(collect_fee_mode: int) -> int:
    """Map a collect fee mode onto the destination pool's encoding.

    QuoteToken (0) becomes OnlyB (1); OutputToken (1) becomes BothToken (0).
    """
    if collect_fee_mode == CollectFeeMode.QUOTE_TOKEN:
        return 1
    if collect_fee_mode == CollectFeeMode.OUTPUT_TOKEN:
        return 0
    raise InvalidCollectFeeMode(f"Unknown collect fee mode: {collect_fee_mode}")
