"""Tests for the volatility-driven variable fee."""

import math

import pytest

from bonding_curve.constants import (
    BIN_STEP_BPS_U128_DEFAULT,
    DECAY_PERIOD_DEFAULT,
    FILTER_PERIOD_DEFAULT,
    MAX_VOLATILITY_ACCUMULATOR,
    ONE_Q64,
    REDUCTION_FACTOR_DEFAULT,
    SQUARE_VFA_BIN,
    U24_MAX,
)
from bonding_curve.enums import CollectFeeMode
from bonding_curve.errors import InvalidCollectFeeMode, InvalidInput
from bonding_curve.fees.dynamic import (
    DynamicFeeConfig,
    VolatilityTracker,
    calculate_dynamic_fee_params,
    convert_collect_fee_mode_to_dammv2,
    get_variable_fee_numerator,
)


def make_dynamic_fee(**kwargs) -> DynamicFeeConfig:
    params = {
        "bin_step": 1,
        "bin_step_u128": BIN_STEP_BPS_U128_DEFAULT,
        "filter_period": 10,
        "decay_period": 120,
        "reduction_factor": 5_000,
        "max_volatility_accumulator": 100_000,
        "variable_fee_control": 956,
    }
    params.update(kwargs)
    return DynamicFeeConfig(**params)


class TestDestinationParams:
    """Tests for the dynamic fee handed over at migration."""

    def test_max_accumulator_matches_fifteen_percent_move(self):
        """A 15% price move fills the accumulator to its default maximum."""
        sqrt_ratio = int(math.sqrt(1.15) * float(ONE_Q64))
        delta_bin_id = VolatilityTracker.get_delta_bin_id(
            BIN_STEP_BPS_U128_DEFAULT, ONE_Q64, sqrt_ratio
        )
        assert delta_bin_id * 10_000 == MAX_VOLATILITY_ACCUMULATOR
        assert SQUARE_VFA_BIN == MAX_VOLATILITY_ACCUMULATOR**2

    def test_variable_fee_capped_at_twenty_percent_of_base(self):
        """At the maximum accumulator the variable fee is just under 20% of the base fee."""
        base_fee_numerator = 100_000_000  # 1000 bps
        params = calculate_dynamic_fee_params(base_fee_numerator)
        tracker = VolatilityTracker(volatility_accumulator=MAX_VOLATILITY_ACCUMULATOR)

        variable_fee = params.get_variable_fee_numerator(tracker)
        max_dynamic_fee = base_fee_numerator * 20 // 100
        assert variable_fee <= max_dynamic_fee
        assert variable_fee >= max_dynamic_fee * 99 // 100

    def test_defaults(self):
        """Periods and reduction use the destination defaults."""
        params = calculate_dynamic_fee_params(10_000_000)
        assert params.filter_period == FILTER_PERIOD_DEFAULT
        assert params.decay_period == DECAY_PERIOD_DEFAULT
        assert params.reduction_factor == REDUCTION_FACTOR_DEFAULT
        assert params.max_volatility_accumulator == MAX_VOLATILITY_ACCUMULATOR
        params.validate()

    def test_no_overflow_across_fee_range(self):
        """Every base fee from 10 to 9999 bps yields a u32 control."""
        for bps in range(10, 10_000, 37):
            calculate_dynamic_fee_params(bps * 100_000)

    def test_collect_fee_mode_mapping(self):
        """Quote-only collection maps to OnlyB, output-token to BothToken."""
        assert convert_collect_fee_mode_to_dammv2(CollectFeeMode.QUOTE_TOKEN) == 1
        assert convert_collect_fee_mode_to_dammv2(CollectFeeMode.OUTPUT_TOKEN) == 0
        with pytest.raises(InvalidCollectFeeMode):
            convert_collect_fee_mode_to_dammv2(2)


class TestVariableFee:
    """Tests for the variable fee numerator."""

    def test_zero_accumulator(self):
        """No volatility, no variable fee."""
        assert make_dynamic_fee().get_variable_fee_numerator(VolatilityTracker()) == 0

    def test_disabled(self):
        """Pools without a dynamic fee pay no variable fee."""
        assert get_variable_fee_numerator(
            None, VolatilityTracker(volatility_accumulator=10**6)
        ) == 0

    def test_rounds_up(self):
        """(vfa * bin_step)^2 * control / 1e11, rounded up."""
        tracker = VolatilityTracker(volatility_accumulator=10_000)
        # 10_000^2 * 956 = 9.56e10 -> 1
        assert make_dynamic_fee().get_variable_fee_numerator(tracker) == 1
        tracker.volatility_accumulator = 100_000
        # 1e10 * 956 = 9.56e12 -> 95.6 -> 96
        assert make_dynamic_fee().get_variable_fee_numerator(tracker) == 96


class TestVolatilityTracker:
    """Tests for reference and accumulator updates."""

    def test_delta_bin_id_is_symmetric(self):
        """Order of the two prices does not matter."""
        higher = ONE_Q64 + 10 * BIN_STEP_BPS_U128_DEFAULT
        a = VolatilityTracker.get_delta_bin_id(BIN_STEP_BPS_U128_DEFAULT, ONE_Q64, higher)
        b = VolatilityTracker.get_delta_bin_id(BIN_STEP_BPS_U128_DEFAULT, higher, ONE_Q64)
        assert a == b == 20

    def test_accumulator_capped(self):
        """The accumulator never exceeds max_volatility_accumulator."""
        dynamic_fee = make_dynamic_fee()
        tracker = VolatilityTracker(sqrt_price_reference=ONE_Q64)
        tracker.update_volatility_accumulator(dynamic_fee, 2 * ONE_Q64)
        assert tracker.volatility_accumulator == dynamic_fee.max_volatility_accumulator

    def test_accumulator_adds_reference(self):
        """The accumulator starts from the volatility reference."""
        tracker = VolatilityTracker(sqrt_price_reference=ONE_Q64, volatility_reference=3_000)
        dynamic_fee = make_dynamic_fee(max_volatility_accumulator=1_000_000)
        tracker.update_volatility_accumulator(dynamic_fee, ONE_Q64 + 5 * BIN_STEP_BPS_U128_DEFAULT)
        assert tracker.volatility_accumulator == 3_000 + 10 * 10_000

    def test_high_frequency_keeps_references(self):
        """Trades inside the filter period leave the references alone."""
        tracker = VolatilityTracker(
            last_update_timestamp=100,
            sqrt_price_reference=ONE_Q64,
            volatility_accumulator=50_000,
            volatility_reference=7,
        )
        tracker.update_references(make_dynamic_fee(), 2 * ONE_Q64, 105)
        assert tracker.sqrt_price_reference == ONE_Q64
        assert tracker.volatility_reference == 7

    def test_decays_between_filter_and_decay(self):
        """After the filter period the reference keeps reduction_factor of the accumulator."""
        tracker = VolatilityTracker(last_update_timestamp=100, volatility_accumulator=50_000)
        tracker.update_references(make_dynamic_fee(), 2 * ONE_Q64, 150)
        assert tracker.sqrt_price_reference == 2 * ONE_Q64
        assert tracker.volatility_reference == 25_000

    def test_resets_after_decay_period(self):
        """Long pauses clear the reference."""
        tracker = VolatilityTracker(
            last_update_timestamp=100, volatility_accumulator=50_000, volatility_reference=9
        )
        tracker.update_references(make_dynamic_fee(), 2 * ONE_Q64, 220)
        assert tracker.volatility_reference == 0


class TestDynamicFeeValidation:
    """Tests for parameter validation."""

    def test_valid(self):
        """The reference parameters are accepted."""
        make_dynamic_fee().validate()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"bin_step": 2},
            {"bin_step_u128": BIN_STEP_BPS_U128_DEFAULT + 1},
            {"filter_period": 120},
            {"reduction_factor": 10_001},
            {"variable_fee_control": U24_MAX + 1},
            {"max_volatility_accumulator": U24_MAX + 1},
        ],
    )
    def test_invalid(self, overrides):
        """Each out-of-range parameter is rejected."""
        with pytest.raises(InvalidInput):
            make_dynamic_fee(**overrides).validate()
