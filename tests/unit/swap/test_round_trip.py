"""Tests that an exact-output quote, replayed as exact input, delivers at least as much.

Each case draws seeded amounts, prices them as exact output, then spends the
quoted input as an exact-input trade on the same pool.
"""

import random

import pytest

from bonding_curve.enums import TradeDirection
from bonding_curve.fees.mode import FeeMode
from tests.helpers import FEE_SETUPS, ONE, THRESHOLD, make_pool, make_pool_config

CURRENT_POINT = 35
DRAWS = 200


def setup_pool(setup: str, trade_direction: TradeDirection):
    """Pool and config for a fee setup, positioned so both directions have depth."""
    config = make_pool_config(**FEE_SETUPS[setup])
    pool = make_pool(config)
    if setup == "dynamic":
        pool.volatility_tracker.volatility_accumulator = 1_000_000
    if trade_direction == TradeDirection.BASE_TO_QUOTE:
        pool.sqrt_price = 2 * ONE
    return pool, config


def draw_amount_out(rng: random.Random, trade_direction: TradeDirection) -> int:
    if trade_direction == TradeDirection.QUOTE_TO_BASE:
        return rng.randrange(1, 150_000_000_000)
    return rng.randrange(1, THRESHOLD // 2)


def round_trip(pool, config, amount_out, trade_direction, has_referral):
    fee_mode = FeeMode.get_fee_mode(config.collect_fee_mode, trade_direction, has_referral)
    exact_out = pool.get_swap_result_from_exact_output(
        config, amount_out, fee_mode, trade_direction, CURRENT_POINT
    )
    exact_in = pool.get_swap_result_from_exact_input(
        config, exact_out.included_fee_input_amount, fee_mode, trade_direction, CURRENT_POINT
    )
    return fee_mode, exact_out, exact_in


@pytest.mark.parametrize("trade_direction", list(TradeDirection), ids=lambda d: d.name.lower())
@pytest.mark.parametrize("setup", list(FEE_SETUPS))
class TestExactOutputRoundTrip:
    """Exact output followed by exact input of the quoted amount."""

    def test_delivers_requested_output(self, setup, trade_direction):
        """The quoted input always buys at least the requested output."""
        pool, config = setup_pool(setup, trade_direction)
        rng = random.Random(f"{setup}-{trade_direction.name}-output")
        for _ in range(DRAWS):
            amount_out = draw_amount_out(rng, trade_direction)
            _, exact_out, exact_in = round_trip(
                pool, config, amount_out, trade_direction, rng.random() < 0.5
            )
            assert exact_out.output_amount == amount_out
            assert exact_in.output_amount >= amount_out, amount_out

    def test_fees_match(self, setup, trade_direction):
        """Both legs charge the same fee; fees on output differ only on curve surplus."""
        pool, config = setup_pool(setup, trade_direction)
        rng = random.Random(f"{setup}-{trade_direction.name}-fees")
        for _ in range(DRAWS):
            amount_out = draw_amount_out(rng, trade_direction)
            fee_mode, exact_out, exact_in = round_trip(
                pool, config, amount_out, trade_direction, rng.random() < 0.5
            )
            if fee_mode.fees_on_input:
                assert exact_in.trading_fee == exact_out.trading_fee, amount_out
                assert exact_in.protocol_fee == exact_out.protocol_fee, amount_out
                assert exact_in.referral_fee == exact_out.referral_fee, amount_out
                assert exact_in.excluded_fee_input_amount == exact_out.excluded_fee_input_amount
                continue

            requested = exact_out.output_amount + exact_out.total_fee
            delivered = exact_in.output_amount + exact_in.total_fee
            assert delivered >= requested, amount_out
            if delivered == requested:
                assert exact_in.output_amount == amount_out
                assert exact_in.total_fee == exact_out.total_fee
            else:
                assert exact_in.total_fee >= exact_out.total_fee

    def test_price_moves_at_least_as_far(self, setup, trade_direction):
        """Spending the quoted input moves the price at least as far as the quote did."""
        pool, config = setup_pool(setup, trade_direction)
        rng = random.Random(f"{setup}-{trade_direction.name}-price")
        for _ in range(DRAWS):
            amount_out = draw_amount_out(rng, trade_direction)
            _, exact_out, exact_in = round_trip(pool, config, amount_out, trade_direction, False)
            if trade_direction == TradeDirection.QUOTE_TO_BASE:
                assert exact_in.next_sqrt_price >= exact_out.next_sqrt_price
            else:
                assert exact_in.next_sqrt_price <= exact_out.next_sqrt_price
