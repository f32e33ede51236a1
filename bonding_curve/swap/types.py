"""Swap result and parameter types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from bonding_curve.enums import SwapMode


@dataclass(frozen=True)
class SwapResult:
    """Outcome of pricing one trade against the curve.

    Attributes:
        included_fee_input_amount: Amount the trader pays in
        excluded_fee_input_amount: Part of the input that reaches the curve
        amount_left: Input the curve could not absorb (partial fill only)
        output_amount: Amount the trader receives
        next_sqrt_price: Pool price after the trade
        trading_fee: Fee kept for the partner and creator
        protocol_fee: Fee kept for the protocol
        referral_fee: Share of the protocol fee paid to a referrer
    """

    included_fee_input_amount: int
    excluded_fee_input_amount: int
    amount_left: int
    output_amount: int
    next_sqrt_price: int
    trading_fee: int
    protocol_fee: int
    referral_fee: int

    @property
    def total_fee(self) -> int:
        return self.trading_fee + self.protocol_fee + self.referral_fee


class SwapAmount(NamedTuple):
    """Result of a raw curve walk, before fees."""

    output_amount: int
    next_sqrt_price: int
    amount_left: int = 0


@dataclass(frozen=True)
class SwapParameters:
    """Trade request as received at the dispatch boundary.

    For exact-in and partial fill, amount_0 is the input and amount_1 the
    minimum output. For exact-out, amount_0 is the output and amount_1 the
    maximum input.
    """

    amount_0: int
    amount_1: int
    swap_mode: int = SwapMode.EXACT_IN
