"""Fee mode: which leg of a trade pays the fee, and in which token."""

from __future__ import annotations

from dataclasses import dataclass

from bonding_curve.enums import CollectFeeMode, TradeDirection

# (collect mode, direction) -> (fees_on_input, fees_on_base_token)
_FEE_MODE_TABLE = {
    (CollectFeeMode.OUTPUT_TOKEN, TradeDirection.BASE_TO_QUOTE): (False, False),
    (CollectFeeMode.OUTPUT_TOKEN, TradeDirection.QUOTE_TO_BASE): (False, True),
    (CollectFeeMode.QUOTE_TOKEN, TradeDirection.BASE_TO_QUOTE): (False, False),
    (CollectFeeMode.QUOTE_TOKEN, TradeDirection.QUOTE_TO_BASE): (True, False),
}


@dataclass(frozen=True)
class FeeMode:
    """Per-trade fee placement.

    Attributes:
        fees_on_input: Fee is taken from the input amount before the curve walk
        fees_on_base_token: Fee is denominated in the base token
        has_referral: A referral account shares the protocol fee
    """

    fees_on_input: bool = False
    fees_on_base_token: bool = False
    has_referral: bool = False

    @classmethod
    def get_fee_mode(
        cls,
        collect_fee_mode: int,
        trade_direction: TradeDirection,
        has_referral: bool,
    ) -> FeeMode:
        """Resolve fee placement for a trade.

        Raises:
            InvalidCollectFeeMode: If collect_fee_mode is unknown
        """
        mode = CollectFeeMode.parse(collect_fee_mode)
        fees_on_input, fees_on_base_token = _FEE_MODE_TABLE[(mode, TradeDirection(trade_direction))]
        return cls(
            fees_on_input=fees_on_input,
            fees_on_base_token=fees_on_base_token,
            has_referral=has_referral,
        )
