"""Request and response models for the quoting service."""

from __future__ import annotations

from pydantic import BaseModel, Field

from bonding_curve.enums import MigrationProgress, TradeDirection
from bonding_curve.fees.dynamic import VolatilityTracker
from bonding_curve.models.params import ConfigParameters
from bonding_curve.models.types import U64, U128
from bonding_curve.quote import QuoteContext
from bonding_curve.state.config import PoolConfig
from bonding_curve.state.pool import VirtualPool
from bonding_curve.swap.types import SwapResult


class VolatilityTrackerModel(BaseModel):
    last_update_timestamp: U64 = Field(default=0, alias="lastUpdateTimestamp")
    sqrt_price_reference: U128 = Field(default=0, alias="sqrtPriceReference")
    volatility_accumulator: U128 = Field(default=0, alias="volatilityAccumulator")
    volatility_reference: U128 = Field(default=0, alias="volatilityReference")

    model_config = {"populate_by_name": True}


class PoolStateModel(BaseModel):
    """Snapshot of a pool's pricing state.

    Claim and withdrawal flags are omitted; quotes never read them.
    """

    sqrt_price: U128 = Field(alias="sqrtPrice")
    base_reserve: U64 = Field(alias="baseReserve")
    quote_reserve: U64 = Field(default=0, alias="quoteReserve")
    protocol_base_fee: U64 = Field(default=0, alias="protocolBaseFee")
    protocol_quote_fee: U64 = Field(default=0, alias="protocolQuoteFee")
    trading_base_fee: U64 = Field(default=0, alias="tradingBaseFee")
    trading_quote_fee: U64 = Field(default=0, alias="tradingQuoteFee")
    activation_point: U64 = Field(default=0, alias="activationPoint")
    volatility_tracker: VolatilityTrackerModel = Field(
        default_factory=VolatilityTrackerModel, alias="volatilityTracker"
    )

    model_config = {"populate_by_name": True}

    def to_virtual_pool(self) -> VirtualPool:
        tracker = self.volatility_tracker
        return VirtualPool(
            sqrt_price=self.sqrt_price,
            base_reserve=self.base_reserve,
            quote_reserve=self.quote_reserve,
            protocol_base_fee=self.protocol_base_fee,
            protocol_quote_fee=self.protocol_quote_fee,
            trading_base_fee=self.trading_base_fee,
            trading_quote_fee=self.trading_quote_fee,
            activation_point=self.activation_point,
            volatility_tracker=VolatilityTracker(
                last_update_timestamp=tracker.last_update_timestamp,
                sqrt_price_reference=tracker.sqrt_price_reference,
                volatility_accumulator=tracker.volatility_accumulator,
                volatility_reference=tracker.volatility_reference,
            ),
            migration_progress=MigrationProgress.PRE_BONDING_CURVE,
        )


class QuoteRequest(BaseModel):
    """One trade to price.

    When pool is omitted the trade is priced against a freshly initialized
    pool for the given config, activated at point zero.
    """

    config: ConfigParameters
    pool: PoolStateModel | None = None
    amount: U64 = Field(description="Input amount, or output amount for exact-out quotes")
    trade_direction: TradeDirection = Field(
        default=TradeDirection.QUOTE_TO_BASE, alias="tradeDirection"
    )
    has_referral: bool = Field(default=False, alias="hasReferral")
    current_slot: U64 = Field(default=0, alias="currentSlot")
    current_timestamp: U64 = Field(default=0, alias="currentTimestamp")

    model_config = {"populate_by_name": True}

    def to_context(self) -> QuoteContext:
        return QuoteContext(
            current_slot=self.current_slot,
            current_timestamp=self.current_timestamp,
            has_referral=self.has_referral,
        )

    def to_virtual_pool(self, config: PoolConfig) -> VirtualPool:
        if self.pool is not None:
            return self.pool.to_virtual_pool()
        return VirtualPool.initialize(config, activation_point=0)


class SwapResultModel(BaseModel):
    """Priced trade with every amount as a decimal string."""

    included_fee_input_amount: U64 = Field(alias="includedFeeInputAmount")
    excluded_fee_input_amount: U64 = Field(alias="excludedFeeInputAmount")
    amount_left: U64 = Field(alias="amountLeft")
    output_amount: U64 = Field(alias="outputAmount")
    next_sqrt_price: U128 = Field(alias="nextSqrtPrice")
    trading_fee: U64 = Field(alias="tradingFee")
    protocol_fee: U64 = Field(alias="protocolFee")
    referral_fee: U64 = Field(alias="referralFee")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_swap_result(cls, result: SwapResult) -> SwapResultModel:
        return cls(
            included_fee_input_amount=result.included_fee_input_amount,
            excluded_fee_input_amount=result.excluded_fee_input_amount,
            amount_left=result.amount_left,
            output_amount=result.output_amount,
            next_sqrt_price=result.next_sqrt_price,
            trading_fee=result.trading_fee,
            protocol_fee=result.protocol_fee,
            referral_fee=result.referral_fee,
        )


class DerivedConfigResponse(BaseModel):
    """Values derived from config parameters at pool creation."""

    migration_sqrt_price: U128 = Field(alias="migrationSqrtPrice")
    swap_base_amount: U64 = Field(alias="swapBaseAmount")
    migration_base_threshold: U64 = Field(alias="migrationBaseThreshold")
    initial_base_supply: U64 = Field(alias="initialBaseSupply")
    max_swallow_quote_amount: U64 = Field(alias="maxSwallowQuoteAmount")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool_config(cls, config: PoolConfig) -> DerivedConfigResponse:
        return cls(
            migration_sqrt_price=config.migration_sqrt_price,
            swap_base_amount=config.swap_base_amount,
            migration_base_threshold=config.migration_base_threshold,
            initial_base_supply=config.get_initial_base_supply(),
            max_swallow_quote_amount=config.get_max_swallow_quote_amount(),
        )
