"""Pydantic models for pool configuration parameters.

These mirror the create-config instruction payload. Field types check the
on-chain widths; validate_config() applies the cross-field rules before a
PoolConfig is derived.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from bonding_curve.activation import ActivationType
from bonding_curve.constants import (
    MAX_CURVE_POINT,
    MAX_SQRT_PRICE,
    MAX_TOKEN_DECIMALS,
    MIN_SQRT_PRICE,
    MIN_TOKEN_DECIMALS,
)
from bonding_curve.curve import LiquidityDistributionParameters
from bonding_curve.enums import (
    BaseFeeMode,
    CollectFeeMode,
    MigrationFeeOption,
    MigrationOption,
    TokenType,
)
from bonding_curve.errors import (
    InvalidCreatorTradingFeePercentage,
    InvalidCurve,
    InvalidFeePercentage,
    InvalidMigratorFeePercentage,
    InvalidQuoteThreshold,
    InvalidTokenDecimals,
    InvalidTokenSupply,
    InvalidTokenType,
)
from bonding_curve.fees import BaseFeeConfig, DynamicFeeConfig, PoolFeesConfig
from bonding_curve.models.types import U8, U16, U32, U64, U128
from bonding_curve.state.config import LockedVestingParams

# Migration fee percentage cap (of the quote threshold)
MAX_MIGRATION_FEE_PERCENTAGE = 50


class BaseFeeParameters(BaseModel):
    """Base fee; factor meaning depends on baseFeeMode."""

    cliff_fee_numerator: U64 = Field(alias="cliffFeeNumerator")
    first_factor: U16 = Field(default=0, alias="firstFactor")
    second_factor: U64 = Field(default=0, alias="secondFactor")
    third_factor: U64 = Field(default=0, alias="thirdFactor")
    base_fee_mode: U8 = Field(default=BaseFeeMode.FEE_SCHEDULER_LINEAR, alias="baseFeeMode")

    model_config = {"populate_by_name": True}

    def to_base_fee_config(self) -> BaseFeeConfig:
        return BaseFeeConfig(
            cliff_fee_numerator=self.cliff_fee_numerator,
            first_factor=self.first_factor,
            second_factor=self.second_factor,
            third_factor=self.third_factor,
            base_fee_mode=self.base_fee_mode,
        )


class DynamicFeeParameters(BaseModel):
    bin_step: U16 = Field(alias="binStep")
    bin_step_u128: U128 = Field(alias="binStepU128")
    filter_period: U16 = Field(alias="filterPeriod")
    decay_period: U16 = Field(alias="decayPeriod")
    reduction_factor: U16 = Field(alias="reductionFactor")
    max_volatility_accumulator: U32 = Field(alias="maxVolatilityAccumulator")
    variable_fee_control: U32 = Field(alias="variableFeeControl")

    model_config = {"populate_by_name": True}

    def to_dynamic_fee_config(self) -> DynamicFeeConfig:
        return DynamicFeeConfig(
            bin_step=self.bin_step,
            bin_step_u128=self.bin_step_u128,
            filter_period=self.filter_period,
            decay_period=self.decay_period,
            reduction_factor=self.reduction_factor,
            max_volatility_accumulator=self.max_volatility_accumulator,
            variable_fee_control=self.variable_fee_control,
        )


class PoolFeeParameters(BaseModel):
    base_fee: BaseFeeParameters = Field(alias="baseFee")
    dynamic_fee: DynamicFeeParameters | None = Field(default=None, alias="dynamicFee")

    model_config = {"populate_by_name": True}

    def to_pool_fees_config(self) -> PoolFeesConfig:
        dynamic_fee = None
        if self.dynamic_fee is not None:
            dynamic_fee = self.dynamic_fee.to_dynamic_fee_config()
        return PoolFeesConfig(base_fee=self.base_fee.to_base_fee_config(), dynamic_fee=dynamic_fee)


class LockedVestingParameters(BaseModel):
    amount_per_period: U64 = Field(default=0, alias="amountPerPeriod")
    cliff_duration_from_migration_time: U64 = Field(
        default=0, alias="cliffDurationFromMigrationTime"
    )
    frequency: U64 = 0
    number_of_period: U64 = Field(default=0, alias="numberOfPeriod")
    cliff_unlock_amount: U64 = Field(default=0, alias="cliffUnlockAmount")

    model_config = {"populate_by_name": True}

    def to_locked_vesting_params(self) -> LockedVestingParams:
        return LockedVestingParams(
            amount_per_period=self.amount_per_period,
            cliff_duration_from_migration_time=self.cliff_duration_from_migration_time,
            frequency=self.frequency,
            number_of_period=self.number_of_period,
            cliff_unlock_amount=self.cliff_unlock_amount,
        )


class TokenSupplyParameters(BaseModel):
    """Fixed supply: minted before migration, kept after burning leftovers."""

    pre_migration_token_supply: U64 = Field(alias="preMigrationTokenSupply")
    post_migration_token_supply: U64 = Field(alias="postMigrationTokenSupply")

    model_config = {"populate_by_name": True}

    def validate_against(self, minimum_without_buffer: int, minimum_with_buffer: int) -> None:
        """Require min_without_buffer <= post <= pre and min_with_buffer <= pre.

        Raises:
            InvalidTokenSupply: If the window does not hold
        """
        pre, post = self.pre_migration_token_supply, self.post_migration_token_supply
        if not (minimum_without_buffer <= post <= pre and minimum_with_buffer <= pre):
            raise InvalidTokenSupply(
                f"Supply pre={pre} post={post} outside window "
                f"(min without buffer {minimum_without_buffer}, "
                f"min with buffer {minimum_with_buffer})"
            )


class MigrationFeeParameters(BaseModel):
    """Share of the quote threshold taken at migration, and the creator's part of it."""

    fee_percentage: U8 = Field(default=0, alias="feePercentage")
    creator_fee_percentage: U8 = Field(default=0, alias="creatorFeePercentage")

    model_config = {"populate_by_name": True}


class LiquidityDistributionModel(BaseModel):
    sqrt_price: U128 = Field(alias="sqrtPrice")
    liquidity: U128

    model_config = {"populate_by_name": True}


class ConfigParameters(BaseModel):
    """Pool configuration as submitted by a partner."""

    pool_fees: PoolFeeParameters = Field(alias="poolFees")
    collect_fee_mode: U8 = Field(default=CollectFeeMode.QUOTE_TOKEN, alias="collectFeeMode")
    migration_option: U8 = Field(default=MigrationOption.METEORA_DAMM, alias="migrationOption")
    activation_type: U8 = Field(default=ActivationType.SLOT, alias="activationType")
    token_type: U8 = Field(default=TokenType.SPL_TOKEN, alias="tokenType")
    token_decimal: U8 = Field(default=6, alias="tokenDecimal")
    partner_lp_percentage: U8 = Field(default=0, alias="partnerLpPercentage")
    partner_locked_lp_percentage: U8 = Field(default=0, alias="partnerLockedLpPercentage")
    creator_lp_percentage: U8 = Field(default=0, alias="creatorLpPercentage")
    creator_locked_lp_percentage: U8 = Field(default=0, alias="creatorLockedLpPercentage")
    migration_quote_threshold: U64 = Field(alias="migrationQuoteThreshold")
    sqrt_start_price: U128 = Field(alias="sqrtStartPrice")
    locked_vesting: LockedVestingParameters = Field(
        default_factory=LockedVestingParameters, alias="lockedVesting"
    )
    migration_fee_option: U8 = Field(
        default=MigrationFeeOption.FIXED_BPS_25, alias="migrationFeeOption"
    )
    token_supply: TokenSupplyParameters | None = Field(default=None, alias="tokenSupply")
    creator_trading_fee_percentage: U8 = Field(default=0, alias="creatorTradingFeePercentage")
    migration_fee: MigrationFeeParameters = Field(
        default_factory=MigrationFeeParameters, alias="migrationFee"
    )
    curve: list[LiquidityDistributionModel]

    model_config = {"populate_by_name": True}

    def to_curve(self) -> tuple[LiquidityDistributionParameters, ...]:
        return tuple(
            LiquidityDistributionParameters(sqrt_price=point.sqrt_price, liquidity=point.liquidity)
            for point in self.curve
        )

    def validate_config(self) -> None:
        """Apply the cross-field configuration rules.

        Raises:
            ConfigError: The subclass naming the first rule that fails
        """
        self.pool_fees.to_pool_fees_config().validate(self.collect_fee_mode, self.activation_type)
        CollectFeeMode.parse(self.collect_fee_mode)

        migration_option = MigrationOption.parse(self.migration_option)
        token_type = TokenType.parse(self.token_type)
        is_constant_product = migration_option is MigrationOption.METEORA_DAMM
        if is_constant_product and token_type is not TokenType.SPL_TOKEN:
            raise InvalidTokenType("Constant product migration requires an SPL base token")

        ActivationType.parse(self.activation_type)

        if not MIN_TOKEN_DECIMALS <= self.token_decimal <= MAX_TOKEN_DECIMALS:
            raise InvalidTokenDecimals(f"Token decimals must be 6..9, got {self.token_decimal}")

        lp_percentage = (
            self.partner_lp_percentage
            + self.partner_locked_lp_percentage
            + self.creator_lp_percentage
            + self.creator_locked_lp_percentage
        )
        if lp_percentage != 100:
            raise InvalidFeePercentage(f"LP percentages must sum to 100, got {lp_percentage}")

        if self.creator_trading_fee_percentage > 100:
            raise InvalidCreatorTradingFeePercentage(
                f"Creator trading fee percentage above 100: {self.creator_trading_fee_percentage}"
            )

        if self.migration_fee.fee_percentage > MAX_MIGRATION_FEE_PERCENTAGE:
            raise InvalidMigratorFeePercentage(
                f"Migration fee percentage above {MAX_MIGRATION_FEE_PERCENTAGE}: "
                f"{self.migration_fee.fee_percentage}"
            )
        if self.migration_fee.creator_fee_percentage > 100:
            raise InvalidMigratorFeePercentage(
                f"Creator migration fee percentage above 100: "
                f"{self.migration_fee.creator_fee_percentage}"
            )

        if self.migration_quote_threshold == 0:
            raise InvalidQuoteThreshold("Migration quote threshold must be positive")

        self.locked_vesting.to_locked_vesting_params().validate()
        MigrationFeeOption.parse(self.migration_fee_option)

        self._validate_curve()

    def _validate_curve(self) -> None:
        if not MIN_SQRT_PRICE <= self.sqrt_start_price < MAX_SQRT_PRICE:
            raise InvalidCurve(f"Start price out of range: {self.sqrt_start_price}")

        if not 0 < len(self.curve) <= MAX_CURVE_POINT:
            raise InvalidCurve(
                f"Curve must have 1..{MAX_CURVE_POINT} points, got {len(self.curve)}"
            )

        first = self.curve[0]
        if not self.sqrt_start_price < first.sqrt_price <= MAX_SQRT_PRICE or first.liquidity == 0:
            raise InvalidCurve(
                "First curve point must lie above the start price with positive liquidity"
            )

        for previous, point in zip(self.curve, self.curve[1:]):
            if point.sqrt_price <= previous.sqrt_price or point.liquidity == 0:
                raise InvalidCurve("Curve prices must strictly increase with positive liquidity")

        if self.curve[-1].sqrt_price != MAX_SQRT_PRICE:
            raise InvalidCurve("Last curve point must be MAX_SQRT_PRICE")
