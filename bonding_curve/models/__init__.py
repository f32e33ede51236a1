"""Pydantic models for config parameters and the quoting service."""

from bonding_curve.models.params import (
    BaseFeeParameters,
    ConfigParameters,
    DynamicFeeParameters,
    LiquidityDistributionModel,
    LockedVestingParameters,
    MigrationFeeParameters,
    PoolFeeParameters,
    TokenSupplyParameters,
)
from bonding_curve.models.quote import (
    DerivedConfigResponse,
    PoolStateModel,
    QuoteRequest,
    SwapResultModel,
    VolatilityTrackerModel,
)
from bonding_curve.models.types import U8, U16, U32, U64, U128

__all__ = [
    # Types
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    # Config parameters
    "BaseFeeParameters",
    "ConfigParameters",
    "DynamicFeeParameters",
    "LiquidityDistributionModel",
    "LockedVestingParameters",
    "MigrationFeeParameters",
    "PoolFeeParameters",
    "TokenSupplyParameters",
    # Service
    "DerivedConfigResponse",
    "PoolStateModel",
    "QuoteRequest",
    "SwapResultModel",
    "VolatilityTrackerModel",
]
