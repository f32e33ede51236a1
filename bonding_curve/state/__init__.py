"""Pool configuration and per-pool state."""

from bonding_curve.state.config import (
    LiquidityDistribution,
    LiquidityDistributionItem,
    LiquidityDistributionU64,
    LockedVestingParams,
    MigrationFeeDistribution,
    PartnerAndCreatorSplitFee,
    PoolConfig,
)
from bonding_curve.state.pool import PoolMetrics, VirtualPool

__all__ = [
    "LiquidityDistribution",
    "LiquidityDistributionItem",
    "LiquidityDistributionU64",
    "LockedVestingParams",
    "MigrationFeeDistribution",
    "PartnerAndCreatorSplitFee",
    "PoolConfig",
    "PoolMetrics",
    "VirtualPool",
]
