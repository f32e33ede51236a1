"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: The default curve, prices and fee settings
- factories: Config payload, config and pool factory functions
"""

from tests.helpers.constants import (
    CLIFF_FEE_NUMERATOR,
    CURVE,
    DYNAMIC_FEE,
    FEE_SETUPS,
    INITIAL_BASE_SUPPLY,
    LIQUIDITY,
    MIGRATION_BASE_AMOUNT,
    MIGRATION_SQRT_PRICE,
    ONE,
    RATE_LIMITER_BASE_FEE,
    SCHEDULER_BASE_FEE,
    START_SQRT_PRICE,
    SWAP_BASE_AMOUNT,
    THRESHOLD,
)
from tests.helpers.factories import (
    make_config_parameters,
    make_config_payload,
    make_pool,
    make_pool_config,
)

__all__ = [
    # Constants
    "CLIFF_FEE_NUMERATOR",
    "CURVE",
    "DYNAMIC_FEE",
    "FEE_SETUPS",
    "INITIAL_BASE_SUPPLY",
    "LIQUIDITY",
    "MIGRATION_BASE_AMOUNT",
    "MIGRATION_SQRT_PRICE",
    "ONE",
    "RATE_LIMITER_BASE_FEE",
    "SCHEDULER_BASE_FEE",
    "START_SQRT_PRICE",
    "SWAP_BASE_AMOUNT",
    "THRESHOLD",
    # Factories
    "make_config_parameters",
    "make_config_payload",
    "make_pool",
    "make_pool_config",
]
