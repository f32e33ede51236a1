"""Pytest configuration and fixtures."""

import pytest

from bonding_curve.quote import QuoteContext
from bonding_curve.state.config import PoolConfig
from bonding_curve.state.pool import VirtualPool
from tests.helpers import make_config_payload, make_pool, make_pool_config


@pytest.fixture
def config_payload() -> dict:
    """Default config in API form."""
    return make_config_payload()


@pytest.fixture
def pool_config() -> PoolConfig:
    """Default derived config: 1% flat fee, price 1.0 to 4.0, quote fees."""
    return make_pool_config()


@pytest.fixture
def pool(pool_config: PoolConfig) -> VirtualPool:
    """Fresh pool for the default config, activated at point zero."""
    return make_pool(pool_config)


@pytest.fixture
def context() -> QuoteContext:
    """Quote context at slot and timestamp zero, without referral."""
    return QuoteContext()
