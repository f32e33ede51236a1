"""Bonding curve pricing engine - Python implementation."""

from bonding_curve.migration import build_pool_config
from bonding_curve.quote import Quoter, get_default_quoter
from bonding_curve.state import PoolConfig, VirtualPool
from bonding_curve.swap import SwapParameters, SwapResult, process_swap

__version__ = "0.1.0"
__all__ = [
    "PoolConfig",
    "Quoter",
    "SwapParameters",
    "SwapResult",
    "VirtualPool",
    "build_pool_config",
    "get_default_quoter",
    "process_swap",
    "__version__",
]
