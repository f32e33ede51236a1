"""Swap resolution: curve walks, resolution modes and trade dispatch."""

from bonding_curve.swap.engine import (
    get_swap_result_from_exact_input,
    get_swap_result_from_exact_output,
    get_swap_result_from_partial_input,
)
from bonding_curve.swap.process import process_swap
from bonding_curve.swap.types import SwapAmount, SwapParameters, SwapResult

__all__ = [
    "SwapAmount",
    "SwapParameters",
    "SwapResult",
    "get_swap_result_from_exact_input",
    "get_swap_result_from_exact_output",
    "get_swap_result_from_partial_input",
    "process_swap",
]
