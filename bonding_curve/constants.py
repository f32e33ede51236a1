"""Engine constants for the bonding curve.

Sqrt prices are Q64.64 fixed point. Fee numerators are expressed over
FEE_DENOMINATOR (1e9) rather than basis points.
"""

# =============================================================================
# Price range
# =============================================================================

MIN_SQRT_PRICE = 4295048016
MAX_SQRT_PRICE = 79226673521066979257578248091

RESOLUTION = 64
ONE_Q64 = 1 << RESOLUTION

BASIS_POINT_MAX = 10_000

U8_MAX = 0xFF
U16_MAX = 0xFFFF
U24_MAX = 0xFFFFFF
U32_MAX = 0xFFFF_FFFF
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1
U256_MAX = 2**256 - 1

# =============================================================================
# Curve
# =============================================================================

MAX_CURVE_POINT = 16

SWAP_BUFFER_PERCENTAGE = 25  # 25%
PARTNER_SURPLUS_SHARE = 80  # 80%
MAX_SWALLOW_PERCENTAGE = 20  # 20%

MIN_TOKEN_DECIMALS = 6
MAX_TOKEN_DECIMALS = 9

# =============================================================================
# Fees
# =============================================================================

FEE_DENOMINATOR = 1_000_000_000
MAX_BASIS_POINT = 10_000

MAX_FEE_BPS = 9_900  # 99%
MAX_FEE_NUMERATOR = MAX_FEE_BPS * FEE_DENOMINATOR // MAX_BASIS_POINT

MIN_FEE_BPS = 1  # 0.01%
MIN_FEE_NUMERATOR = MIN_FEE_BPS * FEE_DENOMINATOR // MAX_BASIS_POINT

PROTOCOL_FEE_PERCENT = 20
HOST_FEE_PERCENT = 20

# Exponent bound for Q64.64 pow
MAX_EXPONENTIAL = 0x80000

# Rate limiter window caps (12 hours)
MAX_RATE_LIMITER_DURATION_IN_SECONDS = 43_200
MAX_RATE_LIMITER_DURATION_IN_SLOTS = 108_000

# =============================================================================
# Dynamic fee
# =============================================================================

BIN_STEP_BPS_DEFAULT = 1
# bin_step << 64 / BASIS_POINT_MAX
BIN_STEP_BPS_U128_DEFAULT = 1844674407370955

# Dynamic fee scaling: (vfa * bin_step)^2 * control / 1e11
DYNAMIC_FEE_SCALING_FACTOR = 100_000_000_000

# Parameters handed to the concentrated destination AMM on migration
FILTER_PERIOD_DEFAULT = 10
DECAY_PERIOD_DEFAULT = 120
REDUCTION_FACTOR_DEFAULT = 5_000
MAX_DYNAMIC_FEE_PERCENT = 20
# Accumulator reached by a 15% price move at 1 bps bin step
MAX_VOLATILITY_ACCUMULATOR = 14_460_000
SQUARE_VFA_BIN = (MAX_VOLATILITY_ACCUMULATOR * BIN_STEP_BPS_DEFAULT) ** 2

# =============================================================================
# Newton iteration bound for integer square root
# =============================================================================

MAX_SQRT_ITERATIONS = 512

__all__ = [
    "MIN_SQRT_PRICE",
    "MAX_SQRT_PRICE",
    "RESOLUTION",
    "ONE_Q64",
    "BASIS_POINT_MAX",
    "U8_MAX",
    "U16_MAX",
    "U24_MAX",
    "U32_MAX",
    "U64_MAX",
    "U128_MAX",
    "U256_MAX",
    "MAX_CURVE_POINT",
    "SWAP_BUFFER_PERCENTAGE",
    "PARTNER_SURPLUS_SHARE",
    "MAX_SWALLOW_PERCENTAGE",
    "MIN_TOKEN_DECIMALS",
    "MAX_TOKEN_DECIMALS",
    "FEE_DENOMINATOR",
    "MAX_BASIS_POINT",
    "MAX_FEE_BPS",
    "MAX_FEE_NUMERATOR",
    "MIN_FEE_BPS",
    "MIN_FEE_NUMERATOR",
    "PROTOCOL_FEE_PERCENT",
    "HOST_FEE_PERCENT",
    "MAX_EXPONENTIAL",
    "MAX_RATE_LIMITER_DURATION_IN_SECONDS",
    "MAX_RATE_LIMITER_DURATION_IN_SLOTS",
    "BIN_STEP_BPS_DEFAULT",
    "BIN_STEP_BPS_U128_DEFAULT",
    "DYNAMIC_FEE_SCALING_FACTOR",
    "FILTER_PERIOD_DEFAULT",
    "DECAY_PERIOD_DEFAULT",
    "REDUCTION_FACTOR_DEFAULT",
    "MAX_DYNAMIC_FEE_PERCENT",
    "MAX_VOLATILITY_ACCUMULATOR",
    "SQUARE_VFA_BIN",
    "MAX_SQRT_ITERATIONS",
]
