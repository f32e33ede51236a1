"""Bonding curve error classes.

Errors fall into four families:
- Arithmetic faults (also ArithmeticError): always fatal to the operation
- Configuration errors: reject pool configuration at creation time
- Trade errors: recoverable, reported to the caller of a swap
- Internal errors: a math invariant was broken, never caused by bad input
"""


class PoolError(Exception):
    """Base error for bonding curve operations."""

    pass


# =============================================================================
# Arithmetic faults
# =============================================================================


class ArithmeticFault(PoolError, ArithmeticError):
    """Base class for arithmetic failures."""

    pass


class MathOverflow(ArithmeticFault):
    """Operation left the valid integer range (includes subtraction underflow)."""

    pass


class DivideByZero(ArithmeticFault):
    """Division or modulo by zero."""

    pass


class TypeCastFailed(ArithmeticFault):
    """Narrowing to a smaller integer width would lose information."""

    pass


class InvalidPriceRange(ArithmeticFault):
    """Lower sqrt price is not strictly below the upper sqrt price."""

    pass


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigError(PoolError):
    """Base error for invalid pool configuration."""

    pass


class InvalidCurve(ConfigError):
    """Curve points are malformed or out of range."""

    pass


class InvalidFeeScheduler(ConfigError):
    """Fee scheduler factors must be all zero or all nonzero."""

    pass


class InvalidFeeRateLimiter(ConfigError):
    """Rate limiter parameters are inconsistent or out of range."""

    pass


class InvalidBaseFeeMode(ConfigError):
    """Unknown base fee mode."""

    pass


class InvalidCollectFeeMode(ConfigError):
    """Unknown collect fee mode."""

    pass


class InvalidFee(ConfigError):
    """Fee numerator is not a valid fraction of the denominator."""

    pass


class ExceedMaxFeeBps(ConfigError):
    """Fee numerator is outside [MIN_FEE_NUMERATOR, MAX_FEE_NUMERATOR]."""

    pass


class InvalidInput(ConfigError):
    """Generic invalid parameter (dynamic fee parameters)."""

    pass


class InvalidMigrationOption(ConfigError):
    """Unknown migration destination."""

    pass


class InvalidMigrationFeeOption(ConfigError):
    """Migration fee option does not match the base fee."""

    pass


class InvalidActivationType(ConfigError):
    """Unknown activation type."""

    pass


class InvalidTokenDecimals(ConfigError):
    """Token decimals outside the supported range."""

    pass


class InvalidTokenType(ConfigError):
    """Unknown token type."""

    pass


class InvalidFeePercentage(ConfigError):
    """Percentages do not add up or exceed 100."""

    pass


class InvalidQuoteThreshold(ConfigError):
    """Migration quote threshold must be positive."""

    pass


class InvalidTokenSupply(ConfigError):
    """Fixed token supply cannot cover swap, migration and vesting amounts."""

    pass


class InvalidVestingParameters(ConfigError):
    """Locked vesting parameters are inconsistent."""

    pass


class InvalidCreatorTradingFeePercentage(ConfigError):
    """Creator trading fee percentage above 100."""

    pass


class InvalidMigratorFeePercentage(ConfigError):
    """Migration fee percentage or its creator share is out of range."""

    pass


class InvalidSwapMode(ConfigError):
    """Unknown swap mode."""

    pass


# =============================================================================
# Trade errors
# =============================================================================


class TradeError(PoolError):
    """Base error for recoverable trade-time failures."""

    pass


class AmountIsZero(TradeError):
    """Trade amount is zero."""

    pass


class PoolIsCompleted(TradeError):
    """Curve already reached the migration threshold."""

    pass


class PoolIsIncompleted(TradeError):
    """Curve has not reached the migration threshold yet."""

    pass


class NotEnoughLiquidity(TradeError):
    """Curve cannot absorb the requested amount."""

    pass


class ExceededSlippage(TradeError):
    """Result is worse than the caller's limit."""

    pass


class SwapAmountIsOverAThreshold(TradeError):
    """Swap pushes the quote reserve past the allowed swallow amount."""

    pass


class InsufficientLiquidityForMigration(TradeError):
    """Base reserve cannot cover migration, fees and vesting."""

    pass


class SurplusHasBeenWithdraw(TradeError):
    """Surplus was already withdrawn."""

    pass


class LeftoverHasBeenWithdraw(TradeError):
    """Leftover base token was already withdrawn."""

    pass


class NotPermitToDoThisAction(TradeError):
    """Action is not allowed in the pool's current lifecycle stage."""

    pass


# =============================================================================
# Internal errors
# =============================================================================


class InternalError(PoolError):
    """A math invariant was violated. Indicates a bug, not bad input."""

    pass


class RateLimiterUndetermined(InternalError):
    """Rate limiter inverse recovered a fee numerator below the cliff fee."""

    pass


class InverseFeeMismatch(InternalError):
    """Grossed-up amount does not reproduce the excluded-fee amount."""

    pass
