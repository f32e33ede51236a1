"""Enumerations shared by the fee, swap and config layers.

Values match the on-chain u8 encodings so configs decoded from accounts or
API payloads can be parsed directly.
"""

from __future__ import annotations

from enum import IntEnum

from bonding_curve.errors import (
    InvalidBaseFeeMode,
    InvalidCollectFeeMode,
    InvalidMigrationFeeOption,
    InvalidMigrationOption,
    InvalidSwapMode,
    InvalidTokenType,
)

__all__ = [
    "TradeDirection",
    "CollectFeeMode",
    "BaseFeeMode",
    "MigrationOption",
    "MigrationFeeOption",
    "TokenType",
    "MigrationProgress",
    "SwapMode",
]


class TradeDirection(IntEnum):
    """Which token the trader sells."""

    BASE_TO_QUOTE = 0
    QUOTE_TO_BASE = 1


class CollectFeeMode(IntEnum):
    """Token the pool collects its fees in."""

    QUOTE_TOKEN = 0
    OUTPUT_TOKEN = 1

    @classmethod
    def parse(cls, value: int) -> CollectFeeMode:
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidCollectFeeMode(f"Unknown collect fee mode: {value}") from e


class BaseFeeMode(IntEnum):
    """Base fee strategy.

    FEE_SCHEDULER_LINEAR: fee = cliff - period * reduction
    FEE_SCHEDULER_EXPONENTIAL: fee = cliff * (1 - reduction/10000)^period
    RATE_LIMITER: fee grows with the traded amount
    """

    FEE_SCHEDULER_LINEAR = 0
    FEE_SCHEDULER_EXPONENTIAL = 1
    RATE_LIMITER = 2

    @classmethod
    def parse(cls, value: int) -> BaseFeeMode:
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidBaseFeeMode(f"Unknown base fee mode: {value}") from e


class MigrationOption(IntEnum):
    """Destination AMM after the curve completes."""

    METEORA_DAMM = 0
    DAMM_V2 = 1

    @classmethod
    def parse(cls, value: int) -> MigrationOption:
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidMigrationOption(f"Unknown migration option: {value}") from e


class MigrationFeeOption(IntEnum):
    """Fixed base fee of the destination pool."""

    FIXED_BPS_25 = 0
    FIXED_BPS_30 = 1
    FIXED_BPS_100 = 2
    FIXED_BPS_200 = 3
    FIXED_BPS_400 = 4
    FIXED_BPS_600 = 5

    @classmethod
    def parse(cls, value: int) -> MigrationFeeOption:
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidMigrationFeeOption(f"Unknown migration fee option: {value}") from e

    @property
    def bps(self) -> int:
        return _MIGRATION_FEE_BPS[self]

    def validate_base_fee(self, base_fee_bps: int) -> None:
        """Require the destination pool fee to match this option exactly.

        Raises:
            InvalidMigrationFeeOption: If base_fee_bps differs from the option
        """
        if base_fee_bps != self.bps:
            raise InvalidMigrationFeeOption(
                f"Base fee {base_fee_bps} bps does not match {self.name} ({self.bps} bps)"
            )


_MIGRATION_FEE_BPS = {
    MigrationFeeOption.FIXED_BPS_25: 25,
    MigrationFeeOption.FIXED_BPS_30: 30,
    MigrationFeeOption.FIXED_BPS_100: 100,
    MigrationFeeOption.FIXED_BPS_200: 200,
    MigrationFeeOption.FIXED_BPS_400: 400,
    MigrationFeeOption.FIXED_BPS_600: 600,
}


class TokenType(IntEnum):
    """Base token program flavour."""

    SPL_TOKEN = 0
    TOKEN_2022 = 1

    @classmethod
    def parse(cls, value: int) -> TokenType:
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidTokenType(f"Unknown token type: {value}") from e


class MigrationProgress(IntEnum):
    """Pool lifecycle after the curve completes.

    Without vesting: PRE_BONDING_CURVE -> LOCKED_VESTING -> CREATED_POOL
    With vesting: PRE_BONDING_CURVE -> POST_BONDING_CURVE -> LOCKED_VESTING -> CREATED_POOL
    """

    PRE_BONDING_CURVE = 0
    POST_BONDING_CURVE = 1
    LOCKED_VESTING = 2
    CREATED_POOL = 3


class SwapMode(IntEnum):
    """How the second swap amount is interpreted."""

    EXACT_IN = 0
    PARTIAL_FILL = 1
    EXACT_OUT = 2

    @classmethod
    def parse(cls, value: int) -> SwapMode:
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidSwapMode(f"Unknown swap mode: {value}") from e
