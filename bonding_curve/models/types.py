"""Shared integer types for API and parameter models.

Amounts and prices travel as decimal strings in JSON (u64 and u128 values do
not survive a float round trip). Plain ints are accepted too. Each type
checks its on-chain width on the way in.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, PlainSerializer

from bonding_curve.constants import U8_MAX, U16_MAX, U32_MAX, U64_MAX, U128_MAX


def _uint_validator(bits: int, max_value: int):  # type: ignore[no-untyped-def]
    def validate(value: Any) -> int:
        """Parse a non-negative integer that fits the width.

        Raises:
            ValueError: If value is not an integer or is out of range
        """
        if isinstance(value, bool):
            raise ValueError(f"u{bits} must be an integer, got bool")

        if isinstance(value, int):
            int_value = value
        elif isinstance(value, str):
            try:
                int_value = int(value)
            except ValueError as err:
                raise ValueError(f"u{bits} must be a decimal integer string: '{value}'") from err
        else:
            raise ValueError(f"u{bits} must be string or int, got {type(value).__name__}")

        if int_value < 0:
            raise ValueError(f"u{bits} cannot be negative: {value}")
        if int_value > max_value:
            raise ValueError(f"u{bits} overflow: {value} > 2^{bits}-1")
        return int_value

    return validate


U8 = Annotated[int, BeforeValidator(_uint_validator(8, U8_MAX))]
U16 = Annotated[int, BeforeValidator(_uint_validator(16, U16_MAX))]
U32 = Annotated[int, BeforeValidator(_uint_validator(32, U32_MAX))]

# Wide integers are serialized back as decimal strings
U64 = Annotated[
    int,
    BeforeValidator(_uint_validator(64, U64_MAX)),
    PlainSerializer(str, return_type=str),
    Field(description="64-bit unsigned integer as decimal string"),
]
U128 = Annotated[
    int,
    BeforeValidator(_uint_validator(128, U128_MAX)),
    PlainSerializer(str, return_type=str),
    Field(description="128-bit unsigned integer as decimal string"),
]
