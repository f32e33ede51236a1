"""Activation clock selection."""

from __future__ import annotations

from enum import IntEnum

from bonding_curve.errors import InvalidActivationType


class ActivationType(IntEnum):
    """Unit used for activation points and fee periods."""

    SLOT = 0
    TIMESTAMP = 1

    @classmethod
    def parse(cls, value: int) -> ActivationType:
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidActivationType(f"Unknown activation type: {value}") from e


def get_current_point(activation_type: int, current_slot: int, current_timestamp: int) -> int:
    """Pick the slot or the timestamp depending on the pool's activation type."""
    if ActivationType.parse(activation_type) is ActivationType.SLOT:
        return current_slot
    return current_timestamp
