"""Safe integer wrapper for curve and fee arithmetic.

Python integers never wrap, so the risk is the opposite one: a value that
would not fit the on-chain width silently keeps growing, or a subtraction
goes negative. SafeInt makes both loud:
- Division by zero raises DivideByZero
- Subtraction underflow raises MathOverflow
- Narrowing with to_u64()/to_u128()/to_u256() raises TypeCastFailed
- Products and shifts beyond u256 raise MathOverflow

Usage pattern:
    from bonding_curve.safe_int import S

    def delta(liquidity: int, lower: int, upper: int) -> int:
        # Wrap at entry
        sl, sa, sb = S(liquidity), S(lower), S(upper)

        # Natural arithmetic - automatically safe
        numerator = sl * (sb - sa)          # Raises if sa > sb
        result = numerator // (sa * sb)     # Raises if denominator is zero

        # Narrow at exit
        return result.to_u64()
"""

from __future__ import annotations

from enum import Enum

from bonding_curve.constants import U64_MAX, U128_MAX, U256_MAX
from bonding_curve.errors import DivideByZero, MathOverflow, TypeCastFailed


class Rounding(Enum):
    """Rounding policy for divisions."""

    UP = "up"
    DOWN = "down"


class SafeInt:
    """Non-negative integer with fail-fast arithmetic.

    Intermediates are allowed anywhere inside u256. Values must be narrowed
    explicitly before they are stored in a u64 or u128 field.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt
            MathOverflow: If value is negative or exceeds u256
        """
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            if value < 0 or value > U256_MAX:
                raise MathOverflow(f"Value out of u256 range: {value}")
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        """Add two values.

        Raises:
            MathOverflow: If the sum exceeds u256
        """
        return SafeInt(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            MathOverflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise MathOverflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise MathOverflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        """Multiply two values.

        Raises:
            MathOverflow: If the product exceeds u256
        """
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division (rounds down).

        Raises:
            DivideByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivideByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __mod__(self, other: SafeInt | int) -> SafeInt:
        """Modulo operation.

        Raises:
            DivideByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivideByZero(f"Modulo by zero: {self._value} % 0")
        return SafeInt(self._value % other_val)

    def __lshift__(self, bits: int) -> SafeInt:
        """Shift left.

        Raises:
            MathOverflow: If the shifted value exceeds u256
        """
        return SafeInt(self._value << bits)

    def __rshift__(self, bits: int) -> SafeInt:
        """Shift right (rounds down)."""
        return SafeInt(self._value >> bits)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return NotImplemented
        return not result

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        """True if non-zero."""
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds up).

        Equivalent to: (self + other - 1) // other

        Raises:
            DivideByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivideByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt((self._value + other_val - 1) // other_val)

    def div_rounding(self, other: SafeInt | int, rounding: Rounding) -> SafeInt:
        """Divide with an explicit rounding policy."""
        if rounding is Rounding.UP:
            return self.ceiling_div(other)
        return self // other

    def min(self, other: SafeInt | int) -> SafeInt:
        """Return minimum of self and other."""
        return SafeInt(min(self._value, _extract_value(other)))

    def max(self, other: SafeInt | int) -> SafeInt:
        """Return maximum of self and other."""
        return SafeInt(max(self._value, _extract_value(other)))

    def to_u64(self) -> int:
        """Narrow to u64.

        Raises:
            TypeCastFailed: If value exceeds 2^64-1
        """
        if self._value > U64_MAX:
            raise TypeCastFailed(f"Value exceeds u64 max: {self._value}")
        return self._value

    def to_u128(self) -> int:
        """Narrow to u128.

        Raises:
            TypeCastFailed: If value exceeds 2^128-1
        """
        if self._value > U128_MAX:
            raise TypeCastFailed(f"Value exceeds u128 max: {self._value}")
        return self._value

    def to_u256(self) -> int:
        """Return the value; always fits by construction."""
        return self._value

    @classmethod
    def zero(cls) -> SafeInt:
        """Create a SafeInt with value 0."""
        return cls(0)


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


def checked_add_u64(a: int, b: int) -> int:
    """Add two u64 values, raising MathOverflow past u64."""
    result = a + b
    if result > U64_MAX:
        raise MathOverflow(f"u64 overflow: {a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    """Subtract, raising MathOverflow below zero."""
    result = a - b
    if result < 0:
        raise MathOverflow(f"Underflow: {a} - {b} = {result}")
    return result


# Convenience alias for concise code
S = SafeInt
