"""Checked integer wrapper for u64 protocol quantities.

All amounts in the engine are u64. Products of two u64 values are
computed in a u128 intermediate and narrowed back with ``to_u64()``,
which raises instead of wrapping.

Usage pattern:
    from reserve_engine.safe_int import S

    def tokens_for(net: int, supply: int, backing: int) -> int:
        return (S(net).mul_wide(supply) // backing).to_u64()
"""

from __future__ import annotations

from reserve_engine.errors import DivisionByZero, Overflow, Underflow

U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1


class SafeInt:
    """Non-negative integer with checked arithmetic.

    - Subtraction below zero raises Underflow
    - Division by zero raises DivisionByZero
    - Narrowing above u64 (or a u128 intermediate above u128) raises Overflow

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            if value < 0:
                raise Underflow(f"Negative value: {value}")
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
        return SafeInt(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Floor division.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __truediv__(self, other: object) -> SafeInt:
        raise TypeError("SafeInt does not support true division; use //")

    def mul_wide(self, other: SafeInt | int) -> SafeInt:
        """Multiply two u64 operands into a u128 intermediate.

        Raises:
            Overflow: If either operand exceeds u64 or the product exceeds u128
        """
        other_val = _extract_value(other)
        if self._value > U64_MAX or other_val > U64_MAX:
            raise Overflow(f"Wide multiply operand exceeds u64: {self._value} * {other_val}")
        product = self._value * other_val
        if product > U128_MAX:
            raise Overflow(f"Product exceeds u128: {product}")
        return SafeInt(product)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

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
        return self._value != 0

    def to_u64(self) -> int:
        """Narrow to u64.

        Raises:
            Overflow: If value exceeds 2^64-1
        """
        if self._value > U64_MAX:
            raise Overflow(f"Value exceeds u64 max: {self._value}")
        return self._value

    def is_u64(self) -> bool:
        """Check if value fits in u64 without raising."""
        return self._value <= U64_MAX


def _extract_value(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


def mul_div_u64(a: int, b: int, c: int) -> int:
    """Compute floor(a * b / c) through a u128 intermediate, narrowed to u64."""
    return (S(a).mul_wide(b) // c).to_u64()


# Convenience alias for concise code
S = SafeInt
