"""Unsigned 64-bit amount helpers."""
from .errors import ArithmeticOverflow

U64_MAX = 2**64 - 1


def checked_add(a: int, b: int) -> int:
    """Add two u64 values, raising ArithmeticOverflow instead of wrapping."""
    result = a + b
    if result > U64_MAX:
        raise ArithmeticOverflow(f"{a} + {b} exceeds the u64 range")
    return result
