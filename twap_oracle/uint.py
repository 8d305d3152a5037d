"""Fixed-width unsigned integer helpers.

Python ints never overflow, but the price accumulators this package reads
are defined modulo 2^N. This module makes that wraparound explicit:
- wrapping_add / wrapping_sub reduce modulo 2^bits
- truncate keeps the low `bits` bits (an unchecked narrowing cast)
- require_uint validates that a value already fits, raising Overflow

Usage pattern:
    from twap_oracle.uint import wrapping_sub

    # Elapsed seconds between two uint32 timestamps, correct across wrap
    elapsed = wrapping_sub(now, last, 32)
"""

from __future__ import annotations

from twap_oracle.errors import Overflow

UINT32_MAX = 2**32 - 1
UINT112_MAX = 2**112 - 1
UINT144_MAX = 2**144 - 1
UINT224_MAX = 2**224 - 1
UINT256_MAX = 2**256 - 1


def _mask(bits: int) -> int:
    if bits <= 0:
        raise ValueError(f"Bit width must be positive, got {bits}")
    return (1 << bits) - 1


def uint_max(bits: int) -> int:
    """Largest value representable in an unsigned integer of `bits` bits."""
    return _mask(bits)


def truncate(value: int, bits: int) -> int:
    """Keep the low `bits` bits of value (two's complement for negatives)."""
    return value & _mask(bits)


def wrapping_add(a: int, b: int, bits: int = 256) -> int:
    """Add modulo 2^bits."""
    return (a + b) & _mask(bits)


def wrapping_sub(a: int, b: int, bits: int = 256) -> int:
    """Subtract modulo 2^bits.

    The result is the forward distance from b to a, so a counter that
    wrapped past zero still yields the true difference:

        wrapping_sub(5, 2**32 - 5, 32) == 10
    """
    return (a - b) & _mask(bits)


def is_uint(value: int, bits: int) -> bool:
    """Check if value fits in an unsigned integer of `bits` bits."""
    return isinstance(value, int) and 0 <= value <= _mask(bits)


def require_uint(value: int, bits: int, name: str = "value") -> int:
    """Return value if it fits in `bits` bits.

    Raises:
        TypeError: If value is not an int
        Overflow: If value is negative or exceeds 2^bits - 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    if value < 0:
        raise Overflow(f"{name} cannot be negative: {value}")
    if value > _mask(bits):
        raise Overflow(f"{name} exceeds uint{bits} max: {value}")
    return value


__all__ = [
    "UINT32_MAX",
    "UINT112_MAX",
    "UINT144_MAX",
    "UINT224_MAX",
    "UINT256_MAX",
    "uint_max",
    "truncate",
    "wrapping_add",
    "wrapping_sub",
    "is_uint",
    "require_uint",
]
