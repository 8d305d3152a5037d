"""UQ112x112 binary fixed-point math.

This module implements the binary fixed-point format used by Uniswap V2 price
accumulators, matching the on-chain FixedPoint library:
https://github.com/Uniswap/uniswap-lib/blob/master/contracts/libraries/FixedPoint.sol

A UQ112x112 is a uint224 whose low 112 bits are the fractional part, so the
represented number is raw / 2^112. Multiplying one by an integer amount gives
a UQ144x112, whose integer part is recovered with decode144().
"""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import ClassVar

from twap_oracle.errors import DivisionByZero, Overflow
from twap_oracle.uint import UINT144_MAX, UINT224_MAX, require_uint

__all__ = [
    # Classes
    "UQ112x112",
    "UQ144x112",
    # Functions
    "encode",
    "encode144",
    "fraction",
    "mul",
    "decode",
    "decode144",
    # Constants
    "RESOLUTION",
    "Q112",
    "Q224",
]

# =============================================================================
# Constants
# =============================================================================

RESOLUTION = 112
Q112 = 1 << RESOLUTION
Q224 = 1 << (2 * RESOLUTION)

# Enough digits to print any uint256 / 2^112 exactly
_DECIMAL_PRECISION = 80


def _to_decimal(raw: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        return Decimal(raw) / Decimal(Q112)


# =============================================================================
# Value classes
# =============================================================================


class UQ112x112:
    """Unsigned fixed-point number with 112 integer and 112 fractional bits.

    Stored as the raw uint224 integer. Example: 2.0 is stored as 2 << 112.
    """

    BITS: ClassVar[int] = 224

    __slots__ = ("_raw",)
    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(self, raw: int = 0) -> None:
        """Create from a raw uint224 value."""
        self._raw = require_uint(raw, self.BITS, "UQ112x112 raw value")

    @property
    def raw(self) -> int:
        """The raw uint224 integer (read-only)."""
        return self._raw

    @classmethod
    def zero(cls) -> UQ112x112:
        return cls(0)

    def is_zero(self) -> bool:
        return self.raw == 0

    def decode(self) -> int:
        """Integer part, truncating the fraction."""
        return decode(self)

    def div(self, x: int) -> UQ112x112:
        """Divide by a uint112, truncating.

        Raises:
            DivisionByZero: If x is zero
        """
        require_uint(x, 112, "divisor")
        if x == 0:
            raise DivisionByZero("FixedPoint: DIV_BY_ZERO")
        return UQ112x112(self.raw // x)

    def mul(self, y: int) -> UQ144x112:
        """Multiply by a uint256, see mul()."""
        return mul(self, y)

    def reciprocal(self) -> UQ112x112:
        """Return 1 / self, truncating.

        Raises:
            DivisionByZero: If self is zero
            Overflow: If self is 2^-112, whose reciprocal needs 225 bits
        """
        if self.raw == 0:
            raise DivisionByZero("FixedPoint: ZERO_RECIPROCAL")
        result = Q224 // self.raw
        if result > UINT224_MAX:
            raise Overflow("FixedPoint: RECIPROCAL_OVERFLOW")
        return UQ112x112(result)

    def to_decimal(self) -> Decimal:
        """Convert to Decimal for display."""
        return _to_decimal(self.raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UQ112x112):
            return NotImplemented
        return self.raw == other.raw

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, UQ112x112):
            return NotImplemented
        return self.raw < other.raw

    def __le__(self, other: object) -> bool:
        if not isinstance(other, UQ112x112):
            return NotImplemented
        return self.raw <= other.raw

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, UQ112x112):
            return NotImplemented
        return self.raw > other.raw

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, UQ112x112):
            return NotImplemented
        return self.raw >= other.raw

    def __repr__(self) -> str:
        return f"UQ112x112({self.raw})"

    def __str__(self) -> str:
        return str(self.to_decimal())


class UQ144x112:
    """Wide fixed-point product: 144 integer bits and 112 fractional bits.

    The raw value is not bounded here. A product that does not fit is only
    rejected when its integer part is decoded.
    """

    __slots__ = ("_raw",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, raw: int) -> None:
        if raw < 0:
            raise ValueError(f"UQ144x112 cannot be negative: {raw}")
        self._raw = raw

    @property
    def raw(self) -> int:
        return self._raw

    def decode144(self) -> int:
        return decode144(self)

    def to_decimal(self) -> Decimal:
        return _to_decimal(self.raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UQ144x112):
            return NotImplemented
        return self.raw == other.raw

    def __repr__(self) -> str:
        return f"UQ144x112({self.raw})"


# =============================================================================
# Library functions (matching FixedPoint.sol)
# =============================================================================


def encode(x: int) -> UQ112x112:
    """Encode a uint112 as a UQ112x112."""
    require_uint(x, 112, "value")
    return UQ112x112(x << RESOLUTION)


def encode144(x: int) -> UQ144x112:
    """Encode a uint144 as a UQ144x112."""
    require_uint(x, 144, "value")
    return UQ144x112(x << RESOLUTION)


def fraction(numerator: int, denominator: int) -> UQ112x112:
    """Return numerator / denominator as a UQ112x112.

    Computes (numerator << 112) // denominator. The shift is exact, so the
    only rounding is the final floor division.

    Args:
        numerator: Dividend, normally a uint112 reserve
        denominator: Divisor, normally a uint112 reserve

    Returns:
        The ratio as a UQ112x112

    Raises:
        DivisionByZero: If denominator is zero
        Overflow: If the ratio does not fit in uint224
    """
    require_uint(numerator, 256, "numerator")
    require_uint(denominator, 256, "denominator")
    if denominator == 0:
        raise DivisionByZero("FixedPoint: DIV_BY_ZERO")
    result = (numerator << RESOLUTION) // denominator
    if result > UINT224_MAX:
        raise Overflow(f"FixedPoint: fraction {numerator}/{denominator} exceeds uint224")
    return UQ112x112(result)


def mul(fp: UQ112x112, y: int) -> UQ144x112:
    """Multiply a UQ112x112 by an unsigned integer.

    The product is kept at full width; it never traps. Use decode144() to
    get the integer result.

    Raises:
        TypeError: If y is not an int
        Overflow: If y is negative or exceeds uint256
    """
    require_uint(y, 256, "multiplier")
    return UQ144x112(fp.raw * y)


def decode(fp: UQ112x112) -> int:
    """Integer part of a UQ112x112 (always fits in uint112)."""
    return fp.raw >> RESOLUTION


def decode144(product: UQ144x112) -> int:
    """Integer part of a UQ144x112, discarding the fraction.

    Raises:
        Overflow: If the integer part exceeds uint144
    """
    result = product.raw >> RESOLUTION
    if result > UINT144_MAX:
        raise Overflow(f"FixedPoint: decode144 result {result} exceeds uint144")
    return result
