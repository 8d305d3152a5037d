"""Mathematical utilities for the TWAP oracle.

This package provides the fixed-point primitives used by price accumulators:
- UQ112x112: 112.112-bit binary fixed-point (Uniswap V2 FixedPoint)
- UQ144x112: wide product of a UQ112x112 and an integer amount
"""

from twap_oracle.math.fixed_point import (
    Q112,
    UQ112x112,
    UQ144x112,
    decode144,
    encode,
    fraction,
    mul,
)

__all__ = ["UQ112x112", "UQ144x112", "Q112", "encode", "fraction", "mul", "decode144"]
