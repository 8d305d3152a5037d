"""Oracle error classes.

These map to the revert reasons of the on-chain fixed-window oracle and the
FixedPoint library it is built on.
"""

from __future__ import annotations


class OracleError(Exception):
    """Base error for oracle operations."""

    pass


class NoLiquidity(OracleError):
    """Pair has a zero reserve, so no price exists yet (NO_RESERVES)."""

    pass


class PeriodNotElapsed(OracleError):
    """update() called before a full period elapsed since the last snapshot."""

    def __init__(self, elapsed: int, period: int) -> None:
        super().__init__(f"Period not elapsed: {elapsed}s of {period}s")
        self.elapsed = elapsed
        self.period = period

    @property
    def remaining(self) -> int:
        """Seconds until update() can succeed."""
        return self.period - self.elapsed


class UnknownAsset(OracleError):
    """Token is not one of the pair's two tokens (INVALID_TOKEN)."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown token: {token}")
        self.token = token


class FixedPointError(OracleError, ArithmeticError):
    """Base error for fixed-point arithmetic."""

    pass


class DivisionByZero(FixedPointError):
    """Fixed-point division by zero (DIV_BY_ZERO)."""

    pass


class Overflow(FixedPointError):
    """Value does not fit its target width (OVERFLOW)."""

    pass


__all__ = [
    "OracleError",
    "NoLiquidity",
    "PeriodNotElapsed",
    "UnknownAsset",
    "FixedPointError",
    "DivisionByZero",
    "Overflow",
]
