"""Tests for fixed-width unsigned integer helpers."""

import pytest

from twap_oracle.errors import FixedPointError, OracleError, Overflow
from twap_oracle.uint import (
    UINT32_MAX,
    UINT112_MAX,
    UINT256_MAX,
    is_uint,
    require_uint,
    truncate,
    uint_max,
    wrapping_add,
    wrapping_sub,
)


class TestWrappingArithmetic:
    """Tests for modular add/subtract."""

    def test_add_without_wrap(self):
        """Addition below the width is ordinary addition."""
        assert wrapping_add(10, 5) == 15
        assert wrapping_add(10, 5, 32) == 15

    def test_add_wraps_at_uint256(self):
        """Adding past 2^256 - 1 wraps to zero."""
        assert wrapping_add(UINT256_MAX, 1) == 0
        assert wrapping_add(UINT256_MAX, 10) == 9

    def test_add_wraps_at_uint32(self):
        """Width is configurable."""
        assert wrapping_add(UINT32_MAX, 2, 32) == 1

    def test_sub_without_wrap(self):
        """Subtraction with a non-negative result is unchanged."""
        assert wrapping_sub(10, 3) == 7
        assert wrapping_sub(5, 5, 32) == 0

    def test_sub_across_wrap_gives_forward_distance(self):
        """A counter that rolled over still yields the true elapsed amount."""
        assert wrapping_sub(5, UINT32_MAX - 4, 32) == 10
        assert wrapping_sub(3, UINT256_MAX, 256) == 4

    def test_sub_negative_wraps(self):
        """A 'negative' result wraps to a large value."""
        assert wrapping_sub(0, 1, 32) == UINT32_MAX

    def test_invalid_width_raises(self):
        """Zero or negative widths are rejected."""
        with pytest.raises(ValueError):
            wrapping_add(1, 1, 0)
        with pytest.raises(ValueError):
            truncate(1, -8)


class TestTruncate:
    """Tests for narrowing casts."""

    def test_keeps_low_bits(self):
        assert truncate(2**32 + 7, 32) == 7
        assert truncate(UINT32_MAX, 32) == UINT32_MAX

    def test_negative_uses_twos_complement(self):
        assert truncate(-1, 32) == UINT32_MAX

    def test_uint_max(self):
        assert uint_max(32) == UINT32_MAX
        assert uint_max(112) == UINT112_MAX


class TestRequireUint:
    """Tests for width validation."""

    def test_in_range_returns_value(self):
        assert require_uint(0, 112) == 0
        assert require_uint(UINT112_MAX, 112) == UINT112_MAX

    def test_too_large_raises_overflow(self):
        with pytest.raises(Overflow) as exc_info:
            require_uint(UINT112_MAX + 1, 112, "reserve0")
        assert "reserve0" in str(exc_info.value)
        assert "uint112" in str(exc_info.value)

    def test_negative_raises_overflow(self):
        with pytest.raises(Overflow):
            require_uint(-1, 256)

    def test_non_int_raises_type_error(self):
        with pytest.raises(TypeError):
            require_uint("1", 256)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            require_uint(1.0, 256)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            require_uint(True, 256)

    def test_is_uint(self):
        assert is_uint(5, 32)
        assert not is_uint(-5, 32)
        assert not is_uint(2**32, 32)

    def test_overflow_is_arithmetic_and_oracle_error(self):
        """Overflow can be caught as ArithmeticError or OracleError."""
        assert issubclass(Overflow, FixedPointError)
        assert issubclass(Overflow, ArithmeticError)
        assert issubclass(Overflow, OracleError)
