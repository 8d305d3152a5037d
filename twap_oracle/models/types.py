"""Shared type definitions for oracle models.

Integers wider than 53 bits are carried as decimal strings so that they
survive JSON round-trips unchanged.
"""

from collections.abc import Callable
from typing import Annotated, Any

from pydantic import BeforeValidator, Field


def _uint_validator(bits: int) -> Callable[[Any], str]:
    max_value = 2**bits - 1

    def validate(value: Any) -> str:
        """Validate that a value is a uint of the given width as decimal string.

        Raises:
            ValueError: If value is not a non-negative integer within range
        """
        if isinstance(value, bool):
            raise ValueError(f"Uint{bits} must be string or int, got bool")
        if isinstance(value, int):
            int_value = value
        elif isinstance(value, str):
            try:
                int_value = int(value)
            except ValueError as err:
                raise ValueError(f"Uint{bits} must be a decimal integer string: '{value}'") from err
        else:
            raise ValueError(f"Uint{bits} must be string or int, got {type(value).__name__}")

        if int_value < 0:
            raise ValueError(f"Uint{bits} cannot be negative: {value}")
        if int_value > max_value:
            raise ValueError(f"Uint{bits} overflow: {value} > 2^{bits}-1")
        return str(int_value)

    return validate


validate_uint256 = _uint_validator(256)
validate_uint224 = _uint_validator(224)
validate_uint32 = _uint_validator(32)

# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (cumulative prices)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# 224-bit unsigned integer as decimal string (raw UQ112x112)
Uint224 = Annotated[
    str,
    BeforeValidator(validate_uint224),
    Field(description="224-bit unsigned integer as decimal string"),
]

# 32-bit unsigned integer as decimal string (block timestamps)
Uint32 = Annotated[
    str,
    BeforeValidator(validate_uint32),
    Field(description="32-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid Ethereum address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False
