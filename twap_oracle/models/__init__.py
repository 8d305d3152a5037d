"""Data models for the TWAP oracle."""

from twap_oracle.models.state import OracleState
from twap_oracle.models.types import Address, Uint32, Uint224, Uint256, normalize_address

__all__ = ["OracleState", "Address", "Uint32", "Uint224", "Uint256", "normalize_address"]
