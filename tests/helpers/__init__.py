"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token and pair addresses, times
- factories: Pair and clock factories
"""

from tests.helpers.constants import (
    DAI,
    DAI_WETH_PAIR,
    DAY,
    T0,
    USDC,
    USDC_WETH_PAIR,
    WBTC,
    WBTC_WETH_PAIR,
    WETH,
)
from tests.helpers.factories import FakeClock, make_pair

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "WBTC",
    "USDC_WETH_PAIR",
    "DAI_WETH_PAIR",
    "WBTC_WETH_PAIR",
    "T0",
    "DAY",
    # Factories
    "FakeClock",
    "make_pair",
]
