"""Fixed-window TWAP oracle for UniswapV2-style pairs."""

from twap_oracle.config import DEFAULT_ORACLE_CONFIG, OracleConfig
from twap_oracle.errors import (
    DivisionByZero,
    NoLiquidity,
    OracleError,
    Overflow,
    PeriodNotElapsed,
    UnknownAsset,
)
from twap_oracle.library import current_cumulative_prices
from twap_oracle.oracle import FixedWindowOracle
from twap_oracle.pair import PairReader, PairSnapshot, UniswapV2Pair
from twap_oracle.registry import OracleRegistry

__version__ = "0.1.0"
__all__ = [
    "FixedWindowOracle",
    "OracleRegistry",
    "OracleConfig",
    "DEFAULT_ORACLE_CONFIG",
    "PairReader",
    "PairSnapshot",
    "UniswapV2Pair",
    "current_cumulative_prices",
    "OracleError",
    "NoLiquidity",
    "PeriodNotElapsed",
    "UnknownAsset",
    "DivisionByZero",
    "Overflow",
    "__version__",
]
