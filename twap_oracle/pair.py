"""UniswapV2 pair accounting.

The oracle only reads a pair. PairReader is the contract it reads through,
and UniswapV2Pair is an in-memory pair that keeps the same books as the
on-chain contract: reserves, the uint32 timestamp of the last sync, and two
uint256 price accumulators that grow by spot price * seconds held.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import structlog

from twap_oracle.constants import CUMULATIVE_BITS, RESERVE_BITS, TIMESTAMP_BITS
from twap_oracle.math.fixed_point import fraction
from twap_oracle.models.types import normalize_address
from twap_oracle.uint import require_uint, truncate, wrapping_add, wrapping_sub

logger = structlog.get_logger()


@dataclass(frozen=True)
class PairSnapshot:
    """The pair's accounting fields as of its last sync."""

    reserve0: int
    reserve1: int
    block_timestamp_last: int
    price0_cumulative_last: int
    price1_cumulative_last: int

    @property
    def has_liquidity(self) -> bool:
        return self.reserve0 != 0 and self.reserve1 != 0


@runtime_checkable
class PairReader(Protocol):
    """Read-only view of a UniswapV2 pair.

    This allows swapping between an RPC-backed pair and an in-memory pair
    for testing. Readers that can return all five accounting fields from a
    single sync point may also expose `snapshot() -> PairSnapshot`.
    """

    @property
    def address(self) -> str: ...

    @property
    def token0(self) -> str: ...

    @property
    def token1(self) -> str: ...

    def get_reserves(self) -> tuple[int, int, int]:
        """Return (reserve0, reserve1, block_timestamp_last)."""
        ...

    def price0_cumulative_last(self) -> int: ...

    def price1_cumulative_last(self) -> int: ...


@dataclass
class UniswapV2Pair:
    """In-memory UniswapV2 pair.

    Mirrors UniswapV2Pair._update(): on each sync the accumulators advance by
    the previous spot price times the seconds since the previous sync, then
    the new balances become the reserves.
    """

    address: str
    token0: str
    token1: str
    reserve0: int = 0
    reserve1: int = 0
    block_timestamp_last: int = 0
    price0_cumulative: int = 0
    price1_cumulative: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.address = normalize_address(self.address)
        self.token0 = normalize_address(self.token0)
        self.token1 = normalize_address(self.token1)
        if self.token0 == self.token1:
            raise ValueError(f"Pair tokens must differ: {self.token0}")
        require_uint(self.reserve0, RESERVE_BITS, "reserve0")
        require_uint(self.reserve1, RESERVE_BITS, "reserve1")
        require_uint(self.block_timestamp_last, TIMESTAMP_BITS, "block_timestamp_last")
        require_uint(self.price0_cumulative, CUMULATIVE_BITS, "price0_cumulative")
        require_uint(self.price1_cumulative, CUMULATIVE_BITS, "price1_cumulative")

    def get_reserves(self) -> tuple[int, int, int]:
        with self._lock:
            return self.reserve0, self.reserve1, self.block_timestamp_last

    def price0_cumulative_last(self) -> int:
        with self._lock:
            return self.price0_cumulative

    def price1_cumulative_last(self) -> int:
        with self._lock:
            return self.price1_cumulative

    def snapshot(self) -> PairSnapshot:
        """All accounting fields from a single sync point."""
        with self._lock:
            return PairSnapshot(
                reserve0=self.reserve0,
                reserve1=self.reserve1,
                block_timestamp_last=self.block_timestamp_last,
                price0_cumulative_last=self.price0_cumulative,
                price1_cumulative_last=self.price1_cumulative,
            )

    def sync(self, balance0: int, balance1: int, timestamp: int) -> None:
        """Record new balances at the given time.

        Args:
            balance0: New reserve of token0, must fit in uint112
            balance1: New reserve of token1, must fit in uint112
            timestamp: Current time in seconds; only the low 32 bits are kept

        Raises:
            Overflow: If a balance exceeds uint112
        """
        require_uint(balance0, RESERVE_BITS, "balance0")
        require_uint(balance1, RESERVE_BITS, "balance1")
        block_timestamp = truncate(timestamp, TIMESTAMP_BITS)

        with self._lock:
            time_elapsed = wrapping_sub(block_timestamp, self.block_timestamp_last, TIMESTAMP_BITS)
            if time_elapsed > 0 and self.reserve0 != 0 and self.reserve1 != 0:
                self.price0_cumulative = wrapping_add(
                    self.price0_cumulative,
                    fraction(self.reserve1, self.reserve0).raw * time_elapsed,
                    CUMULATIVE_BITS,
                )
                self.price1_cumulative = wrapping_add(
                    self.price1_cumulative,
                    fraction(self.reserve0, self.reserve1).raw * time_elapsed,
                    CUMULATIVE_BITS,
                )
            self.reserve0 = balance0
            self.reserve1 = balance1
            self.block_timestamp_last = block_timestamp

        logger.debug(
            "pair_synced",
            pair=self.address,
            reserve0=balance0,
            reserve1=balance1,
            block_timestamp=block_timestamp,
            time_elapsed=time_elapsed,
        )

    def get_token_out(self, token_in: str) -> str:
        """Get the other token of the pair."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == self.token0:
            return self.token1
        elif token_in_norm == self.token1:
            return self.token0
        else:
            raise ValueError(f"Token {token_in} not in pair")


__all__ = [
    "PairSnapshot",
    "PairReader",
    "UniswapV2Pair",
]
