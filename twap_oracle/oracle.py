"""Fixed-window TWAP oracle.

The oracle keeps one cumulative-price snapshot per pair. Each update() takes
a fresh (counterfactual) snapshot, and if at least one period has elapsed
since the stored one, sets the average price to

    (cumulative_now - cumulative_last) / elapsed

and rolls the stored snapshot forward. Because the average covers the whole
window, moving the spot price for a single block barely moves it.

consult() converts an amount of one token into the other at that average.
Before the first successful update the averages are zero, so consult()
returns 0; callers must read that as "not initialized", not as a price.
"""

from __future__ import annotations

import threading
import time

import structlog

from twap_oracle.config import DEFAULT_ORACLE_CONFIG, OracleConfig
from twap_oracle.constants import AVERAGE_BITS, CUMULATIVE_BITS, TIMESTAMP_BITS
from twap_oracle.errors import NoLiquidity, PeriodNotElapsed, UnknownAsset
from twap_oracle.library import (
    Clock,
    current_block_timestamp,
    current_cumulative_prices,
    read_pair_snapshot,
)
from twap_oracle.math.fixed_point import UQ112x112, decode144, mul
from twap_oracle.models.state import OracleState
from twap_oracle.models.types import normalize_address
from twap_oracle.pair import PairReader
from twap_oracle.uint import truncate, wrapping_sub

logger = structlog.get_logger()


class FixedWindowOracle:
    """Time-weighted average price of one pair over a fixed window.

    All mutable state is guarded by a per-instance lock: update() replaces
    the snapshot and both averages together, and consult() never observes a
    half-applied update.

    Attributes:
        pair: The pair being read (never written)
        token0: Normalized address of the pair's token0
        token1: Normalized address of the pair's token1
        config: Oracle configuration (averaging period)
    """

    def __init__(
        self,
        pair: PairReader,
        token_a: str,
        token_b: str,
        *,
        config: OracleConfig | None = None,
        clock: Clock = time.time,
    ) -> None:
        """Start tracking a pair from its last synced state.

        Args:
            pair: Pair to read
            token_a: One token of the pair (either order)
            token_b: The other token of the pair
            config: Oracle configuration (default: DEFAULT_ORACLE_CONFIG)
            clock: Time source in seconds (default: time.time)

        Raises:
            UnknownAsset: If the tokens are not the pair's two tokens
            NoLiquidity: If either reserve is zero
        """
        self._bind(pair, token_a, token_b, config, clock)

        snapshot = read_pair_snapshot(pair)
        if not snapshot.has_liquidity:
            logger.warning(
                "oracle_no_liquidity",
                pair=self.address,
                reserve0=snapshot.reserve0,
                reserve1=snapshot.reserve1,
            )
            raise NoLiquidity(f"Pair {self.address} has no reserves")

        self._price0_cumulative_last = snapshot.price0_cumulative_last
        self._price1_cumulative_last = snapshot.price1_cumulative_last
        self._block_timestamp_last = snapshot.block_timestamp_last
        self._price0_average = UQ112x112.zero()
        self._price1_average = UQ112x112.zero()

        logger.info(
            "oracle_created",
            pair=self.address,
            token0=self.token0,
            token1=self.token1,
            period=self.config.period,
            block_timestamp_last=self._block_timestamp_last,
        )

    def _bind(
        self,
        pair: PairReader,
        token_a: str,
        token_b: str,
        config: OracleConfig | None,
        clock: Clock,
    ) -> None:
        self.pair = pair
        self.address = normalize_address(pair.address)
        self.token0 = normalize_address(pair.token0)
        self.token1 = normalize_address(pair.token1)
        self.config = config or DEFAULT_ORACLE_CONFIG
        self._clock = clock
        self._lock = threading.Lock()

        pair_tokens = {self.token0, self.token1}
        for token in (token_a, token_b):
            if normalize_address(token) not in pair_tokens:
                raise UnknownAsset(token)
        if normalize_address(token_a) == normalize_address(token_b):
            raise UnknownAsset(token_b)

    # --- Snapshot accessors ---

    @property
    def period(self) -> int:
        return self.config.period

    @property
    def price0_cumulative_last(self) -> int:
        with self._lock:
            return self._price0_cumulative_last

    @property
    def price1_cumulative_last(self) -> int:
        with self._lock:
            return self._price1_cumulative_last

    @property
    def block_timestamp_last(self) -> int:
        with self._lock:
            return self._block_timestamp_last

    @property
    def price0_average(self) -> UQ112x112:
        """Average price of token0 denominated in token1."""
        with self._lock:
            return self._price0_average

    @property
    def price1_average(self) -> UQ112x112:
        """Average price of token1 denominated in token0."""
        with self._lock:
            return self._price1_average

    # --- Operations ---

    def time_elapsed(self) -> int:
        """Seconds since the stored snapshot, on the pair's uint32 clock."""
        block_timestamp = current_block_timestamp(self._clock)
        with self._lock:
            return wrapping_sub(block_timestamp, self._block_timestamp_last, TIMESTAMP_BITS)

    def is_due(self) -> bool:
        """True if update() would pass the period check now."""
        return self.time_elapsed() >= self.config.period

    def update(self) -> None:
        """Recompute the averages over the time since the last snapshot.

        Raises:
            PeriodNotElapsed: If less than one period has elapsed. Nothing
                is modified; call again later.
        """
        self._update(raise_if_early=True)

    def update_if_due(self) -> bool:
        """Update if a full period has elapsed, otherwise do nothing.

        The period check and the update happen under one hold of the lock,
        so a concurrent update() in between cannot make this raise.

        Returns:
            True if the averages were recomputed
        """
        return self._update(raise_if_early=False)

    def _update(self, *, raise_if_early: bool) -> bool:
        with self._lock:
            price0_cumulative, price1_cumulative, block_timestamp = current_cumulative_prices(
                self.pair, self._clock
            )
            time_elapsed = wrapping_sub(block_timestamp, self._block_timestamp_last, TIMESTAMP_BITS)

            # Ensure that at least one full period has passed since the last update
            if time_elapsed < self.config.period:
                logger.debug(
                    "oracle_update_too_early",
                    pair=self.address,
                    time_elapsed=time_elapsed,
                    period=self.config.period,
                )
                if raise_if_early:
                    raise PeriodNotElapsed(time_elapsed, self.config.period)
                return False

            # Accumulator deltas wrap mod 2^256; the true delta / elapsed fits in uint224
            price0_average = UQ112x112(
                truncate(
                    wrapping_sub(price0_cumulative, self._price0_cumulative_last, CUMULATIVE_BITS)
                    // time_elapsed,
                    AVERAGE_BITS,
                )
            )
            price1_average = UQ112x112(
                truncate(
                    wrapping_sub(price1_cumulative, self._price1_cumulative_last, CUMULATIVE_BITS)
                    // time_elapsed,
                    AVERAGE_BITS,
                )
            )

            self._price0_average = price0_average
            self._price1_average = price1_average
            self._price0_cumulative_last = price0_cumulative
            self._price1_cumulative_last = price1_cumulative
            self._block_timestamp_last = block_timestamp

        logger.info(
            "oracle_updated",
            pair=self.address,
            time_elapsed=time_elapsed,
            block_timestamp=block_timestamp,
            price0_average=str(price0_average),
            price1_average=str(price1_average),
        )
        return True

    def consult(self, token: str, amount_in: int) -> int:
        """Convert amount_in of token into the other token at the average price.

        Args:
            token: Input token, either of the pair's tokens
            amount_in: Input amount (uint256)

        Returns:
            Output amount, truncated. 0 until the first successful update().

        Raises:
            UnknownAsset: If token is not one of the pair's tokens
            Overflow: If the output does not fit in uint144
        """
        token_norm = normalize_address(token)
        with self._lock:
            if token_norm == self.token0:
                average = self._price0_average
            elif token_norm == self.token1:
                average = self._price1_average
            else:
                raise UnknownAsset(token)
        return decode144(mul(average, amount_in))

    # --- Persistence ---

    def export_state(self) -> OracleState:
        """Snapshot the oracle's mutable fields for persistence."""
        with self._lock:
            return OracleState(
                pair=self.address,
                token0=self.token0,
                token1=self.token1,
                period=self.config.period,
                price0_cumulative_last=self._price0_cumulative_last,
                price1_cumulative_last=self._price1_cumulative_last,
                block_timestamp_last=self._block_timestamp_last,
                price0_average=self._price0_average.raw,
                price1_average=self._price1_average.raw,
            )

    @classmethod
    def from_state(
        cls,
        pair: PairReader,
        state: OracleState,
        *,
        clock: Clock = time.time,
    ) -> FixedWindowOracle:
        """Restore an oracle saved with export_state().

        The liquidity check is not repeated: the state was valid when saved.

        Raises:
            ValueError: If the state was saved for a different pair
            UnknownAsset: If the state's tokens do not belong to the pair
        """
        if normalize_address(state.pair) != normalize_address(pair.address):
            raise ValueError(f"State is for pair {state.pair}, not {pair.address}")

        oracle = cls.__new__(cls)
        oracle._bind(pair, state.token0, state.token1, OracleConfig(period=state.period), clock)
        oracle._price0_cumulative_last = int(state.price0_cumulative_last)
        oracle._price1_cumulative_last = int(state.price1_cumulative_last)
        oracle._block_timestamp_last = int(state.block_timestamp_last)
        oracle._price0_average = UQ112x112(int(state.price0_average))
        oracle._price1_average = UQ112x112(int(state.price1_average))

        logger.info(
            "oracle_restored",
            pair=oracle.address,
            block_timestamp_last=oracle._block_timestamp_last,
        )
        return oracle

    def __repr__(self) -> str:
        return (
            f"FixedWindowOracle(pair={self.address}, token0={self.token0}, "
            f"token1={self.token1}, period={self.config.period})"
        )


__all__ = ["FixedWindowOracle"]
