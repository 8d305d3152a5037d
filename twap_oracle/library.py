"""Counterfactual cumulative prices.

A pair only advances its price accumulators when it syncs. Reading them
between syncs returns stale values, and forcing a sync just to read a price
would mutate the pair. Since the spot price is constant between syncs, the
value a sync at this instant would record can be computed exactly from the
last sync's reserves and timestamp:

    cumulative_now = cumulative_last + (reserve_other / reserve_self) * elapsed

All arithmetic wraps like the on-chain counters it reproduces: elapsed time
modulo 2^32, accumulators modulo 2^256.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from twap_oracle.constants import CUMULATIVE_BITS, TIMESTAMP_BITS
from twap_oracle.math.fixed_point import fraction
from twap_oracle.pair import PairReader, PairSnapshot
from twap_oracle.uint import truncate, wrapping_add, wrapping_sub

# Returns the current time in seconds since the epoch
Clock = Callable[[], float]


def current_block_timestamp(clock: Clock = time.time) -> int:
    """Current time truncated to the pair's uint32 clock."""
    return truncate(int(clock()), TIMESTAMP_BITS)


def read_pair_snapshot(pair: PairReader) -> PairSnapshot:
    """Read the pair's accounting fields.

    Uses the reader's own snapshot() when available so that reserves,
    timestamp and accumulators come from the same sync.
    """
    snapshot = getattr(pair, "snapshot", None)
    if callable(snapshot):
        return snapshot()

    price0_cumulative = pair.price0_cumulative_last()
    price1_cumulative = pair.price1_cumulative_last()
    reserve0, reserve1, block_timestamp_last = pair.get_reserves()
    return PairSnapshot(
        reserve0=reserve0,
        reserve1=reserve1,
        block_timestamp_last=block_timestamp_last,
        price0_cumulative_last=price0_cumulative,
        price1_cumulative_last=price1_cumulative,
    )


def extrapolate_cumulative_prices(snapshot: PairSnapshot, block_timestamp: int) -> tuple[int, int]:
    """Cumulative prices as a sync at block_timestamp would record them.

    Args:
        snapshot: Pair state as of its last sync
        block_timestamp: Current uint32 timestamp

    Returns:
        (price0_cumulative, price1_cumulative)

    Raises:
        DivisionByZero: If time elapsed and a reserve is zero
    """
    price0_cumulative = snapshot.price0_cumulative_last
    price1_cumulative = snapshot.price1_cumulative_last

    if snapshot.block_timestamp_last == block_timestamp:
        return price0_cumulative, price1_cumulative

    # Wraps when the uint32 clock rolls over between the sync and now
    time_elapsed = wrapping_sub(block_timestamp, snapshot.block_timestamp_last, TIMESTAMP_BITS)

    price0_cumulative = wrapping_add(
        price0_cumulative,
        fraction(snapshot.reserve1, snapshot.reserve0).raw * time_elapsed,
        CUMULATIVE_BITS,
    )
    price1_cumulative = wrapping_add(
        price1_cumulative,
        fraction(snapshot.reserve0, snapshot.reserve1).raw * time_elapsed,
        CUMULATIVE_BITS,
    )
    return price0_cumulative, price1_cumulative


def current_cumulative_prices(pair: PairReader, clock: Clock = time.time) -> tuple[int, int, int]:
    """Current cumulative prices of a pair, without syncing it.

    Args:
        pair: The pair to read
        clock: Time source in seconds (default: time.time)

    Returns:
        (price0_cumulative, price1_cumulative, block_timestamp)
    """
    block_timestamp = current_block_timestamp(clock)
    snapshot = read_pair_snapshot(pair)
    price0_cumulative, price1_cumulative = extrapolate_cumulative_prices(snapshot, block_timestamp)
    return price0_cumulative, price1_cumulative, block_timestamp


__all__ = [
    "Clock",
    "current_block_timestamp",
    "read_pair_snapshot",
    "extrapolate_cumulative_prices",
    "current_cumulative_prices",
]
