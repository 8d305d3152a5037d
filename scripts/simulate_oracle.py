#!/usr/bin/env python3
"""Drive a fixed-window oracle and print its averages.

Two modes:
- simulate: an in-memory pair whose reserves follow a random walk, synced
  at random intervals. The oracle is updated once per period and its average
  is printed next to the spot price.
- watch: a live pair read over RPC. The oracle is updated whenever a period
  has elapsed; spot and average are printed every poll.

Usage:
    python scripts/simulate_oracle.py simulate --periods 7 --period 3600
    python scripts/simulate_oracle.py watch --rpc-url $RPC_URL --pair 0x... --period 600
"""

import argparse
import logging
import os
import random
import sys
import time
from decimal import Decimal

import structlog

from twap_oracle import FixedWindowOracle, OracleConfig, PeriodNotElapsed, UniswapV2Pair
from twap_oracle.library import read_pair_snapshot
from twap_oracle.math.fixed_point import fraction

logger = structlog.get_logger()

TOKEN0 = "0x" + "a0" * 20
TOKEN1 = "0x" + "b1" * 20
PAIR = "0x" + "c2" * 20


class SimulatedClock:
    """Clock that only moves when told to."""

    def __init__(self, start: int) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def spot_price(reserve_in: int, reserve_out: int) -> Decimal:
    return fraction(reserve_out, reserve_in).to_decimal()


def run_simulation(args: argparse.Namespace) -> int:
    rng = random.Random(args.seed)
    clock = SimulatedClock(args.start)
    reserve0 = args.reserve0
    reserve1 = args.reserve1

    pair = UniswapV2Pair(address=PAIR, token0=TOKEN0, token1=TOKEN1)
    pair.sync(reserve0, reserve1, clock.now)

    config = OracleConfig(period=args.period)
    oracle = FixedWindowOracle(pair, TOKEN0, TOKEN1, config=config, clock=clock)

    print(f"{'period':>6}  {'spot0':>24}  {'average0':>24}  {'consult':>14}")
    for period_index in range(1, args.periods + 1):
        elapsed = 0
        while elapsed < args.period:
            step = rng.randint(1, max(1, args.period // args.syncs))
            clock.advance(step)
            elapsed += step
            # Random walk on the price, keeping the constant product roughly fixed
            drift = Decimal(1) + Decimal(rng.gauss(0, args.volatility))
            reserve0 = max(1, int(reserve0 * drift))
            reserve1 = max(1, int(reserve1 / drift))
            pair.sync(reserve0, reserve1, clock.now)

        try:
            oracle.update()
        except PeriodNotElapsed as e:
            logger.warning("update_skipped", remaining=e.remaining)
            continue

        print(
            f"{period_index:>6}  {spot_price(reserve0, reserve1):>24.12f}  "
            f"{oracle.price0_average.to_decimal():>24.12f}  "
            f"{oracle.consult(TOKEN0, args.amount):>14}"
        )

    return 0


def run_watch(args: argparse.Namespace) -> int:
    from twap_oracle.rpc import Web3PairReader

    rpc_url = args.rpc_url or os.environ.get("RPC_URL")
    if not rpc_url:
        print("Error: --rpc-url or RPC_URL is required for watch mode")
        return 1

    pair = Web3PairReader.connect(rpc_url, args.pair)
    oracle = FixedWindowOracle(
        pair, pair.token0, pair.token1, config=OracleConfig(period=args.period)
    )

    polls = 0
    while args.polls <= 0 or polls < args.polls:
        polls += 1
        if oracle.is_due():
            oracle.update()
        snapshot = read_pair_snapshot(pair)
        print(
            f"spot0={spot_price(snapshot.reserve0, snapshot.reserve1):.12f} "
            f"average0={oracle.price0_average.to_decimal():.12f} "
            f"elapsed={oracle.time_elapsed()}s"
        )
        time.sleep(args.interval)

    return 0


def main() -> int:
    """Entry point for the oracle driver script."""
    parser = argparse.ArgumentParser(description="Drive a fixed-window TWAP oracle")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="mode", required=True)

    simulate = subparsers.add_parser("simulate", help="Simulate an in-memory pair")
    simulate.add_argument("--periods", type=int, default=7, help="Number of periods to run")
    simulate.add_argument("--period", type=int, default=3600, help="Oracle period in seconds")
    simulate.add_argument("--syncs", type=int, default=24, help="Approximate syncs per period")
    simulate.add_argument("--reserve0", type=int, default=1_000 * 10**18)
    simulate.add_argument("--reserve1", type=int, default=2_000_000 * 10**6)
    simulate.add_argument("--volatility", type=float, default=0.01, help="Per-sync price stddev")
    simulate.add_argument("--amount", type=int, default=10**18, help="token0 amount to consult")
    simulate.add_argument("--start", type=int, default=1_700_000_000, help="Start timestamp")
    simulate.add_argument("--seed", type=int, default=0)

    watch = subparsers.add_parser("watch", help="Watch a live pair over RPC")
    watch.add_argument("--rpc-url", default=None, help="HTTP RPC URL (default: $RPC_URL)")
    watch.add_argument("--pair", required=True, help="UniswapV2Pair address")
    watch.add_argument("--period", type=int, default=600, help="Oracle period in seconds")
    watch.add_argument("--interval", type=float, default=60.0, help="Seconds between polls")
    watch.add_argument("--polls", type=int, default=0, help="Stop after N polls (0 = forever)")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    if args.mode == "simulate":
        return run_simulation(args)
    return run_watch(args)


if __name__ == "__main__":
    sys.exit(main())
