"""Pytest configuration and fixtures."""

import pytest

from twap_oracle import FixedWindowOracle, OracleConfig, UniswapV2Pair
from tests.helpers import DAY, T0, USDC, WETH, FakeClock, make_pair


@pytest.fixture
def clock() -> FakeClock:
    """A clock frozen at T0."""
    return FakeClock(T0)


@pytest.fixture
def config() -> OracleConfig:
    """One-day averaging period."""
    return OracleConfig(period=DAY)


@pytest.fixture
def pair(clock: FakeClock) -> UniswapV2Pair:
    """A USDC/WETH pair holding 1000/2000 since T0."""
    return make_pair(reserve0=1000, reserve1=2000, timestamp=clock.now)


@pytest.fixture
def oracle(pair: UniswapV2Pair, config: OracleConfig, clock: FakeClock) -> FixedWindowOracle:
    """An oracle on the 1000/2000 pair, created at T0."""
    return FixedWindowOracle(pair, USDC, WETH, config=config, clock=clock)
