"""Tests for OracleRegistry."""

import threading

import pytest

from twap_oracle import NoLiquidity, OracleConfig, OracleRegistry, UnknownAsset
from twap_oracle.math.fixed_point import fraction
from tests.helpers import (
    DAI,
    DAI_WETH_PAIR,
    DAY,
    USDC,
    USDC_WETH_PAIR,
    WBTC,
    WETH,
    make_pair,
)


@pytest.fixture
def registry(clock, config) -> OracleRegistry:
    return OracleRegistry(config=config, clock=clock)


@pytest.fixture
def dai_pair(clock):
    """A DAI/WETH pair holding 3000/1 since T0."""
    return make_pair(
        reserve0=3000,
        reserve1=1,
        timestamp=clock.now,
        address=DAI_WETH_PAIR,
        token0=DAI,
        token1=WETH,
    )


class TestTracking:
    """Tests for adding and looking up oracles."""

    def test_track_creates_oracle(self, registry, pair):
        oracle = registry.track(pair, USDC, WETH)

        assert oracle.address == USDC_WETH_PAIR
        assert oracle.period == DAY
        assert len(registry) == 1
        assert USDC_WETH_PAIR in registry

    def test_track_is_idempotent(self, registry, pair):
        first = registry.track(pair, USDC, WETH)
        second = registry.track(pair, WETH, USDC)
        assert first is second
        assert len(registry) == 1

    def test_lookup_by_tokens_either_order(self, registry, pair):
        oracle = registry.track(pair, USDC, WETH)
        assert registry.get(USDC, WETH) is oracle
        assert registry.get(WETH, USDC) is oracle
        assert registry.get(DAI, WETH) is None

    def test_lookup_by_address(self, registry, pair):
        oracle = registry.track(pair, USDC, WETH)
        assert registry.get_by_address(USDC_WETH_PAIR.upper().replace("0X", "0x")) is oracle
        assert registry.get_by_address(DAI_WETH_PAIR) is None

    def test_contains_rejects_non_strings(self, registry, pair):
        registry.track(pair, USDC, WETH)
        assert 42 not in registry

    def test_track_empty_pair_raises(self, registry, clock):
        pair = make_pair(reserve0=0, reserve1=0, timestamp=clock.now)
        with pytest.raises(NoLiquidity):
            registry.track(pair, USDC, WETH)
        assert len(registry) == 0

    def test_iterates_oracles(self, registry, pair, dai_pair):
        registry.track(pair, USDC, WETH)
        registry.track(dai_pair, DAI, WETH)
        assert {oracle.address for oracle in registry} == {USDC_WETH_PAIR, DAI_WETH_PAIR}

    def test_uses_registry_config(self, clock, pair):
        registry = OracleRegistry(config=OracleConfig(period=60), clock=clock)
        assert registry.track(pair, USDC, WETH).period == 60

    def test_second_pair_for_same_tokens_wins_lookup(self, registry, pair, clock):
        first = registry.track(pair, USDC, WETH)
        other = make_pair(timestamp=clock.now, address=DAI_WETH_PAIR)
        second = registry.track(other, USDC, WETH)

        assert registry.get(USDC, WETH) is second
        assert registry.get_by_address(USDC_WETH_PAIR) is first
        assert len(registry) == 2


class TestUpdateDue:
    """Tests for update_due()."""

    def test_nothing_due(self, registry, pair):
        registry.track(pair, USDC, WETH)
        assert registry.update_due() == []

    def test_updates_only_due_oracles(self, registry, pair, dai_pair, clock):
        registry.track(pair, USDC, WETH)
        clock.advance(DAY // 2)
        dai_pair.sync(3000, 1, clock.now)
        late_registry_oracle = registry.track(dai_pair, DAI, WETH)
        clock.advance(DAY // 2)

        updated = registry.update_due()

        assert updated == [USDC_WETH_PAIR]
        assert late_registry_oracle.price0_average.is_zero()
        assert registry.get(USDC, WETH).price0_average == fraction(2000, 1000)

    def test_updates_all_when_due(self, registry, pair, dai_pair, clock):
        registry.track(pair, USDC, WETH)
        registry.track(dai_pair, DAI, WETH)
        clock.advance(DAY)

        assert sorted(registry.update_due()) == sorted([USDC_WETH_PAIR, DAI_WETH_PAIR])
        assert registry.update_due() == []

    def test_concurrent_update_due_never_raises(self, registry, pair, dai_pair, clock):
        """Racing update_due() calls update each oracle exactly once."""
        registry.track(pair, USDC, WETH)
        registry.track(dai_pair, DAI, WETH)
        clock.advance(DAY)

        barrier = threading.Barrier(8)
        results: list[str] = []
        errors: list[Exception] = []
        results_lock = threading.Lock()

        def worker():
            barrier.wait()
            try:
                updated = registry.update_due()
            except Exception as e:
                with results_lock:
                    errors.append(e)
                return
            with results_lock:
                results.extend(updated)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert sorted(results) == sorted([USDC_WETH_PAIR, DAI_WETH_PAIR])

    def test_oracle_updated_elsewhere_is_skipped(self, registry, pair, clock):
        """An oracle updated directly since it became due is simply skipped."""
        oracle = registry.track(pair, USDC, WETH)
        clock.advance(DAY)
        oracle.update()

        assert registry.update_due() == []


class TestConsult:
    """Tests for registry.consult()."""

    def test_routes_to_pair_oracle(self, registry, pair, dai_pair, clock):
        registry.track(pair, USDC, WETH)
        registry.track(dai_pair, DAI, WETH)
        clock.advance(DAY)
        registry.update_due()

        assert registry.consult(USDC, 500, WETH) == 1000
        assert registry.consult(WETH, 2, DAI) == 6000

    def test_untracked_pair_raises(self, registry, pair):
        registry.track(pair, USDC, WETH)
        with pytest.raises(UnknownAsset):
            registry.consult(USDC, 500, WBTC)

    def test_same_token_raises(self, registry, pair):
        registry.track(pair, USDC, WETH)
        with pytest.raises(UnknownAsset):
            registry.consult(USDC, 500, USDC)


class TestPersistence:
    """Tests for export_states() / restore()."""

    def test_restore_replaces_oracle(self, registry, pair, clock):
        oracle = registry.track(pair, USDC, WETH)
        clock.advance(DAY)
        oracle.update()
        states = registry.export_states()

        fresh = OracleRegistry(clock=clock)
        restored = fresh.restore(pair, states[0])

        assert fresh.get(USDC, WETH) is restored
        assert restored.consult(USDC, 500) == 1000
        assert restored.period == DAY

    def test_restore_over_existing(self, registry, pair, clock):
        original = registry.track(pair, USDC, WETH)
        state = original.export_state()

        restored = registry.restore(pair, state)

        assert restored is not original
        assert registry.get_by_address(USDC_WETH_PAIR) is restored
        assert len(registry) == 1
