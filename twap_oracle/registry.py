"""Registry of oracles for many pairs.

Each oracle carries its own lock, so updates to different pairs never wait
on each other. The registry's lock only protects its indexes and is never
held while an oracle is updated or consulted.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator

import structlog

from twap_oracle.config import DEFAULT_ORACLE_CONFIG, OracleConfig
from twap_oracle.errors import UnknownAsset
from twap_oracle.library import Clock
from twap_oracle.models.state import OracleState
from twap_oracle.models.types import normalize_address
from twap_oracle.oracle import FixedWindowOracle
from twap_oracle.pair import PairReader

logger = structlog.get_logger()


def _pair_key(token_a: str, token_b: str) -> frozenset[str]:
    return frozenset((normalize_address(token_a), normalize_address(token_b)))


class OracleRegistry:
    """Fixed-window oracles indexed by pair address and by token pair."""

    def __init__(
        self,
        config: OracleConfig | None = None,
        clock: Clock = time.time,
    ) -> None:
        """Initialize an empty registry.

        Args:
            config: Configuration applied to oracles created by track()
            clock: Time source shared by oracles created by track()
        """
        self.config = config or DEFAULT_ORACLE_CONFIG
        self._clock = clock
        self._by_address: dict[str, FixedWindowOracle] = {}
        self._by_tokens: dict[frozenset[str], FixedWindowOracle] = {}
        self._lock = threading.Lock()

    def track(self, pair: PairReader, token_a: str, token_b: str) -> FixedWindowOracle:
        """Create and register an oracle for a pair.

        If the pair is already tracked the existing oracle is returned.

        Raises:
            NoLiquidity: If the pair has a zero reserve
            UnknownAsset: If the tokens are not the pair's tokens
        """
        address = normalize_address(pair.address)
        with self._lock:
            existing = self._by_address.get(address)
        if existing is not None:
            return existing

        oracle = FixedWindowOracle(pair, token_a, token_b, config=self.config, clock=self._clock)
        return self._register(oracle)

    def restore(self, pair: PairReader, state: OracleState) -> FixedWindowOracle:
        """Register an oracle restored from saved state, replacing any existing one."""
        oracle = FixedWindowOracle.from_state(pair, state, clock=self._clock)
        return self._register(oracle, replace=True)

    def _register(self, oracle: FixedWindowOracle, replace: bool = False) -> FixedWindowOracle:
        key = _pair_key(oracle.token0, oracle.token1)
        with self._lock:
            existing = self._by_address.get(oracle.address)
            if existing is not None and not replace:
                return existing
            self._by_address[oracle.address] = oracle
            shadowed = self._by_tokens.get(key)
            self._by_tokens[key] = oracle

        # One oracle per token pair for get/consult; the newest pair wins
        if shadowed is not None and shadowed.address != oracle.address:
            logger.warning(
                "oracle_token_pair_replaced",
                token0=oracle.token0,
                token1=oracle.token1,
                previous_pair=shadowed.address,
                pair=oracle.address,
            )

        logger.info("oracle_tracked", pair=oracle.address, tracked=len(self))
        return oracle

    def get(self, token_a: str, token_b: str) -> FixedWindowOracle | None:
        """Get the oracle for a token pair (either order).

        If several tracked pairs trade the same two tokens, the most recently
        tracked one is returned.
        """
        with self._lock:
            return self._by_tokens.get(_pair_key(token_a, token_b))

    def get_by_address(self, address: str) -> FixedWindowOracle | None:
        with self._lock:
            return self._by_address.get(normalize_address(address))

    def oracles(self) -> list[FixedWindowOracle]:
        with self._lock:
            return list(self._by_address.values())

    def update_due(self) -> list[str]:
        """Update every oracle whose period has elapsed.

        Each oracle checks its period and updates under one hold of its own
        lock, so PeriodNotElapsed is never raised here, even when another
        caller updates the same oracle concurrently. Any other error propagates.

        Returns:
            Addresses of the pairs that were updated
        """
        updated = []
        for oracle in self.oracles():
            if oracle.update_if_due():
                updated.append(oracle.address)

        logger.debug("oracles_updated", updated=len(updated), tracked=len(self))
        return updated

    def consult(self, token_in: str, amount_in: int, token_out: str) -> int:
        """Convert amount_in of token_in into token_out at the pair's average price.

        Raises:
            UnknownAsset: If no tracked pair trades token_in against token_out
        """
        oracle = self.get(token_in, token_out)
        if oracle is None or normalize_address(token_in) == normalize_address(token_out):
            raise UnknownAsset(token_out)
        return oracle.consult(token_in, amount_in)

    def export_states(self) -> list[OracleState]:
        return [oracle.export_state() for oracle in self.oracles()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_address)

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        return self.get_by_address(address) is not None

    def __iter__(self) -> Iterator[FixedWindowOracle]:
        return iter(self.oracles())


__all__ = ["OracleRegistry"]
