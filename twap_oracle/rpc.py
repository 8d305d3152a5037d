"""RPC-backed pair reader.

Reads a deployed UniswapV2 pair through eth_call. Only view functions are
called, so reading never syncs the pair.
"""

from __future__ import annotations

from typing import Any

import structlog

from twap_oracle.models.types import normalize_address
from twap_oracle.pair import PairSnapshot

logger = structlog.get_logger()


# UniswapV2Pair ABI - minimal, just the view functions we need
UNISWAP_V2_PAIR_ABI = [
    {
        "name": "token0",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "token1",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "getReserves",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "_reserve0", "type": "uint112"},
            {"name": "_reserve1", "type": "uint112"},
            {"name": "_blockTimestampLast", "type": "uint32"},
        ],
    },
    {
        "name": "price0CumulativeLast",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "price1CumulativeLast",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


class Web3PairReader:
    """Pair reader that calls a UniswapV2Pair contract via RPC.

    Token addresses are read once at construction; they never change for a
    deployed pair.
    """

    def __init__(self, contract: Any, block_identifier: str | int = "latest") -> None:
        """Initialize from a web3 contract object.

        Args:
            contract: web3 Contract bound to UNISWAP_V2_PAIR_ABI
            block_identifier: Block number or tag to read at (default: "latest")
        """
        self.contract = contract
        self.block_identifier = block_identifier
        self.address = normalize_address(str(contract.address))
        self.token0 = normalize_address(str(contract.functions.token0().call()))
        self.token1 = normalize_address(str(contract.functions.token1().call()))

    @classmethod
    def connect(cls, rpc_url: str, pair_address: str) -> Web3PairReader:
        """Build a reader for a pair behind an HTTP RPC endpoint.

        Args:
            rpc_url: HTTP RPC URL (e.g., "https://eth.llamarpc.com")
            pair_address: UniswapV2Pair contract address
        """
        try:
            from web3 import Web3
        except ImportError as e:
            raise ImportError(
                "web3 package required for Web3PairReader. Install with: pip install web3"
            ) from e

        w3 = Web3(Web3.HTTPProvider(rpc_url))
        contract = w3.eth.contract(
            address=Web3.to_checksum_address(pair_address),
            abi=UNISWAP_V2_PAIR_ABI,
        )
        return cls(contract)

    def _call(self, name: str, block_identifier: str | int | None = None) -> Any:
        block = self.block_identifier if block_identifier is None else block_identifier
        function = getattr(self.contract.functions, name)
        try:
            return function().call(block_identifier=block)
        except Exception as e:
            logger.warning(
                "pair_call_failed",
                pair=self.address,
                function=name,
                block=block,
                error=str(e),
            )
            raise

    def _pinned_block(self) -> str | int:
        if isinstance(self.block_identifier, int):
            return self.block_identifier
        # Resolve a moving tag once so every field is read at the same block
        return int(self.contract.w3.eth.block_number)

    def get_reserves(self) -> tuple[int, int, int]:
        reserve0, reserve1, block_timestamp_last = self._call("getReserves")
        return int(reserve0), int(reserve1), int(block_timestamp_last)

    def price0_cumulative_last(self) -> int:
        return int(self._call("price0CumulativeLast"))

    def price1_cumulative_last(self) -> int:
        return int(self._call("price1CumulativeLast"))

    def snapshot(self) -> PairSnapshot:
        """All accounting fields read at one block."""
        block = self._pinned_block()
        reserve0, reserve1, block_timestamp_last = self._call("getReserves", block)
        return PairSnapshot(
            reserve0=int(reserve0),
            reserve1=int(reserve1),
            block_timestamp_last=int(block_timestamp_last),
            price0_cumulative_last=int(self._call("price0CumulativeLast", block)),
            price1_cumulative_last=int(self._call("price1CumulativeLast", block)),
        )

    def at_block(self, block_identifier: str | int) -> Web3PairReader:
        """Reader for the same pair pinned to another block."""
        reader = self.__class__.__new__(self.__class__)
        reader.contract = self.contract
        reader.block_identifier = block_identifier
        reader.address = self.address
        reader.token0 = self.token0
        reader.token1 = self.token1
        return reader


__all__ = ["UNISWAP_V2_PAIR_ABI", "Web3PairReader"]
