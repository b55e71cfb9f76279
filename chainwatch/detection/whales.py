"""Whale scanner - flags large native transfers from watched wallets on each chain."""

import asyncio
import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from ..api import ExplorerClient, Transaction
from ..config import ChainConfig, WhaleScanConfig
from ..errors import TransientFetchError

logger = logging.getLogger(__name__)

SYNTHETIC_BLOCK_BASE = 15_000_000
SYNTHETIC_BLOCK_SPAN = 1_000_000
SYNTHETIC_AMOUNT_SPAN_USD = 10_000_000


@dataclass
class Movement:
    """A transfer large enough to count as a whale movement."""

    chain: str
    token: str
    amount: float  # USD estimate
    wallet_address: str
    contract_address: str | None
    transaction_hash: str
    block_number: int
    observed_at: datetime


class ChainWhaleScanner:
    """
    Finds whale movements on a chain.

    For each watched address the newest transactions are fetched, converted to
    USD with the chain's static multiplier and kept only if they exceed the
    chain's whale threshold. When the explorer fails, or the chain has no
    explorer wired, synthetic movements are generated instead.
    """

    def __init__(
        self,
        config: WhaleScanConfig,
        explorers: Mapping[str, ExplorerClient],
        rng: random.Random | None = None,
    ):
        self.config = config
        self.explorers = explorers
        self.rng = rng or random.Random()
        self._semaphore = asyncio.Semaphore(max(1, config.max_concurrency))

    async def fetch_movements(self, chain: str) -> list[Movement]:
        """
        Fetch recent whale movements for a chain.

        Args:
            chain: Chain name (ETH, SOL, BSC)

        Returns:
            Movements above the chain threshold; empty for unsupported chains
        """
        chain_config = self.config.chains.get(chain.upper())
        if chain_config is None:
            logger.debug(f"Unsupported chain {chain}, skipping")
            return []

        explorer = self.explorers.get(chain_config.name)
        if explorer is None:
            logger.debug(f"No live explorer for {chain_config.name}, using synthetic movements")
            return self.generate_synthetic(chain_config)

        try:
            return await self._fetch_live(chain_config, explorer)
        except TransientFetchError as e:
            logger.warning(
                f"Explorer failed for {chain_config.name}, using synthetic movements: {e}"
            )
            return self.generate_synthetic(chain_config)

    async def _fetch_live(
        self, chain: ChainConfig, explorer: ExplorerClient
    ) -> list[Movement]:
        tasks = [
            asyncio.create_task(self._fetch_address(explorer, address))
            for address in chain.watch_addresses
        ]
        try:
            results = await asyncio.gather(*tasks)
        finally:
            # One failed address fails the chain; stop the remaining requests
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        movements = []
        for address, transactions in zip(chain.watch_addresses, results):
            for tx in transactions:
                movement = self._to_movement(chain, address, tx)
                if movement is not None:
                    movements.append(movement)

        logger.debug(
            f"{chain.name}: {len(movements)} whale movements from "
            f"{len(chain.watch_addresses)} watched addresses"
        )
        return movements

    async def _fetch_address(
        self, explorer: ExplorerClient, address: str
    ) -> list[Transaction]:
        async with self._semaphore:
            return await explorer.get_recent_transactions(
                address, limit=self.config.transactions_per_address
            )

    @staticmethod
    def _to_movement(chain: ChainConfig, address: str, tx: Transaction) -> Movement | None:
        amount_usd = tx.native_value * chain.usd_multiplier
        if amount_usd <= chain.whale_threshold_usd:
            return None

        return Movement(
            chain=chain.name,
            token=chain.native_token,
            amount=amount_usd,
            wallet_address=address,
            contract_address=tx.to,
            transaction_hash=tx.hash,
            block_number=tx.block_number,
            observed_at=tx.timestamp,
        )

    def generate_synthetic(self, chain: ChainConfig) -> list[Movement]:
        """Generate 1-3 movements at or above the chain threshold."""
        tokens = chain.synthetic_tokens or [chain.native_token]
        count = self.rng.randint(1, 3)

        return [
            Movement(
                chain=chain.name,
                token=self.rng.choice(tokens),
                amount=chain.whale_threshold_usd
                + self.rng.random() * SYNTHETIC_AMOUNT_SPAN_USD,
                wallet_address=self._random_hex(40),
                contract_address=self._random_hex(40),
                transaction_hash=self._random_hex(64),
                block_number=SYNTHETIC_BLOCK_BASE
                + self.rng.randrange(SYNTHETIC_BLOCK_SPAN),
                observed_at=datetime.now(timezone.utc),
            )
            for _ in range(count)
        ]

    def _random_hex(self, length: int) -> str:
        return "0x" + "".join(self.rng.choice("0123456789abcdef") for _ in range(length))
