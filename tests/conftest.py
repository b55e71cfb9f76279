"""
Shared fixtures for the Chainwatch tests.

Upstream APIs are replaced with in-memory fakes and randomness with fixed
sequences, so no test touches the network.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

import pytest

from chainwatch.api import Transaction
from chainwatch.api.explorer import WEI_PER_NATIVE
from chainwatch.config import ChainConfig, DumpScanConfig, SummaryConfig, WhaleScanConfig
from chainwatch.db import Repository
from chainwatch.errors import TransientFetchError

ETH_WHALE = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb"
ETH_EXCHANGE = "0x28C6c06298d514Db089934071355E5743bf21d60"
BSC_WHALE = "0xF977814e90dA44bFA03b6295A0616a897441aceC"
SOL_WHALE = "7Np41oeYqPefeNQEHSv1UDhYrehxin3NStELsSKCT4K2"


class SequenceRandom:
    """Random source that replays fixed values."""

    def __init__(self, values: Iterable[float] = (0.0,), index: int = 0):
        self.values = list(values)
        self.index = index
        self._pos = 0

    def random(self) -> float:
        value = self.values[self._pos % len(self.values)]
        self._pos += 1
        return value

    def randrange(self, stop: int) -> int:
        return self.index % stop


class FakeExplorer:
    """Explorer returning canned transactions per address."""

    def __init__(self, transactions: dict[str, list[Transaction]] | None = None, fail_on=()):
        self.transactions = transactions or {}
        self.fail_on = set(fail_on)
        self.calls: list[tuple[str, int]] = []

    async def get_recent_transactions(self, address: str, limit: int = 3) -> list[Transaction]:
        self.calls.append((address, limit))
        if address in self.fail_on:
            raise TransientFetchError(f"rate limited: {address}")
        return self.transactions.get(address, [])[:limit]


def make_tx(native: float, tx_hash: str = "0xabc", to: str = "0xdead", block: int = 18_500_000):
    return Transaction(
        hash=tx_hash,
        to=to,
        value_wei=int(native * WEI_PER_NATIVE),
        block_number=block,
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def whale_config() -> WhaleScanConfig:
    return WhaleScanConfig(
        chains={
            "ETH": ChainConfig(
                name="ETH",
                native_token="ETH",
                whale_threshold_usd=1_000_000,
                usd_multiplier=3000,
                watch_addresses=[ETH_WHALE, ETH_EXCHANGE],
                synthetic_tokens=["ETH", "USDT", "USDC"],
                explorer_url="https://api.etherscan.io/api",
                api_key="test-key",
            ),
            "SOL": ChainConfig(
                name="SOL",
                native_token="SOL",
                whale_threshold_usd=500_000,
                usd_multiplier=150,
                watch_addresses=[SOL_WHALE],
                synthetic_tokens=["SOL", "USDC"],
            ),
            "BSC": ChainConfig(
                name="BSC",
                native_token="BNB",
                whale_threshold_usd=800_000,
                usd_multiplier=600,
                watch_addresses=[BSC_WHALE],
                synthetic_tokens=["BNB", "BUSD"],
                explorer_url="https://api.bscscan.com/api",
                api_key="test-key",
            ),
        },
        transactions_per_address=3,
        max_concurrency=2,
    )


@pytest.fixture
def dump_config() -> DumpScanConfig:
    return DumpScanConfig()


@pytest.fixture
def summary_config() -> SummaryConfig:
    return SummaryConfig(timeout_seconds=0.5)


@pytest.fixture
async def repository(tmp_path):
    repo = Repository(tmp_path / "alerts.db")
    await repo.initialize()
    yield repo
    await repo.close()
