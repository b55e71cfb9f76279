"""Whale scanner: live filtering, synthetic fallback and chain handling."""

import asyncio
import random

from chainwatch.config import ChainConfig, WhaleScanConfig
from chainwatch.detection.whales import ChainWhaleScanner
from chainwatch.errors import TransientFetchError
from conftest import BSC_WHALE, ETH_EXCHANGE, ETH_WHALE, FakeExplorer, make_tx


async def test_unsupported_chain_yields_nothing(whale_config):
    scanner = ChainWhaleScanner(whale_config, explorers={})

    assert await scanner.fetch_movements("DOGE") == []


async def test_small_transfer_is_ignored(whale_config):
    # 5 ETH at $3000 is $15,000, far below the $1M threshold
    explorer = FakeExplorer({ETH_WHALE: [make_tx(5)]})
    scanner = ChainWhaleScanner(whale_config, explorers={"ETH": explorer})

    assert await scanner.fetch_movements("ETH") == []


async def test_large_transfer_becomes_movement(whale_config):
    explorer = FakeExplorer(
        {ETH_WHALE: [make_tx(500, tx_hash="0xfeed", to="0xbeef", block=18_499_800)]}
    )
    scanner = ChainWhaleScanner(whale_config, explorers={"ETH": explorer})

    movements = await scanner.fetch_movements("ETH")

    assert len(movements) == 1
    movement = movements[0]
    assert movement.chain == "ETH"
    assert movement.token == "ETH"
    assert movement.amount == 1_500_000
    assert movement.wallet_address == ETH_WHALE
    assert movement.contract_address == "0xbeef"
    assert movement.transaction_hash == "0xfeed"
    assert movement.block_number == 18_499_800


async def test_bsc_uses_its_own_multiplier_and_token(whale_config):
    # 1,000 BNB at $600 is $600K, under the $800K BSC threshold; 2,000 BNB is over
    explorer = FakeExplorer({BSC_WHALE: [make_tx(1_000), make_tx(2_000, tx_hash="0x2")]})
    scanner = ChainWhaleScanner(whale_config, explorers={"BSC": explorer})

    movements = await scanner.fetch_movements("bsc")

    assert [(m.token, m.amount, m.transaction_hash) for m in movements] == [
        ("BNB", 1_200_000, "0x2")
    ]


async def test_threshold_is_strict():
    config = WhaleScanConfig(
        chains={
            "ETH": ChainConfig(
                name="ETH",
                native_token="ETH",
                whale_threshold_usd=1000,
                usd_multiplier=1000,
                watch_addresses=[ETH_WHALE],
            )
        }
    )
    explorer = FakeExplorer({ETH_WHALE: [make_tx(1), make_tx(1.5, tx_hash="0x2")]})
    scanner = ChainWhaleScanner(config, explorers={"ETH": explorer})

    movements = await scanner.fetch_movements("ETH")

    assert [m.transaction_hash for m in movements] == ["0x2"]


async def test_fetches_newest_three_per_address_in_watch_order(whale_config):
    explorer = FakeExplorer(
        {
            ETH_WHALE: [make_tx(1_000, tx_hash=f"0xa{i}") for i in range(5)],
            ETH_EXCHANGE: [make_tx(1_000, tx_hash="0xb0")],
        }
    )
    scanner = ChainWhaleScanner(whale_config, explorers={"ETH": explorer})

    movements = await scanner.fetch_movements("ETH")

    assert sorted(explorer.calls) == sorted([(ETH_WHALE, 3), (ETH_EXCHANGE, 3)])
    assert [m.transaction_hash for m in movements] == ["0xa0", "0xa1", "0xa2", "0xb0"]


async def test_explorer_failure_degrades_to_synthetic(whale_config):
    explorer = FakeExplorer({ETH_WHALE: [make_tx(1_000)]}, fail_on=[ETH_EXCHANGE])
    scanner = ChainWhaleScanner(whale_config, explorers={"ETH": explorer}, rng=random.Random(7))

    movements = await scanner.fetch_movements("ETH")

    assert 1 <= len(movements) <= 3
    for movement in movements:
        assert movement.chain == "ETH"
        assert movement.token in {"ETH", "USDT", "USDC"}
        assert movement.amount >= 1_000_000
        assert movement.wallet_address.startswith("0x") and len(movement.wallet_address) == 42
        assert len(movement.transaction_hash) == 66
        assert 15_000_000 <= movement.block_number < 16_000_000


async def test_solana_without_explorer_is_always_synthetic(whale_config):
    scanner = ChainWhaleScanner(whale_config, explorers={}, rng=random.Random(3))

    movements = await scanner.fetch_movements("SOL")

    assert 1 <= len(movements) <= 3
    assert all(m.chain == "SOL" and m.token in {"SOL", "USDC"} for m in movements)
    assert all(m.amount >= 500_000 for m in movements)


def test_synthetic_movements_never_fall_below_threshold(whale_config):
    for seed in range(200):
        scanner = ChainWhaleScanner(whale_config, explorers={}, rng=random.Random(seed))
        for chain in whale_config.chains.values():
            for movement in scanner.generate_synthetic(chain):
                assert movement.amount >= chain.whale_threshold_usd


async def test_live_movements_never_fall_below_threshold(whale_config):
    rng = random.Random(42)
    explorer = FakeExplorer(
        {
            ETH_WHALE: [make_tx(rng.uniform(0, 1_000)) for _ in range(3)],
            ETH_EXCHANGE: [make_tx(rng.uniform(0, 1_000)) for _ in range(3)],
        }
    )
    scanner = ChainWhaleScanner(whale_config, explorers={"ETH": explorer})

    for movement in await scanner.fetch_movements("ETH"):
        assert movement.amount > 1_000_000


class SlowExplorer:
    """Fails fast for one address and answers slowly for the rest."""

    def __init__(self, failing: str, delay: float = 0.05):
        self.failing = failing
        self.delay = delay
        self.finished: list[str] = []

    async def get_recent_transactions(self, address, limit=3):
        if address == self.failing:
            raise TransientFetchError(f"rate limited: {address}")
        await asyncio.sleep(self.delay)
        self.finished.append(address)
        return [make_tx(1_000)]


async def test_failed_address_cancels_sibling_fetches(whale_config):
    explorer = SlowExplorer(failing=ETH_WHALE)
    scanner = ChainWhaleScanner(whale_config, explorers={"ETH": explorer}, rng=random.Random(1))

    movements = await scanner.fetch_movements("ETH")
    await asyncio.sleep(0.15)

    assert movements
    assert all(m.transaction_hash != "0xabc" for m in movements)
    assert explorer.finished == []
