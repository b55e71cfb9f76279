"""Price source clients - CoinGecko market charts and Binance 24h tickers."""

from dataclasses import dataclass

import httpx

from ..errors import TransientFetchError


@dataclass
class PriceSeries:
    """Trailing-day samples, oldest first."""

    prices: list[float]
    volumes: list[float]

    @property
    def current_price(self) -> float:
        return self.prices[-1]

    @property
    def current_volume(self) -> float:
        return self.volumes[-1] if self.volumes else 0.0


@dataclass
class Ticker:
    """24h rolling ticker for a trading pair."""

    symbol: str
    last_price: float
    open_price: float
    volume: float


class CoinGeckoClient:
    """Client for the CoinGecko public API."""

    def __init__(
        self,
        base_url: str = "https://api.coingecko.com/api/v3",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def get_series(self, token_id: str, days: int = 1) -> PriceSeries:
        """
        Fetch the USD price and volume series for a coin.

        Args:
            token_id: CoinGecko coin id (e.g. "pepe")
            days: Trailing window in days

        Returns:
            PriceSeries with at least one price sample

        Raises:
            TransientFetchError: on request failure or an empty/malformed series
        """
        try:
            response = await self._client.get(
                f"{self.base_url}/coins/{token_id}/market_chart",
                params={"vs_currency": "usd", "days": days},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransientFetchError(f"CoinGecko request failed for {token_id}: {e}") from e

        try:
            prices = [float(point[1]) for point in data.get("prices") or []]
            volumes = [float(point[1]) for point in data.get("total_volumes") or []]
        except (AttributeError, IndexError, TypeError, ValueError) as e:
            raise TransientFetchError(f"Malformed CoinGecko series for {token_id}: {e}") from e

        if not prices:
            raise TransientFetchError(f"CoinGecko returned no prices for {token_id}")

        return PriceSeries(prices=prices, volumes=volumes)


class BinanceClient:
    """Client for the Binance spot market data API."""

    def __init__(
        self,
        base_url: str = "https://api.binance.com/api/v3",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def get_ticker(self, pair: str) -> Ticker:
        """Fetch the 24h ticker for a pair such as ``PEPEUSDT``."""
        try:
            response = await self._client.get(
                f"{self.base_url}/ticker/24hr", params={"symbol": pair}
            )
            response.raise_for_status()
            data = response.json()
            return Ticker(
                symbol=data.get("symbol", pair),
                last_price=float(data["lastPrice"]),
                open_price=float(data["openPrice"]),
                volume=float(data["volume"]),
            )
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            raise TransientFetchError(f"Binance ticker failed for {pair}: {e}") from e
