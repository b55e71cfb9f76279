"""Upstream API clients."""

from .explorer import ExplorerClient, Transaction
from .gemini import GeminiClient, GenerationOptions
from .prices import BinanceClient, CoinGeckoClient, PriceSeries, Ticker

__all__ = [
    "ExplorerClient",
    "Transaction",
    "GeminiClient",
    "GenerationOptions",
    "BinanceClient",
    "CoinGeckoClient",
    "PriceSeries",
    "Ticker",
]
