"""Client for Etherscan-compatible block explorers (Etherscan, BscScan)."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx

from ..errors import ConfigurationError, TransientFetchError

logger = logging.getLogger(__name__)

WEI_PER_NATIVE = 10**18


@dataclass
class Transaction:
    """A normal (native value) transaction from an address's history."""

    hash: str
    to: str | None
    value_wei: int
    block_number: int
    timestamp: datetime

    @property
    def native_value(self) -> float:
        """Value in whole native units (ETH, BNB)."""
        return self.value_wei / WEI_PER_NATIVE


class ExplorerClient:
    """Client for one chain's Etherscan-style ``account/txlist`` endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise ConfigurationError(f"No API key configured for explorer {base_url}")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def get_recent_transactions(self, address: str, limit: int = 3) -> list[Transaction]:
        """
        Fetch the newest transactions for an address.

        Args:
            address: Watched wallet address
            limit: Number of newest transactions to return

        Returns:
            Transactions, newest first (empty if the address has none)

        Raises:
            TransientFetchError: on network errors, non-2xx responses or an
                explorer-level error (bad key, rate limit)
        """
        params = {
            "module": "account",
            "action": "txlist",
            "address": address,
            "startblock": 0,
            "endblock": 99999999,
            "page": 1,
            "offset": limit,
            "sort": "desc",
            "apikey": self.api_key,
        }

        try:
            response = await self._client.get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransientFetchError(f"Explorer request failed for {address}: {e}") from e

        if str(data.get("status")) != "1":
            # status 0 is also used for an empty history
            if "no transactions found" in str(data.get("message", "")).lower():
                return []
            raise TransientFetchError(
                f"Explorer error for {address}: {data.get('message')} {data.get('result')}"
            )

        transactions = []
        try:
            for item in data["result"][:limit]:
                transactions.append(
                    Transaction(
                        hash=item["hash"],
                        to=item.get("to") or None,
                        value_wei=int(item["value"]),
                        block_number=int(item["blockNumber"]),
                        timestamp=datetime.fromtimestamp(
                            int(item["timeStamp"]), tz=timezone.utc
                        ),
                    )
                )
        except (KeyError, TypeError, ValueError) as e:
            raise TransientFetchError(f"Malformed explorer response for {address}: {e}") from e

        return transactions
