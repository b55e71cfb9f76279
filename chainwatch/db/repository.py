"""Database repository for alerts and monitored tokens."""

import json
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from ..errors import BulkOperationError
from .models import SCHEMA

logger = logging.getLogger(__name__)

ALERT_TYPE_WHALE = "whale"
ALERT_TYPE_DUMP = "dump"

_WHALE_FIELDS = ("amount", "wallet_address")
_DUMP_FIELDS = ("price_change", "current_price", "volume")


@dataclass(frozen=True)
class Alert:
    """A whale or dump alert record.

    Whale alerts carry ``amount`` and ``wallet_address``; dump alerts carry
    ``price_change``, ``current_price`` and ``volume``. Never both.
    """

    id: int | None
    created_at: datetime
    alert_type: str
    severity: str
    chain: str
    token: str
    contract_address: str | None
    ai_summary: str
    amount: float | None = None
    wallet_address: str | None = None
    price_change: float | None = None
    current_price: float | None = None
    volume: float | None = None
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.alert_type == ALERT_TYPE_WHALE:
            required, forbidden = _WHALE_FIELDS, _DUMP_FIELDS
        elif self.alert_type == ALERT_TYPE_DUMP:
            required, forbidden = _DUMP_FIELDS, _WHALE_FIELDS
        else:
            raise ValueError(f"Unknown alert type: {self.alert_type!r}")

        missing = [name for name in required if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.alert_type} alert missing {', '.join(missing)}")

        extra = [name for name in forbidden if getattr(self, name) is not None]
        if extra:
            raise ValueError(f"{self.alert_type} alert must not set {', '.join(extra)}")


@dataclass
class MonitoredToken:
    """A token entry in the registry."""

    symbol: str
    chain: str
    price_source_id: str | None = None
    contract_address: str | None = None
    enabled: bool = True
    market_cap: float = 0.0


@dataclass
class AlertQuery:
    """Filters for reading recent alerts, newest first."""

    chain: str | None = None
    alert_type: str | None = None
    severity: str | None = None
    token_search: str | None = None  # case-insensitive substring
    limit: int = 50


def _to_db_time(value: datetime) -> str:
    # Stored as UTC at fixed precision so string comparison matches time order.
    # Naive values are taken to be UTC already.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class Repository:
    """Database repository for all persistence operations."""

    def __init__(self, db_path: str | Path, timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._connection: aiosqlite.Connection | None = None

    async def initialize(self):
        """Initialize the database and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self.db_path, timeout=self.timeout)
        self._connection.row_factory = aiosqlite.Row

        await self._connection.executescript(SCHEMA)
        await self._connection.commit()

        logger.info(f"Database initialized at {self.db_path}")

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def conn(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if not self._connection:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._connection

    # Alert Operations

    async def save_alert(self, alert: Alert) -> Alert:
        """Append an alert and return a copy carrying its new ID."""
        try:
            async with self.conn.execute(
                """
                INSERT INTO alerts (
                    created_at, alert_type, severity, chain, token,
                    contract_address, ai_summary, amount, wallet_address,
                    price_change, current_price, volume, metadata
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    _to_db_time(alert.created_at),
                    alert.alert_type,
                    alert.severity,
                    alert.chain,
                    alert.token,
                    alert.contract_address,
                    alert.ai_summary,
                    alert.amount,
                    alert.wallet_address,
                    alert.price_change,
                    alert.current_price,
                    alert.volume,
                    json.dumps(alert.metadata) if alert.metadata else None,
                ),
            ) as cursor:
                alert_id = cursor.lastrowid

            await self.conn.commit()
        except aiosqlite.Error as e:
            raise BulkOperationError(f"Failed to append {alert.alert_type} alert: {e}") from e

        return replace(alert, id=alert_id or 0)

    async def query_alerts(self, query: AlertQuery | None = None) -> list[Alert]:
        """
        Get recent alerts matching the query, newest first.

        Args:
            query: Optional filters; exact match on chain, type and severity,
                substring match on token.

        Returns:
            At most ``query.limit`` alerts
        """
        query = query or AlertQuery()
        clauses = []
        params: list = []

        if query.chain:
            clauses.append("chain = ?")
            params.append(query.chain)
        if query.alert_type:
            clauses.append("alert_type = ?")
            params.append(query.alert_type)
        if query.severity:
            clauses.append("severity = ?")
            params.append(query.severity)
        if query.token_search:
            escaped = (
                query.token_search.replace("\\", "\\\\")
                .replace("%", "\\%")
                .replace("_", "\\_")
            )
            clauses.append("token LIKE ? ESCAPE '\\'")
            params.append(f"%{escaped}%")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(query.limit)

        async with self.conn.execute(
            f"SELECT * FROM alerts {where} ORDER BY created_at DESC, id DESC LIMIT ?",
            params,
        ) as cursor:
            rows = await cursor.fetchall()

            return [self._row_to_alert(row) for row in rows]

    async def delete_alerts_older_than(self, cutoff: datetime) -> int:
        """Delete every alert created strictly before ``cutoff``; return the count."""
        try:
            async with self.conn.execute(
                "DELETE FROM alerts WHERE created_at < ?", (_to_db_time(cutoff),)
            ) as cursor:
                deleted = cursor.rowcount

            await self.conn.commit()
        except aiosqlite.Error as e:
            raise BulkOperationError(f"Failed to delete alerts before {cutoff}: {e}") from e

        return max(deleted, 0)

    @staticmethod
    def _row_to_alert(row: aiosqlite.Row) -> Alert:
        return Alert(
            id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            alert_type=row["alert_type"],
            severity=row["severity"],
            chain=row["chain"],
            token=row["token"],
            contract_address=row["contract_address"],
            ai_summary=row["ai_summary"],
            amount=row["amount"],
            wallet_address=row["wallet_address"],
            price_change=row["price_change"],
            current_price=row["current_price"],
            volume=row["volume"],
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
        )

    # Token Registry Operations

    async def save_token(self, token: MonitoredToken):
        """Insert or refresh a monitored token entry."""
        try:
            await self.conn.execute(
                """
                INSERT INTO monitored_tokens (
                    symbol, chain, price_source_id, contract_address, enabled, market_cap
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(symbol, chain) DO UPDATE SET
                    price_source_id = excluded.price_source_id,
                    contract_address = excluded.contract_address,
                    enabled = excluded.enabled,
                    market_cap = excluded.market_cap
                """,
                (
                    token.symbol,
                    token.chain,
                    token.price_source_id,
                    token.contract_address,
                    int(token.enabled),
                    token.market_cap,
                ),
            )
            await self.conn.commit()
        except aiosqlite.Error as e:
            raise BulkOperationError(f"Failed to save token {token.symbol}: {e}") from e

    async def list_tokens(self, enabled_only: bool = True) -> list[MonitoredToken]:
        """List monitored tokens, by default only the enabled ones."""
        sql = "SELECT * FROM monitored_tokens"
        if enabled_only:
            sql += " WHERE enabled = 1"
        sql += " ORDER BY chain, symbol"

        try:
            async with self.conn.execute(sql) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise BulkOperationError(f"Failed to list monitored tokens: {e}") from e

        return [
            MonitoredToken(
                symbol=row["symbol"],
                chain=row["chain"],
                price_source_id=row["price_source_id"],
                contract_address=row["contract_address"],
                enabled=bool(row["enabled"]),
                market_cap=row["market_cap"],
            )
            for row in rows
        ]
