"""Alert engine - turns scanner output into persisted alerts."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from ..alerting.summary import SummaryGenerator
from ..db import ALERT_TYPE_DUMP, ALERT_TYPE_WHALE, Alert, Repository
from .dumps import DumpCandidate, PriceDumpDetector
from .severity import classify_dump, classify_whale
from .whales import ChainWhaleScanner, Movement

logger = logging.getLogger(__name__)

DEFAULT_CHAINS = ("ETH", "SOL", "BSC")


class AlertEngine:
    """
    Runs the whale scan, dump scan and retention passes.

    Each pass is independent and only appends or deletes alerts, so passes
    may overlap freely. Store failures (BulkOperationError) propagate to the
    caller; everything upstream of the store degrades to its fallback.
    """

    def __init__(
        self,
        repository: Repository,
        whale_scanner: ChainWhaleScanner,
        dump_detector: PriceDumpDetector,
        summarizer: SummaryGenerator,
        chains: list[str] | tuple[str, ...] = DEFAULT_CHAINS,
        retention_days: int = 7,
        max_concurrency: int = 4,
    ):
        self.repository = repository
        self.whale_scanner = whale_scanner
        self.dump_detector = dump_detector
        self.summarizer = summarizer
        self.chains = list(chains)
        self.retention_days = retention_days
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._whale_runs = 0
        self._dump_runs = 0
        self._alert_count = 0
        self._deleted_count = 0

    async def run_whale_scan(self) -> list[Alert]:
        """
        Scan every configured chain and store an alert per whale movement.

        Returns:
            Alerts written in this run, in scan order
        """
        self._whale_runs += 1
        alerts: list[Alert] = []

        for chain in self.chains:
            movements = await self.whale_scanner.fetch_movements(chain)
            for movement in movements:
                alert = await self._save(await self._whale_alert(movement))
                alerts.append(alert)

        logger.info(f"Whale scan complete: {len(alerts)} alerts across {len(self.chains)} chains")
        return alerts

    async def run_dump_scan(self) -> list[Alert]:
        """
        Check every enabled monitored token and store an alert per dump.

        Returns:
            Alerts written in this run, in token order
        """
        self._dump_runs += 1
        tokens = await self.repository.list_tokens(enabled_only=True)

        async def detect(token):
            async with self._semaphore:
                return await self.dump_detector.detect(token)

        candidates = await asyncio.gather(*(detect(token) for token in tokens))

        alerts: list[Alert] = []
        for candidate in candidates:
            if candidate is None or not candidate.is_dump:
                continue
            alert = await self._save(await self._dump_alert(candidate))
            alerts.append(alert)

        logger.info(f"Dump scan complete: {len(alerts)} alerts from {len(tokens)} tokens")
        return alerts

    async def run_retention(self, now: datetime | None = None) -> int:
        """Delete alerts older than the retention window; return how many."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=self.retention_days)

        deleted = await self.repository.delete_alerts_older_than(cutoff)
        self._deleted_count += deleted

        logger.info(f"Deleted {deleted} old alerts (before {cutoff:%Y-%m-%d %H:%M:%S})")
        return deleted

    async def _whale_alert(self, movement: Movement) -> Alert:
        summary = await self.summarizer.summarize(movement, ALERT_TYPE_WHALE)
        return Alert(
            id=None,
            created_at=datetime.now(timezone.utc),
            alert_type=ALERT_TYPE_WHALE,
            severity=classify_whale(movement.amount),
            chain=movement.chain,
            token=movement.token,
            contract_address=movement.contract_address,
            ai_summary=summary,
            amount=movement.amount,
            wallet_address=movement.wallet_address,
            metadata={
                "transaction_hash": movement.transaction_hash,
                "block_number": movement.block_number,
            },
        )

    async def _dump_alert(self, candidate: DumpCandidate) -> Alert:
        summary = await self.summarizer.summarize(candidate, ALERT_TYPE_DUMP)
        return Alert(
            id=None,
            created_at=datetime.now(timezone.utc),
            alert_type=ALERT_TYPE_DUMP,
            severity=classify_dump(candidate.price_change),
            chain=candidate.chain,
            token=candidate.token,
            contract_address=candidate.contract_address,
            ai_summary=summary,
            price_change=candidate.price_change,
            current_price=candidate.current_price,
            volume=candidate.volume,
            metadata={
                "timeframe": candidate.timeframe,
                "market_cap": candidate.market_cap,
            },
        )

    async def _save(self, alert: Alert) -> Alert:
        saved = await self.repository.save_alert(alert)
        self._alert_count += 1
        logger.debug(f"Saved {saved.alert_type} alert {saved.id} for {saved.chain}/{saved.token}")
        return saved

    @property
    def stats(self) -> dict:
        """Get engine statistics."""
        return {
            "whale_runs": self._whale_runs,
            "dump_runs": self._dump_runs,
            "alerts_generated": self._alert_count,
            "alerts_deleted": self._deleted_count,
        }
