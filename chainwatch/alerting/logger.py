"""Alert logging - formats and outputs alerts to console and file."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..db import ALERT_TYPE_WHALE, Alert


class AlertFormatter(logging.Formatter):
    """Custom formatter for alert messages."""

    WHALE_FORMAT = """
================================================================================
{timestamp} | WHALE ALERT | {severity}
--------------------------------------------------------------------------------
  Chain:       {chain}
  Token:       {token}
  Amount:      ${amount:,.2f}
  Wallet:      {wallet}
  Contract:    {contract}
  Tx:          {tx_hash}
  Summary:     {summary}
================================================================================
"""

    DUMP_FORMAT = """
================================================================================
{timestamp} | DUMP ALERT | {severity}
--------------------------------------------------------------------------------
  Chain:       {chain}
  Token:       {token}
  Change:      {price_change:+.2f}% ({timeframe})
  Price:       ${current_price:,.8g}
  Volume:      ${volume:,.2f}
  Contract:    {contract}
  Summary:     {summary}
================================================================================
"""

    def format(self, record: logging.LogRecord) -> str:
        if hasattr(record, "alert"):
            return self._format_alert(record.alert)
        return super().format(record)

    def _format_alert(self, alert: Alert) -> str:
        common = {
            "timestamp": alert.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "severity": alert.severity.upper(),
            "chain": alert.chain,
            "token": alert.token,
            "contract": alert.contract_address or "Unknown",
            "summary": alert.ai_summary,
        }
        if alert.alert_type == ALERT_TYPE_WHALE:
            return self.WHALE_FORMAT.format(
                amount=alert.amount,
                wallet=alert.wallet_address,
                tx_hash=alert.metadata.get("transaction_hash", "Unknown"),
                **common,
            )
        return self.DUMP_FORMAT.format(
            price_change=alert.price_change,
            timeframe=alert.metadata.get("timeframe", "?"),
            current_price=alert.current_price,
            volume=alert.volume,
            **common,
        )


class AlertLogger:
    """Handles alert output to console and file."""

    def __init__(
        self,
        log_file: str | Path,
        log_level: str = "INFO",
        max_file_size_mb: int = 10,
        backup_count: int = 5,
    ):
        self.log_file = Path(log_file)
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.max_file_size = max_file_size_mb * 1024 * 1024
        self.backup_count = backup_count

        self._logger = logging.getLogger("chainwatch.alerts")
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging handlers."""
        self._logger.setLevel(self.log_level)
        self._logger.handlers.clear()
        self._logger.propagate = False

        self.log_file.parent.mkdir(parents=True, exist_ok=True)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(AlertFormatter())
        self._logger.addHandler(console_handler)

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=self.max_file_size,
            backupCount=self.backup_count,
        )
        file_handler.setLevel(self.log_level)
        file_handler.setFormatter(AlertFormatter())
        self._logger.addHandler(file_handler)

    def log_alert(self, alert: Alert):
        """Log an alert to console and file."""
        record = self._logger.makeRecord(
            name="chainwatch.alerts",
            level=logging.WARNING,
            fn="",
            lno=0,
            msg="Alert triggered",
            args=(),
            exc_info=None,
        )
        record.alert = alert
        self._logger.handle(record)

    def close(self):
        """Flush and detach handlers."""
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)


def setup_app_logging(level: str = "INFO"):
    """Set up application-wide logging."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
