"""Main entry point for Chainwatch."""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from .alerting import AlertLogger, SummaryGenerator, setup_app_logging
from .api import BinanceClient, CoinGeckoClient, ExplorerClient, GeminiClient
from .config import Config, load_config
from .db import MonitoredToken, Repository
from .detection import AlertEngine, ChainWhaleScanner, PriceDumpDetector
from .errors import ConfigurationError
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


def build_explorers(config: Config) -> dict[str, ExplorerClient]:
    """Create an explorer client per chain that has a live source and a key."""
    explorers = {}
    for name, chain in config.whales.chains.items():
        if not chain.explorer_url:
            continue
        try:
            explorers[name] = ExplorerClient(
                chain.explorer_url,
                chain.api_key,
                timeout=config.api.request_timeout_seconds,
            )
        except ConfigurationError as e:
            logger.warning(f"Live whale data disabled for {name}: {e} (set {chain.api_key_env})")
    return explorers


def build_text_client(config: Config) -> GeminiClient | None:
    """Create the text generation client, or None when no key is configured."""
    try:
        return GeminiClient(
            config.summary.api_key,
            model=config.summary.model,
            base_url=config.summary.api_base,
            timeout=config.summary.timeout_seconds,
        )
    except ConfigurationError as e:
        logger.warning(f"AI summaries disabled, using templates: {e}")
        return None


class ChainWatcher:
    """Main application class that orchestrates all components."""

    def __init__(self, config: Config):
        self.config = config

        self.repository = Repository(
            config.database.path, timeout=config.database.timeout_seconds
        )
        self.alert_logger = AlertLogger(
            log_file=config.logging.file,
            log_level=config.logging.level,
            max_file_size_mb=config.logging.max_file_size_mb,
            backup_count=config.logging.backup_count,
        )

        # Upstream clients
        self.explorers = build_explorers(config)
        self.coingecko = CoinGeckoClient(
            config.api.coingecko_base, timeout=config.api.request_timeout_seconds
        )
        self.binance = BinanceClient(
            config.api.binance_base, timeout=config.api.request_timeout_seconds
        )
        self.text_client = build_text_client(config)

        # Detection pipeline
        self.engine = AlertEngine(
            repository=self.repository,
            whale_scanner=ChainWhaleScanner(config.whales, self.explorers),
            dump_detector=PriceDumpDetector(
                config.dumps,
                primary=self.coingecko,
                secondary=self.binance,
                quote_asset=config.api.quote_asset,
            ),
            summarizer=SummaryGenerator(config.summary, client=self.text_client),
            chains=config.schedule.chains,
            retention_days=config.schedule.retention_days,
            max_concurrency=config.dumps.max_concurrency,
        )

        self.scheduler = Scheduler()

    async def start(self):
        """Initialize storage and start the scheduled jobs."""
        logger.info("Starting Chainwatch...")

        await self.repository.initialize()
        await self._sync_tokens()

        schedule = self.config.schedule
        self.scheduler.add_job("whale_scan", schedule.whale_scan_minutes * 60, self._whale_scan)
        self.scheduler.add_job("dump_scan", schedule.dump_scan_minutes * 60, self._dump_scan)
        self.scheduler.add_job("retention", schedule.retention_hours * 3600, self._retention)

        live = ", ".join(sorted(self.explorers)) or "none"
        logger.info(
            f"Watching chains {', '.join(schedule.chains)} (live explorers: {live}), "
            f"AI summaries {'on' if self.text_client else 'off'}"
        )

        self.scheduler.start()

    async def stop(self):
        """Stop the scheduler and release resources."""
        logger.info("Stopping Chainwatch...")

        await self.scheduler.stop()

        for explorer in self.explorers.values():
            await explorer.close()
        await self.coingecko.close()
        await self.binance.close()
        if self.text_client:
            await self.text_client.close()
        await self.repository.close()

        stats = self.engine.stats
        logger.info(
            f"Final stats: {stats['alerts_generated']} alerts generated, "
            f"{stats['alerts_deleted']} deleted"
        )
        self.alert_logger.close()

    async def _sync_tokens(self):
        """Load the configured token list into the registry."""
        for token in self.config.tokens:
            await self.repository.save_token(
                MonitoredToken(
                    symbol=token.symbol,
                    chain=token.chain,
                    price_source_id=token.price_source_id,
                    contract_address=token.contract_address,
                    enabled=token.enabled,
                    market_cap=token.market_cap,
                )
            )
        logger.info(f"Token registry synced: {len(self.config.tokens)} tokens")

    async def _whale_scan(self):
        for alert in await self.engine.run_whale_scan():
            self.alert_logger.log_alert(alert)

    async def _dump_scan(self):
        for alert in await self.engine.run_dump_scan():
            self.alert_logger.log_alert(alert)

    async def _retention(self):
        await self.engine.run_retention()


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Chainwatch - Monitor whale movements and price dumps"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args()


async def main_async(args):
    """Async main function."""
    config_path = Path(args.config)
    if not config_path.exists():
        logger.error(f"Configuration file not found: {config_path}")
        sys.exit(1)

    config = load_config(config_path)

    if args.debug:
        config.logging.level = "DEBUG"

    setup_app_logging(config.logging.level)

    watcher = ChainWatcher(config)

    # Handle shutdown signals
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def signal_handler():
        logger.info("Received shutdown signal")
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    await watcher.start()
    await shutdown_event.wait()
    await watcher.stop()


def main():
    """Main entry point."""
    args = parse_args()

    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
