"""Configuration loader for Chainwatch."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv


@dataclass
class ChainConfig:
    """Per-chain whale scanning settings."""

    name: str  # ETH, SOL, BSC
    native_token: str
    whale_threshold_usd: float
    usd_multiplier: float  # static native -> USD conversion
    watch_addresses: list[str] = field(default_factory=list)
    synthetic_tokens: list[str] = field(default_factory=list)
    explorer_url: str | None = None  # None means no live source is wired
    api_key_env: str | None = None
    api_key: str | None = None  # resolved from api_key_env at load time


@dataclass
class WhaleScanConfig:
    chains: dict[str, ChainConfig]
    transactions_per_address: int = 3
    max_concurrency: int = 4


@dataclass
class DumpScanConfig:
    dump_threshold_pct: float = -10.0
    reference_offset: int = 12  # samples back in the daily series, ~10 minutes
    timeframe: str = "10m"
    synthetic_probability: float = 0.3
    max_concurrency: int = 4


@dataclass
class SummaryConfig:
    api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-1.5-flash"
    api_key_env: str = "GEMINI_API_KEY"
    api_key: str | None = None
    temperature: float = 0.7
    max_tokens: int = 100
    top_p: float = 0.95
    top_k: int = 40
    max_length: int = 200
    timeout_seconds: float = 15.0


@dataclass
class ScheduleConfig:
    whale_scan_minutes: float = 5
    dump_scan_minutes: float = 3
    retention_hours: float = 24
    retention_days: int = 7
    chains: list[str] = field(default_factory=lambda: ["ETH", "SOL", "BSC"])


@dataclass
class ApiConfig:
    coingecko_base: str = "https://api.coingecko.com/api/v3"
    binance_base: str = "https://api.binance.com/api/v3"
    quote_asset: str = "USDT"
    request_timeout_seconds: float = 10.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = "logs/alerts.log"
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class DatabaseConfig:
    path: str = "data/chainwatch.db"
    timeout_seconds: float = 5.0


@dataclass
class TokenConfig:
    """A token monitored for price dumps."""

    symbol: str
    chain: str
    price_source_id: str | None = None
    contract_address: str | None = None
    enabled: bool = True
    market_cap: float = 0.0


@dataclass
class Config:
    whales: WhaleScanConfig
    dumps: DumpScanConfig
    summary: SummaryConfig
    schedule: ScheduleConfig
    api: ApiConfig
    logging: LoggingConfig
    database: DatabaseConfig
    tokens: list[TokenConfig]


def _resolve_secret(env_name: str | None) -> str | None:
    if not env_name:
        return None
    value = os.getenv(env_name)
    return value or None


def _load_chains(raw: dict) -> dict[str, ChainConfig]:
    chains = {}
    for name, values in raw.items():
        chain = ChainConfig(name=name.upper(), **values)
        chain.api_key = _resolve_secret(chain.api_key_env)
        chains[chain.name] = chain
    return chains


def load_config(config_path: str | Path = "config.yaml") -> Config:
    """Load configuration from YAML file.

    Credentials are read from the environment (and a ``.env`` file if present),
    using the variable names the YAML file points at.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    load_dotenv()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    whales_raw = dict(raw.get("whales", {}))
    chains = _load_chains(whales_raw.pop("chains", {}))

    summary = SummaryConfig(**raw.get("summary", {}))
    summary.api_key = _resolve_secret(summary.api_key_env)

    return Config(
        whales=WhaleScanConfig(chains=chains, **whales_raw),
        dumps=DumpScanConfig(**raw.get("dumps", {})),
        summary=summary,
        schedule=ScheduleConfig(**raw.get("schedule", {})),
        api=ApiConfig(**raw.get("api", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        database=DatabaseConfig(**raw.get("database", {})),
        tokens=[TokenConfig(**t) for t in raw.get("tokens", [])],
    )
