"""Severity tiers for whale and dump alerts."""

SEVERITY_LOW = "low"
SEVERITY_MEDIUM = "medium"
SEVERITY_HIGH = "high"

WHALE_HIGH_USD = 10_000_000
WHALE_MEDIUM_USD = 1_000_000

DUMP_HIGH_PCT = 20
DUMP_MEDIUM_PCT = 10


def classify_whale(amount_usd: float) -> str:
    """Tier a whale movement by USD amount. Ties fall to the lower tier."""
    if amount_usd > WHALE_HIGH_USD:
        return SEVERITY_HIGH
    if amount_usd > WHALE_MEDIUM_USD:
        return SEVERITY_MEDIUM
    return SEVERITY_LOW


def classify_dump(pct_change: float) -> str:
    """Tier a price move by the magnitude of its percent change."""
    magnitude = abs(pct_change)
    if magnitude > DUMP_HIGH_PCT:
        return SEVERITY_HIGH
    if magnitude > DUMP_MEDIUM_PCT:
        return SEVERITY_MEDIUM
    return SEVERITY_LOW
