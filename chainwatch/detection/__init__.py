"""Whale and dump detection."""

from .dumps import DumpCandidate, PriceDumpDetector
from .engine import AlertEngine
from .severity import (
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    classify_dump,
    classify_whale,
)
from .whales import ChainWhaleScanner, Movement

__all__ = [
    "AlertEngine",
    "ChainWhaleScanner",
    "DumpCandidate",
    "Movement",
    "PriceDumpDetector",
    "SEVERITY_HIGH",
    "SEVERITY_LOW",
    "SEVERITY_MEDIUM",
    "classify_dump",
    "classify_whale",
]
