"""Alert output and summaries."""

from .logger import AlertFormatter, AlertLogger, setup_app_logging
from .summary import SummaryGenerator, format_amount, shorten_address

__all__ = [
    "AlertFormatter",
    "AlertLogger",
    "setup_app_logging",
    "SummaryGenerator",
    "format_amount",
    "shorten_address",
]
