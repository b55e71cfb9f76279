"""Database layer."""

from .models import SCHEMA
from .repository import (
    ALERT_TYPE_DUMP,
    ALERT_TYPE_WHALE,
    Alert,
    AlertQuery,
    MonitoredToken,
    Repository,
)

__all__ = [
    "SCHEMA",
    "ALERT_TYPE_DUMP",
    "ALERT_TYPE_WHALE",
    "Alert",
    "AlertQuery",
    "MonitoredToken",
    "Repository",
]
