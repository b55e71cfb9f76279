"""Exception types shared across the alert pipeline."""


class ChainwatchError(Exception):
    """Base class for all chainwatch errors."""


class TransientFetchError(ChainwatchError):
    """An upstream API failed, timed out, or returned something unusable.

    Always handled by the caller's fallback policy, never propagated out of a
    scanner, detector or summary generator.
    """


class ConfigurationError(ChainwatchError):
    """A required credential or setting is missing."""


class BulkOperationError(ChainwatchError):
    """The alert store failed to append or delete records."""
