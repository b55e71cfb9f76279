"""Chainwatch - whale movement and price dump alerts across chains."""

__version__ = "0.1.0"
