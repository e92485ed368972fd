"""Affiliate commission ledger, ranking engine and membership expiry sweep."""

__version__ = "0.1.0"
