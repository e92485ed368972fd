"""Currency normalization."""

from affiliate_ledger.services.currency.normalizer import CurrencyNormalizer

__all__ = ["CurrencyNormalizer"]
