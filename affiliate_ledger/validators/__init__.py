"""Input validators."""

from affiliate_ledger.validators.common import (
    normalize_currency_code,
    normalize_referral_code,
    validate_amount,
)

__all__ = [
    "normalize_currency_code",
    "normalize_referral_code",
    "validate_amount",
]
