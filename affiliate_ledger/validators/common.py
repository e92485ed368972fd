"""
Common validators for ledger input.

Each validator returns a tuple of (is_valid, parsed_value, error_message).
"""

from decimal import Decimal, InvalidOperation

from affiliate_ledger.models.types import MONEY_UPPER_BOUND


def validate_amount(
    amount: Decimal | int | float | str | None,
) -> tuple[bool, Decimal | None, str | None]:
    """
    Validate a payment amount.

    Args:
        amount: Amount to validate

    Returns:
        Tuple of (is_valid, parsed_value, error_message)

    Examples:
        >>> validate_amount("100.50")
        (True, Decimal('100.50'), None)
        >>> validate_amount(0)
        (False, None, 'Amount must be positive')
        >>> validate_amount("1e10")
        (False, None, 'Amount is too large')
    """
    if amount is None or isinstance(amount, bool):
        return False, None, "Amount is empty"

    try:
        # str() keeps floats at their shortest repr (0.1 -> "0.1")
        value = Decimal(str(amount).strip().replace(",", "."))
    except InvalidOperation:
        return False, None, "Invalid amount format"

    if not value.is_finite():
        return False, None, "Amount must be a finite number"

    if value <= 0:
        return False, None, "Amount must be positive"

    if value >= MONEY_UPPER_BOUND:
        return False, None, "Amount is too large"

    return True, value, None


def normalize_currency_code(currency: str | None, default: str = "USD") -> str:
    """
    Normalize currency code to upper case, defaulting when empty.

    Examples:
        >>> normalize_currency_code(" ghs ")
        'GHS'
        >>> normalize_currency_code(None)
        'USD'
    """
    if not currency or not currency.strip():
        return default
    return currency.strip().upper()


def normalize_referral_code(referral_code: str | None) -> str | None:
    """
    Strip whitespace from a referral code; blank codes become None.

    Examples:
        >>> normalize_referral_code("  AFF42 ")
        'AFF42'
        >>> normalize_referral_code("   ") is None
        True
    """
    if referral_code is None:
        return None
    stripped = referral_code.strip()
    return stripped or None
