"""
Formatting helpers for notifications and logs.
"""

from datetime import datetime
from decimal import Decimal


def format_expiry_date(value: datetime) -> str:
    """
    Format a date the way renewal emails show it.

    Examples:
        >>> format_expiry_date(datetime(2026, 10, 25))
        'October 25, 2026'
    """
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_rate_percent(rate: Decimal) -> str:
    """
    Format a fractional rate as a percentage.

    Examples:
        >>> format_rate_percent(Decimal("0.60"))
        '60%'
        >>> format_rate_percent(Decimal("0.125"))
        '12.5%'
    """
    percent = (rate * 100).normalize()
    return f"{percent:f}%"
