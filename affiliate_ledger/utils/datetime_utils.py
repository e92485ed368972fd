"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Attach or convert to UTC.

    Naive datetimes are assumed to already be UTC (SQLite returns them
    without tzinfo).

    Args:
        value: Datetime to normalize

    Returns:
        Timezone-aware UTC datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def start_of_day(value: datetime, offset_days: int = 0) -> datetime:
    """
    Get UTC midnight of the given moment's calendar day, shifted by days.

    Args:
        value: Reference moment
        offset_days: Days to add to the resulting midnight

    Returns:
        Timezone-aware UTC midnight
    """
    midnight = ensure_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(days=offset_days)


def period_start(period: str | None, now: datetime | None = None) -> datetime | None:
    """
    Get the start of the current week, month or year.

    Args:
        period: "week", "month", "year" or None for all time
        now: Reference moment (defaults to current UTC time)

    Returns:
        Period start in UTC, or None for all time

    Raises:
        ValueError: Unknown period
    """
    if period is None:
        return None

    today = start_of_day(now or utc_now())
    if period == "week":
        return today - timedelta(days=today.weekday())
    if period == "month":
        return today.replace(day=1)
    if period == "year":
        return today.replace(month=1, day=1)

    raise ValueError(f"Unknown period: {period}")
