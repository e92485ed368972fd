"""
Expiry time windows.

Three disjoint day-long windows relative to the sweep day's UTC midnight.
"""

from dataclasses import dataclass
from datetime import datetime

from affiliate_ledger.config.business_constants import (
    DAY_OF_WARNING_OFFSET_DAYS,
    EXPIRED_OFFSET_DAYS,
    SEVEN_DAY_WARNING_OFFSET_DAYS,
)
from affiliate_ledger.models.enums import NotificationKind, NotificationType
from affiliate_ledger.utils.datetime_utils import start_of_day


@dataclass(frozen=True)
class ExpiryWindow:
    """Half-open expiry window [start, end) and what to send for it."""

    kind: NotificationKind
    notification_type: NotificationType
    start: datetime
    end: datetime
    days_remaining: int | None


# (kind, day offset, notification type, days_remaining in payload)
WINDOW_SPECS: tuple[tuple[NotificationKind, int, NotificationType, int | None], ...] = (
    (
        NotificationKind.SEVEN_DAY_WARNING,
        SEVEN_DAY_WARNING_OFFSET_DAYS,
        NotificationType.MEMBERSHIP_EXPIRY_WARNING,
        7,
    ),
    (
        NotificationKind.DAY_OF_WARNING,
        DAY_OF_WARNING_OFFSET_DAYS,
        NotificationType.MEMBERSHIP_EXPIRY_WARNING,
        0,
    ),
    (
        NotificationKind.EXPIRED,
        EXPIRED_OFFSET_DAYS,
        NotificationType.MEMBERSHIP_EXPIRED,
        None,
    ),
)


def compute_windows(now: datetime) -> tuple[ExpiryWindow, ...]:
    """
    Build the T-7, T-0 and T+1 windows for the day containing ``now``.

    Args:
        now: Sweep moment (naive values are treated as UTC)

    Returns:
        Windows in send order
    """
    return tuple(
        ExpiryWindow(
            kind=kind,
            notification_type=notification_type,
            start=start_of_day(now, offset),
            end=start_of_day(now, offset + 1),
            days_remaining=days_remaining,
        )
        for kind, offset, notification_type, days_remaining in WINDOW_SPECS
    )
