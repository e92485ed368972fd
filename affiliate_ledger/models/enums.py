"""
Model enumerations.

String enums persisted as plain strings.
"""

from enum import StrEnum


class CommissionStatus(StrEnum):
    """Commission payout status."""

    PENDING = "pending"  # Awaiting manual approval (unused by default policy)
    AVAILABLE = "available"  # Eligible for payout
    PAID = "paid"  # Paid out, terminal
    CANCELLED = "cancelled"  # Rejected, terminal


class CommissionAction(StrEnum):
    """Administrative action on a commission."""

    APPROVE = "approve"
    REJECT = "reject"
    MARK_PAID = "mark_paid"


class NotificationKind(StrEnum):
    """Membership expiry notification kind (dedup key)."""

    SEVEN_DAY_WARNING = "seven_day_warning"
    DAY_OF_WARNING = "day_of_warning"
    EXPIRED = "expired"


class NotificationType(StrEnum):
    """Outbound notification template type."""

    MEMBERSHIP_EXPIRY_WARNING = "membership_expiry_warning"
    MEMBERSHIP_EXPIRED = "membership_expired"
