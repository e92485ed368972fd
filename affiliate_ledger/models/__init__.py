"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.base import Base
from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import (
    CommissionAction,
    CommissionStatus,
    NotificationKind,
    NotificationType,
)
from affiliate_ledger.models.membership import Membership
from affiliate_ledger.models.membership_expiry_notification import (
    MembershipExpiryNotification,
)

__all__ = [
    # Base
    "Base",
    # Enums
    "CommissionAction",
    "CommissionStatus",
    "NotificationKind",
    "NotificationType",
    # Ledger
    "Affiliate",
    "Commission",
    # Membership expiry
    "Membership",
    "MembershipExpiryNotification",
]
