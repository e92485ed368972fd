"""Repositories package."""

from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.repositories.commission_repository import CommissionRepository
from affiliate_ledger.repositories.expiry_notification_repository import (
    ExpiryNotificationRepository,
)
from affiliate_ledger.repositories.membership_repository import MembershipRepository

__all__ = [
    "AffiliateRepository",
    "CommissionRepository",
    "ExpiryNotificationRepository",
    "MembershipRepository",
]
