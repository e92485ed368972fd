"""
Membership expiry notification repository.

Data access layer for the notification dedup ledger.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.membership_expiry_notification import (
    MembershipExpiryNotification,
)
from affiliate_ledger.repositories.base import BaseRepository


class ExpiryNotificationRepository(BaseRepository[MembershipExpiryNotification]):
    """Dedup ledger repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize expiry notification repository."""
        super().__init__(MembershipExpiryNotification, session)

    async def was_sent(self, membership_id: int, kind: str) -> bool:
        """
        Check whether a notification of this kind was already sent.

        Args:
            membership_id: Membership ID
            kind: Notification kind

        Returns:
            True if a dedup row exists
        """
        return await self.exists(membership_id=membership_id, kind=kind)

    async def record_sent(
        self,
        membership_id: int,
        user_id: str,
        kind: str,
        sent_at: datetime,
    ) -> MembershipExpiryNotification:
        """
        Record a delivered notification.

        Raises sqlalchemy IntegrityError if the row already exists.

        Args:
            membership_id: Membership ID
            user_id: Recipient user ID
            kind: Notification kind
            sent_at: Delivery timestamp

        Returns:
            Created dedup row
        """
        return await self.create(
            membership_id=membership_id,
            user_id=user_id,
            kind=kind,
            sent_at=sent_at,
        )
