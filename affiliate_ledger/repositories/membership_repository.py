"""
Membership repository.

Read access to memberships for the expiry sweep.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.membership import Membership
from affiliate_ledger.repositories.base import BaseRepository


class MembershipRepository(BaseRepository[Membership]):
    """Membership repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize membership repository."""
        super().__init__(Membership, session)

    async def find_active_expiring_between(
        self, start: datetime, end: datetime
    ) -> list[Membership]:
        """
        Get active memberships whose expiry falls in [start, end).

        Args:
            start: Window start (inclusive)
            end: Window end (exclusive)

        Returns:
            List of memberships ordered by ID
        """
        stmt = (
            select(Membership)
            .where(
                Membership.is_active.is_(True),
                Membership.expires_at >= start,
                Membership.expires_at < end,
            )
            .order_by(Membership.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
