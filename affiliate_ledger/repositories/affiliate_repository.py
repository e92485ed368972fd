"""
Affiliate repository.

Data access layer for Affiliate model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.repositories.base import BaseRepository
from affiliate_ledger.utils.datetime_utils import utc_now


class AffiliateRepository(BaseRepository[Affiliate]):
    """Affiliate repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate repository."""
        super().__init__(Affiliate, session)

    async def get_active_by_referral_code(
        self, referral_code: str
    ) -> Affiliate | None:
        """
        Get active affiliate owning a referral code.

        Args:
            referral_code: Shareable referral code

        Returns:
            Affiliate or None if no active affiliate owns the code
        """
        stmt = select(Affiliate).where(
            Affiliate.referral_code == referral_code,
            Affiliate.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_leaderboard_candidates(self) -> list[Affiliate]:
        """
        Get affiliates that completed onboarding.

        Display-name filtering happens in the ranking engine.

        Returns:
            List of affiliates ordered by ID
        """
        stmt = (
            select(Affiliate)
            .where(Affiliate.onboarding_completed.is_(True))
            .order_by(Affiliate.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def deactivate(self, affiliate_id: int) -> Affiliate | None:
        """
        Deactivate affiliate. Affiliates are never deleted.

        Args:
            affiliate_id: Affiliate ID

        Returns:
            Updated affiliate or None if not found
        """
        affiliate = await self.get_by_id(affiliate_id)
        if not affiliate:
            return None

        if affiliate.is_active:
            affiliate.is_active = False
            affiliate.deactivated_at = utc_now()
            await self.session.flush()

        return affiliate
