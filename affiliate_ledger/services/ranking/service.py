"""
Leaderboard service.

Loads eligible affiliates and their commissions, ranks them and returns
a page plus aggregate stats.
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.settings import settings
from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.repositories.commission_repository import CommissionRepository
from affiliate_ledger.services.ranking.leaderboard import (
    AffiliateRankingEntry,
    compute_leaderboard,
    eligible_affiliates,
)
from affiliate_ledger.utils.exceptions import StoreError


@dataclass
class LeaderboardStats:
    """Aggregates over the whole leaderboard."""

    total_affiliates: int
    total_earnings: Decimal
    total_referrals: int
    active_affiliates: int


@dataclass
class LeaderboardPage:
    """One page of the leaderboard."""

    entries: list[AffiliateRankingEntry]
    stats: LeaderboardStats
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Number of pages."""
        total = self.stats.total_affiliates
        return (total + self.limit - 1) // self.limit if total > 0 else 0


class LeaderboardService:
    """On-demand affiliate ranking."""

    def __init__(self, session: AsyncSession, default_limit: int | None = None) -> None:
        """
        Initialize leaderboard service.

        Args:
            session: Async database session
            default_limit: Page size when none is requested
                (defaults to settings.leaderboard_page_size)
        """
        self.session = session
        self.default_limit = default_limit or settings.leaderboard_page_size
        self.affiliate_repo = AffiliateRepository(session)
        self.commission_repo = CommissionRepository(session)

    async def get_leaderboard(
        self,
        page: int = 1,
        limit: int | None = None,
        statuses: list[str] | None = None,
    ) -> LeaderboardPage:
        """
        Compute the leaderboard and return one page of it.

        Args:
            page: Page number (1-indexed)
            limit: Page size
            statuses: Only count commissions in these statuses (None = all)

        Returns:
            LeaderboardPage

        Raises:
            StoreError: Loading affiliates or commissions failed
        """
        page = max(page, 1)
        limit = max(limit or self.default_limit, 1)

        try:
            affiliates = eligible_affiliates(
                await self.affiliate_repo.get_leaderboard_candidates()
            )
            commissions = await self.commission_repo.find_by_affiliate_ids(
                [a.id for a in affiliates], statuses=statuses
            )
        except SQLAlchemyError as e:
            logger.exception("Leaderboard query failed")
            raise StoreError("Leaderboard query failed") from e

        entries = compute_leaderboard(commissions, affiliates)
        active_ids = {a.id for a in affiliates if a.is_active}

        stats = LeaderboardStats(
            total_affiliates=len(entries),
            total_earnings=sum((e.total_earnings for e in entries), Decimal("0")),
            total_referrals=sum(e.referral_count for e in entries),
            active_affiliates=sum(1 for e in entries if e.affiliate_id in active_ids),
        )

        offset = (page - 1) * limit
        logger.debug(
            "Leaderboard computed",
            extra={"affiliates": stats.total_affiliates, "page": page, "limit": limit},
        )

        return LeaderboardPage(
            entries=entries[offset:offset + limit],
            stats=stats,
            page=page,
            limit=limit,
        )
