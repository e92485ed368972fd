"""
Commission statistics.

Admin listing and aggregate totals. All commission amounts are already in
the reference currency, so aggregation is a plain sum.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.repositories.commission_repository import CommissionRepository
from affiliate_ledger.utils.datetime_utils import period_start
from affiliate_ledger.utils.exceptions import StoreError

# Listing label for commissions whose affiliate has no name
UNKNOWN_AFFILIATE = "Unknown"


@dataclass
class CommissionListItem:
    """Commission row as shown in the admin listing."""

    commission: Commission
    affiliate_name: str
    affiliate_email: str

    @classmethod
    def from_commission(cls, commission: Commission) -> "CommissionListItem":
        """Build item from a commission with its affiliate loaded."""
        affiliate = commission.affiliate
        return cls(
            commission=commission,
            affiliate_name=(affiliate.display_name if affiliate else None) or UNKNOWN_AFFILIATE,
            affiliate_email=(affiliate.email if affiliate else None) or "",
        )


@dataclass
class CommissionPage:
    """One page of commissions."""

    items: list[CommissionListItem]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Number of pages."""
        return (self.total + self.limit - 1) // self.limit if self.total > 0 else 0


@dataclass
class StatusTotals:
    """Count and amount of commissions per status."""

    count: int = 0
    amount: Decimal = Decimal("0")


@dataclass
class CommissionOverview:
    """Aggregate totals across commissions."""

    by_status: dict[str, StatusTotals] = field(default_factory=dict)

    @property
    def total_count(self) -> int:
        """Number of commissions."""
        return sum(t.count for t in self.by_status.values())

    @property
    def total_amount(self) -> Decimal:
        """Sum of all commission amounts."""
        return sum((t.amount for t in self.by_status.values()), Decimal("0"))

    def amount(self, status: CommissionStatus) -> Decimal:
        """Amount in one status."""
        return self.by_status.get(status.value, StatusTotals()).amount

    def count(self, status: CommissionStatus) -> int:
        """Count in one status."""
        return self.by_status.get(status.value, StatusTotals()).count

    @property
    def approved_amount(self) -> Decimal:
        """Amount approved for payout (status available)."""
        return self.amount(CommissionStatus.AVAILABLE)


class CommissionStatisticsService:
    """Read-only commission reporting."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize statistics service."""
        self.session = session
        self.commission_repo = CommissionRepository(session)

    async def list_commissions(
        self,
        status: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 25,
    ) -> CommissionPage:
        """
        List commissions newest first.

        Args:
            status: Status filter ("all" or None disables it)
            date_from: Created at or after
            date_to: Created at or before
            search: Affiliate name, email or ID fragment (case-insensitive)
            page: Page number (1-indexed)
            limit: Items per page

        Returns:
            CommissionPage
        """
        page = max(page, 1)
        limit = max(limit, 1)
        if status == "all":
            status = None
        search = search.strip() if search else None

        try:
            commissions, total = await self.commission_repo.find_filtered(
                status=status,
                date_from=date_from,
                date_to=date_to,
                search=search,
                page=page,
                limit=limit,
            )
        except SQLAlchemyError as e:
            logger.exception("Commission listing failed")
            raise StoreError("Commission listing failed") from e

        items = [CommissionListItem.from_commission(c) for c in commissions]
        return CommissionPage(items=items, total=total, page=page, limit=limit)

    async def get_overview(self) -> CommissionOverview:
        """Totals per status across all commissions."""
        return await self._totals()

    async def get_affiliate_summary(
        self,
        affiliate_id: int,
        period: str | None = None,
        now: datetime | None = None,
    ) -> CommissionOverview:
        """
        Totals per status for one affiliate.

        Args:
            affiliate_id: Affiliate ID
            period: "week", "month", "year" or None for all time
            now: Reference moment for the period start

        Returns:
            CommissionOverview restricted to the affiliate
        """
        since = period_start(period, now)
        return await self._totals(affiliate_id=affiliate_id, since=since)

    async def _totals(
        self,
        affiliate_id: int | None = None,
        since: datetime | None = None,
    ) -> CommissionOverview:
        try:
            raw = await self.commission_repo.get_status_totals(
                affiliate_id=affiliate_id, since=since
            )
        except SQLAlchemyError as e:
            logger.exception(
                "Commission totals query failed",
                extra={"affiliate_id": affiliate_id},
            )
            raise StoreError("Commission totals query failed") from e

        return CommissionOverview(
            by_status={
                status: StatusTotals(count=int(values["count"]), amount=values["amount"])
                for status, values in raw.items()
            }
        )
