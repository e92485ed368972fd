"""
Commission repository.

Data access layer for Commission model.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.repositories.base import BaseRepository


class CommissionRepository(BaseRepository[Commission]):
    """Commission repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission repository."""
        super().__init__(Commission, session)

    async def get_by_payment_id(self, payment_id: str) -> Commission | None:
        """
        Get commission recorded for a payment.

        Args:
            payment_id: Payment identity

        Returns:
            Commission or None
        """
        return await self.get_by(payment_id=payment_id)

    async def insert(self, **data: Any) -> Commission:
        """
        Insert a commission row.

        Raises sqlalchemy IntegrityError when another row already
        references the same payment; the caller owns conflict handling.

        Args:
            **data: Column values

        Returns:
            Inserted commission
        """
        commission = Commission(**data)
        self.session.add(commission)
        await self.session.flush()
        return commission

    async def compare_and_set_status(
        self,
        commission_id: int,
        expected_status: str,
        **values: Any,
    ) -> bool:
        """
        Update a commission only if it is still in the expected status.

        Single conditional UPDATE, so two concurrent transitions out of the
        same status cannot both succeed.

        Args:
            commission_id: Commission ID
            expected_status: Status the row must currently have
            **values: Column values to set (including the new status)

        Returns:
            True if the row was updated
        """
        stmt = (
            update(Commission)
            .where(
                Commission.id == commission_id,
                Commission.status == expected_status,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def find_filtered(
        self,
        status: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 25,
    ) -> tuple[list[Commission], int]:
        """
        List commissions newest first with optional filters.

        Args:
            status: Only this status
            date_from: created_at lower bound (inclusive)
            date_to: created_at upper bound (inclusive)
            search: Case-insensitive substring of the affiliate's name,
                email or ID
            page: Page number (1-indexed)
            limit: Items per page

        Returns:
            Tuple of (items, total_count); each item has its affiliate loaded
        """
        conditions = []
        if status:
            conditions.append(Commission.status == status)
        if date_from:
            conditions.append(Commission.created_at >= date_from)
        if date_to:
            conditions.append(Commission.created_at <= date_to)
        if search:
            conditions.append(
                or_(
                    Affiliate.display_name.icontains(search, autoescape=True),
                    Affiliate.email.icontains(search, autoescape=True),
                    cast(Commission.affiliate_id, String).contains(search, autoescape=True),
                )
            )

        count_stmt = (
            select(func.count(Commission.id))
            .outerjoin(Affiliate, Commission.affiliate_id == Affiliate.id)
            .where(*conditions)
        )
        total = (await self.session.execute(count_stmt)).scalar() or 0

        offset = (page - 1) * limit
        stmt = (
            select(Commission)
            .outerjoin(Affiliate, Commission.affiliate_id == Affiliate.id)
            .where(*conditions)
            .order_by(Commission.created_at.desc(), Commission.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)

        return list(result.scalars().all()), total

    async def get_status_totals(
        self,
        affiliate_id: int | None = None,
        since: datetime | None = None,
    ) -> dict[str, dict[str, int | Decimal]]:
        """
        Get commission count and amount grouped by status in a single query.

        Args:
            affiliate_id: Restrict to one affiliate
            since: Only commissions created at or after this moment

        Returns:
            Dict mapping status to {"count": n, "amount": Decimal}
            for every status, zero-filled
        """
        stmt = select(
            Commission.status,
            func.count(Commission.id).label("count"),
            func.coalesce(
                func.sum(Commission.commission_amount), Decimal("0")
            ).label("amount"),
        ).group_by(Commission.status)

        if affiliate_id is not None:
            stmt = stmt.where(Commission.affiliate_id == affiliate_id)
        if since is not None:
            stmt = stmt.where(Commission.created_at >= since)

        result = await self.session.execute(stmt)

        totals: dict[str, dict[str, int | Decimal]] = {
            status.value: {"count": 0, "amount": Decimal("0")}
            for status in CommissionStatus
        }
        for row in result.all():
            totals[row.status] = {
                "count": row.count,
                "amount": Decimal(str(row.amount)),
            }

        return totals

    async def find_by_affiliate_ids(
        self,
        affiliate_ids: list[int],
        statuses: list[str] | None = None,
    ) -> list[Commission]:
        """
        Get commissions belonging to the given affiliates.

        Args:
            affiliate_ids: Affiliate IDs
            statuses: Optional status filter

        Returns:
            List of commissions ordered by ID
        """
        if not affiliate_ids:
            return []

        stmt = select(Commission).where(Commission.affiliate_id.in_(affiliate_ids))
        if statuses:
            stmt = stmt.where(Commission.status.in_(statuses))
        stmt = stmt.order_by(Commission.id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())
