"""
Affiliate model.

Affiliate identity: referral code, payout currency and rate override.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.types import CURRENCY_CODE_LENGTH, RateType


if TYPE_CHECKING:
    from affiliate_ledger.models.commission import Commission


class Affiliate(Base):
    """
    Affiliate entity.

    Created when a user is granted affiliate capability. Never deleted,
    only deactivated.

    Attributes:
        id: Primary key
        user_id: Owning user in the wider platform
        referral_code: Unique shareable code attributing payments
        display_name: Name shown on the leaderboard
        email: Contact email
        payout_currency: Preferred payout currency
        commission_rate: Per-affiliate override (None -> system default)
        onboarding_completed: Whether the affiliate finished onboarding
        is_active: False once deactivated
        created_at: Creation timestamp
        deactivated_at: Deactivation timestamp
    """

    __tablename__ = "affiliates"
    __table_args__ = (
        CheckConstraint(
            "commission_rate IS NULL OR (commission_rate > 0 AND commission_rate <= 1)",
            name="check_affiliate_commission_rate_range",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )

    referral_code: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )

    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    payout_currency: Mapped[str] = mapped_column(
        String(CURRENCY_CODE_LENGTH), nullable=False, default="USD"
    )

    commission_rate: Mapped[Decimal | None] = mapped_column(
        RateType,
        nullable=True,
        comment="Override of the default commission rate (0.6000 = 60%)",
    )

    onboarding_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    deactivated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    commissions: Mapped[list["Commission"]] = relationship(
        "Commission",
        back_populates="affiliate",
        lazy="raise",
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Affiliate(id={self.id}, referral_code={self.referral_code!r}, "
            f"active={self.is_active})>"
        )

