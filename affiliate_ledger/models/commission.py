"""
Commission model.

Single-entry ledger row recording an affiliate's share of one payment.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.models.types import CURRENCY_CODE_LENGTH, MoneyType, RateType


if TYPE_CHECKING:
    from affiliate_ledger.models.affiliate import Affiliate


class Commission(Base):
    """
    Commission entity.

    Created exactly once per payment by the commission ledger, mutated only
    by status transitions, never deleted.

    Attributes:
        id: Primary key
        payment_id: Payment this commission was earned on (unique)
        affiliate_id: Owning affiliate
        referral_id: Referral record that attributed the payment
        referral_code: Code that resolved to the affiliate
        commission_type: Kind of sale (learner_referral)
        source: Caller that recorded the commission (verify, webhook, ...)
        base_amount: Payment amount in its original currency
        base_currency: Payment's original currency
        base_amount_reference: Payment amount normalized to reference currency
        commission_rate: Rate frozen at creation
        commission_amount: Commission in reference currency
        commission_currency: Reference currency code
        status: pending, available, paid, cancelled
        notes: Human-readable description
        created_at: Creation timestamp
        paid_at: Set on transition into paid
        cancelled_at: Set on transition into cancelled
    """

    __tablename__ = "commissions"
    __table_args__ = (
        UniqueConstraint("payment_id", name="uq_commissions_payment_id"),
        CheckConstraint("base_amount > 0", name="check_commission_base_amount_positive"),
        CheckConstraint(
            "commission_amount >= 0", name="check_commission_amount_non_negative"
        ),
        Index("idx_commissions_affiliate_status", "affiliate_id", "status"),
        Index("idx_commissions_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    payment_id: Mapped[str] = mapped_column(String(128), nullable=False)

    affiliate_id: Mapped[int] = mapped_column(
        ForeignKey("affiliates.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    referral_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    referral_code: Mapped[str | None] = mapped_column(String(64), nullable=True)

    commission_type: Mapped[str] = mapped_column(String(32), nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)

    base_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    base_currency: Mapped[str] = mapped_column(
        String(CURRENCY_CODE_LENGTH), nullable=False
    )
    base_amount_reference: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="base_amount converted to the reference currency",
    )

    commission_rate: Mapped[Decimal] = mapped_column(
        RateType,
        nullable=False,
        comment="Rate applied at creation time, never recalculated",
    )
    commission_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    commission_currency: Mapped[str] = mapped_column(
        String(CURRENCY_CODE_LENGTH), nullable=False
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommissionStatus.AVAILABLE,
        index=True,
        comment="pending, available, paid, cancelled",
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    affiliate: Mapped["Affiliate"] = relationship(
        "Affiliate",
        back_populates="commissions",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Commission(id={self.id}, payment_id={self.payment_id!r}, "
            f"affiliate_id={self.affiliate_id}, amount={self.commission_amount}, "
            f"status={self.status})>"
        )
