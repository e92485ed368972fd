"""
MembershipExpiryNotification model.

Dedup ledger: one row per (membership, kind) that was successfully sent.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base


class MembershipExpiryNotification(Base):
    """
    Sent membership expiry notification.

    A row is written only after the notification was delivered, so a
    missing row means the next sweep will try again.

    Attributes:
        id: Primary key
        membership_id: Membership the notification was about
        user_id: Recipient user id
        kind: seven_day_warning, day_of_warning, expired
        sent_at: When the notification was delivered
    """

    __tablename__ = "membership_expiry_notifications"
    __table_args__ = (
        UniqueConstraint(
            "membership_id", "kind", name="uq_membership_expiry_notifications_kind"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    membership_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    kind: Mapped[str] = mapped_column(
        String(32), nullable=False, comment="seven_day_warning, day_of_warning, expired"
    )

    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<MembershipExpiryNotification(membership_id={self.membership_id}, "
            f"kind={self.kind})>"
        )
