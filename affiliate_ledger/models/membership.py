"""
Membership model.

Learner membership with an expiry date. Owned by the wider platform;
the expiry sweep only reads it.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base


class Membership(Base):
    """
    Membership entity.

    Attributes:
        id: Primary key
        user_id: Member's user id
        email: Recipient address for expiry notifications
        full_name: Member's display name
        expires_at: Expiry timestamp
        is_active: Whether the membership is active
        created_at: Creation timestamp
    """

    __tablename__ = "memberships"
    __table_args__ = (
        Index("idx_memberships_active_expires", "is_active", "expires_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Membership(id={self.id}, user_id={self.user_id!r}, "
            f"expires_at={self.expires_at})>"
        )

    @property
    def recipient_name(self) -> str | None:
        """Full name, falling back to the local part of the email."""
        if self.full_name and self.full_name.strip():
            return self.full_name.strip()
        if self.email:
            return self.email.split("@")[0]
        return None
