"""
Membership expiry notification sweep.

Runs once a day. For each window, every active membership expiring in it
gets at most one notification of the window's kind. The dedup row is
written only after the collaborator confirms delivery: a failed send is
retried by the next sweep, and a crash between send and record can at
worst cause a single duplicate.
"""

from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.business_constants import MEMBERSHIP_RENEWAL_PATH
from affiliate_ledger.models.enums import NotificationKind
from affiliate_ledger.models.membership import Membership
from affiliate_ledger.repositories.expiry_notification_repository import (
    ExpiryNotificationRepository,
)
from affiliate_ledger.repositories.membership_repository import MembershipRepository
from affiliate_ledger.services.membership_expiry.windows import (
    ExpiryWindow,
    compute_windows,
)
from affiliate_ledger.services.notification.dispatcher import (
    ExpiryNotificationPayload,
    NotificationDispatcher,
)
from affiliate_ledger.utils.datetime_utils import utc_now
from affiliate_ledger.utils.formatters import format_expiry_date


@dataclass(frozen=True)
class ExpiryTarget:
    """Snapshot of a membership, detached from the session."""

    membership_id: int
    user_id: str
    email: str | None
    name: str | None
    expires_at: datetime

    @classmethod
    def from_membership(cls, membership: Membership) -> "ExpiryTarget":
        return cls(
            membership_id=membership.id,
            user_id=membership.user_id,
            email=(membership.email or "").strip() or None,
            name=membership.recipient_name,
            expires_at=membership.expires_at,
        )


@dataclass
class SweepResult:
    """Counters for one sweep run."""

    seven_day_warnings: int = 0
    day_of_warnings: int = 0
    expired_notifications: int = 0
    already_sent: int = 0
    skipped_no_email: int = 0
    failed: int = 0
    unrecorded: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def sent(self) -> int:
        """Notifications delivered in this run."""
        return self.seven_day_warnings + self.day_of_warnings + self.expired_notifications

    def count_sent(self, kind: NotificationKind) -> None:
        if kind == NotificationKind.SEVEN_DAY_WARNING:
            self.seven_day_warnings += 1
        elif kind == NotificationKind.DAY_OF_WARNING:
            self.day_of_warnings += 1
        else:
            self.expired_notifications += 1


class MembershipExpirySweeper:
    """Finds expiring memberships and notifies each one at most once per kind."""

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: NotificationDispatcher,
        site_url: str,
    ) -> None:
        """
        Initialize sweeper.

        Args:
            session: Async database session
            dispatcher: Outbound notification collaborator
            site_url: Base URL for renewal links
        """
        self.session = session
        self.dispatcher = dispatcher
        self.renewal_url = f"{site_url.rstrip('/')}{MEMBERSHIP_RENEWAL_PATH}"
        self.membership_repo = MembershipRepository(session)
        self.notification_repo = ExpiryNotificationRepository(session)

    async def sweep(self, now: datetime | None = None) -> SweepResult:
        """
        Run one sweep.

        Args:
            now: Sweep moment (defaults to current UTC time)

        Returns:
            SweepResult with per-kind counters and error descriptions
        """
        now = now or utc_now()
        result = SweepResult()

        for window in compute_windows(now):
            try:
                memberships = await self.membership_repo.find_active_expiring_between(
                    window.start, window.end
                )
                targets = [ExpiryTarget.from_membership(m) for m in memberships]
            except SQLAlchemyError:
                logger.exception(
                    "Expiry window query failed",
                    extra={"kind": str(window.kind)},
                )
                await self.session.rollback()
                result.errors.append(f"{window.kind} query failed")
                continue

            for target in targets:
                await self._process(target, window, result)

        logger.info(
            "Membership expiry sweep completed",
            extra={
                "seven_day_warnings": result.seven_day_warnings,
                "day_of_warnings": result.day_of_warnings,
                "expired_notifications": result.expired_notifications,
                "already_sent": result.already_sent,
                "failed": result.failed,
            },
        )
        return result

    async def _process(
        self,
        target: ExpiryTarget,
        window: ExpiryWindow,
        result: SweepResult,
    ) -> None:
        """Notify one membership; failures never escape to the sweep loop."""
        context = {"membership_id": target.membership_id, "kind": str(window.kind)}

        try:
            if await self.notification_repo.was_sent(target.membership_id, window.kind):
                result.already_sent += 1
                return

            if not target.email:
                logger.warning("Membership has no recipient email, skipping", extra=context)
                result.skipped_no_email += 1
                return

            payload = ExpiryNotificationPayload(
                type=window.notification_type,
                recipient=target.email,
                name=target.name or target.email,
                expiry_date=format_expiry_date(target.expires_at),
                renewal_url=self.renewal_url,
                days_remaining=window.days_remaining,
            )

            delivered = await self.dispatcher.send(payload)
        except Exception as e:
            logger.exception("Expiry notification failed", extra=context)
            await self.session.rollback()
            result.failed += 1
            result.errors.append(
                f"membership {target.membership_id} {window.kind}: {type(e).__name__}"
            )
            return

        if not delivered:
            logger.warning("Expiry notification was not delivered", extra=context)
            result.failed += 1
            return

        result.count_sent(window.kind)
        await self._record(target, window.kind, result)

    async def _record(
        self,
        target: ExpiryTarget,
        kind: NotificationKind,
        result: SweepResult,
    ) -> None:
        """Write the dedup row after a successful send."""
        context = {"membership_id": target.membership_id, "kind": str(kind)}

        try:
            await self.notification_repo.record_sent(
                membership_id=target.membership_id,
                user_id=target.user_id,
                kind=kind,
                sent_at=utc_now(),
            )
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info(
                "Expiry notification already recorded by a concurrent sweep",
                extra=context,
            )
        except SQLAlchemyError:
            await self.session.rollback()
            # Next sweep will send this notification again
            logger.exception("Failed to record sent expiry notification", extra=context)
            result.unrecorded += 1
