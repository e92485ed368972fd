"""
Commission status machine.

Governs payout state transitions:

    pending   -> available | cancelled   (manual-approval policy)
    available -> paid | cancelled
    paid, cancelled                       (terminal)
"""

from datetime import datetime

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import CommissionAction, CommissionStatus
from affiliate_ledger.repositories.commission_repository import CommissionRepository
from affiliate_ledger.utils.datetime_utils import utc_now
from affiliate_ledger.utils.exceptions import (
    CommissionNotFound,
    InvalidAction,
    InvalidTransition,
    StoreError,
)


ALLOWED_TRANSITIONS: dict[CommissionStatus, frozenset[CommissionStatus]] = {
    CommissionStatus.PENDING: frozenset(
        {CommissionStatus.AVAILABLE, CommissionStatus.CANCELLED}
    ),
    CommissionStatus.AVAILABLE: frozenset(
        {CommissionStatus.PAID, CommissionStatus.CANCELLED}
    ),
    CommissionStatus.PAID: frozenset(),
    CommissionStatus.CANCELLED: frozenset(),
}

ACTION_TARGETS: dict[CommissionAction, CommissionStatus] = {
    CommissionAction.APPROVE: CommissionStatus.AVAILABLE,
    CommissionAction.REJECT: CommissionStatus.CANCELLED,
    CommissionAction.MARK_PAID: CommissionStatus.PAID,
}


def can_transition(current: str, target: str) -> bool:
    """
    Check whether a transition is allowed.

    Args:
        current: Current status
        target: Requested status

    Returns:
        True if allowed
    """
    try:
        current_status = CommissionStatus(current)
        target_status = CommissionStatus(target)
    except ValueError:
        return False
    return target_status in ALLOWED_TRANSITIONS[current_status]


def target_for_action(action: str) -> CommissionStatus:
    """
    Map an administrative action to its target status.

    Raises:
        InvalidAction: Unknown action
    """
    try:
        return ACTION_TARGETS[CommissionAction(action)]
    except ValueError as e:
        raise InvalidAction(action) from e


class CommissionStatusMachine:
    """Applies status transitions to stored commissions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize status machine."""
        self.session = session
        self.commission_repo = CommissionRepository(session)

    async def apply_action(
        self,
        commission_id: int,
        action: str,
        at: datetime | None = None,
    ) -> Commission:
        """
        Apply an administrative action (approve, reject, mark_paid).

        Raises:
            InvalidAction: Unknown action (checked before any read)
            CommissionNotFound, InvalidTransition, StoreError
        """
        target = target_for_action(action)
        return await self.transition(commission_id, target, at=at)

    async def transition(
        self,
        commission_id: int,
        target: CommissionStatus,
        at: datetime | None = None,
    ) -> Commission:
        """
        Move a commission to a new status.

        The update is conditional on the status read here, so a concurrent
        transition that got there first turns this one into an
        InvalidTransition instead of overwriting it.

        Args:
            commission_id: Commission ID
            target: Requested status
            at: Action timestamp (defaults to now)

        Returns:
            Updated commission

        Raises:
            CommissionNotFound: Unknown commission
            InvalidTransition: Transition not allowed; row left unchanged
            StoreError: Persistence failure
        """
        at = at or utc_now()

        try:
            commission = await self.commission_repo.get_by_id(commission_id)
            if commission is None:
                raise CommissionNotFound(commission_id)

            current = commission.status
            if not can_transition(current, target):
                raise InvalidTransition(commission_id, current, target)

            values: dict = {"status": target}
            if target == CommissionStatus.PAID:
                values["paid_at"] = at
            elif target == CommissionStatus.CANCELLED:
                values["cancelled_at"] = at

            updated = await self.commission_repo.compare_and_set_status(
                commission_id, current, **values
            )
            if not updated:
                await self.session.rollback()
                fresh = await self.session.get(
                    Commission, commission_id, populate_existing=True
                )
                raise InvalidTransition(
                    commission_id, fresh.status if fresh else current, target
                )

            await self.session.commit()
            await self.session.refresh(commission)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(
                "Commission status update failed",
                extra={"commission_id": commission_id, "target": str(target)},
            )
            raise StoreError("Commission status update failed") from e

        logger.info(
            "Commission status changed",
            extra={
                "commission_id": commission_id,
                "from": current,
                "to": str(target),
            },
        )
        return commission
