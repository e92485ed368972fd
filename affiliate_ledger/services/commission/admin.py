"""
Administrative commission actions.

Wraps the status machine with an explicit success/failure result so
admin endpoints never see raw store errors.
"""

from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.commission import Commission
from affiliate_ledger.services.commission.status_machine import CommissionStatusMachine
from affiliate_ledger.utils.exceptions import AffiliateLedgerError, StoreError


GENERIC_FAILURE_MESSAGE = "Failed to update commission. Please try again."


@dataclass
class ActionResult:
    """Outcome of an administrative action."""

    success: bool
    commission: Commission | None = None
    error: str | None = None
    retryable: bool = False


class CommissionAdminService:
    """Handles approve / reject / mark_paid requests."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize admin service."""
        self.session = session
        self.status_machine = CommissionStatusMachine(session)

    async def handle_action(
        self,
        commission_id: int,
        action: str,
        at: datetime | None = None,
    ) -> ActionResult:
        """
        Apply an admin action and report the outcome.

        Args:
            commission_id: Commission ID
            action: approve, reject or mark_paid
            at: Action timestamp

        Returns:
            ActionResult with the updated commission or an error message
        """
        try:
            commission = await self.status_machine.apply_action(
                commission_id, action, at=at
            )
        except StoreError:
            # Full detail already logged by the status machine
            return ActionResult(
                success=False, error=GENERIC_FAILURE_MESSAGE, retryable=True
            )
        except AffiliateLedgerError as e:
            logger.info(
                "Commission action rejected",
                extra={
                    "commission_id": commission_id,
                    "action": action,
                    "reason": type(e).__name__,
                },
            )
            return ActionResult(success=False, error=str(e))

        return ActionResult(success=True, commission=commission)
