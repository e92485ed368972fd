"""
Payment completion handler.

Glue between payment verification (client redirect, guest checkout,
provider webhook) and the commission ledger. All three paths call this
with the same event; the ledger keeps the result single.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.database import async_session_maker
from affiliate_ledger.config.ledger_config import LedgerConfig
from affiliate_ledger.services.commission.ledger import CommissionLedger, CommissionResult
from affiliate_ledger.services.payment.events import PaymentEvent
from affiliate_ledger.services.referral.resolver import ReferralResolver
from affiliate_ledger.utils.exceptions import ReferralNotFound
from affiliate_ledger.validators.common import normalize_referral_code


class PaymentCommissionHandler:
    """Credits the referring affiliate for a completed payment."""

    def __init__(self, session: AsyncSession, config: LedgerConfig | None = None) -> None:
        """
        Initialize handler.

        Args:
            session: Async database session
            config: Ledger configuration (built from settings if omitted)
        """
        self.session = session
        self.resolver = ReferralResolver(session)
        self.ledger = CommissionLedger(session, config or LedgerConfig.from_settings())

    async def handle_payment_completed(
        self,
        event: PaymentEvent,
        source: str,
        referral_id: str | None = None,
        strict: bool = False,
    ) -> CommissionResult | None:
        """
        Record the commission for a completed payment, if it was referred.

        Args:
            event: Completed payment
            source: Calling path ("verify", "guest-verify", "webhook")
            referral_id: Referral record that attributed the payment
            strict: Propagate ReferralNotFound instead of ignoring it

        Returns:
            CommissionResult, or None when the payment carries no usable
            referral code

        Raises:
            ReferralNotFound: Only with ``strict=True``
            InvalidAmount, InsertFailed, StoreError: From the ledger
        """
        if normalize_referral_code(event.referral_code) is None:
            logger.debug(
                "Payment has no referral code",
                extra={"payment_id": event.payment_id, "source": source},
            )
            return None

        try:
            affiliate = await self.resolver.resolve(event.referral_code)
        except ReferralNotFound:
            if strict:
                raise
            # Payment stays valid; only the commission is dropped
            logger.warning(
                "Referral code not found, no commission recorded",
                extra={
                    "payment_id": event.payment_id,
                    "referral_code": event.referral_code,
                    "source": source,
                },
            )
            return None

        return await self.ledger.record_commission(
            event,
            affiliate_id=affiliate.id,
            referral_id=referral_id,
            source=source,
        )


async def process_payment_commission(
    event: PaymentEvent,
    source: str,
    referral_id: str | None = None,
    strict: bool = False,
) -> CommissionResult | None:
    """
    Record the commission for a verified payment in its own session.

    Entry point for the payment verification paths, which do not manage
    database sessions themselves.
    """
    async with async_session_maker() as session:
        handler = PaymentCommissionHandler(session)
        return await handler.handle_payment_completed(
            event, source, referral_id=referral_id, strict=strict
        )
