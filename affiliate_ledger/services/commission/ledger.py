"""
Commission ledger.

Records at most one commission per payment. The unique constraint on
``commissions.payment_id`` is what guarantees this; the lookup before
the insert only saves a round trip in the common retry case.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.business_constants import (
    COMMISSION_TYPE_LEARNER_REFERRAL,
)
from affiliate_ledger.config.ledger_config import LedgerConfig, quantize_rate
from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.models.types import MONEY_QUANTUM, MONEY_UPPER_BOUND
from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.repositories.commission_repository import CommissionRepository
from affiliate_ledger.services.currency.normalizer import CurrencyNormalizer
from affiliate_ledger.services.payment.events import PaymentEvent
from affiliate_ledger.utils.exceptions import (
    AffiliateNotFound,
    InsertFailed,
    InvalidAmount,
    StoreError,
)
from affiliate_ledger.utils.formatters import format_rate_percent
from affiliate_ledger.validators.common import normalize_currency_code, validate_amount

# New commissions are immediately eligible for payout
INITIAL_STATUS = CommissionStatus.AVAILABLE


@dataclass
class CommissionResult:
    """Result of recording a commission."""

    created: bool
    skipped: bool
    commission: Commission

    @property
    def commission_id(self) -> int:
        """ID of the created or pre-existing commission."""
        return self.commission.id

    @property
    def commission_amount(self) -> Decimal:
        """Commission amount in reference currency."""
        return self.commission.commission_amount


def quantize_money(amount: Decimal) -> Decimal:
    """Round to the precision stored in the ledger."""
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


class CommissionLedger:
    """
    Idempotent commission recorder.

    Repeated and concurrent calls for the same payment all return the same
    commission row; only the first successful insert creates it.
    """

    def __init__(
        self,
        session: AsyncSession,
        config: LedgerConfig,
        normalizer: CurrencyNormalizer | None = None,
    ) -> None:
        """
        Initialize commission ledger.

        Args:
            session: Async database session (one per call chain)
            config: Ledger configuration (rates, default commission rate)
            normalizer: Currency normalizer (built from config if omitted)
        """
        self.session = session
        self.config = config
        self.normalizer = normalizer or CurrencyNormalizer(config)
        self.commission_repo = CommissionRepository(session)
        self.affiliate_repo = AffiliateRepository(session)

    async def record_commission(
        self,
        payment: PaymentEvent,
        affiliate_id: int,
        referral_id: str | None,
        source: str,
    ) -> CommissionResult:
        """
        Record the commission earned on a completed payment.

        Args:
            payment: Completed payment event
            affiliate_id: Affiliate credited with the sale
            referral_id: Referral record that attributed the payment
            source: Caller tag for tracing (verify, guest-verify, webhook)

        Returns:
            CommissionResult; ``skipped`` is True when a commission for
            this payment already existed

        Raises:
            InvalidAmount: Amount is non-positive, non-finite or too large
            AffiliateNotFound: No affiliate with this ID
            InsertFailed: Persistence error other than a duplicate payment
            StoreError: Lookup failed
        """
        is_valid, amount, error = validate_amount(payment.amount)
        if not is_valid:
            logger.warning(
                "Rejected commission for invalid amount",
                extra={
                    "payment_id": payment.payment_id,
                    "amount": str(payment.amount),
                    "reason": error,
                    "source": source,
                },
            )
            raise InvalidAmount(payment.amount)

        try:
            existing = await self.commission_repo.get_by_payment_id(payment.payment_id)
            if existing is not None:
                return self._skipped(existing, source)

            affiliate = await self.affiliate_repo.get_by_id(affiliate_id)
        except SQLAlchemyError as e:
            logger.exception(
                "Commission lookup failed",
                extra={"payment_id": payment.payment_id, "source": source},
            )
            raise StoreError("Commission lookup failed") from e

        if affiliate is None:
            raise AffiliateNotFound(affiliate_id)

        base_currency = normalize_currency_code(
            payment.currency, default=self.config.reference_currency
        )
        base_amount_reference = self.normalizer.normalize(amount, base_currency)
        if (
            base_amount_reference >= MONEY_UPPER_BOUND
            or quantize_money(base_amount_reference) >= MONEY_UPPER_BOUND
        ):
            # Rates below 1 (EUR, GBP) make the reference amount larger
            logger.warning(
                "Rejected commission, normalized amount too large",
                extra={
                    "payment_id": payment.payment_id,
                    "amount": str(amount),
                    "currency": base_currency,
                    "source": source,
                },
            )
            raise InvalidAmount(payment.amount)

        rate = (
            quantize_rate(Decimal(str(affiliate.commission_rate)))
            if affiliate.commission_rate is not None
            else self.config.default_commission_rate
        )
        commission_amount = quantize_money(base_amount_reference * rate)

        try:
            commission = await self.commission_repo.insert(
                payment_id=payment.payment_id,
                affiliate_id=affiliate.id,
                referral_id=referral_id,
                referral_code=affiliate.referral_code,
                commission_type=COMMISSION_TYPE_LEARNER_REFERRAL,
                source=source,
                base_amount=amount,
                base_currency=base_currency,
                base_amount_reference=quantize_money(base_amount_reference),
                commission_rate=rate,
                commission_amount=commission_amount,
                commission_currency=self.config.reference_currency,
                status=INITIAL_STATUS,
                notes=(
                    f"Affiliate sale ({format_rate_percent(rate)} commission) "
                    f"[{source}]"
                ),
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            return await self._resolve_conflict(payment.payment_id, source, e)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(
                "Commission insert failed",
                extra={"payment_id": payment.payment_id, "source": source},
            )
            raise InsertFailed(payment.payment_id, type(e).__name__) from e

        logger.info(
            "Commission created",
            extra={
                "commission_id": commission.id,
                "payment_id": payment.payment_id,
                "affiliate_id": affiliate.id,
                "base_amount": str(amount),
                "base_currency": base_currency,
                "rate": str(rate),
                "commission_amount": str(commission_amount),
                "source": source,
            },
        )

        return CommissionResult(created=True, skipped=False, commission=commission)

    async def _resolve_conflict(
        self, payment_id: str, source: str, error: IntegrityError
    ) -> CommissionResult:
        """Fetch the row that won the insert race."""
        try:
            existing = await self.commission_repo.get_by_payment_id(payment_id)
        except SQLAlchemyError as e:
            logger.exception(
                "Commission lookup after conflict failed",
                extra={"payment_id": payment_id, "source": source},
            )
            raise StoreError("Commission lookup failed") from e

        if existing is None:
            # Integrity error from another constraint (FK, check)
            logger.error(
                "Commission insert violated a constraint",
                extra={"payment_id": payment_id, "source": source, "error": str(error.orig)},
            )
            raise InsertFailed(payment_id, "constraint violation") from error

        logger.info(
            "Commission insert lost race to concurrent caller",
            extra={"payment_id": payment_id, "commission_id": existing.id, "source": source},
        )
        return self._skipped(existing, source)

    def _skipped(self, existing: Commission, source: str) -> CommissionResult:
        logger.info(
            "Commission already exists for payment, skipping",
            extra={
                "payment_id": existing.payment_id,
                "commission_id": existing.id,
                "source": source,
            },
        )
        return CommissionResult(created=False, skipped=True, commission=existing)
