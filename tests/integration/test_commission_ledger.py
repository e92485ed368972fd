"""Integration tests for idempotent commission recording."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from affiliate_ledger.config.ledger_config import LedgerConfig
from affiliate_ledger.models import Commission
from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.services.commission.ledger import CommissionLedger
from affiliate_ledger.services.payment.events import PaymentEvent
from affiliate_ledger.utils.exceptions import AffiliateNotFound, InsertFailed, InvalidAmount


async def count_commissions(session_maker, payment_id: str) -> int:
    async with session_maker() as session:
        result = await session.execute(
            select(func.count(Commission.id)).where(Commission.payment_id == payment_id)
        )
        return result.scalar_one()


class TestRecordCommission:
    """Tests for CommissionLedger.record_commission."""

    @pytest.mark.asyncio
    async def test_creates_available_commission(self, session, ledger_config, make_affiliate):
        """200 USD at 60% yields a 120 USD commission."""
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)

        result = await ledger.record_commission(
            PaymentEvent(payment_id="pay_001", amount="200", currency="USD"),
            affiliate_id=affiliate.id,
            referral_id="ref_1",
            source="verify",
        )

        assert result.created is True
        assert result.skipped is False
        commission = result.commission
        assert commission.commission_amount == Decimal("120")
        assert commission.commission_currency == "USD"
        assert commission.status == CommissionStatus.AVAILABLE
        assert commission.commission_rate == Decimal("0.6")
        assert commission.referral_code == "AFF42"
        assert commission.commission_type == "learner_referral"
        assert commission.notes == "Affiliate sale (60% commission) [verify]"

    @pytest.mark.asyncio
    async def test_local_currency_normalized(self, session, ledger_config, make_affiliate):
        """140 GHS at 14 per USD is 10 USD, commission 6 USD."""
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)

        result = await ledger.record_commission(
            PaymentEvent(payment_id="pay_ghs", amount=Decimal("140"), currency="ghs"),
            affiliate_id=affiliate.id,
            referral_id=None,
            source="webhook",
        )

        commission = result.commission
        assert commission.base_amount == Decimal("140")
        assert commission.base_currency == "GHS"
        assert commission.base_amount_reference == Decimal("10")
        assert commission.commission_amount == Decimal("6")

    @pytest.mark.asyncio
    async def test_unknown_currency_treated_as_reference(
        self, session, ledger_config, make_affiliate
    ):
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)

        result = await ledger.record_commission(
            PaymentEvent(payment_id="pay_zzz", amount="100", currency="ZZZ"),
            affiliate_id=affiliate.id,
            referral_id=None,
            source="verify",
        )

        assert result.commission.commission_amount == Decimal("60")

    @pytest.mark.asyncio
    async def test_resubmission_is_skipped(
        self, session, session_maker, ledger_config, make_affiliate
    ):
        """Second call for the same payment returns the first commission."""
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)
        event = PaymentEvent(payment_id="pay_001", amount="200", currency="USD")

        first = await ledger.record_commission(event, affiliate.id, "ref_1", "verify")
        second = await ledger.record_commission(event, affiliate.id, "ref_1", "webhook")

        assert second.created is False
        assert second.skipped is True
        assert second.commission_id == first.commission_id
        assert second.commission.source == "verify"
        assert await count_commissions(session_maker, "pay_001") == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_create_one_row(
        self, session_maker, ledger_config, make_affiliate
    ):
        """Racing callers in separate sessions end with exactly one commission."""
        affiliate = await make_affiliate()
        event = PaymentEvent(payment_id="pay_race", amount="200", currency="USD")

        async def record(source: str):
            async with session_maker() as session:
                ledger = CommissionLedger(session, ledger_config)
                return await ledger.record_commission(event, affiliate.id, None, source)

        results = await asyncio.gather(
            record("verify"), record("guest-verify"), record("webhook")
        )

        assert sum(1 for r in results if r.created) == 1
        assert sum(1 for r in results if r.skipped) == 2
        assert len({r.commission_id for r in results}) == 1
        assert await count_commissions(session_maker, "pay_race") == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-5", "NaN", None])
    async def test_invalid_amount_rejected(
        self, session, session_maker, ledger_config, make_affiliate, amount
    ):
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)

        with pytest.raises(InvalidAmount):
            await ledger.record_commission(
                PaymentEvent(payment_id="pay_bad", amount=amount, currency="USD"),
                affiliate.id,
                None,
                "verify",
            )

        assert await count_commissions(session_maker, "pay_bad") == 0

    @pytest.mark.asyncio
    async def test_unknown_affiliate(self, session, ledger_config):
        ledger = CommissionLedger(session, ledger_config)

        with pytest.raises(AffiliateNotFound):
            await ledger.record_commission(
                PaymentEvent(payment_id="pay_x", amount="10", currency="USD"),
                affiliate_id=999,
                referral_id=None,
                source="verify",
            )

    @pytest.mark.asyncio
    async def test_affiliate_rate_override_frozen_at_creation(
        self, session, ledger_config, make_affiliate
    ):
        """Later rate changes do not touch existing commissions."""
        affiliate = await make_affiliate(commission_rate=Decimal("0.5"))
        ledger = CommissionLedger(session, ledger_config)

        result = await ledger.record_commission(
            PaymentEvent(payment_id="pay_rate", amount="100", currency="USD"),
            affiliate.id,
            None,
            "verify",
        )
        assert result.commission.commission_amount == Decimal("50")
        assert result.commission.notes == "Affiliate sale (50% commission) [verify]"

        stored = await session.get(type(affiliate), affiliate.id)
        stored.commission_rate = Decimal("0.9")
        await session.commit()

        again = await ledger.record_commission(
            PaymentEvent(payment_id="pay_rate", amount="100", currency="USD"),
            affiliate.id,
            None,
            "webhook",
        )
        assert again.skipped is True
        assert again.commission.commission_amount == Decimal("50")
        assert again.commission.commission_rate == Decimal("0.5")

    @pytest.mark.asyncio
    async def test_amount_rounded_to_ledger_precision(
        self, session, ledger_config, make_affiliate
    ):
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)

        result = await ledger.record_commission(
            PaymentEvent(payment_id="pay_round", amount="100", currency="GBP"),
            affiliate.id,
            None,
            "verify",
        )

        # 100 / 0.79 * 0.6 = 75.949367088...
        assert result.commission_amount == Decimal("75.94936709")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["10000000000", "1e25"])
    async def test_amount_too_large_for_ledger_rejected(
        self, session, session_maker, ledger_config, make_affiliate, amount
    ):
        """Amounts a MoneyType column cannot hold are a validation error."""
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)

        with pytest.raises(InvalidAmount) as exc_info:
            await ledger.record_commission(
                PaymentEvent(payment_id="pay_huge", amount=amount, currency="USD"),
                affiliate.id,
                None,
                "webhook",
            )

        assert exc_info.value.retryable is False
        assert await count_commissions(session_maker, "pay_huge") == 0

    @pytest.mark.asyncio
    async def test_normalized_amount_too_large_rejected(
        self, session, session_maker, ledger_config, make_affiliate
    ):
        """9.5 billion EUR at 0.92 per USD no longer fits once normalized."""
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)

        with pytest.raises(InvalidAmount):
            await ledger.record_commission(
                PaymentEvent(payment_id="pay_eur", amount="9500000000", currency="EUR"),
                affiliate.id,
                None,
                "verify",
            )

        assert await count_commissions(session_maker, "pay_eur") == 0

    @pytest.mark.asyncio
    async def test_stored_rate_is_the_applied_rate(
        self, session, session_maker, make_affiliate
    ):
        """A rate finer than the column keeps amount == base * stored rate."""
        affiliate = await make_affiliate()
        config = LedgerConfig(default_commission_rate=Decimal("0.33333"))
        ledger = CommissionLedger(session, config)

        result = await ledger.record_commission(
            PaymentEvent(payment_id="pay_third", amount="100", currency="USD"),
            affiliate.id,
            None,
            "verify",
        )

        async with session_maker() as other:
            stored = await other.get(Commission, result.commission_id)

        assert stored.commission_rate == Decimal("0.3333")
        assert stored.commission_amount == Decimal("33.33")
        assert stored.commission_amount == stored.base_amount_reference * stored.commission_rate


class TestInsertConflicts:
    """Insert-time failures after the lookup found nothing."""

    @pytest.mark.asyncio
    async def test_lost_insert_race_returns_winner(
        self, session, session_maker, ledger_config, make_affiliate, monkeypatch
    ):
        """Lookup misses, insert hits the unique constraint, winner is returned."""
        affiliate = await make_affiliate()
        event = PaymentEvent(payment_id="pay_lost", amount="200", currency="USD")

        async with session_maker() as winner_session:
            winner = await CommissionLedger(winner_session, ledger_config).record_commission(
                event, affiliate.id, None, "webhook"
            )

        ledger = CommissionLedger(session, ledger_config)
        real_lookup = ledger.commission_repo.get_by_payment_id
        lookups = []

        async def lookup_missing_first(payment_id):
            lookups.append(payment_id)
            if len(lookups) == 1:
                return None
            return await real_lookup(payment_id)

        monkeypatch.setattr(ledger.commission_repo, "get_by_payment_id", lookup_missing_first)

        result = await ledger.record_commission(event, affiliate.id, None, "verify")

        assert len(lookups) == 2
        assert result.created is False
        assert result.skipped is True
        assert result.commission_id == winner.commission_id
        assert result.commission.source == "webhook"
        assert await count_commissions(session_maker, "pay_lost") == 1

    @pytest.mark.asyncio
    async def test_store_error_on_insert_is_retryable(
        self, session, session_maker, ledger_config, make_affiliate, monkeypatch
    ):
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)
        monkeypatch.setattr(
            ledger.commission_repo,
            "insert",
            AsyncMock(
                side_effect=OperationalError(
                    "INSERT INTO commissions", {}, Exception("database is locked")
                )
            ),
        )

        with pytest.raises(InsertFailed) as exc_info:
            await ledger.record_commission(
                PaymentEvent(payment_id="pay_locked", amount="200", currency="USD"),
                affiliate.id,
                None,
                "webhook",
            )

        assert exc_info.value.retryable is True
        assert exc_info.value.payment_id == "pay_locked"
        assert await count_commissions(session_maker, "pay_locked") == 0

    @pytest.mark.asyncio
    async def test_other_constraint_violation_is_insert_failure(
        self, session, session_maker, ledger_config, make_affiliate, monkeypatch
    ):
        """An integrity error with no existing row is not a lost race."""
        affiliate = await make_affiliate()
        ledger = CommissionLedger(session, ledger_config)
        monkeypatch.setattr(
            ledger.commission_repo,
            "insert",
            AsyncMock(
                side_effect=IntegrityError(
                    "INSERT INTO commissions", {}, Exception("CHECK constraint failed")
                )
            ),
        )

        with pytest.raises(InsertFailed, match="constraint violation"):
            await ledger.record_commission(
                PaymentEvent(payment_id="pay_check", amount="200", currency="USD"),
                affiliate.id,
                None,
                "verify",
            )

        assert await count_commissions(session_maker, "pay_check") == 0
