"""Integration tests for the membership expiry notification sweep."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from affiliate_ledger.models import MembershipExpiryNotification
from affiliate_ledger.models.enums import NotificationKind, NotificationType
from affiliate_ledger.services.membership_expiry import MembershipExpirySweeper


NOW = datetime(2026, 10, 18, 8, 0, tzinfo=UTC)
SITE_URL = "https://digiafriq.com"


async def sent_rows(session_maker) -> list[tuple[int, str]]:
    async with session_maker() as session:
        result = await session.execute(
            select(MembershipExpiryNotification).order_by(MembershipExpiryNotification.id)
        )
        return [(row.membership_id, row.kind) for row in result.scalars().all()]


def sent_payloads(dispatcher) -> list:
    return [call.args[0] for call in dispatcher.send.await_args_list]


class TestMembershipExpirySweep:
    """Tests for MembershipExpirySweeper.sweep."""

    @pytest.mark.asyncio
    async def test_one_notification_per_window(
        self, session, session_maker, make_membership, mock_dispatcher
    ):
        seven = await make_membership(datetime(2026, 10, 25, 12, 0, tzinfo=UTC), user_id="u7")
        today = await make_membership(datetime(2026, 10, 18, 20, 0, tzinfo=UTC), user_id="u0")
        expired = await make_membership(datetime(2026, 10, 17, 3, 0, tzinfo=UTC), user_id="ux")
        await make_membership(datetime(2026, 10, 30, tzinfo=UTC), user_id="later")
        await make_membership(
            datetime(2026, 10, 25, 9, 0, tzinfo=UTC), user_id="inactive", is_active=False
        )

        sweeper = MembershipExpirySweeper(session, mock_dispatcher, SITE_URL)
        result = await sweeper.sweep(now=NOW)

        assert result.seven_day_warnings == 1
        assert result.day_of_warnings == 1
        assert result.expired_notifications == 1
        assert result.sent == 3
        assert result.errors == []
        assert await sent_rows(session_maker) == [
            (seven.id, "seven_day_warning"),
            (today.id, "day_of_warning"),
            (expired.id, "expired"),
        ]

    @pytest.mark.asyncio
    async def test_payload_contents(self, session, make_membership, mock_dispatcher):
        await make_membership(datetime(2026, 10, 25, 12, 0, tzinfo=UTC))
        await make_membership(
            datetime(2026, 10, 17, 3, 0, tzinfo=UTC),
            user_id="u2",
            email="esi.owusu@example.com",
            full_name=None,
        )

        await MembershipExpirySweeper(session, mock_dispatcher, SITE_URL + "/").sweep(now=NOW)

        warning, expired = sent_payloads(mock_dispatcher)
        assert warning.to_dict() == {
            "type": "membership_expiry_warning",
            "recipient": "kofi@example.com",
            "name": "Kofi Boateng",
            "expiry_date": "October 25, 2026",
            "renewal_url": "https://digiafriq.com/dashboard/learner/membership",
            "days_remaining": 7,
        }
        assert expired.type == NotificationType.MEMBERSHIP_EXPIRED
        assert expired.name == "esi.owusu"
        assert expired.days_remaining is None

    @pytest.mark.asyncio
    async def test_second_sweep_sends_nothing(
        self, session, session_maker, make_membership, mock_dispatcher
    ):
        await make_membership(datetime(2026, 10, 25, 12, 0, tzinfo=UTC))
        sweeper = MembershipExpirySweeper(session, mock_dispatcher, SITE_URL)

        first = await sweeper.sweep(now=NOW)
        # Later the same day
        second = await sweeper.sweep(now=NOW.replace(hour=20))

        assert first.sent == 1
        assert second.sent == 0
        assert second.already_sent == 1
        assert mock_dispatcher.send.await_count == 1
        assert len(await sent_rows(session_maker)) == 1

    @pytest.mark.asyncio
    async def test_failed_send_retried_next_sweep(
        self, session, session_maker, make_membership
    ):
        await make_membership(datetime(2026, 10, 18, 20, 0, tzinfo=UTC))
        dispatcher = AsyncMock()
        dispatcher.send = AsyncMock(side_effect=[False, True])
        sweeper = MembershipExpirySweeper(session, dispatcher, SITE_URL)

        first = await sweeper.sweep(now=NOW)
        assert first.failed == 1
        assert first.sent == 0
        assert await sent_rows(session_maker) == []

        second = await sweeper.sweep(now=NOW)
        assert second.day_of_warnings == 1
        assert len(await sent_rows(session_maker)) == 1

    @pytest.mark.asyncio
    async def test_dispatcher_exception_isolated(
        self, session, session_maker, make_membership
    ):
        """One failing recipient does not stop the others."""
        first = await make_membership(datetime(2026, 10, 25, 10, 0, tzinfo=UTC), user_id="a")
        second = await make_membership(datetime(2026, 10, 25, 11, 0, tzinfo=UTC), user_id="b")
        dispatcher = AsyncMock()
        dispatcher.send = AsyncMock(side_effect=[RuntimeError("smtp down"), True])

        result = await MembershipExpirySweeper(session, dispatcher, SITE_URL).sweep(now=NOW)

        assert result.failed == 1
        assert result.seven_day_warnings == 1
        assert len(result.errors) == 1
        assert f"membership {first.id}" in result.errors[0]
        assert await sent_rows(session_maker) == [(second.id, "seven_day_warning")]

    @pytest.mark.asyncio
    async def test_membership_without_email_skipped(
        self, session, make_membership, mock_dispatcher
    ):
        await make_membership(datetime(2026, 10, 25, 12, 0, tzinfo=UTC), email=None)

        result = await MembershipExpirySweeper(session, mock_dispatcher, SITE_URL).sweep(now=NOW)

        assert result.skipped_no_email == 1
        assert result.sent == 0
        mock_dispatcher.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_record_tolerated(
        self, session, session_maker, make_membership
    ):
        """A parallel sweep recording the same notification is not an error."""
        membership = await make_membership(datetime(2026, 10, 25, 12, 0, tzinfo=UTC))

        async def send_and_race(payload):
            async with session_maker() as other:
                other.add(
                    MembershipExpiryNotification(
                        membership_id=membership.id,
                        user_id=membership.user_id,
                        kind=NotificationKind.SEVEN_DAY_WARNING,
                        sent_at=NOW,
                    )
                )
                await other.commit()
            return True

        dispatcher = AsyncMock()
        dispatcher.send = AsyncMock(side_effect=send_and_race)

        result = await MembershipExpirySweeper(session, dispatcher, SITE_URL).sweep(now=NOW)

        assert result.seven_day_warnings == 1
        assert result.unrecorded == 0
        assert result.errors == []
        assert len(await sent_rows(session_maker)) == 1
