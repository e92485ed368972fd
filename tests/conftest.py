"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for settings; must be set before any project import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("SITE_URL", "https://digiafriq.com")

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from affiliate_ledger.config.ledger_config import LedgerConfig
from affiliate_ledger.models import Affiliate, Base, Commission, Membership


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine so concurrent sessions see each other."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    """Session maker matching the application's settings."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    """Database session for one test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def ledger_config():
    """Default ledger configuration (60% rate, GHS at 14 per USD)."""
    return LedgerConfig()


@pytest.fixture
def make_affiliate(session_maker):
    """Factory persisting an affiliate in its own session."""

    async def _make(**overrides) -> Affiliate:
        data = {
            "referral_code": "AFF42",
            "display_name": "Ama Mensah",
            "email": "ama@example.com",
            "onboarding_completed": True,
            "is_active": True,
        }
        data.update(overrides)
        async with session_maker() as session:
            affiliate = Affiliate(**data)
            session.add(affiliate)
            await session.commit()
            await session.refresh(affiliate)
            return affiliate

    return _make


@pytest.fixture
def make_membership(session_maker):
    """Factory persisting a membership in its own session."""

    async def _make(expires_at, **overrides) -> Membership:
        data = {
            "user_id": "user-1",
            "email": "kofi@example.com",
            "full_name": "Kofi Boateng",
            "expires_at": expires_at,
            "is_active": True,
        }
        data.update(overrides)
        async with session_maker() as session:
            membership = Membership(**data)
            session.add(membership)
            await session.commit()
            await session.refresh(membership)
            return membership

    return _make


@pytest.fixture
def mock_dispatcher():
    """Notification dispatcher that accepts everything."""
    dispatcher = AsyncMock()
    dispatcher.send = AsyncMock(return_value=True)
    return dispatcher


@pytest.fixture
def sample_amount():
    """Payment amount used across ledger tests."""
    return Decimal("200")


@pytest.fixture
def add_commission(session_maker):
    """Insert a commission row with explicit status and timestamp."""

    async def _add(affiliate_id, payment_id, amount, status="available", created_at=None):
        async with session_maker() as session:
            session.add(
                Commission(
                    payment_id=payment_id,
                    affiliate_id=affiliate_id,
                    commission_type="learner_referral",
                    source="verify",
                    base_amount=Decimal(amount) * 2,
                    base_currency="USD",
                    base_amount_reference=Decimal(amount) * 2,
                    commission_rate=Decimal("0.5"),
                    commission_amount=Decimal(amount),
                    commission_currency="USD",
                    status=status,
                    created_at=created_at or datetime(2026, 10, 1, tzinfo=UTC),
                )
            )
            await session.commit()

    return _add
