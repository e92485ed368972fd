"""Database setup for tasks."""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from affiliate_ledger.config.settings import settings


def create_task_engine() -> AsyncEngine:
    """Engine without pooling: worker threads run separate event loops."""
    return create_async_engine(
        settings.database_url,
        echo=False,
        poolclass=NullPool,
    )


def create_task_session_maker(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """Session maker for tasks."""
    if engine is None:
        engine = create_task_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


task_session_maker = create_task_session_maker()
