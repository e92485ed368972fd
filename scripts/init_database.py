#!/usr/bin/env python3
"""Create ledger tables directly from the models (development databases).

Production schemas are managed with alembic.
"""

import asyncio
import sys

from loguru import logger

from affiliate_ledger.config.database import async_engine
from affiliate_ledger.config.settings import settings
from affiliate_ledger.models import Base

logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database() -> None:
    """Create all tables that do not exist yet."""
    if settings.environment == "production":
        logger.error("Refusing to create tables in production; run alembic upgrade head")
        sys.exit(1)

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    await async_engine.dispose()
    logger.success(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    asyncio.run(init_database())
