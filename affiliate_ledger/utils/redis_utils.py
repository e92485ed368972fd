"""Redis connection utilities.

Shared by the task queue and the sweep lock so both point at the same
Redis instance.
"""

import redis.asyncio as redis

from affiliate_ledger.config.settings import settings


async def get_redis_client() -> redis.Redis:
    """
    Create a Redis client from settings.

    Returns:
        redis.Redis with decode_responses=True; caller closes it
    """
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
        decode_responses=True,
    )


def get_redis_url_masked() -> str:
    """Redis URL with the password replaced, safe for logging."""
    auth = ":****@" if settings.redis_password else ""
    return f"redis://{auth}{settings.redis_host}:{settings.redis_port}/{settings.redis_db}"


def get_redis_url() -> str:
    """
    Redis URL from settings.

    Contains the password in plaintext; log get_redis_url_masked() instead.
    """
    auth = f":{settings.redis_password}@" if settings.redis_password else ""
    return f"redis://{auth}{settings.redis_host}:{settings.redis_port}/{settings.redis_db}"
