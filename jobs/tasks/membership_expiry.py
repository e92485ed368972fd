"""
Membership expiry sweep task.

Enqueued once a day by the scheduler. A Redis lock keeps two workers from
sweeping at the same time; the dedup table keeps a retried sweep from
sending twice.
"""

import asyncio

from loguru import logger
from redis.exceptions import RedisError

from affiliate_ledger.config.settings import settings
from affiliate_ledger.services.membership_expiry import MembershipExpirySweeper, SweepResult
from affiliate_ledger.services.notification import EmailEventsDispatcher
from affiliate_ledger.utils.redis_utils import get_redis_client
from jobs.async_runner import run_async
from jobs.broker import celery_app
from jobs.utils.database import task_session_maker

SWEEP_LOCK_NAME = "membership_expiry_sweep"
SWEEP_TIME_LIMIT_SECONDS = 600


@celery_app.task(
    name="membership_expiry.sweep",
    autoretry_for=(RedisError,),
    retry_backoff=True,
    retry_backoff_max=60,
    max_retries=3,
    time_limit=SWEEP_TIME_LIMIT_SECONDS,
)
def sweep_membership_expiry() -> None:
    """Send due membership expiry notifications."""
    logger.info("Starting membership expiry sweep...")

    result = run_async(_sweep_membership_expiry_async())
    if result is None:
        return

    logger.info(
        f"Membership expiry sweep complete: {result.sent} sent, "
        f"{result.already_sent} already sent, {result.failed} failed"
    )
    for error in result.errors:
        logger.warning(f"Sweep error: {error}")


async def _sweep_membership_expiry_async() -> SweepResult | None:
    """Run the sweep under the Redis lock; None if another worker holds it."""
    redis_client = await get_redis_client()
    lock = redis_client.lock(SWEEP_LOCK_NAME, timeout=SWEEP_TIME_LIMIT_SECONDS)

    try:
        if not await lock.acquire(blocking=False):
            logger.info("Membership expiry sweep already running, skipping")
            return None

        try:
            return await run_sweep()
        finally:
            try:
                await lock.release()
            except RedisError as e:
                logger.warning(f"Failed to release sweep lock: {e}")
    except asyncio.CancelledError:
        logger.info("Membership expiry sweep cancelled")
        raise
    finally:
        await redis_client.aclose()


async def run_sweep() -> SweepResult:
    """Run one sweep with a fresh session and dispatcher."""
    async with task_session_maker() as session:
        async with EmailEventsDispatcher(
            settings.email_events_url,
            token=settings.email_events_token,
            timeout=settings.notification_timeout_seconds,
        ) as dispatcher:
            sweeper = MembershipExpirySweeper(session, dispatcher, settings.site_url)
            return await sweeper.sweep()
