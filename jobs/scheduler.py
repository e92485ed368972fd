"""
Scheduler process.

Enqueues the daily membership expiry sweep and serves health endpoints.
The sweep itself runs in Celery workers.

Usage:
    python -m jobs.scheduler
"""

import asyncio
import signal

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from affiliate_ledger.config.logging import setup_logging
from affiliate_ledger.config.settings import settings
from jobs.health import set_scheduler, start_health_server, stop_health_server
from jobs.tasks.membership_expiry import sweep_membership_expiry


def enqueue_membership_expiry_sweep() -> None:
    """Send the sweep message to the queue."""
    result = sweep_membership_expiry.delay()
    logger.info(f"Membership expiry sweep enqueued: {result.id}")


def create_scheduler() -> AsyncIOScheduler:
    """Build scheduler with all periodic jobs registered."""
    scheduler = AsyncIOScheduler(
        timezone="UTC",
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 3600,
        },
    )
    scheduler.add_job(
        enqueue_membership_expiry_sweep,
        CronTrigger(hour=settings.expiry_sweep_hour_utc, minute=0, timezone="UTC"),
        id="membership_expiry_sweep",
        name="Membership expiry notifications",
        replace_existing=True,
    )
    return scheduler


async def main() -> None:
    """Run scheduler until SIGINT/SIGTERM."""
    setup_logging("scheduler")

    scheduler = create_scheduler()
    scheduler.start()
    set_scheduler(scheduler)

    runner, _ = await start_health_server(port=settings.health_check_port)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    logger.info("Scheduler started")
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down scheduler...")
        scheduler.shutdown(wait=False)
        await stop_health_server(runner)


if __name__ == "__main__":
    asyncio.run(main())
