"""
Health check server for the scheduler process.

/health lists scheduled jobs, /readiness also pings the database,
/liveness only proves the process answers.
"""

import asyncio

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from affiliate_ledger.config.database import async_engine

_scheduler: AsyncIOScheduler | None = None


def set_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Register the scheduler reported by the endpoints."""
    global _scheduler
    _scheduler = scheduler


def describe_jobs(scheduler: AsyncIOScheduler) -> list[dict]:
    """Job id, name and next run time for each scheduled job."""
    return [
        {
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
        }
        for job in scheduler.get_jobs()
    ]


async def health_handler(request: web.Request) -> web.Response:
    """Scheduler state and job list."""
    if _scheduler is None:
        return web.json_response(
            {"status": "unhealthy", "error": "Scheduler not initialized"},
            status=503,
        )

    jobs = describe_jobs(_scheduler)
    return web.json_response(
        {
            "status": "healthy" if _scheduler.running else "stopped",
            "scheduler_running": _scheduler.running,
            "jobs_count": len(jobs),
            "jobs": jobs,
        }
    )


async def database_is_reachable() -> bool:
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Readiness database check failed: {e}")
        return False
    return True


async def readiness_handler(request: web.Request) -> web.Response:
    """Ready when the scheduler runs and the database answers."""
    scheduler_ok = _scheduler is not None and _scheduler.running
    database_ok = await database_is_reachable()
    ready = scheduler_ok and database_ok

    return web.json_response(
        {
            "status": "ready" if ready else "not_ready",
            "ready": ready,
            "scheduler_running": scheduler_ok,
            "database": database_ok,
        },
        status=200 if ready else 503,
    )


async def liveness_handler(request: web.Request) -> web.Response:
    return web.json_response({"status": "alive", "alive": True})


def create_health_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/health", health_handler)
    app.router.add_get("/readiness", readiness_handler)
    app.router.add_get("/liveness", liveness_handler)
    return app


async def start_health_server(
    host: str = "0.0.0.0",
    port: int = 8081,
) -> tuple[web.AppRunner, web.TCPSite]:
    """
    Start health check server.

    Args:
        host: Host to bind to
        port: Port to bind to

    Returns:
        Tuple of (AppRunner, TCPSite) for cleanup
    """
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Health check server started on {host}:{port}")
    return runner, site


async def stop_health_server(runner: web.AppRunner, timeout: int = 5) -> None:
    """Stop health check server, giving up after ``timeout`` seconds."""
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
    except TimeoutError:
        logger.warning(f"Health check server cleanup timed out after {timeout}s")
