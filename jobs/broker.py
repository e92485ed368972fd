"""
Celery application.

Redis is both the broker and the lock store; task results are not kept.

Worker:
    celery -A jobs.broker worker --loglevel=INFO
"""

from celery import Celery
from loguru import logger

from affiliate_ledger.utils.redis_utils import get_redis_url, get_redis_url_masked

celery_app = Celery(
    "affiliate_ledger",
    broker=get_redis_url(),
    include=["jobs.tasks.membership_expiry"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    task_ignore_result=True,
    timezone="UTC",
    enable_utc=True,
    # Redeliver the sweep if a worker dies mid-run; the dedup table makes it safe
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
)

logger.info(f"Celery broker configured: {get_redis_url_masked()}")
