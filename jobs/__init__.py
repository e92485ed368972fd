"""Background jobs: Celery app, tasks and the APScheduler process."""
