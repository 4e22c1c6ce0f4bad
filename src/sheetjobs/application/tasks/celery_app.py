"""
Celery application initialization.

Broker and result backend both come from REDIS_URL (CELERY_RESULT_BACKEND
may override the backend). Each queue type has its own Celery queue so
csv and excel workers can be scaled independently:

    celery -A sheetjobs.application.tasks.celery_app worker -Q csv-processing
    celery -A sheetjobs.application.tasks.celery_app worker -Q excel-processing

Architecture Note:
- Part of Application Layer (orchestration)
- Uses environment variables for configuration (sheetjobs.config)
- No business logic - pure infrastructure setup
"""

import logging
from datetime import datetime

from celery import Celery
from celery.signals import after_setup_logger

from sheetjobs.config import LOG_FORMAT, get_settings

settings = get_settings()

celery_app = Celery(
    "sheetjobs",
    broker=settings.redis_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_track_started=True,
    result_expires=3600,  # Results expire after 1 hour
    task_acks_late=True,
    worker_prefetch_multiplier=1,  # one job at a time per worker process
    task_default_queue="csv-processing",
)

# Autodiscover tasks from sheetjobs.application.tasks (processing_tasks.py)
celery_app.autodiscover_tasks(["sheetjobs.application.tasks"], related_name="processing_tasks")


@after_setup_logger.connect
def _apply_log_format(logger, *args, **kwargs) -> None:
    """Use the same log line format in Celery workers as in the API."""
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))


@celery_app.task(name="health_check")
def health_check() -> dict:
    """
    Simple health check task to verify Celery-Redis connection.

    Returns:
        dict: Status information with timestamp
            - status (str): "ok" if healthy
            - message (str): Human-readable status message
            - timestamp (str): ISO format timestamp
            - worker (str): Worker hostname that executed the task
    """
    return {
        "status": "ok",
        "message": "Celery worker is healthy",
        "timestamp": datetime.now().isoformat(),
        "worker": (
            celery_app.current_task.request.hostname
            if celery_app.current_task
            else "unknown"
        ),
    }
