"""
Celery Tasks

Responsibility:
    Asynchronous draining of the csv and excel job queues.

Contains:
    - celery_app.py - Celery configuration
    - processing_tasks.py - process_next_job

Does NOT contain:
    - Job state machine (see application.services.job_worker)
"""

from .celery_app import celery_app, health_check
from .processing_tasks import process_next_job

__all__ = ["celery_app", "health_check", "process_next_job"]
