"""
Celery Task for Draining a Job Queue

The dispatcher sends one process_next_job message per enqueued job to the
Celery queue named after the job queue (csv-processing, excel-processing).
The task claims waiting jobs from that queue and runs them to a terminal
state. Job state, progress and results live in the job queue itself, not in
the Celery result backend.

Responsibility:
    - Build a JobWorker for the requested queue type
    - Drain waiting jobs (bounded by max_jobs per task run)
    - Retry with exponential backoff when the queue backend is unreachable

Architecture Notes:
    - Part of Application Layer (orchestration)
    - Thin orchestrator - JobWorker owns the job state machine
    - Several messages may race for the same jobs; claim_next is atomic,
      so a message that finds nothing to claim simply returns
"""

import logging
import time

from celery import Task

from sheetjobs.application.ports.job_queue import QueueConnectionError
from sheetjobs.application.services.job_worker import log_with_memory
from sheetjobs.application.tasks.celery_app import celery_app
from sheetjobs.container import build_worker
from sheetjobs.domain.jobs.job import QueueType

# Configure logger for this module
logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="process_next_job",
    autoretry_for=(QueueConnectionError,),
    max_retries=5,
    retry_backoff=True,  # Enable exponential backoff
    retry_backoff_max=900,  # Max 900 seconds (15 minutes) between retries
)
def process_next_job(self: Task, queue_type: str, max_jobs: int = 50) -> dict:
    """
    Drain up to max_jobs waiting jobs from one queue.

    Args:
        self: Celery task instance (bind=True gives access to self.request)
        queue_type: "csv" or "excel"
        max_jobs: Upper bound of jobs run by this task invocation

    Returns:
        dict: {"queue_type": str, "jobs_run": int, "processing_time": float}

    Raises:
        QueueConnectionError: Retried with backoff, up to max_retries
        ValueError: Unknown queue_type (not retried)
    """
    started = time.monotonic()
    worker = build_worker(QueueType(queue_type))
    log_with_memory("TASK_START", f"[{worker.name}] Celery task {self.request.id} draining queue")

    jobs_run = worker.drain(max_jobs)

    elapsed = time.monotonic() - started
    log_with_memory("TASK_DONE", f"[{worker.name}] {jobs_run} job(s) in {elapsed:.2f}s")
    return {
        "queue_type": queue_type,
        "jobs_run": jobs_run,
        "processing_time": round(elapsed, 3),
    }
