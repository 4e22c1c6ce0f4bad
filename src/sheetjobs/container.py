"""
Composition Root

Builds the process-wide collaborators from Settings: job queues (Redis or
in-memory), event bus, upload storage, parsers, workers and the dispatcher.

Used by:
    - API dependency functions (api/routers/*)
    - Celery task process_next_job
    - Standalone worker entry point (sheetjobs.worker)
"""

import logging
from functools import lru_cache
from typing import Dict, Optional

from sheetjobs.application.events import JobEventBus, log_job_event
from sheetjobs.application.ports.job_queue import JobQueueProtocol
from sheetjobs.application.ports.record_parser import RecordParserProtocol
from sheetjobs.application.services.dispatcher import Dispatcher
from sheetjobs.application.services.job_worker import JobWorker
from sheetjobs.config import Settings, get_settings
from sheetjobs.domain.jobs.job import QueueType
from sheetjobs.infrastructure.file_storage.csv_reader import CsvRecordParser
from sheetjobs.infrastructure.file_storage.excel_reader import ExcelRecordParser
from sheetjobs.infrastructure.file_storage.upload_storage import LocalUploadStorage
from sheetjobs.infrastructure.persistence.memory.job_queue import InMemoryJobQueue
from sheetjobs.infrastructure.persistence.redis.connection import get_redis_client
from sheetjobs.infrastructure.persistence.redis.event_publisher import RedisJobEventPublisher
from sheetjobs.infrastructure.persistence.redis.job_queue import RedisJobQueue

logger = logging.getLogger(__name__)

QUEUE_NAMES = {
    QueueType.CSV: "csv-processing",
    QueueType.EXCEL: "excel-processing",
}


@lru_cache(maxsize=1)
def get_job_queues() -> Dict[QueueType, JobQueueProtocol]:
    """
    One queue per type, shared by the whole process.

    Raises:
        QueueConnectionError: Redis backend unreachable (not cached, retried on next call)
    """
    settings = get_settings()
    if settings.job_queue_backend == "memory":
        logger.info("Using in-memory job queues")
        return {queue_type: InMemoryJobQueue(queue_type, name) for queue_type, name in QUEUE_NAMES.items()}

    client = get_redis_client()
    return {
        queue_type: RedisJobQueue(client, queue_type, name, key_prefix=settings.queue_key_prefix)
        for queue_type, name in QUEUE_NAMES.items()
    }


@lru_cache(maxsize=1)
def get_event_bus() -> JobEventBus:
    settings = get_settings()
    bus = JobEventBus()
    bus.subscribe(log_job_event)
    if settings.publish_job_events and settings.job_queue_backend != "memory":
        bus.subscribe(RedisJobEventPublisher(get_redis_client(), key_prefix=settings.queue_key_prefix))
    return bus


def get_upload_storage() -> LocalUploadStorage:
    return LocalUploadStorage(get_settings().upload_dir)


def build_parser(queue_type: QueueType, settings: Settings) -> RecordParserProtocol:
    if queue_type == QueueType.CSV:
        return CsvRecordParser(
            required_columns=settings.csv_required_columns,
            multi_value_fields=settings.csv_multi_value_fields,
        )
    return ExcelRecordParser(
        required_columns=settings.excel_required_columns,
        multi_value_fields=settings.excel_multi_value_fields,
    )


def build_worker(queue_type: QueueType) -> JobWorker:
    settings = get_settings()
    queue_type = QueueType(queue_type)
    if queue_type == QueueType.CSV:
        multi_value_fields = settings.csv_multi_value_fields
    else:
        multi_value_fields = settings.excel_multi_value_fields

    return JobWorker(
        queue=get_job_queues()[queue_type],
        parser=build_parser(queue_type, settings),
        storage=get_upload_storage(),
        event_bus=get_event_bus(),
        multi_value_fields=multi_value_fields,
        keep_failed_uploads=settings.keep_failed_uploads,
    )


def notify_celery_worker(queue_type: QueueType, job_id: str, delay_seconds: Optional[float] = None) -> None:
    """Send a wake-up message to the Celery queue of queue_type (after the delay, if any)."""
    from sheetjobs.application.tasks.processing_tasks import process_next_job

    process_next_job.apply_async(
        args=[queue_type.value],
        queue=QUEUE_NAMES[queue_type],
        countdown=delay_seconds or None,
    )
    logger.debug(f"Notified {QUEUE_NAMES[queue_type]} about job {job_id}")


def get_dispatcher() -> Dispatcher:
    settings = get_settings()
    # In-memory queues are drained by in-process worker threads, not Celery
    notifier = None if settings.job_queue_backend == "memory" else notify_celery_worker
    return Dispatcher(get_job_queues(), notifier=notifier)
