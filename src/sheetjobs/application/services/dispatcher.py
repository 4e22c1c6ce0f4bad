"""
Dispatcher

Classifies submitted files by extension and enqueues them on the matching
type-specific job queue.

Responsibility:
    - classify(): .csv -> csv, .xlsx/.xls -> excel, anything else rejected
    - enqueue(): create the Job (waiting, or delayed) with its payload
    - Wake a worker of that type (notifier, default: Celery task message)

Architecture Notes:
    - Part of Application Layer
    - No content validation here: a malformed file becomes a FAILED job
    - The job is visible to workers and queries as soon as add() returns;
      a failed notification never undoes the enqueue
"""

import logging
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

from pydantic import BaseModel

from sheetjobs.application.ports.job_queue import JobQueueProtocol
from sheetjobs.domain.jobs.job import JobPayload, JobState, QueueType
from sheetjobs.domain.shared.exceptions import UnsupportedFileTypeError

logger = logging.getLogger(__name__)

EXTENSION_QUEUE_TYPES = {
    ".csv": QueueType.CSV,
    ".xlsx": QueueType.EXCEL,
    ".xls": QueueType.EXCEL,
}

# (queue type, job id, delay seconds or None)
Notifier = Callable[[QueueType, str, Optional[float]], None]


def classify(filename: str) -> QueueType:
    """
    Derive the queue type from the file name extension (case-insensitive).

    Raises:
        UnsupportedFileTypeError: Extension is not .csv, .xlsx or .xls

    Examples:
        >>> classify("Products.XLSX")
        <QueueType.EXCEL: 'excel'>
        >>> classify("notes.txt")
        Traceback (most recent call last):
        UnsupportedFileTypeError: ...
    """
    extension = Path(filename or "").suffix.lower()
    queue_type = EXTENSION_QUEUE_TYPES.get(extension)
    if queue_type is None:
        raise UnsupportedFileTypeError(
            f"Unsupported file type '{extension or filename}'. Only CSV and Excel files are allowed",
            filename=filename,
        )
    return queue_type


class JobHandle(BaseModel):
    """Reference to an enqueued job."""

    id: str
    queue_type: QueueType
    state: JobState = JobState.WAITING


class Dispatcher:
    """
    Routes files to job queues.

    Examples:
        >>> dispatcher = Dispatcher({QueueType.CSV: csv_queue, QueueType.EXCEL: excel_queue})
        >>> dispatcher.enqueue("uploads/1.csv", "products.csv")
        JobHandle(id='1', queue_type=<QueueType.CSV: 'csv'>, state=<JobState.WAITING: 'waiting'>)
    """

    def __init__(
        self,
        queues: Mapping[QueueType, JobQueueProtocol],
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.queues = queues
        self.notifier = notifier

    def enqueue(
        self,
        file_path: Union[str, Path],
        original_name: str,
        delay_seconds: Optional[float] = None,
    ) -> JobHandle:
        """
        Create a job for a stored file.

        Args:
            file_path: Stored file location (released by the worker)
            original_name: Name the client uploaded; drives classification
            delay_seconds: Hold the job in DELAYED for this long (optional)

        Raises:
            UnsupportedFileTypeError: Unsupported extension
            QueueConnectionError: Queue backend unreachable
        """
        queue_type = classify(original_name)
        queue = self.queues[queue_type]

        payload = JobPayload(
            file_path=str(file_path),
            original_name=original_name,
            file_type=queue_type,
        )
        job = queue.add(payload, delay_seconds=delay_seconds)
        logger.info(f"Queued '{original_name}' as {queue_type.value} job {job.id} ({job.state.value})")

        if self.notifier is not None:
            try:
                self.notifier(queue_type, job.id, delay_seconds)
            except Exception as e:
                # Job stays waiting; the next worker poll picks it up
                logger.warning(f"Failed to notify {queue_type.value} workers about job {job.id}: {e}")

        return JobHandle(id=job.id, queue_type=queue_type, state=job.state)
