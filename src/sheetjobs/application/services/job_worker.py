"""
Job Worker - job state machine for one queue type.

Claims waiting jobs and drives each one to a terminal state.

Responsibility:
    - Claim the oldest waiting job (WAITING -> ACTIVE)
    - Parse the stored file with the queue type's parser
    - Process records one by one, isolating per-record failures
    - Report progress after every record
    - Accumulate multi-value statistics over successful records
    - Finish the job (COMPLETED or FAILED), then release the source file

Architecture Notes:
    - Part of Application Layer (orchestration)
    - Thin orchestrator: parsing lives in Infrastructure, record rules in Domain
    - Driven either by the Celery task process_next_job or by run_forever()
      in a standalone worker process
    - Log each step with timestamp and memory usage (psutil)

State Machine:
    WAITING --claim--> ACTIVE --loop done--> COMPLETED
                          |
                          +--ParseError / unexpected error--> FAILED

Error Handling:
    - ParseError (incl. MissingRequiredColumnsError): FAILED, counts 0
    - RecordProcessingError: record counted as failed, loop continues
    - Unexpected error: FAILED with the counts reached so far (total is the
      number of records attempted)
    - QueueConnectionError on claim: propagated; caller retries (Celery) or
      backs off (run_forever). Nothing was claimed.
    - QueueConnectionError on the terminal write: retried with capped
      exponential backoff until the write succeeds. The source file is kept
      until then.
    - Progress write failure: warning only (see ProgressTracker)
"""

import logging
import os
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import psutil

from sheetjobs.application.events import JobEvent, JobEventBus, JobEventType
from sheetjobs.application.ports.job_queue import JobQueueProtocol, QueueConnectionError
from sheetjobs.application.ports.record_parser import RecordParserProtocol
from sheetjobs.application.ports.upload_storage import UploadStorageProtocol
from sheetjobs.application.services.progress_tracker import ProgressTracker
from sheetjobs.domain.jobs.job import Job, JobError, JobResult, JobSummary, RecordOutcome
from sheetjobs.domain.records.multi_value import MultiValueSummary
from sheetjobs.domain.records.record_processor import RecordProcessor
from sheetjobs.domain.shared.exceptions import (
    DomainException,
    ParseError,
    RecordProcessingError,
)

# Configure logger for this module
logger = logging.getLogger(__name__)


def log_with_memory(stage: str, message: str) -> None:
    """Log a worker stage with timestamp and resident memory of this process."""
    memory_mb = psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024
    timestamp = datetime.now().isoformat()
    logger.info(f"{timestamp} | {memory_mb:.1f}MB | {stage} | {message}")


def _error_message(error: Exception) -> str:
    if isinstance(error, DomainException):
        return error.message
    return str(error) or error.__class__.__name__


class JobWorker:
    """
    Worker for one job queue.

    Examples:
        >>> worker = JobWorker(csv_queue, CsvRecordParser(multi_value_fields=["Tags"]))
        >>> job = worker.process_next()     # None when nothing is waiting
        >>> job.state
        <JobState.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        queue: JobQueueProtocol,
        parser: RecordParserProtocol,
        processor: Optional[RecordProcessor] = None,
        storage: Optional[UploadStorageProtocol] = None,
        event_bus: Optional[JobEventBus] = None,
        multi_value_fields: Iterable[str] = (),
        keep_failed_uploads: bool = False,
        finish_backoff: float = 0.5,
        max_finish_backoff: float = 30.0,
    ) -> None:
        self.queue = queue
        self.parser = parser
        self.processor = processor or RecordProcessor()
        self.storage = storage
        self.event_bus = event_bus
        self.multi_value_fields = list(multi_value_fields)
        self.keep_failed_uploads = keep_failed_uploads
        self.finish_backoff = finish_backoff
        self.max_finish_backoff = max_finish_backoff

    @property
    def name(self) -> str:
        return self.queue.name

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def process_next(self) -> Optional[Job]:
        """
        Claim and run one waiting job.

        Returns:
            The job in its terminal state, or None if nothing was waiting

        Raises:
            QueueConnectionError: Queue backend unreachable
        """
        job = self.queue.claim_next()
        if job is None:
            return None
        return self.run_job(job)

    def drain(self, max_jobs: Optional[int] = None) -> int:
        """Run waiting jobs until the queue is empty (or max_jobs ran). Returns count."""
        count = 0
        while max_jobs is None or count < max_jobs:
            if self.process_next() is None:
                break
            count += 1
        return count

    def run_forever(
        self,
        poll_interval: float = 1.0,
        stop_event: Optional[threading.Event] = None,
        max_backoff: float = 30.0,
    ) -> None:
        """
        Poll the queue until stop_event is set.

        Sleeps poll_interval on an empty queue. On QueueConnectionError backs
        off exponentially (capped at max_backoff) and tries again.
        """
        stop_event = stop_event or threading.Event()
        backoff = poll_interval
        logger.info(f"[{self.name}] Worker started (poll interval {poll_interval}s)")

        while not stop_event.is_set():
            try:
                job = self.process_next()
            except QueueConnectionError as e:
                logger.error(f"[{self.name}] Queue unavailable: {e}. Retrying in {backoff:.1f}s")
                stop_event.wait(backoff)
                backoff = min(max(backoff, 0.5) * 2, max_backoff)
                continue

            backoff = poll_interval
            if job is None:
                stop_event.wait(poll_interval)

        logger.info(f"[{self.name}] Worker stopped")

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def run_job(self, job: Job) -> Job:
        """
        Drive an ACTIVE job to COMPLETED or FAILED.

        Args:
            job: Job returned by claim_next()

        Returns:
            Job in its terminal state
        """
        log_with_memory("START", f"[{self.name}] Job {job.id}: processing '{job.payload.original_name}'")

        processed = 0
        failed = 0
        total = 0
        outcomes: List[RecordOutcome] = []

        try:
            try:
                records = self.parser.parse(job.payload.file_path)
            except ParseError as e:
                log_with_memory("PARSE_FAILED", f"[{self.name}] Job {job.id}: {e}")
                return self._fail(job, e, JobResult())

            total = len(records)
            log_with_memory("PARSED", f"[{self.name}] Job {job.id}: {total} records")

            summary = MultiValueSummary(self.multi_value_fields)
            tracker = ProgressTracker(self.queue, job, self.event_bus)

            for index, record in enumerate(records):
                try:
                    data = self.processor.process(record, index)
                except RecordProcessingError as e:
                    failed += 1
                    logger.error(f"[{self.name}] Job {job.id}: record {index} failed: {e.message}")
                else:
                    processed += 1
                    outcomes.append(RecordOutcome(data=data))
                    summary.observe(data)

                tracker.report(processed, failed, total)

            result = JobResult(
                processed=processed,
                failed=failed,
                total=total,
                records=outcomes,
                summary=JobSummary(multi_value_fields=summary.to_dict()),
            )

        except QueueConnectionError:
            raise
        except Exception as e:
            log_with_memory("ERROR", f"[{self.name}] Job {job.id}: {e}")
            logger.exception(f"[{self.name}] Job {job.id} aborted")
            partial = JobResult(
                processed=processed,
                failed=failed,
                total=processed + failed,
                records=outcomes,
            )
            return self._fail(job, e, partial)

        finished = self._write_terminal(self.queue.complete, job, result)
        self._release(job)

        log_with_memory(
            "COMPLETE",
            f"[{self.name}] Job {job.id}: processed={processed}, failed={failed}, total={total}",
        )
        self._publish(
            JobEventType.COMPLETED,
            finished,
            {"processed": processed, "failed": failed, "total": total},
        )
        return finished

    def _fail(self, job: Job, error: Exception, result: JobResult) -> Job:
        result.error = JobError(message=_error_message(error), type=error.__class__.__name__)
        failed_job = self._write_terminal(self.queue.fail, job, result)
        if not self.keep_failed_uploads:
            self._release(job)
        self._publish(JobEventType.FAILED, failed_job, {"error": result.error.message})
        return failed_job

    def _write_terminal(
        self,
        write: Callable[[str, JobResult], Job],
        job: Job,
        result: JobResult,
    ) -> Job:
        """
        Write the terminal transition, retrying queue outages until it lands.

        The job is already claimed, so nothing else will ever finish it;
        giving up here would leave it ACTIVE for good.
        """
        delay = self.finish_backoff
        attempt = 1
        while True:
            try:
                return write(job.id, result)
            except QueueConnectionError as e:
                logger.error(
                    f"[{self.name}] Job {job.id}: terminal write failed "
                    f"(attempt {attempt}): {e}. Retrying in {delay:.1f}s"
                )
                time.sleep(delay)
                delay = min(max(delay, 0.5) * 2, self.max_finish_backoff)
                attempt += 1

    def _release(self, job: Job) -> None:
        """Delete the source file; a failure here never changes the job outcome."""
        try:
            if self.storage is not None:
                self.storage.delete(job.payload.file_path)
            else:
                Path(job.payload.file_path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"[{self.name}] Job {job.id}: could not release {job.payload.file_path}: {e}")

    def _publish(self, event_type: JobEventType, job: Job, data: dict) -> None:
        if self.event_bus is None:
            return
        self.event_bus.publish(
            JobEvent(
                type=event_type,
                queue_type=job.queue_type,
                job_id=job.id,
                progress=job.progress,
                data=data,
            )
        )
