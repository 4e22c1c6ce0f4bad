"""
Progress Tracker

Turns per-record counters into the job's observable progress.

Responsibility:
    - Recompute progress after every record (compute_progress)
    - Write it to the job queue and publish a PROGRESS event when it rises
    - Never fail the job because progress could not be written

Architecture Notes:
    - Part of Application Layer (used by JobWorker)
    - Monotonicity is enforced twice: here (only rising values are emitted)
      and by the queue (lower writes are ignored)
"""

import logging
from typing import Optional

from sheetjobs.application.events import JobEvent, JobEventBus, JobEventType
from sheetjobs.application.ports.job_queue import JobQueueProtocol, QueueConnectionError
from sheetjobs.domain.jobs.job import Job
from sheetjobs.domain.jobs.progress import compute_progress

logger = logging.getLogger(__name__)


class ProgressTracker:
    """
    Progress emitter for one job run.

    Examples:
        >>> tracker = ProgressTracker(queue, job, event_bus)
        >>> tracker.report(processed=1, failed=0, total=4)
        25
    """

    def __init__(self, queue: JobQueueProtocol, job: Job, event_bus: Optional[JobEventBus] = None) -> None:
        self.queue = queue
        self.job = job
        self.event_bus = event_bus
        self.last_emitted = job.progress

    def report(self, processed: int, failed: int, total: int) -> int:
        """
        Recompute progress and emit it if it rose.

        Returns:
            Current progress value (0-100)
        """
        progress = compute_progress(processed, failed, total)
        if progress <= self.last_emitted:
            return self.last_emitted

        try:
            self.queue.update_progress(self.job.id, progress)
        except QueueConnectionError as e:
            # Log error but don't fail job if progress tracking fails
            logger.warning(f"Failed to update progress for job {self.job.id}: {e}")

        self.last_emitted = progress

        if self.event_bus is not None:
            self.event_bus.publish(
                JobEvent(
                    type=JobEventType.PROGRESS,
                    queue_type=self.job.queue_type,
                    job_id=self.job.id,
                    progress=progress,
                    data={"processed": processed, "failed": failed, "total": total},
                )
            )
        return progress
