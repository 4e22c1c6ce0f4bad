"""
Job Queue Port

Interface the Application Layer uses to store and move jobs.
Implemented by RedisJobQueue (shared across processes) and InMemoryJobQueue
(single process, tests and local runs).

Responsibility:
    - Type-segmented collection of jobs with per-state views
    - Atomic claim: at most one worker ever holds a given job as active
    - Atomic terminal transition with result

Architecture Notes:
    - Part of Application Layer (ports)
    - Protocol, not ABC: implementations do not inherit from it
    - All operations raise QueueConnectionError when the backend is unreachable
"""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from sheetjobs.domain.jobs.job import Job, JobPayload, JobResult, JobState, QueueType


class QueueConnectionError(Exception):
    """
    Raised when the queue backend cannot be reached.

    Infrastructure-level error (not a DomainException): the API maps it to
    503 Service Unavailable, the Celery task retries with backoff.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        self.original_error = original_error
        super().__init__(message)


class JobNotFoundException(Exception):
    """
    Raised when a job id is not present in the queue(s) searched.

    Attributes:
        job_id: Id that was looked up
        worker: Queue type searched, None when all queues were probed
    """

    def __init__(self, job_id: str, worker: Optional[str] = None) -> None:
        self.job_id = job_id
        self.worker = worker
        if worker:
            message = f"Job not found in {worker} queue"
        else:
            message = "Job not found in any queue"
        super().__init__(message)


@runtime_checkable
class JobQueueProtocol(Protocol):
    """
    Durable, type-segmented collection of jobs.

    Ordering:
        list_by_state() returns jobs in the order they entered the state
        (delayed jobs by due time), stable between calls for pagination.
    """

    queue_type: QueueType
    name: str

    def add(self, payload: JobPayload, delay_seconds: Optional[float] = None) -> Job:
        """Create a job in WAITING (or DELAYED when delay_seconds > 0)."""
        ...

    def claim_next(self) -> Optional[Job]:
        """Atomically move the oldest waiting job to ACTIVE and return it."""
        ...

    def get(self, job_id: str) -> Optional[Job]:
        """Look up a job by id, None if absent."""
        ...

    def list_by_state(self, state: JobState, start: int = 0, end: Optional[int] = None) -> List[Job]:
        """Jobs in state, sliced [start, end)."""
        ...

    def counts(self) -> Dict[JobState, int]:
        """Number of jobs per state (all five states present)."""
        ...

    def update_progress(self, job_id: str, progress: int) -> int:
        """Raise progress of an ACTIVE job; lower values are ignored. Returns stored value."""
        ...

    def complete(self, job_id: str, result: JobResult) -> Job:
        """ACTIVE -> COMPLETED with result, finished timestamp and progress 100."""
        ...

    def fail(self, job_id: str, result: JobResult) -> Job:
        """ACTIVE -> FAILED with result and finished timestamp."""
        ...

    def promote_delayed(self) -> int:
        """Move due DELAYED jobs to WAITING. Returns how many were moved."""
        ...

    def ping(self) -> bool:
        """True when the backend is reachable."""
        ...
