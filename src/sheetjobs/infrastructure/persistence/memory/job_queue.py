"""
In-process Job Queue.

Thread-safe implementation of JobQueueProtocol for a single process:
tests, local development (JOB_QUEUE_BACKEND=memory) and the standalone
worker when the API and worker share a process.

Architecture Notes:
    - Infrastructure Layer
    - One threading.Lock guards every read and write; callers receive
      deep copies so they never observe a half-applied transition
    - Ids come from a per-queue itertools.count starting at 1
"""

import itertools
import logging
import threading
from typing import Callable, Dict, List, Optional

from sheetjobs.domain.jobs.job import (
    Job,
    JobPayload,
    JobResult,
    JobState,
    JobTimestamps,
    QueueType,
    ensure_transition,
    now_ms,
)
from sheetjobs.application.ports.job_queue import JobNotFoundException

logger = logging.getLogger(__name__)


class InMemoryJobQueue:
    """
    Job queue held in process memory.

    Examples:
        >>> queue = InMemoryJobQueue(QueueType.CSV)
        >>> job = queue.add(JobPayload(file_path="/tmp/a.csv", original_name="a.csv", file_type="csv"))
        >>> queue.claim_next().id == job.id
        True
    """

    def __init__(
        self,
        queue_type: QueueType,
        name: Optional[str] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.queue_type = QueueType(queue_type)
        self.name = name or f"{self.queue_type.value}-processing"
        self._clock = clock
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._jobs: Dict[str, Job] = {}
        # Per-state membership in order of entering the state
        self._members: Dict[JobState, List[str]] = {state: [] for state in JobState}

    # ------------------------------------------------------------------
    # Helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _move(self, job: Job, target: JobState) -> None:
        self._members[job.state].remove(job.id)
        job.transition_to(target)
        self._members[target].append(job.id)

    def _promote_due(self) -> int:
        now = self._clock()
        due = [
            job_id
            for job_id in self._members[JobState.DELAYED]
            if (self._jobs[job_id].delay_until or 0) <= now
        ]
        for job_id in due:
            job = self._jobs[job_id]
            self._move(job, JobState.WAITING)
            job.delay_until = None
        return len(due)

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(str(job_id))
        if job is None:
            raise JobNotFoundException(str(job_id), worker=self.queue_type.value)
        return job

    # ------------------------------------------------------------------
    # JobQueueProtocol
    # ------------------------------------------------------------------

    def add(self, payload: JobPayload, delay_seconds: Optional[float] = None) -> Job:
        with self._lock:
            created = self._clock()
            job = Job(
                id=str(next(self._ids)),
                queue_type=self.queue_type,
                payload=payload,
                timestamps=JobTimestamps(created=created),
            )
            self._jobs[job.id] = job
            if delay_seconds and delay_seconds > 0:
                job.state = JobState.DELAYED
                job.delay_until = created + int(delay_seconds * 1000)
                # Delayed view is ordered by due time (stable sort keeps ties in add order)
                delayed = self._members[JobState.DELAYED]
                delayed.append(job.id)
                delayed.sort(key=lambda member: self._jobs[member].delay_until)
            else:
                self._members[JobState.WAITING].append(job.id)
            logger.debug(f"[{self.name}] Job {job.id} added ({job.state.value})")
            return job.model_copy(deep=True)

    def claim_next(self) -> Optional[Job]:
        with self._lock:
            self._promote_due()
            waiting = self._members[JobState.WAITING]
            if not waiting:
                return None
            job = self._jobs[waiting[0]]
            self._move(job, JobState.ACTIVE)
            job.timestamps.started = self._clock()
            return job.model_copy(deep=True)

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(str(job_id))
            return job.model_copy(deep=True) if job else None

    def list_by_state(self, state: JobState, start: int = 0, end: Optional[int] = None) -> List[Job]:
        with self._lock:
            ids = self._members[JobState(state)][start:end]
            return [self._jobs[job_id].model_copy(deep=True) for job_id in ids]

    def counts(self) -> Dict[JobState, int]:
        with self._lock:
            return {state: len(members) for state, members in self._members.items()}

    def update_progress(self, job_id: str, progress: int) -> int:
        if not 0 <= progress <= 100:
            raise ValueError(f"Progress must be 0-100, got {progress}")
        with self._lock:
            job = self._require(job_id)
            if job.state == JobState.ACTIVE and progress > job.progress:
                job.progress = progress
            return job.progress

    def _finish(self, job_id: str, target: JobState, result: JobResult) -> Job:
        with self._lock:
            job = self._require(job_id)
            ensure_transition(job.state, target, job_id=job.id)
            self._move(job, target)
            job.result = result.model_copy(deep=True)
            job.timestamps.finished = self._clock()
            if target == JobState.COMPLETED:
                job.progress = 100
            return job.model_copy(deep=True)

    def complete(self, job_id: str, result: JobResult) -> Job:
        return self._finish(job_id, JobState.COMPLETED, result)

    def fail(self, job_id: str, result: JobResult) -> Job:
        return self._finish(job_id, JobState.FAILED, result)

    def promote_delayed(self) -> int:
        with self._lock:
            return self._promote_due()

    def ping(self) -> bool:
        return True
