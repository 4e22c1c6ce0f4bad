"""
Job Entity and Value Objects

Responsibility:
    - Job lifecycle states and allowed transitions
    - Queue types (one queue per supported file type)
    - Job payload, result and timestamps as pydantic models

Architecture Notes:
    - Part of Domain Layer (jobs subdomain)
    - Framework-independent apart from pydantic (shared with the DTOs of
      the Application Layer)
    - Queue implementations (Redis, in-memory) persist these models but the
      transition rules live here

Business Rules:
    - waiting -> active -> completed | failed
    - delayed -> waiting is the only way out of the hold state
    - Terminal states (completed, failed) are never left
    - result is present only in terminal states
"""

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from sheetjobs.domain.records.record import FieldValue
from sheetjobs.domain.shared.exceptions import InvalidJobStateTransitionError


class QueueType(str, Enum):
    """
    Job queue type, one per supported file type.

    Attributes:
        CSV: Delimited text files (.csv)
        EXCEL: Spreadsheet files (.xlsx, .xls)
    """

    CSV = "csv"
    EXCEL = "excel"


class JobState(str, Enum):
    """
    State of a job inside its queue.

    Attributes:
        WAITING: Enqueued, not yet claimed by a worker
        ACTIVE: Claimed by exactly one worker, records being processed
        COMPLETED: Finished the per-record loop, result available
        FAILED: Aborted (parse error or unexpected error), result holds the error
        DELAYED: Held until its due time, then promoted to WAITING
    """

    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    DELAYED = "delayed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)

    def can_transition_to(self, target: "JobState") -> bool:
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: Dict[JobState, frozenset] = {
    JobState.WAITING: frozenset({JobState.ACTIVE}),
    JobState.ACTIVE: frozenset({JobState.COMPLETED, JobState.FAILED}),
    JobState.DELAYED: frozenset({JobState.WAITING}),
    JobState.COMPLETED: frozenset(),
    JobState.FAILED: frozenset(),
}


def ensure_transition(current: JobState, target: JobState, job_id: Optional[str] = None) -> None:
    """
    Validate a state transition.

    Raises:
        InvalidJobStateTransitionError: If current -> target is not allowed
    """
    if not current.can_transition_to(target):
        raise InvalidJobStateTransitionError(current.value, target.value, job_id=job_id)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def now_iso() -> str:
    """Current UTC time as ISO 8601 text."""
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# VALUE OBJECTS
# ============================================================================


class JobPayload(BaseModel):
    """
    Data a job is created with.

    Attributes:
        file_path: Location of the stored upload, released by the worker
        original_name: File name as uploaded by the client
        file_type: Queue type derived from the extension
        timestamp: ISO 8601 enqueue time
    """

    file_path: str
    original_name: str
    file_type: QueueType
    timestamp: str = Field(default_factory=now_iso)


class RecordOutcome(BaseModel):
    """Outcome of one successfully processed record."""

    success: bool = True
    data: Dict[str, FieldValue]


class JobError(BaseModel):
    """Error that moved a job to FAILED."""

    message: str
    type: str


class JobSummary(BaseModel):
    """
    Aggregate statistics over successful records.

    multi_value_fields maps a field name to
    {total_values, unique_values, max_values_in_field}.
    """

    multi_value_fields: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class JobResult(BaseModel):
    """
    Final result of a job, written once with the terminal transition.

    processed + failed == total for every job that reached the per-record
    loop. A run aborted mid-loop records total as the records attempted.
    A parse failure leaves all three at 0.
    """

    processed: int = 0
    failed: int = 0
    total: int = 0
    records: List[RecordOutcome] = Field(default_factory=list)
    summary: JobSummary = Field(default_factory=JobSummary)
    error: Optional[JobError] = None


class JobTimestamps(BaseModel):
    """Lifecycle timestamps in epoch milliseconds, None until reached."""

    created: Optional[int] = None
    started: Optional[int] = None
    finished: Optional[int] = None


# ============================================================================
# ENTITY
# ============================================================================


class Job(BaseModel):
    """
    One unit of work: a single uploaded file's processing run.

    Attributes:
        id: Unique within its queue (per-queue counter)
        queue_type: Owning queue
        state: Current JobState
        payload: JobPayload the job was created with
        progress: 0-100, non-decreasing while active
        result: JobResult, present only in terminal states
        timestamps: created / started / finished
    """

    id: str
    queue_type: QueueType
    state: JobState = JobState.WAITING
    payload: JobPayload
    progress: int = Field(default=0, ge=0, le=100)
    result: Optional[JobResult] = None
    timestamps: JobTimestamps = Field(default_factory=JobTimestamps)
    delay_until: Optional[int] = None

    def transition_to(self, target: JobState) -> None:
        """Move to target state, enforcing the allowed transitions."""
        ensure_transition(self.state, target, job_id=self.id)
        self.state = target
