"""Jobs subdomain: job entity, lifecycle states, queue types and progress."""

from .job import (
    Job,
    JobError,
    JobPayload,
    JobResult,
    JobState,
    JobSummary,
    JobTimestamps,
    QueueType,
    RecordOutcome,
    ensure_transition,
    now_iso,
    now_ms,
)
from .progress import compute_progress

__all__ = [
    "Job",
    "JobError",
    "JobPayload",
    "JobResult",
    "JobState",
    "JobSummary",
    "JobTimestamps",
    "QueueType",
    "RecordOutcome",
    "compute_progress",
    "ensure_transition",
    "now_iso",
    "now_ms",
]
