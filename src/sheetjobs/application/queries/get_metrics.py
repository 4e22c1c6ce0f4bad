"""GetMetricsQuery - job counts per queue and state, plus totals."""

from typing import Dict, Mapping

from pydantic import BaseModel

from sheetjobs.application.ports.job_queue import JobQueueProtocol
from sheetjobs.domain.jobs.job import JobState, QueueType


class MetricsResult(BaseModel):
    """
    Attributes:
        queues: Per queue type, job count per state
        totals: Job count per state over all queues
        total_active_jobs: Jobs currently being processed, all queues
    """

    queues: Dict[QueueType, Dict[JobState, int]]
    totals: Dict[JobState, int]
    total_active_jobs: int


class GetMetricsQueryHandler:
    def __init__(self, queues: Mapping[QueueType, JobQueueProtocol]) -> None:
        self.queues = queues

    def handle(self) -> MetricsResult:
        per_queue = {queue_type: queue.counts() for queue_type, queue in self.queues.items()}
        totals = {
            state: sum(counts.get(state, 0) for counts in per_queue.values())
            for state in JobState
        }
        return MetricsResult(
            queues=per_queue,
            totals=totals,
            total_active_jobs=totals[JobState.ACTIVE],
        )
