"""
GetJobQuery - CQRS Read Query

Query object and handler for looking up one job across the queues.

Responsibility:
    - Query: job id plus optional queue type
    - Handler: look in one queue, or probe csv then excel

Architecture Notes:
    - Part of Application Layer (orchestration)
    - Ids are unique per queue only, so the same id may exist in both
      queues; without a worker the csv queue wins
"""

import logging
from typing import Dict, Mapping, Optional

from pydantic import BaseModel

from sheetjobs.application.ports.job_queue import JobNotFoundException, JobQueueProtocol
from sheetjobs.domain.jobs.job import Job, JobState, QueueType
from sheetjobs.domain.shared.exceptions import InvalidWorkerTypeError

logger = logging.getLogger(__name__)

# Probe order when no worker type is given
PROBE_ORDER = (QueueType.CSV, QueueType.EXCEL)


def parse_worker(worker: Optional[str], required: bool = True) -> Optional[QueueType]:
    """
    Validate a worker (queue type) parameter.

    Raises:
        InvalidWorkerTypeError: Missing (when required) or unknown worker
    """
    if not worker:
        if required:
            raise InvalidWorkerTypeError(
                "Worker type is required. Use ?worker=csv or ?worker=excel", worker=worker
            )
        return None
    try:
        return QueueType(worker.lower())
    except ValueError:
        raise InvalidWorkerTypeError("Invalid worker type. Use 'csv' or 'excel'", worker=worker)


class GetJobQuery(BaseModel):
    """
    Query object for a single job.

    Attributes:
        job_id: Job id within its queue
        worker: Queue type to search; None probes csv then excel
    """

    job_id: str
    worker: Optional[str] = None


class JobDetails(BaseModel):
    """
    Result DTO returned by GetJobQueryHandler.

    Attributes:
        job: The job as stored in its queue
        queue_name: Name of the owning queue
        queue_counts: Job count per state of the owning queue
    """

    job: Job
    queue_name: str
    queue_counts: Dict[JobState, int]


class GetJobQueryHandler:
    """
    Handler for single-job lookup.

    Usage:
        handler = GetJobQueryHandler(queues)
        details = handler.handle(GetJobQuery(job_id="3", worker="excel"))
    """

    def __init__(self, queues: Mapping[QueueType, JobQueueProtocol]) -> None:
        self.queues = queues

    def handle(self, query: GetJobQuery) -> JobDetails:
        """
        Find a job.

        Raises:
            InvalidWorkerTypeError: Unknown worker
            JobNotFoundException: Job absent from the searched queue(s)
            QueueConnectionError: Queue backend unreachable
        """
        queue_type = parse_worker(query.worker, required=False)
        candidates = (queue_type,) if queue_type else PROBE_ORDER

        for candidate in candidates:
            queue = self.queues[candidate]
            job = queue.get(query.job_id)
            if job is not None:
                logger.debug(f"Job {query.job_id} found in {queue.name}: {job.state.value}")
                return JobDetails(job=job, queue_name=queue.name, queue_counts=queue.counts())

        logger.warning(f"Job not found: {query.job_id} (worker={query.worker})")
        raise JobNotFoundException(query.job_id, worker=queue_type.value if queue_type else None)
