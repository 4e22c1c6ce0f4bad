"""
ListJobsQuery - CQRS Read Query

Paginated listing of the jobs of one queue in one state.

Business Rules:
    - worker is required (csv | excel)
    - status defaults to "active"
    - page is 1-based; page N covers positions [(N-1)*size, N*size)
    - total_pages = ceil(total_in_state / page_size)
    - A page past the end returns an empty list with correct totals
"""

import logging
import math
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from sheetjobs.application.ports.job_queue import JobQueueProtocol
from sheetjobs.application.queries.get_job import parse_worker
from sheetjobs.domain.jobs.job import Job, JobState, QueueType
from sheetjobs.domain.shared.exceptions import InvalidJobStatusError

logger = logging.getLogger(__name__)


def parse_status(status: Optional[str]) -> JobState:
    """
    Validate a status parameter (default: active).

    Raises:
        InvalidJobStatusError: Unknown status
    """
    if not status:
        return JobState.ACTIVE
    try:
        return JobState(status.lower())
    except ValueError:
        allowed = ", ".join(state.value for state in JobState)
        raise InvalidJobStatusError(f"Invalid status. Use one of: {allowed}", status=status)


class ListJobsQuery(BaseModel):
    """
    Query object for a job listing.

    Attributes:
        worker: Queue type (csv | excel)
        status: Job state to list (default active)
        page: 1-based page number
        page_size: Jobs per page
    """

    worker: Optional[str] = None
    status: Optional[str] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)


class Pagination(BaseModel):
    page: int
    page_size: int
    total_jobs: int
    total_pages: int


class JobPage(BaseModel):
    """
    Result DTO returned by ListJobsQueryHandler.

    Attributes:
        queue: Queue name (e.g. "csv-processing")
        queue_type: Queue type
        status: Listed state
        pagination: Page numbers and totals
        queue_counts: Job count per state of the queue
        jobs: Jobs on this page, in order of entering the state
    """

    queue: str
    queue_type: QueueType
    status: JobState
    pagination: Pagination
    queue_counts: Dict[JobState, int]
    jobs: List[Job]


class ListJobsQueryHandler:
    """
    Handler for paginated job listings.

    Usage:
        handler = ListJobsQueryHandler(queues)
        page = handler.handle(ListJobsQuery(worker="csv", status="completed", page=2))
    """

    def __init__(self, queues: Mapping[QueueType, JobQueueProtocol]) -> None:
        self.queues = queues

    def handle(self, query: ListJobsQuery) -> JobPage:
        """
        List one page of jobs.

        Raises:
            InvalidWorkerTypeError: Missing or unknown worker
            InvalidJobStatusError: Unknown status
            QueueConnectionError: Queue backend unreachable
        """
        queue_type = parse_worker(query.worker, required=True)
        state = parse_status(query.status)
        queue = self.queues[queue_type]

        counts = queue.counts()
        total_jobs = counts.get(state, 0)
        start = (query.page - 1) * query.page_size
        jobs = queue.list_by_state(state, start, start + query.page_size) if start < total_jobs else []

        logger.debug(
            f"Listed {len(jobs)} {state.value} jobs from {queue.name} "
            f"(page {query.page}, size {query.page_size}, total {total_jobs})"
        )
        return JobPage(
            queue=queue.name,
            queue_type=queue_type,
            status=state,
            pagination=Pagination(
                page=query.page,
                page_size=query.page_size,
                total_jobs=total_jobs,
                total_pages=math.ceil(total_jobs / query.page_size),
            ),
            queue_counts=counts,
            jobs=jobs,
        )
