"""
API Router for Job Status and Listing

Responsibility:
    HTTP interface for polling jobs: single-job lookup across queues and
    paginated listing of one queue by state.

Architecture Notes:
    - Part of API Layer (Presentation)
    - Depends on Application Layer query handlers (CQRS read side)
    - Sync endpoints: the queue clients block, FastAPI runs them in its threadpool
    - No business logic - pure HTTP concerns

Contains:
    - GET /job/{job_id} - Job state, progress, payload, result and queue stats
    - GET /jobs - Paginated job listing for one queue and state
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from sheetjobs.api.schemas.common import ErrorResponse
from sheetjobs.api.schemas.jobs import JobListResponse, JobResponse
from sheetjobs.application.queries.get_job import GetJobQuery, GetJobQueryHandler
from sheetjobs.application.queries.list_jobs import ListJobsQuery, ListJobsQueryHandler
from sheetjobs.container import get_job_queues

# Configure logger
logger = logging.getLogger(__name__)


router = APIRouter(
    tags=["jobs"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Invalid worker or status"},
        503: {"model": ErrorResponse, "description": "Service Unavailable - Queue backend unreachable"},
    },
)


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================


def get_job_query_handler() -> GetJobQueryHandler:
    return GetJobQueryHandler(get_job_queues())


def get_list_jobs_query_handler() -> ListJobsQueryHandler:
    return ListJobsQueryHandler(get_job_queues())


# ============================================================================
# ENDPOINTS
# ============================================================================


@router.get(
    "/job/{job_id}",
    status_code=status.HTTP_200_OK,
    response_model=JobResponse,
    summary="Get state, progress and result of a job",
    description=(
        "Looks the job up in the queue given by ?worker=csv|excel. Without a worker "
        "the csv queue is probed first, then the excel queue. Job ids are only unique "
        "within a queue, so pass the worker whenever it is known."
    ),
    responses={404: {"model": ErrorResponse, "description": "Not Found - Job not in the searched queue(s)"}},
)
def get_job(
    response: Response,
    job_id: str = Path(..., description="Job id returned by POST /upload"),
    worker: Optional[str] = Query(default=None, description="Queue type: csv or excel"),
    handler: GetJobQueryHandler = Depends(get_job_query_handler),
) -> JobResponse:
    """
    Get a single job.

    Raises (mapped by global handlers):
        InvalidWorkerTypeError -> 400
        JobNotFoundException -> 404
        QueueConnectionError -> 503
    """
    details = handler.handle(GetJobQuery(job_id=job_id, worker=worker))

    # Progress changes between polls
    response.headers["Cache-Control"] = "no-cache"
    return JobResponse.from_details(details)


@router.get(
    "/jobs",
    status_code=status.HTTP_200_OK,
    response_model=JobListResponse,
    summary="List jobs of one queue by state",
    description=(
        "Paginated listing, ordered by when each job entered the state. "
        "status defaults to 'active'."
    ),
)
def list_jobs(
    worker: Optional[str] = Query(default=None, description="Queue type: csv or excel (required)"),
    job_status: Optional[str] = Query(
        default=None,
        alias="status",
        description="waiting | active | completed | failed | delayed",
    ),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    handler: ListJobsQueryHandler = Depends(get_list_jobs_query_handler),
) -> JobListResponse:
    """
    List one page of jobs.

    Raises (mapped by global handlers):
        InvalidWorkerTypeError -> 400
        InvalidJobStatusError -> 400
        QueueConnectionError -> 503
    """
    page_result = handler.handle(
        ListJobsQuery(worker=worker, status=job_status, page=page, page_size=page_size)
    )
    return JobListResponse.from_page(page_result)
