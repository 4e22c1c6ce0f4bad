"""
Job API Schemas

camelCase HTTP representations of the Application Layer DTOs
(JobDetails, JobPage, MetricsResult, FileUploadResult).
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from sheetjobs.api.schemas.common import CamelModel
from sheetjobs.application.queries import JobDetails, JobPage, MetricsResult
from sheetjobs.application.services import FileUploadResult
from sheetjobs.domain.jobs.job import Job, JobState, QueueType


class UploadResponse(CamelModel):
    """Response of POST /upload."""

    message: str
    job_id: str
    original_name: str
    file_type: QueueType

    @classmethod
    def from_result(cls, result: FileUploadResult) -> "UploadResponse":
        return cls.model_validate(result.model_dump())


class QueueStats(CamelModel):
    waiting: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0
    delayed: int = 0

    @classmethod
    def from_counts(cls, counts: Dict[JobState, int]) -> "QueueStats":
        return cls(**{state.value: count for state, count in counts.items()})


class JobDataResponse(CamelModel):
    """Payload the job was created with."""

    file_path: str
    original_name: str
    file_type: QueueType
    timestamp: str


class MultiValueFieldStats(CamelModel):
    total_values: int = 0
    unique_values: List[str] = Field(default_factory=list)
    max_values_in_field: int = 0


class JobSummaryResponse(CamelModel):
    multi_value_fields: Dict[str, MultiValueFieldStats] = Field(default_factory=dict)


class JobErrorResponse(CamelModel):
    message: str
    type: str


class RecordOutcomeResponse(CamelModel):
    success: bool = True
    data: Dict[str, Any]


class JobResultResponse(CamelModel):
    """
    Result of a finished job.

    Attributes:
        processed: Records processed successfully
        failed: Records that failed processing
        total: Records parsed from the file
        records: Successful record outcomes, in file order
        summary: Multi-value field statistics
        error: Set when the job FAILED
    """

    processed: int = 0
    failed: int = 0
    total: int = 0
    records: List[RecordOutcomeResponse] = Field(default_factory=list)
    summary: JobSummaryResponse = Field(default_factory=JobSummaryResponse)
    error: Optional[JobErrorResponse] = None


class TimestampsResponse(CamelModel):
    created: Optional[int] = None
    started: Optional[int] = None
    finished: Optional[int] = None


class JobSummaryItem(CamelModel):
    """One job in a listing."""

    job_id: str
    state: JobState
    progress: int
    data: JobDataResponse
    result: Optional[JobResultResponse] = None
    timestamps: TimestampsResponse

    @classmethod
    def from_job(cls, job: Job) -> "JobSummaryItem":
        return cls(
            job_id=job.id,
            state=job.state,
            progress=job.progress,
            data=JobDataResponse.model_validate(job.payload.model_dump()),
            result=JobResultResponse.model_validate(job.result.model_dump()) if job.result else None,
            timestamps=TimestampsResponse.model_validate(job.timestamps.model_dump()),
        )


class JobResponse(JobSummaryItem):
    """
    Response of GET /job/{jobId}.

    Example:
        {
          "jobId": "1",
          "state": "completed",
          "progress": 100,
          "queueType": "csv",
          "data": {"filePath": "uploads/...", "originalName": "products.csv", ...},
          "result": {"processed": 3, "failed": 0, "total": 3, ...},
          "queueStats": {"waiting": 0, "active": 0, "completed": 1, ...},
          "timestamps": {"created": 1700000000000, "started": ..., "finished": ...}
        }
    """

    queue_type: QueueType
    queue_stats: QueueStats

    @classmethod
    def from_details(cls, details: JobDetails) -> "JobResponse":
        item = JobSummaryItem.from_job(details.job)
        return cls(
            **item.model_dump(),
            queue_type=details.job.queue_type,
            queue_stats=QueueStats.from_counts(details.queue_counts),
        )


class PaginationResponse(CamelModel):
    page: int
    page_size: int
    total_jobs: int
    total_pages: int


class JobListResponse(CamelModel):
    """Response of GET /jobs."""

    queue: QueueType
    status: JobState
    pagination: PaginationResponse
    queue_stats: QueueStats
    jobs: List[JobSummaryItem]

    @classmethod
    def from_page(cls, page: JobPage) -> "JobListResponse":
        return cls(
            queue=page.queue_type,
            status=page.status,
            pagination=PaginationResponse.model_validate(page.pagination.model_dump()),
            queue_stats=QueueStats.from_counts(page.queue_counts),
            jobs=[JobSummaryItem.from_job(job) for job in page.jobs],
        )


class MetricsResponse(CamelModel):
    """Response of GET /metrics."""

    csv: QueueStats
    excel: QueueStats
    totals: QueueStats
    total_active_jobs: int

    @classmethod
    def from_result(cls, result: MetricsResult) -> "MetricsResponse":
        return cls(
            csv=QueueStats.from_counts(result.queues.get(QueueType.CSV, {})),
            excel=QueueStats.from_counts(result.queues.get(QueueType.EXCEL, {})),
            totals=QueueStats.from_counts(result.totals),
            total_active_jobs=result.total_active_jobs,
        )
