"""
Application Queries (CQRS read side)

Contains:
    - GetJobQuery / GetJobQueryHandler: single job lookup across queues
    - ListJobsQuery / ListJobsQueryHandler: paginated listing per queue and state
    - GetMetricsQueryHandler: counts per queue and state
"""

from .get_job import GetJobQuery, GetJobQueryHandler, JobDetails, parse_worker
from .get_metrics import GetMetricsQueryHandler, MetricsResult
from .list_jobs import JobPage, ListJobsQuery, ListJobsQueryHandler, Pagination, parse_status

__all__ = [
    "GetJobQuery",
    "GetJobQueryHandler",
    "GetMetricsQueryHandler",
    "JobDetails",
    "JobPage",
    "ListJobsQuery",
    "ListJobsQueryHandler",
    "MetricsResult",
    "Pagination",
    "parse_status",
    "parse_worker",
]
