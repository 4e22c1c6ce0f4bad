"""
API Router for Queue Metrics

Contains:
    - GET /metrics - Job counts per queue and state, totals, active jobs
"""

from fastapi import APIRouter, Depends, status

from sheetjobs.api.schemas.jobs import MetricsResponse
from sheetjobs.application.queries.get_metrics import GetMetricsQueryHandler
from sheetjobs.container import get_job_queues

router = APIRouter(tags=["metrics"])


def get_metrics_query_handler() -> GetMetricsQueryHandler:
    return GetMetricsQueryHandler(get_job_queues())


@router.get(
    "/metrics",
    status_code=status.HTTP_200_OK,
    response_model=MetricsResponse,
    summary="Job counts per queue",
)
def get_metrics(
    handler: GetMetricsQueryHandler = Depends(get_metrics_query_handler),
) -> MetricsResponse:
    return MetricsResponse.from_result(handler.handle())
