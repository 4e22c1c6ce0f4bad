"""
Tests for GetMetricsQueryHandler.
"""

from sheetjobs.application.queries.get_metrics import GetMetricsQueryHandler
from sheetjobs.domain.jobs.job import JobResult, JobState, QueueType


def test_handle_counts_per_queue_and_totals(queues, make_payload):
    """
    Test metrics over both queues.

    Verifies:
    - Per-queue counts for every state
    - Totals sum the queues
    - total_active_jobs counts active jobs of all queues
    """
    # Arrange
    csv_queue, excel_queue = queues[QueueType.CSV], queues[QueueType.EXCEL]
    for _ in range(3):
        csv_queue.add(make_payload())
    csv_queue.claim_next()
    done = csv_queue.claim_next()
    csv_queue.complete(done.id, JobResult())

    excel_queue.add(make_payload(file_type="excel"))
    excel_queue.add(make_payload(file_type="excel"), delay_seconds=60)
    failed = excel_queue.claim_next()
    excel_queue.fail(failed.id, JobResult())
    excel_queue.add(make_payload(file_type="excel"))
    excel_queue.claim_next()

    # Act
    metrics = GetMetricsQueryHandler(queues).handle()

    # Assert
    assert metrics.queues[QueueType.CSV] == {
        JobState.WAITING: 1,
        JobState.ACTIVE: 1,
        JobState.COMPLETED: 1,
        JobState.FAILED: 0,
        JobState.DELAYED: 0,
    }
    assert metrics.queues[QueueType.EXCEL][JobState.FAILED] == 1
    assert metrics.queues[QueueType.EXCEL][JobState.DELAYED] == 1
    assert metrics.queues[QueueType.EXCEL][JobState.ACTIVE] == 1
    assert metrics.totals[JobState.ACTIVE] == 2
    assert metrics.totals[JobState.COMPLETED] == 1
    assert metrics.total_active_jobs == 2


def test_handle_empty_queues(queues):
    metrics = GetMetricsQueryHandler(queues).handle()

    assert set(metrics.totals.values()) == {0}
    assert metrics.total_active_jobs == 0
