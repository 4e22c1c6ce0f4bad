"""
Tests for ProgressTracker.

Covers:
- Progress written and published only when it rises
- Progress write failures never propagate
"""

from unittest.mock import MagicMock

import pytest

from sheetjobs.application.events import JobEventBus, JobEventType
from sheetjobs.application.ports.job_queue import QueueConnectionError
from sheetjobs.application.services.progress_tracker import ProgressTracker
from sheetjobs.domain.jobs.job import Job, JobPayload, JobState, QueueType


@pytest.fixture
def active_job():
    return Job(
        id="7",
        queue_type=QueueType.CSV,
        state=JobState.ACTIVE,
        payload=JobPayload(file_path="/tmp/a.csv", original_name="a.csv", file_type="csv"),
    )


@pytest.fixture
def events():
    return []


@pytest.fixture
def bus(events):
    bus = JobEventBus()
    bus.subscribe(events.append)
    return bus


def test_report_writes_and_publishes_rising_progress(active_job, bus, events):
    """
    Test report() with rising values.

    Verifies:
    - Progress is floor(attempted / total * 100)
    - Each rise is written to the queue and published
    """
    # Arrange
    queue = MagicMock()
    tracker = ProgressTracker(queue, active_job, bus)

    # Act
    values = [tracker.report(1, 0, 3), tracker.report(1, 1, 3), tracker.report(2, 1, 3)]

    # Assert
    assert values == [33, 66, 100]
    assert [call.args for call in queue.update_progress.call_args_list] == [
        ("7", 33),
        ("7", 66),
        ("7", 100),
    ]
    assert [event.progress for event in events] == [33, 66, 100]
    assert all(event.type == JobEventType.PROGRESS for event in events)
    assert events[-1].data == {"processed": 2, "failed": 1, "total": 3}


def test_report_skips_unchanged_progress(active_job, bus, events):
    """Test equal progress is neither written nor published again."""
    queue = MagicMock()
    tracker = ProgressTracker(queue, active_job, bus)

    # 1/300 and 2/300 both floor to 0
    assert tracker.report(1, 0, 300) == 0
    assert tracker.report(2, 0, 300) == 0
    assert tracker.report(3, 0, 300) == 1

    queue.update_progress.assert_called_once_with("7", 1)
    assert len(events) == 1


def test_report_starts_from_job_progress(active_job):
    """Test the tracker never emits below the job's stored progress."""
    active_job.progress = 50
    queue = MagicMock()
    tracker = ProgressTracker(queue, active_job)

    assert tracker.report(1, 0, 4) == 50
    queue.update_progress.assert_not_called()


def test_report_tolerates_queue_connection_error(active_job, bus, events, caplog):
    """
    Test a failing progress write.

    Verifies:
    - No exception reaches the caller
    - Warning is logged
    - Event is still published
    """
    queue = MagicMock()
    queue.update_progress.side_effect = QueueConnectionError("Redis down")
    tracker = ProgressTracker(queue, active_job, bus)

    assert tracker.report(1, 0, 2) == 50

    assert "Failed to update progress for job 7" in caplog.text
    assert [event.progress for event in events] == [50]
