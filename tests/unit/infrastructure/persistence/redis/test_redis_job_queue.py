"""
Tests for RedisJobQueue.

Redis is mocked: Lua scripts are replaced by MagicMocks returning what the
script would return, so these tests cover key layout, argument passing,
hash (de)serialization and error translation.

Covers:
- add / add delayed
- claim_next (empty, claimed)
- get / list_by_state / counts
- update_progress (stored value, missing job)
- complete / fail outcomes
- RedisError -> QueueConnectionError
"""

from unittest.mock import MagicMock

import pytest
from redis import Redis
from redis.exceptions import ConnectionError

from sheetjobs.application.ports.job_queue import JobNotFoundException, QueueConnectionError
from sheetjobs.domain.jobs.job import JobPayload, JobResult, JobState, QueueType
from sheetjobs.domain.shared.exceptions import InvalidJobStateTransitionError
from sheetjobs.infrastructure.persistence.redis.job_queue import RedisJobQueue

NOW = 1_700_000_000_000


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def mock_redis():
    client = MagicMock(spec=Redis)
    client.register_script.side_effect = lambda script: MagicMock()
    return client


@pytest.fixture
def queue(mock_redis):
    return RedisJobQueue(mock_redis, QueueType.CSV, "csv-processing", key_prefix="test", clock=lambda: NOW)


@pytest.fixture
def payload():
    return JobPayload(file_path="uploads/1.csv", original_name="a.csv", file_type="csv")


def job_hash(payload, job_id="1", state="active", **extra):
    data = {
        "id": job_id,
        "queue_type": "csv",
        "state": state,
        "progress": "0",
        "payload": payload.model_dump_json(),
        "created": str(NOW - 100),
    }
    data.update(extra)
    return data


# ============================================================================
# ADD
# ============================================================================


def test_registers_all_scripts(mock_redis, queue):
    """Test the five Lua scripts are registered once per queue."""
    assert mock_redis.register_script.call_count == 5


def test_add_waiting_job(queue, payload):
    """
    Test add().

    Verifies:
    - Keys: id counter, waiting list, delayed zset under prefix:queue
    - Args: job key prefix, payload JSON, created, delay 0, queue type
    - Returned job is waiting with the script's id
    """
    queue._add_script.return_value = 5

    job = queue.add(payload)

    kwargs = queue._add_script.call_args.kwargs
    assert kwargs["keys"] == [
        "test:csv-processing:id",
        "test:csv-processing:waiting",
        "test:csv-processing:delayed",
    ]
    assert kwargs["args"][0] == "test:csv-processing:job:"
    assert JobPayload.model_validate_json(kwargs["args"][1]) == payload
    assert kwargs["args"][2:] == [NOW, 0, "csv"]
    assert job.id == "5"
    assert job.state == JobState.WAITING
    assert job.timestamps.created == NOW


def test_add_delayed_job(queue, payload):
    """Test add(delay_seconds) passes the due time and returns a delayed job."""
    queue._add_script.return_value = 6

    job = queue.add(payload, delay_seconds=2)

    assert queue._add_script.call_args.kwargs["args"][3] == NOW + 2000
    assert job.state == JobState.DELAYED
    assert job.delay_until == NOW + 2000


# ============================================================================
# CLAIM / GET
# ============================================================================


def test_claim_next_empty(queue):
    """Test claim_next returns None when the script finds no waiting job."""
    queue._claim_script.return_value = None

    assert queue.claim_next() is None


def test_claim_next_returns_active_job(queue, mock_redis, payload):
    """Test claim_next loads the claimed job hash."""
    queue._claim_script.return_value = "1"
    mock_redis.hgetall.return_value = job_hash(payload, started=str(NOW))

    job = queue.claim_next()

    mock_redis.hgetall.assert_called_once_with("test:csv-processing:job:1")
    assert job.state == JobState.ACTIVE
    assert job.timestamps.started == NOW
    assert job.payload == payload
    keys = queue._claim_script.call_args.kwargs["keys"]
    assert keys == [
        "test:csv-processing:delayed",
        "test:csv-processing:waiting",
        "test:csv-processing:active",
    ]


def test_get_missing_job(queue, mock_redis):
    """Test get() of an unknown id returns None (empty hash)."""
    mock_redis.hgetall.return_value = {}

    assert queue.get("9") is None


def test_get_completed_job_with_result(queue, mock_redis, payload):
    """Test a stored result JSON and finished timestamp are restored."""
    result = JobResult(processed=1, total=1, records=[{"data": {"Tags": ["a"]}}])
    mock_redis.hgetall.return_value = job_hash(
        payload,
        state="completed",
        progress="100",
        result=result.model_dump_json(),
        started=str(NOW - 50),
        finished=str(NOW),
    )

    job = queue.get("1")

    assert job.state == JobState.COMPLETED
    assert job.progress == 100
    assert job.result == result
    assert job.timestamps.finished == NOW


# ============================================================================
# LIST / COUNTS
# ============================================================================


def test_list_by_state_uses_inclusive_redis_range(queue, mock_redis, payload):
    """Test Python slice [10, 20) becomes LRANGE 10 19 and jobs load via pipeline."""
    mock_redis.lrange.return_value = ["11", "12"]
    pipe = MagicMock()
    pipe.execute.return_value = [job_hash(payload, "11"), job_hash(payload, "12")]
    mock_redis.pipeline.return_value = pipe

    jobs = queue.list_by_state(JobState.ACTIVE, 10, 20)

    mock_redis.lrange.assert_called_once_with("test:csv-processing:active", 10, 19)
    assert [job.id for job in jobs] == ["11", "12"]
    assert pipe.hgetall.call_count == 2


def test_list_by_state_delayed_uses_zrange(queue, mock_redis):
    """Test the delayed view reads the sorted set."""
    mock_redis.zrange.return_value = []

    assert queue.list_by_state(JobState.DELAYED) == []
    mock_redis.zrange.assert_called_once_with("test:csv-processing:delayed", 0, -1)


def test_list_by_state_skips_vanished_jobs(queue, mock_redis, payload):
    """Test an id whose hash disappeared between reads is skipped."""
    mock_redis.lrange.return_value = ["1", "2"]
    pipe = MagicMock()
    pipe.execute.return_value = [{}, job_hash(payload, "2")]
    mock_redis.pipeline.return_value = pipe

    assert [job.id for job in queue.list_by_state(JobState.ACTIVE)] == ["2"]


def test_counts(queue, mock_redis):
    """Test counts reads four list lengths and the delayed zset size."""
    pipe = MagicMock()
    pipe.execute.return_value = [1, 2, 3, 4, 5]
    mock_redis.pipeline.return_value = pipe

    counts = queue.counts()

    assert counts == {
        JobState.WAITING: 1,
        JobState.ACTIVE: 2,
        JobState.COMPLETED: 3,
        JobState.FAILED: 4,
        JobState.DELAYED: 5,
    }
    pipe.zcard.assert_called_once_with("test:csv-processing:delayed")


# ============================================================================
# PROGRESS
# ============================================================================


def test_update_progress_returns_stored_value(queue):
    """Test the stored value from the script is returned (may be higher)."""
    queue._progress_script.return_value = 60

    assert queue.update_progress("1", 40) == 60
    assert queue._progress_script.call_args.kwargs == {
        "keys": ["test:csv-processing:job:1"],
        "args": [40],
    }


def test_update_progress_missing_job(queue):
    """Test script result -1 raises JobNotFoundException."""
    queue._progress_script.return_value = -1

    with pytest.raises(JobNotFoundException):
        queue.update_progress("1", 40)


def test_update_progress_out_of_range(queue):
    """Test invalid values are rejected before touching Redis."""
    with pytest.raises(ValueError):
        queue.update_progress("1", -1)
    queue._progress_script.assert_not_called()


# ============================================================================
# TERMINAL TRANSITIONS
# ============================================================================


def test_complete_passes_final_progress(queue, mock_redis, payload):
    """Test complete() moves active -> completed with progress 100."""
    queue._finish_script.return_value = "ok"
    mock_redis.hgetall.return_value = job_hash(payload, state="completed", progress="100")

    job = queue.complete("1", JobResult(processed=1, total=1))

    kwargs = queue._finish_script.call_args.kwargs
    assert kwargs["keys"] == [
        "test:csv-processing:job:1",
        "test:csv-processing:active",
        "test:csv-processing:completed",
    ]
    assert kwargs["args"][1] == "completed"
    assert kwargs["args"][3] == NOW
    assert kwargs["args"][4] == "100"
    assert job.state == JobState.COMPLETED


def test_fail_keeps_progress(queue, mock_redis, payload):
    """Test fail() does not overwrite progress."""
    queue._finish_script.return_value = "ok"
    mock_redis.hgetall.return_value = job_hash(payload, state="failed", progress="40")

    job = queue.fail("1", JobResult())

    assert queue._finish_script.call_args.kwargs["args"][4] == ""
    assert job.progress == 40


def test_finish_missing_job(queue):
    """Test finishing an unknown job raises JobNotFoundException."""
    queue._finish_script.return_value = "missing"

    with pytest.raises(JobNotFoundException):
        queue.complete("1", JobResult())


def test_finish_non_active_job(queue):
    """Test finishing a job that is not active raises InvalidJobStateTransitionError."""
    queue._finish_script.return_value = "completed"

    with pytest.raises(InvalidJobStateTransitionError) as exc_info:
        queue.fail("1", JobResult())

    assert exc_info.value.from_state == "completed"
    assert exc_info.value.to_state == "failed"


# ============================================================================
# ERROR TRANSLATION
# ============================================================================


def test_redis_error_becomes_queue_connection_error(queue, mock_redis):
    """Test RedisError is translated into QueueConnectionError."""
    mock_redis.hgetall.side_effect = ConnectionError("connection refused")

    with pytest.raises(QueueConnectionError) as exc_info:
        queue.get("1")

    assert isinstance(exc_info.value.original_error, ConnectionError)


def test_script_error_becomes_queue_connection_error(queue, payload):
    """Test errors raised by a Lua script call are translated too."""
    queue._add_script.side_effect = ConnectionError("down")

    with pytest.raises(QueueConnectionError):
        queue.add(payload)


def test_ping(queue, mock_redis):
    """Test ping() reports False instead of raising."""
    mock_redis.ping.return_value = True
    assert queue.ping() is True

    mock_redis.ping.side_effect = ConnectionError("down")
    assert queue.ping() is False
