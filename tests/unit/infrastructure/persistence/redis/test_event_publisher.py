"""
Tests for RedisJobEventPublisher.

Covers:
- Channel and history key naming
- Pipeline: publish, lpush, ltrim, expire
- RedisError logged, never raised
"""

import json
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError

from sheetjobs.application.events import JobEvent, JobEventType
from sheetjobs.infrastructure.persistence.redis.event_publisher import RedisJobEventPublisher


@pytest.fixture
def pipe():
    return MagicMock()


@pytest.fixture
def publisher(pipe):
    client = MagicMock()
    client.pipeline.return_value = pipe
    return RedisJobEventPublisher(client, key_prefix="test", max_history_entries=5, history_ttl=60)


@pytest.fixture
def event():
    return JobEvent(type=JobEventType.PROGRESS, queue_type="excel", job_id="3", progress=50)


def test_publish_writes_channel_and_history(publisher, pipe, event):
    """
    Test publish().

    Verifies:
    - Message published on "{prefix}:events:{queue_type}"
    - History list trimmed to max entries with TTL
    """
    publisher.publish(event)

    channel, message = pipe.publish.call_args.args
    assert channel == "test:events:excel"
    assert json.loads(message)["progress"] == 50
    pipe.lpush.assert_called_once_with("test:events:excel:3", message)
    pipe.ltrim.assert_called_once_with("test:events:excel:3", 0, 4)
    pipe.expire.assert_called_once_with("test:events:excel:3", 60)
    pipe.execute.assert_called_once()


def test_publisher_is_bus_subscriber(publisher, pipe, event):
    """Test the publisher can be called directly as a JobEventBus handler."""
    publisher(event)

    pipe.execute.assert_called_once()


def test_publish_swallows_redis_errors(publisher, pipe, event, caplog):
    """Test a Redis failure is logged as warning and not raised."""
    pipe.execute.side_effect = ConnectionError("down")

    publisher.publish(event)

    assert "Redis error publishing progress event for job 3" in caplog.text
