"""
Redis Job Event Publisher

Mirrors JobEventBus events to Redis so processes other than the worker
(dashboards, the API, ops tooling) can follow jobs in real time.

Responsibility:
    - PUBLISH each event on "{prefix}:events:{queue_type}"
    - Keep the last 10 events of each job in "{prefix}:events:{queue_type}:{job_id}"
    - Expire event history after HISTORY_TTL seconds

Architecture Notes:
    - Infrastructure Layer, subscribed to JobEventBus when PUBLISH_JOB_EVENTS=true
    - Uses pipeline (MULTI/EXEC) so publish and history trim land together
    - Graceful degradation: RedisError is logged, never raised to the worker
"""

import json
import logging

from redis import Redis
from redis.exceptions import RedisError

from sheetjobs.application.events import JobEvent

# Configure logger for this module
logger = logging.getLogger(__name__)


class RedisJobEventPublisher:
    """
    JobEventBus subscriber writing to Redis pub/sub plus a bounded history list.

    Examples:
        >>> publisher = RedisJobEventPublisher(get_redis_client())
        >>> bus.subscribe(publisher)
    """

    def __init__(
        self,
        redis_client: Redis,
        key_prefix: str = "sheetjobs",
        max_history_entries: int = 10,
        history_ttl: int = 86400,
    ) -> None:
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.max_history_entries = max_history_entries
        self.history_ttl = history_ttl

    def _get_channel(self, queue_type: str) -> str:
        return f"{self.key_prefix}:events:{queue_type}"

    def _get_history_key(self, queue_type: str, job_id: str) -> str:
        return f"{self.key_prefix}:events:{queue_type}:{job_id}"

    def __call__(self, event: JobEvent) -> None:
        self.publish(event)

    def publish(self, event: JobEvent) -> None:
        queue_type = event.queue_type.value
        message = json.dumps(event.model_dump(mode="json"))
        history_key = self._get_history_key(queue_type, event.job_id)

        try:
            pipe = self.redis.pipeline()
            pipe.publish(self._get_channel(queue_type), message)
            pipe.lpush(history_key, message)
            pipe.ltrim(history_key, 0, self.max_history_entries - 1)
            pipe.expire(history_key, self.history_ttl)
            pipe.execute()
        except RedisError as e:
            logger.warning(
                f"Redis error publishing {event.type.value} event for job {event.job_id}: {e}"
            )
