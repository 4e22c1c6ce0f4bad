"""
Redis Infrastructure Module

Exports:
    - RedisJobQueue: Job queue stored in Redis (Lua scripts for atomic transitions)
    - RedisJobEventPublisher: Mirror job events to Redis pub/sub
    - get_redis_client: Get Redis client with connection pooling
    - health_check: Check Redis health with PING test
    - close_connections: Close all Redis connections
"""

from .connection import close_connections, get_redis_client, health_check
from .event_publisher import RedisJobEventPublisher
from .job_queue import RedisJobQueue

__all__ = [
    "RedisJobEventPublisher",
    "RedisJobQueue",
    "get_redis_client",
    "health_check",
    "close_connections",
]
