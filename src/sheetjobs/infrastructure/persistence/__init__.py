"""
Persistence Infrastructure Module

Job queue implementations of JobQueueProtocol.

Exports:
    From redis:
        - RedisJobQueue
        - RedisJobEventPublisher

    From memory:
        - InMemoryJobQueue
"""

from .memory import InMemoryJobQueue
from .redis import RedisJobEventPublisher, RedisJobQueue

__all__ = [
    "InMemoryJobQueue",
    "RedisJobEventPublisher",
    "RedisJobQueue",
]
