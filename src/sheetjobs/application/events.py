"""
Job Event Bus

In-process observer mechanism for job lifecycle events.

Responsibility:
    - Let the worker announce progress / completed / failed events
    - Fan events out to any number of subscribers (logging, Redis pub/sub)

Architecture Notes:
    - Part of Application Layer
    - Correctness never depends on a subscriber: a subscriber that raises
      is logged and the remaining subscribers still run
    - Subscribers run synchronously in the worker thread, in subscription order
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from sheetjobs.domain.jobs.job import QueueType, now_iso

logger = logging.getLogger(__name__)


class JobEventType(str, Enum):
    PROGRESS = "progress"
    COMPLETED = "completed"
    FAILED = "failed"


class JobEvent(BaseModel):
    """
    Lifecycle event of one job.

    Attributes:
        type: progress / completed / failed
        queue_type: Queue the job belongs to
        job_id: Job id within the queue
        progress: Progress value at the time of the event
        data: Event-specific details (counts, error message)
        timestamp: ISO 8601 emission time
    """

    type: JobEventType
    queue_type: QueueType
    job_id: str
    progress: int = 0
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=now_iso)


JobEventHandler = Callable[[JobEvent], None]


class JobEventBus:
    """
    Synchronous publish/subscribe bus.

    Examples:
        >>> bus = JobEventBus()
        >>> bus.subscribe(lambda event: print(event.type.value), JobEventType.COMPLETED)
        >>> bus.publish(JobEvent(type="completed", queue_type="csv", job_id="1"))
        completed
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # None key holds subscribers to every event type
        self._handlers: Dict[Optional[JobEventType], List[JobEventHandler]] = {}

    def subscribe(self, handler: JobEventHandler, event_type: Optional[JobEventType] = None) -> None:
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, handler: JobEventHandler, event_type: Optional[JobEventType] = None) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def publish(self, event: JobEvent) -> None:
        with self._lock:
            handlers = list(self._handlers.get(None, [])) + list(
                self._handlers.get(event.type, [])
            )

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # Subscriber failures never reach the worker
                logger.warning(
                    f"Job event subscriber {getattr(handler, '__name__', handler)!r} "
                    f"failed on {event.type.value} for job {event.job_id}: {e}"
                )


def log_job_event(event: JobEvent) -> None:
    """Logging subscriber: one line per lifecycle event."""
    prefix = f"[{event.queue_type.value}] Job {event.job_id}"
    if event.type == JobEventType.COMPLETED:
        logger.info(
            f"{prefix} completed: processed={event.data.get('processed', 0)}, "
            f"failed={event.data.get('failed', 0)}, total={event.data.get('total', 0)}"
        )
    elif event.type == JobEventType.FAILED:
        logger.error(f"{prefix} failed: {event.data.get('error', 'unknown error')}")
    else:
        logger.debug(f"{prefix} progress: {event.progress}%")
