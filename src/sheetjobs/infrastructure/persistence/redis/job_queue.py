"""
Redis Job Queue

Durable, type-segmented job queue shared by the API process and any number
of worker processes.

Responsibility:
    - Store each job as one Redis HASH
    - Keep per-state membership (waiting/active/completed/failed LISTs,
      delayed ZSET scored by due time)
    - Atomic claim, progress and terminal transitions via Lua scripts

Architecture Notes:
    - Infrastructure Layer, implements JobQueueProtocol
    - Every mutation that touches more than one key runs as a single Lua
      script (register_script), so readers never see a job in two states
      or a terminal state without its result
    - Scripts build job keys from a prefix argument; the queue therefore
      targets a single Redis node, not Redis Cluster

Storage Format:
    "{prefix}:{queue}:id"              -> INCR counter for job ids
    "{prefix}:{queue}:job:{id}"        -> HASH {id, queue_type, state, progress,
                                          payload, result, created, started,
                                          finished, delay_until}
    "{prefix}:{queue}:waiting|active|completed|failed" -> LIST of ids
    "{prefix}:{queue}:delayed"         -> ZSET id scored by due time (ms)

Error Handling:
    - RedisError -> QueueConnectionError (API: 503, Celery task: retry)
    - Unknown job id on a write -> JobNotFoundException
    - Terminal transition of a non-active job -> InvalidJobStateTransitionError
"""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from redis import Redis
from redis.exceptions import RedisError

from sheetjobs.application.ports.job_queue import (
    JobNotFoundException,
    QueueConnectionError,
)
from sheetjobs.domain.jobs.job import (
    Job,
    JobPayload,
    JobResult,
    JobState,
    JobTimestamps,
    QueueType,
    now_ms,
)
from sheetjobs.domain.shared.exceptions import InvalidJobStateTransitionError

# Configure logger for this module
logger = logging.getLogger(__name__)


# ============================================================================
# LUA SCRIPTS
# ============================================================================

# KEYS: id counter, waiting list, delayed zset
# ARGV: job key prefix, payload json, created ms, delay_until ms (0 = none), queue type
_ADD_LUA = """
local id = redis.call("INCR", KEYS[1])
local job_key = ARGV[1] .. id
local delay_until = tonumber(ARGV[4])
local state = "waiting"
if delay_until > 0 then state = "delayed" end
redis.call("HSET", job_key, "id", id, "queue_type", ARGV[5], "state", state,
           "progress", 0, "payload", ARGV[2], "created", ARGV[3])
if state == "delayed" then
  redis.call("HSET", job_key, "delay_until", delay_until)
  redis.call("ZADD", KEYS[3], delay_until, id)
else
  redis.call("RPUSH", KEYS[2], id)
end
return id
"""

# KEYS: delayed zset, waiting list
# ARGV: job key prefix, now ms
_PROMOTE_LUA = """
local due = redis.call("ZRANGEBYSCORE", KEYS[1], "-inf", ARGV[2])
for _, id in ipairs(due) do
  redis.call("ZREM", KEYS[1], id)
  redis.call("RPUSH", KEYS[2], id)
  redis.call("HSET", ARGV[1] .. id, "state", "waiting")
  redis.call("HDEL", ARGV[1] .. id, "delay_until")
end
return #due
"""

# KEYS: delayed zset, waiting list, active list
# ARGV: job key prefix, now ms
_CLAIM_LUA = """
local due = redis.call("ZRANGEBYSCORE", KEYS[1], "-inf", ARGV[2])
for _, id in ipairs(due) do
  redis.call("ZREM", KEYS[1], id)
  redis.call("RPUSH", KEYS[2], id)
  redis.call("HSET", ARGV[1] .. id, "state", "waiting")
  redis.call("HDEL", ARGV[1] .. id, "delay_until")
end
local id = redis.call("LPOP", KEYS[2])
if not id then
  return false
end
redis.call("RPUSH", KEYS[3], id)
redis.call("HSET", ARGV[1] .. id, "state", "active", "started", ARGV[2])
return id
"""

# KEYS: job hash
# ARGV: progress
_PROGRESS_LUA = """
if redis.call("EXISTS", KEYS[1]) == 0 then
  return -1
end
local state = redis.call("HGET", KEYS[1], "state")
local current = tonumber(redis.call("HGET", KEYS[1], "progress") or "0")
local value = tonumber(ARGV[1])
if state == "active" and value > current then
  redis.call("HSET", KEYS[1], "progress", value)
  return value
end
return current
"""

# KEYS: job hash, active list, target state list
# ARGV: job id, target state, result json, finished ms, final progress ("" = keep)
_FINISH_LUA = """
if redis.call("EXISTS", KEYS[1]) == 0 then
  return "missing"
end
local state = redis.call("HGET", KEYS[1], "state")
if state ~= "active" then
  return state
end
redis.call("LREM", KEYS[2], 1, ARGV[1])
redis.call("RPUSH", KEYS[3], ARGV[1])
redis.call("HSET", KEYS[1], "state", ARGV[2], "result", ARGV[3], "finished", ARGV[4])
if ARGV[5] ~= "" then
  redis.call("HSET", KEYS[1], "progress", ARGV[5])
end
return "ok"
"""


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(float(value))


@contextmanager
def _redis_errors(operation: str) -> Iterator[None]:
    """Translate redis-py errors into QueueConnectionError."""
    try:
        yield
    except RedisError as e:
        logger.error(f"Redis error during {operation}: {e}")
        raise QueueConnectionError(f"Queue backend unavailable during {operation}: {e}", e) from e


class RedisJobQueue:
    """
    JobQueueProtocol implementation on Redis.

    Examples:
        >>> queue = RedisJobQueue(get_redis_client(), QueueType.CSV)
        >>> job = queue.add(JobPayload(file_path="uploads/1.csv", original_name="a.csv", file_type="csv"))
        >>> claimed = queue.claim_next()   # in a worker process
        >>> queue.update_progress(claimed.id, 50)
        50
    """

    def __init__(
        self,
        redis_client: Redis,
        queue_type: QueueType,
        name: Optional[str] = None,
        key_prefix: str = "sheetjobs",
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.redis = redis_client
        self.queue_type = QueueType(queue_type)
        self.name = name or f"{self.queue_type.value}-processing"
        self.key_prefix = key_prefix
        self._clock = clock

        self._add_script = self.redis.register_script(_ADD_LUA)
        self._promote_script = self.redis.register_script(_PROMOTE_LUA)
        self._claim_script = self.redis.register_script(_CLAIM_LUA)
        self._progress_script = self.redis.register_script(_PROGRESS_LUA)
        self._finish_script = self.redis.register_script(_FINISH_LUA)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @property
    def _base(self) -> str:
        return f"{self.key_prefix}:{self.name}"

    def _id_key(self) -> str:
        return f"{self._base}:id"

    def _job_key_prefix(self) -> str:
        return f"{self._base}:job:"

    def _job_key(self, job_id: str) -> str:
        return f"{self._job_key_prefix()}{job_id}"

    def _state_key(self, state: JobState) -> str:
        return f"{self._base}:{JobState(state).value}"

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _from_hash(self, data: Dict[str, str]) -> Optional[Job]:
        if not data:
            return None
        result_json = data.get("result")
        return Job(
            id=str(data["id"]),
            queue_type=data.get("queue_type", self.queue_type.value),
            state=data["state"],
            payload=JobPayload.model_validate_json(data["payload"]),
            progress=int(float(data.get("progress", 0))),
            result=JobResult.model_validate_json(result_json) if result_json else None,
            timestamps=JobTimestamps(
                created=_optional_int(data.get("created")),
                started=_optional_int(data.get("started")),
                finished=_optional_int(data.get("finished")),
            ),
            delay_until=_optional_int(data.get("delay_until")),
        )

    def _load_many(self, ids: List[str]) -> List[Job]:
        if not ids:
            return []
        pipe = self.redis.pipeline(transaction=False)
        for job_id in ids:
            pipe.hgetall(self._job_key(job_id))
        jobs = []
        for data in pipe.execute():
            job = self._from_hash(data)
            # A job deleted between LRANGE and HGETALL is skipped
            if job is not None:
                jobs.append(job)
        return jobs

    # ------------------------------------------------------------------
    # JobQueueProtocol
    # ------------------------------------------------------------------

    def add(self, payload: JobPayload, delay_seconds: Optional[float] = None) -> Job:
        created = self._clock()
        delay_until = created + int(delay_seconds * 1000) if delay_seconds and delay_seconds > 0 else 0

        with _redis_errors("add"):
            job_id = self._add_script(
                keys=[self._id_key(), self._state_key(JobState.WAITING), self._state_key(JobState.DELAYED)],
                args=[
                    self._job_key_prefix(),
                    payload.model_dump_json(),
                    created,
                    delay_until,
                    self.queue_type.value,
                ],
            )

        job = Job(
            id=str(job_id),
            queue_type=self.queue_type,
            state=JobState.DELAYED if delay_until else JobState.WAITING,
            payload=payload,
            timestamps=JobTimestamps(created=created),
            delay_until=delay_until or None,
        )
        logger.info(f"[{self.name}] Job {job.id} added ({job.state.value})")
        return job

    def claim_next(self) -> Optional[Job]:
        with _redis_errors("claim_next"):
            job_id = self._claim_script(
                keys=[
                    self._state_key(JobState.DELAYED),
                    self._state_key(JobState.WAITING),
                    self._state_key(JobState.ACTIVE),
                ],
                args=[self._job_key_prefix(), self._clock()],
            )
            if not job_id:
                return None
            job = self._from_hash(self.redis.hgetall(self._job_key(job_id)))

        logger.info(f"[{self.name}] Job {job_id} claimed")
        return job

    def get(self, job_id: str) -> Optional[Job]:
        with _redis_errors("get"):
            return self._from_hash(self.redis.hgetall(self._job_key(job_id)))

    def list_by_state(self, state: JobState, start: int = 0, end: Optional[int] = None) -> List[Job]:
        state = JobState(state)
        # Redis ranges are inclusive; Python slice end is exclusive
        stop = -1 if end is None else end - 1
        if end is not None and end <= start:
            return []

        with _redis_errors("list_by_state"):
            if state == JobState.DELAYED:
                ids = self.redis.zrange(self._state_key(state), start, stop)
            else:
                ids = self.redis.lrange(self._state_key(state), start, stop)
            return self._load_many(ids)

    def counts(self) -> Dict[JobState, int]:
        with _redis_errors("counts"):
            pipe = self.redis.pipeline(transaction=False)
            list_states = [s for s in JobState if s != JobState.DELAYED]
            for state in list_states:
                pipe.llen(self._state_key(state))
            pipe.zcard(self._state_key(JobState.DELAYED))
            values = pipe.execute()

        counts = {state: int(value) for state, value in zip(list_states, values)}
        counts[JobState.DELAYED] = int(values[-1])
        return counts

    def update_progress(self, job_id: str, progress: int) -> int:
        if not 0 <= progress <= 100:
            raise ValueError(f"Progress must be 0-100, got {progress}")

        with _redis_errors("update_progress"):
            stored = self._progress_script(keys=[self._job_key(job_id)], args=[int(progress)])

        if int(stored) < 0:
            raise JobNotFoundException(str(job_id), worker=self.queue_type.value)
        return int(stored)

    def _finish(self, job_id: str, target: JobState, result: JobResult) -> Job:
        final_progress = "100" if target == JobState.COMPLETED else ""
        finished = self._clock()

        with _redis_errors(f"transition to {target.value}"):
            outcome = self._finish_script(
                keys=[
                    self._job_key(job_id),
                    self._state_key(JobState.ACTIVE),
                    self._state_key(target),
                ],
                args=[str(job_id), target.value, result.model_dump_json(), finished, final_progress],
            )

        if outcome == "missing":
            raise JobNotFoundException(str(job_id), worker=self.queue_type.value)
        if outcome != "ok":
            raise InvalidJobStateTransitionError(str(outcome), target.value, job_id=str(job_id))

        logger.info(f"[{self.name}] Job {job_id} {target.value}")
        job = self.get(job_id)
        if job is None:
            raise JobNotFoundException(str(job_id), worker=self.queue_type.value)
        return job

    def complete(self, job_id: str, result: JobResult) -> Job:
        return self._finish(job_id, JobState.COMPLETED, result)

    def fail(self, job_id: str, result: JobResult) -> Job:
        return self._finish(job_id, JobState.FAILED, result)

    def promote_delayed(self) -> int:
        with _redis_errors("promote_delayed"):
            moved = self._promote_script(
                keys=[self._state_key(JobState.DELAYED), self._state_key(JobState.WAITING)],
                args=[self._job_key_prefix(), self._clock()],
            )
        return int(moved)

    def ping(self) -> bool:
        try:
            return bool(self.redis.ping())
        except RedisError as e:
            logger.warning(f"[{self.name}] Redis ping failed: {e}")
            return False
