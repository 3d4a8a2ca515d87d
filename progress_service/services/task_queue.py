"""Background task queue using Redis lists.

The certificate trigger enqueues an issuance task and returns; the
worker process (``python -m progress_service.worker``) pops tasks and
writes the issued certificate.  A slow or failing issuance therefore
never holds up, or fails, the request that completed the course.

  Producer (API):    LPUSH onto ``tasks:<queue>``
  Consumer (worker): BRPOP from the same list

LPUSH at the head plus BRPOP at the tail gives FIFO order.  Delivery is
at-most-once: a worker crash mid-task loses that task.  Issuance is
keyed by (learner, course, certificate), so re-running the trigger for
the same completion is always safe.
"""

from __future__ import annotations

import json
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from progress_service.db.redis import redis_pool

CERTIFICATE_ISSUANCE = "certificate_issuance"


@dataclass(frozen=True, slots=True)
class Task:
    """A unit of background work.

    The payload must be JSON-serializable; for certificate issuance it is
    ``{"learner_id", "course_id", "certificate_id"}``.
    """

    id: str
    queue: str
    payload: dict

    @staticmethod
    def new(queue: str, payload: dict) -> Task:
        return Task(id=str(uuid.uuid4()), queue=queue, payload=payload)

    def to_json(self) -> str:
        return json.dumps({"id": self.id, "queue": self.queue, "payload": self.payload})

    @staticmethod
    def from_json(raw: str | bytes) -> Task:
        return Task(**json.loads(raw))


@runtime_checkable
class TaskQueue(Protocol):
    async def enqueue(self, queue: str, payload: dict) -> Task: ...
    async def dequeue(self, queue: str, timeout: int = 0) -> Task | None: ...
    async def queue_length(self, queue: str) -> int: ...


class InMemoryTaskQueue:
    """FIFO lists per queue name, for dev and tests.  Never blocks."""

    def __init__(self) -> None:
        self._queues: dict[str, deque[Task]] = {}

    async def enqueue(self, queue: str, payload: dict) -> Task:
        task = Task.new(queue, payload)
        self._queues.setdefault(queue, deque()).append(task)
        return task

    async def dequeue(self, queue: str, timeout: int = 0) -> Task | None:
        pending = self._queues.get(queue)
        return pending.popleft() if pending else None

    async def queue_length(self, queue: str) -> int:
        return len(self._queues.get(queue, ()))


class RedisTaskQueue:
    """LPUSH/BRPOP on ``tasks:<queue>``."""

    def __init__(self, redis_client, prefix: str = "tasks:") -> None:
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, queue: str) -> str:
        return f"{self._prefix}{queue}"

    async def enqueue(self, queue: str, payload: dict) -> Task:
        task = Task.new(queue, payload)
        await self._redis.lpush(self._key(queue), task.to_json())
        return task

    async def dequeue(self, queue: str, timeout: int = 5) -> Task | None:
        popped = await self._redis.brpop(self._key(queue), timeout=timeout)
        if popped is None:
            return None
        _, raw = popped
        return Task.from_json(raw)

    async def queue_length(self, queue: str) -> int:
        return await self._redis.llen(self._key(queue))


if redis_pool is not None:
    task_queue: TaskQueue = RedisTaskQueue(redis_pool)
else:
    task_queue = InMemoryTaskQueue()
