"""Background task queue for fee transfer intents.

The API process is the producer: after a create has been applied, the
drained transfer intents are pushed here.  ``python -m achievements.worker``
is the consumer and forwards each one to the ledger gateway.

On Redis, each queue is a list under ``achievements:queue:<name>``.
Producers LPUSH onto the head and the worker BRPOPs from the tail, so
tasks come out in the order the creates happened.  Delivery is
at-most-once: a worker that dies mid-task loses that task, which is
acceptable because fee transfers are fire-and-forget for the store.
"""

from __future__ import annotations

import json
import uuid
from collections import deque
from dataclasses import asdict, dataclass
from typing import Protocol, runtime_checkable

from achievements.db.redis import redis_pool


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    queue: str
    payload: dict

    @classmethod
    def new(cls, queue: str, payload: dict) -> Task:
        return cls(id=str(uuid.uuid4()), queue=queue, payload=payload)

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"))

    @classmethod
    def from_json(cls, raw: str) -> Task:
        data = json.loads(raw)
        return cls(id=data["id"], queue=data["queue"], payload=data["payload"])


@runtime_checkable
class TaskQueue(Protocol):
    async def enqueue(self, queue: str, payload: dict) -> Task: ...
    async def dequeue(self, queue: str, timeout: int = 0) -> Task | None: ...
    async def queue_length(self, queue: str) -> int: ...


class InMemoryTaskQueue:
    """Process-local queues for dev and tests.

    ``dequeue`` never blocks; ``timeout`` is accepted for protocol
    compatibility and ignored.
    """

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
    def __init__(self, redis_client, *, key_prefix: str = "achievements:queue:") -> None:
        self._redis = redis_client
        self._key_prefix = key_prefix

    def _key(self, queue: str) -> str:
        return self._key_prefix + queue

    async def enqueue(self, queue: str, payload: dict) -> Task:
        task = Task.new(queue, payload)
        await self._redis.lpush(self._key(queue), task.to_json())
        return task

    async def dequeue(self, queue: str, timeout: int = 5) -> Task | None:
        popped = await self._redis.brpop(self._key(queue), timeout=timeout)
        if popped is None:
            return None
        _key, raw = popped
        return Task.from_json(raw)

    async def queue_length(self, queue: str) -> int:
        return await self._redis.llen(self._key(queue))


def build_task_queue(redis_client=None) -> TaskQueue:
    """Redis-backed when a client is given, in-memory otherwise."""
    if redis_client is None:
        return InMemoryTaskQueue()
    return RedisTaskQueue(redis_client)


task_queue: TaskQueue = build_task_queue(redis_pool)
