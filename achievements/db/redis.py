"""Optional Redis client for the fee transfer queue.

REDIS_URL set: one shared ``redis.asyncio`` pool, used by the API to
enqueue fee transfers and by the worker to pop them.  REDIS_URL unset
(local dev, tests): ``redis_pool`` is None and the task queue keeps its
lists in process memory instead.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from achievements.core.config import SETTINGS

logger = logging.getLogger(__name__)

_MAX_CONNECTIONS = 20


def _connect(url: str | None) -> aioredis.Redis | None:  # type: ignore[type-arg]
    if not url:
        return None
    return aioredis.from_url(url, decode_responses=True, max_connections=_MAX_CONNECTIONS)


redis_pool = _connect(SETTINGS.redis_url)


@asynccontextmanager
async def lifespan_redis() -> AsyncIterator[None]:
    """Ping on startup, close the pool on shutdown.

    An unreachable Redis does not stop the API from starting: records
    can still be read and written, and fee intents wait in the outbox
    until Redis comes back.
    """
    if redis_pool is None:
        logger.info("REDIS_URL not set, fee transfers queue in memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
    except RedisError:
        logger.exception("Redis unreachable at startup, fee transfers wait in the outbox")
    else:
        logger.info("Redis connected, fee transfers queue in %s", SETTINGS.redis_url)

    try:
        yield
    finally:
        # Closed even after a failed ping: relays may have connected since.
        await redis_pool.aclose()
        logger.info("Redis pool closed")
