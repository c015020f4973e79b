"""Liveness and readiness endpoints.

/health reports dependency status and answers 200 even when degraded:
without Redis the store still serves reads and writes, only the fee
relay is affected.  /ready is what the orchestrator routes traffic on.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from redis.exceptions import RedisError

from achievements.api.dependencies import get_store
from achievements.db.redis import redis_pool
from achievements.services.achievement_store import AchievementStore

router = APIRouter(tags=["health"])


async def _redis_status() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except RedisError:
        return "degraded"
    return "ok"


@router.get("/health")
async def health(store: Annotated[AchievementStore, Depends(get_store)]) -> dict:
    redis_status = await _redis_status()
    return {
        "status": "degraded" if redis_status == "degraded" else "ok",
        "checks": {"redis": redis_status},
        "store": {"total_created": store.total_created()},
    }


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
