from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from achievements.api.achievements import router as achievements_router
from achievements.api.admin import router as admin_router
from achievements.api.error_handlers import register_error_handlers
from achievements.api.health import router as health_router
from achievements.api.metrics_endpoint import router as metrics_router
from achievements.core.config import SETTINGS
from achievements.core.logging import setup_logging
from achievements.db.redis import lifespan_redis
from achievements.middleware.metrics import MetricsMiddleware
from achievements.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_request_context_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_redis():
        yield


app = FastAPI(
    title="achievement-store",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last-added runs first: RequestContext (outermost) -> Metrics -> route.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

register_error_handlers(app)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(achievements_router)
app.include_router(admin_router)

logger.info(
    "achievement-store started  env=%s admin=%s max_per_owner=%d creation_fee=%d",
    SETTINGS.app_env,
    SETTINGS.admin_principal,
    SETTINGS.max_per_owner,
    SETTINGS.creation_fee,
)
