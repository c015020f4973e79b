"""Maps store rejections onto HTTP responses.

Each StoreError subclass carries its own status and numeric code, so a
single handler covers the whole taxonomy and the client learns exactly
which constraint failed.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from achievements.core.errors import StoreError


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
        # The store has already logged the rejection with its context.
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())
