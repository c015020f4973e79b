from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from achievements.core.config import SETTINGS
from achievements.models.principal import Principal
from achievements.services import token_service
from achievements.services.achievement_store import AchievementStore
from achievements.services.height import ClockHeightSource
from achievements.services.task_queue import TaskQueue, task_queue
from achievements.services.transfer_sink import TransferOutbox

logger = logging.getLogger(__name__)

# Tokens come from the identity provider; tokenUrl only feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")

# ---------------------------------------------------------------------------
# Store singletons
# ---------------------------------------------------------------------------
# The store assumes serialized execution.  Every route that touches it is
# an ``async def`` handler, so all store calls run on the event loop
# thread, and handlers never await between a store call and draining the
# outbox.  Do not turn these handlers into plain ``def`` (FastAPI would
# run them in a threadpool).

_outbox = TransferOutbox()
_store = AchievementStore(
    height_source=ClockHeightSource(SETTINGS.block_interval_seconds),
    transfer_sink=_outbox,
    admin_principal=SETTINGS.admin_principal,
    max_per_owner=SETTINGS.max_per_owner,
    creation_fee=SETTINGS.creation_fee,
)


def get_store() -> AchievementStore:
    return _store


def get_outbox() -> TransferOutbox:
    return _outbox


def get_task_queue() -> TaskQueue:
    return task_queue


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_user(token: Annotated[str, Depends(oauth2_scheme)]) -> Principal:
    """Resolve the bearer token to the calling principal, or answer 401.

    Only writes and admin changes depend on this; reads are public.
    """
    try:
        claims = token_service.decode_access_token(token)
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired bearer token")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise _unauthorized("Invalid token") from None

    return Principal(user_id=claims["sub"])
