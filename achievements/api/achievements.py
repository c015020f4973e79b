"""Achievement record endpoints.

- POST   /v1/achievements                                  create (owner = caller)
- GET    /v1/achievements/total                            total ever created
- GET    /v1/owners/{owner}/achievements                   live ids + count
- GET    /v1/owners/{owner}/achievements/{id}              read
- GET    /v1/owners/{owner}/achievements/{id}/last-update  audit entry
- PATCH  /v1/owners/{owner}/achievements/{id}              update (owner only)
- DELETE /v1/owners/{owner}/achievements/{id}              delete (owner only)

Reads are public.  Binary fields travel as hex strings.  Store
rejections surface through the StoreError handler in error_handlers.py.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, field_validator

from achievements.api.dependencies import (
    get_outbox,
    get_store,
    get_task_queue,
    require_user,
)
from achievements.models.achievement import Achievement
from achievements.models.principal import Principal
from achievements.services.achievement_store import AchievementStore
from achievements.services.task_queue import TaskQueue
from achievements.services.transfer_sink import TransferOutbox, relay_transfers

router = APIRouter(prefix="/v1", tags=["achievements"])

Store = Annotated[AchievementStore, Depends(get_store)]
Caller = Annotated[Principal, Depends(require_user)]


class AchievementCreateIn(BaseModel):
    content_hash: bytes  # hex on the wire, 32 bytes
    title: str
    description: str
    category: str  # academic|extracurricular|award|project
    visibility: bool
    status: bool
    rating: int
    score: int
    level: int
    metadata: str | None = None
    expiry: int | None = None
    comment: str | None = None
    attachment: bytes | None = None  # hex on the wire, up to 64 bytes

    @field_validator("content_hash", "attachment", mode="before")
    @classmethod
    def _from_hex(cls, value: object) -> object:
        # Malformed hex is a request-shape error (422), not a store rule.
        if isinstance(value, str):
            return bytes.fromhex(value)
        return value


class AchievementPatchIn(BaseModel):
    title: str
    description: str
    visibility: bool


class AchievementCreatedOut(BaseModel):
    id: int
    owner: str
    total_created: int
    fee_task_ids: list[str]


class AchievementOut(BaseModel):
    owner: str
    id: int
    content_hash: str
    title: str
    description: str
    category: str
    created_at: int
    visibility: bool
    metadata: str | None
    expiry: int | None
    status: bool
    rating: int
    comment: str | None
    attachment: str | None
    score: int
    level: int


class OwnerIndexOut(BaseModel):
    owner: str
    ids: list[int]
    count: int


class LastUpdateOut(BaseModel):
    update_height: int
    updater: str
    change_summary: str


class TotalOut(BaseModel):
    total_created: int


def _to_out(owner: str, achievement_id: int, a: Achievement) -> AchievementOut:
    return AchievementOut(
        owner=owner,
        id=achievement_id,
        content_hash=a.content_hash.hex(),
        title=a.title,
        description=a.description,
        category=a.category.value,
        created_at=a.created_at,
        visibility=a.visibility,
        metadata=a.metadata,
        expiry=a.expiry,
        status=a.status,
        rating=a.rating,
        comment=a.comment,
        attachment=a.attachment.hex() if a.attachment is not None else None,
        score=a.score,
        level=a.level,
    )


@router.post(
    "/achievements",
    response_model=AchievementCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_achievement(
    body: AchievementCreateIn,
    principal: Caller,
    store: Store,
    outbox: Annotated[TransferOutbox, Depends(get_outbox)],
    queue: Annotated[TaskQueue, Depends(get_task_queue)],
) -> AchievementCreatedOut:
    """Create an achievement owned by the caller.

    The creation fee is recorded as a transfer intent, drained from the
    outbox right after the store call, and queued for the worker.  Queue
    failures do not undo the stored record: the create still answers 201,
    the unqueued intents stay in the outbox for the next relay, and
    ``fee_task_ids`` lists only what was queued.
    """
    new_id = store.create(
        principal.user_id,
        content_hash=body.content_hash,
        title=body.title,
        description=body.description,
        category=body.category,
        visibility=body.visibility,
        status=body.status,
        rating=body.rating,
        score=body.score,
        level=body.level,
        metadata=body.metadata,
        expiry=body.expiry,
        comment=body.comment,
        attachment=body.attachment,
    )
    total = store.total_created()
    transfers = outbox.drain()

    task_ids = await relay_transfers(transfers, queue, outbox=outbox)

    return AchievementCreatedOut(
        id=new_id,
        owner=principal.user_id,
        total_created=total,
        fee_task_ids=task_ids,
    )


@router.get("/achievements/total", response_model=TotalOut)
async def get_total(store: Store) -> TotalOut:
    return TotalOut(total_created=store.total_created())


@router.get("/owners/{owner}/achievements", response_model=OwnerIndexOut)
async def list_owner_achievements(owner: str, store: Store) -> OwnerIndexOut:
    return OwnerIndexOut(owner=owner, ids=store.list_ids(owner), count=store.count(owner))


@router.get("/owners/{owner}/achievements/{achievement_id}", response_model=AchievementOut)
async def read_achievement(owner: str, achievement_id: int, store: Store) -> AchievementOut:
    achievement = store.read(owner, achievement_id)
    if achievement is None:
        raise HTTPException(status_code=404, detail="achievement not found")
    return _to_out(owner, achievement_id, achievement)


@router.get(
    "/owners/{owner}/achievements/{achievement_id}/last-update",
    response_model=LastUpdateOut,
)
async def read_last_update(owner: str, achievement_id: int, store: Store) -> LastUpdateOut:
    update = store.get_last_update(owner, achievement_id)
    if update is None:
        raise HTTPException(status_code=404, detail="no update recorded")
    return LastUpdateOut(
        update_height=update.update_height,
        updater=update.updater,
        change_summary=update.change_summary,
    )


@router.patch("/owners/{owner}/achievements/{achievement_id}", response_model=AchievementOut)
async def update_achievement(
    owner: str,
    achievement_id: int,
    body: AchievementPatchIn,
    principal: Caller,
    store: Store,
) -> AchievementOut:
    updated = store.update(
        principal.user_id,
        owner,
        achievement_id,
        title=body.title,
        description=body.description,
        visibility=body.visibility,
    )
    return _to_out(owner, achievement_id, updated)


@router.delete(
    "/owners/{owner}/achievements/{achievement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_achievement(
    owner: str,
    achievement_id: int,
    principal: Caller,
    store: Store,
) -> Response:
    store.delete(principal.user_id, owner, achievement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
