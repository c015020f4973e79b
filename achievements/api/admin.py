from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from achievements.api.dependencies import get_store, require_user
from achievements.models.principal import Principal
from achievements.services.achievement_store import AchievementStore

logger = logging.getLogger(__name__)

# Admin identity is one fixed principal, checked by the store itself,
# not a token role.

router = APIRouter(prefix="/admin", tags=["admin"])


class ConfigOut(BaseModel):
    admin_principal: str
    max_per_owner: int
    creation_fee: int
    total_created: int


class MaxPerOwnerIn(BaseModel):
    max_per_owner: int


class CreationFeeIn(BaseModel):
    creation_fee: int


def _config_out(store: AchievementStore) -> ConfigOut:
    cfg = store.config()
    return ConfigOut(
        admin_principal=cfg.admin_principal,
        max_per_owner=cfg.max_per_owner,
        creation_fee=cfg.creation_fee,
        total_created=cfg.next_id,
    )


@router.get("/config", response_model=ConfigOut)
async def get_config(
    store: Annotated[AchievementStore, Depends(get_store)],
) -> ConfigOut:
    return _config_out(store)


@router.put("/config/max-per-owner", response_model=ConfigOut)
async def put_max_per_owner(
    body: MaxPerOwnerIn,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[AchievementStore, Depends(get_store)],
) -> ConfigOut:
    logger.info("max_per_owner change requested by caller=%s", principal.user_id)
    store.set_max_per_owner(principal.user_id, body.max_per_owner)
    return _config_out(store)


@router.put("/config/creation-fee", response_model=ConfigOut)
async def put_creation_fee(
    body: CreationFeeIn,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[AchievementStore, Depends(get_store)],
) -> ConfigOut:
    logger.info("creation_fee change requested by caller=%s", principal.user_id)
    store.set_creation_fee(principal.user_id, body.creation_fee)
    return _config_out(store)
