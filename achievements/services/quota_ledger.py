"""Per-owner bookkeeping and the admin-configurable limits.

Holds the owner index (ordered live ids plus live count per owner), the
global id counter, the quota, the creation fee and the admin principal.
Only AchievementStore mutates it, in the same step as the record write,
so ``count(owner) == len(ids(owner))`` holds between operations.
"""

from __future__ import annotations

import logging

from achievements.core.errors import (
    InvalidConfigError,
    NotAuthorizedError,
    QuotaExceededError,
)
from achievements.core.metrics import ACHIEVEMENT_OPERATIONS
from achievements.models.ledger import LedgerConfig

logger = logging.getLogger(__name__)


class QuotaLedger:
    def __init__(
        self,
        *,
        admin_principal: str,
        max_per_owner: int = 100,
        creation_fee: int = 500,
    ) -> None:
        if max_per_owner <= 0:
            raise ValueError("max_per_owner must be positive")
        if creation_fee < 0:
            raise ValueError("creation_fee must be non-negative")
        self._admin = admin_principal
        self._max_per_owner = max_per_owner
        self._creation_fee = creation_fee
        self._next_id = 0
        self._ids: dict[str, list[int]] = {}
        self._counts: dict[str, int] = {}

    # ---- reads ----

    @property
    def admin_principal(self) -> str:
        return self._admin

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def creation_fee(self) -> int:
        return self._creation_fee

    def count(self, owner: str) -> int:
        return self._counts.get(owner, 0)

    def ids(self, owner: str) -> list[int]:
        return list(self._ids.get(owner, []))

    def snapshot(self) -> LedgerConfig:
        return LedgerConfig(
            next_id=self._next_id,
            max_per_owner=self._max_per_owner,
            creation_fee=self._creation_fee,
            admin_principal=self._admin,
        )

    # ---- checks ----

    def check_quota(self, owner: str) -> None:
        if self.count(owner) >= self._max_per_owner:
            raise QuotaExceededError(
                f"owner already holds {self._max_per_owner} achievements"
            )

    # ---- mutations (called by AchievementStore only) ----

    def record_created(self, owner: str, achievement_id: int) -> None:
        self._ids.setdefault(owner, []).append(achievement_id)
        self._counts[owner] = self.count(owner) + 1
        self._next_id += 1

    def record_deleted(self, owner: str, achievement_id: int) -> None:
        self._ids[owner] = [i for i in self._ids.get(owner, []) if i != achievement_id]
        self._counts[owner] = self.count(owner) - 1

    # ---- admin configuration ----

    def set_max_per_owner(self, caller: str, new_max: int) -> None:
        self._require_admin(caller, "set_max_per_owner")
        if isinstance(new_max, bool) or not isinstance(new_max, int) or new_max <= 0:
            ACHIEVEMENT_OPERATIONS.labels(
                operation="set_max_per_owner", result=InvalidConfigError.kind
            ).inc()
            raise InvalidConfigError("max_per_owner must be a positive integer")

        old = self._max_per_owner
        self._max_per_owner = new_max
        ACHIEVEMENT_OPERATIONS.labels(operation="set_max_per_owner", result="ok").inc()
        logger.info("max_per_owner changed %d -> %d by admin", old, new_max)

    def set_creation_fee(self, caller: str, new_fee: int) -> None:
        self._require_admin(caller, "set_creation_fee")
        if isinstance(new_fee, bool) or not isinstance(new_fee, int) or new_fee < 0:
            ACHIEVEMENT_OPERATIONS.labels(
                operation="set_creation_fee", result=InvalidConfigError.kind
            ).inc()
            raise InvalidConfigError("creation_fee must be a non-negative integer")

        old = self._creation_fee
        self._creation_fee = new_fee
        ACHIEVEMENT_OPERATIONS.labels(operation="set_creation_fee", result="ok").inc()
        logger.info("creation_fee changed %d -> %d by admin", old, new_fee)

    def _require_admin(self, caller: str, operation: str) -> None:
        if caller != self._admin:
            ACHIEVEMENT_OPERATIONS.labels(
                operation=operation, result=NotAuthorizedError.kind
            ).inc()
            logger.warning(
                "Access denied: caller=%s is not admin for %s",
                caller,
                operation,
                extra={"caller": caller, "error": NotAuthorizedError.kind},
            )
            raise NotAuthorizedError("only the admin principal may change configuration")
