"""Achievement store: the write rules for per-owner achievement records.

Every mutating operation follows the same shape:

  1. authorization and quota checks
  2. field validation (services/validator.py)
  3. only then, the writes: record table, owner index, id counter,
     and on create the fee transfer intent

Nothing is written before every check has passed, and the writes
themselves cannot fail, so each call either applies all of its effects
or none of them.  The store takes no locks; the host must serialize
calls (see api/dependencies.py).
"""

from __future__ import annotations

import logging
from dataclasses import replace

from achievements.core.errors import (
    AlreadyExistsError,
    NotAuthorizedError,
    NotFoundError,
    StoreError,
)
from achievements.core.metrics import (
    ACHIEVEMENT_OPERATIONS,
    FEE_TRANSFER_AMOUNT,
    FEE_TRANSFER_REQUESTS,
)
from achievements.models.achievement import (
    Achievement,
    AchievementKey,
    AchievementUpdate,
    Category,
)
from achievements.models.ledger import LedgerConfig
from achievements.repos.achievement_repo import AchievementRepo, InMemoryAchievementRepo
from achievements.services import validator
from achievements.services.height import HeightSource
from achievements.services.quota_ledger import QuotaLedger
from achievements.services.transfer_sink import TransferSink

logger = logging.getLogger(__name__)


class AchievementStore:
    def __init__(
        self,
        *,
        height_source: HeightSource,
        transfer_sink: TransferSink,
        admin_principal: str,
        max_per_owner: int = 100,
        creation_fee: int = 500,
        repo: AchievementRepo | None = None,
    ) -> None:
        self._height = height_source
        self._sink = transfer_sink
        self._repo: AchievementRepo = repo if repo is not None else InMemoryAchievementRepo()
        self._ledger = QuotaLedger(
            admin_principal=admin_principal,
            max_per_owner=max_per_owner,
            creation_fee=creation_fee,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        caller: str,
        *,
        content_hash: bytes,
        title: str,
        description: str,
        category: str | Category,
        visibility: bool,
        status: bool,
        rating: int,
        score: int,
        level: int,
        metadata: str | None = None,
        expiry: int | None = None,
        comment: str | None = None,
        attachment: bytes | None = None,
    ) -> int:
        """Store a new achievement owned by ``caller`` and return its id.

        Charges the current creation fee as a transfer intent from the
        caller to the admin principal, emitted before the record is written.
        """
        height = self._height.current_height()
        try:
            self._ledger.check_quota(caller)
            parsed_category = validator.validate_new_achievement(
                content_hash=content_hash,
                title=title,
                description=description,
                category=category,
                metadata=metadata,
                expiry=expiry,
                rating=rating,
                comment=comment,
                attachment=attachment,
                score=score,
                level=level,
                current_height=height,
            )
            new_id = self._ledger.next_id
            key = AchievementKey(owner=caller, id=new_id)
            if self._repo.exists(key):
                raise AlreadyExistsError(f"achievement {key} already exists")
        except StoreError as e:
            self._reject("create", caller, e)
            raise

        fee = self._ledger.creation_fee
        self._sink.request_transfer(fee, caller, self._ledger.admin_principal)
        FEE_TRANSFER_REQUESTS.inc()
        FEE_TRANSFER_AMOUNT.inc(fee)

        self._repo.put(
            key,
            Achievement(
                content_hash=content_hash,
                title=title,
                description=description,
                category=parsed_category,
                created_at=height,
                visibility=visibility,
                metadata=metadata,
                expiry=expiry,
                status=status,
                rating=rating,
                comment=comment,
                attachment=attachment,
                score=score,
                level=level,
            ),
        )
        self._ledger.record_created(caller, new_id)

        ACHIEVEMENT_OPERATIONS.labels(operation="create", result="ok").inc()
        logger.info(
            "Created achievement owner=%s id=%d height=%d fee=%d",
            caller,
            new_id,
            height,
            fee,
            extra={"caller": caller, "owner": caller, "achievement_id": new_id},
        )
        return new_id

    def update(
        self,
        caller: str,
        owner: str,
        achievement_id: int,
        *,
        title: str,
        description: str,
        visibility: bool,
    ) -> Achievement:
        """Replace title, description and visibility; refresh created_at.

        Returns the updated record.  Only the owner may update.
        """
        key = AchievementKey(owner=owner, id=achievement_id)
        height = self._height.current_height()
        try:
            current = self._get_owned(caller, key)
            validator.validate_title(title)
            validator.validate_description(description)
        except StoreError as e:
            self._reject("update", caller, e, key)
            raise

        updated = replace(
            current,
            title=title,
            description=description,
            visibility=visibility,
            created_at=height,
        )
        self._repo.put(key, updated)
        self._repo.put_update(key, AchievementUpdate(update_height=height, updater=caller))

        ACHIEVEMENT_OPERATIONS.labels(operation="update", result="ok").inc()
        logger.info(
            "Updated achievement owner=%s id=%d height=%d",
            owner,
            achievement_id,
            height,
            extra={"caller": caller, "owner": owner, "achievement_id": achievement_id},
        )
        return updated

    def delete(self, caller: str, owner: str, achievement_id: int) -> None:
        """Remove a record, its audit entry and its slot in the owner index."""
        key = AchievementKey(owner=owner, id=achievement_id)
        try:
            self._get_owned(caller, key)
        except StoreError as e:
            self._reject("delete", caller, e, key)
            raise

        self._repo.remove(key)
        self._ledger.record_deleted(owner, achievement_id)

        ACHIEVEMENT_OPERATIONS.labels(operation="delete", result="ok").inc()
        logger.info(
            "Deleted achievement owner=%s id=%d",
            owner,
            achievement_id,
            extra={"caller": caller, "owner": owner, "achievement_id": achievement_id},
        )

    # ------------------------------------------------------------------
    # Admin configuration
    # ------------------------------------------------------------------

    def set_max_per_owner(self, caller: str, new_max: int) -> None:
        self._ledger.set_max_per_owner(caller, new_max)

    def set_creation_fee(self, caller: str, new_fee: int) -> None:
        self._ledger.set_creation_fee(caller, new_fee)

    # ------------------------------------------------------------------
    # Reads: unrestricted, and absence is a normal answer
    # ------------------------------------------------------------------

    def read(self, owner: str, achievement_id: int) -> Achievement | None:
        return self._repo.get(AchievementKey(owner=owner, id=achievement_id))

    def get_last_update(self, owner: str, achievement_id: int) -> AchievementUpdate | None:
        return self._repo.get_update(AchievementKey(owner=owner, id=achievement_id))

    def list_ids(self, owner: str) -> list[int]:
        return self._ledger.ids(owner)

    def count(self, owner: str) -> int:
        return self._ledger.count(owner)

    def total_created(self) -> int:
        """Every achievement ever created, across owners, deletes included."""
        return self._ledger.next_id

    def config(self) -> LedgerConfig:
        return self._ledger.snapshot()

    # ------------------------------------------------------------------

    def _get_owned(self, caller: str, key: AchievementKey) -> Achievement:
        achievement = self._repo.get(key)
        if achievement is None:
            raise NotFoundError(f"achievement {key} not found")
        if caller != key.owner:
            raise NotAuthorizedError("only the owner may modify this achievement")
        return achievement

    def _reject(
        self,
        operation: str,
        caller: str,
        error: StoreError,
        key: AchievementKey | None = None,
    ) -> None:
        ACHIEVEMENT_OPERATIONS.labels(operation=operation, result=error.kind).inc()
        logger.warning(
            "Rejected %s caller=%s key=%s error=%s",
            operation,
            caller,
            key if key is not None else "-",
            error.kind,
            extra={
                "caller": caller,
                "owner": key.owner if key is not None else caller,
                "achievement_id": key.id if key is not None else None,
                "error": error.kind,
            },
        )
