from __future__ import annotations

from typing import Protocol

from achievements.models.achievement import Achievement, AchievementKey, AchievementUpdate


class AchievementRepo(Protocol):
    def get(self, key: AchievementKey) -> Achievement | None: ...
    def exists(self, key: AchievementKey) -> bool: ...
    def put(self, key: AchievementKey, achievement: Achievement) -> None: ...
    def remove(self, key: AchievementKey) -> None: ...
    def get_update(self, key: AchievementKey) -> AchievementUpdate | None: ...
    def put_update(self, key: AchievementKey, update: AchievementUpdate) -> None: ...


class InMemoryAchievementRepo:
    """Flat maps keyed by the composite (owner, id) key."""

    def __init__(self) -> None:
        self._records: dict[AchievementKey, Achievement] = {}
        self._updates: dict[AchievementKey, AchievementUpdate] = {}

    def get(self, key: AchievementKey) -> Achievement | None:
        return self._records.get(key)

    def exists(self, key: AchievementKey) -> bool:
        return key in self._records

    def put(self, key: AchievementKey, achievement: Achievement) -> None:
        self._records[key] = achievement

    def remove(self, key: AchievementKey) -> None:
        # The audit entry never outlives its record.
        self._records.pop(key, None)
        self._updates.pop(key, None)

    def get_update(self, key: AchievementKey) -> AchievementUpdate | None:
        return self._updates.get(key)

    def put_update(self, key: AchievementKey, update: AchievementUpdate) -> None:
        self._updates[key] = update
