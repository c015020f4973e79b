from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

CHANGE_SUMMARY = "Updated title, description, visibility"


class Category(str, Enum):
    ACADEMIC = "academic"
    EXTRACURRICULAR = "extracurricular"
    AWARD = "award"
    PROJECT = "project"


@dataclass(frozen=True, slots=True)
class AchievementKey:
    """Composite primary key: the owner principal plus the global id."""

    owner: str
    id: int

    def __str__(self) -> str:
        return f"{self.owner}-{self.id}"


@dataclass(frozen=True, slots=True)
class Achievement:
    """One stored record.

    Only title, description, visibility and created_at change after
    creation; created_at is refreshed to the update height by every update.
    """

    content_hash: bytes
    title: str
    description: str
    category: Category
    created_at: int
    visibility: bool
    metadata: str | None
    expiry: int | None
    status: bool
    rating: int
    comment: str | None
    attachment: bytes | None
    score: int
    level: int


@dataclass(frozen=True, slots=True)
class AchievementUpdate:
    """Audit entry for the most recent update of one record."""

    update_height: int
    updater: str
    change_summary: str = CHANGE_SUMMARY
