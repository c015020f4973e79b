from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import achievements` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from achievements.api.dependencies import get_outbox, get_store, get_task_queue  # noqa: E402
from achievements.main import app  # noqa: E402
from achievements.services import token_service  # noqa: E402
from achievements.services.achievement_store import AchievementStore  # noqa: E402
from achievements.services.height import ManualHeightSource  # noqa: E402
from achievements.services.task_queue import InMemoryTaskQueue  # noqa: E402
from achievements.services.transfer_sink import TransferOutbox  # noqa: E402

ADMIN = "ST1TEST"
ALICE = "ST2ALICE"
BOB = "ST3BOB"

ZERO_HASH = bytes(32)


def valid_fields(**overrides) -> dict:
    """Keyword arguments for AchievementStore.create that pass every check."""
    fields: dict = {
        "content_hash": bytes([1]) * 32,
        "title": "Math Award",
        "description": "Won first place in math competition",
        "category": "award",
        "visibility": True,
        "status": True,
        "rating": 5,
        "score": 95,
        "level": 3,
        "metadata": None,
        "expiry": None,
        "comment": None,
        "attachment": None,
    }
    fields.update(overrides)
    return fields


def valid_body(**overrides) -> dict:
    """JSON body for POST /v1/achievements; binary fields as hex."""
    body: dict = {
        "content_hash": (bytes([1]) * 32).hex(),
        "title": "Math Award",
        "description": "Won first place in math competition",
        "category": "award",
        "visibility": True,
        "status": True,
        "rating": 5,
        "score": 95,
        "level": 3,
    }
    body.update(overrides)
    return body


def mint_token(username: str = ALICE) -> str:
    return token_service.create_access_token(sub=username)


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def height() -> ManualHeightSource:
    return ManualHeightSource(0)


@pytest.fixture
def outbox() -> TransferOutbox:
    return TransferOutbox()


@pytest.fixture
def store(height: ManualHeightSource, outbox: TransferOutbox) -> AchievementStore:
    return AchievementStore(
        height_source=height,
        transfer_sink=outbox,
        admin_principal=ADMIN,
        max_per_owner=100,
        creation_fee=500,
    )


@pytest.fixture
def queue() -> InMemoryTaskQueue:
    return InMemoryTaskQueue()


@pytest.fixture
def client(
    store: AchievementStore,
    outbox: TransferOutbox,
    queue: InMemoryTaskQueue,
) -> Iterator[TestClient]:
    """TestClient wired to a fresh store, outbox and queue per test."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_outbox] = lambda: outbox
    app.dependency_overrides[get_task_queue] = lambda: queue
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def alice_token() -> str:
    return mint_token(ALICE)


@pytest.fixture
def admin_token() -> str:
    return mint_token(ADMIN)
