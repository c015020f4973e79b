"""Demo: walk the achievement lifecycle using FastAPI TestClient.

Run with:
    python scripts/demo_achievement_flow.py
"""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from achievements.api.dependencies import get_outbox, get_store, get_task_queue
from achievements.main import app
from achievements.services import token_service
from achievements.services.achievement_store import AchievementStore
from achievements.services.height import ManualHeightSource
from achievements.services.task_queue import InMemoryTaskQueue
from achievements.services.transfer_sink import FEE_TRANSFER_QUEUE, TransferOutbox

ADMIN = "ST1TEST"
OWNER = "ST2ALICE"
OTHER = "ST3BOB"


def _bearer(principal: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_service.create_access_token(sub=principal)}"}


def main() -> None:
    height = ManualHeightSource(100)
    outbox = TransferOutbox()
    queue = InMemoryTaskQueue()
    store = AchievementStore(
        height_source=height,
        transfer_sink=outbox,
        admin_principal=ADMIN,
    )
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_outbox] = lambda: outbox
    app.dependency_overrides[get_task_queue] = lambda: queue
    client = TestClient(app)

    body = {
        "content_hash": "00" * 32,
        "title": "Math Award",
        "description": "Won first place in math competition",
        "category": "award",
        "visibility": True,
        "status": True,
        "rating": 5,
        "score": 95,
        "level": 3,
    }

    # ── Step 1: create ──────────────────────────────────────────────
    r = client.post("/v1/achievements", json=body, headers=_bearer(OWNER))
    print(f"1. POST   /v1/achievements          → {r.status_code}  {r.json()}")

    # ── Step 2: invalid title ───────────────────────────────────────
    r = client.post("/v1/achievements", json={**body, "title": ""}, headers=_bearer(OWNER))
    print(f"2. POST   /v1/achievements (bad)    → {r.status_code}  {r.json()}")

    # ── Step 3: read back ───────────────────────────────────────────
    r = client.get(f"/v1/owners/{OWNER}/achievements/0")
    print(f"3. GET    .../achievements/0        → {r.status_code}  title={r.json()['title']!r}")

    # ── Step 4: update by someone else ──────────────────────────────
    patch = {"title": "Math Olympiad", "description": "Regional round", "visibility": False}
    r = client.patch(f"/v1/owners/{OWNER}/achievements/0", json=patch, headers=_bearer(OTHER))
    print(f"4. PATCH  .../achievements/0 (other)→ {r.status_code}  {r.json()['error']}")

    # ── Step 5: update by owner, two blocks later ───────────────────
    height.advance(2)
    r = client.patch(f"/v1/owners/{OWNER}/achievements/0", json=patch, headers=_bearer(OWNER))
    print(f"5. PATCH  .../achievements/0        → {r.status_code}  created_at={r.json()['created_at']}")

    r = client.get(f"/v1/owners/{OWNER}/achievements/0/last-update")
    print(f"   GET    .../last-update           → {r.status_code}  {r.json()}")

    # ── Step 6: admin raises the fee, owner creates again ───────────
    r = client.put(
        "/admin/config/creation-fee", json={"creation_fee": 1000}, headers=_bearer(ADMIN)
    )
    print(f"6. PUT    /admin/config/creation-fee→ {r.status_code}  fee={r.json()['creation_fee']}")
    client.post("/v1/achievements", json=body, headers=_bearer(OWNER))

    # ── Step 7: delete the first one ────────────────────────────────
    r = client.delete(f"/v1/owners/{OWNER}/achievements/0", headers=_bearer(OWNER))
    print(f"7. DELETE .../achievements/0        → {r.status_code}")
    r = client.get(f"/v1/owners/{OWNER}/achievements")
    print(f"   GET    /v1/owners/{OWNER}/achievements → {r.json()}")

    # ── Step 8: queued fee transfers ────────────────────────────────
    pending = asyncio.run(queue.queue_length(FEE_TRANSFER_QUEUE))
    print(f"8. fee transfer tasks queued: {pending}")
    while (task := asyncio.run(queue.dequeue(FEE_TRANSFER_QUEUE))) is not None:
        print(f"   {task.id[:8]}…  {task.payload}")

    app.dependency_overrides.clear()
    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
