"""Achievement endpoints over HTTP.

Covers the wire shape (hex binary fields, status codes, error bodies)
and that each successful create queues exactly one fee transfer task.
The store rules themselves are tested in tests/services/.
"""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from achievements.api.dependencies import get_task_queue
from achievements.main import app
from achievements.services import token_service
from achievements.services.height import ManualHeightSource
from achievements.services.task_queue import InMemoryTaskQueue
from achievements.services.transfer_sink import FEE_TRANSFER_QUEUE, TransferOutbox
from tests.conftest import ADMIN, ALICE, BOB, auth, mint_token, valid_body

# ---- create ----


def test_create_returns_201_and_queues_fee(
    client: TestClient,
    alice_token: str,
    queue: InMemoryTaskQueue,
    outbox: TransferOutbox,
) -> None:
    resp = client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] == 0
    assert data["owner"] == ALICE
    assert data["total_created"] == 1
    assert len(data["fee_task_ids"]) == 1

    # Drained from the outbox, now waiting on the queue.
    assert outbox.pending == []
    task = asyncio.run(queue.dequeue(FEE_TRANSFER_QUEUE))
    assert task is not None
    assert task.id == data["fee_task_ids"][0]
    assert task.payload == {"amount": 500, "payer": ALICE, "payee": ADMIN}


def test_create_requires_auth(client: TestClient, queue: InMemoryTaskQueue) -> None:
    resp = client.post("/v1/achievements", json=valid_body())
    assert resp.status_code == 401
    assert asyncio.run(queue.queue_length(FEE_TRANSFER_QUEUE)) == 0


def test_create_rejects_bad_token(client: TestClient) -> None:
    resp = client.post(
        "/v1/achievements", json=valid_body(), headers=auth("not-a-jwt")
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_create_rejects_expired_token(client: TestClient) -> None:
    expired = token_service.create_access_token(sub=ALICE, ttl_minutes=-1)
    resp = client.post("/v1/achievements", json=valid_body(), headers=auth(expired))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


def test_create_empty_title_reports_error_code(
    client: TestClient, alice_token: str, queue: InMemoryTaskQueue
) -> None:
    resp = client.post(
        "/v1/achievements", json=valid_body(title=""), headers=auth(alice_token)
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "InvalidTitle"
    assert body["code"] == 102
    assert asyncio.run(queue.queue_length(FEE_TRANSFER_QUEUE)) == 0


def test_create_short_hash_is_store_rejection(client: TestClient, alice_token: str) -> None:
    resp = client.post(
        "/v1/achievements",
        json=valid_body(content_hash="00" * 31),
        headers=auth(alice_token),
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == 101


def test_create_malformed_hex_is_request_error(client: TestClient, alice_token: str) -> None:
    resp = client.post(
        "/v1/achievements",
        json=valid_body(content_hash="zz" * 32),
        headers=auth(alice_token),
    )
    assert resp.status_code == 422
    # pydantic's validation shape, not the store's error body
    assert "code" not in resp.json()


def test_create_over_quota_is_409(
    client: TestClient, alice_token: str, admin_token: str
) -> None:
    client.put(
        "/admin/config/max-per-owner",
        json={"max_per_owner": 1},
        headers=auth(admin_token),
    )
    assert (
        client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token)).status_code
        == 201
    )

    resp = client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))
    assert resp.status_code == 409
    assert resp.json()["error"] == "QuotaExceeded"
    assert resp.json()["code"] == 111


class _UnreachableQueue(InMemoryTaskQueue):
    async def enqueue(self, queue: str, payload: dict):
        raise ConnectionError("queue unreachable")


def test_create_survives_queue_outage(
    client: TestClient,
    alice_token: str,
    queue: InMemoryTaskQueue,
    outbox: TransferOutbox,
) -> None:
    app.dependency_overrides[get_task_queue] = lambda: _UnreachableQueue()
    resp = client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    assert resp.status_code == 201
    assert resp.json()["fee_task_ids"] == []
    assert client.get(f"/v1/owners/{ALICE}/achievements").json()["count"] == 1
    assert [t.amount for t in outbox.pending] == [500]

    # Queue back: the kept intent goes out with the next create's fee.
    app.dependency_overrides[get_task_queue] = lambda: queue
    resp = client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    assert resp.status_code == 201
    assert len(resp.json()["fee_task_ids"]) == 2
    assert outbox.pending == []
    assert asyncio.run(queue.queue_length(FEE_TRANSFER_QUEUE)) == 2


# ---- reads ----


def test_read_returns_hex_fields(
    client: TestClient, alice_token: str, height: ManualHeightSource
) -> None:
    height.set(42)
    client.post(
        "/v1/achievements",
        json=valid_body(attachment="abcd", expiry=100, metadata="Extra info"),
        headers=auth(alice_token),
    )

    resp = client.get(f"/v1/owners/{ALICE}/achievements/0")

    assert resp.status_code == 200
    data = resp.json()
    assert data["content_hash"] == "01" * 32
    assert data["attachment"] == "abcd"
    assert data["category"] == "award"
    assert data["created_at"] == 42
    assert data["expiry"] == 100
    assert data["metadata"] == "Extra info"
    assert data["comment"] is None


def test_read_missing_is_404(client: TestClient) -> None:
    resp = client.get(f"/v1/owners/{ALICE}/achievements/99")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "achievement not found"


def test_reads_need_no_token(client: TestClient, alice_token: str) -> None:
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    assert client.get(f"/v1/owners/{ALICE}/achievements/0").status_code == 200
    assert client.get(f"/v1/owners/{ALICE}/achievements").status_code == 200
    assert client.get("/v1/achievements/total").status_code == 200


def test_owner_listing_and_total(client: TestClient, alice_token: str) -> None:
    bob_token = mint_token(BOB)
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))
    client.post("/v1/achievements", json=valid_body(), headers=auth(bob_token))
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    resp = client.get(f"/v1/owners/{ALICE}/achievements")
    assert resp.json() == {"owner": ALICE, "ids": [0, 2], "count": 2}

    resp = client.get("/v1/owners/ST9NOBODY/achievements")
    assert resp.json() == {"owner": "ST9NOBODY", "ids": [], "count": 0}

    assert client.get("/v1/achievements/total").json() == {"total_created": 3}


# ---- update ----


def test_patch_by_owner(
    client: TestClient, alice_token: str, height: ManualHeightSource
) -> None:
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))
    height.set(5)

    resp = client.patch(
        f"/v1/owners/{ALICE}/achievements/0",
        json={"title": "New Title", "description": "New Desc", "visibility": False},
        headers=auth(alice_token),
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "New Title"
    assert data["visibility"] is False
    assert data["created_at"] == 5
    assert data["score"] == 95

    last = client.get(f"/v1/owners/{ALICE}/achievements/0/last-update")
    assert last.status_code == 200
    assert last.json() == {
        "update_height": 5,
        "updater": ALICE,
        "change_summary": "Updated title, description, visibility",
    }


def test_last_update_absent_is_404(client: TestClient, alice_token: str) -> None:
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))
    resp = client.get(f"/v1/owners/{ALICE}/achievements/0/last-update")
    assert resp.status_code == 404


def test_patch_by_non_owner_is_403(client: TestClient, alice_token: str) -> None:
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    resp = client.patch(
        f"/v1/owners/{ALICE}/achievements/0",
        json={"title": "Hijacked", "description": "", "visibility": False},
        headers=auth(mint_token(BOB)),
    )

    assert resp.status_code == 403
    assert resp.json()["code"] == 100
    assert client.get(f"/v1/owners/{ALICE}/achievements/0").json()["title"] == "Math Award"


def test_patch_missing_is_404_with_code(client: TestClient, alice_token: str) -> None:
    resp = client.patch(
        f"/v1/owners/{ALICE}/achievements/7",
        json={"title": "x", "description": "", "visibility": False},
        headers=auth(alice_token),
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == 107


# ---- delete ----


def test_delete_by_owner(client: TestClient, alice_token: str) -> None:
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    resp = client.delete(f"/v1/owners/{ALICE}/achievements/0", headers=auth(alice_token))

    assert resp.status_code == 204
    assert client.get(f"/v1/owners/{ALICE}/achievements/0").status_code == 404
    assert client.get(f"/v1/owners/{ALICE}/achievements").json()["ids"] == [1]
    assert client.get("/v1/achievements/total").json()["total_created"] == 2


def test_delete_by_non_owner_is_403(client: TestClient, alice_token: str) -> None:
    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    resp = client.delete(
        f"/v1/owners/{ALICE}/achievements/0", headers=auth(mint_token(BOB))
    )

    assert resp.status_code == 403
    assert client.get(f"/v1/owners/{ALICE}/achievements/0").status_code == 200


def test_delete_requires_auth(client: TestClient) -> None:
    resp = client.delete(f"/v1/owners/{ALICE}/achievements/0")
    assert resp.status_code == 401
