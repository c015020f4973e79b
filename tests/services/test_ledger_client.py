from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from achievements.models.ledger import TransferRequest
from achievements.services.ledger_client import LedgerClient
from tests.conftest import ADMIN, ALICE

TRANSFER = TransferRequest(amount=500, payer=ALICE, payee=ADMIN)


def test_submit_posts_transfer_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202, json={"status": "accepted"})

    client = LedgerClient("http://ledger.test", transport=httpx.MockTransport(handler))
    asyncio.run(client.submit_transfer(TRANSFER))

    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert str(seen[0].url) == "http://ledger.test/transfers"
    assert json.loads(seen[0].content) == {"amount": 500, "payer": ALICE, "payee": ADMIN}


def test_submit_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    client = LedgerClient("http://ledger.test", transport=httpx.MockTransport(handler))
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.submit_transfer(TRANSFER))


def test_unconfigured_client_drops_transfer(caplog: pytest.LogCaptureFixture) -> None:
    client = LedgerClient(None)
    assert client.configured is False

    with caplog.at_level("INFO", logger="achievements.services.ledger_client"):
        asyncio.run(client.submit_transfer(TRANSFER))

    assert "dropping fee transfer" in caplog.text
