"""Forwards fee transfer intents to the external ledger gateway.

The gateway executes the transfer; this client only submits it.  With
no LEDGER_URL configured the intent is logged and dropped, which is the
dev/test setup.
"""

from __future__ import annotations

import logging

import httpx

from achievements.models.ledger import TransferRequest

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 5.0


class LedgerClient:
    def __init__(
        self,
        base_url: str | None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._transport = transport

    @property
    def configured(self) -> bool:
        return self._base_url is not None

    async def submit_transfer(self, transfer: TransferRequest) -> None:
        """POST the transfer to ``{LEDGER_URL}/transfers``.

        Raises httpx.HTTPError on transport failure or a non-2xx answer;
        the worker logs it and moves on.
        """
        if self._base_url is None:
            logger.info(
                "No LEDGER_URL configured, dropping fee transfer amount=%d payer=%s payee=%s",
                transfer.amount,
                transfer.payer,
                transfer.payee,
            )
            return

        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=_TIMEOUT_SECONDS,
            transport=self._transport,
        ) as client:
            resp = await client.post("/transfers", json=transfer.to_payload())
            resp.raise_for_status()

        logger.info(
            "Fee transfer submitted amount=%d payer=%s payee=%s status=%d",
            transfer.amount,
            transfer.payer,
            transfer.payee,
            resp.status_code,
        )
