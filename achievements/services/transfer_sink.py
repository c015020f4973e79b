"""Fee transfer sink.

The store does not move value.  On every successful create it records a
TransferRequest with the sink and moves on: it reads no return value and
never rolls back when the ledger later fails to execute the transfer.

TransferOutbox is the sink the service uses.  It is a pending list
that the execution context drains after the store call has returned,
then relays onto the ``fee_transfers`` task queue for the worker.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from redis.exceptions import RedisError

from achievements.core.metrics import FEE_RELAY_FAILURES, QUEUE_DEPTH
from achievements.models.ledger import TransferRequest
from achievements.services.task_queue import TaskQueue

logger = logging.getLogger(__name__)

FEE_TRANSFER_QUEUE = "fee_transfers"


@runtime_checkable
class TransferSink(Protocol):
    def request_transfer(self, amount: int, payer: str, payee: str) -> None: ...


class TransferOutbox:
    def __init__(self) -> None:
        self._pending: list[TransferRequest] = []

    def request_transfer(self, amount: int, payer: str, payee: str) -> None:
        self._pending.append(TransferRequest(amount=amount, payer=payer, payee=payee))

    @property
    def pending(self) -> list[TransferRequest]:
        return list(self._pending)

    def drain(self) -> list[TransferRequest]:
        """Hand over every pending request, oldest first, and forget them."""
        drained, self._pending = self._pending, []
        return drained

    def restore(self, transfers: list[TransferRequest]) -> None:
        """Put undelivered requests back ahead of anything recorded since."""
        self._pending[:0] = transfers


async def relay_transfers(
    transfers: list[TransferRequest],
    queue: TaskQueue,
    *,
    outbox: TransferOutbox | None = None,
) -> list[str]:
    """Enqueue drained transfer intents for the worker.  Returns task ids.

    When the queue is unreachable and an outbox is given, the transfers
    not yet queued go back on it and ride along with the next drain; the
    ids of the tasks that did make it are still returned.  Without an
    outbox the error propagates.
    """
    task_ids: list[str] = []
    for index, transfer in enumerate(transfers):
        try:
            task = await queue.enqueue(FEE_TRANSFER_QUEUE, transfer.to_payload())
        except (RedisError, OSError):
            if outbox is None:
                raise
            undelivered = transfers[index:]
            outbox.restore(undelivered)
            FEE_RELAY_FAILURES.inc(len(undelivered))
            logger.exception(
                "Fee relay failed, %d transfer(s) kept in the outbox", len(undelivered)
            )
            return task_ids
        task_ids.append(task.id)
        logger.debug(
            "Queued fee transfer task=%s amount=%d payer=%s",
            task.id,
            transfer.amount,
            transfer.payer,
        )
    if task_ids:
        QUEUE_DEPTH.labels(queue_name=FEE_TRANSFER_QUEUE).set(
            await queue.queue_length(FEE_TRANSFER_QUEUE)
        )
    return task_ids
