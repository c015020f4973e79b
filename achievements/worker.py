"""Background worker process.

RUN:  python -m achievements.worker

Same image as the API, different command.  The worker never touches the
achievement store; it only drains task queues and hands each payload to
a registered handler.  A failing task is logged and skipped: fees are
fire-and-forget from the store's point of view, so nothing is retried
or rolled back here.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from achievements.core.config import SETTINGS
from achievements.core.logging import setup_logging
from achievements.core.metrics import QUEUE_DEPTH
from achievements.models.ledger import TransferRequest
from achievements.services.ledger_client import LedgerClient
from achievements.services.task_queue import TaskQueue, task_queue
from achievements.services.transfer_sink import FEE_TRANSFER_QUEUE

# A handler may return an outcome word for the log line; None means "completed".
TaskHandler = Callable[[dict], Coroutine[Any, Any, str | None]]

logger = logging.getLogger("worker")

HANDLERS: dict[str, TaskHandler] = {}

ledger_client = LedgerClient(SETTINGS.ledger_url)


def register_handler(queue: str):
    """Decorator: register a coroutine as the handler for a queue."""

    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


@register_handler(FEE_TRANSFER_QUEUE)
async def handle_fee_transfer(payload: dict) -> str | None:
    transfer = TransferRequest(
        amount=int(payload["amount"]),
        payer=payload["payer"],
        payee=payload["payee"],
    )
    await ledger_client.submit_transfer(transfer)
    if not ledger_client.configured:
        return "dropped"
    return None


async def process_one(queue: TaskQueue, queue_name: str, timeout: int = 1) -> bool:
    """Dequeue and handle a single task.  Returns False when the queue was empty."""
    task = await queue.dequeue(queue_name, timeout=timeout)
    if task is None:
        return False

    QUEUE_DEPTH.labels(queue_name=queue_name).set(await queue.queue_length(queue_name))
    handler = HANDLERS[queue_name]
    try:
        outcome = await handler(task.payload)
        logger.info("Task %s on [%s] %s", task.id, queue_name, outcome or "completed")
    except Exception:
        # No dead-letter queue yet; the failure is only logged.
        logger.exception("Task %s on [%s] failed", task.id, queue_name)
    return True


async def run_worker(queue: TaskQueue = task_queue) -> None:
    """Poll every registered queue round-robin, forever."""
    queues = list(HANDLERS.keys())
    logger.info(
        "Worker started, queues=%s ledger=%s",
        queues,
        "configured" if ledger_client.configured else "not_configured",
    )

    while True:
        idle = True
        for queue_name in queues:
            if await process_one(queue, queue_name):
                idle = False
        if idle and not SETTINGS.redis_url:
            # The in-memory queue does not block on dequeue.
            await asyncio.sleep(1)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
