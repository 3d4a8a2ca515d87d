"""Background worker process.

RUN:  python -m progress_service.worker

Drains the ``certificate_issuance`` queue filled by the certificate
trigger.  Same image as the API, different command:

  api:    uvicorn progress_service.main:app --host 0.0.0.0 --port 8000
  worker: python -m progress_service.worker

The loop is deliberately simple: poll each registered queue, dispatch
one task at a time, log the outcome.  A failed task is logged and
dropped; re-running the trigger for the same completion is safe because
issuance is keyed by (learner, course, certificate).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from contextlib import asynccontextmanager, suppress
from typing import Any

from progress_service.core.config import SETTINGS
from progress_service.core.logging import setup_logging
from progress_service.core.metrics import QUEUE_DEPTH
from progress_service.repos.repositories import repositories
from progress_service.services.certificates import issue_certificate
from progress_service.services.task_queue import (
    CERTIFICATE_ISSUANCE,
    InMemoryTaskQueue,
    task_queue,
)

TaskHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("progress_service.worker")


# ---------------------------------------------------------------------------
# Handler registry
# ---------------------------------------------------------------------------

HANDLERS: dict[str, TaskHandler] = {}


def register_handler(queue: str):
    """Decorator: register a coroutine as the handler for a queue."""

    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


# ---------------------------------------------------------------------------
# Task handlers
# ---------------------------------------------------------------------------


@register_handler(CERTIFICATE_ISSUANCE)
async def handle_certificate_issuance(payload: dict) -> None:
    """Write the IssuedCertificate record for a completed course."""
    await issue_certificate(
        repositories,
        learner_id=payload["learner_id"],
        course_id=payload["course_id"],
        certificate_id=payload["certificate_id"],
    )


# ---------------------------------------------------------------------------
# Main worker loop
# ---------------------------------------------------------------------------


async def process_one(queue_name: str, timeout: int = 1) -> bool:
    """Dequeue and run at most one task.  Returns False when the queue was empty."""
    task = await task_queue.dequeue(queue_name, timeout=timeout)
    if task is None:
        return False

    handler = HANDLERS[queue_name]
    try:
        await handler(task.payload)
        logger.info("Task %s on [%s] completed", task.id, queue_name)
    except Exception:
        logger.exception("Task %s on [%s] failed", task.id, queue_name)
    QUEUE_DEPTH.labels(queue_name=queue_name).set(await task_queue.queue_length(queue_name))
    return True


async def run_worker(idle_sleep: float = 1.0) -> None:
    """Poll all registered queues and dispatch tasks to handlers."""
    queues = list(HANDLERS.keys())
    logger.info("Worker started, listening on queues: %s", queues)

    while True:
        idle = True
        for queue_name in queues:
            if await process_one(queue_name):
                idle = False
        if idle and isinstance(task_queue, InMemoryTaskQueue):
            # In-memory dequeue never blocks; avoid a hot loop.
            await asyncio.sleep(idle_sleep)


@asynccontextmanager
async def lifespan_worker(idle_sleep: float = 1.0):
    """Drain in-memory queues inside the API process.

    Without REDIS_URL the queue lives in the API's memory where no
    separate worker can reach it.  With Redis configured this is a no-op
    and ``python -m progress_service.worker`` owns the queues.
    """
    if not isinstance(task_queue, InMemoryTaskQueue):
        yield
        return

    logger.info("No REDIS_URL configured, draining task queues in-process")
    drain = asyncio.create_task(run_worker(idle_sleep=idle_sleep))
    try:
        yield
    finally:
        drain.cancel()
        with suppress(asyncio.CancelledError):
            await drain


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
