"""In-process asyncio job queue."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any
from uuid import UUID, uuid4

from litestar_chatflow.queue.base import DEFAULT_QUEUE_LIMITS, RetryPolicy

__all__ = ["Job", "JobHandler", "JobStatus", "LocalJobQueue"]

logger = logging.getLogger(__name__)

JobHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class JobStatus(StrEnum):
    """Lifecycle status of a background job."""

    QUEUED = auto()
    RUNNING = auto()
    COMPLETE = auto()
    FAILED = auto()
    SKIPPED = auto()


@dataclass
class Job:
    """A job scheduled on a :class:`LocalJobQueue`.

    Attributes:
        job_type: Name of the job.
        payload: Job arguments.
        queue: Name of the queue the job runs on.
        policy: Retry policy for the job.
        id: Unique job identifier.
        status: Current job status.
        attempts: Number of attempts made so far.
        result: Return value of the handler, once complete.
        error: Last error message, if any.
    """

    job_type: str
    payload: dict[str, Any]
    queue: str
    policy: RetryPolicy
    id: UUID = field(default_factory=uuid4)
    status: JobStatus = JobStatus.QUEUED
    attempts: int = 0
    result: Any = None
    error: str | None = None


class LocalJobQueue:
    """Job queue running handlers as asyncio tasks in the current process.

    Each named queue has a concurrency limit enforced by a semaphore. Failed
    attempts are retried with exponential backoff until the policy's attempt
    budget is exhausted.

    Example:
        >>> queue = LocalJobQueue()
        >>> queue.register("asset.generated", notify_editor, queue="notifications")
        >>> await queue.enqueue("asset.generated", {"workflow_id": "..."})
        >>> await queue.join()
    """

    def __init__(
        self,
        limits: dict[str, int] | None = None,
        default_policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            limits: Concurrency limit per named queue. Merged over the defaults.
            default_policy: Retry policy used when ``enqueue`` receives none.
        """
        self._limits = {**DEFAULT_QUEUE_LIMITS, **(limits or {})}
        self._semaphores: dict[str, asyncio.Semaphore] = {}
        self._handlers: dict[str, tuple[JobHandler, str]] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False
        self.default_policy = default_policy or RetryPolicy()
        self.jobs: list[Job] = []

    def register(self, job_type: str, handler: JobHandler, queue: str = "default") -> None:
        """Register the handler for a job type.

        Args:
            job_type: Name of the job.
            handler: Coroutine function called with the job payload.
            queue: Named queue the job runs on.
        """
        self._handlers[job_type] = (handler, queue)

    def _semaphore(self, queue: str) -> asyncio.Semaphore:
        if queue not in self._semaphores:
            self._semaphores[queue] = asyncio.Semaphore(self._limits.get(queue, self._limits["default"]))
        return self._semaphores[queue]

    async def enqueue(
        self,
        job_type: str,
        payload: dict[str, Any],
        retry_policy: RetryPolicy | None = None,
    ) -> Job:
        """Schedule a job.

        Jobs without a registered handler are recorded as skipped.

        Args:
            job_type: Name of the job.
            payload: Job arguments.
            retry_policy: Optional retry policy overriding the default.

        Returns:
            The scheduled job.

        Raises:
            RuntimeError: If the queue has been closed.
        """
        if self._closed:
            msg = "LocalJobQueue is closed"
            raise RuntimeError(msg)

        handler, queue = self._handlers.get(job_type, (None, "default"))
        job = Job(job_type=job_type, payload=dict(payload), queue=queue, policy=retry_policy or self.default_policy)
        self.jobs.append(job)

        if handler is None:
            job.status = JobStatus.SKIPPED
            logger.debug("No handler registered for job type %s, skipping", job_type)
            return job

        task = asyncio.create_task(self._run(job, handler))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    async def _run(self, job: Job, handler: JobHandler) -> None:
        async with self._semaphore(job.queue):
            for attempt in range(job.policy.attempts):
                job.status = JobStatus.RUNNING
                job.attempts = attempt + 1
                try:
                    async with asyncio.timeout(job.policy.timeout):
                        job.result = await handler(job.payload)
                except asyncio.CancelledError:
                    job.status = JobStatus.FAILED
                    job.error = "cancelled"
                    raise
                except Exception as exc:  # noqa: BLE001
                    job.error = str(exc) or type(exc).__name__
                    if attempt + 1 >= job.policy.attempts:
                        job.status = JobStatus.FAILED
                        logger.error(
                            "Job %s (%s) failed after %d attempts", job.id, job.job_type, job.attempts, exc_info=exc
                        )
                        return
                    delay = job.policy.delay_for(attempt)
                    logger.warning(
                        "Job %s (%s) attempt %d failed, retrying in %.2fs: %s",
                        job.id,
                        job.job_type,
                        job.attempts,
                        delay,
                        exc,
                    )
                    await asyncio.sleep(delay)
                else:
                    job.status = JobStatus.COMPLETE
                    job.error = None
                    return

    async def join(self) -> None:
        """Wait until every scheduled job has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop accepting jobs and cancel the ones still running."""
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
