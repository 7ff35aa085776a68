"""SAQ (Simple Async Queue) job queue integration.

This module adapts a ``saq.Queue`` to the
:class:`~litestar_chatflow.core.protocols.JobQueue` protocol so that post-turn jobs
such as ``asset.generated`` run on Redis-backed SAQ workers.

Installation:
    .. code-block:: bash

        pip install litestar-chatflow[saq]

Example:
    .. code-block:: python

        from saq import Queue
        from litestar_chatflow.contrib.saq import SAQJobQueue

        queue = SAQJobQueue(Queue.from_url("redis://localhost:6379/0"))
        engine = ChatflowEngine(store=store, completion=completion, job_queue=queue)

    Worker functions receive the job payload as the ``payload`` keyword::

        async def asset_generated(ctx, *, payload):
            ...

        settings = {"queue": queue.queue, "functions": [("asset.generated", asset_generated)]}

See Also:
    - SAQ documentation: https://github.com/tobymao/saq
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from litestar_chatflow.queue.base import RetryPolicy

if TYPE_CHECKING:
    from saq import Queue
    from saq.job import Job

__all__ = ["SAQJobQueue"]

logger = logging.getLogger(__name__)


class SAQJobQueue:
    """Job queue delegating to a SAQ queue.

    Attributes:
        queue: The wrapped SAQ queue.
        default_policy: Retry policy used when ``enqueue`` receives none.
    """

    def __init__(self, queue: Queue, default_policy: RetryPolicy | None = None) -> None:
        """Initialize the adapter.

        Args:
            queue: A connected or lazily connecting SAQ queue.
            default_policy: Retry policy used when ``enqueue`` receives none.
        """
        self.queue = queue
        self.default_policy = default_policy or RetryPolicy()

    async def enqueue(
        self,
        job_type: str,
        payload: dict[str, Any],
        retry_policy: RetryPolicy | None = None,
    ) -> Job | None:
        """Enqueue a SAQ job named after ``job_type``.

        Args:
            job_type: Name of the SAQ function.
            payload: Job arguments, passed as the ``payload`` keyword.
            retry_policy: Optional retry policy overriding the default.

        Returns:
            The SAQ job, or None if SAQ deduplicated it.
        """
        policy = retry_policy or self.default_policy
        job = await self.queue.enqueue(
            job_type,
            timeout=int(policy.timeout),
            retries=policy.attempts,
            retry_delay=policy.base_delay,
            retry_backoff=policy.max_delay,
            payload=payload,
        )
        logger.debug("Enqueued SAQ job %s", job_type)
        return job

    async def close(self) -> None:
        """Disconnect the underlying SAQ queue."""
        await self.queue.disconnect()
