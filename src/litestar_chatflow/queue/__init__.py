"""Background job queues for post-turn side effects."""

from __future__ import annotations

from litestar_chatflow.queue.base import RetryPolicy, compute_backoff
from litestar_chatflow.queue.local import Job, JobStatus, LocalJobQueue

__all__ = ["Job", "JobStatus", "LocalJobQueue", "RetryPolicy", "compute_backoff"]
