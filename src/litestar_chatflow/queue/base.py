"""Retry policy and backoff helpers shared by job queue implementations."""

from __future__ import annotations

import random
from dataclasses import dataclass

__all__ = ["DEFAULT_QUEUE_LIMITS", "RetryPolicy", "compute_backoff"]

DEFAULT_QUEUE_LIMITS: dict[str, int] = {
    "default": 5,
    "completion": 5,
    "notifications": 10,
    "analytics": 3,
}
"""Concurrency limit per named queue."""


def compute_backoff(attempt: int, base: float = 0.5, jitter: float = 0.25, max_delay: float = 30.0) -> float:
    """Compute exponential backoff with jitter.

    Args:
        attempt: Zero-based retry attempt.
        base: Delay in seconds before the first retry.
        jitter: Upper bound of the random delay added on top.
        max_delay: Upper bound of the exponential part.

    Returns:
        Delay in seconds.
    """
    delay = min(base * (2**attempt), max_delay)
    return delay + random.uniform(0, jitter)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings for a background job.

    Attributes:
        attempts: Total number of attempts, including the first one.
        base_delay: Delay in seconds before the first retry.
        max_delay: Maximum delay between attempts, before jitter.
        jitter: Upper bound of the random jitter in seconds.
        timeout: Seconds a single attempt may run.
    """

    attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 3.0
    jitter: float = 0.25
    timeout: float = 60.0

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (zero-based)."""
        return compute_backoff(attempt, base=self.base_delay, jitter=self.jitter, max_delay=self.max_delay)
