"""Shared types for completion service implementations."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["CompletionOptions"]


@dataclass(frozen=True)
class CompletionOptions:
    """Per-call settings passed to a completion service.

    Attributes:
        model: Model override. None uses the service default.
        max_tokens: Maximum tokens to generate. None uses the service default.
        temperature: Sampling temperature. None uses the service default.
        json_response: Whether the caller expects a JSON object back.
        timeout: Timeout in seconds for this call. None uses the service default.
    """

    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    json_response: bool = False
    timeout: float | None = None
