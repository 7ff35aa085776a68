"""Completion service implementations."""

from __future__ import annotations

from litestar_chatflow.completion.anthropic_client import AnthropicCompletionService
from litestar_chatflow.completion.base import CompletionOptions

__all__ = ["AnthropicCompletionService", "CompletionOptions"]
