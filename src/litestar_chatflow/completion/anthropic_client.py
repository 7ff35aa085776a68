"""Completion service backed by the Anthropic Messages API."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import anthropic

from litestar_chatflow.completion.base import CompletionOptions
from litestar_chatflow.exceptions import CompletionServiceError

if TYPE_CHECKING:
    from litestar_chatflow.config import ChatflowConfig

__all__ = ["AnthropicCompletionService"]

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
JSON_SUFFIX = "\n\nRespond with a single JSON object only. Do not wrap it in markdown."


class AnthropicCompletionService:
    """Completion service using ``anthropic.AsyncAnthropic``.

    Every call is bounded by a timeout. Timeouts, API errors and empty responses
    are raised as :class:`~litestar_chatflow.exceptions.CompletionServiceError`
    so callers only ever handle one failure type.

    Example:
        >>> service = AnthropicCompletionService(model="claude-haiku-4-5-20251001")
        >>> text = await service.complete("You are terse.", "Say hi")
    """

    def __init__(
        self,
        client: anthropic.AsyncAnthropic | None = None,
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 4096,
        temperature: float = 0.3,
        timeout: float = 60.0,
    ) -> None:
        """Initialize the service.

        Args:
            client: Pre-configured client. If None, one is created from ``ANTHROPIC_API_KEY``.
            model: Default model.
            max_tokens: Default maximum tokens.
            temperature: Default sampling temperature.
            timeout: Default timeout in seconds.
        """
        self._client = client or anthropic.AsyncAnthropic(timeout=timeout)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

    @classmethod
    def from_config(
        cls, config: ChatflowConfig, client: anthropic.AsyncAnthropic | None = None
    ) -> AnthropicCompletionService:
        """Create a service using the model settings of an engine config."""
        return cls(
            client,
            model=config.model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            timeout=config.completion_timeout,
        )

    async def complete(
        self,
        system_instructions: str,
        user_text: str,
        options: CompletionOptions | None = None,
    ) -> str:
        """Generate a completion.

        Args:
            system_instructions: System prompt for the model.
            user_text: The user message.
            options: Optional per-call overrides.

        Returns:
            The concatenated text blocks of the response.

        Raises:
            CompletionServiceError: On timeout, API error or an empty response.
        """
        options = options or CompletionOptions()
        system = system_instructions + JSON_SUFFIX if options.json_response else system_instructions
        model = options.model or self.model
        timeout = options.timeout if options.timeout is not None else self.timeout

        try:
            async with asyncio.timeout(timeout):
                response = await self._client.messages.create(
                    model=model,
                    max_tokens=options.max_tokens or self.max_tokens,
                    temperature=self.temperature if options.temperature is None else options.temperature,
                    system=system,
                    messages=[{"role": "user", "content": user_text or "(no input)"}],
                )
        except TimeoutError as exc:
            logger.error("Completion with model %s timed out after %ss", model, timeout)
            msg = f"timed out after {timeout}s"
            raise CompletionServiceError(msg) from exc
        except anthropic.APIError as exc:
            logger.error("Completion with model %s failed: %s", model, exc)
            raise CompletionServiceError(str(exc)) from exc

        text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
        if not text.strip():
            msg = "empty response"
            raise CompletionServiceError(msg)
        logger.debug(
            "Completion with model %s used %s input and %s output tokens",
            model,
            response.usage.input_tokens,
            response.usage.output_tokens,
        )
        return text
