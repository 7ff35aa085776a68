"""Tests for the Anthropic completion service."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, Mock

import anthropic
import httpx
import pytest


def _response(*texts: str) -> SimpleNamespace:
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text) for text in texts],
        usage=SimpleNamespace(input_tokens=10, output_tokens=5),
    )


def _client(create: Any) -> Mock:
    client = Mock()
    client.messages.create = create
    return client


@pytest.mark.unit
@pytest.mark.asyncio
class TestAnthropicCompletionService:
    """Tests for AnthropicCompletionService."""

    async def test_complete_joins_text_blocks(self) -> None:
        """Test the text blocks of the response are concatenated."""
        from litestar_chatflow.completion.anthropic_client import AnthropicCompletionService

        create = AsyncMock(return_value=_response("Hello ", "world"))
        service = AnthropicCompletionService(_client(create), model="test-model", max_tokens=100, temperature=0.1)

        text = await service.complete("Be brief.", "Say hello")

        assert text == "Hello world"
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 100
        assert kwargs["temperature"] == 0.1
        assert kwargs["system"] == "Be brief."
        assert kwargs["messages"] == [{"role": "user", "content": "Say hello"}]

    async def test_json_response_and_overrides(self) -> None:
        """Test per-call options override the defaults."""
        from litestar_chatflow.completion.anthropic_client import JSON_SUFFIX, AnthropicCompletionService
        from litestar_chatflow.completion.base import CompletionOptions

        create = AsyncMock(return_value=_response('{"a": 1}'))
        service = AnthropicCompletionService(_client(create))

        await service.complete("Extract.", "", CompletionOptions(json_response=True, model="other", temperature=0.0))

        kwargs = create.await_args.kwargs
        assert kwargs["system"] == "Extract." + JSON_SUFFIX
        assert kwargs["model"] == "other"
        assert kwargs["temperature"] == 0.0
        assert kwargs["messages"][0]["content"] == "(no input)"

    async def test_empty_response_raises(self) -> None:
        """Test an empty response is a completion error."""
        from litestar_chatflow.completion.anthropic_client import AnthropicCompletionService
        from litestar_chatflow.exceptions import CompletionServiceError

        service = AnthropicCompletionService(_client(AsyncMock(return_value=_response("  "))))

        with pytest.raises(CompletionServiceError, match="empty response"):
            await service.complete("x", "y")

    async def test_api_error_is_wrapped(self) -> None:
        """Test SDK errors surface as CompletionServiceError."""
        from litestar_chatflow.completion.anthropic_client import AnthropicCompletionService
        from litestar_chatflow.exceptions import CompletionServiceError

        error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))
        service = AnthropicCompletionService(_client(AsyncMock(side_effect=error)))

        with pytest.raises(CompletionServiceError) as exc_info:
            await service.complete("x", "y")

        assert exc_info.value.__cause__ is error

    async def test_timeout_is_wrapped(self) -> None:
        """Test a slow call is abandoned after the timeout."""
        from litestar_chatflow.completion.anthropic_client import AnthropicCompletionService
        from litestar_chatflow.exceptions import CompletionServiceError

        async def slow(**kwargs: Any) -> SimpleNamespace:
            await asyncio.sleep(1)
            return _response("late")

        service = AnthropicCompletionService(_client(slow), timeout=0.01)

        with pytest.raises(CompletionServiceError, match="timed out"):
            await service.complete("x", "y")


@pytest.mark.unit
class TestCompletionServiceConfig:
    """Tests for building the completion service from configuration."""

    def test_from_config(self) -> None:
        """Test building the service from engine settings."""
        from litestar_chatflow.completion.anthropic_client import AnthropicCompletionService
        from litestar_chatflow.config import ChatflowConfig

        config = ChatflowConfig(model="claude-haiku-4-5-20251001", max_tokens=512, completion_timeout=5.0)

        service = AnthropicCompletionService.from_config(config, client=Mock())

        assert service.model == "claude-haiku-4-5-20251001"
        assert service.max_tokens == 512
        assert service.timeout == 5.0
