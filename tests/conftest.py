"""Shared test fixtures for litestar-chatflow test suite."""

from __future__ import annotations

import asyncio
import json
from collections import deque
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from litestar_chatflow.completion.base import CompletionOptions
    from litestar_chatflow.config import ChatflowConfig
    from litestar_chatflow.engine.engine import ChatflowEngine
    from litestar_chatflow.store.memory import InMemoryWorkflowStore
    from litestar_chatflow.templates.registry import TemplateRegistry

TITLE_MARKER = "short title"
"""Substring of the thread title instructions, used to answer title calls."""


def dialog_json(
    *,
    complete: bool = False,
    info: dict[str, Any] | None = None,
    question: str | None = None,
    **extra: Any,
) -> str:
    """Build a JSON dialog response."""
    return json.dumps(
        {
            "isComplete": complete,
            "collectedInformation": info or {},
            "nextQuestion": question,
            **extra,
        }
    )


def asset_json(asset: str) -> str:
    """Build an asset generation response."""
    return json.dumps({"asset": asset})


def review_json(decision: str, changes: list[str] | None = None, question: str | None = None) -> str:
    """Build a review-decision response."""
    return json.dumps(
        {
            "isComplete": decision == "approved",
            "collectedInformation": {
                "reviewDecision": decision,
                "requestedChanges": changes or [],
                "userFeedback": "",
            },
            "nextQuestion": question,
        }
    )


class ScriptedCompletionService:
    """Fake completion service returning scripted responses.

    Calls whose system instructions contain a registered marker get the
    response of that rule. All other calls consume the FIFO script. Scripted
    exceptions are raised instead of returned.
    """

    def __init__(self, *responses: str | BaseException, delay: float = 0.0) -> None:
        self.responses: deque[str | BaseException] = deque(responses)
        self.rules: list[tuple[str, str | BaseException]] = []
        self.calls: list[dict[str, Any]] = []
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    def queue(self, *responses: str | BaseException) -> None:
        self.responses.extend(responses)

    def when(self, marker: str, response: str | BaseException) -> None:
        self.rules.append((marker, response))

    async def complete(
        self,
        system_instructions: str,
        user_text: str,
        options: CompletionOptions | None = None,
    ) -> str:
        from litestar_chatflow.exceptions import CompletionServiceError

        self.calls.append({"system": system_instructions, "user": user_text, "options": options})
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            response = next((r for marker, r in self.rules if marker in system_instructions), None)
            if response is None:
                if not self.responses:
                    raise CompletionServiceError("no scripted response left")
                response = self.responses.popleft()
            if isinstance(response, BaseException):
                raise response
            return response
        finally:
            self.in_flight -= 1

    @property
    def scripted_calls(self) -> int:
        """Number of calls that did not match a rule."""
        return sum(1 for call in self.calls if not any(marker in call["system"] for marker, _ in self.rules))


@pytest.fixture
def completion() -> ScriptedCompletionService:
    """Create a scripted completion service that answers title calls.

    Returns:
        ScriptedCompletionService instance
    """
    service = ScriptedCompletionService()
    service.when(TITLE_MARKER, "Acme Rocket Launch")
    return service


@pytest.fixture
def store() -> InMemoryWorkflowStore:
    """Create an in-memory workflow store.

    Returns:
        InMemoryWorkflowStore instance
    """
    from litestar_chatflow.store.memory import InMemoryWorkflowStore

    return InMemoryWorkflowStore()


@pytest.fixture
def registry() -> TemplateRegistry:
    """Create a template registry holding the built-in templates.

    Returns:
        TemplateRegistry instance
    """
    from litestar_chatflow.templates.registry import TemplateRegistry

    return TemplateRegistry.with_builtin_templates()


@pytest.fixture
def chatflow_config() -> ChatflowConfig:
    """Create the default engine configuration.

    Returns:
        ChatflowConfig instance
    """
    from litestar_chatflow.config import ChatflowConfig

    return ChatflowConfig()


@pytest.fixture
def engine(
    store: InMemoryWorkflowStore,
    completion: ScriptedCompletionService,
    registry: TemplateRegistry,
    chatflow_config: ChatflowConfig,
) -> ChatflowEngine:
    """Create a chatflow engine wired to the fakes.

    Args:
        store: In-memory store fixture
        completion: Scripted completion fixture
        registry: Template registry fixture
        chatflow_config: Engine configuration fixture

    Returns:
        ChatflowEngine instance
    """
    from litestar_chatflow.engine.engine import ChatflowEngine

    return ChatflowEngine(store, completion, registry, config=chatflow_config)


PRESS_RELEASE_INFO = {
    "companyName": "Acme",
    "companyDescription": "Acme builds reusable rockets",
    "announcement": "Launch of the Roadrunner rocket",
}


# Pytest configuration
def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers.

    Args:
        config: Pytest config object
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
