"""Tests for step handlers, the handler table and thread messaging."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from litestar_chatflow.store.memory import InMemoryWorkflowStore


@pytest.mark.unit
class TestStepOutcome:
    """Tests for StepOutcome."""

    def test_complete(self) -> None:
        """Test a complete outcome with a suggestion."""
        from litestar_chatflow.steps.base import StepOutcome

        outcome = StepOutcome.complete("Asset Review")

        assert outcome.is_complete is True
        assert outcome.suggested_next_step == "Asset Review"

    def test_waiting(self) -> None:
        """Test a waiting outcome."""
        from litestar_chatflow.steps.base import StepOutcome

        assert StepOutcome.waiting() == StepOutcome(False, None)

    def test_is_auto(self) -> None:
        """Test the synthetic auto-execute input is recognised."""
        from litestar_chatflow.steps.base import AUTO_EXECUTE_INPUT, BaseStepHandler

        assert BaseStepHandler.is_auto(AUTO_EXECUTE_INPUT) is True
        assert BaseStepHandler.is_auto("auto execute please") is False


@pytest.mark.unit
class TestHandlerRegistry:
    """Tests for HandlerRegistry."""

    def test_default_covers_every_step_type(self) -> None:
        """Test every step type and role handler is registered."""
        from litestar_chatflow.core.types import StepType
        from litestar_chatflow.steps.registry import HandlerRegistry

        registry = HandlerRegistry.default()

        for step_type in StepType:
            assert step_type in registry
        assert "workflow_selection" in registry
        assert "asset_review" in registry

    def test_every_builtin_step_has_a_handler(self) -> None:
        """Test built-in templates only use registered handlers."""
        from litestar_chatflow.steps.registry import HandlerRegistry
        from litestar_chatflow.templates.builtin import BUILTIN_TEMPLATES

        registry = HandlerRegistry.default()

        for template in BUILTIN_TEMPLATES:
            for step in template.steps:
                assert step.handler_key in registry, (template.key, step.name)

    def test_unknown_handler(self) -> None:
        """Test looking up an unknown handler raises."""
        from litestar_chatflow.exceptions import UnknownStepHandlerError
        from litestar_chatflow.steps.registry import HandlerRegistry

        with pytest.raises(UnknownStepHandlerError) as exc_info:
            HandlerRegistry().get("podcast")

        assert exc_info.value.handler_key == "podcast"

    def test_register_replaces(self) -> None:
        """Test registering a handler replaces the default."""
        from litestar_chatflow.steps.registry import HandlerRegistry
        from litestar_chatflow.steps.user_input import UserInputHandler

        registry = HandlerRegistry.default()
        handler = UserInputHandler()
        registry.register("json_dialog", handler)

        assert registry.get("json_dialog") is handler


@pytest.mark.unit
class TestTitleHelpers:
    """Tests for thread title helpers."""

    def test_fallback_title_uses_first_user_message(self) -> None:
        """Test the fallback title takes the opening words."""
        from litestar_chatflow.core.models import ThreadMessage
        from litestar_chatflow.core.types import MessageRole
        from litestar_chatflow.steps.title import fallback_title

        messages = [
            ThreadMessage("t", MessageRole.ASSISTANT, "Which workflow?"),
            ThreadMessage("t", MessageRole.USER, "I need a press release for our new rocket launch today!"),
        ]

        assert fallback_title(messages) == "I need a press release for"

    def test_fallback_title_without_messages(self) -> None:
        """Test an empty thread gets a generic title."""
        from litestar_chatflow.steps.title import fallback_title

        assert fallback_title([]) == "New Conversation"

    def test_revised_prompt(self) -> None:
        """Test the review prompt after a revision mentions the revision number."""
        from litestar_chatflow.steps.review import revised_prompt

        prompt = revised_prompt("Press Release", 2)

        assert prompt.startswith("Here's your revised press release (revision 2).")
        assert "'approved'" in prompt


@pytest.mark.unit
class TestBookkeepingPrefix:
    """Tests for classifying direct messages."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ("Selected workflow: Press Release", "[Workflow Status]"),
            ('Step "Asset Generation" completed', "[Workflow Status]"),
            ("Generating your press release now. This may take a moment...", "[System]"),
            ("What is your company name?", None),
            ("[System] already prefixed", None),
        ],
    )
    def test_prefix(self, content: str, expected: str | None) -> None:
        """Test status and system messages are recognised."""
        from litestar_chatflow.engine.messages import bookkeeping_prefix

        assert bookkeeping_prefix(content) == expected


@pytest.mark.unit
@pytest.mark.asyncio
class TestThreadMessenger:
    """Tests for ThreadMessenger."""

    async def test_emit_records_message(self, store: InMemoryWorkflowStore) -> None:
        """Test emitted messages are stored and collected on the result."""
        from litestar_chatflow.core.models import TurnResult
        from litestar_chatflow.core.types import MessageRole
        from litestar_chatflow.engine.messages import ThreadMessenger

        result = TurnResult(thread_id="t")
        messenger = ThreadMessenger(store, "t", result)

        message = await messenger.emit("  Hello there  ")

        assert message is not None
        assert message.content == "Hello there"
        assert message.role == MessageRole.ASSISTANT
        assert [m.content for m in result.messages] == ["Hello there"]
        assert [m.content for m in store.messages("t")] == ["Hello there"]

    async def test_duplicates_suppressed_within_window(self, store: InMemoryWorkflowStore) -> None:
        """Test a message equal to a recent one is dropped."""
        from litestar_chatflow.core.models import TurnResult
        from litestar_chatflow.engine.messages import ThreadMessenger

        result = TurnResult(thread_id="t")
        messenger = ThreadMessenger(store, "t", result, duplicate_window=2)

        assert await messenger.emit("same") is not None
        assert await messenger.emit("same") is None
        await messenger.emit("other 1")
        await messenger.emit("other 2")
        assert await messenger.emit("same") is not None
        assert await messenger.emit("   ") is None
        assert [m.content for m in result.messages] == ["same", "other 1", "other 2", "same"]

    async def test_user_messages_not_deduplicated(self, store: InMemoryWorkflowStore) -> None:
        """Test repeated user input is always recorded."""
        from litestar_chatflow.core.models import TurnResult
        from litestar_chatflow.engine.messages import ThreadMessenger

        messenger = ThreadMessenger(store, "t", TurnResult(thread_id="t"))

        await messenger.record_user("yes")
        await messenger.record_user("yes")

        assert [m.content for m in store.messages("t")] == ["yes", "yes"]

    async def test_prefixed_messages(self, store: InMemoryWorkflowStore) -> None:
        """Test status, system and direct messages get their prefixes."""
        from litestar_chatflow.core.models import TurnResult
        from litestar_chatflow.core.types import MessageRole
        from litestar_chatflow.engine.messages import ThreadMessenger

        result = TurnResult(thread_id="t")
        messenger = ThreadMessenger(store, "t", result)

        await messenger.status("Selected workflow: FAQ")
        await messenger.system("Something failed")
        await messenger.direct("Processing workflow selection")
        await messenger.direct("Plain answer")

        assert [m.content for m in result.messages] == [
            "[Workflow Status] Selected workflow: FAQ",
            "[System] Something failed",
            "[Workflow Status] Processing workflow selection",
            "Plain answer",
        ]
        assert result.messages[0].role == MessageRole.SYSTEM
        assert result.messages[3].role == MessageRole.ASSISTANT

    async def test_sink_receives_messages(self, store: InMemoryWorkflowStore) -> None:
        """Test the sink is called for every emitted message."""
        from litestar_chatflow.core.models import ThreadMessage, TurnResult
        from litestar_chatflow.engine.messages import ThreadMessenger

        seen: list[ThreadMessage] = []

        async def sink(message: ThreadMessage) -> None:
            seen.append(message)

        messenger = ThreadMessenger(store, "t", TurnResult(thread_id="t"), sink=sink)
        await messenger.emit("one")
        await messenger.emit("one")

        assert [m.content for m in seen] == ["one"]

    async def test_history(self, store: InMemoryWorkflowStore) -> None:
        """Test history returns the most recent messages oldest first."""
        from litestar_chatflow.core.models import TurnResult
        from litestar_chatflow.engine.messages import ThreadMessenger

        messenger = ThreadMessenger(store, "t", TurnResult(thread_id="t"))
        for index in range(4):
            await messenger.record_user(f"m{index}")

        assert [m.content for m in await messenger.history(2)] == ["m2", "m3"]
        assert await messenger.history(0) == []
