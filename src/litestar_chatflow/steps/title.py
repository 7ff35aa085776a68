"""Thread title generation step handler."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflow.core.types import MessageRole
from litestar_chatflow.exceptions import CompletionServiceError
from litestar_chatflow.steps.base import BaseStepHandler, StepOutcome

if TYPE_CHECKING:
    from litestar_chatflow.core.models import StepInstance, ThreadMessage
    from litestar_chatflow.engine.context import TurnContext

__all__ = ["ThreadTitleHandler", "fallback_title"]

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS = "Write a short title (at most six words) for this conversation. Respond with the title only."
MAX_TITLE_LENGTH = 60
FALLBACK_WORDS = 6


def fallback_title(messages: list[ThreadMessage]) -> str:
    """Derive a title from the first user message."""
    first = next((m.content for m in messages if m.role == MessageRole.USER and m.content.strip()), "")
    words = first.split()
    if not words:
        return "New Conversation"
    title = " ".join(words[:FALLBACK_WORDS])
    return title[:MAX_TITLE_LENGTH].rstrip(" .,!?")


def _clean_title(raw: str) -> str:
    line = next((line for line in raw.strip().splitlines() if line.strip()), "")
    line = line.strip().strip("\"'`*#").strip()
    if line.lower().startswith("title:"):
        line = line[len("title:") :].strip()
    return line[:MAX_TITLE_LENGTH].rstrip(" .")


class ThreadTitleHandler(BaseStepHandler):
    """Generates a short title for the thread and stores it.

    A failed or empty completion falls back to the opening words of the first
    user message, so the step always completes.
    """

    key = "generate_thread_title"

    async def process_turn(self, turn: TurnContext, step: StepInstance, user_input: str) -> StepOutcome:
        definition = turn.definition(step)
        history = await turn.history()
        conversation = "\n".join(f"{m.role}: {m.content}" for m in history if m.role == MessageRole.USER)

        title = ""
        try:
            raw = await turn.services.completion.complete(
                definition.config.base_instructions or DEFAULT_INSTRUCTIONS,
                conversation or user_input,
            )
            title = _clean_title(raw)
        except CompletionServiceError as exc:
            logger.warning("Title generation failed for thread %s: %s", turn.thread_id, exc)
        if not title or title.startswith("{"):
            title = fallback_title(history)

        await turn.services.store.set_thread_title(turn.thread_id, title)
        step.state.collected_information["threadTitle"] = title
        step.output = title
        if not definition.config.silent:
            await turn.messenger.emit(f"Thread title: {title}")
        return StepOutcome.complete()
