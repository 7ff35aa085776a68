"""Conversational JSON extraction protocol.

One call to :meth:`JsonDialogProtocol.process_turn` handles one user turn of an
information-collection step. It asks the completion service for a JSON object,
merges the extracted information into the step state and decides whether the
step is complete. It never raises on bad model output.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from litestar_chatflow.completion.base import CompletionOptions
from litestar_chatflow.dialog.fields import (
    completion_percentage,
    field_status,
    merge_information,
    missing_fields,
    sanitize,
)
from litestar_chatflow.dialog.intents import is_affirmative, is_bare_affirmative
from litestar_chatflow.dialog.parsing import DialogResponse, parse_response
from litestar_chatflow.exceptions import CompletionServiceError, MalformedResponseError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from litestar_chatflow.core.definition import StepDefinition
    from litestar_chatflow.core.models import StepInstance, ThreadMessage
    from litestar_chatflow.core.protocols import CompletionService

__all__ = ["CLARIFYING_QUESTION", "READY_THRESHOLD", "DialogResult", "JsonDialogProtocol"]

logger = logging.getLogger(__name__)

CLARIFYING_QUESTION = "I'm having trouble understanding. Could you please be more specific?"
READY_THRESHOLD = 60

RESPONSE_CONTRACT = """RESPONSE FORMAT:
You MUST respond with ONLY valid JSON in this format:
{
  "isComplete": boolean,
  "collectedInformation": { all information collected so far, including earlier turns },
  "missingInformation": [ names of required fields still missing ],
  "nextQuestion": "the next question for the user, or null when complete",
  "suggestedNextStep": "name of the step to run next, or null",
  "readyToGenerate": boolean (true when enough is known to proceed but optional details are missing)
}"""


@dataclass
class DialogResult:
    """Outcome of one JSON dialog turn.

    Attributes:
        is_complete: Whether the step is complete.
        collected_information: Merged collected information after the turn.
        next_question: Question for the user. Never None when incomplete.
        suggested_next_step: Step the model suggested running next.
        missing_information: Fields still missing.
        ready_to_proceed: Whether the user was asked to proceed with partial information.
        forced: Whether completion was forced by the user confirming to proceed.
        completion_percentage: Weighted completion of the tracked fields.
    """

    is_complete: bool
    collected_information: dict[str, Any] = field(default_factory=dict)
    next_question: str | None = None
    suggested_next_step: str | None = None
    missing_information: list[str] = field(default_factory=list)
    ready_to_proceed: bool = False
    forced: bool = False
    completion_percentage: int = 0


class JsonDialogProtocol:
    """Drives information-collection turns through the completion service.

    The protocol updates the dialog bookkeeping on ``step.state`` (collected
    information, missing fields, turn count and the readiness confirmation) and
    leaves status changes to the caller.

    Attributes:
        completion: The completion service.
        history_window: Number of recent thread messages included in the prompt.
    """

    def __init__(self, completion: CompletionService, history_window: int = 10) -> None:
        """Initialize the protocol.

        Args:
            completion: The completion service.
            history_window: Number of recent thread messages included in the prompt.
        """
        self.completion = completion
        self.history_window = history_window

    async def process_turn(
        self,
        step: StepInstance,
        definition: StepDefinition,
        user_input: str,
        conversation_history: Sequence[ThreadMessage] = (),
        *,
        extra_instructions: str = "",
    ) -> DialogResult:
        """Process one user turn.

        Args:
            step: The step instance. Its state is updated in place.
            definition: The step definition.
            user_input: The user's message.
            conversation_history: Recent thread messages, oldest first.
            extra_instructions: Additional instructions appended to the system prompt.

        Returns:
            The turn result.
        """
        state = step.state
        prior = dict(state.collected_information)

        if not user_input.strip():
            return self._incomplete(prior, step.prompt or CLARIFYING_QUESTION, definition)

        state.turn_count += 1
        turn = state.turn_count

        confirmed = False
        if state.awaiting_confirmation:
            requested_at = state.confirmation_requested_at_turn or 0
            state.awaiting_confirmation = False
            state.confirmation_requested_at_turn = None
            confirmed = turn > requested_at and is_affirmative(user_input)
            if confirmed and is_bare_affirmative(user_input):
                logger.info("Step '%s' completed on user confirmation with partial information", step.name)
                return self._forced(state.missing_information, prior, definition)

        response = await self._request(step, definition, prior, user_input, conversation_history, extra_instructions)
        if response is None:
            if confirmed:
                logger.warning("Step '%s' completed on user confirmation without the details of the reply", step.name)
                return self._forced(state.missing_information, prior, definition)
            return self._incomplete(prior, CLARIFYING_QUESTION, definition)

        merged = merge_information(prior, response.collected_information)
        state.collected_information = merged
        missing = response.missing_information or missing_fields(definition.config, merged)
        state.missing_information = missing
        percentage = completion_percentage(definition.config, merged)

        if confirmed and not response.is_complete:
            logger.info("Step '%s' completed on user confirmation with partial information", step.name)
            return self._forced(missing, merged, definition)

        if response.is_complete:
            return DialogResult(
                is_complete=True,
                collected_information=merged,
                next_question=response.next_question,
                suggested_next_step=response.suggested_next_step,
                missing_information=missing,
                completion_percentage=percentage,
            )

        essential_done = all(field_status(definition.config.essential, merged).values())
        tracked = bool(definition.config.required_fields)
        if response.ready_to_generate or (tracked and essential_done and percentage >= READY_THRESHOLD):
            state.awaiting_confirmation = True
            state.confirmation_requested_at_turn = turn
            return DialogResult(
                is_complete=False,
                collected_information=merged,
                next_question=self.confirmation_question(response.next_question, missing, percentage),
                suggested_next_step=response.suggested_next_step,
                missing_information=missing,
                ready_to_proceed=True,
                completion_percentage=percentage,
            )

        return DialogResult(
            is_complete=False,
            collected_information=merged,
            next_question=response.next_question or self.default_question(missing),
            suggested_next_step=response.suggested_next_step,
            missing_information=missing,
            completion_percentage=percentage,
        )

    def build_instructions(
        self,
        step: StepInstance,
        definition: StepDefinition,
        prior: dict[str, Any],
        conversation_history: Sequence[ThreadMessage],
        extra_instructions: str = "",
    ) -> str:
        """Build the system instructions for a dialog turn.

        Args:
            step: The step instance.
            definition: The step definition.
            prior: Information collected before this turn.
            conversation_history: Recent thread messages, oldest first.
            extra_instructions: Additional instructions appended before the contract.

        Returns:
            The system prompt.
        """
        config = definition.config
        sections = [f"CURRENT STEP: {step.name}"]
        if config.goal:
            sections.append(f"GOAL: {config.goal}")
        if config.base_instructions:
            sections.append(config.base_instructions)
        if config.options:
            sections.append("AVAILABLE OPTIONS:\n" + "\n".join(f"- {option}" for option in config.options))

        sections.append(
            "INFORMATION COLLECTED SO FAR:\n" + json.dumps(sanitize(prior), indent=2, default=str, sort_keys=True)
        )

        if config.required_fields:
            lines = []
            for label, names in (
                ("essential", config.essential),
                ("important", config.important),
                ("optional", config.optional),
            ):
                for name, done in field_status(names, prior).items():
                    lines.append(f"- {name} ({label}): {'complete' if done else 'missing'}")
            percentage = completion_percentage(config, prior)
            sections.append("FIELD STATUS:\n" + "\n".join(lines) + f"\nCompletion: {percentage}%")

        window = list(conversation_history)[-self.history_window :] if self.history_window else []
        if window:
            sections.append(
                "CONVERSATION HISTORY (most recent last):\n"
                + "\n".join(f"{message.role}: {message.content}" for message in window)
            )

        if extra_instructions:
            sections.append(extra_instructions)
        sections.append(RESPONSE_CONTRACT)
        return "\n\n".join(sections)

    @staticmethod
    def confirmation_question(next_question: str | None, missing: Sequence[str], percentage: int) -> str:
        """Question asking the user whether to proceed with partial information."""
        question = f"I have enough information to proceed ({percentage}% complete)."
        if missing:
            question += f" Still missing: {', '.join(missing)}."
        if next_question:
            question += f" {next_question}"
        return question + " Would you like me to proceed anyway? Reply 'yes' to continue or share more details."

    @staticmethod
    def default_question(missing: Sequence[str]) -> str:
        """Question used when the model reports no question of its own."""
        if missing:
            return f"Could you tell me more about: {', '.join(missing)}?"
        return "Could you share a bit more detail so I can continue?"

    async def _request(
        self,
        step: StepInstance,
        definition: StepDefinition,
        prior: dict[str, Any],
        user_input: str,
        conversation_history: Sequence[ThreadMessage],
        extra_instructions: str,
    ) -> DialogResponse | None:
        system = self.build_instructions(step, definition, prior, conversation_history, extra_instructions)
        try:
            raw = await self.completion.complete(system, user_input, CompletionOptions(json_response=True))
        except CompletionServiceError as exc:
            logger.error("Completion failed for step '%s': %s", step.name, exc)
            return None

        try:
            return parse_response(raw, DialogResponse)
        except MalformedResponseError as exc:
            logger.warning("Unparseable dialog response for step '%s': %s", step.name, exc.reason)
            return None

    @staticmethod
    def _forced(missing: Sequence[str], information: dict[str, Any], definition: StepDefinition) -> DialogResult:
        return DialogResult(
            is_complete=True,
            collected_information=information,
            missing_information=list(missing),
            forced=True,
            completion_percentage=completion_percentage(definition.config, information),
        )

    def _incomplete(self, prior: dict[str, Any], question: str, definition: StepDefinition) -> DialogResult:
        return DialogResult(
            is_complete=False,
            collected_information=prior,
            next_question=question,
            missing_information=missing_fields(definition.config, prior),
            completion_percentage=completion_percentage(definition.config, prior),
        )
