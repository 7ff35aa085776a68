"""JSON dialog step handlers: information collection and workflow selection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflow.dialog.intents import is_cancellation
from litestar_chatflow.steps.base import BaseStepHandler, StepOutcome
from litestar_chatflow.templates.registry import normalize_name

if TYPE_CHECKING:
    from litestar_chatflow.core.models import StepInstance
    from litestar_chatflow.dialog.protocol import DialogResult
    from litestar_chatflow.engine.context import TurnContext

__all__ = ["CANCELLED", "JsonDialogHandler", "WorkflowSelectionHandler"]

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"
CANCEL_REPLY = "No problem! Feel free to return when you're ready to create content."


class JsonDialogHandler(BaseStepHandler):
    """Collects structured information over several turns."""

    key = "json_dialog"

    async def process_turn(self, turn: TurnContext, step: StepInstance, user_input: str) -> StepOutcome:
        definition = turn.definition(step)
        step.user_input = user_input
        result = await turn.services.protocol.process_turn(
            step,
            definition,
            user_input,
            await turn.history(),
            extra_instructions=self.extra_instructions(turn, step),
        )
        return await self.handle_result(turn, step, result)

    def extra_instructions(self, turn: TurnContext, step: StepInstance) -> str:
        return ""

    async def handle_result(self, turn: TurnContext, step: StepInstance, result: DialogResult) -> StepOutcome:
        if result.is_complete:
            return StepOutcome.complete(result.suggested_next_step)
        if result.next_question and not turn.definition(step).config.silent:
            await turn.messenger.emit(result.next_question)
            step.output = result.next_question
        return StepOutcome.waiting()


class WorkflowSelectionHandler(JsonDialogHandler):
    """Asks which workflow to run and stores the selection.

    A reply that exactly names a workflow or cancels is handled without a
    completion call. When the model answers a general question instead of
    selecting, the answer is emitted and the selection stays empty.
    """

    key = "workflow_selection"

    async def process_turn(self, turn: TurnContext, step: StepInstance, user_input: str) -> StepOutcome:
        definition = turn.definition(step)
        field = definition.config.selection_field
        step.user_input = user_input

        direct = self._direct_selection(turn, user_input)
        if direct is not None:
            step.state.turn_count += 1
            step.state.collected_information[field] = direct
            logger.info("Workflow selection '%s' matched directly", direct)
            if direct == CANCELLED:
                await turn.messenger.emit(CANCEL_REPLY)
                step.output = CANCEL_REPLY
            return StepOutcome.complete()

        return await super().process_turn(turn, step, user_input)

    def extra_instructions(self, turn: TurnContext, step: StepInstance) -> str:
        field = turn.definition(step).config.selection_field
        return f'Store the selected workflow name under collectedInformation.{field}.'

    async def handle_result(self, turn: TurnContext, step: StepInstance, result: DialogResult) -> StepOutcome:
        if not result.is_complete:
            return await super().handle_result(turn, step, result)

        field = turn.definition(step).config.selection_field
        selection = result.collected_information.get(field)
        if (not selection or str(selection).strip().lower() == CANCELLED) and result.next_question:
            # conversational answer or cancellation acknowledgement
            await turn.messenger.emit(result.next_question)
            step.output = result.next_question
        return StepOutcome.complete()

    @staticmethod
    def _direct_selection(turn: TurnContext, user_input: str) -> str | None:
        wanted = normalize_name(user_input)
        if not wanted:
            return None
        if len(wanted.split()) <= 3 and is_cancellation(user_input):
            return CANCELLED
        for template in turn.services.registry.list_templates(include_selection=False):
            if wanted in (normalize_name(template.name), normalize_name(str(template.key))):
                return template.name
        return None
