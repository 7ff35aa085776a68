"""Free-form user input step handler."""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar_chatflow.steps.base import BaseStepHandler, StepOutcome

if TYPE_CHECKING:
    from litestar_chatflow.core.models import StepInstance
    from litestar_chatflow.engine.context import TurnContext

__all__ = ["UserInputHandler"]


class UserInputHandler(BaseStepHandler):
    """Stores the user's reply verbatim and completes.

    Empty replies re-emit the step prompt and keep the step waiting.
    """

    key = "user_input"

    async def process_turn(self, turn: TurnContext, step: StepInstance, user_input: str) -> StepOutcome:
        definition = turn.definition(step)
        if self.is_auto(user_input) or not user_input.strip():
            await turn.messenger.emit(step.prompt)
            return StepOutcome.waiting()

        step.user_input = user_input
        step.state.turn_count += 1
        step.state.collected_information[definition.config.input_field] = user_input.strip()
        return StepOutcome.complete()
