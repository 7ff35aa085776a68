"""Auto-execution of non-interactive steps."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflow.steps.base import AUTO_EXECUTE_INPUT

if TYPE_CHECKING:
    from litestar_chatflow.core.models import StepInstance
    from litestar_chatflow.engine.context import TurnContext
    from litestar_chatflow.engine.resolver import DependencyResolver
    from litestar_chatflow.steps.base import StepOutcome
    from litestar_chatflow.steps.registry import HandlerRegistry

__all__ = ["AutoExecutionDispatcher"]

logger = logging.getLogger(__name__)


class AutoExecutionDispatcher:
    """Advances a workflow after a step completes.

    The dispatcher repeatedly picks the next eligible step, makes it current and,
    if the step is flagged ``auto_execute``, runs its handler with the synthetic
    input ``"auto-execute"``. It stops at the first step that needs user input,
    after emitting that step's prompt, or when every step is complete.

    A failing or incomplete auto-executed step is left IN_PROGRESS with its
    static prompt shown, and waits for the user instead of being retried.
    """

    def __init__(self, handlers: HandlerRegistry, resolver: DependencyResolver) -> None:
        self.handlers = handlers
        self.resolver = resolver

    async def advance(self, turn: TurnContext, suggested_next_step: str | None = None) -> bool:
        """Advance the workflow to the next step that needs the user.

        Args:
            turn: The current turn context.
            suggested_next_step: Step suggested by the completed step's handler.

        Returns:
            True if the workflow completed.

        Raises:
            InconsistentWorkflowError: If the workflow is stuck with incomplete steps.
        """
        suggestion = suggested_next_step
        while True:
            step = self.resolver.resolve_override(turn.steps, suggestion)
            if step is None:
                step = self.resolver.next_eligible_step(turn.workflow, turn.steps)
            if step is None:
                self.resolver.complete_workflow(turn.workflow, turn.steps)
                await turn.save_workflow()
                return True

            await turn.start_step(step)
            outcome = await self.enter(turn, step)
            if outcome is None:
                return False
            suggestion = outcome.suggested_next_step

    async def start(self, turn: TurnContext, *, announce: bool = True) -> bool:
        """Enter the first step of a freshly created workflow.

        Args:
            turn: The turn context of the new workflow.
            announce: Whether to emit the first step's prompt.

        Returns:
            True if the workflow completed without needing the user.
        """
        step = turn.current_step()
        if step is None:
            return await self.advance(turn)
        outcome = await self.enter(turn, step, announce=announce)
        if outcome is None:
            return False
        return await self.advance(turn, outcome.suggested_next_step)

    async def enter(self, turn: TurnContext, step: StepInstance, *, announce: bool = True) -> StepOutcome | None:
        """Run a step that just became current.

        Args:
            turn: The current turn context.
            step: The step, already IN_PROGRESS.
            announce: Whether to emit the prompt of an interactive step.

        Returns:
            The outcome if the step auto-executed to completion, otherwise None.
        """
        definition = turn.definition(step)
        if not definition.config.auto_execute:
            if announce:
                await turn.emit_prompt(step, definition)
            return None

        handler = self.handlers.get(step.handler_key)
        try:
            outcome = await handler.process_turn(turn, step, AUTO_EXECUTE_INPUT)
        except Exception as exc:  # noqa: BLE001
            logger.error("Auto-execution of step '%s' failed", step.name, exc_info=exc)
            step.state.error = str(exc) or type(exc).__name__
            await turn.save_step(step)
            await turn.emit_prompt(step, definition)
            return None

        if not outcome.is_complete:
            logger.warning("Auto-executed step '%s' did not complete, waiting for the user", step.name)
            await turn.save_step(step)
            await turn.emit_prompt(step, definition)
            return None

        await turn.complete_step(step)
        return outcome
