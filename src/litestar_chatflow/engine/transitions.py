"""Chaining from a completed workflow to its successor."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from litestar_chatflow.steps.dialog import CANCELLED, WorkflowSelectionHandler

if TYPE_CHECKING:
    from litestar_chatflow.core.definition import WorkflowTemplate
    from litestar_chatflow.core.models import Workflow
    from litestar_chatflow.engine.context import TurnContext
    from litestar_chatflow.templates.registry import TemplateRegistry

__all__ = ["MISSING_SUCCESSOR", "Launcher", "WorkflowTransitionManager"]

logger = logging.getLogger(__name__)

MISSING_SUCCESSOR = "This workflow is done, but the next workflow '{template}' is not available."

Launcher = Callable[["TurnContext", "WorkflowTemplate", bool], Awaitable["Workflow"]]
"""Coroutine creating a workflow for ``(turn, template, silent)`` on the turn's thread."""


class WorkflowTransitionManager:
    """Creates the successor of a completed workflow.

    After a selection workflow, the selected template is resolved by name and
    started. An empty or cancelled selection starts a fresh silent selection
    workflow, and a selection that cannot be resolved is reported to the user and
    ends the chain. Other templates chain to their ``next_template``.
    """

    def __init__(self, registry: TemplateRegistry, launch: Launcher) -> None:
        """Initialize the manager.

        Args:
            registry: Template registry used to resolve selections.
            launch: Coroutine that creates and enters a workflow.
        """
        self.registry = registry
        self._launch = launch

    async def on_workflow_completed(self, turn: TurnContext) -> Workflow | None:
        """Start the successor of the turn's workflow, if any.

        Args:
            turn: Turn context of the completed workflow.

        Returns:
            The new workflow, or None if the chain ends.
        """
        template = turn.template
        if template.is_selection:
            return await self._after_selection(turn)

        if not template.next_template:
            return None
        if not self.registry.has_template(template.next_template):
            logger.error(
                "Workflow %s chains to unregistered template '%s'", turn.workflow.id, template.next_template
            )
            await turn.messenger.system(MISSING_SUCCESSOR.format(template=template.next_template))
            return None
        successor = self.registry.get(template.next_template)
        logger.info("Chaining workflow %s to template '%s'", turn.workflow.id, successor.key)
        return await self._launch(turn, successor, template.silent_successor)

    def selection_of(self, turn: TurnContext) -> str | None:
        """The workflow name chosen in a selection workflow."""
        for step in turn.steps:
            definition = turn.template.get_step(step.name)
            if definition is None or step.handler_key != WorkflowSelectionHandler.key:
                continue
            value = step.state.collected_information.get(definition.config.selection_field)
            return str(value).strip() if value else None
        return None

    async def _after_selection(self, turn: TurnContext) -> Workflow | None:
        selection = self.selection_of(turn)
        if not selection or selection.lower() == CANCELLED:
            logger.info("No workflow selected in thread %s, restarting selection", turn.thread_id)
            return await self._launch(turn, turn.template, True)

        target = self.registry.resolve_name(selection)
        if target is None:
            available = ", ".join(t.name for t in self.registry.list_templates(include_selection=False))
            logger.warning("Could not resolve selected workflow '%s' in thread %s", selection, turn.thread_id)
            await turn.messenger.emit(
                f'I couldn\'t find a workflow called "{selection}". Available workflows: {available}. '
                "Please tell me which one you'd like to start."
            )
            return None

        logger.info("Thread %s selected workflow '%s'", turn.thread_id, target.name)
        if turn.services.config.emit_status_messages:
            await turn.messenger.status(f"Selected workflow: {target.name}")
        return await self._launch(turn, target, False)
