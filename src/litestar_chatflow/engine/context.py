"""Per-turn working state shared by the engine, dispatcher and step handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from litestar_chatflow.core.models import utcnow
from litestar_chatflow.core.types import StepStatus
from litestar_chatflow.dialog.fields import merge_information
from litestar_chatflow.exceptions import StepNotFoundError

if TYPE_CHECKING:
    from litestar_chatflow.config import ChatflowConfig
    from litestar_chatflow.core.definition import StepDefinition, WorkflowTemplate
    from litestar_chatflow.core.models import StepInstance, ThreadMessage, TurnResult, Workflow
    from litestar_chatflow.core.protocols import CompletionService, JobQueue, WorkflowStore
    from litestar_chatflow.dialog.protocol import JsonDialogProtocol
    from litestar_chatflow.engine.messages import ThreadMessenger
    from litestar_chatflow.generation.loop import AssetGenerator, ReviewInterpreter
    from litestar_chatflow.templates.registry import TemplateRegistry

__all__ = ["EngineServices", "TurnContext"]

logger = logging.getLogger(__name__)


@dataclass
class EngineServices:
    """Collaborators available to step handlers.

    Attributes:
        store: The workflow store.
        completion: The completion service.
        registry: The template registry.
        protocol: The JSON dialog protocol.
        generator: The asset generator.
        interpreter: The review interpreter.
        config: The engine configuration.
        job_queue: Optional background job queue.
    """

    store: WorkflowStore
    completion: CompletionService
    registry: TemplateRegistry
    protocol: JsonDialogProtocol
    generator: AssetGenerator
    interpreter: ReviewInterpreter
    config: ChatflowConfig
    job_queue: JobQueue | None = None


@dataclass
class TurnContext:
    """A loaded workflow together with everything needed to advance it.

    State is loaded from the store when the context is created and written back
    through the ``save_*`` helpers at every transition.

    Attributes:
        workflow: The workflow being advanced.
        template: The workflow's template.
        steps: The workflow's steps in ascending order.
        messenger: Messenger of the owning thread.
        result: Result of the current turn.
        services: Engine collaborators.
    """

    workflow: Workflow
    template: WorkflowTemplate
    steps: list[StepInstance]
    messenger: ThreadMessenger
    result: TurnResult
    services: EngineServices

    @classmethod
    async def load(
        cls,
        workflow: Workflow,
        messenger: ThreadMessenger,
        result: TurnResult,
        services: EngineServices,
    ) -> TurnContext:
        """Load the template and steps of a workflow."""
        template = services.registry.get(workflow.template_key)
        steps = await services.store.list_steps(workflow.id)
        return cls(workflow, template, steps, messenger, result, services)

    @property
    def thread_id(self) -> str:
        return self.workflow.thread_id

    def definition(self, step: StepInstance) -> StepDefinition:
        """Get the template definition of a step instance.

        Raises:
            StepNotFoundError: If the template has no step with that name.
        """
        definition = self.template.get_step(step.name)
        if definition is None:
            raise StepNotFoundError(step.name, self.workflow.id)
        return definition

    def get_step(self, name: str) -> StepInstance | None:
        return next((step for step in self.steps if step.name == name), None)

    def current_step(self) -> StepInstance | None:
        """The step that receives user input.

        Falls back to the lowest-order IN_PROGRESS step when ``current_step_id`` is
        unset or stale.
        """
        if self.workflow.current_step_id is not None:
            for step in self.steps:
                if step.id == self.workflow.current_step_id:
                    return step
        return next((step for step in self.steps if step.status == StepStatus.IN_PROGRESS), None)

    def collected_information(self, upto: StepInstance | None = None) -> dict[str, Any]:
        """Merge the collected information of all completed steps in order.

        Args:
            upto: Optional step whose own information is merged last, even if it is
                not complete yet.

        Returns:
            The merged information.
        """
        merged: dict[str, Any] = {}
        for step in self.steps:
            if step.is_complete or step is upto:
                merged = merge_information(merged, step.state.collected_information)
        return merged

    def latest_asset(self) -> tuple[str | None, str | None]:
        """The most recently generated asset and its type, searching from the last step."""
        for step in reversed(self.steps):
            if step.state.generated_asset:
                return step.state.generated_asset, step.state.asset_type
        return None, None

    async def history(self) -> list[ThreadMessage]:
        """Recent thread messages within the configured history window."""
        return await self.messenger.history(self.services.config.history_window)

    async def save_step(self, step: StepInstance) -> None:
        await self.services.store.update_step(step)

    async def save_workflow(self) -> None:
        self.workflow.updated_at = utcnow()
        await self.services.store.update_workflow(self.workflow)

    async def start_step(self, step: StepInstance) -> None:
        """Mark a step IN_PROGRESS and make it the current step."""
        step.status = StepStatus.IN_PROGRESS
        self.workflow.current_step_id = step.id
        await self.save_step(step)
        await self.save_workflow()
        logger.info("Workflow %s started step '%s'", self.workflow.id, step.name)
        if self.services.config.emit_status_messages:
            await self.messenger.status(f'Proceeding to step "{step.name}"')

    async def complete_step(self, step: StepInstance) -> None:
        """Mark a step COMPLETE."""
        step.status = StepStatus.COMPLETE
        step.state.completed_at = utcnow()
        await self.save_step(step)
        logger.info("Workflow %s completed step '%s'", self.workflow.id, step.name)
        if self.services.config.emit_status_messages:
            await self.messenger.status(f'Step "{step.name}" completed')

    async def emit_prompt(self, step: StepInstance, definition: StepDefinition) -> None:
        """Emit the prompt of a step once, unless the step is silent."""
        if step.state.initial_prompt_sent or definition.config.silent:
            return
        await self.messenger.emit(step.prompt)
        step.state.initial_prompt_sent = True
        step.output = step.prompt
        await self.save_step(step)

    async def enqueue(self, job_type: str, payload: dict[str, Any]) -> None:
        """Schedule a background job if a queue is configured.

        Failures are logged and never affect the turn.
        """
        queue = self.services.job_queue
        if queue is None:
            return
        payload = {"thread_id": self.thread_id, "workflow_id": str(self.workflow.id), **payload}
        try:
            await queue.enqueue(job_type, payload)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to enqueue %s job for workflow %s", job_type, self.workflow.id)
