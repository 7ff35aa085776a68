"""Dependency resolution between workflow steps."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflow.core.models import utcnow
from litestar_chatflow.core.types import StepStatus, WorkflowStatus
from litestar_chatflow.exceptions import InconsistentWorkflowError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from litestar_chatflow.core.models import StepInstance, Workflow

__all__ = ["DependencyResolver"]

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Determines which step of a workflow may run next.

    A step is eligible when it is PENDING and every step named in its
    dependencies is COMPLETE. Among eligible steps the lowest ``order`` wins.
    """

    @staticmethod
    def is_eligible(step: StepInstance, steps: Sequence[StepInstance]) -> bool:
        """Whether a step is PENDING with all of its dependencies complete."""
        if step.status != StepStatus.PENDING:
            return False
        complete = {s.name for s in steps if s.status == StepStatus.COMPLETE}
        return all(dependency in complete for dependency in step.dependencies)

    def next_eligible_step(self, workflow: Workflow, steps: Sequence[StepInstance]) -> StepInstance | None:
        """Find the next step to run.

        Args:
            workflow: The workflow the steps belong to.
            steps: All steps of the workflow.

        Returns:
            The eligible step with the lowest order, or None if every step is complete.

        Raises:
            InconsistentWorkflowError: If no step is eligible but some are not complete.
        """
        for step in sorted(steps, key=lambda s: s.order):
            if self.is_eligible(step, steps):
                return step

        blocked = [step.name for step in steps if step.status != StepStatus.COMPLETE]
        if blocked:
            raise InconsistentWorkflowError(workflow.id, blocked)
        return None

    def resolve_override(self, steps: Sequence[StepInstance], name: str | None) -> StepInstance | None:
        """Honour a suggested next step if it names an eligible step.

        Args:
            steps: All steps of the workflow.
            name: The suggested step name.

        Returns:
            The suggested step, or None if it does not exist or cannot run yet.
        """
        if not name:
            return None
        step = next((s for s in steps if s.name == name), None)
        if step is None or not self.is_eligible(step, steps):
            logger.warning("Ignoring suggested next step '%s'", name)
            return None
        return step

    def complete_workflow(self, workflow: Workflow, steps: Sequence[StepInstance]) -> None:
        """Mark a workflow COMPLETED and clear its current step.

        Raises:
            InconsistentWorkflowError: If any step is not complete.
        """
        blocked = [step.name for step in steps if step.status != StepStatus.COMPLETE]
        if blocked:
            raise InconsistentWorkflowError(workflow.id, blocked)
        workflow.status = WorkflowStatus.COMPLETED
        workflow.current_step_id = None
        workflow.updated_at = utcnow()
        logger.info("Workflow %s (%s) completed", workflow.id, workflow.template_key)
