"""Tests for step dependency resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from litestar_chatflow.core.models import StepInstance, Workflow


def _workflow_with_steps(*specs: tuple[str, int, tuple[str, ...]]) -> tuple[Workflow, list[StepInstance]]:
    from litestar_chatflow.core.models import StepInstance, Workflow
    from litestar_chatflow.core.types import StepType

    workflow = Workflow(thread_id="t", template_key="custom")
    steps = [
        StepInstance(workflow.id, name, StepType.USER_INPUT, "user_input", order, dependencies=list(deps))
        for name, order, deps in specs
    ]
    return workflow, steps


@pytest.mark.unit
class TestDependencyResolver:
    """Tests for DependencyResolver."""

    def test_lowest_order_eligible_step(self) -> None:
        """Test the lowest-order eligible step is chosen."""
        from litestar_chatflow.engine.resolver import DependencyResolver

        workflow, steps = _workflow_with_steps(("b", 1, ()), ("a", 0, ()))

        assert DependencyResolver().next_eligible_step(workflow, steps).name == "a"  # type: ignore[union-attr]

    def test_dependencies_must_be_complete(self) -> None:
        """Test a step waits for its dependencies."""
        from litestar_chatflow.core.types import StepStatus
        from litestar_chatflow.engine.resolver import DependencyResolver

        workflow, steps = _workflow_with_steps(("a", 0, ()), ("b", 1, ("a",)), ("c", 2, ()))
        steps[0].status = StepStatus.IN_PROGRESS
        resolver = DependencyResolver()

        assert resolver.next_eligible_step(workflow, steps).name == "c"  # type: ignore[union-attr]

        steps[0].status = StepStatus.COMPLETE
        assert resolver.next_eligible_step(workflow, steps).name == "b"  # type: ignore[union-attr]

    def test_all_complete_returns_none(self) -> None:
        """Test a fully completed workflow has no next step."""
        from litestar_chatflow.core.types import StepStatus
        from litestar_chatflow.engine.resolver import DependencyResolver

        workflow, steps = _workflow_with_steps(("a", 0, ()), ("b", 1, ("a",)))
        for step in steps:
            step.status = StepStatus.COMPLETE

        assert DependencyResolver().next_eligible_step(workflow, steps) is None

    def test_blocked_workflow_raises(self) -> None:
        """Test incomplete steps without an eligible step are inconsistent."""
        from litestar_chatflow.core.types import StepStatus
        from litestar_chatflow.engine.resolver import DependencyResolver
        from litestar_chatflow.exceptions import InconsistentWorkflowError

        workflow, steps = _workflow_with_steps(("a", 0, ()), ("b", 1, ("a",)))
        steps[0].status = StepStatus.FAILED

        with pytest.raises(InconsistentWorkflowError) as exc_info:
            DependencyResolver().next_eligible_step(workflow, steps)

        assert exc_info.value.blocked_steps == ["a", "b"]

    def test_resolve_override(self) -> None:
        """Test a suggested step is honoured only when eligible."""
        from litestar_chatflow.engine.resolver import DependencyResolver

        _, steps = _workflow_with_steps(("a", 0, ()), ("b", 1, ()), ("c", 2, ("a",)))
        resolver = DependencyResolver()

        assert resolver.resolve_override(steps, "b").name == "b"  # type: ignore[union-attr]
        assert resolver.resolve_override(steps, "c") is None
        assert resolver.resolve_override(steps, "missing") is None
        assert resolver.resolve_override(steps, None) is None

    def test_complete_workflow(self) -> None:
        """Test completing a workflow clears the current step."""
        from litestar_chatflow.core.types import StepStatus, WorkflowStatus
        from litestar_chatflow.engine.resolver import DependencyResolver
        from litestar_chatflow.exceptions import InconsistentWorkflowError

        workflow, steps = _workflow_with_steps(("a", 0, ()))
        workflow.current_step_id = steps[0].id
        resolver = DependencyResolver()

        with pytest.raises(InconsistentWorkflowError):
            resolver.complete_workflow(workflow, steps)

        steps[0].status = StepStatus.COMPLETE
        resolver.complete_workflow(workflow, steps)

        assert workflow.status == WorkflowStatus.COMPLETED
        assert workflow.current_step_id is None
