"""In-memory workflow store."""

from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from litestar_chatflow.core.models import StepInstance, ThreadMessage, Workflow

__all__ = ["InMemoryWorkflowStore"]


class InMemoryWorkflowStore:
    """Workflow store keeping all records in process memory.

    Every read and write copies the record, so callers can never mutate stored
    state without writing it back. Useful for tests and single-process apps.

    Example:
        >>> store = InMemoryWorkflowStore()
        >>> engine = ChatflowEngine(store=store, completion=completion)
    """

    def __init__(self) -> None:
        self._workflows: dict[UUID, Workflow] = {}
        self._steps: dict[UUID, StepInstance] = {}
        self._messages: dict[str, list[ThreadMessage]] = {}
        self._titles: dict[str, str] = {}

    async def create_workflow(self, workflow: Workflow) -> Workflow:
        self._workflows[workflow.id] = deepcopy(workflow)
        return deepcopy(workflow)

    async def get_workflow(self, workflow_id: UUID) -> Workflow | None:
        workflow = self._workflows.get(workflow_id)
        return deepcopy(workflow) if workflow else None

    async def list_workflows_for_thread(self, thread_id: str) -> list[Workflow]:
        workflows = [w for w in self._workflows.values() if w.thread_id == thread_id]
        return [deepcopy(w) for w in sorted(workflows, key=lambda w: w.created_at)]

    async def update_workflow(self, workflow: Workflow) -> Workflow:
        self._workflows[workflow.id] = deepcopy(workflow)
        return deepcopy(workflow)

    async def delete_workflow(self, workflow_id: UUID) -> None:
        self._workflows.pop(workflow_id, None)
        for step_id in [s.id for s in self._steps.values() if s.workflow_id == workflow_id]:
            del self._steps[step_id]

    async def create_step(self, step: StepInstance) -> StepInstance:
        self._steps[step.id] = deepcopy(step)
        return deepcopy(step)

    async def get_step(self, step_id: UUID) -> StepInstance | None:
        step = self._steps.get(step_id)
        return deepcopy(step) if step else None

    async def list_steps(self, workflow_id: UUID) -> list[StepInstance]:
        steps = [s for s in self._steps.values() if s.workflow_id == workflow_id]
        return [deepcopy(s) for s in sorted(steps, key=lambda s: s.order)]

    async def update_step(self, step: StepInstance) -> StepInstance:
        self._steps[step.id] = deepcopy(step)
        return deepcopy(step)

    async def append_message(self, message: ThreadMessage) -> ThreadMessage:
        self._messages.setdefault(message.thread_id, []).append(deepcopy(message))
        return message

    async def recent_messages(self, thread_id: str, limit: int) -> list[ThreadMessage]:
        if limit <= 0:
            return []
        return deepcopy(self._messages.get(thread_id, [])[-limit:])

    async def set_thread_title(self, thread_id: str, title: str) -> None:
        self._titles[thread_id] = title

    async def get_thread_title(self, thread_id: str) -> str | None:
        return self._titles.get(thread_id)

    def messages(self, thread_id: str) -> list[ThreadMessage]:
        """All messages of a thread, oldest first."""
        return deepcopy(self._messages.get(thread_id, []))
