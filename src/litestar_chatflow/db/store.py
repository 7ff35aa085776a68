"""Workflow store backed by SQLAlchemy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar_chatflow.core.models import StepInstance, StepState, ThreadMessage, Workflow
from litestar_chatflow.db.models import (
    ChatflowMessageModel,
    ChatflowStepModel,
    ChatflowThreadModel,
    ChatflowWorkflowModel,
)
from litestar_chatflow.db.repositories import (
    ChatflowMessageRepository,
    ChatflowStepRepository,
    ChatflowThreadRepository,
    ChatflowWorkflowRepository,
)

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

__all__ = ["SQLAlchemyWorkflowStore"]


def _to_workflow(model: ChatflowWorkflowModel) -> Workflow:
    return Workflow(
        thread_id=model.thread_id,
        template_key=model.template_key,
        status=model.status,
        current_step_id=model.current_step_id,
        id=model.id,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _to_step(model: ChatflowStepModel) -> StepInstance:
    return StepInstance(
        workflow_id=model.workflow_id,
        name=model.name,
        step_type=model.step_type,
        handler_key=model.handler_key,
        order=model.step_order,
        prompt=model.prompt,
        dependencies=list(model.dependencies or []),
        status=model.status,
        state=StepState.from_dict(model.state),
        user_input=model.user_input,
        output=model.output,
        id=model.id,
    )


def _to_message(model: ChatflowMessageModel) -> ThreadMessage:
    return ThreadMessage(
        thread_id=model.thread_id,
        role=model.role,
        content=model.content,
        id=model.id,
        created_at=model.created_at,
    )


class SQLAlchemyWorkflowStore:
    """Workflow store persisting records through advanced-alchemy repositories.

    Writes are flushed to the session. Committing is left to the caller unless
    ``auto_commit`` is set.

    Attributes:
        session: SQLAlchemy async session for database operations.

    Example:
        >>> async with session_maker() as session:
        ...     store = SQLAlchemyWorkflowStore(session, auto_commit=True)
        ...     engine = ChatflowEngine(store=store, completion=completion)
    """

    def __init__(self, session: AsyncSession, *, auto_commit: bool = False) -> None:
        """Initialize the store.

        Args:
            session: SQLAlchemy async session.
            auto_commit: Commit the session after every write.
        """
        self.session = session
        self.auto_commit = auto_commit
        self._workflows = ChatflowWorkflowRepository(session=session)
        self._steps = ChatflowStepRepository(session=session)
        self._messages = ChatflowMessageRepository(session=session)
        self._threads = ChatflowThreadRepository(session=session)

    async def _written(self) -> None:
        await self.session.flush()
        if self.auto_commit:
            await self.session.commit()

    async def create_workflow(self, workflow: Workflow) -> Workflow:
        model = ChatflowWorkflowModel(
            id=workflow.id,
            thread_id=workflow.thread_id,
            template_key=workflow.template_key,
            status=workflow.status,
            current_step_id=workflow.current_step_id,
            created_at=workflow.created_at,
            updated_at=workflow.updated_at,
        )
        model = await self._workflows.add(model)
        await self._written()
        return _to_workflow(model)

    async def get_workflow(self, workflow_id: UUID) -> Workflow | None:
        model = await self._workflows.get_one_or_none(id=workflow_id)
        return _to_workflow(model) if model else None

    async def list_workflows_for_thread(self, thread_id: str) -> list[Workflow]:
        return [_to_workflow(model) for model in await self._workflows.find_by_thread(thread_id)]

    async def update_workflow(self, workflow: Workflow) -> Workflow:
        model = await self._workflows.get(workflow.id)
        model.status = workflow.status
        model.current_step_id = workflow.current_step_id
        model.template_key = workflow.template_key
        model.updated_at = workflow.updated_at
        await self._written()
        return _to_workflow(model)

    async def delete_workflow(self, workflow_id: UUID) -> None:
        await self._steps.delete_by_workflow(workflow_id)
        if await self._workflows.get_one_or_none(id=workflow_id) is not None:
            await self._workflows.delete(workflow_id)
        await self._written()

    async def create_step(self, step: StepInstance) -> StepInstance:
        model = ChatflowStepModel(
            id=step.id,
            workflow_id=step.workflow_id,
            name=step.name,
            step_type=step.step_type,
            handler_key=step.handler_key,
            step_order=step.order,
            prompt=step.prompt,
            dependencies=list(step.dependencies),
            status=step.status,
            state=step.state.to_dict(),
            user_input=step.user_input,
            output=step.output,
        )
        model = await self._steps.add(model)
        await self._written()
        return _to_step(model)

    async def get_step(self, step_id: UUID) -> StepInstance | None:
        model = await self._steps.get_one_or_none(id=step_id)
        return _to_step(model) if model else None

    async def list_steps(self, workflow_id: UUID) -> list[StepInstance]:
        return [_to_step(model) for model in await self._steps.find_by_workflow(workflow_id)]

    async def update_step(self, step: StepInstance) -> StepInstance:
        model = await self._steps.get(step.id)
        model.prompt = step.prompt
        model.status = step.status
        model.state = step.state.to_dict()
        model.user_input = step.user_input
        model.output = step.output
        await self._written()
        return _to_step(model)

    async def append_message(self, message: ThreadMessage) -> ThreadMessage:
        model = ChatflowMessageModel(
            id=message.id,
            thread_id=message.thread_id,
            position=await self._messages.next_position(message.thread_id),
            role=message.role,
            content=message.content,
            created_at=message.created_at,
        )
        await self._messages.add(model)
        await self._written()
        return message

    async def recent_messages(self, thread_id: str, limit: int) -> list[ThreadMessage]:
        if limit <= 0:
            return []
        return [_to_message(model) for model in await self._messages.find_recent(thread_id, limit)]

    async def set_thread_title(self, thread_id: str, title: str) -> None:
        model = await self._threads.get_by_thread_id(thread_id)
        if model is None:
            await self._threads.add(ChatflowThreadModel(thread_id=thread_id, title=title))
        else:
            model.title = title
        await self._written()

    async def get_thread_title(self, thread_id: str) -> str | None:
        model = await self._threads.get_by_thread_id(thread_id)
        return model.title if model else None
