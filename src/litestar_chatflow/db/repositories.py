"""Repository implementations for chatflow persistence.

This module provides async repositories for the chatflow models using
advanced-alchemy's repository pattern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from advanced_alchemy.repository import SQLAlchemyAsyncRepository
from sqlalchemy import delete, func, select

from litestar_chatflow.db.models import (
    ChatflowMessageModel,
    ChatflowStepModel,
    ChatflowThreadModel,
    ChatflowWorkflowModel,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

__all__ = [
    "ChatflowMessageRepository",
    "ChatflowStepRepository",
    "ChatflowThreadRepository",
    "ChatflowWorkflowRepository",
]


class ChatflowWorkflowRepository(SQLAlchemyAsyncRepository[ChatflowWorkflowModel]):
    """Repository for workflow instance CRUD operations."""

    model_type = ChatflowWorkflowModel

    async def find_by_thread(self, thread_id: str) -> Sequence[ChatflowWorkflowModel]:
        """Find all workflows of a thread.

        Args:
            thread_id: The thread ID.

        Returns:
            Workflows ordered by creation time, oldest first.
        """
        stmt = (
            select(ChatflowWorkflowModel)
            .where(ChatflowWorkflowModel.thread_id == thread_id)
            .order_by(ChatflowWorkflowModel.created_at, ChatflowWorkflowModel.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()


class ChatflowStepRepository(SQLAlchemyAsyncRepository[ChatflowStepModel]):
    """Repository for step instance CRUD operations."""

    model_type = ChatflowStepModel

    async def find_by_workflow(self, workflow_id: UUID) -> Sequence[ChatflowStepModel]:
        """Find all steps of a workflow.

        Args:
            workflow_id: The workflow ID.

        Returns:
            Steps in ascending order.
        """
        stmt = (
            select(ChatflowStepModel)
            .where(ChatflowStepModel.workflow_id == workflow_id)
            .order_by(ChatflowStepModel.step_order)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def delete_by_workflow(self, workflow_id: UUID) -> None:
        """Delete all steps of a workflow."""
        await self.session.execute(delete(ChatflowStepModel).where(ChatflowStepModel.workflow_id == workflow_id))
        await self.session.flush()


class ChatflowMessageRepository(SQLAlchemyAsyncRepository[ChatflowMessageModel]):
    """Repository for thread messages."""

    model_type = ChatflowMessageModel

    async def next_position(self, thread_id: str) -> int:
        """Position for the next message appended to a thread."""
        stmt = select(func.max(ChatflowMessageModel.position)).where(ChatflowMessageModel.thread_id == thread_id)
        result = await self.session.execute(stmt)
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def find_recent(self, thread_id: str, limit: int) -> list[ChatflowMessageModel]:
        """Find the last messages of a thread.

        Args:
            thread_id: The thread ID.
            limit: Maximum number of messages.

        Returns:
            Messages oldest first.
        """
        stmt = (
            select(ChatflowMessageModel)
            .where(ChatflowMessageModel.thread_id == thread_id)
            .order_by(ChatflowMessageModel.position.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(reversed(result.scalars().all()))


class ChatflowThreadRepository(SQLAlchemyAsyncRepository[ChatflowThreadModel]):
    """Repository for per-thread metadata."""

    model_type = ChatflowThreadModel

    async def get_by_thread_id(self, thread_id: str) -> ChatflowThreadModel | None:
        stmt = select(ChatflowThreadModel).where(ChatflowThreadModel.thread_id == thread_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
