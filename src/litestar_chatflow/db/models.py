"""SQLAlchemy models for chatflow persistence.

This module defines the database models backing
:class:`~litestar_chatflow.db.store.SQLAlchemyWorkflowStore`:
- ChatflowWorkflowModel: Stores workflow instances bound to threads
- ChatflowStepModel: Stores step instances and their JSON runtime state
- ChatflowMessageModel: Stores the role-tagged messages of each thread
- ChatflowThreadModel: Stores per-thread metadata such as the generated title
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from advanced_alchemy.base import UUIDAuditBase
from sqlalchemy import JSON, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from litestar_chatflow.core.types import MessageRole, StepStatus, StepType, WorkflowStatus

__all__ = [
    "ChatflowMessageModel",
    "ChatflowStepModel",
    "ChatflowThreadModel",
    "ChatflowWorkflowModel",
]


# Cross-database JSON type: uses JSONB for PostgreSQL, JSON for others (SQLite, MySQL, etc.)
JSONType = JSON().with_variant(JSONB, "postgresql")


class ChatflowWorkflowModel(UUIDAuditBase):
    """Persisted workflow instance.

    Attributes:
        thread_id: Identifier of the owning conversation thread.
        template_key: Key of the template the workflow was created from.
        status: Current workflow status.
        current_step_id: Step that receives the next user message.
        steps: Related step instances.
    """

    __tablename__ = "chatflow_workflows"
    __table_args__ = (
        Index("ix_chatflow_workflows_thread_id", "thread_id"),
        Index("ix_chatflow_workflows_thread_status", "thread_id", "status"),
    )

    thread_id: Mapped[str] = mapped_column(String(255))
    template_key: Mapped[str] = mapped_column(String(100))
    status: Mapped[WorkflowStatus] = mapped_column(
        Enum(WorkflowStatus, native_enum=False, length=50),
        default=WorkflowStatus.ACTIVE,
    )
    current_step_id: Mapped[UUID | None] = mapped_column(nullable=True)

    # Relationships
    steps: Mapped[list[ChatflowStepModel]] = relationship(
        back_populates="workflow",
        lazy="noload",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class ChatflowStepModel(UUIDAuditBase):
    """Persisted step instance.

    The mutable runtime state is stored as one JSON document produced by
    :meth:`~litestar_chatflow.core.models.StepState.to_dict`.

    Attributes:
        workflow_id: Foreign key to the owning workflow.
        name: Step name.
        step_type: Step type.
        handler_key: Key of the handler processing the step.
        step_order: Position of the step within its workflow.
        prompt: Prompt text shown to the user.
        dependencies: Names of prerequisite steps.
        status: Current step status.
        state: Runtime state as JSON.
        user_input: Last user input processed by the step.
        output: Last output emitted by the step.
    """

    __tablename__ = "chatflow_steps"
    __table_args__ = (
        Index("ix_chatflow_steps_workflow_id", "workflow_id"),
        Index("ix_chatflow_steps_workflow_order", "workflow_id", "step_order"),
    )

    workflow_id: Mapped[UUID] = mapped_column(
        ForeignKey("chatflow_workflows.id", ondelete="CASCADE"),
    )
    name: Mapped[str] = mapped_column(String(255))
    step_type: Mapped[StepType] = mapped_column(
        Enum(StepType, native_enum=False, length=50),
    )
    handler_key: Mapped[str] = mapped_column(String(100))
    step_order: Mapped[int] = mapped_column(Integer)
    prompt: Mapped[str] = mapped_column(Text, default="")
    dependencies: Mapped[list[str]] = mapped_column(JSONType, default=list)
    status: Mapped[StepStatus] = mapped_column(
        Enum(StepStatus, native_enum=False, length=50),
        default=StepStatus.PENDING,
    )
    state: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    user_input: Mapped[str | None] = mapped_column(Text, nullable=True)
    output: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    workflow: Mapped[ChatflowWorkflowModel] = relationship(
        back_populates="steps",
    )


class ChatflowMessageModel(UUIDAuditBase):
    """Persisted thread message.

    Attributes:
        thread_id: Identifier of the owning thread.
        position: Monotonic position of the message within its thread.
        role: Author of the message.
        content: Message text.
    """

    __tablename__ = "chatflow_messages"
    __table_args__ = (Index("ix_chatflow_messages_thread_position", "thread_id", "position"),)

    thread_id: Mapped[str] = mapped_column(String(255))
    position: Mapped[int] = mapped_column(Integer)
    role: Mapped[MessageRole] = mapped_column(
        Enum(MessageRole, native_enum=False, length=50),
    )
    content: Mapped[str] = mapped_column(Text)


class ChatflowThreadModel(UUIDAuditBase):
    """Per-thread metadata.

    Attributes:
        thread_id: Identifier of the thread.
        title: Generated thread title.
    """

    __tablename__ = "chatflow_threads"

    thread_id: Mapped[str] = mapped_column(String(255), unique=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
