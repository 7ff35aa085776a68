"""Data Transfer Objects for the chatflow web API.

This module defines DTOs for serializing and deserializing chatflow data
in REST API requests and responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from litestar_chatflow.core.definition import WorkflowTemplate
    from litestar_chatflow.core.models import StepInstance, ThreadMessage, TurnResult, Workflow

__all__ = [
    "MessageDTO",
    "PostMessageDTO",
    "StartWorkflowDTO",
    "StepDTO",
    "TemplateDTO",
    "TurnResultDTO",
    "WorkflowDTO",
    "WorkflowDetailDTO",
]


@dataclass
class PostMessageDTO:
    """DTO for an inbound user message.

    Attributes:
        content: The message text.
    """

    content: str


@dataclass
class StartWorkflowDTO:
    """DTO for explicitly starting a workflow on a thread.

    Attributes:
        template_key: Key of the template to start.
        silent: Create the workflow without emitting its first prompt.
    """

    template_key: str
    silent: bool = False


@dataclass
class MessageDTO:
    """DTO for a thread message.

    Attributes:
        id: Message ID.
        role: Author of the message.
        content: Message text.
        created_at: When the message was appended.
    """

    id: UUID
    role: str
    content: str
    created_at: datetime

    @classmethod
    def from_message(cls, message: ThreadMessage) -> MessageDTO:
        return cls(id=message.id, role=str(message.role), content=message.content, created_at=message.created_at)


@dataclass
class StepDTO:
    """DTO for a step instance.

    Attributes:
        id: Step ID.
        name: Step name.
        step_type: Step type.
        order: Position within the workflow.
        status: Current status.
        prompt: Prompt shown to the user.
        collected_information: Information collected so far.
        revision_count: Number of review revisions.
    """

    id: UUID
    name: str
    step_type: str
    order: int
    status: str
    prompt: str
    collected_information: dict[str, Any] = field(default_factory=dict)
    revision_count: int = 0

    @classmethod
    def from_step(cls, step: StepInstance) -> StepDTO:
        return cls(
            id=step.id,
            name=step.name,
            step_type=str(step.step_type),
            order=step.order,
            status=str(step.status),
            prompt=step.prompt,
            collected_information=dict(step.state.collected_information),
            revision_count=step.state.revision_count,
        )


@dataclass
class WorkflowDTO:
    """DTO for workflow summary information.

    Attributes:
        id: Workflow ID.
        thread_id: Owning thread.
        template_key: Template the workflow was created from.
        status: Current status.
        current_step_id: Step that receives the next user message.
        created_at: When the workflow was created.
        updated_at: When the workflow was last modified.
    """

    id: UUID
    thread_id: str
    template_key: str
    status: str
    current_step_id: UUID | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_workflow(cls, workflow: Workflow) -> WorkflowDTO:
        return cls(
            id=workflow.id,
            thread_id=workflow.thread_id,
            template_key=str(workflow.template_key),
            status=str(workflow.status),
            current_step_id=workflow.current_step_id,
            created_at=workflow.created_at,
            updated_at=workflow.updated_at,
        )


@dataclass
class WorkflowDetailDTO:
    """DTO for a workflow with its steps.

    Attributes:
        workflow: Workflow summary.
        steps: Steps in ascending order.
    """

    workflow: WorkflowDTO
    steps: list[StepDTO]

    @classmethod
    def from_records(cls, workflow: Workflow, steps: list[StepInstance]) -> WorkflowDetailDTO:
        return cls(workflow=WorkflowDTO.from_workflow(workflow), steps=[StepDTO.from_step(s) for s in steps])


@dataclass
class TurnResultDTO:
    """DTO for the outcome of one user turn.

    Attributes:
        thread_id: The thread.
        messages: Messages emitted during the turn.
        workflow: Active workflow after the turn.
        current_step: Current step of that workflow.
        completed_workflows: IDs of workflows completed during the turn.
    """

    thread_id: str
    messages: list[MessageDTO]
    workflow: WorkflowDTO | None = None
    current_step: StepDTO | None = None
    completed_workflows: list[UUID] = field(default_factory=list)

    @classmethod
    def from_result(cls, result: TurnResult) -> TurnResultDTO:
        return cls(
            thread_id=result.thread_id,
            messages=[MessageDTO.from_message(m) for m in result.messages],
            workflow=WorkflowDTO.from_workflow(result.workflow) if result.workflow else None,
            current_step=StepDTO.from_step(result.current_step) if result.current_step else None,
            completed_workflows=list(result.completed_workflows),
        )


@dataclass
class TemplateDTO:
    """DTO for workflow template metadata.

    Attributes:
        key: Template key.
        name: Display name.
        description: Human-readable description.
        steps: Step names in order.
        is_selection: Whether the template is a selection template.
        next_template: Template started after completion.
    """

    key: str
    name: str
    description: str
    steps: list[str]
    is_selection: bool
    next_template: str | None

    @classmethod
    def from_template(cls, template: WorkflowTemplate) -> TemplateDTO:
        return cls(
            key=str(template.key),
            name=template.name,
            description=template.description,
            steps=list(template.step_names),
            is_selection=template.is_selection,
            next_template=str(template.next_template) if template.next_template else None,
        )
