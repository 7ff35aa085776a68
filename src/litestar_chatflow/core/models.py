"""Runtime data models for workflow instances.

These dataclasses are the records stored by a
:class:`~litestar_chatflow.core.protocols.WorkflowStore`. Stores hand out copies, so
mutating a loaded record has no effect until it is written back.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from litestar_chatflow.core.types import MessageRole, ReviewDecision, StepStatus, StepType, WorkflowStatus

if TYPE_CHECKING:
    from litestar_chatflow.core.definition import StepDefinition, WorkflowTemplate

__all__ = [
    "StepInstance",
    "StepState",
    "ThreadMessage",
    "TurnResult",
    "Workflow",
    "utcnow",
]


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class StepState:
    """Mutable runtime state of a step instance.

    Attributes:
        collected_information: Structured data accumulated across dialog turns.
        missing_information: Fields the LLM reported as still missing.
        initial_prompt_sent: Whether the step prompt has been emitted.
        awaiting_confirmation: Whether the user was asked to proceed with partial information.
        confirmation_requested_at_turn: Turn on which that question was asked.
        turn_count: Number of user turns processed by the step.
        generated_asset: Latest generated asset text.
        asset_type: Type of the generated asset.
        revision_count: Number of revisions applied during review.
        review_decision: Last interpreted review decision.
        requested_changes: Changes extracted from the last review turn.
        completed_at: When the step completed.
        error: Last error message recorded for the step.
    """

    collected_information: dict[str, Any] = field(default_factory=dict)
    missing_information: list[str] = field(default_factory=list)
    initial_prompt_sent: bool = False
    awaiting_confirmation: bool = False
    confirmation_requested_at_turn: int | None = None
    turn_count: int = 0
    generated_asset: str | None = None
    asset_type: str | None = None
    revision_count: int = 0
    review_decision: ReviewDecision | None = None
    requested_changes: list[str] = field(default_factory=list)
    completed_at: datetime | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the state to JSON-compatible primitives."""
        data = asdict(self)
        data["review_decision"] = str(self.review_decision) if self.review_decision else None
        data["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> StepState:
        """Rebuild the state from :meth:`to_dict` output, ignoring unknown keys."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if values.get("review_decision"):
            values["review_decision"] = ReviewDecision(values["review_decision"])
        if isinstance(values.get("completed_at"), str):
            values["completed_at"] = datetime.fromisoformat(values["completed_at"])
        return cls(**values)


@dataclass
class Workflow:
    """One running instance of a template bound to a conversation thread.

    Attributes:
        thread_id: Identifier of the owning conversation thread.
        template_key: Key of the template the workflow was created from.
        status: Current workflow status.
        current_step_id: Step that receives the next user message.
        id: Unique identifier of the workflow.
        created_at: When the workflow was created.
        updated_at: When the workflow was last modified.
    """

    thread_id: str
    template_key: str
    status: WorkflowStatus = WorkflowStatus.ACTIVE
    current_step_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == WorkflowStatus.ACTIVE

    @classmethod
    def from_template(cls, template: WorkflowTemplate, thread_id: str) -> Workflow:
        """Create a new active workflow for a template."""
        return cls(thread_id=thread_id, template_key=template.key)


@dataclass
class StepInstance:
    """Runtime instance of a step definition.

    Attributes:
        workflow_id: ID of the owning workflow.
        name: Step name, copied from the definition.
        step_type: Step type, copied from the definition.
        handler_key: Handler key, copied from the definition.
        order: Step order, copied from the definition.
        prompt: Prompt text. Handlers may rewrite it, for example during review.
        dependencies: Names of prerequisite steps, copied from the definition.
        status: Current step status.
        state: Mutable runtime state.
        user_input: Last user input processed by the step.
        output: Last output emitted by the step.
        id: Unique identifier of the step.
    """

    workflow_id: UUID
    name: str
    step_type: StepType
    handler_key: str
    order: int
    prompt: str = ""
    dependencies: list[str] = field(default_factory=list)
    status: StepStatus = StepStatus.PENDING
    state: StepState = field(default_factory=StepState)
    user_input: str | None = None
    output: str | None = None
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def from_definition(
        cls,
        definition: StepDefinition,
        workflow_id: UUID,
        status: StepStatus = StepStatus.PENDING,
    ) -> StepInstance:
        """Instantiate a step definition for a workflow.

        Args:
            definition: The step blueprint.
            workflow_id: ID of the owning workflow.
            status: Initial status.

        Returns:
            A new step instance.
        """
        return cls(
            workflow_id=workflow_id,
            name=definition.name,
            step_type=definition.type,
            handler_key=definition.handler_key,
            order=definition.order,
            prompt=definition.prompt,
            dependencies=list(definition.dependencies),
            status=status,
        )

    @property
    def is_complete(self) -> bool:
        return self.status == StepStatus.COMPLETE


@dataclass
class ThreadMessage:
    """A role-tagged message in a conversation thread.

    Attributes:
        thread_id: Identifier of the owning thread.
        role: Author of the message.
        content: Message text.
        id: Unique identifier of the message.
        created_at: When the message was appended.
    """

    thread_id: str
    role: MessageRole
    content: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class TurnResult:
    """Outcome of processing one inbound user message.

    Attributes:
        thread_id: Thread the turn belongs to.
        messages: Messages emitted to the thread during the turn, in order.
        workflow: The active workflow after the turn, if any.
        current_step: The current step of that workflow, if any.
        completed_workflows: IDs of workflows that completed during the turn.
    """

    thread_id: str
    messages: list[ThreadMessage] = field(default_factory=list)
    workflow: Workflow | None = None
    current_step: StepInstance | None = None
    completed_workflows: list[UUID] = field(default_factory=list)

    @property
    def reply(self) -> str:
        """All emitted message contents joined into one reply."""
        return "\n\n".join(message.content for message in self.messages)
