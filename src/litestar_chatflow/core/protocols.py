"""Core protocols for litestar-chatflow.

The engine talks to its collaborators only through these Protocol interfaces, which
lets applications plug in their own storage, LLM client and background queue, and
lets tests substitute fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from litestar_chatflow.completion.base import CompletionOptions
    from litestar_chatflow.core.models import StepInstance, ThreadMessage, Workflow
    from litestar_chatflow.queue.base import RetryPolicy

__all__ = ["CompletionService", "JobQueue", "WorkflowStore"]


@runtime_checkable
class WorkflowStore(Protocol):
    """Record store for workflows, steps and thread messages.

    Implementations must return copies from every read so that callers never share
    mutable state across turns. ``get_*`` methods return ``None`` for unknown IDs.
    """

    async def create_workflow(self, workflow: Workflow) -> Workflow:
        """Persist a new workflow."""
        ...

    async def get_workflow(self, workflow_id: UUID) -> Workflow | None:
        """Load a workflow by ID."""
        ...

    async def list_workflows_for_thread(self, thread_id: str) -> list[Workflow]:
        """List all workflows of a thread, oldest first."""
        ...

    async def update_workflow(self, workflow: Workflow) -> Workflow:
        """Write back a modified workflow."""
        ...

    async def delete_workflow(self, workflow_id: UUID) -> None:
        """Delete a workflow together with its steps."""
        ...

    async def create_step(self, step: StepInstance) -> StepInstance:
        """Persist a new step instance."""
        ...

    async def get_step(self, step_id: UUID) -> StepInstance | None:
        """Load a step by ID."""
        ...

    async def list_steps(self, workflow_id: UUID) -> list[StepInstance]:
        """List the steps of a workflow in ascending order."""
        ...

    async def update_step(self, step: StepInstance) -> StepInstance:
        """Write back a modified step."""
        ...

    async def append_message(self, message: ThreadMessage) -> ThreadMessage:
        """Append a message to its thread."""
        ...

    async def recent_messages(self, thread_id: str, limit: int) -> list[ThreadMessage]:
        """Return the last ``limit`` messages of a thread, oldest first."""
        ...

    async def set_thread_title(self, thread_id: str, title: str) -> None:
        """Store the title of a thread."""
        ...

    async def get_thread_title(self, thread_id: str) -> str | None:
        """Return the title of a thread, if one was generated."""
        ...


@runtime_checkable
class CompletionService(Protocol):
    """External text-generation capability.

    Example:
        >>> class EchoCompletion:
        ...     async def complete(self, system_instructions, user_text, options=None):
        ...         return user_text
    """

    async def complete(
        self,
        system_instructions: str,
        user_text: str,
        options: CompletionOptions | None = None,
    ) -> str:
        """Generate text for the given instructions and user input.

        Args:
            system_instructions: System prompt for the model.
            user_text: The user message.
            options: Optional per-call settings.

        Returns:
            The raw generated text.

        Raises:
            CompletionServiceError: If the call fails or times out.
        """
        ...


@runtime_checkable
class JobQueue(Protocol):
    """Handle to a background job queue used for post-turn side effects."""

    async def enqueue(
        self,
        job_type: str,
        payload: dict[str, Any],
        retry_policy: RetryPolicy | None = None,
    ) -> Any:
        """Schedule a job.

        Args:
            job_type: Name of the job, for example ``"asset.generated"``.
            payload: JSON-compatible job arguments.
            retry_policy: Optional retry settings overriding the queue default.

        Returns:
            An implementation-specific job handle.
        """
        ...

    async def close(self) -> None:
        """Stop accepting jobs and release resources."""
        ...
