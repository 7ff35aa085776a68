"""Exception hierarchy for litestar-chatflow."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

__all__ = (
    "ChatflowError",
    "CompletionServiceError",
    "InconsistentWorkflowError",
    "MalformedResponseError",
    "StepNotFoundError",
    "TemplateNotFoundError",
    "TemplateValidationError",
    "UnknownStepHandlerError",
    "WorkflowNotFoundError",
)


class ChatflowError(Exception):
    """Base exception for all litestar-chatflow errors.

    All exceptions raised by litestar-chatflow inherit from this class, so callers
    can catch every engine-related error with a single except clause.
    """


class TemplateNotFoundError(ChatflowError):
    """Raised when a workflow template cannot be found in the registry.

    Attributes:
        key: The template key or name that was requested.
    """

    def __init__(self, key: str) -> None:
        """Initialize the exception with the missing template key.

        Args:
            key: The template key or name that was requested.
        """
        self.key = key
        super().__init__(f"Workflow template '{key}' not found")


class TemplateValidationError(ChatflowError):
    """Raised when a workflow template fails structural validation.

    Attributes:
        key: The key of the invalid template.
        errors: List of validation error messages.
    """

    def __init__(self, key: str, errors: Sequence[str]) -> None:
        """Initialize the exception with validation errors.

        Args:
            key: The key of the invalid template.
            errors: List of validation error messages.
        """
        self.key = key
        self.errors = list(errors)
        error_list = "\n  - ".join(self.errors)
        super().__init__(f"Template '{key}' is invalid:\n  - {error_list}")


class WorkflowNotFoundError(ChatflowError):
    """Raised when a workflow instance does not exist in the store.

    Attributes:
        workflow_id: The ID of the workflow that was not found.
    """

    def __init__(self, workflow_id: UUID | str) -> None:
        """Initialize the exception with the missing workflow ID.

        Args:
            workflow_id: The ID of the workflow that was not found.
        """
        self.workflow_id = workflow_id
        super().__init__(f"Workflow '{workflow_id}' not found")


class StepNotFoundError(ChatflowError):
    """Raised when a step instance cannot be found.

    Attributes:
        step: The step ID or name that was requested.
        workflow_id: The owning workflow, if known.
    """

    def __init__(self, step: UUID | str, workflow_id: UUID | str | None = None) -> None:
        """Initialize the exception with step details.

        Args:
            step: The step ID or name that was requested.
            workflow_id: The owning workflow, if known.
        """
        self.step = step
        self.workflow_id = workflow_id
        msg = f"Step '{step}' not found"
        if workflow_id is not None:
            msg += f" in workflow '{workflow_id}'"
        super().__init__(msg)


class InconsistentWorkflowError(ChatflowError):
    """Raised when a workflow has incomplete steps but none of them can run.

    This signals a dependency graph that can no longer make progress, for example
    a pending step that depends on a failed one.

    Attributes:
        workflow_id: The ID of the stuck workflow.
        blocked_steps: Names of the steps that are not complete.
    """

    def __init__(self, workflow_id: UUID | str, blocked_steps: Sequence[str]) -> None:
        """Initialize the exception with the blocked steps.

        Args:
            workflow_id: The ID of the stuck workflow.
            blocked_steps: Names of the steps that are not complete.
        """
        self.workflow_id = workflow_id
        self.blocked_steps = list(blocked_steps)
        super().__init__(
            f"Workflow '{workflow_id}' has no eligible step but is not complete "
            f"(blocked: {', '.join(self.blocked_steps)})"
        )


class CompletionServiceError(ChatflowError):
    """Raised when the completion service fails or times out.

    Attributes:
        reason: Short description of the failure.
    """

    def __init__(self, reason: str) -> None:
        """Initialize the exception with the failure reason.

        Args:
            reason: Short description of the failure.
        """
        self.reason = reason
        super().__init__(f"Completion service failed: {reason}")


class UnknownStepHandlerError(ChatflowError):
    """Raised when no step handler is registered for a handler key.

    Attributes:
        handler_key: The handler key that could not be resolved.
    """

    def __init__(self, handler_key: str) -> None:
        """Initialize the exception with the handler key.

        Args:
            handler_key: The handler key that could not be resolved.
        """
        self.handler_key = handler_key
        super().__init__(f"No step handler registered for '{handler_key}'")


class MalformedResponseError(ChatflowError):
    """Raised when a completion does not match the expected JSON contract.

    Always recovered locally by the caller with a conservative fallback.

    Attributes:
        raw: The raw completion text.
        reason: Why parsing failed.
    """

    def __init__(self, raw: str, reason: str) -> None:
        """Initialize the exception with the offending response.

        Args:
            raw: The raw completion text.
            reason: Why parsing failed.
        """
        self.raw = raw
        self.reason = reason
        super().__init__(f"Malformed completion response: {reason}")
