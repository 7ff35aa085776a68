"""Core type definitions for litestar-chatflow.

This module defines the enums shared by templates, runtime models, stores and
step handlers.
"""

from __future__ import annotations

from enum import StrEnum, auto

__all__ = [
    "MessageRole",
    "ReviewDecision",
    "StepStatus",
    "StepType",
    "TemplateKey",
    "WorkflowStatus",
]


class StepType(StrEnum):
    """Classification of steps within a workflow template.

    Attributes:
        JSON_DIALOG: Multi-turn structured information collection through the LLM.
        API_CALL: Non-interactive call to the completion service, typically asset generation.
        USER_INPUT: Free-form user input captured verbatim.
        ASSET_CREATION: Asset generation driven by previously collected information.
        GENERATE_THREAD_TITLE: Derives a short title for the conversation thread.
    """

    JSON_DIALOG = auto()
    API_CALL = auto()
    USER_INPUT = auto()
    ASSET_CREATION = auto()
    GENERATE_THREAD_TITLE = auto()


class StepStatus(StrEnum):
    """Runtime status of a step instance.

    Attributes:
        PENDING: Step is waiting for its dependencies.
        IN_PROGRESS: Step is the current step and accepts input.
        COMPLETE: Step finished successfully.
        FAILED: Step failed and cannot make progress.
    """

    PENDING = auto()
    IN_PROGRESS = auto()
    COMPLETE = auto()
    FAILED = auto()


class WorkflowStatus(StrEnum):
    """Overall status of a workflow instance.

    Attributes:
        ACTIVE: Workflow is running and owns its thread.
        COMPLETED: Every step is complete.
        FAILED: Workflow was abandoned because it can no longer make progress.
    """

    ACTIVE = auto()
    COMPLETED = auto()
    FAILED = auto()


class ReviewDecision(StrEnum):
    """Interpretation of user feedback on a generated asset.

    Attributes:
        APPROVED: User accepted the asset.
        REVISION_REQUESTED: User asked for specific changes.
        UNCLEAR: Feedback could not be interpreted either way.
    """

    APPROVED = auto()
    REVISION_REQUESTED = auto()
    UNCLEAR = auto()


class MessageRole(StrEnum):
    """Author of a thread message."""

    USER = auto()
    ASSISTANT = auto()
    SYSTEM = auto()


class TemplateKey(StrEnum):
    """Stable identifiers for the built-in workflow templates."""

    BASE = auto()
    PRESS_RELEASE = auto()
    MEDIA_PITCH = auto()
    SOCIAL_POST = auto()
    BLOG_ARTICLE = auto()
    FAQ = auto()
    QUICK_PRESS_RELEASE = auto()
    TEST_STEP_TRANSITIONS = auto()
    DUMMY = auto()
