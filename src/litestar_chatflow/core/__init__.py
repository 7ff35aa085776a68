"""Core building blocks of litestar-chatflow: types, templates, models and protocols."""

from __future__ import annotations

from litestar_chatflow.core.definition import StepConfig, StepDefinition, WorkflowTemplate
from litestar_chatflow.core.events import MessageChunk, TurnDone, TurnEvent
from litestar_chatflow.core.models import StepInstance, StepState, ThreadMessage, TurnResult, Workflow
from litestar_chatflow.core.protocols import CompletionService, JobQueue, WorkflowStore
from litestar_chatflow.core.types import (
    MessageRole,
    ReviewDecision,
    StepStatus,
    StepType,
    TemplateKey,
    WorkflowStatus,
)

__all__ = [
    "CompletionService",
    "JobQueue",
    "MessageChunk",
    "MessageRole",
    "ReviewDecision",
    "StepConfig",
    "StepDefinition",
    "StepInstance",
    "StepState",
    "StepStatus",
    "StepType",
    "TemplateKey",
    "ThreadMessage",
    "TurnDone",
    "TurnEvent",
    "TurnResult",
    "Workflow",
    "WorkflowStatus",
    "WorkflowStore",
    "WorkflowTemplate",
]
