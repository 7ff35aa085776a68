"""Litestar Chatflow - Conversational LLM workflows for Litestar.

This package runs multi-step, LLM-driven workflows inside chat threads. Each
user message advances the thread's active workflow: information is collected
through a JSON dialog, assets are generated and revised until approved, and
completed workflows chain into their successors.

Key Features:
    - Template registry with fuzzy workflow selection by name
    - JSON dialog protocol with weighted completion tracking
    - Auto-executed generation steps and an approve/revise review loop
    - Per-thread serialized turns with incremental message streaming
    - In-memory and SQLAlchemy workflow stores
    - Litestar plugin with a REST API

Example:
    >>> from litestar_chatflow import ChatflowEngine, InMemoryWorkflowStore
    >>>
    >>> engine = ChatflowEngine(store=InMemoryWorkflowStore(), completion=completion)
    >>> result = await engine.handle_message("thread-1", "I need a press release")
    >>> print(result.reply)
"""

from __future__ import annotations

from litestar_chatflow.__metadata__ import __project__, __version__
from litestar_chatflow.completion import AnthropicCompletionService, CompletionOptions
from litestar_chatflow.config import ChatflowConfig
from litestar_chatflow.core import (
    MessageChunk,
    MessageRole,
    ReviewDecision,
    StepConfig,
    StepDefinition,
    StepInstance,
    StepStatus,
    StepType,
    TemplateKey,
    ThreadMessage,
    TurnDone,
    TurnResult,
    Workflow,
    WorkflowStatus,
    WorkflowTemplate,
)
from litestar_chatflow.engine import ChatflowEngine, TurnStream
from litestar_chatflow.exceptions import (
    ChatflowError,
    CompletionServiceError,
    InconsistentWorkflowError,
    MalformedResponseError,
    StepNotFoundError,
    TemplateNotFoundError,
    TemplateValidationError,
    UnknownStepHandlerError,
    WorkflowNotFoundError,
)
from litestar_chatflow.plugin import ChatflowPlugin, ChatflowPluginConfig
from litestar_chatflow.queue import LocalJobQueue, RetryPolicy
from litestar_chatflow.store import InMemoryWorkflowStore
from litestar_chatflow.templates import TemplateRegistry

__all__ = (
    "AnthropicCompletionService",
    "ChatflowConfig",
    "ChatflowEngine",
    "ChatflowError",
    "ChatflowPlugin",
    "ChatflowPluginConfig",
    "CompletionOptions",
    "CompletionServiceError",
    "InMemoryWorkflowStore",
    "InconsistentWorkflowError",
    "LocalJobQueue",
    "MalformedResponseError",
    "MessageChunk",
    "MessageRole",
    "RetryPolicy",
    "ReviewDecision",
    "StepConfig",
    "StepDefinition",
    "StepInstance",
    "StepNotFoundError",
    "StepStatus",
    "StepType",
    "TemplateKey",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "TemplateValidationError",
    "ThreadMessage",
    "TurnDone",
    "TurnResult",
    "TurnStream",
    "UnknownStepHandlerError",
    "Workflow",
    "WorkflowNotFoundError",
    "WorkflowStatus",
    "WorkflowTemplate",
    "__project__",
    "__version__",
)
