"""Workflow execution engine."""

from __future__ import annotations

from litestar_chatflow.engine.context import EngineServices, TurnContext
from litestar_chatflow.engine.dispatcher import AutoExecutionDispatcher
from litestar_chatflow.engine.engine import WORKFLOW_COMPLETED_JOB, ChatflowEngine
from litestar_chatflow.engine.messages import STATUS_PREFIX, SYSTEM_PREFIX, MessageSink, ThreadMessenger
from litestar_chatflow.engine.resolver import DependencyResolver
from litestar_chatflow.engine.stream import TurnStream
from litestar_chatflow.engine.transitions import WorkflowTransitionManager

__all__ = [
    "STATUS_PREFIX",
    "SYSTEM_PREFIX",
    "WORKFLOW_COMPLETED_JOB",
    "AutoExecutionDispatcher",
    "ChatflowEngine",
    "DependencyResolver",
    "EngineServices",
    "MessageSink",
    "ThreadMessenger",
    "TurnContext",
    "TurnStream",
    "WorkflowTransitionManager",
]
