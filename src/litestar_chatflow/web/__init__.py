"""REST API for litestar-chatflow.

The controllers are mounted by :class:`~litestar_chatflow.plugin.ChatflowPlugin`
when ``enable_api`` is set.
"""

from __future__ import annotations

from litestar_chatflow.web.controllers import TemplateController, ThreadController, WorkflowController
from litestar_chatflow.web.dto import (
    MessageDTO,
    PostMessageDTO,
    StartWorkflowDTO,
    StepDTO,
    TemplateDTO,
    TurnResultDTO,
    WorkflowDetailDTO,
    WorkflowDTO,
)
from litestar_chatflow.web.exceptions import chatflow_error_handler

__all__ = [
    "MessageDTO",
    "PostMessageDTO",
    "StartWorkflowDTO",
    "StepDTO",
    "TemplateController",
    "TemplateDTO",
    "ThreadController",
    "TurnResultDTO",
    "WorkflowController",
    "WorkflowDTO",
    "WorkflowDetailDTO",
    "chatflow_error_handler",
]
