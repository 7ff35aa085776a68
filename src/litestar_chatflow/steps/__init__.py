"""Step handlers, one per step role."""

from __future__ import annotations

from litestar_chatflow.steps.base import AUTO_EXECUTE_INPUT, BaseStepHandler, StepOutcome
from litestar_chatflow.steps.dialog import JsonDialogHandler, WorkflowSelectionHandler
from litestar_chatflow.steps.generation import AssetGenerationHandler
from litestar_chatflow.steps.registry import HandlerRegistry
from litestar_chatflow.steps.review import AssetReviewHandler
from litestar_chatflow.steps.title import ThreadTitleHandler
from litestar_chatflow.steps.user_input import UserInputHandler

__all__ = [
    "AUTO_EXECUTE_INPUT",
    "AssetGenerationHandler",
    "AssetReviewHandler",
    "BaseStepHandler",
    "HandlerRegistry",
    "JsonDialogHandler",
    "StepOutcome",
    "ThreadTitleHandler",
    "UserInputHandler",
    "WorkflowSelectionHandler",
]
