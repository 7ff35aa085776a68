"""Handler table mapping handler keys to step handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar_chatflow.core.types import StepType
from litestar_chatflow.exceptions import UnknownStepHandlerError
from litestar_chatflow.steps.dialog import JsonDialogHandler, WorkflowSelectionHandler
from litestar_chatflow.steps.generation import AssetGenerationHandler
from litestar_chatflow.steps.review import AssetReviewHandler
from litestar_chatflow.steps.title import ThreadTitleHandler
from litestar_chatflow.steps.user_input import UserInputHandler

if TYPE_CHECKING:
    from litestar_chatflow.steps.base import BaseStepHandler

__all__ = ["HandlerRegistry"]


class HandlerRegistry:
    """Registry of step handlers keyed by handler key.

    Step definitions without an explicit handler use their step type as key, so
    the default table registers one handler per :class:`StepType` plus the
    role-specific ``workflow_selection`` and ``asset_review`` handlers.
    """

    def __init__(self, handlers: dict[str, BaseStepHandler] | None = None) -> None:
        self._handlers: dict[str, BaseStepHandler] = dict(handlers or {})

    @classmethod
    def default(cls) -> HandlerRegistry:
        """Create a registry with the built-in handlers."""
        generation = AssetGenerationHandler()
        return cls(
            {
                StepType.JSON_DIALOG: JsonDialogHandler(),
                StepType.API_CALL: generation,
                StepType.ASSET_CREATION: generation,
                StepType.USER_INPUT: UserInputHandler(),
                StepType.GENERATE_THREAD_TITLE: ThreadTitleHandler(),
                WorkflowSelectionHandler.key: WorkflowSelectionHandler(),
                AssetReviewHandler.key: AssetReviewHandler(),
            }
        )

    def register(self, key: str, handler: BaseStepHandler) -> None:
        """Register or replace the handler for a key."""
        self._handlers[str(key)] = handler

    def get(self, key: str) -> BaseStepHandler:
        """Get the handler for a key.

        Raises:
            UnknownStepHandlerError: If no handler is registered for ``key``.
        """
        try:
            return self._handlers[str(key)]
        except KeyError:
            raise UnknownStepHandlerError(str(key)) from None

    def __contains__(self, key: object) -> bool:
        return str(key) in self._handlers
