"""Base classes for step handlers.

A step handler implements one step role. The engine looks the handler up by the
step's handler key and calls :meth:`BaseStepHandler.process_turn` with the user's
input, or with the synthetic input :data:`AUTO_EXECUTE_INPUT` when the step runs
automatically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from litestar_chatflow.core.models import StepInstance
    from litestar_chatflow.engine.context import TurnContext

__all__ = ["AUTO_EXECUTE_INPUT", "BaseStepHandler", "StepOutcome"]

AUTO_EXECUTE_INPUT = "auto-execute"


@dataclass(frozen=True)
class StepOutcome:
    """Result of a handler processing one input.

    Attributes:
        is_complete: Whether the step is complete.
        suggested_next_step: Step the handler suggests running next.
    """

    is_complete: bool
    suggested_next_step: str | None = None

    @classmethod
    def complete(cls, suggested_next_step: str | None = None) -> StepOutcome:
        return cls(True, suggested_next_step)

    @classmethod
    def waiting(cls) -> StepOutcome:
        return cls(False)


class BaseStepHandler:
    """Base class for step handlers.

    Handlers are stateless. Everything they change lives on the step instance,
    which the engine persists after the call. Status changes are applied by the
    engine based on the returned :class:`StepOutcome`.

    Attributes:
        key: Handler key the handler is registered under by default.

    Example:
        >>> class EchoHandler(BaseStepHandler):
        ...     key = "echo"
        ...
        ...     async def process_turn(self, turn, step, user_input):
        ...         await turn.messenger.emit(user_input)
        ...         return StepOutcome.complete()
    """

    key: ClassVar[str] = ""

    async def process_turn(self, turn: TurnContext, step: StepInstance, user_input: str) -> StepOutcome:
        """Process one input for a step.

        Args:
            turn: The current turn context.
            step: The step instance. Handlers update its state in place.
            user_input: The user's message or :data:`AUTO_EXECUTE_INPUT`.

        Returns:
            The outcome of the call.

        Raises:
            CompletionServiceError: If a required completion call fails and the
                handler has no conversational fallback.
        """
        raise NotImplementedError

    @staticmethod
    def is_auto(user_input: str) -> bool:
        return user_input == AUTO_EXECUTE_INPUT
