"""Events produced while a turn is streamed to the caller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from litestar_chatflow.core.models import ThreadMessage, TurnResult

__all__ = ["MessageChunk", "TurnDone", "TurnEvent"]


@dataclass(frozen=True)
class MessageChunk:
    """A message emitted to the thread while the turn is still running.

    Attributes:
        message: The emitted thread message.
        sequence: Zero-based position of the message within the turn.
    """

    message: ThreadMessage
    sequence: int


@dataclass(frozen=True)
class TurnDone:
    """Sentinel closing a turn stream.

    Attributes:
        result: The complete turn result, or None if the turn failed.
        error: The exception that ended the turn, if any.
    """

    result: TurnResult | None = None
    error: BaseException | None = None


TurnEvent = MessageChunk | TurnDone
