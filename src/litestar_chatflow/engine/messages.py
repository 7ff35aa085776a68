"""Thread message emission with bookkeeping prefixes and duplicate suppression."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from litestar_chatflow.core.models import ThreadMessage
from litestar_chatflow.core.types import MessageRole

if TYPE_CHECKING:
    from litestar_chatflow.core.models import TurnResult
    from litestar_chatflow.core.protocols import WorkflowStore

__all__ = ["STATUS_PREFIX", "SYSTEM_PREFIX", "MessageSink", "ThreadMessenger", "bookkeeping_prefix"]

logger = logging.getLogger(__name__)

STATUS_PREFIX = "[Workflow Status]"
SYSTEM_PREFIX = "[System]"

MessageSink = Callable[[ThreadMessage], Awaitable[None]]

_STATUS_CONTAINS = ('Step "', "Proceeding to step", "completed")
_STATUS_STARTS = ("Processing workflow", "Selected workflow", "Workflow selected", "Announcement type")
_SYSTEM_CONTAINS = ("generating", "regenerating", "revising", "creating", "this may take a moment", "processing")


def bookkeeping_prefix(content: str) -> str | None:
    """Classify a direct message as a status or system message.

    Args:
        content: The message text.

    Returns:
        :data:`STATUS_PREFIX`, :data:`SYSTEM_PREFIX` or None for a regular message.

    Example:
        >>> bookkeeping_prefix("Selected workflow: Press Release")
        '[Workflow Status]'
        >>> bookkeeping_prefix("Generating your press release now. This may take a moment...")
        '[System]'
    """
    if content.startswith((STATUS_PREFIX, SYSTEM_PREFIX)):
        return None
    if content.startswith(_STATUS_STARTS) or any(marker in content for marker in _STATUS_CONTAINS):
        return STATUS_PREFIX
    lowered = content.lower()
    if any(marker in lowered for marker in _SYSTEM_CONTAINS):
        return SYSTEM_PREFIX
    return None


class ThreadMessenger:
    """Appends messages to one thread during a turn.

    Messages identical to one of the last ``duplicate_window`` messages of the
    thread are dropped. Every emitted message is recorded on the turn result and
    forwarded to the optional sink, which is how streaming callers see messages as
    they are produced.

    Attributes:
        thread_id: The thread messages are appended to.
        duplicate_window: Number of recent messages checked for duplicates.
    """

    def __init__(
        self,
        store: WorkflowStore,
        thread_id: str,
        result: TurnResult,
        *,
        duplicate_window: int = 5,
        sink: MessageSink | None = None,
    ) -> None:
        """Initialize the messenger.

        Args:
            store: Store holding the thread messages.
            thread_id: The thread messages are appended to.
            result: Turn result collecting the emitted messages.
            duplicate_window: Number of recent messages checked for duplicates.
            sink: Optional coroutine called with each emitted message.
        """
        self._store = store
        self._result = result
        self._sink = sink
        self.thread_id = thread_id
        self.duplicate_window = duplicate_window

    async def record_user(self, content: str) -> ThreadMessage:
        """Append the inbound user message. User messages are never deduplicated."""
        return await self._store.append_message(ThreadMessage(self.thread_id, MessageRole.USER, content))

    async def emit(self, content: str, role: MessageRole = MessageRole.ASSISTANT) -> ThreadMessage | None:
        """Append an outbound message unless it duplicates a recent one.

        Args:
            content: The message text.
            role: The message author.

        Returns:
            The appended message, or None if it was empty or a duplicate.
        """
        content = content.strip()
        if not content:
            return None

        recent = await self._store.recent_messages(self.thread_id, self.duplicate_window)
        if any(message.content == content for message in recent):
            logger.warning("Suppressed duplicate message in thread %s", self.thread_id)
            return None

        message = await self._store.append_message(ThreadMessage(self.thread_id, role, content))
        self._result.messages.append(message)
        if self._sink is not None:
            await self._sink(message)
        return message

    async def status(self, content: str) -> ThreadMessage | None:
        """Emit a ``[Workflow Status]`` bookkeeping message."""
        return await self.emit(f"{STATUS_PREFIX} {content}", MessageRole.SYSTEM)

    async def system(self, content: str) -> ThreadMessage | None:
        """Emit a ``[System]`` bookkeeping message."""
        return await self.emit(f"{SYSTEM_PREFIX} {content}", MessageRole.SYSTEM)

    async def direct(self, content: str) -> ThreadMessage | None:
        """Emit a message, prefixing it when it reads like bookkeeping."""
        prefix = bookkeeping_prefix(content)
        if prefix is None:
            return await self.emit(content)
        return await self.emit(f"{prefix} {content}", MessageRole.SYSTEM)

    async def history(self, limit: int) -> list[ThreadMessage]:
        """Return the last ``limit`` thread messages, oldest first."""
        if limit <= 0:
            return []
        return await self._store.recent_messages(self.thread_id, limit)
