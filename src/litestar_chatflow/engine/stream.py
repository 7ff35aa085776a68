"""Incremental delivery of turn messages."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from litestar_chatflow.core.events import MessageChunk, TurnDone

if TYPE_CHECKING:
    from types import TracebackType

    from litestar_chatflow.core.events import TurnEvent
    from litestar_chatflow.core.models import ThreadMessage, TurnResult
    from litestar_chatflow.engine.messages import MessageSink

__all__ = ["TurnProducer", "TurnStream"]

logger = logging.getLogger(__name__)

TurnProducer = Callable[["MessageSink"], Awaitable["TurnResult"]]


class TurnStream:
    """Async iterator over the events of one turn.

    A producer task runs the turn and pushes a :class:`MessageChunk` for every
    emitted message onto a queue, followed by a single :class:`TurnDone`. The
    producer starts on first iteration. Closing the stream cancels it.

    Example:
        >>> async with engine.stream_message("thread-1", "Press Release") as stream:
        ...     async for event in stream:
        ...         if isinstance(event, MessageChunk):
        ...             print(event.message.content)
    """

    def __init__(self, producer: TurnProducer) -> None:
        self._producer = producer
        self._queue: asyncio.Queue[TurnEvent] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None
        self._sequence = 0
        self._finished = False
        self.result: TurnResult | None = None

    async def _sink(self, message: ThreadMessage) -> None:
        await self._queue.put(MessageChunk(message, self._sequence))
        self._sequence += 1

    async def _run(self) -> None:
        try:
            result = await self._producer(self._sink)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("Streamed turn failed", exc_info=exc)
            await self._queue.put(TurnDone(error=exc))
        else:
            await self._queue.put(TurnDone(result=result))

    def _ensure_started(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    def __aiter__(self) -> TurnStream:
        return self

    async def __anext__(self) -> TurnEvent:
        if self._finished:
            raise StopAsyncIteration
        self._ensure_started()
        event = await self._queue.get()
        if isinstance(event, TurnDone):
            self._finished = True
            self.result = event.result
        return event

    async def collect(self) -> TurnResult | None:
        """Drain the stream and return the turn result."""
        async for _ in self:
            pass
        return self.result

    async def aclose(self) -> None:
        """Stop the producer and end the stream."""
        self._finished = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def __aenter__(self) -> TurnStream:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
