"""Tests for streamed turns."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from litestar_chatflow.engine.engine import ChatflowEngine


@pytest.mark.unit
@pytest.mark.asyncio
class TestTurnStream:
    """Tests for TurnStream."""

    async def test_stream_yields_chunks_then_done(self, engine: ChatflowEngine) -> None:
        """Test messages arrive as numbered chunks followed by TurnDone."""
        from litestar_chatflow.core.events import MessageChunk, TurnDone
        from litestar_chatflow.templates.builtin import DUMMY_TEMPLATE

        async with engine.stream_message("t", "Dummy Workflow") as stream:
            events = [event async for event in stream]

        assert isinstance(events[-1], TurnDone)
        chunks = [event for event in events if isinstance(event, MessageChunk)]
        assert [chunk.sequence for chunk in chunks] == list(range(len(chunks)))
        assert chunks[-1].message.content == DUMMY_TEMPLATE.steps[0].prompt
        assert stream.result is events[-1].result
        assert stream.result is not None
        assert [m.content for m in stream.result.messages] == [c.message.content for c in chunks]

    async def test_collect(self, engine: ChatflowEngine) -> None:
        """Test collect drains the stream and returns the result."""
        result = await engine.stream_message("t", "Dummy Workflow").collect()

        assert result is not None
        assert result.workflow.template_key == "dummy"  # type: ignore[union-attr]

    async def test_failed_turn_ends_with_error(self, engine: ChatflowEngine) -> None:
        """Test a failing turn is reported on the closing event."""
        from litestar_chatflow.core.events import TurnDone
        from litestar_chatflow.exceptions import TemplateNotFoundError

        engine.config.default_template = "missing"

        events = [event async for event in engine.stream_message("t", "hello")]

        assert len(events) == 1
        assert isinstance(events[0], TurnDone)
        assert events[0].result is None
        assert isinstance(events[0].error, TemplateNotFoundError)

    async def test_aclose_cancels_producer(self) -> None:
        """Test closing a stream cancels a running producer."""
        from litestar_chatflow.engine.stream import TurnStream

        started = asyncio.Event()

        async def producer(sink):
            started.set()
            await asyncio.sleep(10)

        stream = TurnStream(producer)
        waiter = asyncio.ensure_future(stream.__anext__())
        await started.wait()
        await stream.aclose()
        waiter.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await waiter

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()
