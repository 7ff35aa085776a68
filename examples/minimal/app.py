"""Minimal example of litestar-chatflow integration.

This example mounts the ChatflowPlugin REST API and adds a streaming chat
endpoint on top of the injected engine. The Anthropic completion service is
configured from ``ANTHROPIC_API_KEY`` and ``CHATFLOW_*`` environment variables.

Run with:
    cd examples/minimal
    litestar run

Or:
    uvicorn app:app --reload

Then:
    curl -X POST localhost:8000/chatflow/threads/demo/messages -d '{"content": "I need a press release"}'
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from litestar import Litestar, get, post
from litestar.response import Stream

from litestar_chatflow import (
    ChatflowEngine,
    ChatflowPlugin,
    ChatflowPluginConfig,
    MessageChunk,
    TurnDone,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Streaming Chat
# =============================================================================


@post("/chat/{thread_id:str}/stream")
async def stream_chat(
    thread_id: str,
    data: dict[str, str],
    chatflow_engine: ChatflowEngine,
) -> Stream:
    """Stream the replies of one turn as newline-delimited text."""

    async def replies() -> AsyncIterator[str]:
        async with chatflow_engine.stream_message(thread_id, data["content"]) as stream:
            async for event in stream:
                if isinstance(event, MessageChunk):
                    yield event.message.content + "\n"
                elif isinstance(event, TurnDone) and event.error is not None:
                    logger.error("Turn on thread %s failed: %s", thread_id, event.error)

    return Stream(replies(), media_type="text/plain")


# =============================================================================
# Health Check (for testing)
# =============================================================================


@get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# =============================================================================
# Application
# =============================================================================

plugin_config = ChatflowPluginConfig(api_path_prefix="/chatflow")

app = Litestar(
    route_handlers=[stream_chat, health_check],
    plugins=[ChatflowPlugin(config=plugin_config)],
    debug=True,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
