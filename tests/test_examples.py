"""Integration tests for example applications.

Tests the minimal example app using Litestar's test client to verify
end-to-end functionality without calling the completion service.
"""

from __future__ import annotations

import pytest
from litestar.testing import AsyncTestClient

# =============================================================================
# Minimal App Tests
# =============================================================================


@pytest.mark.integration
class TestMinimalApp:
    """Integration tests for the minimal example app."""

    @pytest.fixture
    def minimal_app(self, monkeypatch: pytest.MonkeyPatch):
        """Import and return the minimal example app."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        from examples.minimal.app import app

        return app

    async def test_health_check(self, minimal_app):
        """Test health check endpoint."""
        async with AsyncTestClient(app=minimal_app) as client:
            response = await client.get("/health")

            assert response.status_code == 200
            assert response.json()["status"] == "healthy"

    async def test_list_templates(self, minimal_app):
        """Test listing registered templates."""
        async with AsyncTestClient(app=minimal_app) as client:
            response = await client.get("/chatflow/templates")

            assert response.status_code == 200
            names = [t["name"] for t in response.json()]
            assert "Press Release" in names
            assert "Base Workflow" in names

    async def test_start_press_release(self, minimal_app):
        """Test starting a workflow returns its first prompt."""
        from litestar_chatflow.templates.builtin import PRESS_RELEASE_TEMPLATE

        async with AsyncTestClient(app=minimal_app) as client:
            response = await client.post(
                "/chatflow/threads/example-thread/workflows",
                json={"template_key": "press_release"},
            )

            assert response.status_code == 201
            assert response.json()["messages"][0]["content"] == PRESS_RELEASE_TEMPLATE.steps[0].prompt

    async def test_stream_chat(self, minimal_app):
        """Test the streaming endpoint delivers the turn's replies."""
        from litestar_chatflow.steps.dialog import CANCEL_REPLY

        async with AsyncTestClient(app=minimal_app) as client:
            response = await client.post("/chat/stream-thread/stream", json={"content": "cancel"})

            assert response.status_code == 201
            assert CANCEL_REPLY in response.text
