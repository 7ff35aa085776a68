"""Tests for engine configuration."""

from __future__ import annotations

import pytest


@pytest.mark.unit
class TestChatflowConfig:
    """Tests for ChatflowConfig."""

    def test_defaults(self) -> None:
        """Test default configuration values."""
        from litestar_chatflow.config import ChatflowConfig
        from litestar_chatflow.core.types import TemplateKey

        config = ChatflowConfig()

        assert config.default_template == TemplateKey.BASE
        assert config.history_window == 10
        assert config.duplicate_window == 5
        assert config.completion_timeout == 60.0
        assert config.emit_status_messages is False

    def test_from_env(self) -> None:
        """Test values are read from CHATFLOW_* variables."""
        from litestar_chatflow.config import ChatflowConfig

        config = ChatflowConfig.from_env(
            {
                "CHATFLOW_HISTORY_WINDOW": "20",
                "CHATFLOW_COMPLETION_TIMEOUT": "12.5",
                "CHATFLOW_EMIT_STATUS_MESSAGES": "true",
                "CHATFLOW_MODEL": "claude-haiku-4-5-20251001",
                "UNRELATED": "ignored",
            }
        )

        assert config.history_window == 20
        assert config.completion_timeout == 12.5
        assert config.emit_status_messages is True
        assert config.model == "claude-haiku-4-5-20251001"
        assert config.duplicate_window == 5

    def test_from_env_false_values(self) -> None:
        """Test unrecognised boolean strings mean False."""
        from litestar_chatflow.config import ChatflowConfig

        assert ChatflowConfig.from_env({"CHATFLOW_EMIT_STATUS_MESSAGES": "off"}).emit_status_messages is False

    def test_from_env_invalid_number(self) -> None:
        """Test unparseable numbers raise ValueError."""
        from litestar_chatflow.config import ChatflowConfig

        with pytest.raises(ValueError):
            ChatflowConfig.from_env({"CHATFLOW_HISTORY_WINDOW": "many"})

    def test_from_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test os.environ is read by default."""
        from litestar_chatflow.config import ChatflowConfig

        monkeypatch.setenv("CHATFLOW_DUPLICATE_WINDOW", "3")

        assert ChatflowConfig.from_env().duplicate_window == 3
