"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from litestar_chatflow.core.types import TemplateKey

__all__ = ["ChatflowConfig"]

_ENV_PREFIX = "CHATFLOW_"


@dataclass
class ChatflowConfig:
    """Configuration for :class:`~litestar_chatflow.engine.engine.ChatflowEngine`.

    Attributes:
        default_template: Template started for a thread without an active workflow.
        history_window: Number of recent thread messages given to the LLM.
        duplicate_window: Number of recent thread messages checked for duplicates.
        completion_timeout: Seconds before a completion call is abandoned.
        model: Model used by the Anthropic completion service.
        max_tokens: Maximum tokens per completion.
        temperature: Sampling temperature for completions.
        emit_status_messages: Emit ``[Workflow Status]`` bookkeeping messages on transitions.
    """

    default_template: str = TemplateKey.BASE
    history_window: int = 10
    duplicate_window: int = 5
    completion_timeout: float = 60.0
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 4096
    temperature: float = 0.3
    emit_status_messages: bool = False

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ChatflowConfig:
        """Build a config from ``CHATFLOW_*`` environment variables.

        Unset variables keep their defaults. For example ``CHATFLOW_HISTORY_WINDOW=20``
        sets :attr:`history_window`.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            The resulting configuration.

        Raises:
            ValueError: If a variable cannot be converted to the field's type.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        defaults = cls()
        for config_field in fields(cls):
            raw = environ.get(f"{_ENV_PREFIX}{config_field.name.upper()}")
            if raw is None:
                continue
            default = getattr(defaults, config_field.name)
            if isinstance(default, bool):
                values[config_field.name] = raw.strip().lower() in {"1", "true", "yes", "on"}
            elif isinstance(default, int):
                values[config_field.name] = int(raw)
            elif isinstance(default, float):
                values[config_field.name] = float(raw)
            else:
                values[config_field.name] = raw
        return cls(**values)
