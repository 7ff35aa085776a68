"""Litestar plugin for chatflow integration.

This module provides the ChatflowPlugin for integrating litestar-chatflow with
Litestar applications.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from litestar.di import Provide
from litestar.plugins import InitPluginProtocol

from litestar_chatflow.config import ChatflowConfig
from litestar_chatflow.engine.engine import ChatflowEngine
from litestar_chatflow.templates.registry import TemplateRegistry

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

    from litestar_chatflow.core.protocols import CompletionService, JobQueue, WorkflowStore

__all__ = ["ChatflowPlugin", "ChatflowPluginConfig"]


@dataclass
class ChatflowPluginConfig:
    """Configuration for the ChatflowPlugin.

    Attributes:
        engine: Optional pre-configured ChatflowEngine. If not provided, one is
            created from the other settings.
        registry: Optional pre-configured TemplateRegistry. Defaults to the
            built-in templates.
        store: Workflow store for a created engine. Defaults to an in-memory store.
        completion: Completion service for a created engine. Defaults to the
            Anthropic completion service.
        job_queue: Optional background job queue for a created engine. It is
            closed on application shutdown.
        config: Engine configuration for a created engine.
        dependency_key_engine: The key used for dependency injection of the
            ChatflowEngine. Defaults to "chatflow_engine".
        dependency_key_registry: The key used for dependency injection of the
            TemplateRegistry. Defaults to "chatflow_registry".
        enable_api: Whether to enable the REST API endpoints. Defaults to True.
        api_path_prefix: URL path prefix for all chatflow API endpoints.
            Defaults to "/chatflow".
        api_guards: List of Litestar guards to apply to all chatflow API endpoints.
        api_tags: OpenAPI tags to apply to chatflow API endpoints.
        include_api_in_schema: Whether to include API endpoints in OpenAPI schema.
            Defaults to True.
    """

    engine: ChatflowEngine | None = None
    registry: TemplateRegistry | None = None
    store: WorkflowStore | None = None
    completion: CompletionService | None = None
    job_queue: JobQueue | None = None
    config: ChatflowConfig | None = None
    dependency_key_engine: str = "chatflow_engine"
    dependency_key_registry: str = "chatflow_registry"
    enable_api: bool = True
    api_path_prefix: str = "/chatflow"
    api_guards: list[Any] = field(default_factory=list)
    api_tags: list[str] = field(default_factory=lambda: ["Chatflow"])
    include_api_in_schema: bool = True


class ChatflowPlugin(InitPluginProtocol):
    """Litestar plugin for conversational workflows.

    This plugin provides dependency injection for the ChatflowEngine and the
    TemplateRegistry and optionally mounts the REST API.

    Example:
        Basic usage::

            from litestar import Litestar
            from litestar_chatflow import ChatflowPlugin, ChatflowPluginConfig

            app = Litestar(plugins=[ChatflowPlugin()])

        Using in a route handler::

            from litestar import post
            from litestar_chatflow import ChatflowEngine


            @post("/chat/{thread_id:str}")
            async def chat(thread_id: str, data: dict, chatflow_engine: ChatflowEngine) -> dict:
                result = await chatflow_engine.handle_message(thread_id, data["content"])
                return {"reply": result.reply}
    """

    __slots__ = ("_config", "_engine", "_registry")

    def __init__(self, config: ChatflowPluginConfig | None = None) -> None:
        """Initialize the plugin.

        Args:
            config: Optional configuration for the plugin.
        """
        self._config = config or ChatflowPluginConfig()
        self._registry: TemplateRegistry | None = None
        self._engine: ChatflowEngine | None = None

    @property
    def registry(self) -> TemplateRegistry:
        """Get the template registry.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._registry is None:
            msg = "ChatflowPlugin has not been initialized. Access registry after app startup."
            raise RuntimeError(msg)
        return self._registry

    @property
    def engine(self) -> ChatflowEngine:
        """Get the chatflow engine.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._engine is None:
            msg = "ChatflowPlugin has not been initialized. Access engine after app startup."
            raise RuntimeError(msg)
        return self._engine

    def _build_engine(self, registry: TemplateRegistry) -> ChatflowEngine:
        config = self._config.config or ChatflowConfig.from_env()
        store = self._config.store
        if store is None:
            from litestar_chatflow.store.memory import InMemoryWorkflowStore

            store = InMemoryWorkflowStore()
        completion = self._config.completion
        if completion is None:
            from litestar_chatflow.completion.anthropic_client import AnthropicCompletionService

            completion = AnthropicCompletionService.from_config(config)
        return ChatflowEngine(
            store,
            completion,
            registry,
            config=config,
            job_queue=self._config.job_queue,
        )

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Initialize the plugin when the Litestar app starts.

        This method:
        1. Creates or uses the provided TemplateRegistry
        2. Creates or uses the provided ChatflowEngine
        3. Adds dependency providers to the app config
        4. Optionally registers REST API controllers if enable_api=True

        Args:
            app_config: The Litestar application configuration.

        Returns:
            The modified application configuration.
        """
        if self._config.engine is not None:
            self._engine = self._config.engine
            self._registry = self._config.engine.registry
        else:
            self._registry = self._config.registry or TemplateRegistry.with_builtin_templates()
            self._engine = self._build_engine(self._registry)

        def provide_registry() -> TemplateRegistry:
            return self._registry  # type: ignore[return-value]

        def provide_engine() -> ChatflowEngine:
            return self._engine  # type: ignore[return-value]

        app_config.dependencies[self._config.dependency_key_registry] = Provide(
            provide_registry,
            sync_to_thread=False,
        )
        app_config.dependencies[self._config.dependency_key_engine] = Provide(
            provide_engine,
            sync_to_thread=False,
        )

        job_queue = self._engine.job_queue
        if job_queue is not None:

            async def close_job_queue() -> None:
                await job_queue.close()

            app_config.on_shutdown.append(close_job_queue)

        if self._config.enable_api:
            from litestar import Router

            from litestar_chatflow.exceptions import ChatflowError
            from litestar_chatflow.web.controllers import (
                TemplateController,
                ThreadController,
                WorkflowController,
            )
            from litestar_chatflow.web.exceptions import chatflow_error_handler

            chatflow_router = Router(
                path=self._config.api_path_prefix,
                route_handlers=[ThreadController, WorkflowController, TemplateController],
                guards=self._config.api_guards,
                tags=self._config.api_tags,
                include_in_schema=self._config.include_api_in_schema,
            )
            app_config.route_handlers.append(chatflow_router)
            app_config.exception_handlers[ChatflowError] = chatflow_error_handler  # type: ignore[assignment]

        return app_config
