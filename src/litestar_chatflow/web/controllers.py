"""REST API controllers for chatflow.

This module provides three controller classes:
- ThreadController: Post messages to threads and inspect their active workflow
- WorkflowController: Inspect and delete workflow instances
- TemplateController: List registered workflow templates
"""

from __future__ import annotations

from typing import ClassVar
from uuid import UUID

from litestar import Controller, delete, get, post
from litestar.exceptions import NotFoundException
from litestar.params import Parameter

from litestar_chatflow.engine.engine import ChatflowEngine  # noqa: TC001 - needed for DI
from litestar_chatflow.templates.registry import TemplateRegistry  # noqa: TC001 - needed for DI
from litestar_chatflow.web.dto import (
    PostMessageDTO,
    StartWorkflowDTO,
    TemplateDTO,
    TurnResultDTO,
    WorkflowDetailDTO,
)

__all__ = [
    "TemplateController",
    "ThreadController",
    "WorkflowController",
]


class ThreadController(Controller):
    """API controller for conversation threads.

    Tags: Chat Threads
    """

    path = "/threads"
    tags: ClassVar[list[str]] = ["Chat Threads"]

    @post("/{thread_id:str}/messages")
    async def post_message(
        self,
        thread_id: str,
        data: PostMessageDTO,
        chatflow_engine: ChatflowEngine,
    ) -> TurnResultDTO:
        """Process a user message on a thread.

        Args:
            thread_id: The thread ID.
            data: The inbound message.
            chatflow_engine: Injected chatflow engine.

        Returns:
            The messages emitted during the turn and the resulting workflow state.
        """
        result = await chatflow_engine.handle_message(thread_id, data.content)
        return TurnResultDTO.from_result(result)

    @post("/{thread_id:str}/workflows")
    async def start_workflow(
        self,
        thread_id: str,
        data: StartWorkflowDTO,
        chatflow_engine: ChatflowEngine,
    ) -> TurnResultDTO:
        """Start a workflow on a thread, replacing any active one.

        Args:
            thread_id: The thread ID.
            data: Template key and start options.
            chatflow_engine: Injected chatflow engine.

        Returns:
            The prompt emitted by the new workflow and its state.
        """
        result = await chatflow_engine.start_workflow(thread_id, data.template_key, silent=data.silent)
        return TurnResultDTO.from_result(result)

    @get("/{thread_id:str}/workflow")
    async def get_active_workflow(
        self,
        thread_id: str,
        chatflow_engine: ChatflowEngine,
    ) -> WorkflowDetailDTO:
        """Get the active workflow of a thread.

        Args:
            thread_id: The thread ID.
            chatflow_engine: Injected chatflow engine.

        Returns:
            The active workflow with its steps.

        Raises:
            NotFoundException: If the thread has no active workflow.
        """
        workflow = await chatflow_engine.get_active_workflow(thread_id)
        if workflow is None:
            raise NotFoundException(detail=f"Thread '{thread_id}' has no active workflow")
        workflow, steps = await chatflow_engine.get_workflow(workflow.id)
        return WorkflowDetailDTO.from_records(workflow, steps)

    @get("/{thread_id:str}/title")
    async def get_title(
        self,
        thread_id: str,
        chatflow_engine: ChatflowEngine,
    ) -> dict[str, str | None]:
        """Get the generated title of a thread."""
        return {"thread_id": thread_id, "title": await chatflow_engine.store.get_thread_title(thread_id)}


class WorkflowController(Controller):
    """API controller for workflow instances.

    Tags: Chat Workflows
    """

    path = "/workflows"
    tags: ClassVar[list[str]] = ["Chat Workflows"]

    @get("/{workflow_id:uuid}")
    async def get_workflow(
        self,
        workflow_id: UUID,
        chatflow_engine: ChatflowEngine,
    ) -> WorkflowDetailDTO:
        """Get a workflow with its steps.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist (404).
        """
        workflow, steps = await chatflow_engine.get_workflow(workflow_id)
        return WorkflowDetailDTO.from_records(workflow, steps)

    @delete("/{workflow_id:uuid}")
    async def delete_workflow(
        self,
        workflow_id: UUID,
        chatflow_engine: ChatflowEngine,
    ) -> None:
        """Delete a workflow and its steps.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist (404).
        """
        await chatflow_engine.delete_workflow(workflow_id)


class TemplateController(Controller):
    """API controller for workflow templates.

    Tags: Chat Templates
    """

    path = "/templates"
    tags: ClassVar[list[str]] = ["Chat Templates"]

    @get("/")
    async def list_templates(
        self,
        chatflow_registry: TemplateRegistry,
        include_selection: bool = Parameter(
            default=True,
            description="Include selection templates such as the base workflow",
        ),
    ) -> list[TemplateDTO]:
        """List all registered templates.

        Args:
            chatflow_registry: Injected template registry.
            include_selection: Whether to include selection templates.

        Returns:
            List of template DTOs.
        """
        return [
            TemplateDTO.from_template(template)
            for template in chatflow_registry.list_templates(include_selection=include_selection)
        ]

    @get("/{key:str}")
    async def get_template(
        self,
        key: str,
        chatflow_registry: TemplateRegistry,
    ) -> TemplateDTO:
        """Get a template by key, or by name if no key matches.

        Raises:
            NotFoundException: If no template matches.
        """
        if chatflow_registry.has_template(key):
            return TemplateDTO.from_template(chatflow_registry.get(key))
        template = chatflow_registry.resolve_name(key)
        if template is None:
            raise NotFoundException(detail=f"Workflow template '{key}' not found")
        return TemplateDTO.from_template(template)
