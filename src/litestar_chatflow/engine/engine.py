"""The chatflow engine: entry point for conversational workflows."""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import TYPE_CHECKING

from litestar_chatflow.config import ChatflowConfig
from litestar_chatflow.core.models import StepInstance, TurnResult, Workflow
from litestar_chatflow.core.types import StepStatus, WorkflowStatus
from litestar_chatflow.dialog.protocol import JsonDialogProtocol
from litestar_chatflow.engine.context import EngineServices, TurnContext
from litestar_chatflow.engine.dispatcher import AutoExecutionDispatcher
from litestar_chatflow.engine.messages import ThreadMessenger
from litestar_chatflow.engine.resolver import DependencyResolver
from litestar_chatflow.engine.stream import TurnStream
from litestar_chatflow.engine.transitions import WorkflowTransitionManager
from litestar_chatflow.exceptions import (
    CompletionServiceError,
    InconsistentWorkflowError,
    WorkflowNotFoundError,
)
from litestar_chatflow.generation.loop import AssetGenerator, ReviewInterpreter
from litestar_chatflow.steps.registry import HandlerRegistry
from litestar_chatflow.templates.registry import TemplateRegistry

if TYPE_CHECKING:
    from uuid import UUID

    from litestar_chatflow.core.definition import WorkflowTemplate
    from litestar_chatflow.core.protocols import CompletionService, JobQueue, WorkflowStore
    from litestar_chatflow.engine.messages import MessageSink

__all__ = ["WORKFLOW_COMPLETED_JOB", "ChatflowEngine"]

logger = logging.getLogger(__name__)

WORKFLOW_COMPLETED_JOB = "workflow.completed"
MAX_CHAIN_DEPTH = 8

COMPLETION_UNAVAILABLE = "I'm having trouble generating a response right now. Please try again in a moment."
UNEXPECTED_FAILURE = "Something went wrong while processing your message. Please try again."
WORKFLOW_STUCK = "This workflow can no longer continue. Send a message to start a new one."


class ChatflowEngine:
    """Runs conversational workflows for chat threads.

    Messages for the same thread are processed one at a time. Each turn reloads
    the thread's active workflow from the store, hands the message to the current
    step's handler and then lets the dispatcher and transition manager advance the
    workflow as far as it can go without the user.

    Attributes:
        store: The workflow store.
        completion: The completion service.
        registry: The template registry.
        config: The engine configuration.
        job_queue: Optional queue for post-turn background jobs.
        handlers: The step handler table.

    Example:
        >>> engine = ChatflowEngine(
        ...     store=InMemoryWorkflowStore(),
        ...     completion=AnthropicCompletionService(),
        ...     registry=TemplateRegistry.with_builtin_templates(),
        ... )
        >>> result = await engine.handle_message("thread-1", "I need a press release")
        >>> print(result.reply)
    """

    def __init__(
        self,
        store: WorkflowStore,
        completion: CompletionService,
        registry: TemplateRegistry | None = None,
        *,
        config: ChatflowConfig | None = None,
        job_queue: JobQueue | None = None,
        handlers: HandlerRegistry | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: The workflow store.
            completion: The completion service.
            registry: Template registry. Defaults to the built-in templates.
            config: Engine configuration. Defaults to :class:`ChatflowConfig`.
            job_queue: Optional queue for post-turn background jobs.
            handlers: Step handler table. Defaults to the built-in handlers.
        """
        self.store = store
        self.completion = completion
        self.registry = registry or TemplateRegistry.with_builtin_templates()
        self.config = config or ChatflowConfig()
        self.job_queue = job_queue
        self.handlers = handlers or HandlerRegistry.default()
        self.resolver = DependencyResolver()
        self.dispatcher = AutoExecutionDispatcher(self.handlers, self.resolver)
        self.transitions = WorkflowTransitionManager(self.registry, self._launch_successor)
        self.services = EngineServices(
            store=store,
            completion=completion,
            registry=self.registry,
            protocol=JsonDialogProtocol(completion, self.config.history_window),
            generator=AssetGenerator(completion, self.config.history_window),
            interpreter=ReviewInterpreter(completion),
            config=self.config,
            job_queue=job_queue,
        )
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._depth: dict[str, int] = {}

    def _lock_for(self, thread_id: str) -> asyncio.Lock:
        lock = self._locks.get(thread_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[thread_id] = lock
        return lock

    def _messenger(self, result: TurnResult, sink: MessageSink | None) -> ThreadMessenger:
        return ThreadMessenger(
            self.store,
            result.thread_id,
            result,
            duplicate_window=self.config.duplicate_window,
            sink=sink,
        )

    async def handle_message(self, thread_id: str, text: str, on_message: MessageSink | None = None) -> TurnResult:
        """Process one inbound user message.

        If the thread has no active workflow, the default template is started
        silently and receives the message.

        Args:
            thread_id: The conversation thread.
            text: The user's message.
            on_message: Optional coroutine called with every emitted message.

        Returns:
            The turn result with all emitted messages.
        """
        async with self._lock_for(thread_id):
            result = TurnResult(thread_id=thread_id)
            messenger = self._messenger(result, on_message)
            await messenger.record_user(text)

            workflow = await self._active_workflow(thread_id)
            if workflow is None:
                template = self.registry.get(self.config.default_template)
                workflow = await self._create(template, thread_id)
                logger.info("Started default workflow %s for thread %s", workflow.id, thread_id)

            turn = await TurnContext.load(workflow, messenger, result, self.services)
            await self._process(turn, text)
            return await self._finish(result)

    def stream_message(self, thread_id: str, text: str) -> TurnStream:
        """Process a message, delivering emitted messages as they are produced.

        Args:
            thread_id: The conversation thread.
            text: The user's message.

        Returns:
            A stream of :class:`MessageChunk` events closed by a :class:`TurnDone`.
        """
        return TurnStream(lambda sink: self.handle_message(thread_id, text, on_message=sink))

    async def start_workflow(
        self,
        thread_id: str,
        template_key: str,
        *,
        silent: bool = False,
        on_message: MessageSink | None = None,
    ) -> TurnResult:
        """Start a workflow for a thread.

        Any workflow still active on the thread is marked FAILED first.

        Args:
            thread_id: The conversation thread.
            template_key: Key of the template to start.
            silent: Create the workflow without emitting its first prompt.
            on_message: Optional coroutine called with every emitted message.

        Returns:
            The turn result with the emitted prompt, if any.

        Raises:
            TemplateNotFoundError: If the template does not exist.
        """
        template = self.registry.get(template_key)
        async with self._lock_for(thread_id):
            result = TurnResult(thread_id=thread_id)
            messenger = self._messenger(result, on_message)
            for workflow in await self.store.list_workflows_for_thread(thread_id):
                if workflow.is_active:
                    logger.info("Workflow %s superseded by a new %s workflow", workflow.id, template.key)
                    workflow.status = WorkflowStatus.FAILED
                    await self.store.update_workflow(workflow)
            await self._launch(template, messenger, result, silent=silent)
            return await self._finish(result)

    async def get_active_workflow(self, thread_id: str) -> Workflow | None:
        """Return the active workflow of a thread, if any."""
        async with self._lock_for(thread_id):
            return await self._active_workflow(thread_id)

    async def get_workflow(self, workflow_id: UUID) -> tuple[Workflow, list[StepInstance]]:
        """Load a workflow and its steps.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist.
        """
        workflow = await self.store.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow, await self.store.list_steps(workflow_id)

    async def delete_workflow(self, workflow_id: UUID) -> None:
        """Delete a workflow and its steps.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist.
        """
        workflow = await self.store.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        async with self._lock_for(workflow.thread_id):
            await self.store.delete_workflow(workflow_id)
        logger.info("Deleted workflow %s", workflow_id)

    async def _active_workflow(self, thread_id: str) -> Workflow | None:
        active = [w for w in await self.store.list_workflows_for_thread(thread_id) if w.is_active]
        if not active:
            return None
        if len(active) > 1:
            active.sort(key=lambda w: w.created_at)
            newest = active[-1]
            logger.error(
                "Thread %s has %d active workflows, keeping %s and failing the rest",
                thread_id,
                len(active),
                newest.id,
            )
            for stale in active[:-1]:
                stale.status = WorkflowStatus.FAILED
                await self.store.update_workflow(stale)
            return newest
        return active[0]

    async def _create(self, template: WorkflowTemplate, thread_id: str) -> Workflow:
        workflow = await self.store.create_workflow(Workflow.from_template(template, thread_id))
        first: StepInstance | None = None
        for index, definition in enumerate(template.steps):
            status = StepStatus.IN_PROGRESS if index == 0 else StepStatus.PENDING
            step = await self.store.create_step(StepInstance.from_definition(definition, workflow.id, status))
            if first is None:
                first = step
        workflow.current_step_id = first.id if first else None
        return await self.store.update_workflow(workflow)

    async def _launch(
        self,
        template: WorkflowTemplate,
        messenger: ThreadMessenger,
        result: TurnResult,
        *,
        silent: bool,
    ) -> Workflow:
        workflow = await self._create(template, messenger.thread_id)
        logger.info("Created workflow %s from template '%s'", workflow.id, template.key)
        turn = await TurnContext.load(workflow, messenger, result, self.services)
        await self._advance(turn, start=True, announce=not silent)
        return turn.workflow

    async def _launch_successor(self, turn: TurnContext, template: WorkflowTemplate, silent: bool) -> Workflow:
        return await self._launch(template, turn.messenger, turn.result, silent=silent)

    async def _process(self, turn: TurnContext, text: str) -> None:
        step = turn.current_step()
        if step is None:
            await self._advance(turn)
            return

        handler = self.handlers.get(step.handler_key)
        try:
            outcome = await handler.process_turn(turn, step, text)
        except CompletionServiceError as exc:
            logger.error("Completion failed in step '%s' of workflow %s: %s", step.name, turn.workflow.id, exc)
            step.state.error = str(exc)
            await turn.save_step(step)
            await turn.messenger.system(COMPLETION_UNAVAILABLE)
            return
        except Exception as exc:  # noqa: BLE001
            logger.error("Step '%s' of workflow %s failed", step.name, turn.workflow.id, exc_info=exc)
            step.state.error = str(exc) or type(exc).__name__
            await turn.save_step(step)
            await turn.messenger.system(UNEXPECTED_FAILURE)
            return

        await turn.save_step(step)
        if not outcome.is_complete:
            return
        await turn.complete_step(step)
        await self._advance(turn, suggested_next_step=outcome.suggested_next_step)

    async def _advance(
        self,
        turn: TurnContext,
        suggested_next_step: str | None = None,
        *,
        start: bool = False,
        announce: bool = True,
    ) -> None:
        try:
            if start:
                completed = await self.dispatcher.start(turn, announce=announce)
            else:
                completed = await self.dispatcher.advance(turn, suggested_next_step)
        except InconsistentWorkflowError as exc:
            logger.error("%s", exc)
            turn.workflow.status = WorkflowStatus.FAILED
            turn.workflow.current_step_id = None
            await turn.save_workflow()
            await turn.messenger.system(WORKFLOW_STUCK)
            return

        turn.result.workflow = turn.workflow
        if not completed:
            return

        turn.result.completed_workflows.append(turn.workflow.id)
        await turn.enqueue(WORKFLOW_COMPLETED_JOB, {"template": str(turn.template.key)})
        depth = self._depth.get(turn.thread_id, 0)
        if depth >= MAX_CHAIN_DEPTH:
            logger.error("Workflow chain depth limit reached in thread %s", turn.thread_id)
            return
        self._depth[turn.thread_id] = depth + 1
        try:
            await self.transitions.on_workflow_completed(turn)
        finally:
            if depth:
                self._depth[turn.thread_id] = depth
            else:
                self._depth.pop(turn.thread_id, None)

    async def _finish(self, result: TurnResult) -> TurnResult:
        workflow = await self._active_workflow(result.thread_id)
        result.workflow = workflow
        result.current_step = None
        if workflow is not None and workflow.current_step_id is not None:
            result.current_step = await self.store.get_step(workflow.current_step_id)
        return result
