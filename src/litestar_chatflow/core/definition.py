"""Immutable workflow template structures.

Templates are read-only blueprints. Everything that changes while a workflow runs
lives on :class:`~litestar_chatflow.core.models.StepInstance` instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from litestar_chatflow.core.types import StepType

__all__ = ["StepConfig", "StepDefinition", "WorkflowTemplate"]


def _freeze(value: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class StepConfig:
    """Read-only configuration attached to a step definition.

    Attributes:
        goal: What the step is trying to achieve, given to the LLM verbatim.
        base_instructions: Step-specific system instructions.
        essential: Fields the step cannot complete without.
        important: Fields that noticeably improve the result.
        optional: Nice-to-have fields.
        options: Workflow names offered by a selection step.
        templates: Content templates keyed by asset type.
        asset_type: Asset type produced by a generation step.
        auto_execute: Run the step without waiting for user input.
        silent: Do not emit the step's prompt or output to the thread.
        selection_field: Key of the collected field that names the selected workflow.
        input_field: Key under which a user input step stores the raw text.
        extra: Arbitrary additional settings.
    """

    goal: str = ""
    base_instructions: str = ""
    essential: tuple[str, ...] = ()
    important: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    options: tuple[str, ...] = ()
    templates: Mapping[str, str] = field(default_factory=dict)
    asset_type: str | None = None
    auto_execute: bool = False
    silent: bool = False
    selection_field: str = "selectedWorkflow"
    input_field: str = "userInput"
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "templates", _freeze(self.templates))
        object.__setattr__(self, "extra", _freeze(self.extra))
        for name in ("essential", "important", "optional", "options"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def required_fields(self) -> tuple[str, ...]:
        """All tracked fields in priority order."""
        return self.essential + self.important + self.optional


@dataclass(frozen=True)
class StepDefinition:
    """Blueprint for a single workflow step.

    Attributes:
        type: The step type.
        name: Name of the step, unique within its template and used as the dependency key.
        prompt: Text shown to the user when the step becomes current.
        order: Position of the step within the template.
        description: Human-readable description.
        dependencies: Names of steps that must be complete before this one starts.
        handler: Optional handler key overriding the default handler for ``type``.
        config: Read-only step configuration.
    """

    type: StepType
    name: str
    prompt: str
    order: int
    description: str = ""
    dependencies: tuple[str, ...] = ()
    handler: str | None = None
    config: StepConfig = field(default_factory=StepConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    @property
    def handler_key(self) -> str:
        """Key used to look the step handler up in the handler registry."""
        return self.handler or str(self.type)


@dataclass(frozen=True)
class WorkflowTemplate:
    """Immutable ordered blueprint a workflow is instantiated from.

    Attributes:
        key: Stable template identifier.
        name: Display name, also used for selection by name.
        description: Human-readable description.
        steps: Step definitions in ascending order.
        is_selection: Whether this template picks the next workflow to run.
        next_template: Template to chain to once a workflow of this template completes.
        silent_successor: Start the chained workflow without emitting its first prompt.

    Example:
        >>> template = WorkflowTemplate(
        ...     key="greeting",
        ...     name="Greeting",
        ...     steps=(
        ...         StepDefinition(StepType.USER_INPUT, "Ask Name", "What is your name?", 0),
        ...     ),
        ... )
        >>> template.validate()
        []
    """

    key: str
    name: str
    steps: tuple[StepDefinition, ...]
    description: str = ""
    is_selection: bool = False
    next_template: str | None = None
    silent_successor: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))

    def get_step(self, name: str) -> StepDefinition | None:
        """Get a step definition by name.

        Args:
            name: Name of the step.

        Returns:
            The matching step definition or None.
        """
        return next((step for step in self.steps if step.name == name), None)

    @property
    def step_names(self) -> list[str]:
        """Names of all steps in template order."""
        return [step.name for step in self.steps]

    def validate(self) -> list[str]:
        """Validate the template for authoring errors.

        Returns:
            List of validation error messages. Empty list if valid.
        """
        errors: list[str] = []

        if not self.steps:
            errors.append("Template has no steps")
            return errors

        seen: dict[str, int] = {}
        previous_order: int | None = None
        for step in self.steps:
            if step.name in seen:
                errors.append(f"Duplicate step name '{step.name}'")
            if previous_order is not None and step.order <= previous_order:
                errors.append(
                    f"Step '{step.name}' has order {step.order}, expected greater than {previous_order}"
                )
            previous_order = step.order
            seen.setdefault(step.name, step.order)

        for step in self.steps:
            for dependency in step.dependencies:
                if dependency not in seen:
                    errors.append(f"Step '{step.name}' depends on unknown step '{dependency}'")
                elif dependency == step.name:
                    errors.append(f"Step '{step.name}' depends on itself")
                elif seen[dependency] > step.order:
                    errors.append(f"Step '{step.name}' depends on later step '{dependency}'")

        return errors
