"""Tests for workflow templates and step definitions."""

from __future__ import annotations

import pytest


def _step(name: str, order: int, dependencies: tuple[str, ...] = ()):
    from litestar_chatflow.core.definition import StepDefinition
    from litestar_chatflow.core.types import StepType

    return StepDefinition(StepType.USER_INPUT, name, f"Tell me about {name}", order, dependencies=dependencies)


@pytest.mark.unit
class TestStepConfig:
    """Tests for StepConfig."""

    def test_defaults(self) -> None:
        """Test StepConfig default values."""
        from litestar_chatflow.core.definition import StepConfig

        config = StepConfig()

        assert config.essential == ()
        assert config.auto_execute is False
        assert config.silent is False
        assert config.selection_field == "selectedWorkflow"
        assert config.input_field == "userInput"

    def test_required_fields_priority_order(self) -> None:
        """Test required_fields lists essential, important then optional."""
        from litestar_chatflow.core.definition import StepConfig

        config = StepConfig(essential=["a"], important=["b"], optional=["c", "d"])

        assert config.required_fields == ("a", "b", "c", "d")

    def test_templates_are_read_only(self) -> None:
        """Test content templates cannot be modified after creation."""
        from litestar_chatflow.core.definition import StepConfig

        source = {"default": "Write it well"}
        config = StepConfig(templates=source)
        source["default"] = "changed"

        assert config.templates["default"] == "Write it well"
        with pytest.raises(TypeError):
            config.templates["other"] = "nope"  # type: ignore[index]

    def test_config_is_frozen(self) -> None:
        """Test StepConfig is immutable."""
        from dataclasses import FrozenInstanceError

        from litestar_chatflow.core.definition import StepConfig

        config = StepConfig()

        with pytest.raises(FrozenInstanceError):
            config.silent = True  # type: ignore[misc]


@pytest.mark.unit
class TestStepDefinition:
    """Tests for StepDefinition."""

    def test_handler_key_defaults_to_type(self) -> None:
        """Test handler_key falls back to the step type."""
        from litestar_chatflow.core.definition import StepDefinition
        from litestar_chatflow.core.types import StepType

        step = StepDefinition(StepType.JSON_DIALOG, "Collect", "Hi", 0)

        assert step.handler_key == "json_dialog"

    def test_handler_key_override(self) -> None:
        """Test an explicit handler wins over the type."""
        from litestar_chatflow.core.definition import StepDefinition
        from litestar_chatflow.core.types import StepType

        step = StepDefinition(StepType.JSON_DIALOG, "Review", "Hi", 2, handler="asset_review")

        assert step.handler_key == "asset_review"

    def test_dependencies_become_tuple(self) -> None:
        """Test dependency lists are frozen into tuples."""
        step = _step("b", 1, dependencies=["a"])  # type: ignore[arg-type]

        assert step.dependencies == ("a",)


@pytest.mark.unit
class TestWorkflowTemplate:
    """Tests for WorkflowTemplate."""

    def test_get_step(self) -> None:
        """Test looking a step up by name."""
        from litestar_chatflow.core.definition import WorkflowTemplate

        template = WorkflowTemplate("t", "T", (_step("a", 0), _step("b", 1, ("a",))))

        assert template.get_step("b").order == 1  # type: ignore[union-attr]
        assert template.get_step("missing") is None
        assert template.step_names == ["a", "b"]

    def test_valid_template(self) -> None:
        """Test a well-formed template validates cleanly."""
        from litestar_chatflow.core.definition import WorkflowTemplate

        template = WorkflowTemplate("t", "T", (_step("a", 0), _step("b", 1, ("a",))))

        assert template.validate() == []

    def test_empty_template(self) -> None:
        """Test a template without steps is invalid."""
        from litestar_chatflow.core.definition import WorkflowTemplate

        assert WorkflowTemplate("t", "T", ()).validate() == ["Template has no steps"]

    def test_duplicate_step_names(self) -> None:
        """Test duplicate step names are reported."""
        from litestar_chatflow.core.definition import WorkflowTemplate

        errors = WorkflowTemplate("t", "T", (_step("a", 0), _step("a", 1))).validate()

        assert any("Duplicate step name 'a'" in error for error in errors)

    def test_non_ascending_order(self) -> None:
        """Test steps must be in strictly ascending order."""
        from litestar_chatflow.core.definition import WorkflowTemplate

        errors = WorkflowTemplate("t", "T", (_step("a", 1), _step("b", 1))).validate()

        assert any("expected greater than 1" in error for error in errors)

    def test_unknown_dependency(self) -> None:
        """Test dependencies on unknown steps are reported."""
        from litestar_chatflow.core.definition import WorkflowTemplate

        errors = WorkflowTemplate("t", "T", (_step("a", 0, ("ghost",)),)).validate()

        assert errors == ["Step 'a' depends on unknown step 'ghost'"]

    def test_self_dependency(self) -> None:
        """Test a step may not depend on itself."""
        from litestar_chatflow.core.definition import WorkflowTemplate

        errors = WorkflowTemplate("t", "T", (_step("a", 0, ("a",)),)).validate()

        assert errors == ["Step 'a' depends on itself"]

    def test_forward_dependency(self) -> None:
        """Test a step may not depend on a later step."""
        from litestar_chatflow.core.definition import WorkflowTemplate

        errors = WorkflowTemplate("t", "T", (_step("a", 0, ("b",)), _step("b", 1))).validate()

        assert errors == ["Step 'a' depends on later step 'b'"]


@pytest.mark.unit
class TestBuiltinTemplates:
    """Tests for the built-in template set."""

    def test_all_builtin_templates_validate(self) -> None:
        """Test every built-in template is well formed."""
        from litestar_chatflow.templates.builtin import BUILTIN_TEMPLATES

        for template in BUILTIN_TEMPLATES:
            assert template.validate() == [], template.key

    def test_base_template_is_selection(self) -> None:
        """Test the base template selects workflows and titles the thread."""
        from litestar_chatflow.templates.builtin import BASE_TEMPLATE

        assert BASE_TEMPLATE.is_selection is True
        assert BASE_TEMPLATE.step_names == ["Workflow Selection", "Auto Generate Thread Title"]
        title = BASE_TEMPLATE.get_step("Auto Generate Thread Title")
        assert title is not None
        assert title.config.auto_execute is True
        assert title.config.silent is True

    def test_press_release_shape(self) -> None:
        """Test the press release template collects, generates and reviews."""
        from litestar_chatflow.core.types import TemplateKey
        from litestar_chatflow.templates.builtin import PRESS_RELEASE_TEMPLATE

        assert PRESS_RELEASE_TEMPLATE.step_names == ["Information Collection", "Asset Generation", "Asset Review"]
        assert PRESS_RELEASE_TEMPLATE.next_template == TemplateKey.BASE
        collection = PRESS_RELEASE_TEMPLATE.steps[0]
        assert collection.config.essential == ("companyName", "companyDescription", "announcement")
        generation = PRESS_RELEASE_TEMPLATE.steps[1]
        assert generation.config.auto_execute is True
        assert generation.dependencies == ("Information Collection",)
        assert PRESS_RELEASE_TEMPLATE.steps[2].handler_key == "asset_review"

    def test_asset_workflow_factory(self) -> None:
        """Test building a custom asset workflow."""
        from litestar_chatflow.templates.builtin import asset_workflow

        template = asset_workflow(
            "newsletter",
            "Newsletter",
            "Monthly newsletter",
            asset_type="Newsletter",
            collection_prompt="What's in this month's newsletter?",
            goal="Collect newsletter topics",
            instructions="Ask about topics.",
            content_template="Write a newsletter.",
            essential=("topics",),
        )

        assert template.validate() == []
        assert template.steps[1].config.asset_type == "Newsletter"
        assert "newsletter" in template.steps[1].prompt.lower()
