"""Tests for exception hierarchy."""

from __future__ import annotations

from uuid import uuid4

import pytest


@pytest.mark.unit
class TestChatflowError:
    """Tests for base ChatflowError exception."""

    def test_base_exception_creation(self) -> None:
        """Test creating base ChatflowError."""
        from litestar_chatflow.exceptions import ChatflowError

        error = ChatflowError("Test error message")

        assert str(error) == "Test error message"
        assert isinstance(error, Exception)

    @pytest.mark.parametrize(
        "name",
        [
            "TemplateNotFoundError",
            "TemplateValidationError",
            "WorkflowNotFoundError",
            "StepNotFoundError",
            "InconsistentWorkflowError",
            "CompletionServiceError",
            "UnknownStepHandlerError",
            "MalformedResponseError",
        ],
    )
    def test_all_errors_inherit_from_base(self, name: str) -> None:
        """Test every error can be caught as ChatflowError."""
        from litestar_chatflow import exceptions

        assert issubclass(getattr(exceptions, name), exceptions.ChatflowError)


@pytest.mark.unit
class TestErrorAttributes:
    """Tests for exception attributes and messages."""

    def test_template_not_found(self) -> None:
        """Test TemplateNotFoundError stores the key."""
        from litestar_chatflow.exceptions import TemplateNotFoundError

        error = TemplateNotFoundError("podcast")

        assert error.key == "podcast"
        assert "podcast" in str(error)

    def test_template_validation_lists_errors(self) -> None:
        """Test TemplateValidationError includes every message."""
        from litestar_chatflow.exceptions import TemplateValidationError

        error = TemplateValidationError("broken", ["first problem", "second problem"])

        assert error.errors == ["first problem", "second problem"]
        assert "first problem" in str(error)
        assert "second problem" in str(error)

    def test_step_not_found_with_workflow(self) -> None:
        """Test StepNotFoundError mentions the workflow when known."""
        from litestar_chatflow.exceptions import StepNotFoundError

        workflow_id = uuid4()
        error = StepNotFoundError("Review", workflow_id)

        assert error.step == "Review"
        assert str(workflow_id) in str(error)
        assert "in workflow" not in str(StepNotFoundError("Review"))

    def test_inconsistent_workflow(self) -> None:
        """Test InconsistentWorkflowError lists the blocked steps."""
        from litestar_chatflow.exceptions import InconsistentWorkflowError

        error = InconsistentWorkflowError("wf-1", ["Generate", "Review"])

        assert error.blocked_steps == ["Generate", "Review"]
        assert "Generate, Review" in str(error)

    def test_completion_service_error(self) -> None:
        """Test CompletionServiceError stores the reason."""
        from litestar_chatflow.exceptions import CompletionServiceError

        error = CompletionServiceError("timed out after 60s")

        assert error.reason == "timed out after 60s"
        assert "timed out" in str(error)

    def test_malformed_response(self) -> None:
        """Test MalformedResponseError keeps the raw text."""
        from litestar_chatflow.exceptions import MalformedResponseError

        error = MalformedResponseError("not json", "no JSON object found")

        assert error.raw == "not json"
        assert error.reason == "no JSON object found"
