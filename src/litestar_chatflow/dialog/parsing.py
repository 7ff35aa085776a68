"""Parsing of JSON completion responses.

LLMs wrap JSON in markdown fences or surround it with prose despite being told
not to. The helpers here recover the outermost JSON object and validate it
against a pydantic contract.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

from litestar_chatflow.core.types import ReviewDecision
from litestar_chatflow.exceptions import MalformedResponseError

__all__ = [
    "AssetResponse",
    "DialogResponse",
    "ReviewInformation",
    "ReviewResponse",
    "extract_json_object",
    "parse_response",
    "strip_code_fences",
]

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def strip_code_fences(raw_text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) from text."""
    content = raw_text.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]
    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]
    return content.strip()


def extract_json_object(raw_text: str) -> dict[str, Any]:
    """Parse the outermost JSON object contained in a completion.

    Args:
        raw_text: Raw completion text.

    Returns:
        The parsed object.

    Raises:
        MalformedResponseError: If no JSON object can be recovered.
    """
    content = strip_code_fences(raw_text or "")
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        start, end = content.find("{"), content.rfind("}")
        if start == -1 or end <= start:
            raise MalformedResponseError(raw_text, "no JSON object found") from None
        try:
            parsed = json.loads(content[start : end + 1])
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(raw_text, f"invalid JSON: {exc.msg}") from exc

    if not isinstance(parsed, dict):
        raise MalformedResponseError(raw_text, f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_response(raw_text: str, model: type[ModelT]) -> ModelT:
    """Parse and validate a completion against a response contract.

    Args:
        raw_text: Raw completion text.
        model: The pydantic contract to validate against.

    Returns:
        The validated model.

    Raises:
        MalformedResponseError: If the text is not JSON or violates the contract.
    """
    data = extract_json_object(raw_text)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.debug("Completion failed %s validation: %s", model.__name__, exc)
        raise MalformedResponseError(raw_text, f"{model.__name__} validation failed") from exc


class _Contract(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DialogResponse(_Contract):
    """Contract of a JSON dialog turn.

    ``isComplete`` and the ``collectedInformation`` object are required.
    ``isStepComplete`` and ``extractedInformation`` are accepted as legacy aliases.
    """

    is_complete: StrictBool = Field(validation_alias=AliasChoices("isComplete", "isStepComplete", "is_complete"))
    collected_information: dict[str, Any] = Field(
        validation_alias=AliasChoices("collectedInformation", "extractedInformation", "collected_information"),
    )
    missing_information: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("missingInformation", "missing_information")
    )
    next_question: str | None = Field(default=None, validation_alias=AliasChoices("nextQuestion", "next_question"))
    suggested_next_step: str | None = Field(
        default=None, validation_alias=AliasChoices("suggestedNextStep", "suggested_next_step")
    )
    ready_to_generate: bool = Field(default=False, validation_alias=AliasChoices("readyToGenerate", "ready_to_generate"))
    completion_percentage: float | None = Field(
        default=None, validation_alias=AliasChoices("completionPercentage", "completion_percentage")
    )

    @field_validator("missing_information", mode="before")
    @classmethod
    def _coerce_missing(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(item) for item in value]
        return value

    @field_validator("ready_to_generate", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("next_question", "suggested_next_step", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AssetResponse(_Contract):
    """Contract of an asset generation or revision call."""

    asset: str = Field(min_length=1)


class ReviewInformation(_Contract):
    """Collected information of a review decision."""

    review_decision: str = Field(validation_alias=AliasChoices("reviewDecision", "review_decision"))
    requested_changes: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("requestedChanges", "requested_changes")
    )
    user_feedback: str | None = Field(default=None, validation_alias=AliasChoices("userFeedback", "user_feedback"))

    @field_validator("requested_changes", mode="before")
    @classmethod
    def _coerce_changes(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @property
    def decision(self) -> ReviewDecision:
        """Map the free-form decision onto :class:`ReviewDecision`."""
        value = self.review_decision.strip().lower().replace(" ", "_").replace("-", "_")
        if value in {"approved", "approve", "accept", "accepted"}:
            return ReviewDecision.APPROVED
        if value in {"revision_requested", "revision", "revise", "changes_requested", "revision_generated"}:
            return ReviewDecision.REVISION_REQUESTED
        return ReviewDecision.UNCLEAR


class ReviewResponse(_Contract):
    """Contract of a review-decision call."""

    is_complete: StrictBool = Field(validation_alias=AliasChoices("isComplete", "isStepComplete", "is_complete"))
    collected_information: ReviewInformation = Field(
        validation_alias=AliasChoices("collectedInformation", "extractedInformation", "collected_information")
    )
    next_question: str | None = Field(default=None, validation_alias=AliasChoices("nextQuestion", "next_question"))
