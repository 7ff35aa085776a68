"""Asset generation and the review/revision loop.

:class:`AssetGenerator` writes and revises assets. :class:`ReviewInterpreter`
decides whether review feedback approves the asset, asks for changes, or is
unclear. Step handlers combine the two into the approve/revise cycle.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from litestar_chatflow.completion.base import CompletionOptions
from litestar_chatflow.core.types import ReviewDecision
from litestar_chatflow.dialog.fields import sanitize
from litestar_chatflow.dialog.intents import is_approval, looks_like_change_request
from litestar_chatflow.dialog.parsing import AssetResponse, ReviewResponse, parse_response
from litestar_chatflow.exceptions import CompletionServiceError, MalformedResponseError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from litestar_chatflow.core.models import ThreadMessage
    from litestar_chatflow.core.protocols import CompletionService

__all__ = ["AssetGenerator", "ReviewInterpreter", "ReviewResult", "select_content_template"]

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TEMPLATE = """You are a professional communications writer. Write a polished,
publication-ready {asset_type} based only on the provided information."""

ASSET_CONTRACT = """Respond with ONLY valid JSON in this format:
{"asset": "the complete asset text"}"""

REVIEW_CONTRACT = """Respond with ONLY valid JSON in this format:
{
  "isComplete": boolean,
  "collectedInformation": {
    "reviewDecision": "approved" | "revision_requested" | "unclear",
    "requestedChanges": [ "one specific change per entry" ],
    "userFeedback": "the user's feedback verbatim"
  },
  "nextQuestion": "clarifying question when the decision is unclear, otherwise null"
}"""

UNCLEAR_QUESTION = (
    "I'm not sure whether you'd like changes. Reply 'approved' if you're happy with it, "
    "or tell me exactly what you'd like me to change."
)

_COMPACT = re.compile(r"[^a-z0-9]")


def _compact(value: str) -> str:
    return _COMPACT.sub("", value.casefold())


def select_content_template(templates: Mapping[str, str], asset_type: str | None) -> str:
    """Pick the content template for an asset type.

    Keys are compared ignoring case, spaces and punctuation, so ``"Press Release"``
    finds a template stored under ``"pressRelease"``. Falls back to the ``default``
    template, then to a generic writing instruction.
    """
    wanted = _compact(asset_type or "")
    for key, template in templates.items():
        if wanted and _compact(key) == wanted:
            return template
    if "default" in templates:
        return templates["default"]
    return DEFAULT_CONTENT_TEMPLATE.format(asset_type=asset_type or "asset")


@dataclass
class ReviewResult:
    """Interpretation of one round of review feedback.

    Attributes:
        decision: The interpreted decision.
        requested_changes: Specific changes to apply when revising.
        user_feedback: The raw feedback.
        next_question: Clarifying question for an unclear decision.
    """

    decision: ReviewDecision
    requested_changes: list[str] = field(default_factory=list)
    user_feedback: str = ""
    next_question: str | None = None


class AssetGenerator:
    """Generates and revises assets through the completion service."""

    def __init__(self, completion: CompletionService, history_window: int = 10) -> None:
        """Initialize the generator.

        Args:
            completion: The completion service.
            history_window: Number of recent thread messages given as context.
        """
        self.completion = completion
        self.history_window = history_window

    async def generate(
        self,
        collected_information: Mapping[str, Any],
        asset_type: str | None,
        templates: Mapping[str, str],
        history: Sequence[ThreadMessage] = (),
    ) -> str:
        """Generate an asset from collected information.

        Args:
            collected_information: Information merged from the completed steps.
            asset_type: Type of asset to write.
            templates: Content templates keyed by asset type.
            history: Recent thread messages, oldest first.

        Returns:
            The asset text. If the response is not the expected JSON, the raw
            response is used as the asset.

        Raises:
            CompletionServiceError: If the completion call fails.
        """
        system = f"{select_content_template(templates, asset_type)}\n\n{ASSET_CONTRACT}"
        parts = [
            f"ASSET TYPE: {asset_type or 'asset'}",
            "COLLECTED INFORMATION:\n" + json.dumps(sanitize(dict(collected_information)), indent=2, default=str),
        ]
        window = list(history)[-self.history_window :] if self.history_window else []
        if window:
            parts.append("RECENT CONVERSATION:\n" + "\n".join(f"{m.role}: {m.content}" for m in window))

        raw = await self.completion.complete(system, "\n\n".join(parts), CompletionOptions(json_response=True))
        return self._asset_from(raw)

    async def revise(
        self,
        asset: str,
        changes: Sequence[str],
        feedback: str,
        asset_type: str | None,
        templates: Mapping[str, str],
    ) -> str:
        """Revise an asset according to review feedback.

        Args:
            asset: The current asset text.
            changes: Itemized requested changes.
            feedback: The user's raw feedback.
            asset_type: Type of the asset.
            templates: Content templates keyed by asset type.

        Returns:
            The revised asset text, or the raw response if it is not the expected JSON.

        Raises:
            CompletionServiceError: If the completion call fails.
        """
        system = (
            f"{select_content_template(templates, asset_type)}\n\n"
            "You are revising an existing draft. Apply every requested change, keep everything "
            f"else intact, and return the complete revised text.\n\n{ASSET_CONTRACT}"
        )
        change_list = "\n".join(f"{index}. {change}" for index, change in enumerate(changes, start=1))
        user_text = (
            f"ORIGINAL {(asset_type or 'asset').upper()}:\n{asset}\n\n"
            f"REQUESTED CHANGES:\n{change_list or '(none itemized)'}\n\n"
            f"USER FEEDBACK:\n{feedback}"
        )
        raw = await self.completion.complete(system, user_text, CompletionOptions(json_response=True))
        return self._asset_from(raw)

    @staticmethod
    def _asset_from(raw: str) -> str:
        try:
            return parse_response(raw, AssetResponse).asset
        except MalformedResponseError as exc:
            logger.warning("Asset response was not JSON (%s), using raw text", exc.reason)
            return raw.strip()


class ReviewInterpreter:
    """Interprets review feedback on a generated asset."""

    def __init__(self, completion: CompletionService) -> None:
        self.completion = completion

    async def interpret(self, feedback: str, asset: str | None, asset_type: str | None = None) -> ReviewResult:
        """Interpret feedback.

        Approval phrases are recognised without a completion call. Everything else
        goes through the review contract. If that call fails or cannot be parsed,
        feedback containing an edit instruction is treated as a revision request
        and anything else is unclear.

        Args:
            feedback: The user's feedback.
            asset: The asset under review.
            asset_type: Type of the asset.

        Returns:
            The review result.
        """
        feedback = feedback.strip()
        if is_approval(feedback):
            return ReviewResult(ReviewDecision.APPROVED, user_feedback=feedback)

        system = (
            f"The user is reviewing this {asset_type or 'asset'}:\n\n{asset or ''}\n\n"
            "Decide whether the user approved it or asked for changes. Split requested changes into "
            f"separate, specific instructions.\n\n{REVIEW_CONTRACT}"
        )
        try:
            raw = await self.completion.complete(system, feedback, CompletionOptions(json_response=True))
            response = parse_response(raw, ReviewResponse)
        except (CompletionServiceError, MalformedResponseError) as exc:
            logger.warning("Review interpretation failed, using heuristics: %s", exc)
            return self._heuristic(feedback)

        info = response.collected_information
        decision = info.decision
        if decision == ReviewDecision.REVISION_REQUESTED:
            changes = [change for change in info.requested_changes if change.strip()] or [feedback]
            return ReviewResult(decision, changes, feedback)
        if decision == ReviewDecision.APPROVED:
            return ReviewResult(decision, user_feedback=feedback)
        return ReviewResult(ReviewDecision.UNCLEAR, user_feedback=feedback, next_question=response.next_question)

    @staticmethod
    def _heuristic(feedback: str) -> ReviewResult:
        if looks_like_change_request(feedback):
            return ReviewResult(ReviewDecision.REVISION_REQUESTED, [feedback], feedback)
        return ReviewResult(ReviewDecision.UNCLEAR, user_feedback=feedback)
