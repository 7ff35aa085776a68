"""Asset review step handler: the approve/revise loop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflow.core.types import ReviewDecision
from litestar_chatflow.exceptions import CompletionServiceError
from litestar_chatflow.generation.loop import UNCLEAR_QUESTION
from litestar_chatflow.steps.base import BaseStepHandler, StepOutcome

if TYPE_CHECKING:
    from litestar_chatflow.core.models import StepInstance
    from litestar_chatflow.engine.context import TurnContext

__all__ = ["AssetReviewHandler", "revised_prompt"]

logger = logging.getLogger(__name__)

REVISION_FAILED = (
    "Sorry, I couldn't apply those changes just now. The previous version is unchanged. "
    "Could you try describing the changes again?"
)


def revised_prompt(asset_type: str | None, revision: int) -> str:
    """Review prompt shown after a revision."""
    return (
        f"Here's your revised {(asset_type or 'asset').lower()} (revision {revision}). Please review it and "
        "let me know what specific changes you'd like to make, if any. If you're satisfied, simply "
        "reply with 'approved'."
    )


class AssetReviewHandler(BaseStepHandler):
    """Approves or revises the generated asset.

    The step stays IN_PROGRESS through any number of revision rounds and
    completes on the first turn that approves the asset.
    """

    key = "asset_review"

    async def process_turn(self, turn: TurnContext, step: StepInstance, user_input: str) -> StepOutcome:
        definition = turn.definition(step)
        state = step.state
        step.user_input = user_input
        state.turn_count += 1

        if not state.generated_asset:
            state.generated_asset, state.asset_type = turn.latest_asset()
        asset_type = state.asset_type or definition.config.asset_type

        review = await turn.services.interpreter.interpret(user_input, state.generated_asset, asset_type)
        state.review_decision = review.decision
        state.collected_information.update(
            {
                "reviewDecision": str(review.decision),
                "requestedChanges": list(review.requested_changes),
                "userFeedback": review.user_feedback,
            }
        )

        if review.decision == ReviewDecision.APPROVED:
            state.collected_information["finalAsset"] = state.generated_asset
            message = f"Great! Your {(asset_type or 'asset').lower()} has been finalized."
            await turn.messenger.emit(message)
            step.output = message
            logger.info("Asset approved after %d revision(s) in workflow %s", state.revision_count, turn.workflow.id)
            return StepOutcome.complete()

        if review.decision == ReviewDecision.UNCLEAR:
            question = review.next_question or UNCLEAR_QUESTION
            await turn.messenger.emit(question)
            step.output = question
            return StepOutcome.waiting()

        state.requested_changes = list(review.requested_changes)
        try:
            revised = await turn.services.generator.revise(
                state.generated_asset or "",
                review.requested_changes,
                review.user_feedback,
                asset_type,
                definition.config.templates,
            )
        except CompletionServiceError as exc:
            logger.error("Revision failed in workflow %s: %s", turn.workflow.id, exc)
            state.error = str(exc)
            await turn.messenger.emit(REVISION_FAILED)
            step.output = REVISION_FAILED
            return StepOutcome.waiting()

        state.generated_asset = revised
        state.asset_type = asset_type
        state.revision_count += 1
        state.error = None
        step.prompt = revised_prompt(asset_type, state.revision_count)
        await turn.messenger.emit(revised)
        await turn.messenger.emit(step.prompt)
        step.output = revised
        return StepOutcome.waiting()
