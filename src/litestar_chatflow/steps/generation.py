"""Asset generation step handler."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflow.steps.base import BaseStepHandler, StepOutcome

if TYPE_CHECKING:
    from litestar_chatflow.core.models import StepInstance
    from litestar_chatflow.engine.context import TurnContext

__all__ = ["ASSET_GENERATED_JOB", "AssetGenerationHandler"]

logger = logging.getLogger(__name__)

ASSET_GENERATED_JOB = "asset.generated"


class AssetGenerationHandler(BaseStepHandler):
    """Generates an asset from the information collected by earlier steps.

    Handles both ``api_call`` and ``asset_creation`` steps. The asset type comes
    from the collected ``assetType`` field when present, otherwise from the step
    configuration. Completion failures propagate so the caller can fall back to
    the interactive path.
    """

    key = "api_call"

    async def process_turn(self, turn: TurnContext, step: StepInstance, user_input: str) -> StepOutcome:
        definition = turn.definition(step)
        config = definition.config
        information = turn.collected_information()
        if not self.is_auto(user_input) and user_input.strip():
            information = {**information, "additionalInstructions": user_input}
            step.user_input = user_input

        asset_type = information.get("assetType") or config.asset_type
        asset_type = str(asset_type) if asset_type else None

        asset = await turn.services.generator.generate(
            information,
            asset_type,
            config.templates,
            await turn.history(),
        )

        step.state.generated_asset = asset
        step.state.asset_type = asset_type
        step.state.collected_information = {"assetType": asset_type, "generatedAsset": asset}
        step.output = asset
        logger.info("Generated %s for workflow %s", asset_type or "asset", turn.workflow.id)

        if not config.silent:
            await turn.messenger.emit(asset)
        await turn.enqueue(
            ASSET_GENERATED_JOB,
            {"step": step.name, "asset_type": asset_type, "asset": asset},
        )
        return StepOutcome.complete()
