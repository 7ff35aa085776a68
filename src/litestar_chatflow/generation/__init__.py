"""Asset generation and the review/revision loop."""

from __future__ import annotations

from litestar_chatflow.generation.loop import AssetGenerator, ReviewInterpreter, ReviewResult, select_content_template

__all__ = ["AssetGenerator", "ReviewInterpreter", "ReviewResult", "select_content_template"]
