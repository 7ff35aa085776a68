"""Conversational JSON extraction: parsing, field tracking and the dialog protocol."""

from __future__ import annotations

from litestar_chatflow.dialog.parsing import (
    AssetResponse,
    DialogResponse,
    ReviewResponse,
    extract_json_object,
    parse_response,
)
from litestar_chatflow.dialog.protocol import CLARIFYING_QUESTION, DialogResult, JsonDialogProtocol

__all__ = [
    "CLARIFYING_QUESTION",
    "AssetResponse",
    "DialogResponse",
    "DialogResult",
    "JsonDialogProtocol",
    "ReviewResponse",
    "extract_json_object",
    "parse_response",
]
