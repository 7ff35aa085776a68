"""Workflow store implementations."""

from __future__ import annotations

from litestar_chatflow.store.memory import InMemoryWorkflowStore

__all__ = ["InMemoryWorkflowStore"]
