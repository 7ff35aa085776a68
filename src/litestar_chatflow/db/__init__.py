"""Database persistence layer for litestar-chatflow.

This module provides SQLAlchemy models, repositories and a
:class:`~litestar_chatflow.core.protocols.WorkflowStore` implementation.

Requires the [db] extra:
    pip install litestar-chatflow[db]
"""

from __future__ import annotations

from litestar_chatflow.db.models import (
    ChatflowMessageModel,
    ChatflowStepModel,
    ChatflowThreadModel,
    ChatflowWorkflowModel,
)
from litestar_chatflow.db.repositories import (
    ChatflowMessageRepository,
    ChatflowStepRepository,
    ChatflowThreadRepository,
    ChatflowWorkflowRepository,
)
from litestar_chatflow.db.store import SQLAlchemyWorkflowStore

__all__ = [
    "ChatflowMessageModel",
    "ChatflowMessageRepository",
    "ChatflowStepModel",
    "ChatflowStepRepository",
    "ChatflowThreadModel",
    "ChatflowThreadRepository",
    "ChatflowWorkflowModel",
    "ChatflowWorkflowRepository",
    "SQLAlchemyWorkflowStore",
]
