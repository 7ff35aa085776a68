"""Exception handling for chatflow web endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar import Response
from litestar.status_codes import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from litestar_chatflow.exceptions import (
    ChatflowError,
    StepNotFoundError,
    TemplateNotFoundError,
    WorkflowNotFoundError,
)

if TYPE_CHECKING:  # pragma: no cover
    from litestar import Request

__all__ = ["chatflow_error_handler"]

_NOT_FOUND = (TemplateNotFoundError, WorkflowNotFoundError, StepNotFoundError)


def chatflow_error_handler(
    _request: Request,
    exc: ChatflowError,
) -> Response:
    """Exception handler for ChatflowError.

    Missing templates, workflows and steps become 404 responses. Any other
    engine error becomes a 500.

    Args:
        request: The Litestar request object.
        exc: The raised error.

    Returns:
        Response with error details.
    """
    status_code = HTTP_404_NOT_FOUND if isinstance(exc, _NOT_FOUND) else HTTP_500_INTERNAL_SERVER_ERROR
    return Response(
        content={
            "error": type(exc).__name__,
            "message": str(exc),
        },
        status_code=status_code,
        media_type="application/json",
    )
