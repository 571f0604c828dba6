"""Exception handlers for the DocFlow API.

Maps each workflow error category to one HTTP status and renders the
standard ``ErrorResponse`` body, so clients can tell "you may not do
this" (403) apart from "someone already decided this" (409).
"""

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docflow.api.schemas.common import ErrorResponse
from docflow.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    RoutingError,
    ValidationError,
    WorkflowError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_MAP: Dict[Type[WorkflowError], int] = {
    ValidationError: 422,
    PermissionDeniedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    RoutingError: 500,
}

ERROR_TITLES: Dict[Type[WorkflowError], str] = {
    ValidationError: "Validation failed",
    PermissionDeniedError: "Permission denied",
    NotFoundError: "Not found",
    ConflictError: "Conflict",
    RoutingError: "Approver routing failed",
}


def status_for(exc: WorkflowError) -> int:
    """HTTP status for an error, using the closest mapped base class."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[cls]
    return 500


def _title_for(exc: WorkflowError) -> str:
    for cls in type(exc).__mro__:
        if cls in ERROR_TITLES:
            return ERROR_TITLES[cls]
    return "Workflow error"


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    status_code = status_for(exc)
    log_msg = f"{request.method} {request.url.path} failed [{exc.code}] ({status_code}): {exc.message}"
    if status_code >= 500:
        logger.error(log_msg)
    else:
        logger.info(log_msg)

    body = ErrorResponse(
        error=_title_for(exc),
        detail=exc.message,
        code=exc.code,
        errors=getattr(exc, "errors", None) or None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:
    """Register workflow error handlers on a FastAPI application."""
    app.add_exception_handler(WorkflowError, workflow_error_handler)
