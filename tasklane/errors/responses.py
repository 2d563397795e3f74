"""
Error Response System for TaskLane

Converts TaskLaneError subclasses into standardized JSON error bodies and
registers the FastAPI exception handlers.
"""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tasklane.config import get_settings
from tasklane.errors.types import TaskLaneError, ErrorType
from tasklane.routes.schemas import ErrorResponse
from tasklane.structured_logger import request_id_ctx

logger = logging.getLogger(__name__)


def error_body(exc: TaskLaneError) -> dict:
    """Build the ErrorResponse payload for a TaskLaneError"""
    details = dict(exc.details) if exc.details else None
    return ErrorResponse(
        error_code=exc.error_type.value,
        message=exc.message,
        details=details,
        request_id=request_id_ctx.get() or None,
    ).model_dump()


async def tasklane_exception_handler(request: Request, exc: TaskLaneError) -> JSONResponse:
    """
    Global exception handler for TaskLaneError

    4xx errors are expected outcomes of authorization and validation and are
    logged at info level; 5xx errors at error level.
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.error_type.value}: {exc.message} ({request.method} {request.url.path})")
    else:
        logger.info(f"{exc.error_type.value}: {exc.message} ({request.method} {request.url.path})")

    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler for unexpected errors

    Converts unhandled exceptions to standardized error responses
    """
    error_id = str(uuid.uuid4())[:8]

    logger.exception(f"[{error_id}] Unhandled exception: {str(exc)}")

    details = {"error_id": error_id}
    if get_settings().debug:
        details["technical"] = str(exc)
        details["type"] = type(exc).__name__

    body = ErrorResponse(
        error_code=ErrorType.INTERNAL_ERROR.value,
        message="An unexpected error occurred",
        details=details,
        request_id=request_id_ctx.get() or None,
    ).model_dump()
    return JSONResponse(status_code=500, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the TaskLane exception handlers to an application"""
    app.add_exception_handler(TaskLaneError, tasklane_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
