### COMMENTS
# ==========================================================
# Boundary translation of failures (api/errors.py).
# ==========================================================
# Two independent steps, composed by `handle_failure`:
# - `describe_failure`: pure mapping exception -> (status, JSON envelope),
# - `record_failure`: logging for operators, no effect on the response.
#
# Mapping:
#     TaskValidationError     -> 400 {"error", "field"}
#     TaskNotFoundError       -> 404
#     TaskAlreadyExistsError  -> 409
#     framework HTTP errors   -> their own status (404 route, 405 method)
#     StoreError              -> 500 generic message
#     anything else           -> 500 generic message
# Store and unexpected details are logged, never returned.

from dataclasses import dataclass
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todos.domain.errors import (
    DomainError,
    StoreError,
    TaskAlreadyExistsError,
    TaskNotFoundError,
    TaskValidationError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


@dataclass(frozen=True)
class ErrorResponse:
    status_code: int
    body: dict
    headers: dict | None = None


def describe_failure(exc: BaseException) -> ErrorResponse:
    if isinstance(exc, TaskValidationError):
        return ErrorResponse(400, {"error": exc.message, "field": exc.field})
    if isinstance(exc, RequestValidationError):
        return ErrorResponse(400, {"error": "invalid request"})
    if isinstance(exc, TaskNotFoundError):
        return ErrorResponse(404, {"error": str(exc)})
    if isinstance(exc, TaskAlreadyExistsError):
        return ErrorResponse(409, {"error": str(exc)})
    if isinstance(exc, StarletteHTTPException):
        # unknown route, wrong method: keep the status, use the same envelope
        return ErrorResponse(exc.status_code, {"error": str(exc.detail)}, exc.headers)
    return ErrorResponse(500, {"error": INTERNAL_ERROR})


def record_failure(exc: BaseException, method: str, path: str) -> None:
    if isinstance(exc, (TaskValidationError, TaskNotFoundError, RequestValidationError, StarletteHTTPException)):
        logger.info("%s %s rejected: %s", method, path, exc)
    elif isinstance(exc, TaskAlreadyExistsError):
        logger.warning("%s %s conflict: %s", method, path, exc)
    elif isinstance(exc, StoreError):
        logger.error("%s %s store failure: %s", method, path, exc, exc_info=exc)
    else:
        logger.error("%s %s unhandled failure", method, path, exc_info=exc)


async def handle_failure(request: Request, exc: Exception) -> JSONResponse:
    record_failure(exc, request.method, request.url.path)
    response = describe_failure(exc)
    return JSONResponse(status_code=response.status_code, content=response.body, headers=response.headers)


def install_error_handlers(app) -> None:
    app.add_exception_handler(DomainError, handle_failure)
    app.add_exception_handler(RequestValidationError, handle_failure)
    app.add_exception_handler(StarletteHTTPException, handle_failure)
    # last resort; Starlette runs it in ServerErrorMiddleware and re-raises afterwards
    app.add_exception_handler(Exception, handle_failure)
