"""Maps domain errors to HTTP responses.

Every error body has the same shape::

    {"error": {"<field>": ["<message>", ...]}, "kind": "<ErrorName>"}
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from ordering.errors import InsufficientStock, InternalFailure, InvalidTransition, OrderCreationFailed

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, exc: Exception, messages=None) -> JSONResponse:
    if messages is None:
        messages = getattr(exc, "messages", None) or {"_entity": [str(exc)]}
    return JSONResponse(
        status_code=status_code,
        content={"error": messages, "kind": type(exc).__name__},
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
        messages.setdefault(field, []).append(error["msg"])
    return _error_response(400, exc, messages)


async def _validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(400, exc)


async def _not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error_response(404, exc)


async def _invalid_transition_handler(request: Request, exc: InvalidTransition) -> JSONResponse:
    return _error_response(409, exc)


async def _insufficient_stock_handler(request: Request, exc: InsufficientStock) -> JSONResponse:
    return _error_response(409, exc)


async def _order_creation_failed_handler(request: Request, exc: OrderCreationFailed) -> JSONResponse:
    status_code = 409 if isinstance(exc.cause, InsufficientStock) else 422
    return _error_response(status_code, exc)


async def _invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return _error_response(422, exc)


async def _internal_failure_handler(request: Request, exc: InternalFailure) -> JSONResponse:
    logger.error("Request failed", path=request.url.path, error=str(exc))
    return _error_response(500, exc)


async def _unexpected_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return _error_response(500, exc, {"_service": ["Internal server error"]})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(ValidationError, _validation_handler)
    app.add_exception_handler(InvalidTransition, _invalid_transition_handler)
    app.add_exception_handler(ObjectNotFoundError, _not_found_handler)
    app.add_exception_handler(InsufficientStock, _insufficient_stock_handler)
    app.add_exception_handler(OrderCreationFailed, _order_creation_failed_handler)
    app.add_exception_handler(InvalidOperationError, _invalid_operation_handler)
    app.add_exception_handler(InternalFailure, _internal_failure_handler)
    app.add_exception_handler(Exception, _unexpected_handler)
