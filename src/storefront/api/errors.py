"""Translate domain and HTTP failures into the API's JSON error body.

Every error response has the shape::

    {"error": "Not Found", "message": "...", "status": 404,
     "path": "/orders/abc", "timestamp": "...", "field_errors": {...}}

``field_errors`` is present only for argument validation failures.
"""

from datetime import UTC, datetime
from http import HTTPStatus

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)

_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def error_body(status: int, message: str, path: str, field_errors: dict | None = None) -> dict:
    body = {
        "error": HTTPStatus(status).phrase,
        "message": message,
        "status": status,
        "path": path,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    if field_errors:
        body["field_errors"] = field_errors
    return body


def _error_response(request: Request, status: int, message: str, field_errors: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=error_body(status, message, request.url.path, field_errors),
    )


def _field_errors(messages) -> dict[str, list[str]]:
    if isinstance(messages, dict):
        return {
            str(field): [str(m) for m in (errors if isinstance(errors, (list, tuple)) else [errors])]
            for field, errors in messages.items()
        }
    return {"_entity": [str(messages)]}


def _flatten(messages) -> str:
    if isinstance(messages, dict):
        parts = []
        for errors in messages.values():
            parts.extend(str(m) for m in (errors if isinstance(errors, (list, tuple)) else [errors]))
        return "; ".join(parts)
    return str(messages)


def _payload(exc: Exception):
    # Only ValidationError carries ``messages``; the others keep what they were raised with
    return exc.args[0] if exc.args else str(exc)


async def handle_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error_response(request, 404, _flatten(_payload(exc)))


async def handle_invalid_argument(request: Request, exc: ValidationError) -> JSONResponse:
    field_errors = _field_errors(exc.messages)
    logger.info("Request rejected", path=request.url.path, field_errors=field_errors)
    return _error_response(request, 400, "Validation failed", field_errors)


async def handle_invalid_state(request: Request, exc: InvalidOperationError) -> JSONResponse:
    message = _flatten(_payload(exc))
    logger.info("Operation refused", path=request.url.path, reason=message)
    return _error_response(request, 400, message)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in _REQUEST_LOCATIONS]
        field = ".".join(location) or "request"
        field_errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return _error_response(request, 400, "Validation failed", field_errors)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = _error_response(request, exc.status_code, str(exc.detail))
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
    return _error_response(request, 500, "An unexpected error occurred")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ObjectNotFoundError, handle_not_found)
    app.add_exception_handler(ValidationError, handle_invalid_argument)
    app.add_exception_handler(InvalidOperationError, handle_invalid_state)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
