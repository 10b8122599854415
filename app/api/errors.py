"""
Error rendering.

Single place where failures become HTTP responses. Every error body has the
same shape::

    {"error": "...", "message": "...", "code": "..."}

validation errors add ``details`` (one message per violation) and, outside
production, internal errors add ``stack``.

Register the handlers from the application factory::

    register_exception_handlers(app)
"""

import logging
import traceback
from http import HTTPStatus
from typing import Any, Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, settings
from app.core.exceptions import DEFAULT_MESSAGES, ErrorKind, UserServiceError
from app.schemas.messages import describe_errors

logger = logging.getLogger(__name__)

JSON_DECODE_ERROR = "json_invalid"


def error_body(kind: ErrorKind, message: Optional[str] = None,
               details: Optional[Iterable[str]] = None, **extra: Any) -> dict[str, Any]:
    """Uniform JSON payload for one error kind."""
    body: dict[str, Any] = {
        "error": kind.label,
        "message": message or DEFAULT_MESSAGES[kind],
        "code": kind.code,
    }
    if details is not None:
        body["details"] = list(details)
    body.update(extra)
    return body


def render_error(kind: ErrorKind, message: Optional[str] = None,
                 details: Optional[Iterable[str]] = None, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=kind.status_code, content=error_body(kind, message, details, **extra))


def classify_validation_error(exc: RequestValidationError) -> ErrorKind:
    """An unparseable body is a malformed request, anything else a validation failure."""
    if any(error.get("type") == JSON_DECODE_ERROR for error in exc.errors()):
        return ErrorKind.MALFORMED_BODY
    return ErrorKind.VALIDATION


def _settings_for(request: Request) -> Settings:
    return getattr(request.app.state, "settings", settings)


async def service_error_handler(request: Request, exc: UserServiceError) -> JSONResponse:
    """Domain and classified storage errors: the kind decides everything."""
    if exc.kind.status_code >= 500:
        logger.error("%s for %s %s: %s", exc.kind.code, request.method, request.url.path, exc.message)
    else:
        logger.info("%s for %s %s", exc.kind.code, request.method, request.url.path)

    message = exc.message
    if exc.kind is ErrorKind.INTERNAL and _settings_for(request).is_production:
        message = None
    return render_error(exc.kind, message, exc.details)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """400 for body, path and query errors (FastAPI would answer 422)."""
    kind = classify_validation_error(exc)
    if kind is ErrorKind.MALFORMED_BODY:
        logger.info("Malformed JSON body for %s %s", request.method, request.url.path)
        return render_error(kind)

    details = describe_errors(exc.errors())
    logger.info("Validation failed for %s %s: %d error(s)", request.method, request.url.path, len(details))
    return render_error(kind, "The submitted data is not valid", details)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Fallback for anything not classified upstream. The message is generic in
    production; elsewhere it carries the exception text and stack.
    """
    logger.exception("Unhandled error for %s %s", request.method, request.url.path)
    if _settings_for(request).is_production:
        return render_error(ErrorKind.INTERNAL)
    stack = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return render_error(ErrorKind.INTERNAL, str(exc) or exc.__class__.__name__, stack=stack)


# Routing failures raised by the framework itself
HTTP_STATUS_KINDS = {
    404: ErrorKind.ROUTE_NOT_FOUND,
    405: ErrorKind.METHOD_NOT_ALLOWED,
}

AVAILABLE_ENDPOINTS = [
    "GET /",
    "GET /api/health",
    "GET /api/users",
    "GET /api/users/search",
    "POST /api/users",
    "GET /api/users/{id}",
    "PUT /api/users/{id}",
    "DELETE /api/users/{id}",
]


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other HTTP errors in the uniform shape."""
    kind = HTTP_STATUS_KINDS.get(exc.status_code)
    if kind is ErrorKind.ROUTE_NOT_FOUND:
        body = error_body(kind, f"Route {request.url.path} does not exist",
                          availableEndpoints=AVAILABLE_ENDPOINTS)
    elif kind is not None:
        body = error_body(kind, f"Method {request.method} is not allowed on {request.url.path}")
    else:
        phrase = HTTPStatus(exc.status_code).phrase
        body = {"error": phrase, "message": str(exc.detail), "code": phrase.upper().replace(" ", "_")}
    logger.info("%d for %s %s", exc.status_code, request.method, request.url.path)
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


# Helper to register all handlers on an app (call this from your app factory)
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UserServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
