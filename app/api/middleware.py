"""
HTTP middleware.

- ``BodySizeLimitMiddleware`` rejects requests whose declared body is larger
  than ``MAX_BODY_BYTES`` before they reach routing.
- ``RequestLoggingMiddleware`` logs one line per request with status and
  duration.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from app.api.errors import render_error
from app.core.exceptions import ErrorKind

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """413 for requests with a Content-Length above ``max_bytes``."""

    def __init__(self, app: ASGIApp, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                return render_error(ErrorKind.MALFORMED_BODY, "Invalid Content-Length header")
            if declared > self.max_bytes:
                logger.warning("Rejected %s %s: body of %d bytes exceeds %d",
                               request.method, request.url.path, declared, self.max_bytes)
                return render_error(ErrorKind.PAYLOAD_TOO_LARGE)
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log ``METHOD path -> status (ms)`` for every request."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, duration_ms)
        return response
