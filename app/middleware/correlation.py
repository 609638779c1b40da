# app/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

One dashboard load fans out into many provider calls across worker
threads; tagging every log line with the request's correlation ID makes
those lines traceable back to the request.

Correlation ID Sources (in order of precedence):
1. X-Correlation-ID header
2. X-Request-ID header
3. Generated UUID

The ID is echoed back in the X-Correlation-ID response header.

Usage:
    app.add_middleware(CorrelationIdMiddleware)

    curl -H "X-Correlation-ID: my-trace-123" http://localhost:8000/dashboard
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.utils.context import set_correlation_id, clear_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


def resolve_correlation_id(request: Request) -> str:
    """Correlation ID from the request headers, or a new UUID."""
    return (
        request.headers.get(CORRELATION_ID_HEADER)
        or request.headers.get(REQUEST_ID_HEADER)
        or str(uuid.uuid4())
    )


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Stores a correlation ID in the request context and echoes it back.

    Worker threads started by the services do not inherit the context
    variable, so their log lines carry the placeholder ID.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        correlation_id = resolve_correlation_id(request)
        set_correlation_id(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({elapsed_ms:.0f}ms)"
            )
            return response

        finally:
            clear_correlation_id()
