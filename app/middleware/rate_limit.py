# app/middleware/rate_limit.py
"""
Rate limiting middleware for API protection.

Every analytics request fans out to Yahoo Finance for each symbol in the
ledger, so the read endpoints are limited per client to keep the upstream
quota intact.

Rate limits are configured in app/services/constants.py. Limiting can be
switched off with RATE_LIMIT_ENABLED=false (the test suite does this).

Key by: Client IP address (X-Forwarded-For from trusted proxies, else direct IP)
Storage: In-memory (single-instance deployment)

Usage:
    from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS

    @router.get("/portfolio-performance")
    @limiter.limit(RATE_LIMIT_ANALYTICS)
    def portfolio_performance(request: Request):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import settings
from app.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_ANALYTICS,
)

logger = logging.getLogger(__name__)

# Seconds a limited client is told to wait
DEFAULT_RETRY_AFTER = 60


def _is_trusted_proxy(request: Request) -> bool:
    """
    Check if the immediate client is a trusted proxy.

    Forwarded headers are only honoured from known proxies, otherwise any
    client could pick its own rate limit key.
    """
    if settings.trust_proxy_headers:
        return True

    return get_remote_address(request) in settings.trusted_proxy_ips


def _get_client_ip(request: Request) -> str:
    """
    Extract the client IP used as the rate limit key.

    Args:
        request: Starlette/FastAPI request object

    Returns:
        Client IP address string
    """
    if _is_trusted_proxy(request):
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # First entry is the original client
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return get_remote_address(request)


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


# =============================================================================
# RATE LIMIT EXCEEDED HANDLER
# =============================================================================

async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """
    Return 429 in the standard error format with a Retry-After header.
    """
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(
        f"Rate limit exceeded for {_get_client_ip(request)}: {limit_info}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {
                "retry_after": DEFAULT_RETRY_AFTER,
            },
        },
        headers={
            "Retry-After": str(DEFAULT_RETRY_AFTER),
        },
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_HEALTH",
    "RATE_LIMIT_ANALYTICS",
]
