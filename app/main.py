# app/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)
"""

import logging

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import LedgerDatabase
from app.dependencies import get_ledger_database
from app.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_HEALTH,
)
from app.routers import (
    analytics_router,
    assets_router,
    dashboard_router,
    news_router,
)
from app.schemas.errors import ErrorDetail, ValidationErrorDetail
from app.services.exceptions import (
    ServiceError,
    ValidationError,
    InvalidPeriodError,
    MissingCredentialsError,
    MarketDataError,
    RateLimitError,
    FXConversionError,
)
from app.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Personal net worth tracking and portfolio performance API",
    version="0.1.0",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================
# Origins are configured via CORS_ORIGINS environment variable

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

# Required by slowapi
app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service-layer exceptions carry no HTTP knowledge; they are converted to
# ErrorDetail responses here. Handlers are matched on the most specific
# registered class, so subclasses are listed before their bases.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(InvalidPeriodError)
async def invalid_period_handler(request: Request, exc: InvalidPeriodError) -> JSONResponse:
    """Handle unknown period tokens (400)."""
    logger.warning(f"Invalid period: {exc.period}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="InvalidPeriodError",
            message=str(exc),
            details={"period": exc.period, "valid_options": exc.valid_options},
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="ValidationError",
            message=str(exc),
            details={"field": exc.field} if exc.field else None,
        ).model_dump(),
    )


@app.exception_handler(MissingCredentialsError)
async def missing_credentials_handler(
    request: Request, exc: MissingCredentialsError
) -> JSONResponse:
    """Handle an unconfigured or unreachable ledger (503)."""
    logger.error(f"Ledger unavailable: {exc.reason}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="MissingCredentialsError",
            message="Ledger store is not available",
            details={"reason": exc.reason},
        ).model_dump(),
    )


@app.exception_handler(RateLimitError)
async def provider_rate_limit_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    """Handle an upstream rate limit that escaped local recovery (503)."""
    logger.warning(f"Provider rate limit: {exc}")
    headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="RateLimitError",
            message=str(exc),
            details={"provider": exc.provider, "retry_after": exc.retry_after},
        ).model_dump(),
        headers=headers,
    )


@app.exception_handler(MarketDataError)
async def market_data_error_handler(request: Request, exc: MarketDataError) -> JSONResponse:
    """Handle market data errors that escaped local recovery (503)."""
    logger.error(f"Market data error: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={"provider": exc.provider} if exc.provider else None,
        ).model_dump(),
    )


@app.exception_handler(FXConversionError)
async def fx_conversion_error_handler(
    request: Request, exc: FXConversionError
) -> JSONResponse:
    """Handle FX conversion errors (400)."""
    logger.warning(f"FX conversion error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="FXConversionError",
            message=str(exc),
            details={"currency": exc.currency} if exc.currency else None,
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Convert FastAPI's default {"detail": "..."} body to ErrorDetail.
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        422: "ValidationError",
        429: "RateLimitError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
    }
    error_type = error_types.get(exc.status_code, "HTTPError")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_type,
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as ValidationErrorDetail (422)."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=errors,
        ).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(dashboard_router)  # /dashboard, /forex
app.include_router(assets_router)  # /assets/*
app.include_router(analytics_router)  # /analytics/*
app.include_router(news_router)  # /news


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """
    API root - returns basic application info.
    """
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(
        request: Request,
        ledger_db: LedgerDatabase = Depends(get_ledger_database),
):
    """
    Health check of the ledger connection.

    **Response Status Codes:**
    - 200: Ledger reachable
    - 503: Ledger not configured or unreachable

    Market data is not checked: provider failures degrade individual
    figures instead of failing requests.
    """
    ledger = ledger_db.check_health()
    checks = {
        "ledger": {**ledger, "critical": True},
        "news": {
            "status": "live" if settings.is_news_configured else "mock",
            "critical": False,
        },
    }

    overall_status = ledger["status"]
    response_data = {"status": overall_status, "checks": checks}

    if overall_status != "healthy":
        return JSONResponse(status_code=503, content=response_data)

    return response_data


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """
    Liveness probe: HTTP 200 whenever the process is running.

    Does NOT check dependencies; use /health for that.
    """
    return {"status": "alive"}
