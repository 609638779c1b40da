# app/routers/dashboard.py
"""
Dashboard endpoints.

- GET /dashboard - Net worth headline figures (?currency=USD|NTD)
- GET /forex - Current USD/NTD exchange rate
"""

from fastapi import APIRouter, Depends, Query, Request

from app.dependencies import get_dashboard_service, get_fx_rate_service
from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS, RATE_LIMIT_DEFAULT
from app.models import Currency
from app.schemas.dashboard import DashboardStatsResponse, ForexRateResponse
from app.services.dashboard import DashboardService
from app.services.fx_rate_service import FXRateService

router = APIRouter(tags=["Dashboard"])


@router.get(
    "/dashboard",
    response_model=DashboardStatsResponse,
    summary="Net worth summary",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_dashboard(
        request: Request,
        currency: str = Query(Currency.USD.value, description="Display currency: USD or NTD"),
        service: DashboardService = Depends(get_dashboard_service),
) -> DashboardStatsResponse:
    """
    Total assets, active liabilities, net worth, 24h change and YTD growth.

    **Errors:**
    - 400: Unsupported currency
    - 503: Ledger not configured or unreachable
    """
    stats = service.get_stats(currency)
    return DashboardStatsResponse.model_validate(stats)


@router.get(
    "/forex",
    response_model=ForexRateResponse,
    summary="USD/NTD exchange rate",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_forex_rate(
        request: Request,
        service: FXRateService = Depends(get_fx_rate_service),
) -> ForexRateResponse:
    """
    Live USD/NTD rate; the configured fallback (`is_fallback=true`) when
    the provider cannot deliver one. Never fails.
    """
    return ForexRateResponse.model_validate(service.get_usd_to_ntd())
