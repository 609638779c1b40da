# app/routers/analytics.py
"""
Performance chart endpoints.

Provides the series behind the analytics page:
- GET /analytics/portfolio-performance - One value-weighted series per sub-portfolio
- GET /analytics/symbol-performance - Price-only series per symbol
- GET /analytics/benchmarks - Price-only series per benchmark index

Parameters:
- period: 1D, 5D, 1M, 6M, YTD, 1Y, 3Y, 5Y, 10Y, MAX (default: 1Y)
- symbols: Repeatable (?symbols=AAPL&symbols=2330). Omitted means every
  symbol in the ledger (symbol-performance) or the default benchmark set
  (benchmarks).

Returns are percentages relative to the first day of the period with
data; symbols without any price data in the period are left out of
symbol-performance but keep an empty series in benchmarks.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from app.dependencies import get_performance_service
from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS
from app.schemas.analytics import (
    PerformanceDataPointResponse,
    PerformanceResponse,
    PerformanceSeriesResponse,
)
from app.schemas.validators import validate_symbols
from app.services.exceptions import ValidationError
from app.services.performance import PerformanceSeries, PerformanceService
from app.services.periods import DEFAULT_PERIOD

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)

PERIOD_QUERY_DESCRIPTION = "Period token: 1D, 5D, 1M, 6M, YTD, 1Y, 3Y, 5Y, 10Y, MAX"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _parse_symbols(symbols: list[str] | None) -> list[str]:
    """Validate the symbols query parameter; [] when omitted."""
    try:
        return validate_symbols(symbols)
    except ValueError as e:
        raise ValidationError(str(e), field="symbols") from None


def _series_to_response(series: PerformanceSeries) -> PerformanceSeriesResponse:
    return PerformanceSeriesResponse(
        key=series.key,
        name=series.name,
        color=series.color,
        current_return=series.current_return,
        points=[
            PerformanceDataPointResponse(date=p.date, value=p.value)
            for p in series.points
        ],
    )


def _build_response(
        period: str,
        series: dict[str, PerformanceSeries],
) -> PerformanceResponse:
    return PerformanceResponse(
        period=period,
        series={key: _series_to_response(s) for key, s in series.items()},
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/portfolio-performance",
    response_model=PerformanceResponse,
    summary="Sub-portfolio performance",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_portfolio_performance(
        request: Request,
        period: str = Query(DEFAULT_PERIOD.value, description=PERIOD_QUERY_DESCRIPTION),
        service: PerformanceService = Depends(get_performance_service),
) -> PerformanceResponse:
    """
    Value-weighted return series for US stocks, Taiwan stocks and crypto.

    Each day's return is the holdings' market value relative to their
    value on the first day of the period with a non-zero value.
    All three series are always present; a sub-portfolio without
    transactions has an empty series.

    **Errors:**
    - 400: Unknown period
    - 503: Ledger not configured or unreachable
    """
    series = service.get_portfolio_performance(period)
    return _build_response(period, series)


@router.get(
    "/symbol-performance",
    response_model=PerformanceResponse,
    summary="Per-symbol price performance",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_symbol_performance(
        request: Request,
        period: str = Query(DEFAULT_PERIOD.value, description=PERIOD_QUERY_DESCRIPTION),
        symbols: list[str] | None = Query(None, description="Ledger symbols (default: all held)"),
        service: PerformanceService = Depends(get_performance_service),
) -> PerformanceResponse:
    """
    Price-only return series per symbol, independent of transactions.

    **Errors:**
    - 400: Unknown period or malformed symbol
    - 503: Ledger needed (no symbols given) but unavailable
    """
    requested = _parse_symbols(symbols)
    series = service.get_asset_performance(requested or None, period)
    return _build_response(period, series)


@router.get(
    "/benchmarks",
    response_model=PerformanceResponse,
    summary="Benchmark index performance",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_benchmark_performance(
        request: Request,
        period: str = Query(DEFAULT_PERIOD.value, description=PERIOD_QUERY_DESCRIPTION),
        symbols: list[str] | None = Query(
            None,
            description="Provider symbols, e.g. ^GSPC (default: S&P 500, 0050, BTC, USDT)",
        ),
        service: PerformanceService = Depends(get_performance_service),
) -> PerformanceResponse:
    """
    Price-only return series per benchmark.

    Benchmark symbols are sent to the provider as given. A benchmark whose
    prices cannot be fetched is returned with an empty series.

    **Errors:**
    - 400: Unknown period or malformed symbol
    """
    requested = _parse_symbols(symbols)
    series = service.get_benchmark_performance(requested or None, period)
    return _build_response(period, series)
