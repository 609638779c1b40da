# app/dependencies.py
"""
Dependency injection module for FastAPI services.

This module provides singleton service instances that are shared across
all requests. This is more efficient than creating new instances per request
and ensures shared state (like the news cache and the ledger connection
pool) works correctly.

Services are lazily initialized on first use to avoid import-time side effects.
In particular, a missing LEDGER_DATABASE_URL only fails the first request
that actually reads the ledger.

Usage in routers:
    from app.dependencies import get_performance_service

    @router.get("/portfolio-performance")
    def portfolio_performance(
        service: PerformanceService = Depends(get_performance_service),
    ):
        ...

Testing:
    app.dependency_overrides[get_performance_service] = lambda: fake_service
"""

import logging
from functools import lru_cache

from app.config import settings
from app.database import LedgerDatabase
from app.services.classification import CategoryClassifier
from app.services.dashboard import DashboardService
from app.services.fx_rate_service import FXRateService
from app.services.ledger import LedgerStore, SqlLedgerStore
from app.services.market_data import PriceHistoryAdapter, YahooFinanceProvider
from app.services.news import NewsCache, NewsService
from app.services.performance import PerformanceService
from app.services.protocols import SystemClock
from app.services.valuation import ValuationService

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Using @lru_cache ensures the function returns the same instance on every call
# This is a clean pattern for lazy singleton initialization in Python
#
# Order matters: define dependencies before dependents
# 1. get_clock, get_classifier, get_ledger_database, get_market_data_provider (no deps)
# 2. get_ledger_store (database, classifier)
# 3. get_price_history_adapter (provider, classifier)
# 4. get_fx_rate_service (provider)
# 5. get_valuation_service, get_performance_service (ledger, history, fx)
# 6. get_dashboard_service (ledger, valuation, performance)
# 7. get_news_service (clock)


@lru_cache(maxsize=1)
def get_clock() -> SystemClock:
    return SystemClock()


@lru_cache(maxsize=1)
def get_classifier() -> CategoryClassifier:
    """
    Get the singleton CategoryClassifier.

    Built from the default allowlist plus settings.category_overrides.
    """
    logger.debug("Initializing singleton CategoryClassifier")
    return CategoryClassifier.from_settings(settings.category_overrides)


@lru_cache(maxsize=1)
def get_ledger_database() -> LedgerDatabase:
    """
    Get the singleton ledger database handle.

    The engine is created on first use, not here.
    """
    logger.debug("Initializing singleton LedgerDatabase")
    return LedgerDatabase(settings.ledger_database_url)


@lru_cache(maxsize=1)
def get_ledger_store() -> LedgerStore:
    logger.debug("Initializing singleton SqlLedgerStore")
    return SqlLedgerStore(get_ledger_database(), get_classifier())


@lru_cache(maxsize=1)
def get_market_data_provider() -> YahooFinanceProvider:
    """
    Get the singleton market data provider instance.

    Shares the provider across all services, ensuring rate limits are
    respected globally.
    """
    logger.debug("Initializing singleton YahooFinanceProvider")
    return YahooFinanceProvider(timeout=settings.market_data_timeout)


@lru_cache(maxsize=1)
def get_price_history_adapter() -> PriceHistoryAdapter:
    logger.debug("Initializing singleton PriceHistoryAdapter")
    return PriceHistoryAdapter(
        provider=get_market_data_provider(),
        classifier=get_classifier(),
        batch_size=settings.history_batch_size,
        max_workers=settings.history_max_workers,
    )


@lru_cache(maxsize=1)
def get_fx_rate_service() -> FXRateService:
    logger.debug("Initializing singleton FXRateService")
    return FXRateService(
        provider=get_market_data_provider(),
        fallback_rate=settings.fx_fallback_rate,
    )


@lru_cache(maxsize=1)
def get_valuation_service() -> ValuationService:
    logger.debug("Initializing singleton ValuationService")
    return ValuationService(
        ledger=get_ledger_store(),
        history=get_price_history_adapter(),
        fx_service=get_fx_rate_service(),
        clock=get_clock(),
    )


@lru_cache(maxsize=1)
def get_performance_service() -> PerformanceService:
    logger.debug("Initializing singleton PerformanceService")
    return PerformanceService(
        ledger=get_ledger_store(),
        history=get_price_history_adapter(),
        clock=get_clock(),
    )


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    logger.debug("Initializing singleton DashboardService")
    return DashboardService(
        ledger=get_ledger_store(),
        valuation=get_valuation_service(),
        performance=get_performance_service(),
    )


@lru_cache(maxsize=1)
def get_news_service() -> NewsService:
    """
    Get the singleton NewsService instance.

    Shares a single NewsCache across all requests.
    """
    logger.debug("Initializing singleton NewsService")
    clock = get_clock()
    return NewsService(
        api_key=settings.finnhub_api_key,
        cache=NewsCache(ttl_seconds=settings.news_cache_ttl_seconds, clock=clock),
        clock=clock,
        timeout=settings.market_data_timeout,
    )


# =============================================================================
# CACHE MANAGEMENT
# =============================================================================

def clear_service_caches() -> None:
    """
    Clear all service caches.

    Useful for testing or when you need to reset state. The ledger engine
    is disposed before its handle is dropped.
    """
    if get_ledger_database.cache_info().currsize:
        get_ledger_database().dispose()

    get_clock.cache_clear()
    get_classifier.cache_clear()
    get_ledger_database.cache_clear()
    get_ledger_store.cache_clear()
    get_market_data_provider.cache_clear()
    get_price_history_adapter.cache_clear()
    get_fx_rate_service.cache_clear()
    get_valuation_service.cache_clear()
    get_performance_service.cache_clear()
    get_dashboard_service.cache_clear()
    get_news_service.cache_clear()
    logger.info("Cleared all service singleton caches")
