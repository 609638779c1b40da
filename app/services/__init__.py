# app/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive their collaborators (ledger store, price history, clock)
  via constructor injection
- Are easily testable via dependency injection

Usage:
    from app.services import PerformanceService
    from app.services import ValuationService
    from app.services import DashboardService
    from app.services import (
        InvalidPeriodError,
        MissingCredentialsError,
        MarketDataError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants and limits
    ├── protocols.py                 # Service interfaces, Clock
    ├── periods.py                   # Period resolver (1D ... MAX)
    ├── classification.py            # Category classifier
    ├── fx_rate_service.py           # USD/NTD rate with fallback
    ├── dashboard.py                 # Net worth headline figures
    ├── news.py                      # Finance headlines + cache
    ├── ledger/                      # Ledger store (read-only)
    ├── market_data/                 # Yahoo provider + history adapter
    ├── valuation/                   # Holdings, valuation, allocation
    └── performance/                 # Portfolio/asset/benchmark series
"""

from app.services.exceptions import (
    ServiceError,
    ValidationError,
    InvalidPeriodError,
    LedgerError,
    MissingCredentialsError,
    MalformedTransactionError,
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    FXConversionError,
)
from app.services.classification import CategoryClassifier
from app.services.periods import DateRange, TimePeriod, resolve_period
from app.services.protocols import Clock, SystemClock
from app.services.fx_rate_service import FXRateResult, FXRateService
from app.services.ledger import InMemoryLedgerStore, LedgerStore, SqlLedgerStore
from app.services.market_data import PriceHistoryAdapter, YahooFinanceProvider
from app.services.valuation import ValuationService
from app.services.performance import PerformanceService
from app.services.dashboard import DashboardService, DashboardStats
from app.services.news import NewsCache, NewsService

__all__ = [
    # Exceptions
    "ServiceError",
    "ValidationError",
    "InvalidPeriodError",
    "LedgerError",
    "MissingCredentialsError",
    "MalformedTransactionError",
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    "FXConversionError",
    # Building blocks
    "CategoryClassifier",
    "DateRange",
    "TimePeriod",
    "resolve_period",
    "Clock",
    "SystemClock",
    # Collaborators
    "LedgerStore",
    "InMemoryLedgerStore",
    "SqlLedgerStore",
    "PriceHistoryAdapter",
    "YahooFinanceProvider",
    "FXRateService",
    "FXRateResult",
    # Services
    "ValuationService",
    "PerformanceService",
    "DashboardService",
    "DashboardStats",
    "NewsService",
    "NewsCache",
]
