# app/services/market_data/__init__.py
"""
Market data services package.

This package contains:
- Abstract interface for market data providers (base.py)
- Yahoo Finance implementation (yahoo.py)
- Ledger symbol -> provider symbol mapping (symbols.py)
- Batched, concurrent price history adapter (history.py)

Usage:
    from app.services.market_data import (
        PriceHistoryAdapter,
        YahooFinanceProvider,
    )

    adapter = PriceHistoryAdapter(YahooFinanceProvider(), classifier)
    series = adapter.fetch(["AAPL", "2330"], date_range)

Architecture:
    MarketDataProvider (ABC)
    └── YahooFinanceProvider (concrete)

    PriceHistoryAdapter
    └── Rewrites symbols, batches requests, isolates failures
"""

from app.services.market_data.base import (
    MarketDataProvider,
    PricePoint,
    Quote,
)
from app.services.market_data.history import PriceHistoryAdapter, normalize_series
from app.services.market_data.symbols import build_forex_symbol, to_provider_symbol
from app.services.market_data.yahoo import YahooFinanceProvider

__all__ = [
    # Interface and data classes
    "MarketDataProvider",
    "PricePoint",
    "Quote",
    # Implementations
    "YahooFinanceProvider",
    "PriceHistoryAdapter",
    # Helpers
    "normalize_series",
    "to_provider_symbol",
    "build_forex_symbol",
]
