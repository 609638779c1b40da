# app/services/performance/__init__.py
"""
Performance Service Package.

Usage:
    from app.services.performance import PerformanceService

    service = PerformanceService(ledger, history)
    by_category = service.get_portfolio_performance("1Y")
    benchmarks = service.get_benchmark_performance(None, "1Y")

Architecture:
    performance/
    ├── __init__.py      # This file - package exports
    ├── types.py         # PerformanceDataPoint, PerformanceSeries
    ├── calculators.py   # Portfolio mode, asset mode, price lookup
    └── service.py       # PerformanceService orchestrator
"""

from app.services.performance.calculators import (
    PriceLookup,
    calculate_asset_performance,
    calculate_portfolio_performance,
    group_transactions_by_series,
    lookup_price,
    series_key_for,
)
from app.services.performance.service import PerformanceService
from app.services.performance.types import PerformanceDataPoint, PerformanceSeries

__all__ = [
    "PerformanceService",
    "PerformanceDataPoint",
    "PerformanceSeries",
    "PriceLookup",
    "lookup_price",
    "calculate_portfolio_performance",
    "calculate_asset_performance",
    "group_transactions_by_series",
    "series_key_for",
]
