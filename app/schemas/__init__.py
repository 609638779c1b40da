# app/schemas/__init__.py
"""
Pydantic schemas for API response validation.

This package contains all Pydantic schemas organized by domain:
- analytics: Performance series (portfolio, symbols, benchmarks)
- assets: Current valuation and category allocation
- dashboard: Net worth headline figures and the USD/NTD rate
- errors: Error response formats
- news: Finance headlines
- validators: Reusable validation functions and precision types

Usage:
    from app.schemas import PerformanceResponse
    from app.schemas import AssetListResponse, CategorySummaryListResponse
    from app.schemas import DashboardStatsResponse, ForexRateResponse
"""

from app.schemas.analytics import (
    PerformanceDataPointResponse,
    PerformanceResponse,
    PerformanceSeriesResponse,
)
from app.schemas.assets import (
    AssetCategorySummaryResponse,
    AssetListResponse,
    AssetValuationResponse,
    CategorySummaryListResponse,
)
from app.schemas.dashboard import DashboardStatsResponse, ForexRateResponse
from app.schemas.errors import ErrorDetail, ValidationErrorDetail
from app.schemas.news import NewsArticleResponse, NewsFeedResponse

__all__ = [
    # Analytics
    "PerformanceDataPointResponse",
    "PerformanceSeriesResponse",
    "PerformanceResponse",
    # Assets
    "AssetValuationResponse",
    "AssetListResponse",
    "AssetCategorySummaryResponse",
    "CategorySummaryListResponse",
    # Dashboard
    "DashboardStatsResponse",
    "ForexRateResponse",
    # News
    "NewsArticleResponse",
    "NewsFeedResponse",
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
]
