# app/routers/__init__.py
"""
API routers for the Net Worth Tracker.

Each router handles one page of the frontend:
- analytics: Performance series (sub-portfolios, symbols, benchmarks)
- assets: Current valuation and category allocation
- dashboard: Net worth summary and the USD/NTD rate
- news: Finance headlines
"""

from app.routers.analytics import router as analytics_router
from app.routers.assets import router as assets_router
from app.routers.dashboard import router as dashboard_router
from app.routers.news import router as news_router

__all__ = [
    "analytics_router",
    "assets_router",
    "dashboard_router",
    "news_router",
]
