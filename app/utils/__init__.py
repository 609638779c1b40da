# app/utils/__init__.py
"""
Cross-cutting utilities for the Net Worth Tracker.

- logging: Logging setup with correlation ID support
- context: Request-scoped correlation ID
- date_utils: Calendar helpers (day ranges, month/year arithmetic)
- fx_conversion: USD/NTD conversion and lot sizing

Usage:
    from app.utils import setup_logging
    from app.utils import get_correlation_id, set_correlation_id
    from app.utils.date_utils import get_calendar_days
"""

from app.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from app.utils.logging import setup_logging

__all__ = [
    "setup_logging",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
