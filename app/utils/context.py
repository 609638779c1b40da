# app/utils/context.py
"""
Request context for the Net Worth Tracker.

Holds the correlation ID of the request being served. Uses contextvars,
so the value follows async/await calls within one request.

Usage:
    from app.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")     # middleware
    get_correlation_id()              # anywhere else -> "abc-123"
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the current request, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)
