# app/utils/logging.py
"""
Logging configuration for the Net Worth Tracker.

Sets up the root logger once at startup:
- Level from LOG_LEVEL (DEBUG in development, INFO in production)
- Text or JSON output from LOG_FORMAT
- Correlation ID on every record
- Third-party HTTP/market-data loggers quieted to WARNING

Usage:
    from app.utils import setup_logging

    setup_logging()                      # settings from environment
    setup_logging(level="DEBUG")         # override for local debugging

Log Levels:
    DEBUG   - Per-symbol fetches, cache hits, request timings
    INFO    - Service startup, fetch summaries, ledger loads
    WARNING - Skipped symbols, FX fallback, provider retries
    ERROR   - Calculation failures, unhandled service errors
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from app.config import settings
from app.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

# timestamp | level | correlation_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

# yfinance and the HTTP clients log every request at DEBUG/INFO
NOISY_LOGGERS = [
    "yfinance",
    "peewee",
    "urllib3",
    "urllib3.connectionpool",
    "httpx",
    "httpcore",
    "asyncio",
]

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# LogRecord attributes that are not "extra" fields
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
}


# =============================================================================
# FILTER AND FORMATTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Adds `correlation_id` to every record (placeholder outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation in production.

    Output format:
    {
        "timestamp": "2025-01-15T10:30:00.123+00:00",
        "level": "INFO",
        "logger": "app.services.performance.service",
        "correlation_id": "abc-123-def",
        "message": "Portfolio performance ...",
        "extra": { ... }
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                # Decimals, dates and the like
                extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure application-wide logging.

    Call once at startup, before the FastAPI app is created.

    Args:
        level: Log level name; defaults to settings.log_level
        log_format: "text" or "json"; defaults to settings.log_format
        suppress_noisy_loggers: Set third-party loggers to WARNING

    Raises:
        ValueError: Unknown log level name
    """
    level_name = level or settings.log_level
    log_level = get_log_level(level_name)
    format_type = log_format or settings.log_format

    if format_type.lower() == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=DEFAULT_TEXT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy_loggers:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name}, format={format_type}",
        extra={"config": {"level": level_name, "format": format_type}},
    )


def get_log_level(level_name: str) -> int:
    """
    Log level name (case-insensitive) to its logging constant.

    Raises:
        ValueError: Unknown level name
    """
    key = level_name.upper().strip()
    if key not in _LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_name}'. "
            f"Valid levels are: {', '.join(_LEVELS)}"
        )
    return _LEVELS[key]
