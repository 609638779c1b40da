# app/services/market_data/base.py
"""
Abstract interface for market data providers.

This module defines the contract that all market data providers must follow.
Using an abstract base class allows for:
- Swapping Yahoo Finance for another source without touching the engine
- Mock implementations for testing
- Consistent retry behavior across all providers

Contract:
- Symbols passed in are PROVIDER symbols (already rewritten, e.g. "2330.TW",
  "BTC-USD"); mapping from ledger symbols happens in symbols.py
- Quote batches tolerate unknown/delisted symbols: they are simply absent
  from the result
- Single-symbol calls raise MarketDataError subclasses; callers decide
  how to degrade
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TypeVar, Callable, Any

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from app.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

# Type variable for generic return type in retry method
T = TypeVar('T')


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Quote:
    """
    Live quote snapshot for one symbol.

    Attributes:
        symbol: Symbol the quote was requested for
        price: Last traded price in `currency`
        change: Absolute change versus previous close
        change_percent: Percent change versus previous close (2.5 = +2.5%)
        currency: Quote currency as reported by the provider
        name: Long or short instrument name, when known
    """

    symbol: str
    price: Decimal
    change: Decimal = Decimal("0")
    change_percent: Decimal = Decimal("0")
    currency: str = "USD"
    name: str | None = None


@dataclass(frozen=True)
class PricePoint:
    """
    Daily closing price.

    Attributes:
        date: Trading date (no time component)
        price: Closing price
    """

    date: date
    price: Decimal


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class MarketDataProvider(ABC):
    """
    Abstract base class for market data providers.

    Retry Behavior:
        The base class provides a `_execute_with_retry` method that implements
        exponential backoff retry logic. Subclasses can override the retry
        configuration by setting class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
        - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
        - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

    Retryable Exceptions:
        - ProviderUnavailableError: Network issues, timeouts, server errors
        - RateLimitError: API rate limit exceeded

    Non-Retryable Exceptions:
        - TickerNotFoundError: Permanent failure (symbol doesn't exist)
    """

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: int = 1
    RETRY_MAX_WAIT: int = 10
    RETRY_MULTIPLIER: int = 1

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this provider.

        Returns:
            Provider name (e.g., "yahoo")
        """
        pass

    @abstractmethod
    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """
        Fetch live quotes for several symbols.

        Unknown symbols and per-symbol failures are left out of the result;
        this method never raises for a partially failed batch.

        Args:
            symbols: Provider symbols (e.g. ["AAPL", "2330.TW", "BTC-USD"])

        Returns:
            Quotes keyed by the requested symbol
        """
        pass

    @abstractmethod
    def get_historical_closes(
            self,
            symbol: str,
            start_date: date,
            end_date: date,
    ) -> list[PricePoint]:
        """
        Fetch daily closing prices for one symbol.

        Args:
            symbol: Provider symbol
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            Closing prices in ascending date order (trading days only)

        Raises:
            TickerNotFoundError: Symbol not known to the provider
            ProviderUnavailableError: Network or API error (retryable)
            RateLimitError: Rate limit exceeded (retryable)
        """
        pass

    @abstractmethod
    def get_forex_rate(self, base: str, quote: str) -> Decimal:
        """
        Fetch the spot rate "1 base = X quote".

        Args:
            base: Base currency code (e.g. "USD")
            quote: Quote currency code (e.g. "NTD")

        Returns:
            The rate X

        Raises:
            MarketDataError: If no rate could be obtained
        """
        pass

    # =========================================================================
    # RETRY HELPER METHOD
    # =========================================================================

    def _execute_with_retry(
            self,
            func: Callable[..., T],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Execute a function with retry logic for transient failures.

        Uses exponential backoff for ProviderUnavailableError and
        RateLimitError; everything else propagates immediately.

        Returns:
            Return value of func

        Raises:
            The last exception if all retries fail
        """

        @retry(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> T:
            return func(*args, **kwargs)

        return _inner()

    def is_available(self) -> bool:
        """
        Check if the provider is currently available.

        Default implementation returns True. Subclasses can override
        to implement health checks.
        """
        return True
