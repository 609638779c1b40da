# app/services/market_data/yahoo.py
"""
Yahoo Finance market data provider implementation.

This module implements the MarketDataProvider interface using the yfinance library.
Yahoo Finance is a free data source suitable for personal/educational use.

Key features:
- Live quotes (price, daily change, currency, name) from the ticker info
- Daily closing prices from the ticker history
- Spot forex rates from the "XXXYYY=X" pairs
- Comprehensive error handling
- Retry mechanism inherited from base class

Limitations:
- Rate limits (not officially documented, but exist)
- Data may be delayed (15-20 minutes for some markets)
- Taiwan listings and crypto pairs need rewritten symbols (see symbols.py)
"""

import logging
import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

import yfinance as yf

from app.services.exceptions import (
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
)
from app.services.market_data.base import (
    MarketDataProvider,
    PricePoint,
    Quote,
)
from app.services.market_data.symbols import build_forex_symbol

logger = logging.getLogger(__name__)


class YahooFinanceProvider(MarketDataProvider):
    """
    Yahoo Finance implementation of MarketDataProvider.

    Configuration:
        timeout: API request timeout in seconds (default: 10)

    Retry Behavior (inherited from MarketDataProvider):
        - Retries on ProviderUnavailableError and RateLimitError
        - Does NOT retry on TickerNotFoundError (permanent failure)
        - Uses exponential backoff: 1s → 2s → 4s
        - Maximum 3 attempts (configurable via class attributes)

    Example:
        provider = YahooFinanceProvider(timeout=15)

        quotes = provider.get_quotes(["AAPL", "2330.TW"])
        print(quotes["AAPL"].price)

        closes = provider.get_historical_closes(
            "BTC-USD", date(2024, 1, 1), date(2024, 12, 31)
        )
        print(f"Fetched {len(closes)} days of data")
    """

    def __init__(self, timeout: int = 10) -> None:
        """
        Initialize the Yahoo Finance provider.

        Args:
            timeout: Request timeout in seconds
        """
        self._timeout = timeout
        logger.info(f"YahooFinanceProvider initialized (timeout={timeout}s)")

    @property
    def name(self) -> str:
        return "yahoo"

    # =========================================================================
    # QUOTES
    # =========================================================================

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """
        Fetch live quotes, one ticker at a time.

        A symbol that fails (unknown, rate limited after retries, network
        error) is logged and left out of the result.
        """
        quotes: dict[str, Quote] = {}

        for symbol in dict.fromkeys(symbols):
            try:
                quotes[symbol] = self._execute_with_retry(self._fetch_quote, symbol)
            except TickerNotFoundError:
                logger.warning(f"No quote available for {symbol}")
            except (ProviderUnavailableError, RateLimitError) as e:
                logger.warning(f"Quote fetch failed for {symbol}: {e}")

        logger.debug(f"Fetched {len(quotes)}/{len(symbols)} quote(s)")
        return quotes

    def _fetch_quote(self, symbol: str) -> Quote:
        """Internal method to fetch one quote (called by retry wrapper)."""
        logger.debug(f"Fetching quote for {symbol}")

        try:
            info = yf.Ticker(symbol).info
        except Exception as e:
            raise self._map_error(symbol, e)

        quote = self._map_to_quote(info, symbol)
        if quote is None:
            raise TickerNotFoundError(symbol=symbol, provider=self.name)
        return quote

    # =========================================================================
    # HISTORICAL PRICE METHODS
    # =========================================================================

    def get_historical_closes(
            self,
            symbol: str,
            start_date: date,
            end_date: date,
    ) -> list[PricePoint]:
        """
        Fetch daily closing prices from Yahoo Finance.

        Args:
            symbol: Yahoo symbol (e.g., "AAPL", "2330.TW", "BTC-USD")
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            Closing prices in ascending date order; empty when Yahoo has no
            data for the range

        Raises:
            TickerNotFoundError: If ticker not found
            ProviderUnavailableError: If Yahoo Finance unavailable
        """
        return self._execute_with_retry(
            self._fetch_historical_closes,
            symbol,
            start_date,
            end_date,
        )

    def _fetch_historical_closes(
            self,
            symbol: str,
            start_date: date,
            end_date: date,
    ) -> list[PricePoint]:
        """Internal method to fetch historical closes."""
        logger.debug(
            f"Fetching historical prices for {symbol}: "
            f"{start_date} to {end_date}"
        )

        try:
            # Yahoo Finance end date is exclusive, so add 1 day
            yahoo_end = end_date + timedelta(days=1)

            df = yf.Ticker(symbol).history(
                start=start_date.isoformat(),
                end=yahoo_end.isoformat(),
                interval="1d",
                auto_adjust=False,  # Raw closes; adjusted closes rewrite past values on dividends
            )
        except Exception as e:
            raise self._map_error(symbol, e)

        if df is None or df.empty:
            logger.warning(
                f"No price data for {symbol} "
                f"between {start_date} and {end_date}"
            )
            return []

        closes = self._dataframe_to_closes(df)
        logger.debug(f"Fetched {len(closes)} days for {symbol}")
        return closes

    def _dataframe_to_closes(self, df) -> list[PricePoint]:
        """
        Convert a pandas DataFrame from yfinance to a list of PricePoint.

        Rows with a missing close are skipped. The result is sorted by date
        and holds at most one point per date (the last row wins).

        Args:
            df: DataFrame indexed by Timestamp with a "Close" column
        """
        by_date: dict[date, PricePoint] = {}

        for idx, row in df.iterrows():
            price_date = idx.date() if hasattr(idx, "date") else idx
            close_price = self._to_decimal(row.get("Close"))

            if close_price is None:
                logger.debug(f"Skipping {price_date}: missing close price")
                continue

            by_date[price_date] = PricePoint(date=price_date, price=close_price)

        return [by_date[d] for d in sorted(by_date)]

    # =========================================================================
    # FOREX
    # =========================================================================

    def get_forex_rate(self, base: str, quote: str) -> Decimal:
        """
        Fetch a spot forex rate.

        Example:
            provider.get_forex_rate("USD", "NTD")  # queries USDTWD=X
        """
        symbol = build_forex_symbol(base, quote)
        rate_quote = self._execute_with_retry(self._fetch_quote, symbol)

        if rate_quote.price <= 0:
            raise ProviderUnavailableError(
                provider=self.name,
                reason=f"non-positive rate {rate_quote.price} for {symbol}",
            )
        return rate_quote.price

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _map_to_quote(self, info: dict | None, symbol: str) -> Quote | None:
        """
        Map a Yahoo Finance info dict to a Quote.

        Yahoo returns an info dict even for invalid tickers, but without a
        price. Returns None in that case.
        """
        if not info:
            return None

        price = self._to_decimal(info.get("regularMarketPrice"))
        if price is None:
            price = self._to_decimal(info.get("currentPrice"))
        if price is None:
            return None

        previous_close = self._to_decimal(
            info.get("regularMarketPreviousClose") or info.get("previousClose")
        )

        change = self._to_decimal(info.get("regularMarketChange"))
        if change is None:
            change = price - previous_close if previous_close else Decimal("0")

        change_percent = self._to_decimal(info.get("regularMarketChangePercent"))
        if change_percent is None:
            if previous_close:
                change_percent = change / previous_close * Decimal("100")
            else:
                change_percent = Decimal("0")

        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            currency=(info.get("currency") or "USD").upper(),
            name=info.get("longName") or info.get("shortName"),
        )

    def _map_error(self, symbol: str, error: Exception) -> Exception:
        """Translate a yfinance exception into a MarketDataError subclass."""
        error_str = str(error).lower()

        if "not found" in error_str or "no data" in error_str:
            return TickerNotFoundError(symbol=symbol, provider=self.name)

        if "rate limit" in error_str or "too many requests" in error_str:
            return RateLimitError(provider=self.name)

        logger.error(f"Yahoo Finance error for {symbol}: {error}")
        return ProviderUnavailableError(provider=self.name, reason=str(error))

    @staticmethod
    def _to_decimal(value: Any) -> Decimal | None:
        """Convert a value to Decimal, returning None for NaN/inf/None."""
        if value is None:
            return None
        try:
            if not math.isfinite(float(value)):
                return None
            return Decimal(str(value)).quantize(Decimal("0.00000001"))
        except (TypeError, ValueError):
            return None
