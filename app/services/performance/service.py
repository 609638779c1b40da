# app/services/performance/service.py
"""
Performance Service - Orchestrator for the analytics page series.

This is the single entry point for all performance operations:
- get_portfolio_performance(): One value-weighted series per sub-portfolio
- get_total_performance(): One value-weighted series for the whole ledger
- get_asset_performance(): Price-only series per symbol
- get_benchmark_performance(): Price-only series per benchmark

Design Principles:
- Dependency Injection: ledger, price history adapter and clock
- No HTTP Knowledge: Raises domain exceptions, not HTTPException
- Partial failure: one failing symbol/category yields an empty series,
  siblings still compute
- Recomputed per call: nothing is cached between requests

Concurrency:
    Price history is fetched once for every symbol involved (the adapter
    fans out per symbol). Sub-portfolio series are then computed in a
    thread pool, one task per category, and joined before returning.

Usage:
    service = PerformanceService(ledger, history)
    series = service.get_portfolio_performance("1Y")
    print(series["usStocks"].current_return)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from app.services.constants import DEFAULT_BENCHMARKS, PORTFOLIO_SERIES
from app.services.ledger.base import LedgerStore
from app.services.market_data.history import PriceHistoryAdapter
from app.services.performance.calculators import (
    calculate_asset_performance,
    calculate_portfolio_performance,
    distinct_symbols,
    group_transactions_by_series,
    symbol_categories,
)
from app.services.performance.types import PerformanceSeries
from app.services.periods import TimePeriod, resolve_period
from app.services.protocols import SystemClock

if TYPE_CHECKING:
    from app.services.protocols import Clock

logger = logging.getLogger(__name__)

TOTAL_SERIES_KEY = "total"
TOTAL_SERIES_NAME = "My Portfolio"


class PerformanceService:
    """
    Builds performance series from the ledger and price history.

    Attributes:
        _ledger: Read-only ledger store
        _history: Historical closes and quotes keyed by ledger symbol
        _clock: Source of today's date
        _max_workers: Thread pool size for per-category computation
    """

    def __init__(
            self,
            ledger: LedgerStore,
            history: PriceHistoryAdapter,
            clock: Clock | None = None,
            max_workers: int = 3,
    ) -> None:
        self._ledger = ledger
        self._history = history
        self._clock = clock or SystemClock()
        self._max_workers = max_workers

        logger.info("PerformanceService initialized")

    # =========================================================================
    # PORTFOLIO MODE
    # =========================================================================

    def get_portfolio_performance(
            self,
            period: str | TimePeriod,
    ) -> dict[str, PerformanceSeries]:
        """
        One series per sub-portfolio (US stocks, Taiwan stocks, crypto).

        Args:
            period: Period token (e.g. "1Y")

        Returns:
            Series keyed by "usStocks", "taiwanStocks", "crypto" (always all
            three; a category without transactions has an empty series)

        Raises:
            InvalidPeriodError: Unknown period token
            MissingCredentialsError: Ledger store unavailable
        """
        today = self._clock.today()
        date_range = resolve_period(period, today=today)

        transactions = self._ledger.list_transactions()
        groups = group_transactions_by_series(transactions, PORTFOLIO_SERIES.keys())

        involved = [t for group in groups.values() for t in group]
        price_history = self._history.fetch(
            distinct_symbols(involved),
            date_range,
            categories=symbol_categories(involved),
        )

        def build(key: str) -> PerformanceSeries:
            name, color = PORTFOLIO_SERIES[key]
            try:
                points = calculate_portfolio_performance(
                    groups[key], price_history, date_range, today
                )
            except Exception as e:
                logger.error(f"Performance calculation failed for {key}: {e}", exc_info=True)
                points = []
            return PerformanceSeries(key=key, name=name, color=color, points=points)

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            results = dict(zip(PORTFOLIO_SERIES, executor.map(build, PORTFOLIO_SERIES)))

        logger.info(
            f"Portfolio performance {date_range.start} to {date_range.end}: "
            + ", ".join(f"{k}={len(s.points)}pts" for k, s in results.items())
        )
        return results

    def get_total_performance(self, period: str | TimePeriod) -> PerformanceSeries:
        """
        One value-weighted series over every transaction in the ledger.

        Note:
            Holdings are summed at quoted prices with no lot multiplier or
            FX conversion, so a Taiwan lot counts as one NTD-priced share
            next to USD-priced assets. The dashboard's YTD growth inherits
            this.

        Raises:
            InvalidPeriodError: Unknown period token
            MissingCredentialsError: Ledger store unavailable
        """
        today = self._clock.today()
        date_range = resolve_period(period, today=today)

        transactions = self._ledger.list_transactions()
        price_history = self._history.fetch(
            distinct_symbols(transactions),
            date_range,
            categories=symbol_categories(transactions),
        )
        points = calculate_portfolio_performance(transactions, price_history, date_range, today)

        return PerformanceSeries(key=TOTAL_SERIES_KEY, name=TOTAL_SERIES_NAME, points=points)

    # =========================================================================
    # ASSET MODE
    # =========================================================================

    def get_asset_performance(
            self,
            symbols: list[str] | None,
            period: str | TimePeriod,
    ) -> dict[str, PerformanceSeries]:
        """
        Price-only series per symbol.

        Args:
            symbols: Ledger symbols; None or empty means every symbol in
                     the ledger
            period: Period token

        Returns:
            Series keyed by symbol. Symbols without prices in the range are
            omitted. Display names come from live quotes when available.

        Raises:
            InvalidPeriodError: Unknown period token
            MissingCredentialsError: Ledger needed (no symbols) but unavailable
        """
        date_range = resolve_period(period, today=self._clock.today())

        categories = None
        if not symbols:
            transactions = self._ledger.list_transactions()
            symbols = distinct_symbols(transactions)
            categories = symbol_categories(transactions)

        price_history = self._history.fetch(symbols, date_range, categories=categories)
        quotes = self._history.fetch_quotes(symbols, categories=categories)

        results: dict[str, PerformanceSeries] = {}
        for symbol in dict.fromkeys(symbols):
            points = calculate_asset_performance(price_history.get(symbol, []), date_range)
            if not points:
                logger.debug(f"No in-range prices for {symbol}; omitted")
                continue

            quote = quotes.get(symbol)
            name = quote.name if quote is not None and quote.name else symbol
            results[symbol] = PerformanceSeries(key=symbol, name=name, points=points)

        return results

    def get_benchmark_performance(
            self,
            symbols: list[str] | None,
            period: str | TimePeriod,
    ) -> dict[str, PerformanceSeries]:
        """
        Price-only series per benchmark.

        Args:
            symbols: Provider symbols queried verbatim; None or empty means
                     the default benchmark set
            period: Period token

        Returns:
            Series keyed by benchmark label ("sp500", ... or the symbol
            itself for explicit symbols). A failed benchmark keeps its
            entry with an empty series.

        Raises:
            InvalidPeriodError: Unknown period token
        """
        date_range = resolve_period(period, today=self._clock.today())

        if symbols:
            benchmarks = {symbol: (symbol, symbol, None) for symbol in symbols}
        else:
            benchmarks = dict(DEFAULT_BENCHMARKS)

        price_history = self._history.fetch(
            [symbol for symbol, _, _ in benchmarks.values()],
            date_range,
            rewrite_symbols=False,
        )

        results: dict[str, PerformanceSeries] = {}
        for label, (symbol, name, color) in benchmarks.items():
            points = calculate_asset_performance(price_history.get(symbol, []), date_range)
            if not points:
                logger.warning(f"Benchmark {label} ({symbol}) has no data for {period}")
            results[label] = PerformanceSeries(key=label, name=name, color=color, points=points)

        return results
