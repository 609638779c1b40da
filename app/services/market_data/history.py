# app/services/market_data/history.py
"""
Price History Adapter.

Fetches daily closing prices for many ledger symbols over one date range
and returns them keyed by the ORIGINAL ledger symbol.

Fetch strategy:
    symbols ──► dedupe ──► batches of N ──► thread pool (one task per symbol)
                                               │
                                               ▼
                               provider.get_historical_closes(...)
                                               │
                               failure ──► []  (logged, isolated)

Batches run one after another; symbols inside a batch run concurrently.
This bounds the number of simultaneous Yahoo requests while keeping
multi-symbol pages responsive.

Guarantees:
- Every requested symbol appears in the result (possibly with [])
- Each series is sorted ascending with one point per date
- One failing symbol never affects the others
"""

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor

from app.models import AssetCategory
from app.services.classification import CategoryClassifier
from app.services.market_data.base import MarketDataProvider, PricePoint, Quote
from app.services.market_data.symbols import to_provider_symbol
from app.services.periods import DateRange

logger = logging.getLogger(__name__)


class PriceHistoryAdapter:
    """
    Concurrent, failure-isolating front end to a MarketDataProvider.

    Attributes:
        _provider: Source of historical closes and quotes
        _classifier: Resolves categories for symbols passed without one
        _batch_size: Symbols per batch
        _max_workers: Thread pool size inside a batch
    """

    def __init__(
            self,
            provider: MarketDataProvider,
            classifier: CategoryClassifier,
            batch_size: int = 5,
            max_workers: int = 5,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self._provider = provider
        self._classifier = classifier
        self._batch_size = batch_size
        self._max_workers = max_workers

    # =========================================================================
    # HISTORICAL CLOSES
    # =========================================================================

    def fetch(
            self,
            symbols: Iterable[str],
            date_range: DateRange,
            categories: Mapping[str, AssetCategory] | None = None,
            rewrite_symbols: bool = True,
    ) -> dict[str, list[PricePoint]]:
        """
        Fetch closing prices for several symbols.

        Args:
            symbols: Ledger symbols (duplicates are fetched once)
            date_range: Inclusive range to fetch
            categories: Known categories per symbol; symbols missing here
                        are classified heuristically
            rewrite_symbols: False to query the symbols verbatim (benchmarks
                             such as "^GSPC" are already provider symbols)

        Returns:
            Ledger symbol -> ascending closes
        """
        unique = list(dict.fromkeys(symbols))
        result: dict[str, list[PricePoint]] = {}

        if not unique:
            return result

        query_symbols = {
            symbol: self._query_symbol(symbol, categories) if rewrite_symbols else symbol
            for symbol in unique
        }

        for i in range(0, len(unique), self._batch_size):
            batch = unique[i:i + self._batch_size]
            workers = min(self._max_workers, len(batch))

            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    symbol: executor.submit(
                        self._fetch_one, symbol, query_symbols[symbol], date_range
                    )
                    for symbol in batch
                }
                for symbol, future in futures.items():
                    result[symbol] = future.result()

        fetched = sum(1 for points in result.values() if points)
        logger.info(
            f"Price history: {fetched}/{len(unique)} symbol(s) with data "
            f"for {date_range.start} to {date_range.end}"
        )
        return result

    def _fetch_one(
            self,
            symbol: str,
            query_symbol: str,
            date_range: DateRange,
    ) -> list[PricePoint]:
        """Fetch one series; any failure yields an empty series."""
        try:
            points = self._provider.get_historical_closes(
                query_symbol, date_range.start, date_range.end
            )
        except Exception as e:
            logger.warning(
                f"Historical prices unavailable for {symbol} "
                f"(queried as {query_symbol}): {e}"
            )
            return []

        return normalize_series(points)

    # =========================================================================
    # QUOTES
    # =========================================================================

    def fetch_quotes(
            self,
            symbols: Iterable[str],
            categories: Mapping[str, AssetCategory] | None = None,
    ) -> dict[str, Quote]:
        """
        Fetch live quotes keyed by ledger symbol.

        Symbols without a quote are absent from the result; a provider
        failure yields an empty mapping.
        """
        unique = list(dict.fromkeys(symbols))
        if not unique:
            return {}

        query_symbols = {symbol: self._query_symbol(symbol, categories) for symbol in unique}

        try:
            quotes = self._provider.get_quotes(list(dict.fromkeys(query_symbols.values())))
        except Exception as e:
            logger.warning(f"Quote fetch failed for {len(unique)} symbol(s): {e}")
            return {}

        return {
            symbol: quotes[query]
            for symbol, query in query_symbols.items()
            if query in quotes
        }

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _query_symbol(
            self,
            symbol: str,
            categories: Mapping[str, AssetCategory] | None,
    ) -> str:
        category = (categories or {}).get(symbol) or self._classifier.infer(symbol)
        return to_provider_symbol(symbol, category)


def normalize_series(points: Iterable[PricePoint]) -> list[PricePoint]:
    """
    Sort a series by date, drop missing prices, keep one point per date.

    The last point seen for a date wins.
    """
    by_date: dict = {}
    for point in points:
        if point.price is None or not point.price.is_finite():
            continue
        by_date[point.date] = point
    return [by_date[d] for d in sorted(by_date)]
