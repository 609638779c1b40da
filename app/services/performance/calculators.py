# app/services/performance/calculators.py
"""
Performance series calculation functions.

This module contains the two return calculations behind the analytics
charts, plus the price lookup and grouping helpers they share.

Portfolio mode (value-weighted):
    For every calendar day d in [start, min(end, today)]:
        value(d) = Σ quantity_h(d) × price_h(d)    over holdings with qty > 0
        return(d) = (value(d) - baseline) / baseline × 100

    baseline = value(start), or the first later value > 0 when value(start)
    is 0. Return is 0 while no baseline exists.

Asset mode (price-only):
    return(d) = (price(d) - price(first)) / price(first) × 100
    over the trading days inside the range.

Price lookup (forward fill):
    exact date → latest date strictly before → earliest known → no price

Note:
    Portfolio values use ledger quantities without the Taiwan lot
    multiplier. Returns are ratios, so a constant multiplier cancels out
    within a series.
"""

import bisect
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal

from app.models import AssetCategory
from app.services.constants import HUNDRED, TW_LISTING_SUFFIXES, ZERO
from app.services.ledger.types import Transaction
from app.services.market_data.base import PricePoint
from app.services.performance.types import PerformanceDataPoint
from app.services.periods import DateRange
from app.services.valuation.calculators import HoldingsTimeline
from app.utils.date_utils import get_calendar_days

logger = logging.getLogger(__name__)


# =============================================================================
# PRICE LOOKUP
# =============================================================================

class PriceLookup:
    """
    Forward-filling price lookup over one ascending series.

    Example:
        lookup = PriceLookup(points)
        lookup.price_on(date(2024, 1, 6))  # Friday's close on a Saturday
    """

    def __init__(self, points: Iterable[PricePoint]) -> None:
        ordered = sorted(points, key=lambda p: p.date)
        self._dates = [p.date for p in ordered]
        self._prices = [p.price for p in ordered]

    def price_on(self, day: date) -> Decimal | None:
        """
        Price for a day.

        Returns:
            Exact close, else the latest close strictly before the day,
            else the earliest known close; None for an empty series
        """
        if not self._dates:
            return None

        # Index of the first date > day: everything left of it is <= day
        idx = bisect.bisect_right(self._dates, day)
        if idx == 0:
            return self._prices[0]
        return self._prices[idx - 1]


def lookup_price(points: list[PricePoint], day: date) -> Decimal | None:
    """One-off forward-fill lookup (see PriceLookup)."""
    return PriceLookup(points).price_on(day)


# =============================================================================
# PORTFOLIO MODE
# =============================================================================

def calculate_portfolio_performance(
        transactions: list[Transaction],
        price_history: Mapping[str, list[PricePoint]],
        date_range: DateRange,
        today: date,
) -> list[PerformanceDataPoint]:
    """
    Daily value-weighted return of a set of transactions.

    Args:
        transactions: Ledger entries (any order); entries after `today`
                      are ignored
        price_history: Closing prices keyed by ledger symbol
        date_range: Resolved period
        today: Series never extends past this day

    Returns:
        One point per calendar day, or [] when there are no transactions
    """
    transactions = [t for t in transactions if t.date <= today]
    if not transactions:
        return []

    end = min(date_range.end, today)
    if date_range.start > end:
        return []

    lookups = {symbol: PriceLookup(points) for symbol, points in price_history.items()}
    timeline = HoldingsTimeline(transactions)

    points: list[PerformanceDataPoint] = []
    baseline: Decimal | None = None

    for day in get_calendar_days(date_range.start, end):
        holdings = timeline.snapshot_at(day)

        day_value = ZERO
        for symbol, holding in holdings.items():
            if holding.quantity <= ZERO:
                continue
            lookup = lookups.get(symbol)
            price = lookup.price_on(day) if lookup is not None else None
            if price is not None:
                day_value += holding.quantity * price

        # A zero first-day value defers the baseline to the first day > 0
        if baseline is None and day_value > ZERO:
            baseline = day_value

        if baseline is None:
            value = ZERO
        else:
            value = (day_value - baseline) / baseline * HUNDRED

        points.append(PerformanceDataPoint(date=day, value=value))

    return points


# =============================================================================
# ASSET MODE
# =============================================================================

def calculate_asset_performance(
        price_points: Iterable[PricePoint],
        date_range: DateRange,
) -> list[PerformanceDataPoint]:
    """
    Price-only return of one instrument relative to its first in-range close.

    Returns:
        One point per trading day in range; [] when the range holds no
        closes or the first close is 0
    """
    in_range = sorted(
        (p for p in price_points if date_range.contains(p.date)),
        key=lambda p: p.date,
    )
    if not in_range:
        return []

    first_price = in_range[0].price
    if first_price == ZERO:
        logger.debug(f"First close on {in_range[0].date} is 0; no return series")
        return []

    return [
        PerformanceDataPoint(
            date=p.date,
            value=(p.price - first_price) / first_price * HUNDRED,
        )
        for p in in_range
    ]


# =============================================================================
# GROUPING
# =============================================================================

def series_key_for(txn: Transaction) -> str | None:
    """
    Sub-portfolio a transaction belongs to.

    Returns:
        "taiwanStocks", "usStocks", "crypto", or None (Gold, Cash)
    """
    if txn.category == AssetCategory.STOCK_TW or txn.asset.upper().endswith(TW_LISTING_SUFFIXES):
        return "taiwanStocks"
    if txn.category == AssetCategory.STOCK_US:
        return "usStocks"
    if txn.category == AssetCategory.CRYPTO:
        return "crypto"
    return None


def group_transactions_by_series(
        transactions: Iterable[Transaction],
        keys: Iterable[str],
) -> dict[str, list[Transaction]]:
    """
    Split the ledger into sub-portfolios.

    Args:
        transactions: Ledger entries
        keys: Series keys to return (every key is present, possibly empty)
    """
    groups: dict[str, list[Transaction]] = {key: [] for key in keys}
    for txn in transactions:
        key = series_key_for(txn)
        if key in groups:
            groups[key].append(txn)
    return groups


def distinct_symbols(transactions: Iterable[Transaction]) -> list[str]:
    """Symbols in order of first appearance."""
    return list(dict.fromkeys(t.asset for t in transactions))


def symbol_categories(transactions: Iterable[Transaction]) -> dict[str, AssetCategory]:
    """Category per symbol (rows of one symbol share a resolved category)."""
    return {t.asset: t.category for t in transactions}

