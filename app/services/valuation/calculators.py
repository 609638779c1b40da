# app/services/valuation/calculators.py
"""
Holdings and valuation calculators.

Each calculator follows the Single Responsibility Principle:
- HoldingsReconstructor: Replays the ledger into holdings as of a cutoff
- HoldingsTimeline: Same result, advanced incrementally day by day
- ValuationCalculator: Values open holdings against live quotes
- CategoryRollup: Aggregates asset valuations per AssetCategory

Design Principles:
- Stateless calculators (HoldingsTimeline is the one deliberate exception:
  it owns a cursor into the sorted ledger)
- Receives all dependencies explicitly
- Returns structured result objects
- Uses Decimal for ALL financial calculations

Weighted-average cost:
    Buy/Deposit:    avg' = (qty × avg + Δqty × price) / (qty + Δqty)
    Sell/Withdraw:  qty' = qty - Δqty, avg unchanged

Usage:
    holdings = HoldingsReconstructor().reconstruct(transactions, cutoff=today)

    calculator = ValuationCalculator(UnitsConverter(usd_to_ntd=rate))
    assets = calculator.value_holdings(holdings.values(), quotes, today)
    categories = CategoryRollup(calculator.converter).summarize(assets)
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import date
from decimal import Decimal

from app.models import AssetCategory, Currency
from app.services.constants import HUNDRED, QUANTITY_EPSILON, ZERO
from app.services.ledger.types import Transaction
from app.services.market_data.base import Quote
from app.services.valuation.types import (
    AssetCategorySummary,
    AssetValuation,
    Holding,
)
from app.utils.fx_conversion import UnitsConverter

logger = logging.getLogger(__name__)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole × 100, or 0 when whole is not positive."""
    if whole <= ZERO:
        return ZERO
    return part / whole * HUNDRED


# =============================================================================
# HOLDINGS RECONSTRUCTION
# =============================================================================

def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Sort ascending by date; ledger order breaks ties (sort is stable)."""
    return sorted(transactions, key=lambda txn: txn.date)


def apply_transaction(holding: Holding | None, txn: Transaction) -> Holding:
    """
    Fold one transaction into a holding.

    Args:
        holding: Current holding for txn.asset, or None if never seen
        txn: Transaction to apply

    Returns:
        New Holding snapshot
    """
    if holding is None:
        holding = Holding(symbol=txn.asset)

    quantity = holding.quantity
    avg_cost = holding.avg_cost
    first_buy_date = holding.first_buy_date

    if txn.type.increases_quantity:
        new_quantity = quantity + txn.quantity
        # An oversold position bought back to exactly zero has no average
        if new_quantity > ZERO:
            avg_cost = (quantity * avg_cost + txn.quantity * txn.price) / new_quantity
        if first_buy_date is None and new_quantity > ZERO:
            first_buy_date = txn.date
    else:
        new_quantity = quantity - txn.quantity
        if new_quantity <= QUANTITY_EPSILON:
            first_buy_date = None

    return replace(
        holding,
        quantity=new_quantity,
        avg_cost=avg_cost,
        first_buy_date=first_buy_date,
        category=txn.category,
        currency=txn.currency,
    )


class HoldingsReconstructor:
    """
    Replays a transaction list into per-asset holdings.

    Note:
        Holdings that have been sold down to ~0 are still returned (with
        their unchanged avg_cost); callers filter with Holding.is_open.
    """

    def reconstruct(
            self,
            transactions: Iterable[Transaction],
            cutoff: date | None = None,
    ) -> dict[str, Holding]:
        """
        Reconstruct holdings as of a cutoff date.

        Args:
            transactions: Ledger entries in any order
            cutoff: Include only transactions dated on or before this day
                    (None = all)

        Returns:
            Holdings keyed by symbol, in order of first appearance
        """
        holdings: dict[str, Holding] = {}

        for txn in sort_transactions(transactions):
            if cutoff is not None and txn.date > cutoff:
                break
            holdings[txn.asset] = apply_transaction(holdings.get(txn.asset), txn)

        return holdings


class HoldingsTimeline:
    """
    Incremental holdings fold for a sequence of increasing cutoffs.

    Building a daily series naively reconstructs the ledger once per day.
    The timeline sorts once and only folds the transactions between the
    previous cutoff and the new one, producing snapshots identical to
    HoldingsReconstructor.reconstruct(transactions, cutoff).

    A cutoff earlier than the previous one restarts the fold.

    Example:
        timeline = HoldingsTimeline(transactions)
        for day in days:
            holdings = timeline.snapshot_at(day)
    """

    def __init__(self, transactions: Iterable[Transaction]) -> None:
        self._transactions = sort_transactions(transactions)
        self._reset()

    def _reset(self) -> None:
        self._cursor = 0
        self._cutoff: date | None = None
        self._holdings: dict[str, Holding] = {}

    def snapshot_at(self, cutoff: date) -> dict[str, Holding]:
        """Holdings as of `cutoff` (a copy; safe to keep)."""
        if self._cutoff is not None and cutoff < self._cutoff:
            self._reset()

        while (
                self._cursor < len(self._transactions)
                and self._transactions[self._cursor].date <= cutoff
        ):
            txn = self._transactions[self._cursor]
            self._holdings[txn.asset] = apply_transaction(self._holdings.get(txn.asset), txn)
            self._cursor += 1

        self._cutoff = cutoff
        return dict(self._holdings)


# =============================================================================
# VALUATION
# =============================================================================

class ValuationCalculator:
    """
    Values open holdings against a live quote snapshot.

    Missing quote fallback:
        The holding is valued at its average cost (zero unrealized P/L)
        instead of failing the whole aggregation.

    Attributes:
        converter: Lot-size and USD/NTD conversion
    """

    def __init__(self, converter: UnitsConverter) -> None:
        self.converter = converter

    def value_holdings(
            self,
            holdings: Iterable[Holding],
            quotes: Mapping[str, Quote],
            today: date,
    ) -> list[AssetValuation]:
        """
        Value every open holding.

        Args:
            holdings: Holdings as of today (closed ones are skipped)
            quotes: Live quotes keyed by ledger symbol
            today: Reference date for days held

        Returns:
            Valuations sorted by USD value, largest first
        """
        rows = []
        for holding in holdings:
            if not holding.is_open:
                continue
            rows.append(self._value_one(holding, quotes.get(holding.symbol), today))

        total_usd = sum((row["usd_value"] for row in rows), ZERO)

        category_usd: dict[AssetCategory, Decimal] = {}
        for row in rows:
            category_usd[row["category"]] = category_usd.get(row["category"], ZERO) + row["usd_value"]

        valuations = [
            AssetValuation(
                weight=percent_of(row["usd_value"], total_usd),
                category_weight=percent_of(row["usd_value"], category_usd[row["category"]]),
                **row,
            )
            for row in rows
        ]
        valuations.sort(key=lambda v: v.usd_value, reverse=True)

        missing = [v.symbol for v in valuations if not v.has_live_quote]
        if missing:
            logger.warning(f"No live quote for {', '.join(missing)}; valued at average cost")

        return valuations

    def _value_one(self, holding: Holding, quote: Quote | None, today: date) -> dict:
        """Per-asset fields that do not depend on the rest of the portfolio."""
        currency = self.converter.native_currency(holding.category, holding.currency)
        lot_size = self.converter.lot_size(holding.symbol)
        shares = holding.quantity * lot_size

        price = quote.price if quote is not None else holding.avg_cost
        market_value = shares * price
        cost_basis = shares * holding.avg_cost
        unrealized_pl = market_value - cost_basis

        days_held = None
        if holding.first_buy_date is not None:
            days_held = (today - holding.first_buy_date).days + 1

        return {
            "symbol": holding.symbol,
            "name": (quote.name if quote is not None and quote.name else holding.symbol),
            "category": holding.category,
            "currency": currency,
            "quantity": holding.quantity,
            "lot_size": lot_size,
            "avg_cost": holding.avg_cost,
            "current_price": price,
            "market_value": market_value,
            "cost_basis": cost_basis,
            "unrealized_pl": unrealized_pl,
            "usd_value": self.converter.to_usd(market_value, currency),
            "change_24h": quote.change_percent if quote is not None else ZERO,
            "total_change_percent": percent_of(unrealized_pl, cost_basis),
            "days_held": days_held,
            "has_live_quote": quote is not None,
        }


class CategoryRollup:
    """
    Aggregates asset valuations into one summary per AssetCategory.

    Sums stay in each category's display currency; only the weight uses
    USD-normalized values. Every category is reported, empty ones with
    zero totals.
    """

    def __init__(self, converter: UnitsConverter) -> None:
        self.converter = converter

    def summarize(self, valuations: Iterable[AssetValuation]) -> list[AssetCategorySummary]:
        valuations = list(valuations)
        total_usd = sum((v.usd_value for v in valuations), ZERO)

        summaries = []
        for category in AssetCategory:
            members = [v for v in valuations if v.category == category]
            currency = self.converter.native_currency(category, Currency.USD)

            total_value = sum(
                (self.converter.convert(v.market_value, v.currency, currency) for v in members),
                ZERO,
            )
            cost_basis = sum(
                (self.converter.convert(v.cost_basis, v.currency, currency) for v in members),
                ZERO,
            )
            usd_value = sum((v.usd_value for v in members), ZERO)
            unrealized_pl = total_value - cost_basis

            summaries.append(AssetCategorySummary(
                category=category,
                currency=currency,
                total_value=total_value,
                cost_basis=cost_basis,
                unrealized_pl=unrealized_pl,
                change_percent=percent_of(unrealized_pl, cost_basis),
                usd_value=usd_value,
                weight=percent_of(usd_value, total_usd),
                asset_count=len(members),
            ))

        return summaries
