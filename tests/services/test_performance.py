# tests/services/test_performance.py
"""
Tests for the performance series.

This module tests:
- Forward-filling price lookup
- Portfolio mode (value-weighted, baseline handling, today cap)
- Asset mode (price-only, independent of transactions)
- Sub-portfolio grouping
- PerformanceService orchestration with partial failures
"""

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.models import AssetCategory, TransactionType
from app.services.exceptions import InvalidPeriodError
from app.services.ledger import InMemoryLedgerStore
from app.services.market_data.base import PricePoint
from app.services.performance import PerformanceService
from app.services.performance.calculators import (
    PriceLookup,
    calculate_asset_performance,
    calculate_portfolio_performance,
    group_transactions_by_series,
    lookup_price,
    series_key_for,
)
from app.services.periods import DateRange

from tests.conftest import make_transaction


def _series(closes: dict[date, str]) -> list[PricePoint]:
    return [PricePoint(date=d, price=Decimal(p)) for d, p in sorted(closes.items())]


def _values(points) -> list[Decimal]:
    return [p.value for p in points]


# =============================================================================
# PRICE LOOKUP
# =============================================================================

class TestPriceLookup:

    @pytest.fixture
    def lookup(self):
        return PriceLookup(_series({
            date(2024, 1, 2): "100",
            date(2024, 1, 5): "110",
        }))

    def test_exact_date(self, lookup):
        assert lookup.price_on(date(2024, 1, 5)) == Decimal("110")

    def test_forward_fill(self, lookup):
        assert lookup.price_on(date(2024, 1, 4)) == Decimal("100")
        assert lookup.price_on(date(2024, 2, 1)) == Decimal("110")

    def test_before_first_close_uses_earliest(self, lookup):
        assert lookup.price_on(date(2023, 12, 25)) == Decimal("100")

    def test_empty_series(self):
        assert PriceLookup([]).price_on(date(2024, 1, 1)) is None

    def test_unsorted_input(self):
        points = list(reversed(_series({date(2024, 1, 1): "1", date(2024, 1, 3): "3"})))
        assert lookup_price(points, date(2024, 1, 2)) == Decimal("1")


# =============================================================================
# PORTFOLIO MODE
# =============================================================================

class TestPortfolioPerformance:

    @pytest.fixture
    def aapl_history(self):
        return {"AAPL": _series({
            date(2024, 1, 2): "100",
            date(2024, 1, 3): "110",
            date(2024, 1, 5): "121",
        })}

    def test_daily_returns(self, aapl_history):
        transactions = [make_transaction("AAPL", "10", "100", date(2024, 1, 2))]
        date_range = DateRange(date(2024, 1, 2), date(2024, 1, 6))

        points = calculate_portfolio_performance(transactions, aapl_history, date_range, date(2024, 1, 6))

        assert [p.date for p in points] == [date(2024, 1, d) for d in range(2, 7)]
        assert _values(points) == [Decimal("0"), Decimal("10"), Decimal("10"), Decimal("21"), Decimal("21")]

    def test_baseline_day_is_zero(self, aapl_history):
        transactions = [make_transaction("AAPL", "10", "100", date(2023, 12, 1))]
        date_range = DateRange(date(2024, 1, 3), date(2024, 1, 5))

        points = calculate_portfolio_performance(transactions, aapl_history, date_range, date(2024, 1, 5))

        assert points[0].value == Decimal("0")
        assert points[-1].value == Decimal("10")

    def test_baseline_deferred_until_first_holding(self, aapl_history):
        transactions = [make_transaction("AAPL", "10", "100", date(2024, 1, 3))]
        date_range = DateRange(date(2024, 1, 1), date(2024, 1, 5))

        points = calculate_portfolio_performance(transactions, aapl_history, date_range, date(2024, 1, 5))

        assert _values(points) == [Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0"), Decimal("10")]

    def test_sells_reduce_value(self, aapl_history):
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 2)),
            make_transaction("AAPL", "5", "110", date(2024, 1, 3), TransactionType.SELL),
        ]
        date_range = DateRange(date(2024, 1, 2), date(2024, 1, 3))

        points = calculate_portfolio_performance(transactions, aapl_history, date_range, date(2024, 1, 3))

        # 10 × 100 = 1000, then 5 × 110 = 550
        assert _values(points) == [Decimal("0"), Decimal("-45")]

    def test_symbol_without_prices_contributes_zero(self, aapl_history):
        """XYZ has no price data; AAPL still computes normally."""
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 2)),
            make_transaction("XYZ", "1000", "5", date(2024, 1, 2)),
        ]
        history = {**aapl_history, "XYZ": []}
        date_range = DateRange(date(2024, 1, 2), date(2024, 1, 5))

        points = calculate_portfolio_performance(transactions, history, date_range, date(2024, 1, 5))

        assert points[-1].value == Decimal("21")

    def test_no_prices_at_all(self):
        transactions = [make_transaction("XYZ", "1", "5", date(2024, 1, 2))]
        date_range = DateRange(date(2024, 1, 2), date(2024, 1, 4))

        points = calculate_portfolio_performance(transactions, {}, date_range, date(2024, 1, 4))

        assert len(points) == 3
        assert set(_values(points)) == {Decimal("0")}

    def test_capped_at_today(self, aapl_history):
        transactions = [make_transaction("AAPL", "10", "100", date(2024, 1, 2))]
        date_range = DateRange(date(2024, 1, 2), date(2024, 1, 31))

        points = calculate_portfolio_performance(transactions, aapl_history, date_range, date(2024, 1, 4))

        assert points[-1].date == date(2024, 1, 4)

    def test_future_transactions_ignored(self, aapl_history):
        transactions = [make_transaction("AAPL", "10", "100", date(2024, 2, 1))]
        date_range = DateRange(date(2024, 1, 2), date(2024, 1, 5))

        assert calculate_portfolio_performance(transactions, aapl_history, date_range, date(2024, 1, 5)) == []

    def test_no_transactions(self, aapl_history):
        date_range = DateRange(date(2024, 1, 2), date(2024, 1, 5))
        assert calculate_portfolio_performance([], aapl_history, date_range, date(2024, 1, 5)) == []

    def test_taiwan_lots_cancel_out(self):
        """No lot multiplier in portfolio mode; returns are ratios anyway."""
        transactions = [make_transaction("2330", "2", "500", date(2024, 1, 2))]
        history = {"2330": _series({date(2024, 1, 2): "500", date(2024, 1, 3): "550"})}
        date_range = DateRange(date(2024, 1, 2), date(2024, 1, 3))

        points = calculate_portfolio_performance(transactions, history, date_range, date(2024, 1, 3))

        assert _values(points) == [Decimal("0"), Decimal("10")]


# =============================================================================
# ASSET MODE
# =============================================================================

class TestAssetPerformance:

    def test_relative_to_first_close_in_range(self):
        points = _series({
            date(2023, 12, 29): "50",
            date(2024, 1, 2): "200",
            date(2024, 1, 3): "210",
            date(2024, 1, 4): "180",
        })

        result = calculate_asset_performance(points, DateRange(date(2024, 1, 1), date(2024, 1, 31)))

        assert [p.date for p in result] == [date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4)]
        assert _values(result) == [Decimal("0"), Decimal("5"), Decimal("-10")]

    def test_no_points_in_range(self):
        points = _series({date(2023, 12, 29): "50"})
        assert calculate_asset_performance(points, DateRange(date(2024, 1, 1), date(2024, 1, 31))) == []

    def test_zero_first_close(self):
        points = _series({date(2024, 1, 2): "0", date(2024, 1, 3): "1"})
        assert calculate_asset_performance(points, DateRange(date(2024, 1, 1), date(2024, 1, 31))) == []


# =============================================================================
# GROUPING
# =============================================================================

class TestGrouping:

    @pytest.mark.parametrize("asset,category,expected", [
        ("AAPL", AssetCategory.STOCK_US, "usStocks"),
        ("2330", AssetCategory.STOCK_TW, "taiwanStocks"),
        ("2330.TW", AssetCategory.STOCK_US, "taiwanStocks"),
        ("6488.TWO", AssetCategory.STOCK_US, "taiwanStocks"),
        ("BTC", AssetCategory.CRYPTO, "crypto"),
        ("GLD", AssetCategory.GOLD, None),
        ("USD", AssetCategory.CASH, None),
    ])
    def test_series_key(self, asset, category, expected):
        txn = make_transaction(asset, "1", "1", date(2024, 1, 1), category=category)
        assert series_key_for(txn) == expected

    def test_every_key_present(self):
        transactions = [make_transaction("AAPL", "1", "1", date(2024, 1, 1))]

        groups = group_transactions_by_series(transactions, ["usStocks", "taiwanStocks", "crypto"])

        assert len(groups["usStocks"]) == 1
        assert groups["taiwanStocks"] == []
        assert groups["crypto"] == []

    def test_untagged_sell_stays_with_its_buy(self):
        buy = make_transaction("ADA", "10", "0.4", date(2024, 1, 2), category=AssetCategory.CRYPTO)
        sell = make_transaction(
            "ADA", "4", "0.6", date(2024, 2, 1), TransactionType.SELL,
            category=AssetCategory.STOCK_US,
        )
        sell = replace(sell, category_is_explicit=False)

        transactions = InMemoryLedgerStore([buy, sell]).list_transactions()
        groups = group_transactions_by_series(transactions, ["usStocks", "crypto"])

        assert [t.type for t in groups["crypto"]] == [TransactionType.BUY, TransactionType.SELL]
        assert groups["usStocks"] == []


# =============================================================================
# PERFORMANCE SERVICE
# =============================================================================

def _daily(start: date, prices: list[str]) -> dict[date, str]:
    return {start + timedelta(days=i): p for i, p in enumerate(prices)}


class TestPerformanceService:
    """Service tests over the sample ledger; today is 2024-07-15."""

    @pytest.fixture
    def service(self, sample_ledger, history_adapter, mock_provider, clock):
        start = date(2024, 6, 15)
        mock_provider.add_history("AAPL", _daily(start, ["100"] * 20 + ["110"] * 11))
        mock_provider.add_history("2330.TW", _daily(start, ["600"] * 31))
        mock_provider.add_history("BTC-USD", _daily(start, ["50000"] * 30 + ["55000"]))
        mock_provider.add_history("^GSPC", _daily(start, ["5000"] * 30 + ["5100"]))
        mock_provider.add_history("0050.TW", _daily(start, ["150"] * 31))
        mock_provider.add_quote("AAPL", "110", name="Apple Inc.")
        return PerformanceService(sample_ledger, history_adapter, clock=clock)

    def test_portfolio_series(self, service):
        result = service.get_portfolio_performance("1M")

        assert list(result) == ["usStocks", "taiwanStocks", "crypto"]
        assert result["usStocks"].name == "My US Stocks"
        assert result["usStocks"].color == "#ef4444"
        assert len(result["usStocks"].points) == 31
        assert result["usStocks"].current_return == Decimal("10")
        assert result["taiwanStocks"].current_return == Decimal("0")
        assert result["crypto"].current_return == Decimal("10")

    def test_failed_symbol_isolated(self, service, mock_provider):
        mock_provider.fail_symbol("2330.TW")

        result = service.get_portfolio_performance("1M")

        assert set(_values(result["taiwanStocks"].points)) == {Decimal("0")}
        assert result["usStocks"].current_return == Decimal("10")

    def test_taiwan_symbols_rewritten(self, service, mock_provider):
        service.get_portfolio_performance("1M")

        assert "2330.TW" in mock_provider.history_calls
        assert "2330" not in mock_provider.history_calls

    def test_total_performance(self, service):
        series = service.get_total_performance("1M")

        assert series.key == "total"
        assert series.name == "My Portfolio"
        assert len(series.points) == 31
        assert series.points[0].value == Decimal("0")

    def test_invalid_period(self, service):
        with pytest.raises(InvalidPeriodError):
            service.get_portfolio_performance("2W")

    def test_asset_performance_explicit_symbols(self, service):
        result = service.get_asset_performance(["AAPL", "XYZ"], "1M")

        assert list(result) == ["AAPL"]
        assert result["AAPL"].name == "Apple Inc."
        assert result["AAPL"].current_return == Decimal("10")

    def test_asset_performance_defaults_to_ledger(self, service):
        result = service.get_asset_performance(None, "1M")

        assert set(result) == {"AAPL", "2330", "BTC"}
        assert result["2330"].name == "2330"

    def test_asset_mode_ignores_transactions(self, history_adapter, mock_provider, clock):
        """Same prices, different ledgers: identical asset-mode series."""
        mock_provider.add_history("AAPL", _daily(date(2024, 6, 15), ["100", "120"]))
        empty = PerformanceService(InMemoryLedgerStore(), history_adapter, clock=clock)
        busy = PerformanceService(
            InMemoryLedgerStore([make_transaction("AAPL", "999", "1", date(2024, 6, 16))]),
            history_adapter,
            clock=clock,
        )

        assert empty.get_asset_performance(["AAPL"], "1M") == busy.get_asset_performance(["AAPL"], "1M")

    def test_default_benchmarks(self, service, mock_provider):
        result = service.get_benchmark_performance(None, "1M")

        assert list(result) == ["sp500", "taiwan0050", "btc", "usdt"]
        assert result["sp500"].current_return == Decimal("2")
        assert result["taiwan0050"].name == "Taiwan 0050"
        assert result["usdt"].points == []
        assert "0050.TW.TW" not in mock_provider.history_calls

    def test_explicit_benchmarks(self, service):
        result = service.get_benchmark_performance(["^GSPC"], "1M")

        assert list(result) == ["^GSPC"]
        assert result["^GSPC"].name == "^GSPC"
