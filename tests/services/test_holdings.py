# tests/services/test_holdings.py
"""
Tests for holdings reconstruction.

This module tests:
- Weighted-average cost on buys, unchanged avg on sells
- Cutoff filtering and date ordering
- Closing and reopening positions
- HoldingsTimeline producing the same snapshots as a full replay
"""

import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.models import AssetCategory, Currency, TransactionType
from app.services.valuation.calculators import (
    HoldingsReconstructor,
    HoldingsTimeline,
    apply_transaction,
    sort_transactions,
)
from app.services.valuation.types import Holding

from tests.conftest import make_transaction

BUY = TransactionType.BUY
SELL = TransactionType.SELL
DEPOSIT = TransactionType.DEPOSIT
WITHDRAW = TransactionType.WITHDRAW


@pytest.fixture
def reconstructor():
    return HoldingsReconstructor()


class TestWeightedAverageCost:
    """Tests for the weighted-average cost fold."""

    def test_buy_then_partial_sell(self, reconstructor):
        """10 AAPL @ 100, sell 4 @ 120 -> 6 left at avg 100."""
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 1)),
            make_transaction("AAPL", "4", "120", date(2024, 2, 1), SELL),
        ]

        holding = reconstructor.reconstruct(transactions)["AAPL"]

        assert holding.quantity == Decimal("6")
        assert holding.avg_cost == Decimal("100")
        assert holding.first_buy_date == date(2024, 1, 1)

    def test_two_buys_average(self, reconstructor):
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 1)),
            make_transaction("AAPL", "30", "200", date(2024, 1, 2)),
        ]

        holding = reconstructor.reconstruct(transactions)["AAPL"]

        assert holding.quantity == Decimal("40")
        assert holding.avg_cost == Decimal("175")

    def test_sell_never_changes_average(self, reconstructor):
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 1)),
            make_transaction("AAPL", "3", "500", date(2024, 1, 2), SELL),
            make_transaction("AAPL", "3", "1", date(2024, 1, 3), SELL),
        ]

        holding = reconstructor.reconstruct(transactions)["AAPL"]

        assert holding.quantity == Decimal("4")
        assert holding.avg_cost == Decimal("100")

    def test_deposit_and_withdraw_behave_like_buy_and_sell(self, reconstructor):
        transactions = [
            make_transaction("USD", "1000", "1", date(2024, 1, 1), DEPOSIT),
            make_transaction("USD", "250", "1", date(2024, 1, 2), WITHDRAW),
        ]

        holding = reconstructor.reconstruct(transactions)["USD"]

        assert holding.quantity == Decimal("750")
        assert holding.avg_cost == Decimal("1")
        assert holding.category == AssetCategory.CASH

    def test_fractional_crypto(self, reconstructor):
        transactions = [
            make_transaction("BTC", "0.25", "40000", date(2024, 1, 1)),
            make_transaction("BTC", "0.75", "48000", date(2024, 2, 1)),
        ]

        holding = reconstructor.reconstruct(transactions)["BTC"]

        assert holding.quantity == Decimal("1.00")
        assert holding.avg_cost == Decimal("46000")


class TestPositionLifecycle:
    """Tests for closing, reopening and overselling positions."""

    def test_sold_out_position_is_closed(self, reconstructor):
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 1)),
            make_transaction("AAPL", "10", "150", date(2024, 2, 1), SELL),
        ]

        holding = reconstructor.reconstruct(transactions)["AAPL"]

        assert holding.quantity == Decimal("0")
        assert not holding.is_open
        assert holding.first_buy_date is None

    def test_dust_counts_as_closed(self):
        holding = Holding(symbol="BTC", quantity=Decimal("0.0000001"))
        assert not holding.is_open

    def test_reopened_position_restarts_first_buy(self, reconstructor):
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 1)),
            make_transaction("AAPL", "10", "150", date(2024, 2, 1), SELL),
            make_transaction("AAPL", "5", "160", date(2024, 3, 1)),
        ]

        holding = reconstructor.reconstruct(transactions)["AAPL"]

        assert holding.quantity == Decimal("5")
        assert holding.avg_cost == Decimal("160")
        assert holding.first_buy_date == date(2024, 3, 1)

    def test_oversell_goes_negative(self, reconstructor):
        transactions = [
            make_transaction("AAPL", "5", "100", date(2024, 1, 1)),
            make_transaction("AAPL", "8", "100", date(2024, 1, 2), SELL),
        ]

        holding = reconstructor.reconstruct(transactions)["AAPL"]

        assert holding.quantity == Decimal("-3")
        assert not holding.is_open

    def test_buy_back_to_exactly_zero_keeps_average(self):
        """Average is only revised when the new quantity is positive."""
        holding = Holding(symbol="AAPL", quantity=Decimal("-3"), avg_cost=Decimal("100"))
        txn = make_transaction("AAPL", "3", "50", date(2024, 1, 3))

        result = apply_transaction(holding, txn)

        assert result.quantity == Decimal("0")
        assert result.avg_cost == Decimal("100")

    def test_fold_carries_row_category(self):
        """Per-symbol resolution happens in the ledger store; the fold copies the row."""
        first = make_transaction("IAU", "1", "40", date(2024, 1, 1), category=AssetCategory.STOCK_US)
        second = make_transaction(
            "IAU", "1", "40", date(2024, 1, 2),
            category=AssetCategory.GOLD, currency=Currency.USD,
        )

        holding = apply_transaction(apply_transaction(None, first), second)

        assert holding.category == AssetCategory.GOLD


class TestCutoff:
    """Tests for date filtering and ordering."""

    @pytest.fixture
    def transactions(self):
        return [
            make_transaction("AAPL", "4", "120", date(2024, 3, 1), SELL),
            make_transaction("AAPL", "10", "100", date(2024, 1, 1)),
            make_transaction("MSFT", "2", "300", date(2024, 2, 1)),
        ]

    def test_cutoff_is_inclusive(self, reconstructor, transactions):
        holdings = reconstructor.reconstruct(transactions, cutoff=date(2024, 2, 1))

        assert holdings["AAPL"].quantity == Decimal("10")
        assert holdings["MSFT"].quantity == Decimal("2")

    def test_cutoff_before_ledger(self, reconstructor, transactions):
        assert reconstructor.reconstruct(transactions, cutoff=date(2023, 12, 31)) == {}

    def test_unsorted_input_is_sorted(self, reconstructor, transactions):
        holdings = reconstructor.reconstruct(transactions)
        assert holdings["AAPL"].quantity == Decimal("6")
        assert holdings["AAPL"].avg_cost == Decimal("100")

    def test_same_day_keeps_ledger_order(self):
        day = date(2024, 1, 1)
        transactions = [
            make_transaction("AAPL", "10", "100", day, txn_id="1"),
            make_transaction("AAPL", "10", "100", day, SELL, txn_id="2"),
            make_transaction("AAPL", "2", "130", day, txn_id="3"),
        ]

        assert [t.id for t in sort_transactions(transactions)] == ["1", "2", "3"]
        holding = HoldingsReconstructor().reconstruct(transactions)["AAPL"]
        assert holding.avg_cost == Decimal("130")

    @pytest.mark.parametrize("cutoff", [
        date(2023, 12, 31), date(2024, 1, 1), date(2024, 2, 15), date(2024, 3, 1), date(2025, 1, 1),
    ])
    def test_cutoff_commutes_with_filtering(self, reconstructor, transactions, cutoff):
        filtered = [t for t in transactions if t.date <= cutoff]
        assert reconstructor.reconstruct(transactions, cutoff) == reconstructor.reconstruct(filtered)


class TestHoldingsTimeline:
    """Incremental timeline vs. full replay."""

    @staticmethod
    def _random_ledger(rng: random.Random, start: date, days: int, count: int):
        symbols = ["AAPL", "2330", "BTC", "GLD", "USD"]
        transactions = []
        for i in range(count):
            txn_type = rng.choice([BUY, BUY, SELL, DEPOSIT, WITHDRAW])
            transactions.append(make_transaction(
                rng.choice(symbols),
                Decimal(rng.randint(1, 40)) / Decimal(rng.choice([1, 4, 100])),
                Decimal(rng.randint(1, 100000)) / Decimal(100),
                start + timedelta(days=rng.randint(0, days)),
                txn_type,
                txn_id=str(i),
            ))
        return transactions

    @pytest.mark.parametrize("seed", [1, 7, 42, 2024])
    def test_matches_reconstruction_every_day(self, seed):
        rng = random.Random(seed)
        start = date(2024, 1, 1)
        transactions = self._random_ledger(rng, start, days=60, count=80)

        timeline = HoldingsTimeline(transactions)
        reconstructor = HoldingsReconstructor()

        for offset in range(-2, 65):
            day = start + timedelta(days=offset)
            assert timeline.snapshot_at(day) == reconstructor.reconstruct(transactions, day), day

    def test_going_backwards_restarts(self):
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 1)),
            make_transaction("AAPL", "5", "100", date(2024, 1, 10), SELL),
        ]
        timeline = HoldingsTimeline(transactions)

        assert timeline.snapshot_at(date(2024, 1, 15))["AAPL"].quantity == Decimal("5")
        assert timeline.snapshot_at(date(2024, 1, 5))["AAPL"].quantity == Decimal("10")

    def test_snapshots_are_independent_copies(self):
        transactions = [
            make_transaction("AAPL", "10", "100", date(2024, 1, 1)),
            make_transaction("MSFT", "1", "300", date(2024, 1, 2)),
        ]
        timeline = HoldingsTimeline(transactions)

        first = timeline.snapshot_at(date(2024, 1, 1))
        timeline.snapshot_at(date(2024, 1, 2))

        assert list(first) == ["AAPL"]
