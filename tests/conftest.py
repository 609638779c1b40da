# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Environment for the test run (set before the app is imported)
- Fixed clock
- Mock market data provider
- Transaction / liability factories
- API TestClient with service overrides
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.models import (
    AssetCategory,
    Currency,
    LiabilityStatus,
    LiabilityType,
    TransactionType,
)
from app.services.classification import CategoryClassifier
from app.services.dashboard import DashboardService
from app.services.exceptions import ProviderUnavailableError, TickerNotFoundError
from app.services.fx_rate_service import FXRateService
from app.services.ledger import InMemoryLedgerStore
from app.services.ledger.types import Liability, Transaction
from app.services.market_data.base import MarketDataProvider, PricePoint, Quote
from app.services.market_data.history import PriceHistoryAdapter
from app.services.news import NewsCache, NewsService
from app.services.performance import PerformanceService
from app.services.valuation import ValuationService


# =============================================================================
# CLOCK
# =============================================================================

class FixedClock:
    """Clock frozen at a given instant; `advance` moves it forward."""

    def __init__(self, today: date = date(2024, 7, 15)):
        self._now = datetime.combine(today, time(12, 0), tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._now.date()

    def advance(self, **kwargs) -> None:
        self._now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


# =============================================================================
# MOCK MARKET DATA PROVIDER
# =============================================================================

class MockMarketDataProvider(MarketDataProvider):
    """
    In-memory MarketDataProvider.

    Histories and quotes are keyed by PROVIDER symbol ("2330.TW",
    "BTC-USD"), exactly as the adapter queries them. Retries are disabled
    so failure tests run instantly.
    """

    MAX_RETRY_ATTEMPTS = 1
    RETRY_MIN_WAIT = 0
    RETRY_MAX_WAIT = 0

    def __init__(self):
        self._histories: dict[str, list[PricePoint]] = {}
        self._quotes: dict[str, Quote] = {}
        self._fail_symbols: set[str] = set()
        self._forex_rate: Decimal | Exception = Decimal("31.5")
        self.history_calls: list[str] = []
        self.quote_calls: list[list[str]] = []

    @property
    def name(self) -> str:
        return "mock"

    def add_history(self, symbol: str, closes: dict[date, str | Decimal]) -> None:
        """Configure daily closes for a provider symbol."""
        self._histories[symbol] = [
            PricePoint(date=d, price=Decimal(str(p))) for d, p in sorted(closes.items())
        ]

    def add_quote(
            self,
            symbol: str,
            price: str,
            change_percent: str = "0",
            name: str | None = None,
            currency: str = "USD",
    ) -> None:
        self._quotes[symbol] = Quote(
            symbol=symbol,
            price=Decimal(price),
            change_percent=Decimal(change_percent),
            currency=currency,
            name=name,
        )

    def fail_symbol(self, symbol: str) -> None:
        """Make every request for a provider symbol raise."""
        self._fail_symbols.add(symbol)

    def set_forex_rate(self, rate: Decimal | Exception) -> None:
        self._forex_rate = rate

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        self.quote_calls.append(list(symbols))
        return {
            s: self._quotes[s]
            for s in symbols
            if s in self._quotes and s not in self._fail_symbols
        }

    def get_historical_closes(self, symbol: str, start_date: date, end_date: date) -> list[PricePoint]:
        self.history_calls.append(symbol)
        if symbol in self._fail_symbols:
            raise ProviderUnavailableError(provider=self.name, reason=f"{symbol} failed")
        if symbol not in self._histories:
            raise TickerNotFoundError(symbol=symbol, provider=self.name)
        return [p for p in self._histories[symbol] if start_date <= p.date <= end_date]

    def get_forex_rate(self, base: str, quote: str) -> Decimal:
        if isinstance(self._forex_rate, Exception):
            raise self._forex_rate
        return self._forex_rate


@pytest.fixture
def mock_provider() -> MockMarketDataProvider:
    return MockMarketDataProvider()


@pytest.fixture
def classifier() -> CategoryClassifier:
    return CategoryClassifier()


@pytest.fixture
def history_adapter(mock_provider, classifier) -> PriceHistoryAdapter:
    return PriceHistoryAdapter(mock_provider, classifier, batch_size=2, max_workers=2)


# =============================================================================
# FACTORIES
# =============================================================================

_DEFAULT_CLASSIFIER = CategoryClassifier()


def make_transaction(
        asset: str,
        quantity: str | Decimal,
        price: str | Decimal,
        on: date,
        txn_type: TransactionType = TransactionType.BUY,
        category: AssetCategory | None = None,
        currency: Currency | None = None,
        txn_id: str | None = None,
) -> Transaction:
    """Build a Transaction; category and currency follow the symbol by default."""
    category = category or _DEFAULT_CLASSIFIER.classify(asset)
    if currency is None:
        currency = Currency.NTD if category == AssetCategory.STOCK_TW else Currency.USD
    return Transaction(
        id=txn_id or f"{asset}-{on.isoformat()}-{txn_type.value}",
        date=on,
        type=txn_type,
        asset=asset,
        quantity=Decimal(str(quantity)),
        price=Decimal(str(price)),
        category=category,
        currency=currency,
    )


def make_liability(
        amount: str,
        status: LiabilityStatus | None = LiabilityStatus.ACTIVE,
        name: str = "Car loan",
) -> Liability:
    return Liability(
        id=name.lower().replace(" ", "-"),
        name=name,
        amount=Decimal(amount),
        type=LiabilityType.LOAN,
        status=status,
    )


@pytest.fixture
def sample_ledger() -> InMemoryLedgerStore:
    """
    A small mixed ledger:
    - AAPL: 10 @ 100, then 4 sold @ 120 (6 left, avg 100)
    - 2330: 2 lots @ 500 NTD
    - BTC: 0.5 @ 40000
    - Cash USD: 1000 deposited
    - One active and one paid-off liability
    """
    transactions = [
        make_transaction("AAPL", "10", "100", date(2024, 1, 2)),
        make_transaction("AAPL", "4", "120", date(2024, 3, 1), TransactionType.SELL),
        make_transaction("2330", "2", "500", date(2024, 1, 3)),
        make_transaction("BTC", "0.5", "40000", date(2024, 2, 1)),
        make_transaction("USD", "1000", "1", date(2024, 1, 1), TransactionType.DEPOSIT),
    ]
    liabilities = [
        make_liability("2000"),
        make_liability("500", status=LiabilityStatus.PAID_OFF, name="Old card"),
    ]
    return InMemoryLedgerStore(transactions, liabilities)


# =============================================================================
# API CLIENT
# =============================================================================

@pytest.fixture
def market(mock_provider) -> MockMarketDataProvider:
    """Mock provider preloaded with quotes and histories for sample_ledger."""
    mock_provider.add_quote("AAPL", "150", "2", "Apple Inc.")
    mock_provider.add_quote("2330.TW", "630", "-1", "TSMC", currency="TWD")
    mock_provider.add_quote("BTC-USD", "60000", "5", "Bitcoin USD")

    mock_provider.add_history("AAPL", {date(2024, 1, 2): "100", date(2024, 7, 15): "150"})
    mock_provider.add_history("2330.TW", {date(2024, 1, 3): "500", date(2024, 7, 15): "630"})
    mock_provider.add_history("BTC-USD", {date(2024, 2, 1): "40000", date(2024, 7, 15): "60000"})
    mock_provider.add_history("^GSPC", {date(2023, 7, 17): "4500", date(2024, 7, 15): "5400"})
    return mock_provider


@pytest.fixture
def api_services(sample_ledger, market, history_adapter, clock) -> SimpleNamespace:
    """Real services wired over sample_ledger and the mock provider."""
    fx = FXRateService(market, fallback_rate=Decimal("32.5"))
    valuation = ValuationService(sample_ledger, history_adapter, fx, clock)
    performance = PerformanceService(sample_ledger, history_adapter, clock)
    return SimpleNamespace(
        ledger=sample_ledger,
        fx=fx,
        valuation=valuation,
        performance=performance,
        dashboard=DashboardService(sample_ledger, valuation, performance),
        news=NewsService(api_key=None, cache=NewsCache(ttl_seconds=3600, clock=clock), clock=clock),
    )


@pytest.fixture
def client(api_services):
    """
    TestClient with every service dependency overridden.

    Overrides are cleared after the test so singletons never leak between
    tests.
    """
    from fastapi.testclient import TestClient

    from app import dependencies
    from app.main import app

    app.dependency_overrides[dependencies.get_fx_rate_service] = lambda: api_services.fx
    app.dependency_overrides[dependencies.get_valuation_service] = lambda: api_services.valuation
    app.dependency_overrides[dependencies.get_performance_service] = lambda: api_services.performance
    app.dependency_overrides[dependencies.get_dashboard_service] = lambda: api_services.dashboard
    app.dependency_overrides[dependencies.get_news_service] = lambda: api_services.news

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
