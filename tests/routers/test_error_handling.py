# tests/routers/test_error_handling.py
"""
Integration tests for error handling across all API endpoints.

These tests verify:
- Consistent error response format (ErrorDetail schema)
- Correct HTTP status codes for different error types
- Ledger unavailability surfaced as 503
- Health endpoints
"""

import pytest

from app import dependencies
from app.database import LedgerDatabase
from app.main import app
from app.services.classification import CategoryClassifier
from app.services.dashboard import DashboardService
from app.services.exceptions import ProviderUnavailableError, RateLimitError
from app.services.ledger import SqlLedgerStore
from app.services.performance import PerformanceService
from app.services.valuation import ValuationService


@pytest.fixture
def unconfigured_ledger(api_services, history_adapter, clock):
    """Swap every ledger-backed service for one whose ledger URL is missing."""
    ledger = SqlLedgerStore(LedgerDatabase(None), CategoryClassifier())
    valuation = ValuationService(ledger, history_adapter, api_services.fx, clock)
    performance = PerformanceService(ledger, history_adapter, clock)

    app.dependency_overrides[dependencies.get_valuation_service] = lambda: valuation
    app.dependency_overrides[dependencies.get_performance_service] = lambda: performance
    app.dependency_overrides[dependencies.get_dashboard_service] = (
        lambda: DashboardService(ledger, valuation, performance)
    )
    app.dependency_overrides[dependencies.get_ledger_database] = lambda: LedgerDatabase(None)


# =============================================================================
# ERROR FORMAT
# =============================================================================

class TestErrorFormat:

    def test_invalid_period(self, client):
        response = client.get("/analytics/portfolio-performance", params={"period": "2Y"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "InvalidPeriodError"
        assert data["details"]["period"] == "2Y"
        assert "1Y" in data["details"]["valid_options"]
        assert "MAX" in data["details"]["valid_options"]

    def test_period_is_case_sensitive(self, client):
        response = client.get("/analytics/benchmarks", params={"period": "ytd"})

        assert response.status_code == 400

    def test_not_found_uses_error_detail(self, client):
        response = client.get("/nonexistent")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "NotFoundError"
        assert "message" in data

    def test_method_not_allowed(self, client):
        response = client.post("/dashboard")

        assert response.status_code == 405
        assert response.json()["error"] == "MethodNotAllowedError"


# =============================================================================
# LEDGER UNAVAILABLE
# =============================================================================

class TestLedgerUnavailable:

    @pytest.mark.parametrize("path", [
        "/assets",
        "/assets/categories",
        "/dashboard",
        "/analytics/portfolio-performance",
        "/analytics/symbol-performance",
    ])
    def test_ledger_endpoints_return_503(self, client, unconfigured_ledger, path):
        response = client.get(path)

        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "MissingCredentialsError"
        assert data["message"] == "Ledger store is not available"
        assert "LEDGER_DATABASE_URL" in data["details"]["reason"]

    def test_explicit_symbols_do_not_need_ledger(self, client, unconfigured_ledger):
        response = client.get("/analytics/symbol-performance", params={"symbols": ["AAPL"]})

        assert response.status_code == 200
        assert response.json()["series"]["AAPL"]["current_return"] == "50.00"

    def test_benchmarks_do_not_need_ledger(self, client, unconfigured_ledger):
        assert client.get("/analytics/benchmarks").status_code == 200

    def test_forex_and_news_unaffected(self, client, unconfigured_ledger):
        assert client.get("/forex").status_code == 200
        assert client.get("/news").status_code == 200


# =============================================================================
# MARKET DATA ERRORS
# =============================================================================

class TestMarketDataErrors:

    def test_escaped_provider_error_is_503(self, client, api_services, monkeypatch):
        def boom(*args, **kwargs):
            raise ProviderUnavailableError(provider="yahoo", reason="down")

        monkeypatch.setattr(api_services.valuation, "get_snapshot", boom)

        response = client.get("/assets")

        assert response.status_code == 503
        assert response.json()["error"] == "ProviderUnavailableError"
        assert response.json()["details"] == {"provider": "yahoo"}

    def test_escaped_rate_limit_sets_retry_after(self, client, api_services, monkeypatch):
        def boom(*args, **kwargs):
            raise RateLimitError(provider="yahoo", retry_after=30)

        monkeypatch.setattr(api_services.valuation, "get_snapshot", boom)

        response = client.get("/assets")

        assert response.status_code == 503
        assert response.json()["error"] == "RateLimitError"
        assert response.headers["Retry-After"] == "30"


# =============================================================================
# HEALTH
# =============================================================================

class TestHealth:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "Welcome" in response.json()["message"]

    def test_health_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["ledger"]["critical"] is True
        assert data["checks"]["news"] == {"status": "mock", "critical": False}

    def test_health_without_ledger(self, client, unconfigured_ledger):
        response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert "error" in data["checks"]["ledger"]

    def test_liveness(self, client, unconfigured_ledger):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}
