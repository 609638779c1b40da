# tests/routers/test_assets_api.py
"""
API layer tests for the valuation endpoints.

These tests verify the HTTP layer using FastAPI's TestClient:
- Status codes
- Response JSON structure matches the Pydantic schemas
- Decimal fields serialized as strings at their display precision

Services are real, wired over sample_ledger and the mock provider (see
the `client` fixture in conftest.py).
"""


class TestListAssets:

    def test_status_and_totals(self, client):
        response = client.get("/assets")

        assert response.status_code == 200
        data = response.json()
        assert data["as_of"] == "2024-07-15"
        assert data["total_usd"] == "71900.00"
        assert data["usd_to_ntd"] == "31.5000"
        assert data["fx_is_fallback"] is False

    def test_sorted_by_usd_value(self, client):
        data = client.get("/assets").json()

        assert [a["symbol"] for a in data["assets"]] == ["2330", "BTC", "USD", "AAPL"]

    def test_taiwan_holding_in_native_currency(self, client):
        assets = {a["symbol"]: a for a in client.get("/assets").json()["assets"]}

        tsmc = assets["2330"]
        assert tsmc["name"] == "TSMC"
        assert tsmc["category"] == "Stock-TW"
        assert tsmc["currency"] == "NTD"
        assert tsmc["lot_size"] == "1000"
        assert tsmc["market_value"] == "1260000.00"
        assert tsmc["cost_basis"] == "1000000.00"
        assert tsmc["usd_value"] == "40000.00"
        assert tsmc["change_24h"] == "-1.00"
        assert tsmc["has_live_quote"] is True

    def test_cash_valued_at_cost(self, client):
        assets = {a["symbol"]: a for a in client.get("/assets").json()["assets"]}

        cash = assets["USD"]
        assert cash["category"] == "Cash"
        assert cash["market_value"] == "1000.00"
        assert cash["unrealized_pl"] == "0.00"

    def test_weights_sum_to_100(self, client):
        assets = client.get("/assets").json()["assets"]

        total = sum(float(a["weight"]) for a in assets)
        assert abs(total - 100) < 0.05

    def test_missing_quote_flagged(self, client, market):
        market.fail_symbol("AAPL")

        assets = {a["symbol"]: a for a in client.get("/assets").json()["assets"]}

        assert assets["AAPL"]["has_live_quote"] is False
        assert assets["AAPL"]["current_price"] == "100.00000000"


class TestCategorySummaries:

    def test_every_category_listed(self, client):
        response = client.get("/assets/categories")

        assert response.status_code == 200
        categories = [c["category"] for c in response.json()["categories"]]
        assert categories == ["Stock-US", "Stock-TW", "Crypto", "Gold", "Cash"]

    def test_category_values(self, client):
        data = client.get("/assets/categories").json()
        summaries = {c["category"]: c for c in data["categories"]}

        assert summaries["Stock-TW"]["currency"] == "NTD"
        assert summaries["Stock-TW"]["total_value"] == "1260000.00"
        assert summaries["Crypto"]["usd_value"] == "30000.00"
        assert summaries["Crypto"]["change_percent"] == "50.00"
        assert summaries["Gold"]["asset_count"] == 0
        assert data["total_usd"] == "71900.00"
