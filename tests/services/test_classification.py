# tests/services/test_classification.py
"""
Tests for the asset category classifier.
"""

import pytest

from app.models import AssetCategory
from app.services.classification import (
    CategoryClassifier,
    is_taiwan_listing,
    is_taiwan_symbol,
    parse_category,
)


class TestTaiwanRule:
    """Tests for the Taiwan equity symbol pattern."""

    @pytest.mark.parametrize("symbol", ["2330", "0050", "00878", "006208"])
    def test_taiwan_codes(self, symbol):
        assert is_taiwan_symbol(symbol)

    @pytest.mark.parametrize("symbol", ["123", "1234567", "2330.TW", "AAPL", "BTC"])
    def test_not_taiwan_codes(self, symbol):
        assert not is_taiwan_symbol(symbol)

    @pytest.mark.parametrize("symbol,expected", [
        ("2330", True),
        ("2330.TW", True),
        ("6488.two", True),
        ("AAPL", False),
    ])
    def test_taiwan_listing(self, symbol, expected):
        assert is_taiwan_listing(symbol) is expected


class TestClassify:
    """Tests for CategoryClassifier.classify."""

    @pytest.fixture
    def classifier(self):
        return CategoryClassifier()

    @pytest.mark.parametrize("symbol,expected", [
        ("2330", AssetCategory.STOCK_TW),
        ("00878", AssetCategory.STOCK_TW),
        ("AAPL", AssetCategory.STOCK_US),
        ("BRK.B", AssetCategory.STOCK_US),
        ("BTC", AssetCategory.CRYPTO),
        ("USDT", AssetCategory.CRYPTO),
        ("USD", AssetCategory.CASH),
        ("NTD", AssetCategory.CASH),
        ("GLD", AssetCategory.GOLD),
        ("XAU", AssetCategory.GOLD),
    ])
    def test_inferred_categories(self, classifier, symbol, expected):
        assert classifier.classify(symbol) == expected

    def test_explicit_category_wins(self, classifier):
        assert classifier.classify("AAPL", "Gold") == AssetCategory.GOLD
        assert classifier.classify("2330", "Stock-US") == AssetCategory.STOCK_US

    @pytest.mark.parametrize("symbol,expected", [
        ("2330", AssetCategory.STOCK_TW),
        ("2330.TW", AssetCategory.STOCK_TW),
        ("AAPL", AssetCategory.STOCK_US),
    ])
    def test_legacy_stock_category(self, classifier, symbol, expected):
        """Older rows say just "Stock"; the market comes from the symbol."""
        assert classifier.classify(symbol, "Stock") == expected

    def test_unknown_explicit_category_falls_back(self, classifier):
        assert classifier.classify("BTC", "Bonds") == AssetCategory.CRYPTO
        assert classifier.classify("BTC", "   ") == AssetCategory.CRYPTO

    def test_case_sensitive_symbols(self, classifier):
        """The allowlist matches symbols exactly as typed."""
        assert classifier.classify("btc") == AssetCategory.STOCK_US

    def test_deterministic(self, classifier):
        results = {classifier.classify("2330") for _ in range(10)}
        assert results == {AssetCategory.STOCK_TW}


class TestAllowlist:
    """Tests for allowlist configuration."""

    def test_overrides_extend_defaults(self):
        classifier = CategoryClassifier.from_settings({"ADA": "Crypto"})
        assert classifier.classify("ADA") == AssetCategory.CRYPTO
        assert classifier.classify("BTC") == AssetCategory.CRYPTO

    def test_overrides_replace_defaults(self):
        classifier = CategoryClassifier.from_settings({"GLD": "Stock-US"})
        assert classifier.classify("GLD") == AssetCategory.STOCK_US

    def test_unknown_override_category_rejected(self):
        with pytest.raises(ValueError, match="Unknown category"):
            CategoryClassifier.from_settings({"ADA": "Coins"})

    def test_allowlist_is_read_only(self):
        classifier = CategoryClassifier()
        with pytest.raises(TypeError):
            classifier.allowlist["NEW"] = AssetCategory.CRYPTO

    def test_explicit_empty_allowlist(self):
        classifier = CategoryClassifier(allowlist={})
        assert classifier.classify("BTC") == AssetCategory.STOCK_US


class TestParseCategory:

    @pytest.mark.parametrize("value,expected", [
        ("Stock-TW", AssetCategory.STOCK_TW),
        (" Cash ", AssetCategory.CASH),
        ("Stock", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, value, expected):
        assert parse_category(value) == expected
