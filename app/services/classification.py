# app/services/classification.py
"""
Asset category classifier.

Assigns every ledger symbol to one of the five AssetCategory values.

Rule order:
    1. Explicit category on the ledger row (authoritative). The legacy
       value "Stock" is narrowed to Stock-TW / Stock-US by symbol shape.
    2. Allowlist lookup (symbol -> category). Built-in entries cover the
       common crypto tickers, fiat codes and gold tickers; operators can
       extend or override them through settings.category_overrides.
    3. Taiwan equity pattern ^\\d{4,6}$ -> Stock-TW.
    4. Anything else -> Stock-US.

The classifier holds no mutable state: the same symbol and explicit
category always produce the same result.

Usage:
    classifier = CategoryClassifier.from_settings()
    classifier.classify("2330")          # AssetCategory.STOCK_TW
    classifier.classify("BTC")           # AssetCategory.CRYPTO
    classifier.classify("AAPL", "Gold")  # AssetCategory.GOLD (explicit wins)
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType

from app.models import AssetCategory
from app.services.constants import (
    DEFAULT_CATEGORY_ALLOWLIST,
    LEGACY_STOCK_CATEGORY,
    TW_LISTING_SUFFIXES,
    TW_SYMBOL_PATTERN,
)

logger = logging.getLogger(__name__)


def is_taiwan_symbol(symbol: str) -> bool:
    """Check whether a symbol is a bare Taiwan equity code (4-6 digits)."""
    return bool(TW_SYMBOL_PATTERN.match(symbol))


def is_taiwan_listing(symbol: str) -> bool:
    """Bare Taiwan code, or a symbol already carrying a .TW/.TWO suffix."""
    return is_taiwan_symbol(symbol) or symbol.upper().endswith(TW_LISTING_SUFFIXES)


def parse_category(value: str | None) -> AssetCategory | None:
    """
    Parse a canonical category string.

    Returns:
        The matching AssetCategory, or None for empty/unknown values
    """
    if not value:
        return None
    try:
        return AssetCategory(value.strip())
    except ValueError:
        return None


def is_recognized_category(value: str | None) -> bool:
    """True if a ledger category cell names a category (legacy "Stock" included)."""
    if not value:
        return False
    return parse_category(value) is not None or value.strip() == LEGACY_STOCK_CATEGORY


class CategoryClassifier:
    """
    Symbol classifier driven by an explicit allowlist.

    Attributes:
        allowlist: Read-only symbol -> category mapping
    """

    def __init__(self, allowlist: Mapping[str, AssetCategory] | None = None) -> None:
        merged = dict(DEFAULT_CATEGORY_ALLOWLIST if allowlist is None else allowlist)
        self.allowlist: Mapping[str, AssetCategory] = MappingProxyType(merged)

    @classmethod
    def from_settings(cls, overrides: Mapping[str, str] | None = None) -> "CategoryClassifier":
        """
        Build a classifier from the built-in allowlist plus overrides.

        Args:
            overrides: symbol -> category value (e.g. {"ADA": "Crypto"}).
                       Defaults to settings.category_overrides.

        Raises:
            ValueError: If an override names an unknown category
        """
        if overrides is None:
            from app.config import settings
            overrides = settings.category_overrides

        allowlist = dict(DEFAULT_CATEGORY_ALLOWLIST)
        for symbol, value in overrides.items():
            category = parse_category(value)
            if category is None:
                raise ValueError(
                    f"Unknown category '{value}' for symbol '{symbol}'. "
                    f"Valid options: {', '.join(c.value for c in AssetCategory)}"
                )
            allowlist[symbol] = category

        if overrides:
            logger.info(f"Category allowlist extended with {len(overrides)} override(s)")
        return cls(allowlist)

    def classify(self, symbol: str, explicit: str | None = None) -> AssetCategory:
        """
        Classify a symbol.

        Args:
            symbol: Ledger asset symbol (case-sensitive)
            explicit: Category string from the ledger row, if any

        Returns:
            The asset's category
        """
        category = parse_category(explicit)
        if category is not None:
            return category

        if explicit and explicit.strip() == LEGACY_STOCK_CATEGORY:
            return AssetCategory.STOCK_TW if is_taiwan_listing(symbol) else AssetCategory.STOCK_US

        if explicit and explicit.strip():
            logger.debug(f"Ignoring unknown category '{explicit}' for {symbol}")

        return self.infer(symbol)

    def infer(self, symbol: str) -> AssetCategory:
        """Heuristic classification used when no explicit category is present."""
        if symbol in self.allowlist:
            return self.allowlist[symbol]
        if is_taiwan_symbol(symbol):
            return AssetCategory.STOCK_TW
        return AssetCategory.STOCK_US
