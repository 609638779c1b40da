# app/services/constants.py
"""
Centralized constants for the Net Worth Tracker services.

Single source of truth for business constants used across the engine:
tolerances, the Taiwan market conventions, classification allowlists,
and the display metadata of the performance series.

Values that operators may need to tune at runtime (FX fallback rate,
batch size, category overrides) live in app/config.py instead.

Usage:
    from app.services.constants import QUANTITY_EPSILON, TW_LOT_SIZE
"""

import re
from decimal import Decimal

from app.models import AssetCategory


# =============================================================================
# NUMERIC TOLERANCES
# =============================================================================

# Type-safe zero for Decimal comparisons
ZERO: Decimal = Decimal("0")

# A holding whose quantity is at or below this value is "effectively zero"
# (absorbs float noise from fractional crypto sells in the spreadsheet)
QUANTITY_EPSILON: Decimal = Decimal("0.000001")

# Percentages are multiplied by this
HUNDRED: Decimal = Decimal("100")


# =============================================================================
# TAIWAN MARKET CONVENTIONS
# =============================================================================

# Ledger quantities for Taiwan equities are entered in lots (張) of 1000 shares
TW_LOT_SIZE: Decimal = Decimal("1000")

# Canonical Taiwan equity symbol: 4 to 6 digits (2330, 00878, 006208)
TW_SYMBOL_PATTERN: re.Pattern = re.compile(r"^\d{4,6}$")

# Listing suffixes already pointing at a Taiwan exchange
TW_LISTING_SUFFIXES: tuple[str, ...] = (".TW", ".TWO")


# =============================================================================
# CLASSIFICATION ALLOWLIST
# =============================================================================

# Built-in symbol -> category mapping consulted when a ledger row has no
# explicit category. Extended (or overridden) by settings.category_overrides.
DEFAULT_CATEGORY_ALLOWLIST: dict[str, AssetCategory] = {
    # Crypto
    "BTC": AssetCategory.CRYPTO,
    "ETH": AssetCategory.CRYPTO,
    "SOL": AssetCategory.CRYPTO,
    "USDT": AssetCategory.CRYPTO,
    "USDC": AssetCategory.CRYPTO,
    # Fiat
    "USD": AssetCategory.CASH,
    "NTD": AssetCategory.CASH,
    # Gold
    "GLD": AssetCategory.GOLD,
    "GOLD": AssetCategory.GOLD,
    "XAU": AssetCategory.GOLD,
    "IAU": AssetCategory.GOLD,
}

# Category value used by older ledger rows before stocks were split by market
LEGACY_STOCK_CATEGORY: str = "Stock"


# =============================================================================
# CRYPTO QUOTING
# =============================================================================

# Crypto symbols are quoted against USD on Yahoo (BTC -> BTC-USD)
CRYPTO_QUOTE_SUFFIX: str = "-USD"


# =============================================================================
# PERFORMANCE SERIES METADATA
# =============================================================================

# Sub-portfolios shown on the analytics page: key -> (display name, color)
PORTFOLIO_SERIES: dict[str, tuple[str, str]] = {
    "usStocks": ("My US Stocks", "#ef4444"),
    "taiwanStocks": ("My Taiwan Stocks", "#8b5cf6"),
    "crypto": ("My Crypto", "#f97316"),
}

# Default benchmarks: key -> (Yahoo symbol, display name, color)
DEFAULT_BENCHMARKS: dict[str, tuple[str, str, str]] = {
    "sp500": ("^GSPC", "S&P 500", "#3b82f6"),
    "taiwan0050": ("0050.TW", "Taiwan 0050", "#10b981"),
    "btc": ("BTC-USD", "BTC", "#f59e0b"),
    "usdt": ("USDT-USD", "USDT", "#6b7280"),
}

# MAX period policy: how far back "all history" reaches
MAX_PERIOD_YEARS: int = 20


# =============================================================================
# NEWS
# =============================================================================

FINNHUB_NEWS_URL: str = "https://finnhub.io/api/v1/news"
NEWS_ARTICLE_LIMIT: int = 3


# =============================================================================
# RATE LIMITING CONSTANTS
# =============================================================================
# Limits are expressed as "X per Y" where Y is the time window
# Format follows slowapi/limits syntax: "100/minute", "10/hour", etc.

# Default rate limit for read endpoints
RATE_LIMIT_DEFAULT: str = "100/minute"

# Rate limit for health check endpoints
# Higher limit for monitoring tools that poll frequently
RATE_LIMIT_HEALTH: str = "300/minute"

# Rate limit for analytics endpoints
# Each call fans out to Yahoo Finance for every held symbol
RATE_LIMIT_ANALYTICS: str = "30/minute"
