# app/services/market_data/symbols.py
"""
Ledger symbol -> provider symbol mapping.

Ledger symbols are what the user typed ("2330", "BTC", "AAPL"). Yahoo
Finance needs the listing suffix for Taiwan equities and the quote pair
for crypto. Results are always keyed back by the ledger symbol, so the
rewrite never leaks out of the market data layer.

    2330  (4-6 digits)        -> 2330.TW
    BTC   (crypto, no hyphen) -> BTC-USD
    AAPL                      -> AAPL
"""

from app.models import AssetCategory
from app.services.classification import is_taiwan_symbol
from app.services.constants import CRYPTO_QUOTE_SUFFIX

# Yahoo uses ISO 4217 codes; the ledger writes New Taiwan Dollars as NTD
_YAHOO_CURRENCY_CODES: dict[str, str] = {
    "NTD": "TWD",
}


def to_provider_symbol(symbol: str, category: AssetCategory | None = None) -> str:
    """
    Rewrite a ledger symbol into the symbol Yahoo Finance lists it under.

    Args:
        symbol: Ledger symbol
        category: Resolved category of the symbol, when known

    Returns:
        Provider symbol
    """
    if is_taiwan_symbol(symbol):
        return f"{symbol}.TW"
    if category == AssetCategory.CRYPTO and "-" not in symbol:
        return f"{symbol}{CRYPTO_QUOTE_SUFFIX}"
    return symbol


def build_forex_symbol(base: str, quote: str) -> str:
    """
    Build the Yahoo Finance forex pair symbol.

    Example:
        build_forex_symbol("USD", "NTD") -> "USDTWD=X"
    """
    base = _YAHOO_CURRENCY_CODES.get(base.upper(), base.upper())
    quote = _YAHOO_CURRENCY_CODES.get(quote.upper(), quote.upper())
    return f"{base}{quote}=X"
