# app/utils/fx_conversion.py
"""
Currency and lot-size conversion.

Single place for the two unit conventions the ledger relies on:

1. LOT SIZE:
   Taiwan equities (4-6 digit codes) are entered in lots of 1000 shares.
   Every value/cost computation multiplies the ledger quantity by the lot
   size before applying a price.

2. FX RATE:
   Convention: "1 USD = X NTD" (standard FX notation, Yahoo's USDTWD=X)
   To convert NTD → USD, DIVIDE by rate
   To convert USD → NTD, MULTIPLY by rate

Native currency per category:
    Stock-TW → NTD
    Cash     → the transaction's own currency
    others   → USD

Usage:
    converter = UnitsConverter(usd_to_ntd=Decimal("32.5"))
    shares = quantity * converter.lot_size("2330")       # × 1000
    usd = converter.to_usd(Decimal("650000"), Currency.NTD)
"""

from decimal import Decimal

from app.models import AssetCategory, Currency
from app.services.classification import is_taiwan_symbol
from app.services.constants import TW_LOT_SIZE
from app.services.exceptions import FXConversionError

_ONE = Decimal("1")


class UnitsConverter:
    """
    Converts ledger quantities to shares and amounts between USD and NTD.

    Attributes:
        usd_to_ntd: FX rate, 1 USD = X NTD (must be positive)
    """

    def __init__(self, usd_to_ntd: Decimal) -> None:
        if usd_to_ntd <= 0:
            raise FXConversionError(
                f"USD/NTD rate must be positive, got {usd_to_ntd}",
                currency=Currency.NTD.value,
            )
        self.usd_to_ntd = usd_to_ntd

    @staticmethod
    def lot_size(symbol: str) -> Decimal:
        """Shares per ledger unit: 1000 for Taiwan codes, otherwise 1."""
        return TW_LOT_SIZE if is_taiwan_symbol(symbol) else _ONE

    @staticmethod
    def native_currency(
            category: AssetCategory,
            fallback: Currency = Currency.USD,
    ) -> Currency:
        """
        Currency an asset of this category is valued in.

        Args:
            category: Asset category
            fallback: Transaction currency, used for Cash holdings
        """
        if category == AssetCategory.STOCK_TW:
            return Currency.NTD
        if category == AssetCategory.CASH:
            return fallback
        return Currency.USD

    def to_usd(self, amount: Decimal, currency: Currency) -> Decimal:
        """Convert an amount in `currency` to USD."""
        if currency == Currency.NTD:
            return amount / self.usd_to_ntd
        return amount

    def from_usd(self, amount: Decimal, currency: Currency) -> Decimal:
        """Convert a USD amount to `currency`."""
        if currency == Currency.NTD:
            return amount * self.usd_to_ntd
        return amount

    def convert(self, amount: Decimal, source: Currency, target: Currency) -> Decimal:
        """Convert between any two supported currencies."""
        if source == target:
            return amount
        return self.from_usd(self.to_usd(amount, source), target)
