# app/services/valuation/types.py
"""
Internal data types for the Valuation Service.

These dataclasses are used internally by the holdings and valuation
calculators. They are NOT Pydantic schemas - those are defined in
app/schemas/assets.py for API serialization.

Design Principles:
- Immutable (frozen=True): a Holding is a snapshot, folding a transaction
  produces a new one
- Use Decimal for ALL financial values (never float)
- Use date (not datetime) for ledger dates
- Optional fields use None, not sentinel values

Type Hierarchy:
    Holding              - Point-in-time quantity + weighted-average cost
    AssetValuation       - Live valuation of one holding
    AssetCategorySummary - Rollup of one AssetCategory
    ValuationSnapshot    - Everything above for one request
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from app.models import AssetCategory, Currency
from app.services.constants import QUANTITY_EPSILON


# =============================================================================
# HOLDINGS
# =============================================================================

@dataclass(frozen=True)
class Holding:
    """
    Reconstructed position in one asset.

    Attributes:
        symbol: Ledger symbol
        quantity: Units held (ledger units; Taiwan equities in lots)
        avg_cost: Weighted-average cost per unit, in the transaction currency.
                  Only Buy/Deposit revise it.
        first_buy_date: First acquisition of the current run of holding;
                        cleared when the quantity returns to ~0
        category: Category resolved for the asset (first explicit value)
        currency: Currency resolved for the asset (first explicit value)
    """

    symbol: str
    quantity: Decimal = Decimal("0")
    avg_cost: Decimal = Decimal("0")
    first_buy_date: date | None = None
    category: AssetCategory = AssetCategory.STOCK_US
    currency: Currency = Currency.USD

    @property
    def is_open(self) -> bool:
        """True if the quantity is above the zero tolerance."""
        return self.quantity > QUANTITY_EPSILON


# =============================================================================
# VALUATION
# =============================================================================

@dataclass(frozen=True)
class AssetValuation:
    """
    Current valuation of one open holding.

    All monetary fields are in `currency` (the asset's native currency)
    except `usd_value`.

    Attributes:
        symbol: Ledger symbol
        name: Instrument name from the quote, else the symbol
        category: Asset category
        currency: Native currency (NTD for Stock-TW, USD otherwise,
                  transaction currency for Cash)
        quantity: Ledger units held
        lot_size: Shares per ledger unit (1000 for Taiwan codes)
        avg_cost: Weighted-average cost per share
        current_price: Live price, or avg_cost when no quote was available
        market_value: quantity × lot_size × current_price
        cost_basis: quantity × lot_size × avg_cost
        unrealized_pl: market_value - cost_basis
        usd_value: market_value normalized to USD
        weight: Share of the whole portfolio (percent, USD-normalized)
        category_weight: Share within the category (percent)
        change_24h: Daily change percent from the quote (0 without quote)
        total_change_percent: unrealized_pl / cost_basis × 100
        days_held: Calendar days since first_buy_date, inclusive
        has_live_quote: False when the avg-cost fallback was used
    """

    symbol: str
    name: str
    category: AssetCategory
    currency: Currency
    quantity: Decimal
    lot_size: Decimal
    avg_cost: Decimal
    current_price: Decimal
    market_value: Decimal
    cost_basis: Decimal
    unrealized_pl: Decimal
    usd_value: Decimal
    weight: Decimal
    category_weight: Decimal
    change_24h: Decimal
    total_change_percent: Decimal
    days_held: int | None
    has_live_quote: bool


@dataclass(frozen=True)
class AssetCategorySummary:
    """
    Aggregate of every asset in one category.

    Attributes:
        category: The category
        currency: Display currency (NTD for Stock-TW, USD otherwise)
        total_value: Sum of market values in `currency`
        cost_basis: Sum of cost bases in `currency`
        unrealized_pl: Sum of unrealized P/L in `currency`
        change_percent: unrealized_pl / cost_basis × 100 (0 if cost <= 0)
        usd_value: Sum of USD-normalized values
        weight: Share of the USD-normalized portfolio total (percent)
        asset_count: Number of open holdings in the category
    """

    category: AssetCategory
    currency: Currency
    total_value: Decimal
    cost_basis: Decimal
    unrealized_pl: Decimal
    change_percent: Decimal
    usd_value: Decimal
    weight: Decimal
    asset_count: int


@dataclass(frozen=True)
class ValuationSnapshot:
    """
    Valuation of the whole ledger at one moment.

    Attributes:
        as_of: Valuation date (holdings cutoff)
        assets: Per-asset valuations, largest USD value first
        categories: One summary per AssetCategory, in enum order
        total_usd: Sum of all asset USD values
        usd_to_ntd: FX rate used for normalization
        fx_is_fallback: True when the configured fallback rate was used
    """

    as_of: date
    assets: list[AssetValuation] = field(default_factory=list)
    categories: list[AssetCategorySummary] = field(default_factory=list)
    total_usd: Decimal = Decimal("0")
    usd_to_ntd: Decimal = Decimal("0")
    fx_is_fallback: bool = False
