# app/schemas/assets.py
"""
Pydantic schemas for current valuation and allocation.

Monetary values are in the asset's (or category's) native currency,
reported alongside; `usd_value` fields are USD-normalized. Weights and
changes are percentages.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models import AssetCategory, Currency
from app.schemas.validators import Money, Percent, Price, Rate


# =============================================================================
# PER-ASSET VALUATION
# =============================================================================

class AssetValuationResponse(BaseModel):
    """Valuation of one open holding."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str = Field(..., description="Ledger symbol")
    name: str = Field(..., description="Instrument name (symbol if unknown)")
    category: AssetCategory
    currency: Currency = Field(..., description="Native currency of the monetary fields")
    quantity: Decimal = Field(..., description="Ledger units held (Taiwan equities in lots)")
    lot_size: Decimal = Field(..., description="Shares per ledger unit")
    avg_cost: Price = Field(..., description="Weighted-average cost per share")
    current_price: Price = Field(..., description="Live price (avg cost when no quote)")
    market_value: Money
    cost_basis: Money
    unrealized_pl: Money
    usd_value: Money = Field(..., description="Market value normalized to USD")
    weight: Percent = Field(..., description="Share of the whole portfolio")
    category_weight: Percent = Field(..., description="Share within the category")
    change_24h: Percent = Field(..., description="Daily change from the live quote")
    total_change_percent: Percent = Field(..., description="Unrealized P/L vs. cost basis")
    days_held: int | None = Field(default=None, description="Days since first buy")
    has_live_quote: bool = Field(..., description="False when valued at average cost")


class AssetListResponse(BaseModel):
    """All open holdings."""

    as_of: date
    total_usd: Money
    usd_to_ntd: Rate
    fx_is_fallback: bool
    assets: list[AssetValuationResponse]


# =============================================================================
# CATEGORY ROLLUPS
# =============================================================================

class AssetCategorySummaryResponse(BaseModel):
    """Aggregate of one asset category."""

    model_config = ConfigDict(from_attributes=True)

    category: AssetCategory
    currency: Currency = Field(..., description="Display currency of total_value")
    total_value: Money
    cost_basis: Money
    unrealized_pl: Money
    change_percent: Percent = Field(..., description="Unrealized P/L vs. cost basis")
    usd_value: Money
    weight: Percent = Field(..., description="Share of the USD-normalized portfolio")
    asset_count: int


class CategorySummaryListResponse(BaseModel):
    """One summary per category, empty categories included."""

    as_of: date
    total_usd: Money
    usd_to_ntd: Rate
    categories: list[AssetCategorySummaryResponse]
