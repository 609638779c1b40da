# app/schemas/dashboard.py
"""
Pydantic schemas for the dashboard and forex endpoints.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from app.models import Currency
from app.schemas.validators import Money, Percent, Rate


class DashboardStatsResponse(BaseModel):
    """Net worth headline figures."""

    model_config = ConfigDict(from_attributes=True)

    currency: Currency = Field(..., description="Display currency of the monetary fields")
    total_assets: Money
    total_liabilities: Money = Field(..., description="Active liabilities only")
    net_worth: Money
    daily_change: Money
    daily_change_percent: Percent = Field(..., description="Value-weighted 24h change")
    ytd_growth_percent: Percent = Field(..., description="Year-to-date portfolio return")
    usd_to_ntd: Rate
    fx_is_fallback: bool
    as_of: dt.date


class ForexRateResponse(BaseModel):
    """USD/NTD exchange rate."""

    model_config = ConfigDict(from_attributes=True)

    base_currency: str = Field(..., description="Base currency (USD)")
    quote_currency: str = Field(..., description="Quote currency (NTD)")
    rate: Rate = Field(..., description="Exchange rate (1 base = X quote)")
    is_fallback: bool = Field(..., description="True when the configured fallback was used")
    fetched_at: dt.datetime
