# app/schemas/analytics.py
"""
Pydantic schemas for Analytics API.

These schemas define the response formats for the performance charts:
- Portfolio performance (one series per sub-portfolio)
- Symbol performance (price-only series per held symbol)
- Benchmark performance (price-only series per benchmark)

Design decisions:
- All numeric values are serialized as STRINGS to preserve Decimal precision
- Return values are percentages (2.5 = +2.5%), rounded to 2 decimals
- Series are keyed by a stable key (category key, symbol or benchmark label)
- An empty `points` list means "no data" for that series
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.validators import Percent


class PerformanceDataPointResponse(BaseModel):
    """One day of a performance series."""

    model_config = ConfigDict(from_attributes=True)

    date: dt.date = Field(..., description="Calendar date")
    value: Percent = Field(..., description="Percent return vs. the series baseline")


class PerformanceSeriesResponse(BaseModel):
    """A named performance series."""

    model_config = ConfigDict(from_attributes=True)

    key: str = Field(..., description="Series key (e.g., 'usStocks', 'AAPL', 'sp500')")
    name: str = Field(..., description="Display name")
    color: str | None = Field(default=None, description="Chart color (hex)")
    current_return: Percent = Field(..., description="Value of the last point (0 if empty)")
    points: list[PerformanceDataPointResponse] = Field(
        default_factory=list,
        description="Ascending data points"
    )


class PerformanceResponse(BaseModel):
    """
    Performance series for one period.

    Used by the portfolio, symbol and benchmark endpoints.
    """

    period: str = Field(..., description="Requested period token (e.g., '1Y')")
    series: dict[str, PerformanceSeriesResponse] = Field(
        ...,
        description="Series keyed by their key"
    )
