# app/services/performance/types.py
"""
Data types for the Performance Service.

A performance series is a list of (date, percent return) points plus the
metadata the charts need to draw it. All values use Decimal.

Invariants:
    - Points are strictly ascending by date, no duplicate dates
    - Portfolio-mode series have one point per calendar day
    - Asset-mode series have one point per trading day with a close
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class PerformanceDataPoint:
    """
    One day of a performance series.

    Attributes:
        date: Calendar date
        value: Percent return versus the series baseline (2.5 = +2.5%)
    """
    date: date
    value: Decimal


@dataclass(frozen=True)
class PerformanceSeries:
    """
    Named performance series.

    Attributes:
        key: Stable identifier (category key, symbol or benchmark label)
        name: Display name
        color: Chart color (hex), None when the caller picks one
        points: Ascending data points
    """
    key: str
    name: str
    color: str | None = None
    points: list[PerformanceDataPoint] = field(default_factory=list)

    @property
    def current_return(self) -> Decimal:
        """Value of the last point, 0 for an empty series."""
        if not self.points:
            return Decimal("0")
        return self.points[-1].value

    @property
    def is_empty(self) -> bool:
        return not self.points
