# app/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Existing classes satisfy protocols without modification
- Test mocks work without explicit inheritance
- Clear documentation of required interfaces
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from app.services.fx_rate_service import FXRateResult
    from app.services.performance.types import PerformanceSeries
    from app.services.periods import TimePeriod
    from app.services.valuation.types import ValuationSnapshot


class Clock(Protocol):
    """Source of "now". Injected so tests can pin the date."""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FXRateServiceProtocol(Protocol):
    """Interface required by ValuationService and DashboardService."""

    def get_usd_to_ntd(self) -> FXRateResult:
        ...


class ValuationServiceProtocol(Protocol):
    """Interface required by DashboardService."""

    def get_snapshot(self) -> ValuationSnapshot:
        ...


class PerformanceServiceProtocol(Protocol):
    """Interface required by DashboardService."""

    def get_total_performance(self, period: TimePeriod) -> PerformanceSeries:
        ...
