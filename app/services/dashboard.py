# app/services/dashboard.py
"""
Dashboard Service - Net worth headline numbers.

Combines the current valuation, the liability ledger and the year-to-date
performance series into the figures shown at the top of the dashboard.

Formulas (USD, before display conversion):
    total_assets         = Σ asset USD values
    total_liabilities    = Σ amounts of ACTIVE liabilities
    net_worth            = total_assets - total_liabilities
    daily_change_percent = Σ (usd_value × change_24h) / total_assets
    daily_change         = total_assets × daily_change_percent / 100
    ytd_growth_percent   = last point of the whole-ledger YTD series

Display currency:
    NTD multiplies every monetary figure by the USD/NTD rate used for the
    valuation. Percentages are currency independent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from app.models import Currency
from app.services.constants import HUNDRED, ZERO
from app.services.exceptions import ValidationError
from app.services.ledger.base import LedgerStore
from app.services.periods import TimePeriod

if TYPE_CHECKING:
    from app.services.protocols import (
        PerformanceServiceProtocol,
        ValuationServiceProtocol,
    )

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    """
    Headline figures in the requested display currency.

    Attributes:
        currency: Display currency of the monetary fields
        total_assets: Market value of all open holdings
        total_liabilities: Outstanding active liabilities
        net_worth: total_assets - total_liabilities
        daily_change: Value-weighted 24h change, as an amount
        daily_change_percent: Value-weighted 24h change, in percent
        ytd_growth_percent: Year-to-date portfolio return (0 if unavailable)
        usd_to_ntd: Rate used for NTD normalization and display
        fx_is_fallback: True when the configured fallback rate was used
        as_of: Valuation date
    """

    currency: Currency
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    daily_change: Decimal
    daily_change_percent: Decimal
    ytd_growth_percent: Decimal
    usd_to_ntd: Decimal
    fx_is_fallback: bool
    as_of: date


def parse_display_currency(value: str | Currency) -> Currency:
    """
    Parse a display currency ("USD" or "NTD", case-insensitive).

    Raises:
        ValidationError: Unsupported currency
    """
    if isinstance(value, Currency):
        return value
    try:
        return Currency(value.strip().upper())
    except ValueError:
        raise ValidationError(
            f"Unsupported currency '{value}'. "
            f"Valid options: {', '.join(c.value for c in Currency)}",
            field="currency",
        ) from None


class DashboardService:
    """
    Builds DashboardStats.

    Attributes:
        _ledger: Read-only ledger store (liabilities)
        _valuation: Current valuation
        _performance: YTD series
    """

    def __init__(
            self,
            ledger: LedgerStore,
            valuation: ValuationServiceProtocol,
            performance: PerformanceServiceProtocol,
    ) -> None:
        self._ledger = ledger
        self._valuation = valuation
        self._performance = performance

    def get_stats(self, currency: str | Currency = Currency.USD) -> DashboardStats:
        """
        Compute the dashboard figures.

        Args:
            currency: Display currency ("USD" or "NTD")

        Raises:
            ValidationError: Unsupported currency
            MissingCredentialsError: Ledger store unavailable
        """
        display = parse_display_currency(currency)

        snapshot = self._valuation.get_snapshot()
        liabilities = self._ledger.list_liabilities()

        total_assets = snapshot.total_usd
        total_liabilities = sum(
            (liability.amount for liability in liabilities if liability.is_active), ZERO
        )

        if total_assets > ZERO:
            weighted = sum((a.usd_value * a.change_24h for a in snapshot.assets), ZERO)
            daily_change_percent = weighted / total_assets
        else:
            daily_change_percent = ZERO
        daily_change = total_assets * daily_change_percent / HUNDRED

        ytd_growth_percent = self._ytd_growth()

        rate = snapshot.usd_to_ntd if display == Currency.NTD else Decimal("1")

        return DashboardStats(
            currency=display,
            total_assets=total_assets * rate,
            total_liabilities=total_liabilities * rate,
            net_worth=(total_assets - total_liabilities) * rate,
            daily_change=daily_change * rate,
            daily_change_percent=daily_change_percent,
            ytd_growth_percent=ytd_growth_percent,
            usd_to_ntd=snapshot.usd_to_ntd,
            fx_is_fallback=snapshot.fx_is_fallback,
            as_of=snapshot.as_of,
        )

    def _ytd_growth(self) -> Decimal:
        """Current return of the YTD series; 0 when it cannot be computed."""
        try:
            return self._performance.get_total_performance(TimePeriod.YEAR_TO_DATE).current_return
        except Exception as e:
            logger.warning(f"YTD growth unavailable, reporting 0: {e}")
            return ZERO
