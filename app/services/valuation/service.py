# app/services/valuation/service.py
"""
Valuation Service - Main orchestrator for current valuation and allocation.

This is the single entry point for all valuation operations:
- get_snapshot(): Assets, category rollups and totals in one pass
- get_current_valuation(): Per-asset valuations
- get_category_summaries(): One rollup per AssetCategory

Design Principles:
- Dependency Injection: ledger, quotes, FX and clock via constructor
- No HTTP Knowledge: Raises domain exceptions, not HTTPException
- Composable: Uses specialized calculators for each task
- Recomputed per call: nothing is cached between requests

Pipeline:
    ledger ──► HoldingsReconstructor(cutoff=today) ──► open holdings
                                                          │
    quotes (PriceHistoryAdapter) ─────────────────────────┤
    USD/NTD (FXRateService) ──► UnitsConverter ───────────┤
                                                          ▼
                              ValuationCalculator ──► CategoryRollup

Usage:
    service = ValuationService(ledger, history, fx_service)
    for asset in service.get_current_valuation():
        print(asset.symbol, asset.market_value, asset.weight)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.models import AssetCategory
from app.services.constants import ZERO
from app.services.ledger.base import LedgerStore
from app.services.market_data.history import PriceHistoryAdapter
from app.services.protocols import SystemClock
from app.services.valuation.calculators import (
    CategoryRollup,
    HoldingsReconstructor,
    ValuationCalculator,
)
from app.services.valuation.types import (
    AssetCategorySummary,
    AssetValuation,
    ValuationSnapshot,
)
from app.utils.fx_conversion import UnitsConverter

if TYPE_CHECKING:
    from app.services.protocols import Clock, FXRateServiceProtocol

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Main service for current valuation operations.

    Attributes:
        _ledger: Read-only ledger store
        _history: Quote source keyed by ledger symbol
        _fx_service: USD/NTD rate with fallback
        _clock: Source of today's date
        _holdings_calc: Ledger replay
    """

    def __init__(
            self,
            ledger: LedgerStore,
            history: PriceHistoryAdapter,
            fx_service: FXRateServiceProtocol,
            clock: Clock | None = None,
    ) -> None:
        self._ledger = ledger
        self._history = history
        self._fx_service = fx_service
        self._clock = clock or SystemClock()
        self._holdings_calc = HoldingsReconstructor()

        logger.info("ValuationService initialized")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_snapshot(self) -> ValuationSnapshot:
        """
        Value the whole ledger as of today.

        Raises:
            MissingCredentialsError: Ledger store unavailable
        """
        today = self._clock.today()
        transactions = self._ledger.list_transactions()

        holdings = self._holdings_calc.reconstruct(transactions, cutoff=today)
        open_holdings = [h for h in holdings.values() if h.is_open]

        fx = self._fx_service.get_usd_to_ntd()
        converter = UnitsConverter(usd_to_ntd=fx.rate)

        # Cash is valued at its deposit price; there is nothing to quote
        quoted = [h for h in open_holdings if h.category != AssetCategory.CASH]
        quotes = self._history.fetch_quotes(
            [h.symbol for h in quoted],
            categories={h.symbol: h.category for h in quoted},
        )

        calculator = ValuationCalculator(converter)
        assets = calculator.value_holdings(open_holdings, quotes, today)
        categories = CategoryRollup(converter).summarize(assets)
        total_usd = sum((a.usd_value for a in assets), ZERO)

        logger.info(
            f"Valuation as of {today}: {len(assets)} open holding(s), "
            f"{len(quotes)} live quote(s), total ${total_usd:.2f}"
        )

        return ValuationSnapshot(
            as_of=today,
            assets=assets,
            categories=categories,
            total_usd=total_usd,
            usd_to_ntd=fx.rate,
            fx_is_fallback=fx.is_fallback,
        )

    def get_current_valuation(self) -> list[AssetValuation]:
        """Per-asset valuations, largest USD value first."""
        return self.get_snapshot().assets

    def get_category_summaries(self) -> list[AssetCategorySummary]:
        """One summary per AssetCategory (empty categories included)."""
        return self.get_snapshot().categories
