# app/services/valuation/__init__.py
"""
Valuation Service Package.

This package provides:
- Holdings reconstruction (weighted-average cost, any cutoff date)
- Incremental holdings timeline for daily series
- Current valuation and per-category allocation

Usage:
    from app.services.valuation import ValuationService

    service = ValuationService(ledger, history, fx_service)

    assets = service.get_current_valuation()
    categories = service.get_category_summaries()

Architecture:
    valuation/
    ├── __init__.py      # This file - package exports
    ├── types.py         # Holding, AssetValuation, AssetCategorySummary
    ├── calculators.py   # Reconstructor, timeline, valuation, rollup
    └── service.py       # ValuationService orchestrator
"""

from app.services.valuation.calculators import (
    CategoryRollup,
    HoldingsReconstructor,
    HoldingsTimeline,
    ValuationCalculator,
    apply_transaction,
    percent_of,
    sort_transactions,
)
from app.services.valuation.service import ValuationService
from app.services.valuation.types import (
    AssetCategorySummary,
    AssetValuation,
    Holding,
    ValuationSnapshot,
)

__all__ = [
    # Service
    "ValuationService",
    # Calculators
    "HoldingsReconstructor",
    "HoldingsTimeline",
    "ValuationCalculator",
    "CategoryRollup",
    "apply_transaction",
    "sort_transactions",
    "percent_of",
    # Types
    "Holding",
    "AssetValuation",
    "AssetCategorySummary",
    "ValuationSnapshot",
]
