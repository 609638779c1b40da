# app/routers/assets.py
"""
Current valuation endpoints.

- GET /assets - Every open holding valued at live prices
- GET /assets/categories - Allocation by asset category

Holdings without a live quote are valued at their average cost and
flagged with `has_live_quote=false`.
"""

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_valuation_service
from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS
from app.schemas.assets import (
    AssetCategorySummaryResponse,
    AssetListResponse,
    AssetValuationResponse,
    CategorySummaryListResponse,
)
from app.services.valuation import ValuationService

router = APIRouter(
    prefix="/assets",
    tags=["Assets"],
)


@router.get(
    "",
    response_model=AssetListResponse,
    summary="Current holdings",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def list_assets(
        request: Request,
        service: ValuationService = Depends(get_valuation_service),
) -> AssetListResponse:
    """
    Per-asset valuation, largest USD value first.

    Monetary fields are in the asset's native currency (`currency`);
    `usd_value` is normalized with the USD/NTD rate reported alongside.

    **Errors:**
    - 503: Ledger not configured or unreachable
    """
    snapshot = service.get_snapshot()
    return AssetListResponse(
        as_of=snapshot.as_of,
        total_usd=snapshot.total_usd,
        usd_to_ntd=snapshot.usd_to_ntd,
        fx_is_fallback=snapshot.fx_is_fallback,
        assets=[AssetValuationResponse.model_validate(a) for a in snapshot.assets],
    )


@router.get(
    "/categories",
    response_model=CategorySummaryListResponse,
    summary="Allocation by category",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def list_category_summaries(
        request: Request,
        service: ValuationService = Depends(get_valuation_service),
) -> CategorySummaryListResponse:
    """
    One summary per asset category, empty categories included.

    **Errors:**
    - 503: Ledger not configured or unreachable
    """
    snapshot = service.get_snapshot()
    return CategorySummaryListResponse(
        as_of=snapshot.as_of,
        total_usd=snapshot.total_usd,
        usd_to_ntd=snapshot.usd_to_ntd,
        categories=[
            AssetCategorySummaryResponse.model_validate(c) for c in snapshot.categories
        ],
    )
