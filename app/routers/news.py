# app/routers/news.py
"""
News endpoint.

- GET /news - Latest finance headlines (cached, mock articles as fallback)
"""

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_news_service
from app.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT
from app.schemas.news import NewsFeedResponse
from app.services.news import NewsService

router = APIRouter(tags=["News"])


@router.get(
    "/news",
    response_model=NewsFeedResponse,
    summary="Latest finance news",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_news(
        request: Request,
        service: NewsService = Depends(get_news_service),
) -> NewsFeedResponse:
    """Newest headlines first, with the time of the next refresh."""
    return NewsFeedResponse.model_validate(service.get_latest())
