# app/services/news.py
"""
News Service - Latest finance headlines for the dashboard.

Source:
    Finnhub general news (https://finnhub.io/api/v1/news?category=general)
    when FINNHUB_API_KEY is configured, otherwise built-in mock articles.

Policy:
    - Newest first, at most `limit` articles
    - Fewer than `limit` real articles are padded with mock articles
    - Any upstream failure (network, HTTP status, bad payload) falls back
      to mock articles; the news widget never errors
    - Results are cached in a NewsCache for NEWS_CACHE_TTL_SECONDS

Usage:
    service = NewsService(api_key=settings.finnhub_api_key, cache=NewsCache(3600))
    feed = service.get_latest()
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import httpx

from app.services.constants import FINNHUB_NEWS_URL, NEWS_ARTICLE_LIMIT
from app.services.protocols import SystemClock

if TYPE_CHECKING:
    from app.services.protocols import Clock

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class NewsArticle:
    """One headline."""

    id: str
    title: str
    description: str
    url: str
    source: str
    published_at: datetime
    image_url: str | None = None


@dataclass(frozen=True)
class NewsFeed:
    """
    Articles plus cache timing.

    Attributes:
        articles: Newest first
        last_updated: When the articles were fetched
        next_update: When the cache will fetch again
    """

    articles: list[NewsArticle] = field(default_factory=list)
    last_updated: datetime | None = None
    next_update: datetime | None = None


# =============================================================================
# CACHE
# =============================================================================

class NewsCache:
    """
    Thread-safe single-entry cache with TTL.

    The clock is injected so expiry can be tested without sleeping.

    Attributes:
        ttl: Time-to-live of a stored feed
    """

    def __init__(self, ttl_seconds: int, clock: Clock | None = None) -> None:
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or SystemClock()
        self._entry: tuple[datetime, NewsFeed] | None = None
        self._lock = threading.Lock()

    def get(self) -> NewsFeed | None:
        """Cached feed, or None if empty or expired."""
        with self._lock:
            if self._entry is None:
                return None
            stored_at, feed = self._entry
            if self._clock.now() - stored_at < self.ttl:
                return feed
            self._entry = None

        logger.debug("News cache expired")
        return None

    def set(self, feed: NewsFeed) -> None:
        with self._lock:
            self._entry = (self._clock.now(), feed)

    def invalidate(self) -> None:
        """Drop the cached feed; the next read fetches again."""
        with self._lock:
            self._entry = None
        logger.debug("News cache invalidated")

    def next_refresh(self) -> datetime:
        """When a feed stored now would expire."""
        return self._clock.now() + self.ttl


# =============================================================================
# MOCK ARTICLES
# =============================================================================

def mock_articles(now: datetime) -> list[NewsArticle]:
    """Placeholder headlines dated one day before `now`."""
    yesterday = now - timedelta(days=1)
    return [
        NewsArticle(
            id="1",
            title="Stock Market Reaches New Heights Amid Economic Optimism",
            description="Major indices climb as investors show renewed confidence in economic recovery.",
            url="https://finance.yahoo.com",
            source="Bloomberg",
            published_at=yesterday,
        ),
        NewsArticle(
            id="2",
            title="Federal Reserve Maintains Interest Rate Policy",
            description="Central bank officials signal steady approach to monetary policy amid inflation concerns.",
            url="https://finance.yahoo.com",
            source="Reuters",
            published_at=yesterday,
        ),
        NewsArticle(
            id="3",
            title="Tech Sector Leads Market Rally on Strong Earnings",
            description="Technology companies post better-than-expected quarterly results, driving market gains.",
            url="https://finance.yahoo.com",
            source="CNBC",
            published_at=yesterday,
        ),
    ]


# =============================================================================
# SERVICE
# =============================================================================

class NewsService:
    """
    Finnhub-backed news with mock fallback and caching.

    Attributes:
        _api_key: Finnhub token (None = mock articles only)
        _cache: Feed cache
        _client: httpx client (injectable for tests)
        _limit: Articles per feed
    """

    def __init__(
            self,
            api_key: str | None,
            cache: NewsCache,
            client: httpx.Client | None = None,
            clock: Clock | None = None,
            timeout: float = 10.0,
            limit: int = NEWS_ARTICLE_LIMIT,
    ) -> None:
        self._api_key = api_key
        self._cache = cache
        self._client = client or httpx.Client(timeout=timeout)
        self._clock = clock or SystemClock()
        self._limit = limit

    def get_latest(self) -> NewsFeed:
        """Cached feed, refreshed when the cache has expired."""
        cached = self._cache.get()
        if cached is not None:
            return cached

        now = self._clock.now()
        feed = NewsFeed(
            articles=self._load_articles(now),
            last_updated=now,
            next_update=self._cache.next_refresh(),
        )
        self._cache.set(feed)
        return feed

    def refresh(self) -> NewsFeed:
        """Invalidate the cache and fetch again."""
        self._cache.invalidate()
        return self.get_latest()

    def _load_articles(self, now: datetime) -> list[NewsArticle]:
        if not self._api_key:
            logger.info("No Finnhub API key configured, using mock news")
            return mock_articles(now)[:self._limit]

        try:
            items = self._fetch_general_news()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Finnhub news unavailable, using mock news: {e}")
            return mock_articles(now)[:self._limit]

        items = sorted(items, key=lambda item: item.get("datetime") or 0, reverse=True)

        articles: list[NewsArticle] = []
        for item in items:
            if len(articles) >= self._limit:
                break
            article = self._map_article(item)
            if article is not None:
                articles.append(article)

        if len(articles) < self._limit:
            logger.info(f"Only {len(articles)} news article(s) found, padding with mock news")
            articles = (articles + mock_articles(now))[:self._limit]

        return articles

    def _fetch_general_news(self) -> list[dict[str, Any]]:
        """
        Raises:
            httpx.HTTPError: Network failure or non-2xx status
            ValueError: Payload is not a JSON list
        """
        response = self._client.get(
            FINNHUB_NEWS_URL,
            params={"category": "general", "token": self._api_key},
        )
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, list):
            raise ValueError(f"Unexpected Finnhub payload: {type(data).__name__}")
        return [item for item in data if isinstance(item, dict)]

    @staticmethod
    def _map_article(item: dict[str, Any]) -> NewsArticle | None:
        """Finnhub item → NewsArticle; None when required fields are missing."""
        try:
            title = item["headline"]
            published_at = datetime.fromtimestamp(int(item["datetime"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            return None

        if not title:
            return None

        return NewsArticle(
            id=str(item.get("id", "")),
            title=title,
            description=item.get("summary") or title,
            url=item.get("url") or "",
            source=item.get("source") or "",
            published_at=published_at,
            image_url=item.get("image") or None,
        )
