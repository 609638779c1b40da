# app/schemas/news.py
"""
Pydantic schemas for the news endpoint.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict


class NewsArticleResponse(BaseModel):
    """One headline."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    url: str
    source: str
    published_at: dt.datetime
    image_url: str | None = None


class NewsFeedResponse(BaseModel):
    """Latest headlines with cache timing."""

    model_config = ConfigDict(from_attributes=True)

    articles: list[NewsArticleResponse]
    last_updated: dt.datetime | None = None
    next_update: dt.datetime | None = None
