"""News headlines and dashboard analytics endpoints."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from backend.routers.deps import get_news
from backend.schemas import HeadlinesResponse
from core.errors import ConfigurationError, InputValidationError
from services import analytics
from services.news.newsapi import CATEGORIES, SUPPORTED_COUNTRIES, NewsApiClient
from services.news.types import Article

router = APIRouter(tags=["news"])


async def _headlines(news: NewsApiClient, category: str, q: str, country: str) -> List[Article]:
    if category not in CATEGORIES:
        raise InputValidationError(f"Unknown category: {category}")
    if not news.is_configured():
        raise ConfigurationError("NewsAPI key not configured. Please check NEWS_API_KEY in .env")
    return await asyncio.to_thread(news.top_headlines, category, q, country.lower())


@router.get("/countries")
async def countries() -> List[Dict[str, str]]:
    return [{"code": code, "name": name} for code, name in SUPPORTED_COUNTRIES.items()]


@router.get("/headlines", response_model=HeadlinesResponse)
async def headlines(
    category: str = Query("general"),
    q: str = Query(""),
    country: str = Query("us", min_length=2, max_length=2),
    news: NewsApiClient = Depends(get_news),
) -> Dict[str, Any]:
    articles = await _headlines(news, category, q, country)
    return {"articles": [article.to_dict() for article in articles]}


@router.get("/analytics")
async def news_analytics(
    category: str = Query("general"),
    q: str = Query(""),
    country: str = Query("us", min_length=2, max_length=2),
    news: NewsApiClient = Depends(get_news),
) -> Dict[str, Any]:
    """Word cloud, source split, category split and 7-day timeline for one feed."""

    articles = await _headlines(news, category, q, country)
    return {
        "total": len(articles),
        "words": analytics.word_frequencies(articles),
        "sources": analytics.source_distribution(articles),
        "categories": analytics.category_distribution(articles, category, q),
        "timeline": analytics.time_series(articles),
    }
