"""NewsAPI (newsapi.org) client with the dashboard's country fallback."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from core.errors import ConfigurationError
from services.news.types import Article

SUPPORTED_COUNTRIES: Dict[str, str] = {
    "us": "United States",
    "gb": "United Kingdom",
    "de": "Germany",
    "jp": "Japan",
    "in": "India",
}

CATEGORIES = (
    "general",
    "business",
    "entertainment",
    "health",
    "science",
    "sports",
    "technology",
)

_FALLBACK_QUERIES = {
    "in": "India",
    "gb": "United Kingdom",
    "de": "Germany",
    "jp": "Japan",
}


def fallback_query(country: str) -> str:
    return _FALLBACK_QUERIES.get((country or "").lower(), "World")


class NewsApiClient:
    """Fetch headlines and searches from NewsAPI v2."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = "https://newsapi.org/v2",
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.log = logging.getLogger("newspulse.news")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get(self, path: str, params: Mapping[str, Any]) -> List[Article]:
        if not self.api_key:
            raise ConfigurationError("NewsAPI key not configured. Please check NEWS_API_KEY in .env")
        response = self.session.get(
            f"{self.base_url}{path}",
            params={**params, "apiKey": self.api_key},
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        raw_articles = (payload.get("articles") or []) if isinstance(payload, dict) else []
        return [Article.from_newsapi(item) for item in raw_articles if isinstance(item, Mapping)]

    def everything(
        self,
        q: str,
        *,
        language: Optional[str] = "en",
        page_size: int = 5,
        sort_by: Optional[str] = None,
    ) -> List[Article]:
        params: Dict[str, Any] = {"q": q, "pageSize": page_size}
        if language:
            params["language"] = language
        if sort_by:
            params["sortBy"] = sort_by
        return self._get("/everything", params)

    def top_headlines(
        self,
        category: str = "general",
        query: str = "",
        country: str = "us",
        *,
        page_size: int = 12,
    ) -> List[Article]:
        """Top headlines, falling back to a country search when none come back.

        Network and HTTP failures are logged and yield an empty list.
        """

        params: Dict[str, Any] = {"country": country, "category": category, "pageSize": page_size}
        if query:
            params["q"] = query
        try:
            articles = self._get("/top-headlines", params)
            if articles:
                return articles
            fallback = fallback_query(country)
            self.log.warning("news.fallback_everything", extra={"country": country, "q": fallback})
            return self.everything(fallback, language=None, page_size=20, sort_by="publishedAt")
        except (requests.RequestException, ValueError) as exc:
            self.log.error("news.fetch_failed", extra={"country": country, "error": str(exc)})
            return []

    def for_subscriber(
        self,
        categories: Sequence[str],
        *,
        language: Optional[str] = None,
        news_count: Optional[int] = None,
    ) -> List[Article]:
        """Personalized search built from a subscriber's preferred categories."""

        query = " OR ".join(categories) if categories else "top headlines"
        return self.everything(query, language=language or "en", page_size=news_count or 5)

    def close(self) -> None:
        self.session.close()


__all__ = ["NewsApiClient", "SUPPORTED_COUNTRIES", "CATEGORIES", "fallback_query"]
