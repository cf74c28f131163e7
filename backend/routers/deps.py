"""Shared dependencies for the API routers."""

from __future__ import annotations

from fastapi import Request

from backend.services.container import ServiceContainer
from core.errors import ConfigurationError
from services.news.newsapi import NewsApiClient
from services.sentiment.batch import SentimentBatchClient
from services.summarize import Summarizer
from services.translate import Translator


def get_services(request: Request) -> ServiceContainer:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise ConfigurationError("Services are not initialised")
    return services


def get_sentiment_client(request: Request) -> SentimentBatchClient:
    return get_services(request).sentiment


def get_summarizer(request: Request) -> Summarizer:
    return get_services(request).summarizer


def get_translator(request: Request) -> Translator:
    return get_services(request).translator


def get_news(request: Request) -> NewsApiClient:
    return get_services(request).news


__all__ = [
    "get_services",
    "get_sentiment_client",
    "get_summarizer",
    "get_translator",
    "get_news",
]
