from __future__ import annotations

import os
from typing import Callable, Optional

import httpx
import pytest

from backend.services.container import ServiceContainer
from core.settings import GeminiSettings, Settings
from services.news.newsapi import NewsApiClient
from services.sentiment.batch import SentimentBatchClient
from services.sentiment.gemini import GeminiClient
from services.summarize import Summarizer
from services.translate import Translator
from tests.fakes.upstream import FakeSession, GeminiStub, SleepRecorder, mock_client


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # keep a developer's .env out of the settings under test
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith(("GEMINI_", "SMTP_", "SENTIMENT_", "DIGEST_")) or name in {
            "APY_HUB_TOKEN",
            "NEWS_API_KEY",
            "NEWSAPI_KEY",
            "GOOGLE_API_KEY",
            "CORS_ORIGINS",
            "DAILY_EMAIL_CRON",
            "TIMEZONE",
        }:
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        gemini=GeminiSettings(api_key="test-gemini-key"),
        apy_hub_token="test-apy-token",
        news_api_key="test-news-key",
    )


@pytest.fixture
def gemini_stub() -> GeminiStub:
    return GeminiStub()


def _summary_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"data": {"summary": "A short summary."}})


@pytest.fixture
def make_services(settings: Settings, gemini_stub: GeminiStub, sleeper: SleepRecorder):
    """Build a container whose upstreams are all in-process fakes."""

    def _build(
        *,
        gemini_key: Optional[str] = "test-gemini-key",
        apyhub_handler: Optional[Callable] = None,
        apyhub_token: Optional[str] = "test-apy-token",
        translate_fn: Optional[Callable[[str, str], str]] = None,
        news_session: Optional[FakeSession] = None,
        news_key: Optional[str] = "test-news-key",
    ) -> ServiceContainer:
        gemini = GeminiClient(gemini_key, client=gemini_stub.client())
        summarizer = Summarizer(
            apyhub_token,
            client=mock_client(apyhub_handler or _summary_ok),
        )
        return ServiceContainer(
            settings=settings,
            gemini=gemini,
            sentiment=SentimentBatchClient(gemini, sleep=sleeper),
            summarizer=summarizer,
            translator=Translator(translate_fn or (lambda text, target: text)),
            news=NewsApiClient(news_key, session=news_session or FakeSession()),
        )

    return _build
