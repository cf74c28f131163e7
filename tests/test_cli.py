from __future__ import annotations

import json
from typing import List

import httpx
import pytest
from typer.testing import CliRunner

from cli.main import app
from core.logging import configure_logging
from core.settings import get_settings
from services.news import newsapi
from services.sentiment import api as sentiment_api
from tests.fakes.upstream import FakeSession, mock_client, newsapi_article

runner = CliRunner()


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    configure_logging(None, console=False)


def test_check_ready(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "abcd1234")
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 0
    assert "READY" in result.stdout


def test_check_not_ready_without_gemini_key() -> None:
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 1
    assert "GEMINI_API_KEY" in result.stdout


def test_digest_requires_smtp_credentials() -> None:
    result = runner.invoke(app, ["digest"])
    assert result.exit_code == 1
    assert "SMTP_USER" in result.stdout


def test_matrix_scores_headlines_through_backend_and_cache(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("NEWS_API_KEY", "test-news-key")
    session = FakeSession(
        {
            "/top-headlines": {
                "articles": [
                    newsapi_article("https://a/1", "Markets rally", "SourceA"),
                    newsapi_article("https://a/2", "Quiet session", "SourceA"),
                    newsapi_article("https://b/1", "Storm damage", "SourceB"),
                ]
            }
        }
    )
    scores = {"Markets rally": 1, "Quiet session": 0, "Storm damage": -1}
    backend_calls: List[dict] = []

    def backend(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        backend_calls.append({"url": str(request.url), "texts": body["texts"]})
        return httpx.Response(200, json={"sentiments": [scores[text] for text in body["texts"]]})

    news_client = newsapi.NewsApiClient
    api_client = sentiment_api.SentimentAPI

    def fake_news(api_key, *, base_url):
        return news_client(api_key, base_url=base_url, session=session)

    def fake_api(base_url):
        return api_client(base_url, client=mock_client(backend))

    monkeypatch.setattr(newsapi, "NewsApiClient", fake_news)
    monkeypatch.setattr(sentiment_api, "SentimentAPI", fake_api)
    args = ["matrix", "--backend", "http://backend:3000", "--cache", str(tmp_path / "cache.json")]

    first = runner.invoke(app, args)
    second = runner.invoke(app, args)

    assert first.exit_code == 0, first.stdout
    assert second.exit_code == 0, second.stdout
    for result in (first, second):
        assert "SourceA" in result.stdout
        assert "+0.50" in result.stdout
        assert "SourceB" not in result.stdout
    assert backend_calls == [
        {
            "url": "http://backend:3000/sentiment",
            "texts": ["Markets rally", "Quiet session", "Storm damage"],
        }
    ]
    assert session.calls[0]["params"]["country"] == "us"
    assert json.loads((tmp_path / "cache.json").read_text())["sentiment_https://b/1"] == -1
