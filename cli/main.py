"""Typer-powered command line for running and poking at NewsPulse."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from core.errors import NewsPulseError
from core.logging import configure_logging
from core.settings import Settings, get_settings, masked_tail

console = Console()
app = typer.Typer(add_completion=False, help="NewsPulse operational helper")

TEXTS_ARGUMENT = typer.Argument(..., help="Texts to score, one argument each")
CATEGORY_OPTION = typer.Option("general", help="NewsAPI category")
COUNTRY_OPTION = typer.Option("us", help="Two-letter country code")
QUERY_OPTION = typer.Option("", "--q", help="Free-text search query")
BACKEND_OPTION = typer.Option("http://127.0.0.1:3000", help="Backend base URL for /sentiment")
CACHE_OPTION = typer.Option(Path("data/sentiment_cache.json"), help="Sentiment score cache file")


def _settings() -> Settings:
    settings = get_settings()
    configure_logging(settings.log_path, level=settings.log_level, console=False)
    return settings


@app.command()
def check() -> None:
    """Report which upstream services are configured."""

    settings = _settings()
    table = Table(title="NewsPulse configuration")
    table.add_column("Service")
    table.add_column("Ready")
    table.add_column("Detail")
    rows = [
        ("gemini", bool(settings.gemini.api_key), f"{settings.gemini.model} key=…{masked_tail(settings.gemini.api_key) or ''}"),
        ("apyhub", settings.apy_hub_configured(), "APY_HUB_TOKEN"),
        ("newsapi", bool(settings.news_api_key), settings.news_api_base),
        ("smtp", settings.smtp.configured(), f"{settings.smtp.host}:{settings.smtp.port}"),
        ("digest", settings.digest.enabled, settings.digest.cron),
    ]
    for name, ready, detail in rows:
        table.add_row(name, "[green]yes[/green]" if ready else "[red]no[/red]", detail)
    console.print(table)
    if not settings.gemini.api_key:
        console.print("[red]NOT READY:[/red] missing GEMINI_API_KEY")
        raise typer.Exit(code=1)
    console.print("[green]READY[/green]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (defaults to API_HOST)"),
    port: Optional[int] = typer.Option(None, help="Bind port (defaults to API_PORT)"),
    reload: bool = typer.Option(False, help="Auto-reload on code changes"),
) -> None:
    """Run the HTTP API under uvicorn."""

    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "backend.server:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


@app.command()
def score(texts: List[str] = TEXTS_ARGUMENT) -> None:
    """Score texts directly against Gemini, paced like the API does."""

    from services.sentiment.batch import SentimentBatchClient
    from services.sentiment.gemini import GeminiClient

    settings = _settings()

    async def _run():
        gemini = GeminiClient(
            settings.gemini.api_key,
            model=settings.gemini.model,
            base_url=settings.gemini.base_url,
            timeout=settings.http_timeout,
        )
        client = SentimentBatchClient(
            gemini,
            throttle=settings.sentiment.throttle_ms / 1000.0,
            max_attempts=settings.sentiment.max_attempts,
            initial_delay=settings.sentiment.initial_backoff_ms / 1000.0,
            backoff_factor=settings.sentiment.backoff_factor,
        )
        try:
            return await client.score_detailed(texts)
        finally:
            await gemini.aclose()

    try:
        results = asyncio.run(_run())
    except NewsPulseError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Sentiment")
    table.add_column("#", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Status")
    table.add_column("Text")
    for item in results:
        table.add_row(str(item.index), str(item.score), item.status.value, texts[item.index][:80])
    console.print(table)


@app.command()
def matrix(
    category: str = CATEGORY_OPTION,
    country: str = COUNTRY_OPTION,
    q: str = QUERY_OPTION,
    backend: str = BACKEND_OPTION,
    cache: Path = CACHE_OPTION,
) -> None:
    """Fetch headlines and print per-source sentiment like the dashboard matrix."""

    from services.news.newsapi import NewsApiClient
    from services.sentiment.aggregator import SentimentAggregator
    from services.sentiment.api import SentimentAPI
    from services.sentiment.store import JsonFileScoreCache

    settings = _settings()
    news = NewsApiClient(settings.news_api_key, base_url=settings.news_api_base)
    if not news.is_configured():
        console.print("[red]NOT READY:[/red] missing NEWS_API_KEY")
        raise typer.Exit(code=1)
    try:
        articles = news.top_headlines(category, q, country.lower())
    finally:
        news.close()
    if not articles:
        console.print("[yellow]No articles found.[/yellow]")
        return

    async def _run():
        api = SentimentAPI(backend)
        try:
            aggregator = SentimentAggregator(api.score_batch, JsonFileScoreCache(cache))
            return await aggregator.aggregate(articles)
        finally:
            await api.aclose()

    buckets = asyncio.run(_run())
    if not buckets:
        console.print("[yellow]No source has enough articles to chart.[/yellow]")
        return
    table = Table(title=f"Source sentiment ({len(articles)} articles)")
    table.add_column("Source")
    table.add_column("Avg", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Tone")
    colours = {"positive": "green", "negative": "red", "neutral": "white"}
    for bucket in sorted(buckets, key=lambda item: item.average, reverse=True):
        colour = colours[bucket.tone]
        table.add_row(
            bucket.label,
            f"{bucket.average:+.2f}",
            str(bucket.count),
            f"[{colour}]{bucket.tone}[/{colour}]",
        )
    console.print(table)


@app.command()
def digest() -> None:
    """Send the daily digest once to every opted-in subscriber."""

    from backend.services.container import build_digest_job
    from services.digest.mailer import Mailer
    from services.news.newsapi import NewsApiClient

    settings = _settings()
    if not settings.smtp.configured():
        console.print("[red]NOT READY:[/red] missing SMTP_USER / SMTP_PASSWORD")
        raise typer.Exit(code=1)
    news = NewsApiClient(settings.news_api_key, base_url=settings.news_api_base)
    mailer = Mailer(settings.smtp)
    try:
        report = build_digest_job(settings, news, mailer).run_once()
    finally:
        mailer.close()
        news.close()
    console.print(
        f"sent=[green]{report.sent}[/green] failed=[red]{report.failed}[/red] skipped={report.skipped}"
    )
    if report.failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
