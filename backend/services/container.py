"""Explicitly constructed service graph with a start/close lifecycle."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from core.settings import Settings
from services.digest.job import DailyDigestJob, DigestScheduler
from services.digest.mailer import Mailer
from services.digest.subscribers import JsonSubscriberStore
from services.news.newsapi import NewsApiClient
from services.sentiment.batch import SentimentBatchClient
from services.sentiment.gemini import GeminiClient
from services.summarize import Summarizer
from services.translate import Translator

log = logging.getLogger("newspulse.services")


@dataclass
class ServiceContainer:
    """Everything the routers and the digest job talk to."""

    settings: Settings
    gemini: GeminiClient
    sentiment: SentimentBatchClient
    summarizer: Summarizer
    translator: Translator
    news: NewsApiClient
    http: Optional[httpx.AsyncClient] = None
    mailer: Optional[Mailer] = None
    scheduler: Optional[DigestScheduler] = None
    started: bool = False

    async def start(self) -> None:
        if self.started:
            return
        self.started = True
        if self.mailer is not None:
            # SMTP connect and login block for up to the socket timeout
            await asyncio.to_thread(self.mailer.verify)
        if self.scheduler is not None:
            self.scheduler.start()
            log.info("services.digest_scheduler_started", extra={"cron": self.scheduler.cron})

    async def aclose(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()
        if self.mailer is not None:
            self.mailer.close()
        await self.gemini.aclose()
        await self.summarizer.aclose()
        self.news.close()
        if self.http is not None:
            await self.http.aclose()
        self.started = False


def build_digest_job(settings: Settings, news: NewsApiClient, mailer: Mailer) -> DailyDigestJob:
    return DailyDigestJob(
        JsonSubscriberStore(settings.digest.subscribers_path),
        news,
        mailer,
        sender=settings.digest.sender,
        subject=settings.digest.subject,
    )


def build_services(settings: Settings) -> ServiceContainer:
    """Construct all clients from ``settings``; nothing connects until used."""

    http = httpx.AsyncClient(timeout=settings.http_timeout)
    gemini = GeminiClient(
        settings.gemini.api_key,
        model=settings.gemini.model,
        base_url=settings.gemini.base_url,
        client=http,
    )
    sentiment = SentimentBatchClient(
        gemini,
        throttle=settings.sentiment.throttle_ms / 1000.0,
        max_attempts=settings.sentiment.max_attempts,
        initial_delay=settings.sentiment.initial_backoff_ms / 1000.0,
        backoff_factor=settings.sentiment.backoff_factor,
    )
    news = NewsApiClient(settings.news_api_key, base_url=settings.news_api_base)

    mailer: Optional[Mailer] = None
    scheduler: Optional[DigestScheduler] = None
    if settings.digest.enabled:
        mailer = Mailer(settings.smtp)
        scheduler = DigestScheduler(
            build_digest_job(settings, news, mailer),
            settings.digest.cron,
            timezone=settings.digest.timezone,
        )

    return ServiceContainer(
        settings=settings,
        gemini=gemini,
        sentiment=sentiment,
        summarizer=Summarizer(settings.apy_hub_token, client=http),
        translator=Translator(),
        news=news,
        http=http,
        mailer=mailer,
        scheduler=scheduler,
    )


__all__ = ["ServiceContainer", "build_services", "build_digest_job"]
