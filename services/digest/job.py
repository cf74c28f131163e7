"""Daily digest job and its cron-driven background scheduler."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Sequence
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from services.digest.subscribers import Subscriber, SubscriberStore
from services.digest.template import render_daily_digest
from services.news.types import Article


class DigestNews(Protocol):
    def for_subscriber(
        self,
        categories: Sequence[str],
        *,
        language: Optional[str] = None,
        news_count: Optional[int] = None,
    ) -> List[Article]:
        ...


class DigestTransport(Protocol):
    def send(self, *, sender: str, to: str, subject: str, html: str) -> str:
        ...


@dataclass(slots=True)
class DigestReport:
    sent: int = 0
    failed: int = 0
    skipped: int = 0


class DailyDigestJob:
    """Send every opted-in subscriber an HTML digest of personalized news."""

    def __init__(
        self,
        store: SubscriberStore,
        news: DigestNews,
        transport: DigestTransport,
        *,
        sender: str = "no-reply@example.com",
        subject: str = "Your Daily News Digest",
        render: Callable[[Sequence[Article], str], str] = render_daily_digest,
    ) -> None:
        self.store = store
        self.news = news
        self.transport = transport
        self.sender = sender
        self.subject = subject
        self.render = render
        self.log = logging.getLogger("newspulse.digest")

    def articles_for(self, subscriber: Subscriber) -> List[Article]:
        try:
            return self.news.for_subscriber(
                subscriber.categories,
                language=subscriber.language,
                news_count=subscriber.news_count,
            )
        except Exception as exc:  # noqa: BLE001 - a news outage still sends the (empty) digest
            self.log.error(
                "digest.news_failed",
                extra={"username": subscriber.username, "error": str(exc)},
            )
            return []

    def run_once(self) -> DigestReport:
        report = DigestReport()
        try:
            subscribers = self.store.opted_in()
        except (OSError, ValueError) as exc:
            self.log.error("digest.subscribers_unavailable", extra={"error": str(exc)})
            return report

        if not subscribers:
            self.log.info("digest.no_subscribers")
            return report

        for subscriber in subscribers:
            if not subscriber.email:
                report.skipped += 1
                continue
            articles = self.articles_for(subscriber)
            html = self.render(articles, subscriber.username)
            self.log.info("digest.sending", extra={"to": subscriber.email, "from": self.sender})
            try:
                message_id = self.transport.send(
                    sender=self.sender, to=subscriber.email, subject=self.subject, html=html
                )
            except Exception as exc:  # noqa: BLE001 - one bad recipient must not stop the run
                report.failed += 1
                self.log.error(
                    "digest.send_failed",
                    extra={"to": subscriber.email, "error": str(exc)},
                )
                continue
            report.sent += 1
            self.log.info("digest.sent", extra={"to": subscriber.email, "message_id": message_id})
        return report


class DigestScheduler:
    """Fire a :class:`DailyDigestJob` on a crontab expression from a background scheduler."""

    JOB_ID = "daily_digest"

    def __init__(
        self,
        job: DailyDigestJob,
        cron: str = "0 8 * * *",
        *,
        timezone: Optional[str] = None,
    ) -> None:
        try:
            self.trigger = CronTrigger.from_crontab(
                cron, timezone=ZoneInfo(timezone) if timezone else None
            )
        except ValueError as exc:
            raise ValueError(f"Invalid cron expression: {cron!r}") from exc
        self.job = job
        self.cron = cron
        self._scheduler: Optional[BackgroundScheduler] = None
        self.log = logging.getLogger("newspulse.digest.scheduler")

    def next_run(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """First fire time at or after ``now``."""

        now = now or datetime.now(self.trigger.timezone)
        return self.trigger.get_next_fire_time(None, now)

    def _run(self) -> None:
        self.log.info("digest.run")
        try:
            report = self.job.run_once()
        except Exception:  # noqa: BLE001 - keep the schedule alive for the next day
            self.log.exception("digest.run_failed")
            return
        self.log.info(
            "digest.finished",
            extra={"sent": report.sent, "failed": report.failed, "skipped": report.skipped},
        )

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        scheduler = BackgroundScheduler(daemon=True, timezone=self.trigger.timezone)
        scheduler.add_job(
            self._run,
            trigger=self.trigger,
            id=self.JOB_ID,
            replace_existing=True,
            coalesce=True,
            misfire_grace_time=900,
        )
        scheduler.start()
        self._scheduler = scheduler
        next_run = scheduler.get_job(self.JOB_ID).next_run_time
        self.log.info(
            "digest.scheduled",
            extra={"cron": self.cron, "next_run": next_run.isoformat() if next_run else None},
        )

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None


__all__ = ["DailyDigestJob", "DigestScheduler", "DigestReport"]
