"""Cache-aware sentiment scoring of article sets and per-source aggregation."""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterable, List, Sequence

from services.news.types import UNKNOWN_SOURCE, Article
from services.sentiment.store import ScoreCache, cache_key
from services.sentiment.types import NEUTRAL, coerce_score, tone

MIN_ARTICLES_PER_SOURCE = 2

BatchScorer = Callable[[List[str]], Awaitable[List[int]]]


@dataclass(slots=True)
class ArticleSentiment:
    url: str
    source: str
    sentiment: int


@dataclass(slots=True)
class SourceAggregate:
    """Running total of sentiment for one source."""

    label: str
    total_score: int = 0
    count: int = 0

    @property
    def average(self) -> float:
        return self.total_score / self.count if self.count else 0.0

    @property
    def radius(self) -> float:
        # bubble size grows with the log of the article volume
        return 5 + math.log(self.count) * 4 if self.count else 0.0

    @property
    def tone(self) -> str:
        return tone(self.average)

    def to_dict(self) -> Dict[str, object]:
        return {
            "label": self.label,
            "avgSentiment": self.average,
            "volume": self.count,
            "r": self.radius,
            "tone": self.tone,
        }


def aggregate_by_source(
    items: Iterable[ArticleSentiment], *, min_count: int = MIN_ARTICLES_PER_SOURCE
) -> List[SourceAggregate]:
    """Group scored articles by source, dropping sources below ``min_count``."""

    by_source: Dict[str, SourceAggregate] = {}
    for item in items:
        label = item.source or UNKNOWN_SOURCE
        bucket = by_source.setdefault(label, SourceAggregate(label=label))
        bucket.total_score += item.sentiment
        bucket.count += 1
    return [bucket for bucket in by_source.values() if bucket.count >= min_count]


class SentimentAggregator:
    """Score articles through a cache and a single batch call for misses.

    Invocations on one instance are serialized, so an overlapping call waits
    for the first to populate the cache instead of sending the same articles
    upstream again.
    """

    def __init__(
        self,
        scorer: BatchScorer,
        cache: ScoreCache,
        *,
        min_count: int = MIN_ARTICLES_PER_SOURCE,
    ) -> None:
        self.scorer = scorer
        self.cache = cache
        self.min_count = min_count
        self.batch_calls = 0
        self._lock = asyncio.Lock()
        self.log = logging.getLogger("newspulse.sentiment.aggregator")

    async def _score_misses(self, misses: Sequence[Article]) -> List[int]:
        texts = [article.sentiment_text() for article in misses]
        self.batch_calls += 1
        try:
            results = await self.scorer(texts)
        except Exception as exc:  # noqa: BLE001 - whole batch defaults to neutral
            self.log.error(
                "aggregator.batch_failed",
                extra={"count": len(texts), "error": str(exc)},
            )
            return [NEUTRAL] * len(texts)
        results = list(results or [])
        return [
            coerce_score(results[index]) if index < len(results) else NEUTRAL
            for index in range(len(texts))
        ]

    async def score_articles(self, articles: Sequence[Article]) -> List[ArticleSentiment]:
        """Attach a sentiment to every article, consulting the cache first."""

        async with self._lock:
            if not articles:
                return []

            known: Dict[str, int] = {}
            misses: List[Article] = []
            pending: set[str] = set()
            for article in articles:
                if article.url in known or article.url in pending:
                    continue
                cached = self.cache.get(cache_key(article.url))
                if cached is not None:
                    known[article.url] = cached
                else:
                    misses.append(article)
                    pending.add(article.url)

            if misses:
                scores = await self._score_misses(misses)
                for article, score in zip(misses, scores):
                    self.cache.set(cache_key(article.url), score)
                    known[article.url] = score

            self.log.info(
                "aggregator.scored",
                extra={"articles": len(articles), "cache_misses": len(misses)},
            )
            return [
                ArticleSentiment(
                    url=article.url,
                    source=article.source or UNKNOWN_SOURCE,
                    sentiment=known.get(article.url, NEUTRAL),
                )
                for article in articles
            ]

    async def aggregate(self, articles: Sequence[Article]) -> List[SourceAggregate]:
        """Score ``articles`` and return per-source averages for charting."""

        scored = await self.score_articles(articles)
        return aggregate_by_source(scored, min_count=self.min_count)


__all__ = [
    "ArticleSentiment",
    "SourceAggregate",
    "SentimentAggregator",
    "aggregate_by_source",
    "MIN_ARTICLES_PER_SOURCE",
]
