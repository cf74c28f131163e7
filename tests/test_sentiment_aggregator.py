"""Cache-aware article scoring and per-source bubble aggregation."""
from __future__ import annotations

import asyncio
import math
from typing import List

import pytest

from services.news.types import Article
from services.sentiment.aggregator import (
    ArticleSentiment,
    SentimentAggregator,
    SourceAggregate,
    aggregate_by_source,
)
from services.sentiment.store import InMemoryScoreCache, cache_key


class RecordingScorer:
    def __init__(self, scores: List[int] | None = None, fail: bool = False) -> None:
        self.scores = scores
        self.fail = fail
        self.batches: List[List[str]] = []

    async def __call__(self, texts: List[str]) -> List[int]:
        self.batches.append(list(texts))
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("backend down")
        if self.scores is None:
            return [1] * len(texts)
        return list(self.scores)


def _articles() -> List[Article]:
    return [
        Article(url="https://a/1", title="Markets rally", source="SourceA", description=" strongly"),
        Article(url="https://a/2", title="Quiet session", source="SourceA"),
        Article(url="https://b/1", title="Storm damage", source="SourceB"),
    ]


@pytest.mark.asyncio
async def test_aggregate_excludes_small_sources() -> None:
    scorer = RecordingScorer([1, 0, -1])
    aggregator = SentimentAggregator(scorer, InMemoryScoreCache())

    buckets = await aggregator.aggregate(_articles())

    assert [bucket.label for bucket in buckets] == ["SourceA"]
    bucket = buckets[0]
    assert bucket.count == 2
    assert bucket.average == pytest.approx(0.5)
    assert bucket.tone == "positive"
    assert bucket.radius == pytest.approx(5 + math.log(2) * 4)


@pytest.mark.asyncio
async def test_texts_are_title_plus_description() -> None:
    scorer = RecordingScorer()
    aggregator = SentimentAggregator(scorer, InMemoryScoreCache())

    await aggregator.score_articles(_articles()[:2])

    assert scorer.batches == [["Markets rally strongly", "Quiet session"]]


@pytest.mark.asyncio
async def test_second_run_is_served_from_cache() -> None:
    scorer = RecordingScorer([1, 0, -1])
    cache = InMemoryScoreCache()
    aggregator = SentimentAggregator(scorer, cache)

    first = await aggregator.score_articles(_articles())
    second = await aggregator.score_articles(_articles())

    assert [item.sentiment for item in first] == [1, 0, -1]
    assert [item.sentiment for item in second] == [1, 0, -1]
    assert len(scorer.batches) == 1
    assert aggregator.batch_calls == 1
    assert cache.get(cache_key("https://b/1")) == -1


@pytest.mark.asyncio
async def test_only_misses_are_sent_upstream() -> None:
    scorer = RecordingScorer([-1])
    cache = InMemoryScoreCache({cache_key("https://a/1"): 1, cache_key("https://a/2"): 1})
    aggregator = SentimentAggregator(scorer, cache)

    scored = await aggregator.score_articles(_articles())

    assert scorer.batches == [["Storm damage"]]
    assert [item.sentiment for item in scored] == [1, 1, -1]


@pytest.mark.asyncio
async def test_duplicate_urls_scored_once() -> None:
    scorer = RecordingScorer([-1])
    aggregator = SentimentAggregator(scorer, InMemoryScoreCache())
    article = Article(url="https://dup", title="Same story", source="SourceC")

    scored = await aggregator.score_articles([article, article])

    assert scorer.batches == [["Same story"]]
    assert [item.sentiment for item in scored] == [-1, -1]


@pytest.mark.asyncio
async def test_batch_failure_defaults_every_miss_to_neutral() -> None:
    scorer = RecordingScorer(fail=True)
    aggregator = SentimentAggregator(scorer, InMemoryScoreCache())

    scored = await aggregator.score_articles(_articles())

    assert [item.sentiment for item in scored] == [0, 0, 0]


@pytest.mark.asyncio
async def test_short_or_invalid_batch_result_is_padded() -> None:
    scorer = RecordingScorer([1, 7])
    aggregator = SentimentAggregator(scorer, InMemoryScoreCache())

    scored = await aggregator.score_articles(_articles())

    assert [item.sentiment for item in scored] == [1, 0, 0]


@pytest.mark.asyncio
async def test_overlapping_runs_share_one_batch() -> None:
    scorer = RecordingScorer()
    aggregator = SentimentAggregator(scorer, InMemoryScoreCache())

    await asyncio.gather(aggregator.aggregate(_articles()), aggregator.aggregate(_articles()))

    assert len(scorer.batches) == 1


@pytest.mark.asyncio
async def test_empty_input_makes_no_call() -> None:
    scorer = RecordingScorer()
    aggregator = SentimentAggregator(scorer, InMemoryScoreCache())

    assert await aggregator.aggregate([]) == []
    assert scorer.batches == []


def test_source_aggregate_shape() -> None:
    bucket = SourceAggregate(label="Wire", total_score=-3, count=4)
    payload = bucket.to_dict()
    assert payload["label"] == "Wire"
    assert payload["avgSentiment"] == pytest.approx(-0.75)
    assert payload["volume"] == 4
    assert payload["tone"] == "negative"
    assert payload["r"] == pytest.approx(5 + math.log(4) * 4)


def test_neutral_band_is_exclusive() -> None:
    assert SourceAggregate(label="x", total_score=3, count=10).tone == "neutral"
    assert SourceAggregate(label="x", total_score=-3, count=10).tone == "neutral"


def test_aggregate_by_source_min_count() -> None:
    items = [ArticleSentiment(url="https://solo/1", source="Solo", sentiment=1)]
    assert aggregate_by_source(items) == []
    assert [b.label for b in aggregate_by_source(items, min_count=1)] == ["Solo"]
