"""Dashboard aggregations over a set of articles."""
from __future__ import annotations

import re
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from services.news.types import UNKNOWN_SOURCE, Article

STOP_WORDS = frozenset(
    """
    a an and are as at be but by for if in into is it no not of on or such that the their then
    there these they this to was will with from i you he she we us my your his her our article
    news said say year week day can just like get new time also one two has would could which
    more about out up down back make may must only do did have had been use using according
    source report read know story post show go find people than them when what where why who
    whom whose since until upon through onto off between among around above below next last
    first second third so
    """.split()
)

MIN_WORD_LENGTH = 4
TOP_SOURCES = 8
OTHER_SOURCES = "Other Sources"
SEARCH_RESULTS = "Search Results"

_NON_LETTERS = re.compile(r"[^a-z\s]")


def word_frequencies(articles: Iterable[Article], limit: int = 100) -> List[Dict[str, object]]:
    """Most common meaningful words across titles and descriptions."""

    text = " ".join(f"{a.title} {a.description or ''}" for a in articles).lower()
    words = [
        word
        for word in _NON_LETTERS.sub(" ", text).split()
        if len(word) >= MIN_WORD_LENGTH and word not in STOP_WORDS
    ]
    return [{"text": word, "value": value} for word, value in Counter(words).most_common(limit)]


def source_distribution(articles: Iterable[Article], top: int = TOP_SOURCES) -> List[Dict[str, object]]:
    counts = Counter(a.source or UNKNOWN_SOURCE for a in articles)
    # ties keep first-seen order
    ranked = counts.most_common()
    final: List[Dict[str, object]] = [{"label": label, "value": value} for label, value in ranked[:top]]
    others = sum(value for _, value in ranked[top:])
    if others > 0:
        final.append({"label": OTHER_SOURCES, "value": others})
    return final


def category_distribution(
    articles: Sequence[Article], category: str, query: Optional[str] = None
) -> List[Dict[str, object]]:
    if not articles:
        return []
    label = SEARCH_RESULTS if query else (category[:1].upper() + category[1:])
    return [{"label": label, "value": len(articles)}]


def time_series(
    articles: Iterable[Article], days: int = 7, today: Optional[date] = None
) -> List[Dict[str, object]]:
    """Articles per UTC day for the last ``days`` days, oldest first."""

    today = today or datetime.now(timezone.utc).date()
    window = [today - timedelta(days=offset) for offset in range(days)]
    counts: Dict[date, int] = {day: 0 for day in window}
    for article in articles:
        published = article.published_at
        if published is None:
            continue
        if published.tzinfo is not None:
            published = published.astimezone(timezone.utc)
        day = published.date()
        if day in counts:
            counts[day] += 1
    return [{"date": day.isoformat(), "value": counts[day]} for day in reversed(window)]


__all__ = [
    "STOP_WORDS",
    "word_frequencies",
    "source_distribution",
    "category_distribution",
    "time_series",
]
