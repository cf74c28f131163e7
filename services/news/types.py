"""Dataclasses for news articles."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

UNKNOWN_SOURCE = "Unknown"


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(slots=True)
class Article:
    """Normalized news article, keyed by its canonical URL."""

    url: str
    title: str
    source: str = UNKNOWN_SOURCE
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None

    @classmethod
    def from_newsapi(cls, payload: Mapping[str, Any]) -> "Article":
        source = payload.get("source")
        if isinstance(source, Mapping):
            source_name = source.get("name")
        else:
            source_name = source
        return cls(
            url=str(payload.get("url") or ""),
            title=str(payload.get("title") or ""),
            source=str(source_name or UNKNOWN_SOURCE),
            description=payload.get("description") or None,
            content=payload.get("content") or None,
            image_url=payload.get("urlToImage") or payload.get("imageUrl") or None,
            published_at=_parse_timestamp(payload.get("publishedAt")),
        )

    def sentiment_text(self) -> str:
        return self.title + (self.description or self.content or "")

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["published_at"] = self.published_at.isoformat() if self.published_at else None
        return payload
