"""Digest subscribers and where they are read from."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Protocol

from core.settings import parse_bool

log = logging.getLogger("newspulse.digest.subscribers")


@dataclass(slots=True)
class Subscriber:
    username: str
    email: str
    categories: List[str] = field(default_factory=list)
    language: Optional[str] = None
    news_count: Optional[int] = None
    email_frequency: str = "none"
    email_notifications: bool = False

    @property
    def wants_daily_digest(self) -> bool:
        return self.email_frequency == "daily" and self.email_notifications is True

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Subscriber":
        prefs = payload.get("preferences") or {}
        news_count = prefs.get("newsCount", payload.get("news_count"))
        return cls(
            username=str(payload.get("username") or payload.get("email") or ""),
            email=str(payload.get("email") or ""),
            categories=[str(c) for c in payload.get("categories") or []],
            language=prefs.get("language", payload.get("language")),
            news_count=int(news_count) if news_count is not None else None,
            email_frequency=str(prefs.get("emailFrequency", payload.get("email_frequency", "none"))),
            email_notifications=parse_bool(
                payload.get("emailNotifications", payload.get("email_notifications")), default=False
            ),
        )


class SubscriberStore(Protocol):
    def opted_in(self) -> List[Subscriber]:
        ...


class InMemorySubscriberStore:
    def __init__(self, subscribers: Iterable[Subscriber] = ()) -> None:
        self.subscribers = list(subscribers)

    def opted_in(self) -> List[Subscriber]:
        return [s for s in self.subscribers if s.wants_daily_digest]


class JsonSubscriberStore:
    """Reads subscribers from a JSON list on every call."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> List[Subscriber]:
        if not self.path.exists():
            log.info("subscribers.missing_file", extra={"path": str(self.path)})
            return []
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"{self.path} must contain a JSON list of subscribers")
        subscribers: List[Subscriber] = []
        for position, item in enumerate(raw):
            if not isinstance(item, Mapping):
                continue
            try:
                subscribers.append(Subscriber.from_dict(item))
            except (AttributeError, TypeError, ValueError) as exc:
                log.warning(
                    "subscribers.bad_record",
                    extra={"path": str(self.path), "position": position, "error": str(exc)},
                )
        return subscribers

    def opted_in(self) -> List[Subscriber]:
        return [s for s in self.load() if s.wants_daily_digest and s.email]


__all__ = ["Subscriber", "SubscriberStore", "InMemorySubscriberStore", "JsonSubscriberStore"]
