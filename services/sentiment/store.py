"""Key/value stores remembering sentiment scores per article URL."""
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

from services.sentiment.types import VALID_SCORES

KEY_PREFIX = "sentiment_"

log = logging.getLogger("newspulse.sentiment.store")


def cache_key(url: str) -> str:
    return f"{KEY_PREFIX}{url}"


class ScoreCache(Protocol):
    """Anything that can remember a score for a key."""

    def get(self, key: str) -> Optional[int]:
        ...

    def set(self, key: str, value: int) -> None:
        ...


class InMemoryScoreCache:
    """Process-local score cache; entries never expire."""

    def __init__(self, initial: Optional[Dict[str, int]] = None) -> None:
        self._store: Dict[str, int] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[int]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: str, value: int) -> None:
        with self._lock:
            self._store[key] = int(value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class JsonFileScoreCache:
    """Score cache persisted to a JSON object on disk.

    The file is read lazily on first access and rewritten atomically on every
    ``set``. Values that are not valid scores are ignored on load.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._store: Optional[Dict[str, int]] = None
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, int]:
        if self._store is not None:
            return self._store
        data: Dict[str, int] = {}
        if self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                log.warning("score_cache.unreadable", extra={"path": str(self.path), "error": str(exc)})
                raw = {}
            if isinstance(raw, dict):
                for key, value in raw.items():
                    if isinstance(value, int) and not isinstance(value, bool) and value in VALID_SCORES:
                        data[str(key)] = value
        self._store = data
        return data

    def _flush(self, data: Dict[str, int]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[int]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: int) -> None:
        with self._lock:
            data = self._load()
            data[key] = int(value)
            self._flush(data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._load())


__all__ = ["ScoreCache", "InMemoryScoreCache", "JsonFileScoreCache", "cache_key", "KEY_PREFIX"]
