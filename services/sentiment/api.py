"""Public API surface for sentiment consumers talking to the backend over HTTP."""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from core.errors import NewsPulseError, UpstreamError
from services.sentiment.types import NEUTRAL, coerce_score

log = logging.getLogger("newspulse.sentiment.api")


class SentimentAPI:
    """Thin client for ``POST /sentiment`` on a NewsPulse backend."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:3000",
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 120.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def score_batch(self, texts: List[str]) -> List[int]:
        response = await self._client.post(f"{self.base_url}/sentiment", json={"texts": texts})
        response.raise_for_status()
        payload = response.json()
        sentiments = payload.get("sentiments") if isinstance(payload, dict) else None
        if not isinstance(sentiments, list):
            raise UpstreamError("Sentiment backend returned an unexpected body")
        return [coerce_score(value) for value in sentiments]

    async def get_sentiment(self, text: str) -> int:
        """Score one text through the batch endpoint; any failure reads as neutral."""

        try:
            scores = await self.score_batch([text])
        except (httpx.HTTPError, ValueError, NewsPulseError) as exc:
            log.error("sentiment.single_failed", extra={"error": str(exc)})
            return NEUTRAL
        return scores[0] if scores else NEUTRAL

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
