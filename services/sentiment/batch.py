"""Sequential, throttled sentiment scoring of a batch of texts."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Sequence

from core.errors import ConfigurationError, InputValidationError
from core.rate_limit import Sleep, backoff_request
from services.sentiment.gemini import GeminiClient
from services.sentiment.types import NEUTRAL, ScoredText, ScoreStatus, parse_score

SYSTEM_PROMPT = (
    "Analyze the following news article content for its primary emotional tone (sentiment). "
    "Respond with a single integer value: '-1' for negative, '0' for neutral, or '1' for positive. "
    "Do not include any other words, punctuation, or explanations."
)


def validate_texts(texts: Any) -> List[str]:
    """Reject anything but a non-empty list of strings."""

    if not texts or not isinstance(texts, list):
        raise InputValidationError("Missing or invalid array of texts to analyze")
    if not all(isinstance(text, str) for text in texts):
        raise InputValidationError("Every item in texts must be a string")
    return list(texts)


class SentimentBatchClient:
    """Score texts one at a time against Gemini, never failing on a single item.

    Each item gets up to ``max_attempts`` calls when Gemini answers 429, with
    the delay starting at ``initial_delay`` seconds and multiplied by
    ``backoff_factor``. Between items the client waits ``throttle`` seconds so
    the batch as a whole stays under the upstream rate limit.
    """

    def __init__(
        self,
        gemini: GeminiClient,
        *,
        throttle: float = 0.6,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        backoff_factor: float = 2.0,
        sleep: Sleep = asyncio.sleep,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self.gemini = gemini
        self.throttle = throttle
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.backoff_factor = backoff_factor
        self.sleep = sleep
        self.system_prompt = system_prompt
        self.log = logging.getLogger("newspulse.sentiment")

    async def score_item(self, index: int, text: str) -> ScoredText:
        try:
            response = await backoff_request(
                lambda: self.gemini.generate(text, system_instruction=self.system_prompt),
                max_attempts=self.max_attempts,
                initial_delay=self.initial_delay,
                backoff_factor=self.backoff_factor,
                sleep=self.sleep,
            )
        except Exception as exc:  # noqa: BLE001 - any failure degrades the item to neutral
            self.log.error(
                "sentiment.item_failed",
                extra={"index": index, "error": str(exc), "error_type": type(exc).__name__},
            )
            return ScoredText(index=index, score=NEUTRAL, status=ScoreStatus.FAILED)

        raw = response.first_text()
        score = parse_score(raw)
        if score is None:
            self.log.warning("sentiment.unexpected_reply", extra={"index": index, "raw": raw})
            return ScoredText(index=index, score=NEUTRAL, status=ScoreStatus.MALFORMED, raw=raw)
        return ScoredText(index=index, score=score, status=ScoreStatus.OK, raw=raw)

    async def score_detailed(self, texts: Sequence[str]) -> List[ScoredText]:
        """Score every text in order, returning per-item outcomes."""

        items = validate_texts(texts)
        if not self.gemini.is_configured():
            raise ConfigurationError("Server configuration error: Gemini API key missing.")
        results: List[ScoredText] = []
        last = len(items) - 1
        for index, text in enumerate(items):
            results.append(await self.score_item(index, text))
            if index < last:
                await self.sleep(self.throttle)
        defaulted = sum(1 for item in results if item.defaulted)
        self.log.info(
            "sentiment.batch_done",
            extra={"count": len(results), "defaulted": defaulted},
        )
        return results

    async def score_batch(self, texts: Sequence[str]) -> List[int]:
        """Return one score in {-1, 0, 1} per text, same order and length."""

        return [item.score for item in await self.score_detailed(texts)]

    async def score_one(self, text: str) -> int:
        scores = await self.score_batch([text])
        return scores[0]


__all__ = ["SentimentBatchClient", "SYSTEM_PROMPT", "validate_texts"]
