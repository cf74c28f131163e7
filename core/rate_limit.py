"""HTTP 429 backoff helper."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Awaitable, Callable, TypeVar

from core.errors import RateLimitError

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]

logger = logging.getLogger("newspulse.rate_limit")


def _status_of(exc: BaseException) -> int | None:
    status = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def _headers_of(exc: BaseException) -> Mapping[str, str] | None:
    headers = getattr(exc, "headers", None)
    if headers is None:
        response = getattr(exc, "response", None)
        headers = getattr(response, "headers", None)
    return headers if isinstance(headers, Mapping) else None


def _extract_retry_after(headers: Mapping[str, str] | None) -> float | None:
    if not headers:
        return None
    retry_after = headers.get("Retry-After") or headers.get("retry-after")
    if retry_after is None:
        return None
    try:
        return float(retry_after)
    except (TypeError, ValueError):
        return None


async def backoff_request(
    fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: float = 30.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Execute an async HTTP call, backing off on HTTP 429 responses.

    ``max_attempts`` counts every call including the first one. Errors other
    than 429 propagate untouched; a 429 on the final attempt raises
    :class:`RateLimitError`.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    delay = initial_delay
    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except Exception as exc:
            if _status_of(exc) != 429:
                raise
            if attempt == max_attempts:
                raise RateLimitError(
                    f"Max retries exceeded after {max_attempts} attempts with 429 responses"
                ) from exc
            retry_after = _extract_retry_after(_headers_of(exc))
            wait = max(delay, retry_after) if retry_after is not None else delay
            wait = min(wait, max_delay)
            logger.warning(
                "rate_limit.backoff",
                extra={"attempt": attempt, "delay_s": wait},
            )
            await sleep(wait)
            delay = min(delay * backoff_factor, max_delay)
    raise RateLimitError("Max retries exceeded after 429 responses")


__all__ = ["backoff_request", "RateLimitError"]
