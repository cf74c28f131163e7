"""Article summaries through the ApyHub summarize-url API."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from core.errors import ConfigurationError, InputValidationError, UpstreamError
from core.settings import APY_HUB_PLACEHOLDER

APY_HUB_SUMMARIZE_URL = "https://api.apyhub.com/ai/summarize-url"

log = logging.getLogger("newspulse.summarize")


def _upstream_message(response: httpx.Response) -> Optional[str]:
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str):
            return error
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return None


class Summarizer:
    """Ask ApyHub for a short summary of the article behind a URL."""

    def __init__(
        self,
        token: Optional[str],
        *,
        endpoint: str = APY_HUB_SUMMARIZE_URL,
        summary_length: str = "short",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self.endpoint = endpoint
        self.summary_length = summary_length
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def is_configured(self) -> bool:
        return bool(self.token) and self.token != APY_HUB_PLACEHOLDER

    async def summarize(self, url: Optional[str]) -> str:
        if not url:
            raise InputValidationError("Missing article URL")
        if not self.is_configured():
            raise ConfigurationError(
                "ApyHub API key not configured. Please check APY_HUB_TOKEN in .env"
            )

        try:
            response = await self._client.post(
                self.endpoint,
                json={"url": url, "summary_length": self.summary_length},
                headers={"apy-token": str(self.token), "Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            log.error("summarize.request_failed", extra={"url": url, "error": str(exc)})
            raise UpstreamError(
                "Failed to fetch summary from external API.", status_code=500
            ) from exc

        if response.is_error:
            message = _upstream_message(response) or "Failed to fetch summary from external API."
            log.error(
                "summarize.upstream_error",
                extra={"url": url, "status": response.status_code, "error": message},
            )
            raise UpstreamError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError:
            body = None
        data = body.get("data") if isinstance(body, dict) else None
        summary = data.get("summary") if isinstance(data, dict) else None
        if not summary:
            log.error("summarize.unexpected_shape", extra={"url": url, "body": body})
            raise UpstreamError("Failed to generate summary from external service.", status_code=502)
        return str(summary)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["Summarizer", "APY_HUB_SUMMARIZE_URL"]
