"""Minimal async client for the Gemini ``generateContent`` endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from core.errors import ConfigurationError, UpstreamError

log = logging.getLogger("newspulse.gemini")


class GeminiPart(BaseModel):
    text: Optional[str] = None


class GeminiContent(BaseModel):
    parts: List[GeminiPart] = Field(default_factory=list)


class GeminiCandidate(BaseModel):
    content: Optional[GeminiContent] = None


class GenerateContentResponse(BaseModel):
    """The subset of the Gemini response we read."""

    candidates: List[GeminiCandidate] = Field(default_factory=list)

    def first_text(self) -> Optional[str]:
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        text = content.parts[0].text
        return text.strip() if text is not None else None


def build_payload(prompt: str, system_instruction: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
    if system_instruction:
        payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
    return payload


class GeminiClient:
    """Send prompts to Gemini over HTTPS with the API key in the URL."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-2.5-flash-preview-09-2025",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate(
        self, prompt: str, *, system_instruction: Optional[str] = None
    ) -> GenerateContentResponse:
        """POST one prompt; raises ``httpx.HTTPStatusError`` on non-2xx replies."""

        if not self.api_key:
            raise ConfigurationError("Server configuration error: Gemini API key missing.")
        response = await self._client.post(
            self.endpoint,
            params={"key": self.api_key},
            json=build_payload(prompt, system_instruction),
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        try:
            return GenerateContentResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            log.warning("gemini.unexpected_shape", extra={"error": str(exc)})
            raise UpstreamError("Gemini returned an unexpected response shape") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = [
    "GeminiClient",
    "GenerateContentResponse",
    "build_payload",
]
