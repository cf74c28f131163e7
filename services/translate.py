"""Text translation through Google Translate (deep-translator)."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from deep_translator import GoogleTranslator

from core.errors import InputValidationError, UpstreamError

DEFAULT_TARGET = "en"

log = logging.getLogger("newspulse.translate")

TranslateFn = Callable[[str, str], str]


def google_translate(text: str, target: str) -> str:
    return GoogleTranslator(source="auto", target=target).translate(text)


@dataclass(slots=True)
class Translation:
    translated_text: str
    original_text: str
    target_lang: str

    def to_dict(self) -> dict[str, str]:
        return {
            "translatedText": self.translated_text,
            "originalText": self.original_text,
            "targetLang": self.target_lang,
        }


class Translator:
    """Detect the source language and translate into ``target_lang``."""

    def __init__(self, translate_fn: TranslateFn = google_translate) -> None:
        self.translate_fn = translate_fn

    async def translate(self, text: Optional[str], target_lang: Optional[str] = None) -> Translation:
        if not text:
            raise InputValidationError("Missing text to translate")
        target = (target_lang or DEFAULT_TARGET).strip() or DEFAULT_TARGET
        try:
            # deep-translator is synchronous; keep it off the event loop
            translated = await asyncio.to_thread(self.translate_fn, text, target)
        except Exception as exc:  # noqa: BLE001 - library raises many unrelated types
            log.error("translate.failed", extra={"target": target, "error": str(exc)})
            raise UpstreamError(
                "Failed to translate text via external API. (Service might be overloaded).",
                status_code=500,
            ) from exc
        if translated is None:
            raise UpstreamError(
                "Failed to translate text via external API. (Service might be overloaded).",
                status_code=500,
            )
        return Translation(translated_text=str(translated), original_text=text, target_lang=target)


__all__ = ["Translator", "Translation", "google_translate", "DEFAULT_TARGET"]
