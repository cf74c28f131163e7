"""Health check endpoint for the backend API."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from core.settings import masked_tail

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    """Return a tolerant health payload that never raises."""

    services = getattr(request.app.state, "services", None)
    if services is None:
        return {"ok": False, "error": "services not initialised"}

    scheduler = services.scheduler
    return {
        "ok": True,
        "services": {
            "gemini": services.gemini.is_configured(),
            "apyhub": services.summarizer.is_configured(),
            "newsapi": services.news.is_configured(),
            "digest_scheduler": bool(scheduler and scheduler.running),
        },
        "gemini_model": services.gemini.model,
        "gemini_key_tail": masked_tail(services.gemini.api_key),
    }
