"""Translation endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.routers.deps import get_translator
from backend.schemas import TranslateRequest, TranslateResponse
from services.translate import Translator

router = APIRouter(tags=["translate"])


@router.post("", response_model=TranslateResponse)
async def translate(
    payload: TranslateRequest, translator: Translator = Depends(get_translator)
) -> TranslateResponse:
    """Translate ``text`` into ``targetLang`` (default ``en``), detecting the source language."""

    result = await translator.translate(payload.text, payload.target_lang)
    return TranslateResponse.model_validate(result.to_dict())
