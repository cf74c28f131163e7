"""Article summarization endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.routers.deps import get_summarizer
from backend.schemas import SummarizeRequest, SummarizeResponse
from services.summarize import Summarizer

router = APIRouter(tags=["summarize"])


@router.post("", response_model=SummarizeResponse)
async def summarize(
    payload: SummarizeRequest, summarizer: Summarizer = Depends(get_summarizer)
) -> SummarizeResponse:
    return SummarizeResponse(summary=await summarizer.summarize(payload.url))
