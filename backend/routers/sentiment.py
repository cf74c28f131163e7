"""Sentiment scoring endpoint."""

from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends

from backend.routers.deps import get_sentiment_client
from backend.schemas import (
    ErrorResponse,
    SentimentBatchResponse,
    SentimentRequest,
    SentimentSingleResponse,
)
from core.errors import InputValidationError
from services.sentiment.batch import SentimentBatchClient, validate_texts

router = APIRouter(tags=["sentiment"])


@router.post(
    "",
    response_model=Union[SentimentBatchResponse, SentimentSingleResponse],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_sentiment(
    payload: SentimentRequest,
    client: SentimentBatchClient = Depends(get_sentiment_client),
) -> Union[SentimentBatchResponse, SentimentSingleResponse]:
    """Score ``texts`` in order; the legacy ``text`` body scores a single string."""

    if payload.texts is None and payload.text is not None:
        if not isinstance(payload.text, str) or not payload.text:
            raise InputValidationError("Missing text to analyze")
        return SentimentSingleResponse(sentiment=await client.score_one(payload.text))

    texts = validate_texts(payload.texts)
    return SentimentBatchResponse(sentiments=await client.score_batch(texts))
