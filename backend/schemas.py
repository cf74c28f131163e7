from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SentimentRequest(BaseModel):
    """Either ``texts`` (batch) or the legacy single ``text``."""

    model_config = ConfigDict(extra="ignore")

    # left untyped so a non-list answers with our own 400 message
    texts: Optional[Any] = None
    text: Optional[Any] = None


class SentimentBatchResponse(BaseModel):
    sentiments: List[int]


class SentimentSingleResponse(BaseModel):
    sentiment: int


class SummarizeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None


class SummarizeResponse(BaseModel):
    summary: str


class TranslateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    text: Optional[str] = None
    target_lang: Optional[str] = Field(default="en", alias="targetLang")


class TranslateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    translated_text: str = Field(alias="translatedText")
    original_text: str = Field(alias="originalText")
    target_lang: str = Field(alias="targetLang")


class ArticleOut(BaseModel):
    url: str
    title: str
    source: str
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    published_at: Optional[str] = None


class HeadlinesResponse(BaseModel):
    articles: List[ArticleOut]


class ErrorResponse(BaseModel):
    error: str
