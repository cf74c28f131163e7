"""Runtime settings for the NewsPulse API, digest job and CLI."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_TRUEY = {"1", "true", "yes", "on", "t", "y"}
_FALSEY = {"0", "false", "no", "off", "f", "n", ""}

APY_HUB_PLACEHOLDER = "YOUR_APY_HUB_TOKEN_HERE"


def parse_bool(value: object | None, default: bool = False) -> bool:
    """Coerce user-provided strings and booleans into a boolean."""

    if value is None:
        return default
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUEY:
        return True
    if lowered in _FALSEY:
        return False
    return default


def _env_pick(*names: str, default: str | None = None) -> str | None:
    """Return the first non-empty environment variable in *names*."""

    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except (TypeError, ValueError):
        return default


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip().rstrip("/") for item in raw.split(",") if item.strip()]


class GeminiSettings(BaseModel):
    """How to reach the Gemini text-generation API."""

    api_key: Optional[str] = Field(default=None)
    model: str = Field(default="gemini-2.5-flash-preview-09-2025")
    base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")


class SentimentSettings(BaseModel):
    """Pacing of the sequential sentiment batch."""

    throttle_ms: int = Field(default=600, ge=0)
    max_attempts: int = Field(default=3, ge=1)
    initial_backoff_ms: int = Field(default=1000, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1.0)


class SmtpSettings(BaseSettings):
    """SMTP transport used for the daily digest."""

    model_config = SettingsConfigDict(env_prefix="SMTP_", extra="ignore")

    host: str = "smtp.gmail.com"
    port: int = 587
    secure: bool = False
    user: Optional[str] = None
    password: Optional[str] = None
    timeout: float = 30.0

    def configured(self) -> bool:
        return bool(self.user and self.password)


class DigestSettings(BaseModel):
    """Schedule and sender of the daily digest email."""

    enabled: bool = Field(default=False)
    cron: str = Field(default="0 8 * * *")
    timezone: Optional[str] = Field(default=None)
    sender: str = Field(default="no-reply@example.com")
    subject: str = Field(default="Your Daily News Digest")
    subscribers_path: Path = Field(default=Path("data/subscribers.json"))


class Settings(BaseModel):
    """Aggregate settings used by the backend, the digest job and the CLI."""

    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    sentiment: SentimentSettings = Field(default_factory=SentimentSettings)
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    digest: DigestSettings = Field(default_factory=DigestSettings)
    apy_hub_token: Optional[str] = None
    news_api_key: Optional[str] = None
    news_api_base: str = "https://newsapi.org/v2"
    http_timeout: float = 30.0
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    api_host: str = "127.0.0.1"
    api_port: int = 3000
    log_path: Path = Path("logs/newspulse.log")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(override=False)
        gemini = GeminiSettings(
            api_key=_env_pick("GEMINI_API_KEY", "GOOGLE_API_KEY"),
            model=_env_pick("GEMINI_MODEL", default=GeminiSettings().model) or "",
            base_url=(_env_pick("GEMINI_BASE_URL", default=GeminiSettings().base_url) or "").rstrip("/"),
        )
        sentiment = SentimentSettings(
            throttle_ms=_env_int("SENTIMENT_THROTTLE_MS", 600),
            max_attempts=_env_int("SENTIMENT_MAX_ATTEMPTS", 3),
            initial_backoff_ms=_env_int("SENTIMENT_BACKOFF_MS", 1000),
        )
        digest = DigestSettings(
            enabled=parse_bool(os.getenv("DIGEST_ENABLED"), default=False),
            cron=_env_pick("DAILY_EMAIL_CRON", default="0 8 * * *") or "0 8 * * *",
            timezone=_env_pick("TIMEZONE"),
            sender=_env_pick("EMAIL_FROM", default="no-reply@example.com") or "no-reply@example.com",
            subscribers_path=Path(_env_pick("SUBSCRIBERS_PATH", default="data/subscribers.json") or ""),
        )
        try:
            timeout = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
        except ValueError:
            timeout = 30.0
        return cls(
            gemini=gemini,
            sentiment=sentiment,
            smtp=SmtpSettings(),
            digest=digest,
            apy_hub_token=_env_pick("APY_HUB_TOKEN"),
            news_api_key=_env_pick("NEWS_API_KEY", "NEWSAPI_KEY"),
            news_api_base=(_env_pick("NEWS_API_BASE", default="https://newsapi.org/v2") or "").rstrip("/"),
            http_timeout=timeout,
            cors_origins=_env_list("CORS_ORIGINS", "http://localhost:5173"),
            api_host=_env_pick("API_HOST", default="127.0.0.1") or "127.0.0.1",
            api_port=_env_int("API_PORT", 3000),
            log_path=Path(_env_pick("LOG_PATH", default="logs/newspulse.log") or ""),
            log_level=(_env_pick("LOG_LEVEL", default="INFO") or "INFO").upper(),
        )

    def apy_hub_configured(self) -> bool:
        return bool(self.apy_hub_token) and self.apy_hub_token != APY_HUB_PLACEHOLDER


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance loaded from environment variables."""

    return Settings.from_env()


def masked_tail(value: Optional[str]) -> Optional[str]:
    return value[-4:] if value else None


__all__ = [
    "GeminiSettings",
    "SentimentSettings",
    "SmtpSettings",
    "DigestSettings",
    "Settings",
    "get_settings",
    "parse_bool",
    "masked_tail",
    "APY_HUB_PLACEHOLDER",
]
