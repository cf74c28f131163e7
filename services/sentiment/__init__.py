"""Sentiment service package initialization."""

__all__ = [
    "types",
    "gemini",
    "batch",
    "store",
    "aggregator",
    "api",
]
