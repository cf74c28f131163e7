"""Router package exposing the NewsPulse API endpoints."""

__all__ = [
    "health",
    "sentiment",
    "summarize",
    "translate",
    "news",
]
