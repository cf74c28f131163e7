"""News retrieval package initialization."""

__all__ = [
    "types",
    "newsapi",
]
