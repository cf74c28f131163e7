"""Daily digest package initialization."""

__all__ = [
    "template",
    "mailer",
    "subscribers",
    "job",
]
