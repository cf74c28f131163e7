"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

from typing import Optional


class NewsPulseError(Exception):
    """Base error carrying the HTTP status the API should answer with."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message}


class InputValidationError(NewsPulseError):
    """Malformed or absent request input."""

    status_code = 400


class ConfigurationError(NewsPulseError):
    """A required key or credential is not configured."""

    status_code = 500


class UpstreamError(NewsPulseError):
    """A remote API failed or answered with an unexpected shape."""

    status_code = 502


class RateLimitError(UpstreamError):
    """Raised when rate-limit retries are exhausted."""

    status_code = 429


__all__ = [
    "NewsPulseError",
    "InputValidationError",
    "ConfigurationError",
    "UpstreamError",
    "RateLimitError",
]
