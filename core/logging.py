"""Structured logging utilities."""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

import orjson

DEFAULT_LOG_PATH = Path("logs/newspulse.log")

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

_HANDLER_MARK = "_newspulse_handler"


class JsonFormatter(logging.Formatter):
    """Render log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _RESERVED or key.startswith("_"):
                continue
            payload[key] = value
        return orjson.dumps(payload, default=str).decode()


def configure_logging(
    log_path: Path | None = DEFAULT_LOG_PATH,
    *,
    level: str | int = logging.INFO,
    console: bool = True,
) -> None:
    """Configure the ``newspulse`` logger; safe to call more than once."""

    logger = logging.getLogger("newspulse")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = JsonFormatter()
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        logger.addHandler(file_handler)
    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        setattr(stream_handler, _HANDLER_MARK, True)
        logger.addHandler(stream_handler)


__all__ = ["JsonFormatter", "configure_logging", "DEFAULT_LOG_PATH"]
