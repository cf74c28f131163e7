"""Value types for sentiment scoring."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

NEGATIVE = -1
NEUTRAL = 0
POSITIVE = 1
VALID_SCORES = frozenset({NEGATIVE, NEUTRAL, POSITIVE})

# Leading optional sign plus digits, the same prefix a lenient integer parse accepts.
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)", re.ASCII)


class ScoreStatus(str, Enum):
    """How a single text ended up with its score."""

    OK = "ok"
    MALFORMED = "malformed"  # upstream answered, but not with -1/0/1
    FAILED = "failed"  # transport, HTTP or retry exhaustion


@dataclass(slots=True)
class ScoredText:
    """Outcome for one position of a sentiment batch."""

    index: int
    score: int
    status: ScoreStatus
    raw: Optional[str] = None

    @property
    def defaulted(self) -> bool:
        return self.status is not ScoreStatus.OK


def parse_score(text: Optional[str]) -> Optional[int]:
    """Return the score encoded in ``text`` or ``None`` when it is not -1, 0 or 1."""

    if text is None:
        return None
    match = _LEADING_INT.match(text)
    if not match:
        return None
    value = int(match.group(1))
    return value if value in VALID_SCORES else None


def coerce_score(value: object) -> int:
    """Clamp arbitrary values coming back from a batch into a valid score."""

    if isinstance(value, bool):
        return NEUTRAL
    if isinstance(value, int) and value in VALID_SCORES:
        return value
    return NEUTRAL


def tone(average: float) -> str:
    if average > 0.3:
        return "positive"
    if average < -0.3:
        return "negative"
    return "neutral"
