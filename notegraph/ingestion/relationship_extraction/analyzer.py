"""Analysis functions for lexical overlap and temporal proximity."""

import re
from datetime import datetime

SECONDS_PER_DAY = 60 * 60 * 24
MIN_TOKEN_LENGTH = 4
TEMPORAL_WINDOW_DAYS = 7.0

_NON_WORD = re.compile(r"\W+")


def extract_content_tokens(text: str) -> list[str]:
    """Extract the distinct lowercase tokens used for content similarity.

    Args:
        text: Body text of a note

    Returns:
        Tokens longer than three characters, without repeats, in order of first use
    """
    tokens = _NON_WORD.split(text.lower())
    return list(dict.fromkeys(token for token in tokens if len(token) >= MIN_TOKEN_LENGTH))


def days_between(first: datetime, second: datetime) -> float:
    """Absolute gap between two timestamps in (fractional) days."""
    return abs((second - first).total_seconds()) / SECONDS_PER_DAY


def calculate_temporal_strength(days: float) -> float:
    """Calculate the strength of a temporal relationship.

    Notes created on the same day get 0.5; the strength falls linearly with
    the gap and bottoms out at 0.1 at one week.

    Args:
        days: Gap between the two notes in days

    Returns:
        Relationship strength between 0.1 and 0.5
    """
    return max(0.1, 0.5 - days / 14)


def is_temporally_close(days: float) -> bool:
    return days <= TEMPORAL_WINDOW_DAYS
