"""Shared utilities used across the phone advisor core."""

import uuid
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix: str, length: int = 9) -> str:
    """Build a prefixed identifier with a millisecond timestamp and random suffix.

    Examples:
        >>> new_id("workflow").startswith("workflow_")
        True
    """
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"{prefix}_{millis}_{uuid.uuid4().hex[:length]}"


def title_words(text: str, count: int = 3) -> str:
    """Title-case the first ``count`` space-separated words of ``text``.

    Examples:
        >>> title_words("recommend me a gaming phone")
        'Recommend Me A'
    """
    words = text.lower().split(" ")[:count]
    return " ".join(word[:1].upper() + word[1:] for word in words)
