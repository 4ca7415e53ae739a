"""
Wall clock used for hold deadlines.

Timestamps are naive UTC, matching how they are stored.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
