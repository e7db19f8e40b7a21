"""
Time helpers shared by the temporal analyzer and the pipeline.

All arithmetic is done on timezone-aware UTC datetimes. Naive timestamps in
payloads are interpreted as UTC. Day and hour differences are whole numbers
(floor), so scores derived from them are stable for a full day.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """Attach UTC to a naive datetime; convert an aware one to UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def hours_between(earlier: datetime, later: datetime) -> int:
    """Whole hours from ``earlier`` to ``later`` (negative if reversed)."""
    seconds = (ensure_utc(later) - ensure_utc(earlier)).total_seconds()
    return int(seconds // 3600) if seconds >= 0 else -int(-seconds // 3600)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days from ``earlier`` to ``later`` (negative if reversed)."""
    seconds = (ensure_utc(later) - ensure_utc(earlier)).total_seconds()
    return int(seconds // 86400) if seconds >= 0 else -int(-seconds // 86400)


def days_ago(ts: Optional[datetime], as_of: Optional[datetime] = None) -> Optional[int]:
    """Whole days between ``ts`` and ``as_of`` (default: now), or ``None``."""
    if ts is None:
        return None
    return days_between(ts, as_of or utcnow())


def describe_timeframe(hours: int, days: int) -> str:
    """Human label for an age, e.g. ``"5 hours ago"`` or ``"2 weeks ago"``."""
    if hours < 1:
        return "within the hour"
    if hours < 24:
        return f"{hours} hours ago"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        weeks = days // 7
        return f"{weeks} week{'s' if weeks > 1 else ''} ago"
    months = days // 30
    return f"{months} month{'s' if months > 1 else ''} ago"
