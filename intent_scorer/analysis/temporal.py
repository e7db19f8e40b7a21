"""
Temporal analysis: recency, frequency, velocity and timing-based urgency.

Pure functions, no I/O. Every function that depends on "now" takes an
optional ``as_of`` reference time so results can be reproduced exactly.

Recency
-------
Exponential decay with a configurable half-life::

    recency = 0.5 ** (days_ago / half_life_days)

so a signal exactly one half-life old scores 0.5. A missing timestamp is
neutral (0.5); a timestamp in the future is treated as "today" (1.0).

Velocity
--------
Timestamps are sorted, inter-arrival gaps computed, and the mean of the
first half of the gaps compared with the mean of the second half:

    second < first * 0.7  → increasing   (signals arriving faster)
    second > first * 1.3  → decreasing   (signals arriving slower)
    otherwise             → stable

Fewer than three timestamps is stable by definition.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from intent_scorer.models.signal import Signal
from intent_scorer.taxonomy.signal_taxonomy import SignalType, Urgency, Velocity
from intent_scorer.utils.time_utils import (
    days_ago,
    days_between,
    describe_timeframe,
    ensure_utc,
    hours_between,
    utcnow,
)

DEFAULT_HALF_LIFE_DAYS: float = 7.0

_VELOCITY_FASTER = 0.7
_VELOCITY_SLOWER = 1.3


@dataclass(frozen=True)
class TimeContext:
    """Age of a signal relative to the reference time."""

    timeframe: str
    hours_ago: int
    days_ago: int
    is_recent: bool
    is_very_recent: bool


def recency(
    timestamp: Optional[datetime],
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
    as_of: Optional[datetime] = None,
) -> float:
    """Return a freshness score in [0, 1] for ``timestamp``.

    Args:
        timestamp: When the signal happened; ``None`` → neutral 0.5.
        half_life_days: Age at which the score halves. Must be positive.
        as_of: Reference time (default: now, UTC).

    Raises:
        ValueError: If ``half_life_days`` is not positive.
    """
    if half_life_days <= 0:
        raise ValueError(f"half_life_days must be > 0, got {half_life_days}.")
    days = days_ago(timestamp, as_of)
    if days is None:
        return 0.5
    if days < 0:
        return 1.0
    return _clamp(0.5 ** (days / half_life_days), 0.0, 1.0)


def frequency(signals: Iterable[Signal], signal_type: SignalType) -> int:
    """Count signals of ``signal_type`` within the request's signal set."""
    return sum(1 for s in signals if s.type == signal_type)


def velocity(timestamps: Sequence[datetime]) -> Velocity:
    """Classify the arrival trend of a series of timestamps."""
    if len(timestamps) < 3:
        return Velocity.STABLE

    ordered = sorted(ensure_utc(t) for t in timestamps)
    gaps = [
        (later - earlier).total_seconds() / 3600.0
        for earlier, later in zip(ordered, ordered[1:])
    ]
    midpoint = len(gaps) // 2
    first_half = gaps[:midpoint]
    second_half = gaps[midpoint:]
    first_avg = sum(first_half) / len(first_half)
    second_avg = sum(second_half) / len(second_half)

    if second_avg < first_avg * _VELOCITY_FASTER:
        return Velocity.INCREASING
    if second_avg > first_avg * _VELOCITY_SLOWER:
        return Velocity.DECREASING
    return Velocity.STABLE


def time_context(
    timestamp: Optional[datetime],
    as_of: Optional[datetime] = None,
) -> TimeContext:
    """Describe the age of ``timestamp`` (whole hours/days, human label)."""
    if timestamp is None:
        return TimeContext("unknown", 0, 0, False, False)

    now = as_of or utcnow()
    hours = max(0, hours_between(timestamp, now))
    days = max(0, days_between(timestamp, now))
    return TimeContext(
        timeframe=describe_timeframe(hours, days),
        hours_ago=hours,
        days_ago=days,
        is_recent=days < 7,
        is_very_recent=hours < 48,
    )


def urgency(signal: Signal, as_of: Optional[datetime] = None) -> Urgency:
    """Pre-enrichment urgency seed from signal age.

    Under 2 days → high, under 7 days → medium, older → low. A signal with
    no timestamp gets medium. Enrichment overwrites this value.
    """
    days = days_ago(signal.timestamp, as_of)
    if days is None:
        return Urgency.MEDIUM
    if days < 2:
        return Urgency.HIGH
    if days < 7:
        return Urgency.MEDIUM
    return Urgency.LOW


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
