"""
First pipeline stage: raw ``Signal`` list → ``AnalyzedSignal`` list.

For every signal this computes the quantitative score, the temporal
factors (recency, same-type frequency and velocity, time context) and the
heuristic urgency seed that becomes the pre-enrichment qualitative context.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from intent_scorer.analysis import temporal
from intent_scorer.analysis.quantitative import score_signal
from intent_scorer.models.analysis import AnalyzedSignal, QualitativeContext, TemporalFactors
from intent_scorer.models.signal import Signal
from intent_scorer.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def analyze_signal(
    signal: Signal,
    all_signals: Sequence[Signal],
    half_life_days: float = temporal.DEFAULT_HALF_LIFE_DAYS,
    as_of: Optional[datetime] = None,
) -> AnalyzedSignal:
    """Analyze one signal in the context of the whole request.

    Args:
        signal: The signal to analyze.
        all_signals: Every signal in the request (``signal`` included).
        half_life_days: Recency half-life.
        as_of: Reference time (default: now).
    """
    as_of = as_of or utcnow()
    quantitative_score = score_signal(signal)

    same_type = [s for s in all_signals if s.type == signal.type]
    timestamps = [s.timestamp for s in same_type if s.timestamp is not None]
    ctx = temporal.time_context(signal.timestamp, as_of)

    temporal_factors = TemporalFactors(
        recency=temporal.recency(signal.timestamp, half_life_days, as_of),
        frequency=max(1, temporal.frequency(all_signals, signal.type)),
        velocity=temporal.velocity(timestamps),
        timeframe=ctx.timeframe,
        days_ago=ctx.days_ago,
        hours_ago=ctx.hours_ago,
        is_recent=ctx.is_recent,
        is_very_recent=ctx.is_very_recent,
    )

    analyzed = AnalyzedSignal(
        raw_data=signal,
        quantitative_score=quantitative_score,
        temporal_factors=temporal_factors,
        qualitative_context=QualitativeContext(urgency=temporal.urgency(signal, as_of)),
    )
    logger.debug(
        "Analyzed %s signal | score=%.1f recency=%.3f frequency=%d velocity=%s",
        signal.type, quantitative_score, temporal_factors.recency,
        temporal_factors.frequency, temporal_factors.velocity,
    )
    return analyzed


def analyze_signals(
    signals: Sequence[Signal],
    half_life_days: float = temporal.DEFAULT_HALF_LIFE_DAYS,
    as_of: Optional[datetime] = None,
) -> list[AnalyzedSignal]:
    """Analyze every signal of a request, preserving input order."""
    logger.info("Analyzing %d signals", len(signals))
    as_of = as_of or utcnow()
    return [analyze_signal(s, signals, half_life_days, as_of) for s in signals]
