"""
Generic declarative pattern matcher.

A pattern matches an enriched signal set iff every required criterion is
satisfied by at least one signal (or by at least ``min_visits`` signals
when that constraint is set). Optional criteria never gate a match; each
one satisfied adds a fixed bonus to ``match_score``.

Scoring of a match::

    match_score = 50 + 10 * satisfied_optional_criteria      (not clamped)
    confidence  = round(pattern.confidence * min(1, n_matched_signals / 4), 2)

``n_matched_signals`` counts every supporting signal reference collected
over all satisfied criteria (a signal satisfying two criteria counts
twice). Matches are sorted descending by ``confidence * historical_conversion``;
ties keep library order.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from intent_scorer.analysis.quantitative import is_bofu_asset
from intent_scorer.models.analysis import AnalyzedSignal
from intent_scorer.models.pattern import MatchedPattern, MatchedSignalRef, Pattern, PatternCriterion

logger = logging.getLogger(__name__)

MATCH_BASE_SCORE = 50.0
OPTIONAL_BONUS = 10.0
FULL_STRENGTH_SIGNALS = 4


def signal_matches(signal: AnalyzedSignal, criterion: PatternCriterion) -> bool:
    """True if one analyzed signal satisfies every constraint of ``criterion``."""
    raw = signal.raw_data
    if raw.type != criterion.type:
        return False

    if criterion.action is not None and raw.action != criterion.action:
        return False
    if criterion.page_includes is not None and (
        not raw.page or criterion.page_includes not in raw.page
    ):
        return False
    if criterion.min_score is not None and signal.quantitative_score < criterion.min_score:
        return False

    # Upper bounds only reject a value that is present; lower bounds need one.
    if (
        criterion.duration_max is not None
        and raw.duration is not None
        and raw.duration > criterion.duration_max
    ):
        return False
    if criterion.bounce_rate_min is not None and (
        raw.bounce_rate is None or raw.bounce_rate < criterion.bounce_rate_min
    ):
        return False
    if criterion.days_in_role_min is not None and (
        raw.days_in_role is None or raw.days_in_role < criterion.days_in_role_min
    ):
        return False
    if (
        criterion.days_in_role_max is not None
        and raw.days_in_role is not None
        and raw.days_in_role > criterion.days_in_role_max
    ):
        return False

    if criterion.pain_point and not signal.qualitative_context.pain_points:
        return False
    if criterion.news_type is not None and raw.news_type != criterion.news_type:
        return False
    if criterion.department is not None and raw.meta("department") != criterion.department:
        return False
    if criterion.category is not None and not _matches_category(signal, criterion.category):
        return False
    if criterion.bofu and not is_bofu_asset(raw.asset or ""):
        return False
    if criterion.no_comment and raw.content:
        return False
    if criterion.clicked_link is not None and bool(raw.clicked_link) != criterion.clicked_link:
        return False

    for key, expected in criterion.metadata_equals.items():
        if raw.meta(key) != expected:
            return False

    return True


def _matches_category(signal: AnalyzedSignal, category: str) -> bool:
    raw = signal.raw_data
    if raw.meta("category") == category:
        return True
    return category.replace("_", " ").lower() in (raw.asset or "").lower()


def _matching(
    indexed: Sequence[tuple[int, AnalyzedSignal]],
    criterion: PatternCriterion,
) -> list[tuple[int, AnalyzedSignal]]:
    return [(i, s) for i, s in indexed if signal_matches(s, criterion)]


def match_pattern(pattern: Pattern, signals: Sequence[AnalyzedSignal]) -> Optional[MatchedPattern]:
    """Evaluate one pattern against the signal set; ``None`` if it does not match."""
    indexed = list(enumerate(signals))
    supporting: list[tuple[int, AnalyzedSignal]] = []
    notes: list[str] = []

    for criterion in pattern.required_signals:
        hits = _matching(indexed, criterion)
        required = criterion.min_visits or 1
        if len(hits) < required:
            return None
        supporting.extend(hits)
        if criterion.min_visits:
            notes.append(f"Found {len(hits)} {criterion.type} signals matching criteria")
        else:
            notes.append(f"Found {criterion.type} signal matching criteria")

    match_score = MATCH_BASE_SCORE
    for criterion in pattern.optional_signals:
        hits = _matching(indexed, criterion)
        if hits:
            match_score += OPTIONAL_BONUS
            supporting.extend(hits)
            notes.append(f"Bonus: {criterion.type} signal found")

    strength = min(1.0, len(supporting) / FULL_STRENGTH_SIGNALS)
    confidence = round(pattern.confidence * strength, 2)

    return MatchedPattern(
        pattern=pattern.id,
        name=pattern.name,
        signals=[
            MatchedSignalRef(index=i, type=s.type, score=s.quantitative_score)
            for i, s in supporting
        ],
        historical_conversion=pattern.historical_conversion,
        avg_days_to_close=pattern.avg_days_to_close,
        reasoning=f"{pattern.description}. {'. '.join(notes)}.",
        confidence=confidence,
        match_score=match_score,
        weight=pattern.weight,
        is_false_positive=pattern.is_false_positive,
    )


def identify_patterns(
    signals: Sequence[AnalyzedSignal],
    patterns: Iterable[Pattern],
) -> list[MatchedPattern]:
    """Match every library pattern and return the hits, strongest first."""
    matches: list[MatchedPattern] = []
    for pattern in patterns:
        match = match_pattern(pattern, signals)
        if match is not None:
            matches.append(match)
            logger.debug(
                "Pattern matched: %s | confidence=%.2f conversion=%.0f%%",
                pattern.name, match.confidence, match.historical_conversion,
            )

    matches.sort(key=lambda m: m.confidence * m.historical_conversion, reverse=True)
    logger.info("Identified %d patterns", len(matches))
    return matches


def primary_pattern(matches: Sequence[MatchedPattern]) -> Optional[MatchedPattern]:
    """The strongest match, or ``None``."""
    return matches[0] if matches else None


def detect_false_positive(matches: Sequence[MatchedPattern]) -> Optional[MatchedPattern]:
    """The first matched false-positive pattern, or ``None``."""
    return next((m for m in matches if m.is_false_positive), None)
