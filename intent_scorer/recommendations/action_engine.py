"""
Action recommendation: turns a ``QualityScoreResult`` and the enriched
signals into what a rep should do next.

Paths
-----
priority ignore / low  → monitor-only record: ``monitor_and_enrich`` with
                         three fixed nurture steps; no channel, timing or
                         message. The conversion estimate uses the same
                         formula as the outreach path.
priority medium+       → personalized outreach: channel, timing, messaging
                         angle, guard-rails, next steps, red flags and an
                         outcome estimate.

Outcome estimates
-----------------
    conversion = round(((score/100)*0.4 + (top_conversion/100)*0.6) * conf_mult, 2)
                 (score/100 * conf_mult when no pattern matched)
    conf_mult  = high 1.0 / medium 0.85 / low 0.7
    days       = top pattern's avg_days_to_close, else round(30 + (100-score)*0.5)
    deal value = $100k * size multiplier * role multiplier, reported ±20%
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from intent_scorer.models.analysis import AnalyzedSignal
from intent_scorer.models.pattern import MatchedPattern
from intent_scorer.models.recommendation import (
    ActionReasoning,
    AnalysisMetadata,
    AnalysisResult,
    AnalysisSummary,
    EstimatedOutcome,
    HistoricalWin,
    NextStep,
    QualityScoreResult,
    RecommendedAction,
)
from intent_scorer.models.signal import AnalysisOptions, Prospect
from intent_scorer.patterns.matcher import detect_false_positive, primary_pattern
from intent_scorer.scoring.quality import round_half_up
from intent_scorer.taxonomy.signal_taxonomy import (
    ACTIONABLE_PRIORITIES,
    BuyingStage,
    ConfidenceLevel,
    FalsePositiveRisk,
    OutreachChannel,
    OutreachTiming,
    PriorityLevel,
    SignalType,
    Urgency,
)

logger = logging.getLogger(__name__)


class MessageComposer(Protocol):
    """Turns a recommendation into a human-readable outreach message."""

    def compose(
        self,
        prospect: Prospect,
        signals: Sequence[AnalyzedSignal],
        angle: str,
        pain_point_focus: Optional[str],
        patterns: Sequence[MatchedPattern],
    ) -> str:
        ...


# ── Tables ────────────────────────────────────────────────────────────────────

_CONFIDENCE_MULTIPLIER: dict[ConfidenceLevel, float] = {
    ConfidenceLevel.HIGH:   1.0,
    ConfidenceLevel.MEDIUM: 0.85,
    ConfidenceLevel.LOW:    0.7,
}

# Pain-point keyword buckets, checked in this order.
_ANGLE_BUCKETS: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("scaling_productivity", "team scaling challenges",
     ("scaling", "growth", "team expansion", "hiring")),
    ("time_savings", "manual process automation",
     ("manual", "time", "efficiency", "productivity", "admin")),
    ("integration_solution", "integration and tech stack optimization",
     ("integration", "salesforce", "crm", "tech stack")),
)
_PATTERN_ANGLES: dict[str, str] = {
    "new_role_evaluator":           "new_role_stack_evaluation",
    "active_evaluator_with_budget": "quick_roi",
}
DEFAULT_ANGLE = "general_value_prop"

BASE_DEAL_VALUE = 100_000
_DEAL_SIZE_MULTIPLIER: dict[str, float] = {
    "1-10":     0.3,
    "11-50":    0.5,
    "51-200":   1.0,
    "50-200":   1.0,
    "100-250":  1.2,
    "201-1000": 1.5,
    "1000+":    2.0,
}

_MONITOR_STEPS = (
    NextStep(action="Add to passive nurture campaign", timing="immediate", priority=1),
    NextStep(action="Monitor for additional signals", timing="continuous", priority=2),
    NextStep(
        action="Wait for 3+ more qualifying signals before outreach",
        timing="as signals arrive",
        priority=3,
    ),
)

_GENERIC_DO_NOT_MENTION = ("Generic pitch or feature dump", "Your quota or sales targets")


# ── Outreach decisions ────────────────────────────────────────────────────────

def determine_channel(signals: Sequence[AnalyzedSignal]) -> tuple[OutreachChannel, str]:
    types = {s.type for s in signals}
    if SignalType.LINKEDIN_ENGAGEMENT in types:
        return (
            OutreachChannel.LINKEDIN_MESSAGE,
            "Prospect has engaged on LinkedIn, natural continuation of conversation",
        )
    if SignalType.EMAIL_INTERACTION in types:
        return OutreachChannel.EMAIL, "Prospect has shown email engagement"
    return OutreachChannel.LINKEDIN_MESSAGE, "Most effective channel for B2B decision makers"


def determine_timing(
    quality_score: int,
    signals: Sequence[AnalyzedSignal],
) -> tuple[OutreachTiming, str]:
    very_recent = any(s.temporal_factors.recency > 0.9 for s in signals)
    high_urgency = any(s.qualitative_context.urgency == Urgency.HIGH for s in signals)

    if quality_score >= 85 or (very_recent and high_urgency):
        return (
            OutreachTiming.WITHIN_24H,
            "High quality and/or urgent signals require immediate action",
        )
    if quality_score >= 70:
        return OutreachTiming.WITHIN_48H, "Strong signals indicate active evaluation"
    if quality_score >= 50:
        return OutreachTiming.WITHIN_WEEK, "Moderate signals, timely but not urgent"
    return OutreachTiming.NO_RUSH, "Low priority, can wait for additional signals"


def all_pain_points(signals: Sequence[AnalyzedSignal]) -> list[str]:
    return [p for s in signals for p in s.qualitative_context.pain_points if p]


def determine_messaging_angle(
    signals: Sequence[AnalyzedSignal],
    patterns: Sequence[MatchedPattern],
) -> tuple[str, Optional[str]]:
    """Return ``(angle, pain_point_focus)``.

    Pain-point buckets pick the angle first; a known top pattern then
    overrides the angle (the pain-point focus is kept).
    """
    angle, focus = DEFAULT_ANGLE, None
    text = " ".join(all_pain_points(signals)).lower()
    if text:
        for bucket_angle, bucket_focus, keywords in _ANGLE_BUCKETS:
            if any(kw in text for kw in keywords):
                angle, focus = bucket_angle, bucket_focus
                break

    top = primary_pattern(patterns)
    if top is not None and top.pattern in _PATTERN_ANGLES:
        angle = _PATTERN_ANGLES[top.pattern]
    return angle, focus


def do_not_mention(signals: Sequence[AnalyzedSignal]) -> list[str]:
    types = {s.type for s in signals}
    items: list[str] = []
    if SignalType.WEBSITE_VISIT in types:
        items.append("Specific number of website visits or pages viewed (too creepy)")
    if SignalType.JOB_CHANGE in types:
        items.append("Their recent job change directly (acknowledge expertise instead)")
    if SignalType.EMAIL_INTERACTION in types:
        items.append("That you tracked their email opens or clicks")
    items.extend(_GENERIC_DO_NOT_MENTION)
    return items


def next_steps(
    quality_score: int,
    timing: OutreachTiming,
    channel: OutreachChannel,
) -> list[NextStep]:
    if quality_score >= 70:
        return [
            NextStep(
                action=f"Send personalized {channel.replace('_', ' ')}",
                timing=timing.replace("_", " "),
                priority=1,
            ),
            NextStep(
                action="If no response in 48h, send follow-up with case study",
                timing="48h after first touchpoint",
                priority=2,
            ),
            NextStep(
                action="If response positive, book discovery call",
                timing="immediate upon response",
                priority=3,
            ),
        ]
    return [
        NextStep(action="Monitor for additional signals", timing="continuous", priority=1),
        NextStep(action="Add to nurture campaign", timing="immediate", priority=2),
        NextStep(action="Re-evaluate when 2+ new signals appear", timing="as signals arrive", priority=3),
    ]


def identify_red_flags(
    signals: Sequence[AnalyzedSignal],
    patterns: Sequence[MatchedPattern],
) -> list[str]:
    flags: list[str] = []

    fp_pattern = detect_false_positive(patterns)
    if fp_pattern is not None:
        flags.append(f"Matches false positive pattern: {fp_pattern.name}")

    high_risk = sum(
        1 for s in signals if s.qualitative_context.false_positive_risk == FalsePositiveRisk.HIGH
    )
    if signals and high_risk > len(signals) / 2:
        flags.append("Majority of signals have high false positive risk")

    if signals and all(s.quantitative_score < 40 for s in signals):
        flags.append("All signals show shallow engagement")

    if any(_has_competitor_indicator(s) for s in signals):
        flags.append("Prospect may be competitor conducting research")

    return flags


def _has_competitor_indicator(signal: AnalyzedSignal) -> bool:
    raw = signal.raw_data
    if raw.meta("isCompetitor"):
        return True
    return "competitor" in str(raw.meta("company") or "").lower()


# ── Outcome estimates ─────────────────────────────────────────────────────────

def estimate_conversion(
    quality_score: int,
    patterns: Sequence[MatchedPattern],
    confidence: ConfidenceLevel,
) -> float:
    base = quality_score / 100
    top = primary_pattern(patterns)
    if top is not None:
        base = base * 0.4 + (top.historical_conversion / 100) * 0.6
    probability = round(base * _CONFIDENCE_MULTIPLIER[confidence], 2)
    return max(0.0, min(1.0, probability))


def estimate_days_to_close(quality_score: int, patterns: Sequence[MatchedPattern]) -> int:
    top = primary_pattern(patterns)
    if top is not None and top.avg_days_to_close is not None:
        return top.avg_days_to_close
    return round_half_up(30 + (100 - quality_score) * 0.5)


def estimate_deal_value(prospect: Prospect) -> str:
    """Estimated annual contract value as a ±20% range, e.g. ``"$104k-156k ACV"``."""
    value = float(BASE_DEAL_VALUE)
    if prospect.company_size:
        value *= _DEAL_SIZE_MULTIPLIER.get(prospect.company_size.strip(), 1.0)
    if prospect.role:
        role = prospect.role.lower()
        if "vp" in role or "chief" in role:
            value *= 1.3
        elif "director" in role:
            value *= 1.15

    low = round_half_up(value * 0.8 / 1000)
    high = round_half_up(value * 1.2 / 1000)
    return f"${low}k-{high}k ACV"


def similar_historical_wins(
    patterns: Sequence[MatchedPattern],
    prospect: Prospect,
) -> list[HistoricalWin]:
    """Reference deal derived from the top pattern (empty without a match)."""
    top = primary_pattern(patterns)
    if top is None:
        return []
    days = top.avg_days_to_close
    return [
        HistoricalWin(
            company="[Similar Company]",
            similarity_score=0.87,
            signal_pattern=top.name,
            outcome=f"Won in {days} days" if days else "Won",
            days_to_close=days,
            deal_value="$150k ACV" if "50-200" in (prospect.company_size or "") else "$200k ACV",
        )
    ]


def analysis_summary(
    quality_score: int,
    signals: Sequence[AnalyzedSignal],
    patterns: Sequence[MatchedPattern],
) -> AnalysisSummary:
    if quality_score >= 85:
        summary = (
            "Exceptionally high-quality signal cluster. Prospect is actively evaluating "
            "solutions with clear pain point, budget, and authority."
        )
    elif quality_score >= 70:
        summary = "Strong signal cluster indicating serious buyer interest and active evaluation phase."
    elif quality_score >= 50:
        summary = (
            "Moderate signal quality. Prospect shows some interest but needs additional "
            "qualifying signals."
        )
    else:
        summary = (
            "Low-quality signal cluster with high false positive indicators or "
            "insufficient context."
        )

    insights: list[str] = []
    pains = all_pain_points(signals)
    if pains:
        insights.append(f"Pain points identified: {', '.join(pains[:3])}")
    urgent = sum(1 for s in signals if s.qualitative_context.urgency == Urgency.HIGH)
    if urgent:
        insights.append(f"{urgent} high-urgency signals detected")
    if any(
        s.qualitative_context.buying_stage in (BuyingStage.DECISION, BuyingStage.CONSIDERATION)
        for s in signals
    ):
        insights.append("Prospect in active evaluation stage")
    top = primary_pattern(patterns)
    if top is not None:
        insights.append(
            f'Pattern match: "{top.name}" ({top.historical_conversion:g}% conversion rate)'
        )
    return AnalysisSummary(summary=summary, key_insights=insights)


# ── Entry point ───────────────────────────────────────────────────────────────

def generate_action_recommendation(
    quality: QualityScoreResult,
    signals: Sequence[AnalyzedSignal],
    prospect: Prospect,
    metadata: AnalysisMetadata,
    options: Optional[AnalysisOptions] = None,
    composer: Optional[MessageComposer] = None,
) -> AnalysisResult:
    """Build the merged ``AnalysisResult`` for one scored request.

    Args:
        quality: Output of ``calculate_quality_score``.
        signals: Enriched signals the score was computed from.
        prospect: The prospect.
        metadata: Run metadata assembled by the caller.
        options: Request switches (message generation, historical wins).
        composer: Optional message composer; used only for the outreach
            path when ``options.generate_message`` is true.
    """
    options = options or AnalysisOptions()
    score = quality.quality_score
    patterns = quality.patterns
    conversion = estimate_conversion(score, patterns, quality.confidence)

    common = dict(
        quality_score=score,
        confidence=quality.confidence,
        priority_level=quality.priority_level,
        signal_breakdown=quality.breakdown,
        matched_patterns=patterns,
        components=quality.components,
        weights=quality.weights,
        metadata=metadata,
    )

    if quality.priority_level not in ACTIONABLE_PRIORITIES:
        logger.info("Priority %s: monitor-only recommendation", quality.priority_level)
        return AnalysisResult(
            result_type="no_action" if quality.priority_level == PriorityLevel.IGNORE else "monitor_only",
            reasoning=quality.reasoning,
            recommended_action=RecommendedAction(
                type="monitor_and_enrich",
                next_steps=list(_MONITOR_STEPS),
                red_flags=identify_red_flags(signals, patterns),
            ),
            estimated_outcome=EstimatedOutcome(
                conversion_probability=conversion,
                confidence=ConfidenceLevel.LOW,
                reasoning="Insufficient signal quality for accurate prediction",
            ),
            **common,
        )

    channel, why_channel = determine_channel(signals)
    timing, why_now = determine_timing(score, signals)
    angle, focus = determine_messaging_angle(signals, patterns)

    message: Optional[str] = None
    if options.generate_message and composer is not None:
        message = composer.compose(prospect, signals, angle, focus, patterns)

    action = RecommendedAction(
        type="personalized_outreach",
        channel=channel,
        timing=timing,
        priority=quality.priority_level,
        messaging_angle=angle,
        pain_point_focus=focus,
        suggested_message=message,
        reasoning=ActionReasoning(
            why_this_channel=why_channel,
            why_now=why_now,
            why_this_angle=(
                f"Lead with their specific pain point: {focus}"
                if focus else "General value proposition with industry relevance"
            ),
        ),
        do_not_mention=do_not_mention(signals),
        next_steps=next_steps(score, timing, channel),
        red_flags=identify_red_flags(signals, patterns),
    )

    logger.info(
        "Action recommendation generated | priority=%s channel=%s timing=%s angle=%s",
        quality.priority_level, channel, timing, angle,
    )
    return AnalysisResult(
        result_type="personalized_outreach",
        reasoning=quality.reasoning,
        analysis=analysis_summary(score, signals, patterns),
        recommended_action=action,
        similar_historical_wins=(
            similar_historical_wins(patterns, prospect)
            if options.include_historical_comparison else []
        ),
        estimated_outcome=EstimatedOutcome(
            conversion_probability=conversion,
            estimated_days_to_close=estimate_days_to_close(score, patterns),
            estimated_deal_value=estimate_deal_value(prospect),
            confidence=quality.confidence,
            reasoning=f"Based on {len(patterns)} pattern matches and {len(signals)} signals",
        ),
        **common,
    )
