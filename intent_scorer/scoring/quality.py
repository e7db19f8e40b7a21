"""
Quality scoring: fuses enriched signals, matched patterns and prospect fit
into one 0–100 quality score with confidence and priority bands.

Score formula
-------------
    quality = round(
        signal_score    * w_signals     # 0.4 by default
        + pattern_score * w_patterns    # 0.4
        + fit_score     * w_fit         # 0.2
    )                                   # clamped to [0, 100]

Component explanations
----------------------
signal_score (0–100):
    Per signal::

        contextual = quantitative
                     * urgency * specificity * buying_stage * false_positive_risk
                     * (1 + (recency - 0.5) * 0.4)        # 0.8 .. 1.2
                     * velocity

    A dimension the context does not carry counts as 1.0. Each contextual
    score is clamped to [0, 100] and rounded, then averaged with the
    per-type base weight (percent) as the weight.

pattern_score (0–100):
    sum(conversion * confidence * weight / 100) / sum(confidence) over the
    matched patterns. Neutral 50 when nothing matched. A false-positive
    pattern's negative weight pulls this down; the result is clamped.

fit_score (0–100):
    50 * company-size multiplier * industry multiplier * role boost
    (1.2 for decision-makers, 1.05 for managers), capped at 100.

Confidence (first matching rule wins)
-------------------------------------
    high   : n >= 6, or n >= 5 with a pattern, or n >= 3 with a pattern and
             completeness (min(1, n / 5)) >= 0.8
    low    : n < 3 and no pattern
    medium : otherwise

Priority
--------
    any false-positive pattern → ignore; else >= 85 urgent, >= 70 high,
    >= 50 medium, >= 30 low, else ignore.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from intent_scorer.models.analysis import AnalyzedSignal
from intent_scorer.models.pattern import MatchedPattern
from intent_scorer.models.recommendation import (
    ComponentWeights,
    ExtractedContext,
    QualityScoreResult,
    ScoreComponents,
    SignalBreakdown,
    SignalMultipliers,
)
from intent_scorer.models.signal import Prospect
from intent_scorer.patterns.matcher import detect_false_positive, primary_pattern
from intent_scorer.scoring.weights import DEFAULT_WEIGHTS, WeightsConfig
from intent_scorer.taxonomy.signal_taxonomy import (
    BuyingStage,
    ConfidenceLevel,
    PriorityLevel,
    Specificity,
    Urgency,
    Velocity,
)

logger = logging.getLogger(__name__)

NEUTRAL_COMPONENT = 50

DECISION_MAKER_ROLES = ("vp", "director", "head of", "chief", "cxo", "ceo", "cto", "cro")
DECISION_MAKER_BOOST = 1.2
MANAGER_BOOST = 1.05

_COMPANY_SIZE_CATEGORIES: dict[str, str] = {
    "1-10":     "smb",
    "11-50":    "smb",
    "51-200":   "midmarket",
    "50-200":   "midmarket",
    "100-250":  "midmarket",
    "201-1000": "midmarket",
    "1000+":    "enterprise",
}
_LEADING_NUMBER = re.compile(r"\d[\d,]*")


@dataclass(frozen=True)
class ScoreInterpretation:
    """Human reading of a quality score band."""

    level:          str
    description:    str
    recommendation: str


# ── Signal component ──────────────────────────────────────────────────────────

def _lookup(table: dict, key: object) -> float:
    if key is None:
        return 1.0
    return table.get(key, 1.0)


def signal_multipliers(signal: AnalyzedSignal, weights: WeightsConfig) -> SignalMultipliers:
    """The six multipliers applied to one signal's quantitative score."""
    ctx = signal.qualitative_context
    ctx_tables = weights.context_multipliers
    return SignalMultipliers(
        urgency=_lookup(ctx_tables.urgency, ctx.urgency),
        specificity=_lookup(ctx_tables.specificity, ctx.specificity),
        buying_stage=_lookup(ctx_tables.buying_stage, ctx.buying_stage),
        false_positive_risk=_lookup(ctx_tables.false_positive_risk, ctx.false_positive_risk),
        recency=1.0 + (signal.temporal_factors.recency - 0.5) * 0.4,
        velocity=_lookup(weights.temporal_multipliers.velocity, signal.temporal_factors.velocity),
    )


def contextual_score(signal: AnalyzedSignal, multipliers: SignalMultipliers) -> int:
    """Quantitative score times every multiplier, clamped and rounded."""
    raw = (
        signal.quantitative_score
        * multipliers.urgency
        * multipliers.specificity
        * multipliers.buying_stage
        * multipliers.false_positive_risk
        * multipliers.recency
        * multipliers.velocity
    )
    return round_half_up(_clamp(raw))


def score_signals(
    signals: Sequence[AnalyzedSignal],
    weights: WeightsConfig,
) -> tuple[list[SignalBreakdown], int]:
    """Per-signal breakdown plus the weighted-average signal component."""
    breakdown: list[SignalBreakdown] = []
    for index, signal in enumerate(signals):
        multipliers = signal_multipliers(signal, weights)
        ctx = signal.qualitative_context
        breakdown.append(
            SignalBreakdown(
                signal=signal.type,
                index=index,
                weight=round_half_up(weights.base_weight(signal.type) * 100),
                base_score=signal.quantitative_score,
                score=contextual_score(signal, multipliers),
                multipliers=multipliers,
                reasoning=signal_reasoning(signal),
                extracted_context=ExtractedContext(
                    pain_points=list(ctx.pain_points),
                    urgency=ctx.urgency,
                    specificity=ctx.specificity,
                    buying_stage=ctx.buying_stage,
                ),
            )
        )

    total_weight = sum(b.weight for b in breakdown)
    if total_weight <= 0:
        return breakdown, 0
    weighted = sum(b.score * b.weight for b in breakdown) / total_weight
    return breakdown, round_half_up(weighted)


def signal_reasoning(signal: AnalyzedSignal) -> str:
    """Short explanation of why one signal scored the way it did."""
    reasons: list[str] = []
    base = signal.quantitative_score
    if base >= 80:
        reasons.append("High-value signal type")
    elif base >= 60:
        reasons.append("Moderate-value signal")
    else:
        reasons.append("Low-value signal type")

    ctx = signal.qualitative_context
    if ctx.pain_points:
        reasons.append(f"Explicit pain points: {', '.join(ctx.pain_points[:2])}")
    if ctx.urgency == Urgency.HIGH:
        reasons.append("High urgency indicators")
    if ctx.specificity == Specificity.HIGH:
        reasons.append("Highly specific requirements mentioned")
    if ctx.buying_stage in (BuyingStage.DECISION, BuyingStage.CONSIDERATION):
        reasons.append(f"Buyer is in {ctx.buying_stage} stage")

    temporal = signal.temporal_factors
    if temporal.recency > 0.8:
        reasons.append("Very recent signal")
    if temporal.velocity == Velocity.INCREASING:
        reasons.append("Increasing engagement velocity")
    if temporal.frequency > 2:
        reasons.append(f"Repeated signal ({temporal.frequency}x)")

    return ". ".join(reasons)


# ── Pattern and fit components ────────────────────────────────────────────────

def pattern_component(patterns: Sequence[MatchedPattern]) -> int:
    """Confidence-weighted historical conversion of the matched patterns."""
    total_confidence = sum(p.confidence for p in patterns)
    if not patterns or total_confidence <= 0:
        return NEUTRAL_COMPONENT
    weighted = sum(
        p.historical_conversion * p.confidence * (p.weight / 100.0) for p in patterns
    )
    return round_half_up(_clamp(weighted / total_confidence))


def company_size_category(company_size: Optional[str]) -> str:
    """Bucket a company-size label into smb / midmarket / enterprise / other."""
    if not company_size:
        return "other"
    label = company_size.strip()
    if label in _COMPANY_SIZE_CATEGORIES:
        return _COMPANY_SIZE_CATEGORIES[label]
    match = _LEADING_NUMBER.search(label)
    if match is None:
        return "other"
    employees = int(match.group(0).replace(",", ""))
    if employees <= 50:
        return "smb"
    if employees < 1000:
        return "midmarket"
    return "enterprise"


def fit_component(prospect: Prospect, weights: WeightsConfig) -> int:
    """Prospect-fit score from company size, industry and role."""
    fit = float(NEUTRAL_COMPONENT)
    multipliers = weights.prospect_fit_multipliers

    if prospect.company_size:
        category = company_size_category(prospect.company_size)
        fit *= multipliers.company_size.get(category, 1.0)

    if prospect.industry:
        industry = prospect.industry.lower()
        if "saas" in industry or "software" in industry:
            fit *= multipliers.industry.get("saas", 1.0)
        elif "tech" in industry:
            fit *= multipliers.industry.get("technology", 1.0)

    if prospect.role:
        role = prospect.role.lower()
        if any(r in role for r in DECISION_MAKER_ROLES):
            fit *= DECISION_MAKER_BOOST
        elif "manager" in role:
            fit *= MANAGER_BOOST

    return min(100, round_half_up(fit))


# ── Bands ─────────────────────────────────────────────────────────────────────

def calculate_confidence(signal_count: int, pattern_count: int) -> ConfidenceLevel:
    completeness = min(1.0, signal_count / 5)
    if (
        signal_count >= 6
        or (signal_count >= 5 and pattern_count >= 1)
        or (signal_count >= 3 and pattern_count >= 1 and completeness >= 0.8)
    ):
        return ConfidenceLevel.HIGH
    if signal_count < 3 and pattern_count == 0:
        return ConfidenceLevel.LOW
    return ConfidenceLevel.MEDIUM


def determine_priority(quality_score: int, false_positive_detected: bool) -> PriorityLevel:
    if false_positive_detected:
        return PriorityLevel.IGNORE
    if quality_score >= 85:
        return PriorityLevel.URGENT
    if quality_score >= 70:
        return PriorityLevel.HIGH
    if quality_score >= 50:
        return PriorityLevel.MEDIUM
    if quality_score >= 30:
        return PriorityLevel.LOW
    return PriorityLevel.IGNORE


def score_interpretation(score: float) -> ScoreInterpretation:
    if score >= 85:
        return ScoreInterpretation(
            "Exceptional",
            "High-quality signal cluster. Immediate action recommended.",
            "Drop everything and reach out within 24 hours",
        )
    if score >= 70:
        return ScoreInterpretation(
            "Strong",
            "Strong signals with good context. High priority follow-up.",
            "Prioritize personalized outreach within 48 hours",
        )
    if score >= 50:
        return ScoreInterpretation(
            "Moderate",
            "Moderate quality. Monitor for additional signals.",
            "Add to watchlist, wait for confirming signals",
        )
    if score >= 30:
        return ScoreInterpretation(
            "Weak",
            "Weak signals or high false positive risk. Low priority.",
            "Add to nurture campaign, do not pursue actively",
        )
    return ScoreInterpretation(
        "Poor",
        "Likely noise. Do not pursue unless new signals emerge.",
        "Ignore or remove from active prospecting",
    )


def _overall_reasoning(
    breakdown: Sequence[SignalBreakdown],
    patterns: Sequence[MatchedPattern],
    quality_score: int,
) -> str:
    parts: list[str] = []
    top = sorted(breakdown, key=lambda b: b.score, reverse=True)[:3]
    if top:
        parts.append(f"Top signals: {', '.join(str(b.signal) for b in top)}")
    lead = primary_pattern(patterns)
    if lead is not None:
        parts.append(
            f'Matched pattern: "{lead.name}" '
            f"({lead.historical_conversion:g}% historical conversion)"
        )
    if quality_score >= 85:
        parts.append("Exceptionally high-quality signal cluster indicating strong buying intent")
    elif quality_score >= 70:
        parts.append("Strong signals with good context and conversion potential")
    elif quality_score >= 50:
        parts.append("Moderate quality signals - monitor for additional confirmation")
    else:
        parts.append("Weak signals or high false positive risk - low priority")
    return ". ".join(parts)


# ── Entry point ───────────────────────────────────────────────────────────────

def calculate_quality_score(
    signals: Sequence[AnalyzedSignal],
    patterns: Sequence[MatchedPattern],
    prospect: Prospect,
    weights: WeightsConfig = DEFAULT_WEIGHTS,
) -> QualityScoreResult:
    """Fuse the three components into a ``QualityScoreResult``.

    Args:
        signals: Enriched signals, in request order.
        patterns: Matched patterns, strongest first.
        prospect: The prospect being evaluated.
        weights: Weight tables (defaults if omitted).
    """
    breakdown, signal_score = score_signals(signals, weights)
    pattern_score = pattern_component(patterns)
    fit_score = fit_component(prospect, weights)

    sw = weights.scoring_weights
    quality_score = round_half_up(
        _clamp(
            signal_score * sw.individual_signals
            + pattern_score * sw.pattern_matching
            + fit_score * sw.prospect_fit
        )
    )

    confidence = calculate_confidence(len(signals), len(patterns))
    false_positive = detect_false_positive(patterns) is not None
    priority = determine_priority(quality_score, false_positive)

    logger.info(
        "Quality score calculated | score=%d confidence=%s priority=%s "
        "(signals=%d patterns=%d fit=%d)",
        quality_score, confidence, priority, signal_score, pattern_score, fit_score,
    )
    return QualityScoreResult(
        quality_score=quality_score,
        confidence=confidence,
        priority_level=priority,
        breakdown=breakdown,
        patterns=list(patterns),
        reasoning=_overall_reasoning(breakdown, patterns, quality_score),
        components=ScoreComponents(
            signal_score=signal_score,
            pattern_score=pattern_score,
            fit_score=fit_score,
        ),
        weights=ComponentWeights(
            signals=sw.individual_signals,
            patterns=sw.pattern_matching,
            fit=sw.prospect_fit,
        ),
    )


# ── Helpers ───────────────────────────────────────────────────────────────────

def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (72.5 → 73)."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))
