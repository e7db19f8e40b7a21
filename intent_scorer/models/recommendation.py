"""
Scoring and recommendation output models.

``QualityScoreResult`` is produced by the quality scorer; ``RecommendedAction``
by the action engine. ``AnalysisResult`` is the merged record returned by
``run_pipeline()`` and consumed by the CLI (or any API layer built on top).

Everything except ``AnalysisResult.metadata`` is a deterministic function
of (signals, prospect, config, reference time): two runs with the same
inputs and the rule-based enrichment strategy dump to identical JSON once
``metadata`` is excluded.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from intent_scorer.models.pattern import MatchedPattern
from intent_scorer.taxonomy.signal_taxonomy import (
    BuyingStage,
    ConfidenceLevel,
    OutreachChannel,
    OutreachTiming,
    PriorityLevel,
    SignalType,
    Specificity,
    Urgency,
)

_MODEL_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

ANALYSIS_VERSION = "1.0.0"


# ── Quality score ─────────────────────────────────────────────────────────────


class SignalMultipliers(BaseModel):
    model_config = _MODEL_CONFIG

    urgency: float
    specificity: float
    buying_stage: float
    false_positive_risk: float
    recency: float
    velocity: float


class ExtractedContext(BaseModel):
    model_config = _MODEL_CONFIG

    pain_points: list[str] = Field(default_factory=list)
    urgency: Optional[Urgency] = None
    specificity: Optional[Specificity] = None
    buying_stage: Optional[BuyingStage] = None


class SignalBreakdown(BaseModel):
    """Contribution of one signal to the fused signal score.

    Attributes:
        signal: Signal type.
        index: Position of the signal in the request.
        weight: Per-type base weight expressed in percent.
        base_score: Quantitative score before context multipliers.
        score: Contextual score after multipliers, clamped to [0, 100].
        multipliers: The six multipliers applied.
        reasoning: Human-readable explanation.
        extracted_context: Context fields surfaced to the reader.
    """

    model_config = _MODEL_CONFIG

    signal: SignalType
    index: int
    weight: int
    base_score: float
    score: int = Field(ge=0, le=100)
    multipliers: SignalMultipliers
    reasoning: str
    extracted_context: ExtractedContext


class ScoreComponents(BaseModel):
    """Raw component scores fused into the quality score."""

    model_config = _MODEL_CONFIG

    signal_score: int = Field(ge=0, le=100)
    pattern_score: int = Field(ge=0, le=100)
    fit_score: int = Field(ge=0, le=100)


class ComponentWeights(BaseModel):
    model_config = _MODEL_CONFIG

    signals: float
    patterns: float
    fit: float


class QualityScoreResult(BaseModel):
    """Fused 0–100 score, confidence band and priority band for one request."""

    model_config = _MODEL_CONFIG

    quality_score: int = Field(ge=0, le=100)
    confidence: ConfidenceLevel
    priority_level: PriorityLevel
    breakdown: list[SignalBreakdown]
    patterns: list[MatchedPattern]
    reasoning: str
    components: ScoreComponents
    weights: ComponentWeights

    @property
    def false_positive_pattern(self) -> Optional[MatchedPattern]:
        return next((p for p in self.patterns if p.is_false_positive), None)


# ── Recommendation ────────────────────────────────────────────────────────────


class NextStep(BaseModel):
    model_config = _MODEL_CONFIG

    action: str
    timing: str
    priority: int


class ActionReasoning(BaseModel):
    model_config = _MODEL_CONFIG

    why_this_channel: str
    why_now: str
    why_this_angle: str


class RecommendedAction(BaseModel):
    """What to do next.

    For ``ignore``/``low`` priority only ``type`` (``monitor_and_enrich``)
    and the fixed ``next_steps`` are populated. For ``medium`` and above the
    channel, timing, angle and guard-rails are filled in.
    """

    model_config = _MODEL_CONFIG

    type: str
    channel: Optional[OutreachChannel] = None
    timing: Optional[OutreachTiming] = None
    priority: Optional[PriorityLevel] = None
    messaging_angle: Optional[str] = None
    pain_point_focus: Optional[str] = None
    suggested_message: Optional[str] = None
    reasoning: Optional[ActionReasoning] = None
    do_not_mention: list[str] = Field(default_factory=list)
    next_steps: list[NextStep] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)


class EstimatedOutcome(BaseModel):
    model_config = _MODEL_CONFIG

    conversion_probability: float = Field(ge=0.0, le=1.0)
    estimated_days_to_close: Optional[int] = None
    estimated_deal_value: Optional[str] = None
    confidence: ConfidenceLevel
    reasoning: str


class HistoricalWin(BaseModel):
    """Reference deal that followed the same signal pattern."""

    model_config = _MODEL_CONFIG

    company: str
    similarity_score: float = Field(ge=0.0, le=1.0)
    signal_pattern: str
    outcome: str
    days_to_close: Optional[int] = None
    deal_value: str


class AnalysisSummary(BaseModel):
    model_config = _MODEL_CONFIG

    summary: str
    key_insights: list[str] = Field(default_factory=list)


class AnalysisMetadata(BaseModel):
    """Run metadata. The only time-dependent part of an ``AnalysisResult``."""

    model_config = _MODEL_CONFIG

    generated_at: datetime
    analysis_version: str = ANALYSIS_VERSION
    enrichment_model: str
    signal_sources: list[SignalType]


# ── Merged result ─────────────────────────────────────────────────────────────


class AnalysisResult(BaseModel):
    """Merged ``QualityScoreResult`` + ``RecommendedAction`` record.

    Attributes:
        result_type: ``personalized_outreach``, ``monitor_only`` or ``no_action``.
        analysis: Summary and key insights; ``None`` on the monitor-only path.
        similar_historical_wins: Empty on the monitor-only path.
    """

    model_config = _MODEL_CONFIG

    quality_score: int = Field(ge=0, le=100)
    confidence: ConfidenceLevel
    priority_level: PriorityLevel
    result_type: str
    reasoning: str
    analysis: Optional[AnalysisSummary] = None
    signal_breakdown: list[SignalBreakdown]
    matched_patterns: list[MatchedPattern]
    components: ScoreComponents
    weights: ComponentWeights
    recommended_action: RecommendedAction
    similar_historical_wins: list[HistoricalWin] = Field(default_factory=list)
    estimated_outcome: EstimatedOutcome
    metadata: AnalysisMetadata

    @property
    def quality_result(self) -> QualityScoreResult:
        """Rebuild the ``QualityScoreResult`` view of this record."""
        return QualityScoreResult(
            quality_score=self.quality_score,
            confidence=self.confidence,
            priority_level=self.priority_level,
            breakdown=self.signal_breakdown,
            patterns=self.matched_patterns,
            reasoning=self.reasoning,
            components=self.components,
            weights=self.weights,
        )
