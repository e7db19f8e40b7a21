"""
Per-signal analysis models.

``AnalyzedSignal`` couples an inbound ``Signal`` (kept as ``raw_data``) with
everything the pipeline derives from it:

  - ``quantitative_score`` : rule-table score, 0–100.
  - ``temporal_factors``   : recency / frequency / velocity.
  - ``qualitative_context``: heuristic seed (urgency only) before
    enrichment, the full context afterwards.

All three models are frozen. The enrichment stage never mutates an
``AnalyzedSignal``; it builds a new one whose context is the pure merge of
the seed and the enrichment result (see ``merge_context``).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from intent_scorer.models.signal import Signal
from intent_scorer.taxonomy.signal_taxonomy import (
    BuyingStage,
    FalsePositiveRisk,
    Sentiment,
    SignalType,
    Specificity,
    Urgency,
    Velocity,
)

_MODEL_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class TemporalFactors(BaseModel):
    """Time-derived features of one signal.

    Attributes:
        recency: Exponential-decay freshness in [0, 1] (0.5 at one half-life).
        frequency: Count of same-type signals in the request; always >= 1.
        velocity: Trend of same-type signal arrival rate.
        timeframe: Human label, e.g. ``"3 hours ago"`` or ``"2 weeks ago"``.
        days_ago: Whole days since the signal (0 when unknown).
        hours_ago: Whole hours since the signal (0 when unknown).
        is_recent: Signal is less than 7 days old.
        is_very_recent: Signal is less than 48 hours old.
    """

    model_config = _MODEL_CONFIG

    recency: float = Field(ge=0.0, le=1.0)
    frequency: int = Field(ge=1)
    velocity: Velocity = Velocity.STABLE
    timeframe: str = "unknown"
    days_ago: int = 0
    hours_ago: int = 0
    is_recent: bool = False
    is_very_recent: bool = False


class QualitativeContext(BaseModel):
    """Qualitative reading of a signal.

    Before enrichment only ``urgency`` is populated (timing heuristic);
    every other field is ``None`` / empty and the scorer treats a missing
    dimension as a neutral 1.0 multiplier.
    """

    model_config = _MODEL_CONFIG

    sentiment: Optional[Sentiment] = None
    pain_points: list[str] = Field(default_factory=list)
    urgency: Optional[Urgency] = None
    specificity: Optional[Specificity] = None
    buying_stage: Optional[BuyingStage] = None
    false_positive_risk: Optional[FalsePositiveRisk] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    key_insights: list[str] = Field(default_factory=list)

    @property
    def is_enriched(self) -> bool:
        """True once an enrichment result has been merged in."""
        return self.confidence is not None


class AnalyzedSignal(BaseModel):
    """A ``Signal`` plus its derived quantitative, temporal and qualitative data."""

    model_config = _MODEL_CONFIG

    raw_data: Signal
    quantitative_score: float = Field(ge=0.0, le=100.0)
    temporal_factors: TemporalFactors
    qualitative_context: QualitativeContext = Field(default_factory=QualitativeContext)

    @property
    def type(self) -> SignalType:
        return self.raw_data.type
