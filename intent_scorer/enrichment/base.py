"""
Enrichment contract shared by every strategy.

``EnrichmentResponse`` is the exact shape a strategy must return for one
signal. A remote reply that does not validate against it is a hard
failure for that signal (``EnrichmentError``), never a partial result.

``merge_context`` is the pure step that combines the heuristic seed
context built by the analyzer with an enrichment response. It returns a
new ``QualitativeContext``; neither input is modified.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from intent_scorer.models.analysis import QualitativeContext
from intent_scorer.models.signal import Prospect, Signal
from intent_scorer.taxonomy.signal_taxonomy import (
    BuyingStage,
    FalsePositiveRisk,
    Sentiment,
    Specificity,
    Urgency,
)


class EnrichmentError(RuntimeError):
    """Enrichment of one signal failed (transport, timeout, malformed reply)."""


class EnrichmentResponse(BaseModel):
    """Validated qualitative reading of one signal."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    pain_points: list[str]
    urgency: Urgency
    specificity: Specificity
    buying_stage: BuyingStage
    sentiment: Sentiment
    false_positive_risk: FalsePositiveRisk
    confidence: float = Field(ge=0.0, le=1.0)
    key_insights: list[str] = Field(default_factory=list)
    urgency_reasoning: Optional[str] = None
    specificity_reasoning: Optional[str] = None
    false_positive_reasons: list[str] = Field(default_factory=list)


class ContextEnricher(ABC):
    """Capability interface: ``enrich(signal, prospect) -> EnrichmentResponse``.

    Implementations must be safe to call from several threads at once and
    must raise ``EnrichmentError`` (never anything else) for an expected
    per-signal failure.
    """

    #: Identifier reported in result metadata.
    name: str = "unknown"

    @abstractmethod
    def enrich(self, signal: Signal, prospect: Prospect) -> EnrichmentResponse:
        ...

    def close(self) -> None:
        """Release resources held by the strategy (no-op by default)."""


def merge_context(
    seed: QualitativeContext,
    enrichment: EnrichmentResponse,
) -> QualitativeContext:
    """Overlay an enrichment response on the heuristic seed context."""
    merged = seed.model_dump()
    merged.update(
        sentiment=enrichment.sentiment,
        pain_points=list(enrichment.pain_points),
        urgency=enrichment.urgency,
        specificity=enrichment.specificity,
        buying_stage=enrichment.buying_stage,
        false_positive_risk=enrichment.false_positive_risk,
        confidence=enrichment.confidence,
        key_insights=list(enrichment.key_insights),
    )
    return QualitativeContext.model_validate(merged)
