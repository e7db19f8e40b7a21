"""
Scoring pipeline orchestration.

``run_pipeline`` executes the stages strictly in sequence; each stage
consumes the full output of the previous one:

  1. Analyze:   quantitative score + temporal factors + urgency seed.
  2. Enrich:    per-signal qualitative context (fan-out; failures
                 keep the heuristic seed).
  3. Match:     declarative pattern library against the enriched set.
  4. Score:     signal / pattern / fit fusion, confidence, priority.
  5. Recommend: monitor-only or outreach recommendation.

Failure isolation
-----------------
- Unknown signal type:   neutral score 50, warning, pipeline continues.
- Enrichment failure:    per signal, logged; siblings unaffected.
- Config file failure:   handled when the ``ScoringContext`` is built
                         (built-in defaults, one warning).

Everything the pipeline reads comes from the injected ``ScoringContext``;
nothing is cached between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Sequence

from intent_scorer.analysis.signal_analyzer import analyze_signals
from intent_scorer.analysis.temporal import DEFAULT_HALF_LIFE_DAYS
from intent_scorer.enrichment.base import ContextEnricher
from intent_scorer.enrichment.enricher import build_enricher, enrich_signals
from intent_scorer.enrichment.rule_based import RuleBasedEnricher
from intent_scorer.models.pattern import Pattern
from intent_scorer.models.recommendation import AnalysisMetadata, AnalysisResult
from intent_scorer.models.signal import AnalysisOptions, AnalysisRequest, Prospect, Signal
from intent_scorer.patterns.library import DEFAULT_PATTERNS, load_patterns
from intent_scorer.patterns.matcher import identify_patterns
from intent_scorer.recommendations.action_engine import (
    MessageComposer,
    generate_action_recommendation,
)
from intent_scorer.scoring.quality import calculate_quality_score
from intent_scorer.scoring.weights import DEFAULT_WEIGHTS, WeightsConfig, load_weights
from intent_scorer.utils.time_utils import utcnow

if TYPE_CHECKING:
    import httpx

    from intent_scorer.config import AppConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringContext:
    """Read-only configuration injected into every pipeline run.

    Attributes:
        patterns:       Pattern library, in library order.
        weights:        Weight tables for the quality scorer.
        enricher:       Enrichment strategy shared by all runs.
        half_life_days: Recency half-life.
        max_workers:    Enrichment thread pool size.
    """

    patterns: tuple[Pattern, ...] = DEFAULT_PATTERNS
    weights: WeightsConfig = DEFAULT_WEIGHTS
    enricher: ContextEnricher = field(default_factory=RuleBasedEnricher)
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS
    max_workers: int = 4

    @classmethod
    def from_config(
        cls,
        config: "AppConfig",
        http_client: Optional["httpx.Client"] = None,
    ) -> "ScoringContext":
        """Load pattern and weight files and build the enrichment strategy.

        Raises:
            ValueError: If the remote strategy is selected without an API key.
        """
        scoring = config.scoring
        context = cls(
            patterns=load_patterns(config.resolve_path(scoring.patterns_file)),
            weights=load_weights(config.resolve_path(scoring.weights_file)),
            enricher=build_enricher(config.enrichment, http_client=http_client),
            half_life_days=scoring.recency_half_life_days,
            max_workers=config.enrichment.max_workers,
        )
        logger.info(
            "Scoring context ready | patterns=%d enrichment=%s half_life=%.1fd",
            len(context.patterns), context.enricher.name, context.half_life_days,
        )
        return context

    def close(self) -> None:
        self.enricher.close()


def run_pipeline(
    signals: Sequence[Signal],
    prospect: Prospect,
    options: Optional[AnalysisOptions] = None,
    context: Optional[ScoringContext] = None,
    as_of: Optional[datetime] = None,
    composer: Optional[MessageComposer] = None,
) -> AnalysisResult:
    """Score one signal cluster and recommend the next action.

    Args:
        signals: Validated signals (at least one; enforced by ``AnalysisRequest``).
        prospect: The prospect the signals belong to.
        options: Request switches; defaults to ``AnalysisOptions()``.
        context: Injected configuration; defaults to built-in patterns and
            weights with rule-based enrichment.
        as_of: Reference time for recency, urgency and time labels
            (default: now). Pass a fixed value for reproducible output.
        composer: Optional outreach message composer.

    Returns:
        Merged quality score and recommendation record.
    """
    context = context or ScoringContext()
    options = options or AnalysisOptions()
    as_of = as_of or utcnow()

    logger.info(
        "Pipeline start | company=%s signals=%d enrichment=%s",
        prospect.company, len(signals), context.enricher.name,
    )

    analyzed = analyze_signals(signals, context.half_life_days, as_of)
    enriched = enrich_signals(analyzed, prospect, context.enricher, context.max_workers)
    patterns = identify_patterns(enriched, context.patterns)
    quality = calculate_quality_score(enriched, patterns, prospect, context.weights)

    metadata = AnalysisMetadata(
        generated_at=utcnow(),
        enrichment_model=context.enricher.name,
        signal_sources=list(dict.fromkeys(s.type for s in enriched)),
    )
    result = generate_action_recommendation(
        quality, enriched, prospect, metadata, options=options, composer=composer,
    )

    logger.info(
        "Pipeline complete | score=%d priority=%s confidence=%s patterns=%d",
        result.quality_score, result.priority_level, result.confidence,
        len(result.matched_patterns),
    )
    return result


def analyze_request(
    request: AnalysisRequest,
    context: Optional[ScoringContext] = None,
    as_of: Optional[datetime] = None,
    composer: Optional[MessageComposer] = None,
) -> AnalysisResult:
    """Run the pipeline on a validated ``AnalysisRequest`` envelope."""
    return run_pipeline(
        request.signals,
        request.prospect,
        options=request.options,
        context=context,
        as_of=as_of,
        composer=composer,
    )
