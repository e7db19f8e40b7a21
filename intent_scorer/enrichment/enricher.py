"""
Enrichment stage: strategy selection and per-signal fan-out.

``build_enricher`` picks the strategy named in ``[enrichment].provider``.
``enrich_signals`` enriches every analyzed signal independently on a
thread pool. A failed signal (``EnrichmentError``) is logged and keeps its
heuristic seed context; it never cancels or fails its siblings. Output
order always equals input order.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Optional, Sequence

from intent_scorer.enrichment.base import ContextEnricher, EnrichmentError, merge_context
from intent_scorer.enrichment.rule_based import RuleBasedEnricher
from intent_scorer.models.analysis import AnalyzedSignal
from intent_scorer.models.signal import Prospect

if TYPE_CHECKING:
    import httpx

    from intent_scorer.config import EnrichmentConfig

logger = logging.getLogger(__name__)

PROVIDERS = ("rule_based", "anthropic")


def build_enricher(
    config: "EnrichmentConfig",
    http_client: Optional["httpx.Client"] = None,
) -> ContextEnricher:
    """Construct the enrichment strategy selected by configuration.

    Raises:
        ValueError: If the provider is unknown, or is ``anthropic`` and the
            environment variable named by ``api_key_env`` is unset.
    """
    if config.provider == "rule_based":
        return RuleBasedEnricher()

    if config.provider == "anthropic":
        api_key = os.environ.get(config.api_key_env, "")
        if not api_key:
            raise ValueError(
                f"{config.api_key_env} must be set when [enrichment].provider = 'anthropic'. "
                f"Set it in .env or use provider = 'rule_based'."
            )
        from intent_scorer.enrichment.anthropic_client import AnthropicEnricher

        return AnthropicEnricher(
            api_key=api_key,
            model=config.model,
            max_retries=config.max_retries,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
            http_client=http_client,
        )

    raise ValueError(f"Unknown enrichment provider {config.provider!r}; expected one of {PROVIDERS}.")


def enrich_signal(
    analyzed: AnalyzedSignal,
    prospect: Prospect,
    enricher: ContextEnricher,
    index: int = 0,
) -> AnalyzedSignal:
    """Enrich one signal; on ``EnrichmentError`` return it unchanged."""
    try:
        response = enricher.enrich(analyzed.raw_data, prospect)
    except EnrichmentError as exc:
        logger.error(
            "Enrichment failed for signal %d (%s), keeping heuristic context: %s",
            index, analyzed.type, exc,
        )
        return analyzed
    return analyzed.model_copy(
        update={"qualitative_context": merge_context(analyzed.qualitative_context, response)}
    )


def enrich_signals(
    analyzed: Sequence[AnalyzedSignal],
    prospect: Prospect,
    enricher: ContextEnricher,
    max_workers: int = 4,
) -> list[AnalyzedSignal]:
    """Enrich every signal independently; result order equals input order.

    Args:
        analyzed: Output of the analysis stage.
        prospect: Prospect the signals belong to.
        enricher: Strategy used for every signal.
        max_workers: Thread pool size; 1 runs sequentially on the caller's thread.
    """
    logger.info("Enriching %d signals with %s", len(analyzed), enricher.name)
    if max_workers <= 1 or len(analyzed) <= 1:
        enriched = [enrich_signal(a, prospect, enricher, i) for i, a in enumerate(analyzed)]
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(analyzed))) as pool:
            futures = [
                pool.submit(enrich_signal, a, prospect, enricher, i)
                for i, a in enumerate(analyzed)
            ]
            enriched = [f.result() for f in futures]

    failed = sum(1 for a in enriched if not a.qualitative_context.is_enriched)
    if failed:
        logger.warning("%d of %d signals kept heuristic-only context", failed, len(enriched))
    logger.info("Signal enrichment complete")
    return enriched
