"""
Qualitative context enrichment.

Two interchangeable strategies implement ``ContextEnricher``:

rule_based        : RuleBasedEnricher, a keyword/heuristic extractor, no I/O.
anthropic_client  : AnthropicEnricher, a remote text-understanding service
                    reached over HTTP (httpx).

enricher          : build_enricher() picks a strategy from config;
                    enrich_signals() fans out one call per signal and merges
                    each result into its own AnalyzedSignal.
"""
