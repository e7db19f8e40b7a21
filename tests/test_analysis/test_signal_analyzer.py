"""
Tests for intent_scorer/analysis/signal_analyzer.py.

What we test
------------
  - Output order and length equal the input.
  - Frequency counts same-type signals; velocity uses same-type timestamps.
  - The pre-enrichment context carries only the urgency seed.
  - Time context fields are filled from the reference time.
"""

from __future__ import annotations

from intent_scorer.analysis.signal_analyzer import analyze_signals
from intent_scorer.taxonomy.signal_taxonomy import SignalType, Urgency, Velocity


class TestAnalyzeSignals:
    def test_preserves_order(self, make_signal, as_of):
        signals = [
            make_signal("linkedin_engagement", action="liked"),
            make_signal("website_visit", page="/pricing"),
            make_signal("job_change", days_in_role=30),
        ]
        analyzed = analyze_signals(signals, as_of=as_of)
        assert [a.type for a in analyzed] == [
            SignalType.LINKEDIN_ENGAGEMENT, SignalType.WEBSITE_VISIT, SignalType.JOB_CHANGE,
        ]
        assert [a.raw_data for a in analyzed] == signals

    def test_frequency_and_velocity_per_type(self, make_signal, as_of):
        signals = [
            make_signal(page="/pricing", hours_ago=54),
            make_signal(page="/pricing", hours_ago=6),
            make_signal(page="/pricing", hours_ago=0),
            make_signal("linkedin_engagement", action="liked"),
        ]
        analyzed = analyze_signals(signals, as_of=as_of)
        assert [a.temporal_factors.frequency for a in analyzed] == [3, 3, 3, 1]
        assert analyzed[0].temporal_factors.velocity == Velocity.INCREASING
        assert analyzed[3].temporal_factors.velocity == Velocity.STABLE

    def test_seed_context_is_urgency_only(self, make_signal, as_of):
        (analyzed,) = analyze_signals([make_signal(hours_ago=3)], as_of=as_of)
        ctx = analyzed.qualitative_context
        assert ctx.urgency == Urgency.HIGH
        assert ctx.sentiment is None
        assert ctx.pain_points == []
        assert not ctx.is_enriched

    def test_half_life_is_applied(self, make_signal, as_of):
        (analyzed,) = analyze_signals([make_signal(hours_ago=72)], half_life_days=3.0, as_of=as_of)
        assert analyzed.temporal_factors.recency == 0.5
        assert analyzed.temporal_factors.days_ago == 3
        assert analyzed.temporal_factors.timeframe == "3 days ago"
