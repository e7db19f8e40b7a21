"""
Tests for intent_scorer/patterns/matcher.py.

What we test
------------
signal_matches():
  - Type, action, page substring and min score constraints.
  - Upper bounds (durationMax, daysInRoleMax) only reject present values;
    lower bounds (bounceRateMin, daysInRoleMin) require a value.
  - painPoint, bofu, noComment, clickedLink, category, metadataEquals.

match_pattern():
  - Every required criterion must hold; minVisits counts matching signals.
  - Optional criteria add 10 each to matchScore and never gate a match.
  - Confidence is damped by the number of supporting signals.

identify_patterns():
  - Sorted by confidence * conversion, ties keep library order.
  - False-positive flag is carried onto the match.
"""

from __future__ import annotations

import pytest

from intent_scorer.models.analysis import QualitativeContext
from intent_scorer.models.pattern import Pattern, PatternCriterion
from intent_scorer.patterns.library import DEFAULT_PATTERNS
from intent_scorer.patterns.matcher import (
    detect_false_positive,
    identify_patterns,
    match_pattern,
    primary_pattern,
    signal_matches,
)


def _pattern(pid: str, required, optional=(), conversion=50.0, confidence=0.8, **extra) -> Pattern:
    return Pattern(
        id=pid,
        name=pid.replace("_", " ").title(),
        description=f"{pid} description",
        required_signals=[PatternCriterion(**c) for c in required],
        optional_signals=[PatternCriterion(**c) for c in optional],
        historical_conversion=conversion,
        confidence=confidence,
        **extra,
    )


class TestSignalMatches:
    def test_type_mismatch(self, make_analyzed):
        assert not signal_matches(make_analyzed("website_visit"), PatternCriterion(type="job_change"))

    def test_page_and_action(self, make_analyzed):
        visit = make_analyzed(page="/pricing/enterprise")
        assert signal_matches(visit, PatternCriterion(type="website_visit", page_includes="pricing"))
        assert not signal_matches(visit, PatternCriterion(type="website_visit", page_includes="demo"))
        comment = make_analyzed("linkedin_engagement", action="commented")
        assert not signal_matches(comment, PatternCriterion(type="linkedin_engagement", action="liked"))

    def test_min_score(self, make_analyzed):
        c = PatternCriterion(type="website_visit", min_score=70)
        assert signal_matches(make_analyzed(score=70), c)
        assert not signal_matches(make_analyzed(score=69.9), c)

    def test_duration_max_only_rejects_present_value(self, make_analyzed):
        c = PatternCriterion(type="website_visit", duration_max=60)
        assert signal_matches(make_analyzed(duration=30), c)
        assert signal_matches(make_analyzed(), c)
        assert not signal_matches(make_analyzed(duration=61), c)

    def test_bounce_rate_min_requires_value(self, make_analyzed):
        c = PatternCriterion(type="website_visit", bounce_rate_min=0.8)
        assert signal_matches(make_analyzed(bounce_rate=0.85), c)
        assert not signal_matches(make_analyzed(bounce_rate=0.5), c)
        assert not signal_matches(make_analyzed(), c)

    def test_days_in_role_window(self, make_analyzed):
        c = PatternCriterion(type="job_change", days_in_role_min=15, days_in_role_max=90)
        assert signal_matches(make_analyzed("job_change", days_in_role=15), c)
        assert signal_matches(make_analyzed("job_change", days_in_role=90), c)
        assert not signal_matches(make_analyzed("job_change", days_in_role=10), c)
        assert not signal_matches(make_analyzed("job_change", days_in_role=120), c)
        assert not signal_matches(make_analyzed("job_change"), c)

    def test_pain_point_requires_extracted_pain(self, make_analyzed):
        c = PatternCriterion(type="linkedin_engagement", pain_point=True)
        with_pain = make_analyzed(
            "linkedin_engagement", context=QualitativeContext(pain_points=["manual entry"]),
        )
        assert signal_matches(with_pain, c)
        assert not signal_matches(make_analyzed("linkedin_engagement"), c)

    def test_bofu_asset(self, make_analyzed):
        c = PatternCriterion(type="content_download", bofu=True)
        assert signal_matches(make_analyzed("content_download", asset="Security Whitepaper"), c)
        assert not signal_matches(make_analyzed("content_download", asset="Sales Ebook"), c)

    def test_no_comment(self, make_analyzed):
        c = PatternCriterion(type="linkedin_engagement", action="liked", no_comment=True)
        assert signal_matches(make_analyzed("linkedin_engagement", action="liked"), c)
        assert not signal_matches(
            make_analyzed("linkedin_engagement", action="liked", content="Agreed!"), c,
        )

    def test_clicked_link_false_accepts_missing(self, make_analyzed):
        c = PatternCriterion(type="email_interaction", clicked_link=False)
        assert signal_matches(make_analyzed("email_interaction", action="opened"), c)
        assert not signal_matches(
            make_analyzed("email_interaction", action="opened", clicked_link=True), c,
        )

    def test_category_by_metadata_or_title(self, make_analyzed):
        c = PatternCriterion(type="content_download", category="case_study")
        assert signal_matches(make_analyzed("content_download", asset="Acme Case Study"), c)
        assert signal_matches(
            make_analyzed("content_download", asset="Acme", metadata={"category": "case_study"}), c,
        )
        assert not signal_matches(make_analyzed("content_download", asset="ROI Calculator"), c)

    def test_metadata_equals(self, make_analyzed):
        c = PatternCriterion(type="hiring_signals", metadata_equals={"department": "sales"})
        assert signal_matches(make_analyzed("hiring_signals", metadata={"department": "sales"}), c)
        assert not signal_matches(make_analyzed("hiring_signals", metadata={"department": "hr"}), c)


class TestMatchPattern:
    def test_min_visits_counts_signals(self, make_analyzed):
        p = _pattern("repeat", [{"type": "website_visit", "page_includes": "pricing", "min_visits": 3}])
        two = [make_analyzed(page="/pricing") for _ in range(2)]
        assert match_pattern(p, two) is None
        match = match_pattern(p, two + [make_analyzed(page="/pricing")])
        assert match is not None
        assert [ref.index for ref in match.signals] == [0, 1, 2]
        assert "Found 3 website_visit signals" in match.reasoning

    def test_missing_required_fails(self, make_analyzed):
        p = _pattern(
            "two_part",
            [{"type": "website_visit"}, {"type": "content_download"}],
        )
        assert match_pattern(p, [make_analyzed()]) is None

    def test_optional_bonus_and_confidence(self, make_analyzed):
        p = _pattern(
            "with_bonus",
            [{"type": "website_visit"}],
            optional=[{"type": "company_news"}, {"type": "job_change"}],
            confidence=0.8,
        )
        signals = [make_analyzed(), make_analyzed("company_news")]
        match = match_pattern(p, signals)
        assert match.match_score == pytest.approx(60.0)
        # 2 supporting signals out of 4 → 0.8 * 0.5
        assert match.confidence == pytest.approx(0.4)
        assert "Bonus: company_news signal found" in match.reasoning

    def test_match_score_not_clamped(self, make_analyzed):
        optional = [{"type": t} for t in (
            "company_news", "job_change", "hiring_signals", "intent_data", "content_download", "email_interaction",
        )]
        p = _pattern("many_bonuses", [{"type": "website_visit"}], optional=optional)
        signals = [make_analyzed()] + [make_analyzed(o["type"]) for o in optional]
        assert match_pattern(p, signals).match_score == pytest.approx(110.0)

    def test_full_strength_confidence(self, make_analyzed):
        p = _pattern("strong", [{"type": "website_visit", "min_visits": 2}], confidence=0.9)
        match = match_pattern(p, [make_analyzed() for _ in range(5)])
        assert match.confidence == pytest.approx(0.9)


class TestIdentifyPatterns:
    def test_sorted_by_expected_conversion(self, make_analyzed):
        low = _pattern("low", [{"type": "website_visit"}], conversion=20, confidence=0.9)
        high = _pattern("high", [{"type": "website_visit"}], conversion=80, confidence=0.9)
        matches = identify_patterns([make_analyzed()], [low, high])
        assert [m.pattern for m in matches] == ["high", "low"]
        assert primary_pattern(matches).pattern == "high"

    def test_ties_keep_library_order(self, make_analyzed):
        a = _pattern("a", [{"type": "website_visit"}])
        b = _pattern("b", [{"type": "website_visit"}])
        assert [m.pattern for m in identify_patterns([make_analyzed()], [a, b])] == ["a", "b"]

    def test_no_match(self, make_analyzed):
        matches = identify_patterns([make_analyzed("intent_data")], DEFAULT_PATTERNS)
        assert matches == []
        assert primary_pattern(matches) is None
        assert detect_false_positive(matches) is None

    def test_false_positive_pattern_flagged(self, make_analyzed):
        signals = [
            make_analyzed(page="/blog", duration=15, bounce_rate=0.9),
            make_analyzed("linkedin_engagement", action="liked"),
        ]
        matches = identify_patterns(signals, DEFAULT_PATTERNS)
        fp = detect_false_positive(matches)
        assert fp is not None
        assert fp.pattern == "competitor_researcher"
        assert fp.is_false_positive
        assert fp.weight < 0
        assert fp.match_score == pytest.approx(60.0)
        assert fp.confidence == pytest.approx(0.39)
