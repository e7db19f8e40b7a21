"""
Tests for intent_scorer/analysis/quantitative.py.

What we test
------------
score_signal() per type:
  - LinkedIn: action base scores, comment length adjustments, topic bonus.
  - Website: page tiers, duration bands, repeat-visit cap, bounce penalty,
    enterprise tier bonus, clamping to [0, 100].
  - Job change: seniority base, decision-maker role, days-in-role bands.
  - Content download: BOFU / MOFU / TOFU titles.
  - Email: reply, opened with/without click, calendar link.
  - Company news, hiring, tech stack and intent data tables.
  - A type without a rule scores a neutral 50 and logs a warning.
"""

from __future__ import annotations

import logging

import pytest

from intent_scorer.analysis.quantitative import NEUTRAL_SCORE, is_bofu_asset, score_signal
from intent_scorer.models.signal import Signal


class TestLinkedInEngagement:
    @pytest.mark.parametrize(
        "action, expected",
        [("commented", 85.0), ("share", 75.0), ("connection_request", 70.0),
         ("follow", 40.0), ("liked", 30.0), ("viewed", 50.0)],
    )
    def test_action_base(self, make_signal, action, expected):
        assert score_signal(make_signal("linkedin_engagement", action=action)) == expected

    def test_long_comment_bonus(self, make_signal):
        s = make_signal("linkedin_engagement", action="commented", content="x" * 250)
        assert score_signal(s) == 95.0

    def test_short_comment_penalty(self, make_signal):
        s = make_signal("linkedin_engagement", action="commented", content="Nice post!")
        assert score_signal(s) == 70.0

    def test_relevant_topic_bonus(self, make_signal):
        s = make_signal(
            "linkedin_engagement", action="liked", metadata={"postTopic": "Sales Productivity"},
        )
        assert score_signal(s) == 35.0


class TestWebsiteVisit:
    def test_pricing_page_base(self, make_signal):
        assert score_signal(make_signal(page="/pricing")) == 75.0

    def test_page_tiers(self, make_signal):
        assert score_signal(make_signal(page="/features/reporting")) == 55.0
        assert score_signal(make_signal(page="/blog/post")) == 25.0
        assert score_signal(make_signal(page="/jobs")) == 40.0

    def test_duration_bands(self, make_signal):
        assert score_signal(make_signal(page="/pricing", duration=400)) == 90.0
        assert score_signal(make_signal(page="/pricing", duration=150)) == 85.0
        assert score_signal(make_signal(page="/pricing", duration=90)) == 80.0
        assert score_signal(make_signal(page="/pricing", duration=10)) == 65.0

    def test_repeat_visit_bonus_capped(self, make_signal):
        assert score_signal(make_signal(page="/jobs", visit_number=2)) == 50.0
        assert score_signal(make_signal(page="/jobs", visit_number=9)) == 60.0

    def test_first_visit_no_bonus(self, make_signal):
        assert score_signal(make_signal(page="/jobs", visit_number=1)) == 40.0

    def test_bounce_penalty_and_floor(self, make_signal):
        s = make_signal(page="/blog", duration=15, bounce_rate=0.9)
        # 25 - 10 - 20 → clamped to 0
        assert score_signal(s) == 0.0

    def test_enterprise_tier_bonus_and_cap(self, make_signal):
        s = make_signal(
            page="/pricing", duration=400, visit_number=4, metadata={"tier_viewed": "enterprise"},
        )
        assert score_signal(s) == 100.0


class TestJobChange:
    def test_sweet_spot_decision_maker(self, make_signal):
        s = make_signal(
            "job_change", to_role="VP of Sales", days_in_role=45,
            metadata={"seniorityIncrease": True},
        )
        # 65 + 15 + 20
        assert score_signal(s) == 100.0

    def test_long_tenure_penalty(self, make_signal):
        s = make_signal("job_change", to_role="Account Executive", days_in_role=400)
        assert score_signal(s) == 40.0

    def test_growth_stage_bonus(self, make_signal):
        s = make_signal("job_change", days_in_role=10, metadata={"companyStage": "series_b"})
        assert score_signal(s) == 65.0


class TestContentDownload:
    @pytest.mark.parametrize(
        "asset, expected",
        [("Enterprise Implementation Guide", 85.0), ("Customer Case Study", 70.0),
         ("State of Sales Report", 50.0), ("Webinar Recording", 60.0)],
    )
    def test_funnel_tiers(self, make_signal, asset, expected):
        assert score_signal(make_signal("content_download", asset=asset)) == expected

    def test_is_bofu_asset(self):
        assert is_bofu_asset("CRM Migration Checklist")
        assert not is_bofu_asset("Top 10 Sales Tips")


class TestEmailInteraction:
    def test_reply(self, make_signal):
        assert score_signal(make_signal("email_interaction", action="reply")) == 95.0

    def test_open_with_and_without_click(self, make_signal):
        assert score_signal(make_signal("email_interaction", action="opened", clicked_link=True)) == 70.0
        assert score_signal(make_signal("email_interaction", action="opened")) == 25.0

    def test_calendar_link_overrides(self, make_signal):
        s = make_signal("email_interaction", action="clicked", metadata={"linkType": "calendar"})
        assert score_signal(s) == 90.0


class TestOtherTypes:
    def test_series_funding_bonus(self, make_signal):
        s = make_signal("company_news", news_type="funding", details="Raised a Series B")
        assert score_signal(s) == 85.0

    def test_unknown_news_type(self, make_signal):
        assert score_signal(make_signal("company_news", news_type="award")) == 40.0

    def test_hiring_revenue_department(self, make_signal):
        s = make_signal("hiring_signals", metadata={"department": "sales", "rolesCount": 6})
        assert score_signal(s) == 90.0

    def test_tech_stack_removed_crm(self, make_signal):
        s = make_signal("tech_stack_change", metadata={"category": "CRM", "action": "removed"})
        assert score_signal(s) == 95.0

    def test_intent_data(self, make_signal):
        s = make_signal("intent_data", metadata={"intent": "competitor_comparison"})
        assert score_signal(s) == 80.0
        assert score_signal(make_signal("intent_data")) == 50.0


class TestUnknownType:
    def test_neutral_score_and_warning(self, as_of, caplog):
        signal = Signal.model_construct(type="podcast_listen", timestamp=as_of)
        with caplog.at_level(logging.WARNING, logger="intent_scorer.analysis.quantitative"):
            assert score_signal(signal) == NEUTRAL_SCORE == 50.0
        assert "Unknown signal type" in caplog.text
        assert "podcast_listen" in caplog.text
