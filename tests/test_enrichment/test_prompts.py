"""
Tests for intent_scorer/enrichment/prompts.py.

What we test
------------
  - The prompt embeds the signal and prospect as camelCase JSON.
  - Guidance block is chosen by signal type (social, pricing, website,
    email, content, job change, generic).
  - The reply format lists the response keys.
"""

from __future__ import annotations

from intent_scorer.enrichment.prompts import build_extraction_prompt, signal_guidance


class TestSignalGuidance:
    def test_social_includes_comment(self, make_signal):
        s = make_signal("linkedin_engagement", action="commented", content="Need help ASAP")
        text = signal_guidance(s)
        assert "SOCIAL MEDIA" in text
        assert '"Need help ASAP"' in text
        assert "Engagement type: commented" in text

    def test_pricing_vs_generic_website(self, make_signal):
        assert "HIGH-INTENT" in signal_guidance(make_signal(page="/pricing", duration=95.0))
        assert "Visit duration (longer = higher intent): 95s" in signal_guidance(
            make_signal(page="/pricing", duration=95.0)
        )
        assert "WEBSITE VISIT" in signal_guidance(make_signal(page="/blog"))

    def test_other_types(self, make_signal):
        assert "Link clicked: no" in signal_guidance(make_signal("email_interaction", action="opened"))
        assert "Asset: ROI Guide" in signal_guidance(make_signal("content_download", asset="ROI Guide"))
        assert "Days in new role: 40" in signal_guidance(make_signal("job_change", days_in_role=40))
        assert "HIRING SIGNALS" in signal_guidance(make_signal("hiring_signals"))


class TestBuildExtractionPrompt:
    def test_contains_payloads(self, make_signal, prospect):
        prompt = build_extraction_prompt(make_signal(page="/demo", visit_number=2), prospect)
        assert '"visitNumber": 2' in prompt
        assert '"companySize": "50-200"' in prompt
        assert '"falsePositiveRisk"' in prompt
        assert "PROSPECT CONTEXT" in prompt
