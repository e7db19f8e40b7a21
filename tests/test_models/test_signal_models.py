"""
Tests for intent_scorer/models/signal.py (input validation layer).

What we test
------------
  - camelCase payload keys and snake_case names are both accepted.
  - Unknown extra keys are ignored; unknown signal types are rejected.
  - A request needs at least one signal and a prospect with a company.
  - ``metadata: null`` becomes an empty dict.
  - Models are frozen.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from intent_scorer.models.signal import AnalysisRequest, Prospect, Signal
from intent_scorer.taxonomy.signal_taxonomy import SignalType

PAYLOAD = {
    "signals": [
        {
            "type": "website_visit",
            "timestamp": "2025-01-14T10:00:00Z",
            "page": "/pricing",
            "visitNumber": 2,
            "bounceRate": 0.1,
            "trackingId": "abc",
        }
    ],
    "prospect": {"company": "Acme", "companySize": "50-200"},
}


class TestAnalysisRequest:
    def test_camel_case_payload(self):
        request = AnalysisRequest.model_validate(PAYLOAD)
        signal = request.signals[0]
        assert signal.type == SignalType.WEBSITE_VISIT
        assert signal.visit_number == 2
        assert signal.bounce_rate == pytest.approx(0.1)
        assert signal.timestamp.tzinfo is not None
        assert request.prospect.company_size == "50-200"
        assert request.options.generate_message is True

    def test_snake_case_names(self):
        signal = Signal(type="job_change", days_in_role=30, to_role="VP Sales")
        assert signal.days_in_role == 30

    def test_empty_signals_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisRequest.model_validate({**PAYLOAD, "signals": []})

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Signal.model_validate({"type": "podcast_listen"})

    def test_prospect_requires_company(self):
        with pytest.raises(ValidationError):
            Prospect.model_validate({"name": "No Company"})

    def test_null_metadata(self):
        assert Signal.model_validate({"type": "intent_data", "metadata": None}).metadata == {}

    def test_frozen(self):
        signal = Signal(type="website_visit", page="/pricing")
        with pytest.raises(ValidationError):
            signal.page = "/blog"

    def test_options_aliases(self):
        request = AnalysisRequest.model_validate(
            {**PAYLOAD, "options": {"generateMessage": False, "includeHistoricalComparison": False}},
        )
        assert request.options.generate_message is False
        assert request.options.include_historical_comparison is False
