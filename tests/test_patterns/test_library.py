"""
Tests for intent_scorer/patterns/library.py.

What we test
------------
  - Built-in defaults: five patterns, competitor_researcher is the only
    false-positive pattern, and the bundled JSON file matches them.
  - load_patterns(None) returns the defaults.
  - Missing, malformed or empty files fall back to the defaults with one
    warning.
  - A valid custom file replaces the defaults.
  - dump_patterns() output parses back to the same library.
  - The false-positive flag is independent of the weight sign; a custom
    file mixing both kinds loads in full.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from intent_scorer.models.pattern import Pattern
from intent_scorer.patterns.library import (
    DEFAULT_PATTERNS,
    dump_patterns,
    load_patterns,
    parse_patterns,
)

BUNDLED = Path(__file__).parent.parent.parent / "config" / "patterns" / "known_patterns.json"

CUSTOM = [
    {
        "id": "demo_request",
        "name": "Demo Request",
        "requiredSignals": [{"type": "website_visit", "pageIncludes": "demo"}],
        "historicalConversion": 60,
        "confidence": 0.7,
    }
]


class TestDefaults:
    def test_five_patterns(self):
        assert [p.id for p in DEFAULT_PATTERNS] == [
            "engaged_evaluator",
            "new_role_evaluator",
            "active_evaluator_with_budget",
            "competitor_researcher",
            "ready_to_buy",
        ]

    def test_only_competitor_is_false_positive(self):
        flagged = [p.id for p in DEFAULT_PATTERNS if p.is_false_positive]
        assert flagged == ["competitor_researcher"]

    def test_bundled_file_matches_defaults(self):
        assert load_patterns(BUNDLED) == DEFAULT_PATTERNS


class TestLoadPatterns:
    def test_none_is_defaults(self):
        assert load_patterns(None) is DEFAULT_PATTERNS

    def test_missing_file_falls_back(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            patterns = load_patterns(tmp_path / "nope.json")
        assert patterns == DEFAULT_PATTERNS
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1

    def test_malformed_json_falls_back(self, tmp_path, caplog):
        path = tmp_path / "bad.json"
        path.write_text("[{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            assert load_patterns(path) == DEFAULT_PATTERNS
        assert "using 5 built-in defaults" in caplog.text

    def test_invalid_record_falls_back(self, tmp_path):
        path = tmp_path / "invalid.json"
        path.write_text(json.dumps([{"id": "x", "name": "X"}]), encoding="utf-8")
        assert load_patterns(path) == DEFAULT_PATTERNS

    def test_empty_list_falls_back(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")
        assert load_patterns(path) == DEFAULT_PATTERNS

    def test_custom_file(self, tmp_path):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps(CUSTOM), encoding="utf-8")
        patterns = load_patterns(path)
        assert [p.id for p in patterns] == ["demo_request"]
        assert patterns[0].weight == pytest.approx(100.0)
        assert patterns[0].required_signals[0].page_includes == "demo"


class TestSerialisation:
    def test_dump_parses_back(self):
        assert parse_patterns(dump_patterns(DEFAULT_PATTERNS)) == DEFAULT_PATTERNS

    def test_dump_uses_camel_case(self):
        dumped = json.loads(dump_patterns(DEFAULT_PATTERNS))
        assert "requiredSignals" in dumped[0]
        assert dumped[0]["requiredSignals"][1]["minVisits"] == 2


class TestPatternValidation:
    def test_false_positive_flag_independent_of_weight(self):
        pattern = Pattern(
            id="fp",
            name="FP",
            required_signals=[{"type": "website_visit"}],
            historical_conversion=5,
            confidence=0.5,
            weight=10,
            is_false_positive=True,
        )
        assert pattern.is_false_positive
        assert pattern.weight == pytest.approx(10.0)

    def test_custom_file_with_positive_weight_false_positive(self, tmp_path):
        path = tmp_path / "patterns.json"
        path.write_text(
            json.dumps([
                {
                    "id": "custom", "name": "Custom",
                    "requiredSignals": [{"type": "website_visit", "pageIncludes": "demo"}],
                    "historicalConversion": 60, "confidence": 0.7,
                },
                {
                    "id": "fp", "name": "FP",
                    "requiredSignals": [{"type": "linkedin_engagement", "action": "liked"}],
                    "historicalConversion": 5, "confidence": 0.6,
                    "weight": 10, "isFalsePositive": True,
                },
            ]),
            encoding="utf-8",
        )
        patterns = load_patterns(path)
        assert [p.id for p in patterns] == ["custom", "fp"]
        assert patterns[1].is_false_positive

    def test_required_signals_must_not_be_empty(self):
        with pytest.raises(ValidationError):
            Pattern(
                id="empty",
                name="Empty",
                required_signals=[],
                historical_conversion=5,
                confidence=0.5,
            )
