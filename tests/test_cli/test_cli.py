"""
Tests for intent_scorer/cli.py using ``typer.testing.CliRunner``.

What we test
------------
  - validate-config succeeds on the committed config and fails on a
    missing file.
  - list-patterns prints the table, or JSON with --json.
  - example runs each bundled scenario.
  - analyze prints a report or JSON; invalid payloads exit with code 1.
  - --provider anthropic without an API key exits with code 1.
"""

from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from intent_scorer.cli import app

runner = CliRunner()

QUIET = {"INTENT_SCORER_LOG_LEVEL": "WARNING"}


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Drop the handlers each command installs on the root logger."""
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def payload_file(tmp_path, example_payload):
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(example_payload("high_quality")), encoding="utf-8")
    return path


class TestValidateConfig:
    def test_default_config(self):
        result = runner.invoke(app, ["validate-config"], env=QUIET)
        assert result.exit_code == 0
        assert "Configuration validated successfully." in result.output
        assert "Enrichment provider: rule_based" in result.output

    def test_full_output(self):
        result = runner.invoke(app, ["validate-config", "--full"], env=QUIET)
        assert result.exit_code == 0
        assert '"recency_half_life_days": 7.0' in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "x.toml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestListPatterns:
    def test_table(self):
        result = runner.invoke(app, ["list-patterns"], env=QUIET)
        assert result.exit_code == 0
        assert "competitor_researcher" in result.output

    def test_json(self):
        result = runner.invoke(app, ["list-patterns", "--json"], env=QUIET)
        assert result.exit_code == 0
        patterns = json.loads(result.stdout)
        assert len(patterns) == 5
        assert patterns[-1]["id"] == "ready_to_buy"


class TestExample:
    @pytest.mark.parametrize("scenario", ["high_quality", "false_positive", "mixed_signals"])
    def test_runs(self, scenario):
        result = runner.invoke(app, ["example", scenario], env=QUIET)
        assert result.exit_code == 0, result.output
        assert "[OK] Priority:" in result.output

    def test_high_quality_is_urgent(self):
        result = runner.invoke(app, ["example", "high_quality"], env=QUIET)
        assert "[OK] Priority: urgent (score 94)" in result.output

    def test_unknown_scenario(self):
        result = runner.invoke(app, ["example", "nonsense"])
        assert result.exit_code != 0


class TestAnalyze:
    def test_json_output(self, payload_file):
        result = runner.invoke(app, ["analyze", str(payload_file), "--json"], env=QUIET)
        assert result.exit_code == 0, result.output
        body = json.loads(result.stdout)
        assert body["qualityScore"] == 94
        assert body["priorityLevel"] == "urgent"
        assert body["recommendedAction"]["channel"] == "linkedin_message"
        assert body["metadata"]["enrichmentModel"] == "rule_based"

    def test_text_report(self, payload_file):
        result = runner.invoke(app, ["analyze", str(payload_file)], env=QUIET)
        assert result.exit_code == 0
        assert "=== Intent Analysis: TechFlow Solutions ===" in result.output

    def test_missing_payload(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "none.json")], env=QUIET)
        assert result.exit_code == 1
        assert "Payload file not found" in result.output

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{oops", encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path)], env=QUIET)
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_validation_error(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"signals": [], "prospect": {"company": "Acme"}}), encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path)], env=QUIET)
        assert result.exit_code == 1
        assert "Invalid request" in result.output
        assert "signals" in result.output

    def test_bad_as_of(self, payload_file):
        result = runner.invoke(app, ["analyze", str(payload_file), "--as-of", "yesterday"], env=QUIET)
        assert result.exit_code == 1
        assert "--as-of must be ISO-8601" in result.output

    def test_anthropic_without_key(self, payload_file, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        result = runner.invoke(
            app, ["analyze", str(payload_file), "--provider", "anthropic"], env=QUIET,
        )
        assert result.exit_code == 1
        assert "ANTHROPIC_API_KEY" in result.output
