"""
Intent Scorer CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Build the ``ScoringContext`` and run the pipeline.
  5. Report the result to stdout.

Install and run::

    pip install -e .
    intent-scorer --help
    intent-scorer validate-config
    intent-scorer list-patterns
    intent-scorer example high_quality
    intent-scorer analyze payload.json --json
"""

from __future__ import annotations

import json
import tomllib
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

app = typer.Typer(
    name="intent-scorer",
    help="Buyer-intent signal quality scorer: score signal clusters and recommend outreach.",
    add_completion=False,
)


class ExampleScenario(StrEnum):
    HIGH_QUALITY = "high_quality"
    FALSE_POSITIVE = "false_positive"
    MIXED_SIGNALS = "mixed_signals"


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None, provider: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from intent_scorer.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        config = load_config(cfg_path)
        if provider:
            enrichment = config.enrichment.model_validate(
                {**config.enrichment.model_dump(), "provider": provider}
            )
            config = config.model_copy(update={"enrichment": enrichment})
        return config
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValueError, tomllib.TOMLDecodeError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from intent_scorer.utils.logging import configure_logging
    configure_logging(config.logging)


def _build_context_or_exit(config):
    from intent_scorer.pipeline.orchestrator import ScoringContext

    try:
        return ScoringContext.from_config(config)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _read_request_or_exit(payload_path: Path):
    """Parse and validate an ``AnalysisRequest`` JSON file.

    Returns:
        ``(request, as_of)``; ``as_of`` comes from an optional top-level
        ``"asOf"`` key and is ``None`` when absent.
    """
    from intent_scorer.models.signal import AnalysisRequest

    if not payload_path.exists():
        typer.echo(f"[ERROR] Payload file not found: {payload_path}", err=True)
        raise typer.Exit(code=1)
    try:
        raw = json.loads(payload_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] {payload_path} is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=1)

    try:
        request = AnalysisRequest.model_validate(raw)
        as_of = datetime.fromisoformat(raw["asOf"]) if raw.get("asOf") else None
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid request in {payload_path}:", err=True)
        for err in exc.errors():
            loc = ".".join(str(p) for p in err["loc"])
            typer.echo(f"  {loc}: {err['msg']}", err=True)
        raise typer.Exit(code=1)
    except (TypeError, ValueError) as exc:
        typer.echo(f"[ERROR] Invalid asOf value in {payload_path}: {exc}", err=True)
        raise typer.Exit(code=1)
    return request, as_of


def _run_and_report(request, as_of, config, as_json: bool) -> None:
    from intent_scorer.pipeline.orchestrator import analyze_request
    from intent_scorer.reporting.formatters import format_analysis_report

    context = _build_context_or_exit(config)
    try:
        result = analyze_request(request, context=context, as_of=as_of)
    finally:
        context.close()

    if as_json:
        typer.echo(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
    else:
        typer.echo(format_analysis_report(result, company=request.prospect.company))
        typer.echo("")
        typer.echo(f"[OK] Priority: {result.priority_level} (score {result.quality_score})")


def _examples_dir() -> Path:
    from intent_scorer.config import find_project_root
    return find_project_root() / "config" / "examples"


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("analyze")
def analyze(
    payload: Path = typer.Argument(
        ...,
        help="JSON file with {signals, prospect, options}.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full result as JSON instead of a text report.",
    ),
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        help="Override [enrichment].provider (rule_based | anthropic).",
    ),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="Reference time (ISO-8601) for recency; default: payload asOf, else now.",
    ),
) -> None:
    """Score a signal cluster from a JSON payload and recommend the next action.

    Exits with code 1 if the payload fails validation.
    """
    config = _load_config_or_exit(config_path, provider)
    _configure_logging(config)

    request, payload_as_of = _read_request_or_exit(payload)
    reference = payload_as_of
    if as_of:
        try:
            reference = datetime.fromisoformat(as_of)
        except ValueError:
            typer.echo(f"[ERROR] --as-of must be ISO-8601, got '{as_of}'.", err=True)
            raise typer.Exit(code=1)

    _run_and_report(request, reference, config, as_json)


@app.command("example")
def example(
    scenario: ExampleScenario = typer.Argument(
        ...,
        help="Bundled scenario to run.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full result as JSON instead of a text report.",
    ),
) -> None:
    """Run one of the bundled example scenarios (rule-based enrichment)."""
    config = _load_config_or_exit(config_path, provider="rule_based")
    _configure_logging(config)

    payload = _examples_dir() / f"{scenario.value}.json"
    typer.echo(f"Running example scenario: {scenario.value}", err=True)
    request, as_of = _read_request_or_exit(payload)
    _run_and_report(request, as_of, config, as_json)


@app.command("list-patterns")
def list_patterns(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the pattern library in its JSON file format.",
    ),
) -> None:
    """Print the active pattern library (file, or built-in defaults)."""
    from intent_scorer.patterns.library import dump_patterns, load_patterns
    from intent_scorer.reporting.formatters import format_pattern_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    patterns = load_patterns(config.resolve_path(config.scoring.patterns_file))
    if as_json:
        typer.echo(dump_patterns(patterns))
    else:
        typer.echo(format_pattern_table(patterns))


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Enrichment provider: {config.enrichment.provider}")
    if config.enrichment.provider == "anthropic":
        typer.echo(f"  Enrichment model:    {config.enrichment.model}")
    typer.echo(f"  Max workers:         {config.enrichment.max_workers}")
    typer.echo(f"  Patterns file:       {config.scoring.patterns_file}")
    typer.echo(f"  Weights file:        {config.scoring.weights_file}")
    typer.echo(f"  Recency half-life:   {config.scoring.recency_half_life_days}d")
    typer.echo(f"  Log level:           {config.logging.level}")
    typer.echo(f"  Debug mode:          {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


if __name__ == "__main__":
    app()
