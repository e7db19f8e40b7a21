"""
ASCII terminal formatters for CLI output.

All formatters accept result models and return plain multi-line strings
suitable for ``typer.echo()``. No third-party dependencies (no ``rich``,
no ``colorama``).

Report layout
-------------
::

  === Intent Analysis: Acme Corp ===
    Quality score:  94 / 100  (Exceptional)
    Priority:       URGENT     Confidence: high
    ...
  [SIGNALS]
    #  Signal               Weight  Base  Score  Reasoning
  [PATTERNS]
  [RECOMMENDATION]
  [OUTCOME]
"""

from __future__ import annotations

from typing import Sequence

from intent_scorer.models.pattern import Pattern, PatternCriterion
from intent_scorer.models.recommendation import AnalysisResult
from intent_scorer.scoring.quality import score_interpretation

_REASONING_WIDTH = 60


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def format_analysis_report(result: AnalysisResult, company: str = "") -> str:
    """Render a full ``AnalysisResult`` as a multi-section text report."""
    interp = score_interpretation(result.quality_score)
    lines: list[str] = [""]
    title = f"=== Intent Analysis: {company} ===" if company else "=== Intent Analysis ==="
    lines.append(title)
    lines.append(f"  Quality score:  {result.quality_score:>3} / 100  ({interp.level})")
    lines.append(
        f"  Priority:       {result.priority_level.upper():<10} "
        f"Confidence: {result.confidence}"
    )
    lines.append(f"  Result:         {result.result_type}")
    lines.append(
        f"  Components:     signals={result.components.signal_score}  "
        f"patterns={result.components.pattern_score}  fit={result.components.fit_score}"
    )
    lines.append(f"  Reasoning:      {result.reasoning}")
    lines.append(f"  Guidance:       {interp.recommendation}")

    if result.analysis is not None:
        lines.append("")
        lines.append(f"  {result.analysis.summary}")
        for insight in result.analysis.key_insights:
            lines.append(f"    - {insight}")

    # ── Signals ──
    lines.append("")
    lines.append("  [SIGNALS]")
    lines.append(
        f"    {'#':>2}  {'Signal':<20}  {'Weight':>6}  {'Base':>5}  {'Score':>5}  Reasoning"
    )
    lines.append("    " + "-" * 100)
    for entry in result.signal_breakdown:
        lines.append(
            f"    {entry.index:>2}  {entry.signal:<20}  {entry.weight:>5}%  "
            f"{entry.base_score:>5.0f}  {entry.score:>5}  "
            f"{_truncate(entry.reasoning, _REASONING_WIDTH)}"
        )

    # ── Patterns ──
    lines.append("")
    lines.append("  [PATTERNS]")
    if not result.matched_patterns:
        lines.append("    (no known pattern matched)")
    for match in result.matched_patterns:
        tag = "  [FALSE POSITIVE]" if match.is_false_positive else ""
        lines.append(
            f"    {match.name:<40}  conv={match.historical_conversion:>3.0f}%  "
            f"conf={match.confidence:.2f}  match={match.match_score:.0f}{tag}"
        )

    # ── Recommendation ──
    action = result.recommended_action
    lines.append("")
    lines.append("  [RECOMMENDATION]")
    lines.append(f"    Type:     {action.type}")
    if action.channel is not None:
        lines.append(f"    Channel:  {action.channel}  ({action.timing})")
        lines.append(f"    Angle:    {action.messaging_angle}")
    if action.pain_point_focus:
        lines.append(f"    Focus:    {action.pain_point_focus}")
    if action.suggested_message:
        lines.append("    Message:")
        for msg_line in action.suggested_message.splitlines():
            lines.append(f"      {msg_line}")
    for step in action.next_steps:
        lines.append(f"    {step.priority}. {step.action}  [{step.timing}]")
    if action.do_not_mention:
        lines.append("    Do not mention:")
        for item in action.do_not_mention:
            lines.append(f"      - {item}")
    for flag in action.red_flags:
        lines.append(f"    [RED FLAG] {flag}")

    # ── Outcome ──
    outcome = result.estimated_outcome
    lines.append("")
    lines.append("  [OUTCOME]")
    lines.append(f"    Conversion probability: {outcome.conversion_probability:.0%}")
    if outcome.estimated_days_to_close is not None:
        lines.append(f"    Days to close:          {outcome.estimated_days_to_close}")
    if outcome.estimated_deal_value:
        lines.append(f"    Deal value:             {outcome.estimated_deal_value}")
    lines.append(f"    {outcome.reasoning}")
    for win in result.similar_historical_wins:
        lines.append(
            f"    Similar win: {win.company} ({win.signal_pattern}, "
            f"{win.outcome}, {win.deal_value})"
        )

    return "\n".join(lines)


def _describe_criterion(criterion: PatternCriterion) -> str:
    constraints = criterion.model_dump(exclude_none=True, exclude={"type", "metadata_equals"})
    constraints.update(criterion.metadata_equals)
    if not constraints:
        return str(criterion.type)
    detail = ", ".join(f"{k}={v}" for k, v in constraints.items())
    return f"{criterion.type}({detail})"


def format_pattern_table(patterns: Sequence[Pattern]) -> str:
    """List a pattern library with its statistics and criteria."""
    lines: list[str] = ["", f"=== Pattern Library ({len(patterns)} patterns) ==="]
    header = (
        f"  {'ID':<30}  {'Conv':>5}  {'Days':>5}  {'Conf':>5}  {'Weight':>6}  FP"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for p in patterns:
        days = "-" if p.avg_days_to_close is None else str(p.avg_days_to_close)
        lines.append(
            f"  {p.id:<30}  {p.historical_conversion:>4.0f}%  {days:>5}  "
            f"{p.confidence:>5.2f}  {p.weight:>6.0f}  {'yes' if p.is_false_positive else ''}"
        )
        for criterion in p.required_signals:
            lines.append(f"      required: {_describe_criterion(criterion)}")
        for criterion in p.optional_signals:
            lines.append(f"      optional: {_describe_criterion(criterion)}")
    return "\n".join(lines)
