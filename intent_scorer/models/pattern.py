"""
Pattern library models.

A ``Pattern`` is a named, historically validated combination of signal
criteria. Criteria are plain data (``PatternCriterion``): a signal type
plus any number of optional constraints, all evaluated by one generic
matcher (``patterns.matcher.signal_matches``). New patterns are added by
editing ``config/patterns/known_patterns.json`` rather than by writing code.

``MatchedPattern`` is the transient per-request result of a successful
match. It inherits ``is_false_positive`` from its ``Pattern``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from intent_scorer.taxonomy.signal_taxonomy import SignalType

_MODEL_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PatternCriterion(BaseModel):
    """One required or optional criterion of a pattern.

    Every constraint left at ``None`` is not checked.

    Attributes:
        type: Signal type the criterion applies to.
        action: Exact ``Signal.action`` value.
        page_includes: Substring that must appear in ``Signal.page``.
        min_score: Minimum quantitative score.
        min_visits: At least this many signals must satisfy the criterion.
        duration_max: Maximum duration (only checked when a duration is present).
        bounce_rate_min: Minimum bounce rate (a bounce rate must be present).
        days_in_role_min: Minimum days in role (days in role must be present).
        days_in_role_max: Maximum days in role (only checked when present).
        pain_point: Require at least one extracted pain point.
        news_type: Exact ``Signal.news_type`` value.
        department: Exact ``metadata.department`` value.
        category: Content category; matches ``metadata.category`` or the
            asset title (underscores read as spaces).
        bofu: Require a bottom-of-funnel asset title.
        no_comment: Require the signal to have no written content.
        clicked_link: Exact ``Signal.clicked_link`` value (``False`` also
            accepts a missing value).
        metadata_equals: Metadata fields that must equal the given values.
    """

    model_config = _MODEL_CONFIG

    type: SignalType
    action: Optional[str] = None
    page_includes: Optional[str] = None
    min_score: Optional[float] = None
    min_visits: Optional[int] = Field(default=None, ge=1)
    duration_max: Optional[float] = None
    bounce_rate_min: Optional[float] = None
    days_in_role_min: Optional[int] = None
    days_in_role_max: Optional[int] = None
    pain_point: Optional[bool] = None
    news_type: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None
    bofu: Optional[bool] = None
    no_comment: Optional[bool] = None
    clicked_link: Optional[bool] = None
    metadata_equals: dict[str, Any] = Field(default_factory=dict)


class Pattern(BaseModel):
    """Static, read-only pattern definition with historical statistics.

    Attributes:
        id: Stable slug, e.g. ``"ready_to_buy"``.
        name: Display name.
        description: One-line explanation used in match reasoning.
        required_signals: Every criterion must be satisfied for a match.
        optional_signals: Each satisfied criterion adds a bonus to matchScore.
        historical_conversion: Conversion rate of past matches, in percent.
        avg_days_to_close: Mean sales-cycle length, ``None`` if unknown.
        confidence: Trust in the historical statistics, in [0, 1].
        weight: Signed weight; false-positive patterns usually carry a negative one.
        is_false_positive: Matching forces the priority band to ``ignore``.
    """

    model_config = _MODEL_CONFIG

    id: str
    name: str
    description: str = ""
    required_signals: list[PatternCriterion] = Field(min_length=1)
    optional_signals: list[PatternCriterion] = Field(default_factory=list)
    historical_conversion: float = Field(ge=0.0, le=100.0)
    avg_days_to_close: Optional[int] = None
    confidence: float = Field(ge=0.0, le=1.0)
    weight: float = 100.0
    is_false_positive: bool = False


class MatchedSignalRef(BaseModel):
    """Compact reference to a signal that supported a pattern match."""

    model_config = _MODEL_CONFIG

    index: int
    type: SignalType
    score: float


class MatchedPattern(BaseModel):
    """A pattern judged to match the current request's signal set.

    ``match_score`` starts at 50 and gains 10 per satisfied optional
    criterion; it is deliberately not clamped. ``confidence`` is the
    pattern's confidence dampened by the number of supporting signals.
    """

    model_config = _MODEL_CONFIG

    pattern: str
    name: str
    signals: list[MatchedSignalRef]
    historical_conversion: float
    avg_days_to_close: Optional[int] = None
    reasoning: str
    confidence: float = Field(ge=0.0, le=1.0)
    match_score: float
    weight: float
    is_false_positive: bool = False
