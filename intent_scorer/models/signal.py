"""
Inbound request models: ``Signal``, ``Prospect``, ``AnalysisOptions`` and
the envelope ``AnalysisRequest``.

These are the immutable inputs of the pipeline. Field names are snake_case
in Python; JSON payloads use camelCase (``visitNumber``, ``bounceRate``,
``companySize``), and both spellings are accepted on input.

Validation here is the *input validation* layer: a malformed signal or
prospect is rejected with ``pydantic.ValidationError`` before the
pipeline runs. Unknown extra keys on a signal are ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from intent_scorer.taxonomy.signal_taxonomy import SignalType

_INPUT_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class Signal(BaseModel):
    """One recorded buyer-behaviour event.

    Only ``type`` is required. Which of the optional fields matter depends
    on the type (``page``/``duration``/``visit_number``/``bounce_rate`` for
    website visits, ``action``/``content`` for LinkedIn, ``days_in_role``
    for job changes, and so on).

    Attributes:
        type: Signal category from ``SignalType``.
        timestamp: When the event happened (timezone-aware preferred).
        metadata: Opaque provider-specific data (``postTopic``,
            ``tier_viewed``, ``department``, ``isCompetitor``, ...).
        action: Interaction verb (``commented``, ``liked``, ``reply``, ...).
        content: Free text written by the prospect (comment body, reply).
        page: URL path of a website visit.
        duration: Time on page in seconds.
        visit_number: 1 for a first visit, N for the Nth repeat visit.
        bounce_rate: Session bounce rate in [0, 1].
        days_in_role: Days since a job change.
        asset: Title of a downloaded asset.
        news_type: Company news category (``funding``, ``expansion``, ...).
        clicked_link: Whether an email open included a click.
    """

    model_config = _INPUT_CONFIG

    type: SignalType
    timestamp: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    action: Optional[str] = None
    content: Optional[str] = None
    page: Optional[str] = None
    duration: Optional[float] = None
    visit_number: Optional[int] = None
    bounce_rate: Optional[float] = None
    from_company: Optional[str] = None
    to_company: Optional[str] = None
    from_role: Optional[str] = None
    to_role: Optional[str] = None
    start_date: Optional[str] = None
    days_in_role: Optional[int] = None
    asset: Optional[str] = None
    news_type: Optional[str] = None
    details: Optional[str] = None
    clicked_link: Optional[bool] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def none_metadata_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    def meta(self, key: str, default: Any = None) -> Any:
        """Shortcut for ``self.metadata.get(key, default)``."""
        return self.metadata.get(key, default)


class Prospect(BaseModel):
    """The person/account a signal cluster is attributed to."""

    model_config = _INPUT_CONFIG

    company: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    location: Optional[str] = None


class AnalysisOptions(BaseModel):
    """Per-request switches."""

    model_config = _INPUT_CONFIG

    generate_message: bool = True
    include_historical_comparison: bool = True


class AnalysisRequest(BaseModel):
    """Validated request envelope: at least one signal plus a prospect."""

    model_config = _INPUT_CONFIG

    signals: list[Signal] = Field(min_length=1)
    prospect: Prospect
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)
