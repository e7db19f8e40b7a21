"""
Signal taxonomy for buyer-intent scoring.

Every closed vocabulary used by the pipeline lives here:
  - ``SignalType``       : the *what*: which behavioural channel produced the event?
  - ``Urgency`` / ``Specificity`` / ``BuyingStage`` / ``Sentiment`` /
    ``FalsePositiveRisk``: the qualitative context dimensions.
  - ``Velocity``         : direction of engagement frequency over time.
  - ``ConfidenceLevel`` / ``PriorityLevel``: the scorer's discrete outputs.
  - ``OutreachChannel`` / ``OutreachTiming``: the action engine's outputs.

Usage example::

    from intent_scorer.taxonomy.signal_taxonomy import SignalType, PriorityLevel

    signal_type = SignalType.WEBSITE_VISIT
    priority    = PriorityLevel.URGENT

This module has NO imports from any other ``intent_scorer`` package.
"""

from enum import StrEnum


class SignalType(StrEnum):
    """Behavioural channel that produced a buyer-intent signal."""

    LINKEDIN_ENGAGEMENT = "linkedin_engagement"
    """Comment, like, share, follow or connection request on LinkedIn."""

    WEBSITE_VISIT = "website_visit"
    """Page view on the seller's website (pricing, demo, blog, ...)."""

    JOB_CHANGE = "job_change"
    """Prospect started a new role; new leaders re-evaluate their stack."""

    CONTENT_DOWNLOAD = "content_download"
    """Gated asset download (guide, whitepaper, case study, ...)."""

    EMAIL_INTERACTION = "email_interaction"
    """Open, click or reply on an outbound email."""

    TECH_STACK_CHANGE = "tech_stack_change"
    """Tool added, removed or under evaluation in the prospect's stack."""

    HIRING_SIGNALS = "hiring_signals"
    """Open roles indicating team expansion."""

    COMPANY_NEWS = "company_news"
    """Funding, expansion, leadership change, acquisition, launch."""

    INTENT_DATA = "intent_data"
    """Third-party research intent (competitor comparison, pricing research)."""


class Urgency(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Specificity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BuyingStage(StrEnum):
    """Where the prospect sits in the buying journey."""

    AWARENESS = "awareness"
    CONSIDERATION = "consideration"
    DECISION = "decision"
    UNKNOWN = "unknown"


class Sentiment(StrEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class FalsePositiveRisk(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Velocity(StrEnum):
    """Whether same-type signals are arriving faster, slower or steadily."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class ConfidenceLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PriorityLevel(StrEnum):
    """Terminal classification of a scored signal cluster."""

    IGNORE = "ignore"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class OutreachChannel(StrEnum):
    LINKEDIN_MESSAGE = "linkedin_message"
    EMAIL = "email"


class OutreachTiming(StrEnum):
    WITHIN_24H = "within_24h"
    WITHIN_48H = "within_48h"
    WITHIN_WEEK = "within_week"
    NO_RUSH = "no_rush"


# Priorities that receive a full outreach recommendation.
ACTIONABLE_PRIORITIES: frozenset[PriorityLevel] = frozenset({
    PriorityLevel.MEDIUM, PriorityLevel.HIGH, PriorityLevel.URGENT,
})
