"""
Deterministic rule-based enrichment strategy.

Produces the same ``EnrichmentResponse`` shape as the remote strategy from
keyword lists and behavioural heuristics, with no external call. Used when
no remote reasoning service is configured and in tests.

Rules (first match wins within each dimension)
----------------------------------------------
pain points      : the sentence around each pain keyword found in the
                   signal's written content (deduplicated, input order).
urgency          : urgency keyword → high; high-intent page or visit
                   number >= 3 → high; job change < 90 days → medium;
                   like action or duration < 30s → low; else medium.
specificity      : content > 100 chars, high-intent page or content
                   download → high; like action, duration < 30s or short
                   written comment → low; else medium.
buying stage     : page mapping (decision / consideration / awareness),
                   then type mapping; else unknown.
sentiment        : positive word list, then negative word list; else neutral.
false positive   : competitor/student/free-mail indicators → high;
                   duration < 10s, bounce > 0.9 or a content-free like →
                   high; high-intent page, reply or content > 50 → low;
                   else medium.
confidence       : 0.85 (high urgency and specificity), 0.7 (medium
                   urgency), else 0.6.
"""

from __future__ import annotations

import re

from intent_scorer.enrichment.base import ContextEnricher, EnrichmentResponse
from intent_scorer.models.signal import Prospect, Signal
from intent_scorer.taxonomy.signal_taxonomy import (
    BuyingStage,
    FalsePositiveRisk,
    Sentiment,
    SignalType,
    Specificity,
    Urgency,
)

PAIN_KEYWORDS = (
    "struggling", "problem", "issue", "challenge", "need", "waste",
    "slow", "inefficient", "difficult", "frustrated", "manual",
)
URGENCY_KEYWORDS = (
    "urgent", "asap", "immediately", "quickly", "deadline", "yesterday", "now",
)
POSITIVE_WORDS = ("love", "great", "excellent", "helpful", "good", "interested", "excited")
NEGATIVE_WORDS = ("struggling", "frustrated", "difficult", "problem", "issue", "waste")
FALSE_POSITIVE_INDICATORS = ("competitor", "student", "@gmail.com", "@yahoo.com", "@hotmail.com")

_DECISION_PAGES = ("pricing", "demo", "contact", "trial", "enterprise")
_CONSIDERATION_PAGES = ("case-stud", "features", "integrations", "customers")
_AWARENESS_PAGES = ("blog", "about", "careers")
_HIGH_INTENT_PAGES = ("pricing", "demo")
_LIKE_ACTIONS = frozenset({"like", "liked"})
_REPLY_ACTIONS = frozenset({"reply", "replied"})

_URGENCY_RE = re.compile(r"\b(" + "|".join(URGENCY_KEYWORDS) + r")\b", re.IGNORECASE)


class RuleBasedEnricher(ContextEnricher):
    """Keyword and heuristic extractor; pure and thread-safe."""

    name = "rule_based"

    def enrich(self, signal: Signal, prospect: Prospect) -> EnrichmentResponse:
        content = signal.content or ""
        action = (signal.action or "").lower()
        page = (signal.page or "").lower()

        pain_points = extract_pain_points(content)
        urgency = _urgency(signal, content, action, page)
        specificity = _specificity(signal, content, action, page)
        buying_stage = _buying_stage(signal, action, page)
        sentiment = _sentiment(content)
        risk, risk_reasons = _false_positive_risk(signal, prospect, content, action, page)

        if urgency == Urgency.HIGH and specificity == Specificity.HIGH:
            confidence = 0.85
        elif urgency == Urgency.MEDIUM:
            confidence = 0.7
        else:
            confidence = 0.6

        insights: list[str] = []
        if pain_points:
            insights.append(f"Pain points identified: {', '.join(pain_points[:2])}")
        if urgency == Urgency.HIGH:
            insights.append("High urgency indicators detected")
        if buying_stage == BuyingStage.DECISION:
            insights.append("Prospect in decision stage")

        return EnrichmentResponse(
            pain_points=pain_points,
            urgency=urgency,
            specificity=specificity,
            buying_stage=buying_stage,
            sentiment=sentiment,
            false_positive_risk=risk,
            confidence=confidence,
            key_insights=insights or ["Monitor for additional signals"],
            urgency_reasoning=_URGENCY_REASONS[urgency],
            false_positive_reasons=risk_reasons,
        )


def extract_pain_points(content: str) -> list[str]:
    """Return the sentences of ``content`` that mention a pain keyword."""
    found: list[str] = []
    lowered = content.lower()
    for keyword in PAIN_KEYWORDS:
        if keyword not in lowered:
            continue
        match = re.search(rf"[^.!?]*{keyword}[^.!?]*[.!?]?", content, re.IGNORECASE)
        if match:
            sentence = match.group(0).strip()
            if sentence and sentence not in found:
                found.append(sentence)
    return found


# ── Dimension rules ───────────────────────────────────────────────────────────

_URGENCY_REASONS: dict[Urgency, str] = {
    Urgency.HIGH:   "High-engagement signals detected",
    Urgency.MEDIUM: "Moderate engagement level",
    Urgency.LOW:    "Low-engagement activity",
}


def _urgency(signal: Signal, content: str, action: str, page: str) -> Urgency:
    if _URGENCY_RE.search(content):
        return Urgency.HIGH
    if any(p in page for p in _HIGH_INTENT_PAGES) or (signal.visit_number or 0) >= 3:
        return Urgency.HIGH
    if (
        signal.type == SignalType.JOB_CHANGE
        and signal.days_in_role is not None
        and signal.days_in_role < 90
    ):
        return Urgency.MEDIUM
    if action in _LIKE_ACTIONS or (signal.duration is not None and signal.duration < 30):
        return Urgency.LOW
    return Urgency.MEDIUM


def _specificity(signal: Signal, content: str, action: str, page: str) -> Specificity:
    if (
        len(content) > 100
        or any(p in page for p in _HIGH_INTENT_PAGES)
        or signal.type == SignalType.CONTENT_DOWNLOAD
    ):
        return Specificity.HIGH
    if action in _LIKE_ACTIONS or (signal.duration is not None and signal.duration < 30):
        return Specificity.LOW
    if signal.type == SignalType.LINKEDIN_ENGAGEMENT and len(content) < 30:
        return Specificity.LOW
    return Specificity.MEDIUM


def _buying_stage(signal: Signal, action: str, page: str) -> BuyingStage:
    if page:
        if any(p in page for p in _DECISION_PAGES):
            return BuyingStage.DECISION
        if any(p in page for p in _CONSIDERATION_PAGES):
            return BuyingStage.CONSIDERATION
        if any(p in page for p in _AWARENESS_PAGES):
            return BuyingStage.AWARENESS
    if signal.type == SignalType.EMAIL_INTERACTION and action in _REPLY_ACTIONS:
        return BuyingStage.DECISION
    if signal.type in (SignalType.CONTENT_DOWNLOAD, SignalType.INTENT_DATA):
        return BuyingStage.CONSIDERATION
    if signal.type == SignalType.TECH_STACK_CHANGE and signal.meta("action") == "evaluation":
        return BuyingStage.CONSIDERATION
    if action in _LIKE_ACTIONS:
        return BuyingStage.AWARENESS
    return BuyingStage.UNKNOWN


def _sentiment(content: str) -> Sentiment:
    lowered = content.lower()
    if any(w in lowered for w in POSITIVE_WORDS):
        return Sentiment.POSITIVE
    if any(w in lowered for w in NEGATIVE_WORDS):
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def _false_positive_risk(
    signal: Signal,
    prospect: Prospect,
    content: str,
    action: str,
    page: str,
) -> tuple[FalsePositiveRisk, list[str]]:
    lowered = content.lower()
    email = (prospect.email or "").lower()
    if signal.meta("isCompetitor") or any(
        ind in lowered or ind in email for ind in FALSE_POSITIVE_INDICATORS
    ):
        return FalsePositiveRisk.HIGH, ["Competitor, student or personal-email indicator"]

    reasons: list[str] = []
    if signal.duration is not None and signal.duration < 10:
        reasons.append("Very short engagement duration")
    if signal.bounce_rate is not None and signal.bounce_rate > 0.9:
        reasons.append("High bounce rate")
    if action in _LIKE_ACTIONS and not content:
        reasons.append("Passive interaction only")
    if reasons:
        return FalsePositiveRisk.HIGH, reasons

    if any(p in page for p in _HIGH_INTENT_PAGES) or action in _REPLY_ACTIONS or len(content) > 50:
        return FalsePositiveRisk.LOW, []
    return FalsePositiveRisk.MEDIUM, []
