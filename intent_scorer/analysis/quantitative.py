"""
Quantitative signal scoring: maps one raw ``Signal`` to a 0–100 base score.

Each signal type has its own rule family. A rule picks a base score from a
discrete sub-case, then applies bounded additive adjustments:

linkedin_engagement
    Base by action: commented 85, share 75, connection_request 70,
    follow 40, like/liked 30, other 50.
    Comments: > 200 chars +10, < 30 chars −15.
    Relevant ``metadata.postTopic`` (sales, automation, productivity, crm,
    revenue) +5.

website_visit
    Base by page: high-value (/pricing, /demo, /enterprise, /contact,
    /request-trial) 75, medium (/features, /case-studies, /customers,
    /integrations) 55, low (/blog, /about, /careers) 25, other 40.
    Duration: > 300s +15, > 120s +10, > 60s +5, < 30s −10.
    Repeat visit: +5 per visit number, capped at +20.
    Bounce rate > 0.8: −20.  ``metadata.tier_viewed == "enterprise"``: +10.

job_change
    Base 50, or 65 with ``metadata.seniorityIncrease``. Decision-maker
    target role +15. Days in role: 15–90 +20, < 15 +5, > 180 −10.
    Growth-stage ``metadata.companyStage`` (series_a/b/c) +10.

content_download
    Base by asset keywords: BOFU 85, MOFU 70, TOFU 50, other 60.
    Relevant ``metadata.topic`` (roi, integration, automation,
    productivity) +5.

email_interaction
    reply 95, clicked 70, opened 70 with click / 25 without, other 20.
    ``metadata.linkType``: calendar → 90, pricing +10.

company_news
    funding 75 (+10 when details mention a Series round), expansion 70,
    leadership_change 60, acquisition 55, product_launch 50, other 40.

hiring_signals
    Base 60, 70 for revenue departments. Roles open: ≥ 5 +20, ≥ 2 +10.

tech_stack_change
    Base 55, 75 for CRM/sales category. evaluation +15, removed +20.

intent_data
    competitor_comparison 80, pricing_research 75, general_research 55,
    other 50.

The final value is always clamped to [0, 100]. A type with no rule gets a
neutral 50 and a warning; it is never an error.
"""

from __future__ import annotations

import logging
from typing import Callable

from intent_scorer.models.signal import Signal
from intent_scorer.taxonomy.signal_taxonomy import SignalType

logger = logging.getLogger(__name__)

NEUTRAL_SCORE: float = 50.0

# ── Rule tables ───────────────────────────────────────────────────────────────

_LINKEDIN_ACTION_BASE: dict[str, float] = {
    "commented":          85.0,
    "connection_request": 70.0,
    "share":              75.0,
    "shared":             75.0,
    "like":               30.0,
    "liked":              30.0,
    "follow":             40.0,
}
_LINKEDIN_RELEVANT_TOPICS = ("sales", "automation", "productivity", "crm", "revenue")

HIGH_VALUE_PAGES = ("/pricing", "/demo", "/enterprise", "/contact", "/request-trial")
MEDIUM_VALUE_PAGES = ("/features", "/case-studies", "/customers", "/integrations")
LOW_VALUE_PAGES = ("/blog", "/about", "/careers")

DECISION_MAKER_KEYWORDS = ("vp", "director", "head of", "chief", "cxo")
_GROWTH_STAGES = frozenset({"series_a", "series_b", "series_c"})

BOFU_KEYWORDS = ("implementation", "enterprise", "security", "compliance", "migration")
MOFU_KEYWORDS = ("case study", "whitepaper", "guide", "playbook")
TOFU_KEYWORDS = ("ebook", "report", "infographic")
_CONTENT_RELEVANT_TOPICS = ("roi", "integration", "automation", "productivity")

_EMAIL_ACTION_BASE: dict[str, float] = {
    "reply":   95.0,
    "replied": 95.0,
    "clicked": 70.0,
}

_NEWS_TYPE_BASE: dict[str, float] = {
    "funding":           75.0,
    "expansion":         70.0,
    "leadership_change": 60.0,
    "acquisition":       55.0,
    "product_launch":    50.0,
}

_REVENUE_DEPARTMENTS = frozenset({
    "sales", "revenue", "business development", "customer success",
})

_INTENT_BASE: dict[str, float] = {
    "competitor_comparison": 80.0,
    "pricing_research":      75.0,
    "general_research":      55.0,
}


# ── Per-type rules ────────────────────────────────────────────────────────────

def score_linkedin_engagement(signal: Signal) -> float:
    action = (signal.action or "").lower()
    score = _LINKEDIN_ACTION_BASE.get(action, 50.0)

    if action == "commented" and signal.content:
        length = len(signal.content)
        if length > 200:
            score += 10.0
        elif length < 30:
            score -= 15.0

    topic = str(signal.meta("postTopic") or "").lower()
    if topic and any(t in topic for t in _LINKEDIN_RELEVANT_TOPICS):
        score += 5.0

    return _clamp(score)


def score_website_visit(signal: Signal) -> float:
    page = (signal.page or "").lower()
    if any(p in page for p in HIGH_VALUE_PAGES):
        score = 75.0
    elif any(p in page for p in MEDIUM_VALUE_PAGES):
        score = 55.0
    elif any(p in page for p in LOW_VALUE_PAGES):
        score = 25.0
    else:
        score = 40.0

    duration = signal.duration
    if duration:
        if duration > 300:
            score += 15.0
        elif duration > 120:
            score += 10.0
        elif duration > 60:
            score += 5.0
        elif duration < 30:
            score -= 10.0

    if signal.visit_number and signal.visit_number > 1:
        score += min(20.0, signal.visit_number * 5.0)

    if signal.bounce_rate is not None and signal.bounce_rate > 0.8:
        score -= 20.0

    if signal.meta("tier_viewed") == "enterprise":
        score += 10.0

    return _clamp(score)


def score_job_change(signal: Signal) -> float:
    score = 65.0 if signal.meta("seniorityIncrease") is True else 50.0

    role = (signal.to_role or "").lower()
    if any(r in role for r in DECISION_MAKER_KEYWORDS):
        score += 15.0

    days = signal.days_in_role
    if days is not None:
        if 15 <= days <= 90:
            score += 20.0
        elif days < 15:
            score += 5.0
        elif days > 180:
            score -= 10.0

    if signal.meta("companyStage") in _GROWTH_STAGES:
        score += 10.0

    return _clamp(score)


def score_content_download(signal: Signal) -> float:
    asset = (signal.asset or "").lower()
    if is_bofu_asset(asset):
        score = 85.0
    elif any(k in asset for k in MOFU_KEYWORDS):
        score = 70.0
    elif any(k in asset for k in TOFU_KEYWORDS):
        score = 50.0
    else:
        score = 60.0

    topic = str(signal.meta("topic") or "").lower()
    if topic and any(t in topic for t in _CONTENT_RELEVANT_TOPICS):
        score += 5.0

    return _clamp(score)


def score_email_interaction(signal: Signal) -> float:
    action = (signal.action or "").lower()
    if action == "opened":
        score = 70.0 if signal.clicked_link else 25.0
    else:
        score = _EMAIL_ACTION_BASE.get(action, 20.0)

    link_type = signal.meta("linkType")
    if link_type == "calendar":
        score = 90.0
    elif link_type == "pricing":
        score += 10.0

    return _clamp(score)


def score_company_news(signal: Signal) -> float:
    news_type = (signal.news_type or "").lower()
    score = _NEWS_TYPE_BASE.get(news_type, 40.0)
    if news_type == "funding" and signal.details and "Series" in signal.details:
        score += 10.0
    return _clamp(score)


def score_hiring_signals(signal: Signal) -> float:
    department = str(signal.meta("department") or "").lower()
    score = 70.0 if department in _REVENUE_DEPARTMENTS else 60.0

    roles_count = signal.meta("rolesCount")
    if isinstance(roles_count, (int, float)):
        if roles_count >= 5:
            score += 20.0
        elif roles_count >= 2:
            score += 10.0

    return _clamp(score)


def score_tech_stack_change(signal: Signal) -> float:
    score = 75.0 if signal.meta("category") in ("CRM", "sales") else 55.0

    stack_action = signal.meta("action")
    if stack_action == "evaluation":
        score += 15.0
    elif stack_action == "removed":
        score += 20.0

    return _clamp(score)


def score_intent_data(signal: Signal) -> float:
    return _clamp(_INTENT_BASE.get(str(signal.meta("intent") or ""), 50.0))


_RULES: dict[SignalType, Callable[[Signal], float]] = {
    SignalType.LINKEDIN_ENGAGEMENT: score_linkedin_engagement,
    SignalType.WEBSITE_VISIT:       score_website_visit,
    SignalType.JOB_CHANGE:          score_job_change,
    SignalType.CONTENT_DOWNLOAD:    score_content_download,
    SignalType.EMAIL_INTERACTION:   score_email_interaction,
    SignalType.COMPANY_NEWS:        score_company_news,
    SignalType.HIRING_SIGNALS:      score_hiring_signals,
    SignalType.TECH_STACK_CHANGE:   score_tech_stack_change,
    SignalType.INTENT_DATA:         score_intent_data,
}


def score_signal(signal: Signal) -> float:
    """Return the 0–100 quantitative score for ``signal``.

    Dispatches on ``signal.type``. Types without a rule score a neutral 50
    and log a warning.
    """
    rule = _RULES.get(signal.type)
    if rule is None:
        logger.warning("Unknown signal type %r, assigning neutral score", signal.type)
        return NEUTRAL_SCORE
    return rule(signal)


def is_bofu_asset(asset_title: str) -> bool:
    """True if an asset title contains a bottom-of-funnel keyword."""
    title = asset_title.lower()
    return any(k in title for k in BOFU_KEYWORDS)


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))
