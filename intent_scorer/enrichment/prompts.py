"""
Prompt construction for the remote enrichment strategy.

The prompt is analyst instructions + the signal as JSON + the prospect as
JSON + a guidance block chosen by signal type. The reply format section
lists exactly the keys ``EnrichmentResponse`` accepts.
"""

from __future__ import annotations

import json

from intent_scorer.models.signal import Prospect, Signal
from intent_scorer.taxonomy.signal_taxonomy import SignalType

_SOCIAL_GUIDANCE = """\
This is a SOCIAL MEDIA signal. Pay special attention to:
- Written comment content: pain points, urgency words and buying intent
- Specific problems mentioned ("we're struggling with X", "need a solution for Y")
- Urgency indicators: "ASAP", "yesterday", "urgent", "deadline"
- Decision-making authority hints: "my team", "we're evaluating", "I'm responsible for"
- Public commitment level (commenting publicly is stronger than viewing)"""

_PRICING_GUIDANCE = """\
This is a HIGH-INTENT website signal (pricing/demo). Deep dive into:
- Visit duration (longer = higher intent): {duration}s
- Repeat visits (shows persistence): visit #{visit_number}
- Tier or plan viewed: {tier}
- Pricing page plus a demo request within 24h is extremely high intent"""

_WEBSITE_GUIDANCE = """\
This is a WEBSITE VISIT signal. Evaluate:
- Page topic and depth: {page}
- Time spent (genuine interest vs bounce): {duration}s
- Visit frequency: {visit_number}
- Content depth: case study = mid-funnel, pricing = bottom-funnel, blog = top-funnel"""

_EMAIL_GUIDANCE = """\
This is an EMAIL ENGAGEMENT signal. Analyze:
- Interaction: {action}
- Link clicked: {clicked}
- A reply is very high intent; an open without a click is curiosity at most"""

_CONTENT_GUIDANCE = """\
This is a CONTENT DOWNLOAD signal. Consider:
- Asset: {asset}
- Topic relevance: {topic}
- Funnel stage: whitepaper/guide = consideration, ROI calculator or
  implementation guide = decision"""

_JOB_CHANGE_GUIDANCE = """\
This is a JOB CHANGE signal. Critical factors:
- Seniority change: {seniority}
- Days in new role: {days_in_role} (30-90 days is the buying window)
- Company stage: {stage}
- A new leader needs to prove value quickly, which raises buying intent"""

_GENERIC_GUIDANCE = """\
This is a {type} signal. Judge how directly it reflects an active need for
a solution, and whether anything suggests it is noise (competitor research,
students, bots)."""

_INSTRUCTIONS = """\
### ANALYSIS INSTRUCTIONS:

1. Pain points: specific, actionable problems; quantify impact when stated.
2. Urgency: time pressure from words, behaviour and context.
3. Specificity: generic research (low) vs specific solution evaluation (high).
4. Buying stage: awareness (blog, general content), consideration (case
   studies, features), decision (pricing, demo, ROI calculator, trials).
5. Sentiment: emotional tone of any written text.
6. False positive risk: student or personal email, competitor, wrong
   industry, bot-like behaviour (under 10s on page), no authority hints.
7. Key insights: what an SDR should act on.

Respond ONLY with valid JSON (no markdown) using exactly these keys:
{
  "painPoints": ["specific pain 1", "pain 2"],
  "urgency": "low|medium|high",
  "urgencyReasoning": "evidence for the urgency level",
  "specificity": "low|medium|high",
  "specificityReasoning": "why this level",
  "buyingStage": "awareness|consideration|decision|unknown",
  "sentiment": "positive|negative|neutral",
  "falsePositiveRisk": "low|medium|high",
  "falsePositiveReasons": ["reason 1"],
  "confidence": 0.85,
  "keyInsights": ["actionable insight 1", "insight 2"]
}"""


def signal_guidance(signal: Signal) -> str:
    """Return the signal-type-specific guidance block for ``signal``."""
    unknown = "unknown"
    if signal.type == SignalType.LINKEDIN_ENGAGEMENT:
        text = _SOCIAL_GUIDANCE
        if signal.content:
            text += f'\n\nCOMMENT/POST TEXT TO ANALYZE:\n"{signal.content}"'
        text += f"\nEngagement type: {signal.action or unknown}"
        text += f"\nTopic context: {signal.meta('postTopic') or signal.meta('topic') or unknown}"
        return text

    if signal.type == SignalType.WEBSITE_VISIT:
        page = (signal.page or "").lower()
        template = (
            _PRICING_GUIDANCE if ("pricing" in page or "demo" in page) else _WEBSITE_GUIDANCE
        )
        return template.format(
            page=signal.page or unknown,
            duration=_fmt(signal.duration),
            visit_number=signal.visit_number or 1,
            tier=signal.meta("tier_viewed") or signal.meta("plan") or unknown,
        )

    if signal.type == SignalType.EMAIL_INTERACTION:
        return _EMAIL_GUIDANCE.format(
            action=signal.action or unknown,
            clicked="yes" if signal.clicked_link else "no",
        )

    if signal.type == SignalType.CONTENT_DOWNLOAD:
        return _CONTENT_GUIDANCE.format(
            asset=signal.asset or unknown,
            topic=signal.meta("topic") or unknown,
        )

    if signal.type == SignalType.JOB_CHANGE:
        return _JOB_CHANGE_GUIDANCE.format(
            seniority="promoted, likely has budget" if signal.meta("seniorityIncrease") else "lateral move",
            days_in_role=signal.days_in_role if signal.days_in_role is not None else unknown,
            stage=signal.meta("companyStage") or unknown,
        )

    return _GENERIC_GUIDANCE.format(type=str(signal.type).replace("_", " ").upper())


def build_extraction_prompt(signal: Signal, prospect: Prospect) -> str:
    """Assemble the full enrichment prompt for one signal."""
    signal_json = json.dumps(
        signal.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2
    )
    prospect_json = json.dumps(
        prospect.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2
    )
    return (
        "You are an expert B2B sales intelligence analyst specializing in "
        "buyer intent signal analysis.\n\n"
        "Extract deep qualitative insights from this signal, going beyond "
        "surface-level analysis.\n\n"
        f"SIGNAL DATA:\n{signal_json}\n\n"
        f"PROSPECT CONTEXT:\n{prospect_json}\n\n"
        f"### SIGNAL-SPECIFIC ANALYSIS:\n{signal_guidance(signal)}\n\n"
        f"{_INSTRUCTIONS}"
    )


def _fmt(value: object) -> str:
    if value is None:
        return "unknown"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)
