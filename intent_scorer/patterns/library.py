"""
Pattern library: built-in defaults and JSON file loading.

The active library is a JSON array of ``Pattern`` records (camelCase keys,
see ``config/patterns/known_patterns.json``). It is loaded once when the
``ScoringContext`` is built and treated as read-only afterwards.

A missing, unparseable or invalid file is not fatal: ``load_patterns``
logs one warning and returns the five built-in default patterns.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import TypeAdapter, ValidationError

from intent_scorer.models.pattern import Pattern

logger = logging.getLogger(__name__)

_PATTERN_LIST = TypeAdapter(list[Pattern])

_DEFAULT_PATTERN_DATA: list[dict] = [
    {
        "id": "engaged_evaluator",
        "name": "Engaged Evaluator",
        "description": (
            "Combination of public engagement + private research + "
            "educational content consumption"
        ),
        "requiredSignals": [
            {"type": "linkedin_engagement", "action": "commented", "minScore": 70},
            {"type": "website_visit", "pageIncludes": "pricing", "minVisits": 2},
        ],
        "optionalSignals": [
            {"type": "content_download", "category": "case_study"},
        ],
        "historicalConversion": 73,
        "avgDaysToClose": 14,
        "confidence": 0.85,
        "weight": 100,
    },
    {
        "id": "new_role_evaluator",
        "name": "New Role Evaluator",
        "description": "New decision-maker + company growth + team expansion signals",
        "requiredSignals": [
            {"type": "job_change", "daysInRoleMin": 15, "daysInRoleMax": 90},
        ],
        "optionalSignals": [
            {"type": "company_news", "newsType": "funding"},
            {"type": "hiring_signals", "department": "sales"},
            {"type": "website_visit", "pageIncludes": "pricing"},
        ],
        "historicalConversion": 58,
        "avgDaysToClose": 45,
        "confidence": 0.75,
        "weight": 85,
    },
    {
        "id": "active_evaluator_with_budget",
        "name": "Active Evaluator with Budget",
        "description": (
            "Public pain point + pricing research + technical validation + recent funding"
        ),
        "requiredSignals": [
            {"type": "linkedin_engagement", "painPoint": True},
            {"type": "website_visit", "pageIncludes": "pricing"},
        ],
        "optionalSignals": [
            {"type": "content_download", "bofu": True},
            {"type": "company_news", "newsType": "funding"},
        ],
        "historicalConversion": 81,
        "avgDaysToClose": 12,
        "confidence": 0.9,
        "weight": 120,
    },
    {
        "id": "competitor_researcher",
        "name": "Competitor Researcher (False Positive)",
        "description": "Shallow engagement across channels, likely competitor or student",
        "requiredSignals": [
            {"type": "website_visit", "durationMax": 60, "bounceRateMin": 0.8},
        ],
        "optionalSignals": [
            {"type": "linkedin_engagement", "action": "liked", "noComment": True},
            {"type": "email_interaction", "action": "opened", "clickedLink": False},
        ],
        "historicalConversion": 4,
        "avgDaysToClose": None,
        "confidence": 0.78,
        "weight": -50,
        "isFalsePositive": True,
    },
    {
        "id": "ready_to_buy",
        "name": "Ready to Buy",
        "description": "Multiple bottom-of-funnel signals indicating imminent purchase",
        "requiredSignals": [
            {"type": "website_visit", "pageIncludes": "pricing", "minVisits": 3},
            {"type": "content_download", "bofu": True},
        ],
        "optionalSignals": [
            {"type": "email_interaction", "action": "reply"},
            {"type": "website_visit", "pageIncludes": "demo"},
        ],
        "historicalConversion": 87,
        "avgDaysToClose": 7,
        "confidence": 0.92,
        "weight": 150,
    },
]

DEFAULT_PATTERNS: tuple[Pattern, ...] = tuple(_PATTERN_LIST.validate_python(_DEFAULT_PATTERN_DATA))


def parse_patterns(raw: Union[str, bytes]) -> tuple[Pattern, ...]:
    """Parse and validate a JSON pattern array.

    Raises:
        pydantic.ValidationError: If the JSON is malformed or a record is invalid.
    """
    return tuple(_PATTERN_LIST.validate_json(raw))


def load_patterns(path: Optional[Path] = None) -> tuple[Pattern, ...]:
    """Load the pattern library from ``path``, falling back to the defaults.

    Args:
        path: JSON file with a pattern array. ``None`` → built-in defaults.

    Returns:
        Tuple of validated patterns in file order.
    """
    if path is None:
        return DEFAULT_PATTERNS
    try:
        patterns = parse_patterns(Path(path).read_bytes())
    except (OSError, ValidationError) as exc:
        logger.warning(
            "Could not load pattern library from %s, using %d built-in defaults: %s",
            path, len(DEFAULT_PATTERNS), _short_error(exc),
        )
        return DEFAULT_PATTERNS
    if not patterns:
        logger.warning("Pattern library %s is empty, using built-in defaults", path)
        return DEFAULT_PATTERNS
    logger.info("Loaded %d known patterns from %s", len(patterns), path)
    return patterns


def _short_error(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return f"{exc.error_count()} validation error(s)"
    return str(exc)


def dump_patterns(patterns: tuple[Pattern, ...]) -> str:
    """Serialise a pattern library to the JSON file format."""
    return json.dumps(
        [p.model_dump(mode="json", by_alias=True, exclude_defaults=True) for p in patterns],
        indent=2,
    )
