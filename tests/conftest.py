"""
Shared pytest fixtures for the intent scorer test suite.

Provides:
  - ``as_of``: fixed reference time every time-dependent test uses.
  - ``make_signal`` / ``make_analyzed``: factories for ``Signal`` and
    ``AnalyzedSignal`` records with sensible defaults.
  - ``prospect``: a decision-maker at a mid-market SaaS company.
  - ``example_payload``: loader for the bundled ``config/examples`` files.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from intent_scorer.models.analysis import AnalyzedSignal, QualitativeContext, TemporalFactors
from intent_scorer.models.signal import Prospect, Signal

AS_OF = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
EXAMPLES_DIR = Path(__file__).parent.parent / "config" / "examples"


@pytest.fixture
def as_of() -> datetime:
    return AS_OF


# ── Domain object factories ───────────────────────────────────────────────────

@pytest.fixture
def make_signal() -> Callable[..., Signal]:
    """Build a ``Signal``; ``hours_ago`` sets the timestamp relative to ``AS_OF``."""

    def _make(type: str = "website_visit", hours_ago: float | None = 2.0, **fields: Any) -> Signal:
        if hours_ago is not None and "timestamp" not in fields:
            fields["timestamp"] = AS_OF - timedelta(hours=hours_ago)
        return Signal(type=type, **fields)

    return _make


@pytest.fixture
def make_analyzed(make_signal) -> Callable[..., AnalyzedSignal]:
    """Build an ``AnalyzedSignal`` directly, bypassing the analyzer."""

    def _make(
        type: str = "website_visit",
        score: float = 60.0,
        recency: float = 0.5,
        velocity: str = "stable",
        context: QualitativeContext | None = None,
        **fields: Any,
    ) -> AnalyzedSignal:
        return AnalyzedSignal(
            raw_data=make_signal(type, **fields),
            quantitative_score=score,
            temporal_factors=TemporalFactors(recency=recency, frequency=1, velocity=velocity),
            qualitative_context=context or QualitativeContext(),
        )

    return _make


@pytest.fixture
def prospect() -> Prospect:
    return Prospect(
        name="Sarah Chen",
        email="sarah.chen@techflow.io",
        role="VP of Sales",
        company="TechFlow Solutions",
        industry="SaaS",
        company_size="50-200",
    )


@pytest.fixture
def example_payload() -> Callable[[str], dict]:
    """Load one bundled example payload as a raw dict."""

    def _load(name: str) -> dict:
        return json.loads((EXAMPLES_DIR / f"{name}.json").read_text(encoding="utf-8"))

    return _load
