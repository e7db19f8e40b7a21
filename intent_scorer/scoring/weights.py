"""
Weight tables for the quality scorer.

File format (``config/weights/signal_weights.json``, camelCase keys)::

    {
      "signalTypeWeights":  {"linkedin_engagement": {"baseWeight": 0.25}, ...},
      "contextMultipliers": {"urgency": {...}, "specificity": {...},
                             "buyingStage": {...}, "falsePositiveRisk": {...}},
      "temporalMultipliers": {"velocity": {...}},
      "scoringWeights": {"individualSignals": 0.4, "patternMatching": 0.4,
                         "prospectFit": 0.2},
      "prospectFitMultipliers": {"companySize": {...}, "industry": {...}}
    }

Every section is optional in the file; omitted sections take the built-in
defaults. Tables are merged key by key, so a file that overrides only
``urgency.high`` keeps the default ``medium`` and ``low`` multipliers. A missing, unparseable or invalid file falls back to the defaults
entirely with one warning.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from intent_scorer.taxonomy.signal_taxonomy import (
    BuyingStage,
    FalsePositiveRisk,
    SignalType,
    Specificity,
    Urgency,
    Velocity,
)

logger = logging.getLogger(__name__)

_MODEL_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

#: Base weight used for a signal type outside the taxonomy.
FALLBACK_BASE_WEIGHT = 0.1


def _merge_partial_tables(model_cls: type[BaseModel], data: Any) -> Any:
    """Overlay each table given in ``data`` on the field's default table."""
    if not isinstance(data, dict):
        return data
    merged = dict(data)
    for name, field in model_cls.model_fields.items():
        key = field.alias if field.alias in merged else name
        given = merged.get(key)
        default = field.get_default(call_default_factory=True)
        if isinstance(given, dict) and isinstance(default, dict):
            merged[key] = {**default, **given}
    return merged


class SignalTypeWeight(BaseModel):
    model_config = _MODEL_CONFIG

    base_weight: float = Field(ge=0.0)


def _default_type_weights() -> dict[SignalType, SignalTypeWeight]:
    return {
        SignalType.LINKEDIN_ENGAGEMENT: SignalTypeWeight(base_weight=0.25),
        SignalType.WEBSITE_VISIT:       SignalTypeWeight(base_weight=0.22),
        SignalType.CONTENT_DOWNLOAD:    SignalTypeWeight(base_weight=0.18),
        SignalType.EMAIL_INTERACTION:   SignalTypeWeight(base_weight=0.15),
        SignalType.JOB_CHANGE:          SignalTypeWeight(base_weight=0.10),
        SignalType.COMPANY_NEWS:        SignalTypeWeight(base_weight=0.08),
        SignalType.HIRING_SIGNALS:      SignalTypeWeight(base_weight=0.07),
        SignalType.TECH_STACK_CHANGE:   SignalTypeWeight(base_weight=0.12),
        SignalType.INTENT_DATA:         SignalTypeWeight(base_weight=0.10),
    }


class ContextMultipliers(BaseModel):
    """Multiplier tables for the four qualitative dimensions."""

    model_config = _MODEL_CONFIG

    urgency: dict[Urgency, float] = {
        Urgency.HIGH: 1.3, Urgency.MEDIUM: 1.0, Urgency.LOW: 0.7,
    }
    specificity: dict[Specificity, float] = {
        Specificity.HIGH: 1.25, Specificity.MEDIUM: 1.0, Specificity.LOW: 0.8,
    }
    buying_stage: dict[BuyingStage, float] = {
        BuyingStage.DECISION: 1.4,
        BuyingStage.CONSIDERATION: 1.15,
        BuyingStage.AWARENESS: 0.9,
        BuyingStage.UNKNOWN: 0.85,
    }
    false_positive_risk: dict[FalsePositiveRisk, float] = {
        FalsePositiveRisk.LOW: 1.2, FalsePositiveRisk.MEDIUM: 1.0, FalsePositiveRisk.HIGH: 0.6,
    }

    @model_validator(mode="before")
    @classmethod
    def fill_omitted_keys(cls, data: Any) -> Any:
        return _merge_partial_tables(cls, data)


class TemporalMultipliers(BaseModel):
    model_config = _MODEL_CONFIG

    velocity: dict[Velocity, float] = {
        Velocity.INCREASING: 1.2, Velocity.STABLE: 1.0, Velocity.DECREASING: 0.8,
    }

    @model_validator(mode="before")
    @classmethod
    def fill_omitted_keys(cls, data: Any) -> Any:
        return _merge_partial_tables(cls, data)


class ScoringWeights(BaseModel):
    """Top-level component weights; conceptually they sum to 1.0."""

    model_config = _MODEL_CONFIG

    individual_signals: float = Field(default=0.4, ge=0.0, le=1.0)
    pattern_matching: float = Field(default=0.4, ge=0.0, le=1.0)
    prospect_fit: float = Field(default=0.2, ge=0.0, le=1.0)

    @property
    def total(self) -> float:
        return self.individual_signals + self.pattern_matching + self.prospect_fit


class ProspectFitMultipliers(BaseModel):
    """Fit multipliers keyed by company-size category and industry bucket.

    Size categories: ``smb``, ``midmarket``, ``enterprise``, ``other``.
    Industry buckets: ``saas`` (saas/software), ``technology`` (tech).
    A key absent from both the file and the defaults is a neutral 1.0.
    """

    model_config = _MODEL_CONFIG

    company_size: dict[str, float] = Field(default_factory=dict)
    industry: dict[str, float] = {"saas": 1.15, "technology": 1.1}

    @model_validator(mode="before")
    @classmethod
    def fill_omitted_keys(cls, data: Any) -> Any:
        return _merge_partial_tables(cls, data)


class WeightsConfig(BaseModel):
    """Complete, read-only weight configuration for one process."""

    model_config = _MODEL_CONFIG

    signal_type_weights: dict[SignalType, SignalTypeWeight] = Field(
        default_factory=_default_type_weights
    )
    context_multipliers: ContextMultipliers = ContextMultipliers()
    temporal_multipliers: TemporalMultipliers = TemporalMultipliers()
    scoring_weights: ScoringWeights = ScoringWeights()
    prospect_fit_multipliers: ProspectFitMultipliers = ProspectFitMultipliers()

    @model_validator(mode="before")
    @classmethod
    def fill_omitted_keys(cls, data: Any) -> Any:
        return _merge_partial_tables(cls, data)

    def base_weight(self, signal_type: SignalType) -> float:
        entry = self.signal_type_weights.get(signal_type)
        return entry.base_weight if entry is not None else FALLBACK_BASE_WEIGHT


DEFAULT_WEIGHTS = WeightsConfig()


def load_weights(path: Optional[Path] = None) -> WeightsConfig:
    """Load weight tables from a JSON file, falling back to the defaults.

    Args:
        path: JSON weights file. ``None`` → built-in defaults.
    """
    if path is None:
        return DEFAULT_WEIGHTS
    try:
        weights = WeightsConfig.model_validate_json(Path(path).read_bytes())
    except (OSError, ValidationError) as exc:
        logger.warning("Could not load weights config from %s, using defaults: %s", path, exc)
        return DEFAULT_WEIGHTS

    total = weights.scoring_weights.total
    if abs(total - 1.0) > 1e-6:
        logger.warning("Scoring weights in %s sum to %.3f, not 1.0", path, total)
    logger.info("Loaded signal weights configuration from %s", path)
    return weights
