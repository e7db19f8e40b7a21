"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``     : committed static defaults
  2. ``config/local.toml``       : optional local overrides (gitignored)
  3. ``.env``                    : local secrets such as ``ANTHROPIC_API_KEY``
  4. Environment variables       : ``INTENT_SCORER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI turns an ``AppConfig`` into a ``ScoringContext`` (pattern library,
weight tables, enrichment strategy) once per process; the pipeline itself
never reads files or environment variables.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: Optional[str] = None
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class EnrichmentConfig(BaseModel):
    """Qualitative enrichment strategy and remote-call settings.

    ``provider = "rule_based"`` needs no network and no key. With
    ``provider = "anthropic"`` the key is read from the environment variable
    named by ``api_key_env`` (normally set in ``.env``); it is never stored
    in TOML.
    """

    model_config = ConfigDict(frozen=True)

    provider: Literal["rule_based", "anthropic"] = "rule_based"
    model: str = "claude-sonnet-4-20250514"
    max_retries: int = Field(default=2, ge=0)
    max_tokens: int = Field(default=1024, gt=0)
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_workers: int = Field(default=4, ge=1)
    api_key_env: str = "ANTHROPIC_API_KEY"


class ScoringConfig(BaseModel):
    """Pattern/weight file locations and temporal parameters.

    Relative paths are resolved against the project root.
    """

    model_config = ConfigDict(frozen=True)

    patterns_file: str = "config/patterns/known_patterns.json"
    weights_file: str = "config/weights/signal_weights.json"
    recency_half_life_days: float = 7.0

    @field_validator("recency_half_life_days")
    @classmethod
    def validate_half_life(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"recency_half_life_days must be > 0, got {v}.")
        return v


class AppConfig(BaseModel):
    """Complete application configuration.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    logging: LoggingConfig = LoggingConfig()
    enrichment: EnrichmentConfig = EnrichmentConfig()
    scoring: ScoringConfig = ScoringConfig()
    debug: bool = False

    def resolve_path(self, path: str) -> Path:
        """Resolve a config-relative path against the project root."""
        candidate = Path(path)
        return candidate if candidate.is_absolute() else find_project_root() / candidate


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply INTENT_SCORER_* env vars to the raw config dict.

    Supported overrides:
      INTENT_SCORER_LOG_LEVEL            → raw["logging"]["level"]
      INTENT_SCORER_ENRICHMENT_PROVIDER  → raw["enrichment"]["provider"]
      INTENT_SCORER_DEBUG                → raw["debug"]
    """
    if log_level := os.environ.get("INTENT_SCORER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if provider := os.environ.get("INTENT_SCORER_ENRICHMENT_PROVIDER"):
        raw.setdefault("enrichment", {})["provider"] = provider

    if debug := os.environ.get("INTENT_SCORER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        logging=LoggingConfig(**raw.get("logging", {})),
        enrichment=EnrichmentConfig(**raw.get("enrichment", {})),
        scoring=ScoringConfig(**raw.get("scoring", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
