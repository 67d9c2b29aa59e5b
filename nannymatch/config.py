"""Configuration management for nannymatch."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from nannymatch.matching.scorer import FitScorer

# Default paths
DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_SETTINGS_PATH = DATA_DIR / "settings.yaml"
DEFAULT_MATCHES_PATH = DATA_DIR / "matches.csv"
LOG_PATH = DATA_DIR / "nannymatch.log"

SETTINGS_ENV_VAR = "NANNYMATCH_SETTINGS"


def default_weights() -> Dict[str, float]:
    return {key.value: weight for key, weight in FitScorer.DEFAULT_WEIGHTS.items()}


class MatchingSettings(BaseModel):
    """Tunable parameters of the matching engine."""

    weights: Dict[str, float] = Field(
        default_factory=default_weights,
        description="Relative weight per score component",
    )
    limit: int = Field(20, ge=1, description="Maximum matches returned by a ranking")
    min_score: int = Field(0, ge=0, le=100, description="Minimum score for a ranked match")
    log_level: str = Field("WARNING", description="Root log level")

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        resolved = FitScorer.resolve_weights(v)
        return {key.value: weight for key, weight in resolved.items()}


def settings_path() -> Path:
    """Settings file location, overridable with NANNYMATCH_SETTINGS."""
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_SETTINGS_PATH


def load_settings(path: Optional[Path] = None) -> MatchingSettings:
    """Load matching settings from YAML file.

    Args:
        path: Optional path to settings file. Defaults to settings_path().

    Returns:
        MatchingSettings instance. Returns defaults if file doesn't exist.
    """
    if path is None:
        path = settings_path()

    if not path.exists():
        return MatchingSettings()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return MatchingSettings()

    return MatchingSettings.model_validate(data)


def save_settings(settings: MatchingSettings, path: Optional[Path] = None) -> Path:
    """Save matching settings to YAML file.

    Args:
        settings: MatchingSettings instance to save.
        path: Optional path to save to. Defaults to settings_path().

    Returns:
        Path where settings were saved.
    """
    if path is None:
        path = settings_path()

    path.parent.mkdir(parents=True, exist_ok=True)

    data = settings.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    return path


def load_records(path: Path) -> Any:
    """Load raw records from a YAML or JSON file.

    Args:
        path: File to read; ``.json`` is parsed as JSON, anything else as YAML.

    Returns:
        Parsed content (mapping or list of mappings)
    """
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)
