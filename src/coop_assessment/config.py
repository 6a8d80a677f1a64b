"""Centralized configuration management for the assessment engine."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class AxisKeywordConfig(BaseModel):
    """Maps a keyword found in category names to a recommendation axis."""
    keyword: str = Field(..., description="Substring searched for in the category name")
    axis: str = Field(..., description="Key of the axis under Scales.Axes")


def _default_axis_keywords() -> list[AxisKeywordConfig]:
    return [
        AxisKeywordConfig(keyword="Marketing", axis="Marketing"),
        AxisKeywordConfig(keyword="Opérationnel", axis="Opérationnel"),
        AxisKeywordConfig(keyword="Stratégique", axis="Stratégique"),
    ]


class RecommendationConfig(BaseModel):
    """Recommendation tier thresholds and axis matching.

    A category score at or below ``low_tier_max`` selects the first tier,
    at or below ``mid_tier_max`` the second, anything higher the third.
    """
    low_tier_max: float = Field(
        2.5,
        description="Highest category score that still selects the low tier"
    )
    mid_tier_max: float = Field(
        3.5,
        description="Highest category score that still selects the mid tier"
    )
    axis_keywords: list[AxisKeywordConfig] = Field(
        default_factory=_default_axis_keywords,
        description="Checked in order; the first keyword contained in a category name wins"
    )
    summary_separator: str = Field(
        " - ",
        description="Separator between a category's axis and its sub-theme"
    )


class InterpretationConfig(BaseModel):
    """Interpretation classifier settings."""
    out_of_range_label: str = Field(
        "Hors échelle",
        description="Label returned when a score falls outside every band"
    )


class ScoringConfig(BaseModel):
    """Rounding and cooperative score conversion."""
    overall_precision: int = Field(
        2,
        description="Decimal places kept on the overall score"
    )
    cooperative_score_factor: float = Field(
        20,
        description="Multiplier mapping the 1-5 overall score onto the cooperative score"
    )


class AssessmentConfig(BaseModel):
    """Complete configuration for the assessment engine."""
    taxonomy_path: Optional[str] = Field(
        None,
        description="Taxonomy document to load (default: the packaged taxonomy)"
    )
    recommendations: RecommendationConfig = Field(default_factory=RecommendationConfig)
    interpretation: InterpretationConfig = Field(default_factory=InterpretationConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


# Global config instance
_config: Optional[AssessmentConfig] = None


def get_config() -> AssessmentConfig:
    """Get the current configuration.

    Returns the global config, initializing with defaults if not yet loaded.
    """
    global _config
    if _config is None:
        _config = AssessmentConfig()
    return _config


def load_config(path: Path) -> AssessmentConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded AssessmentConfig.
    """
    global _config

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    _config = AssessmentConfig.model_validate(data or {})
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = AssessmentConfig()


def find_config_file() -> Optional[Path]:
    """Find an assessment configuration file.

    Looks in (order of priority):
    1. COOP_ASSESSMENT_CONFIG environment variable
    2. ./assessment-config.yaml
    3. ./assessment-config.yml
    4. ~/.config/coop-assessment/config.yaml
    """
    # Environment variable
    env_path = os.environ.get("COOP_ASSESSMENT_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    # Current directory
    for name in ["assessment-config.yaml", "assessment-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    # User config directory
    user_config = Path.home() / ".config" / "coop-assessment" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def save_default_config(path: Path) -> None:
    """Save the default configuration to a YAML file.

    Args:
        path: Path where to save the configuration.
    """
    config = AssessmentConfig()
    data = config.model_dump()

    yaml_content = """# Cooperative Assessment Configuration
# ====================================
#
# This file configures recommendation tiers, axis keyword matching,
# the out-of-range interpretation label and score rounding.
#
# Copy this file to one of these locations:
#   - ./assessment-config.yaml (current directory)
#   - ~/.config/coop-assessment/config.yaml (user config)
#
# Or set the COOP_ASSESSMENT_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
