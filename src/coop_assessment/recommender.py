"""Recommendation Generator - turns category scores into advice strings.

Categories are tied to recommendation axes by free-text matching on the
category name. The rules below are plain substring checks; stored results
and the taxonomy's category names depend on them exactly.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Optional

from .config import AxisKeywordConfig, RecommendationConfig, get_config
from .schema import AxisRecommendations, Taxonomy

logger = logging.getLogger(__name__)


def match_axis_keyword(
    category: str,
    axis_keywords: Sequence[AxisKeywordConfig],
) -> Optional[str]:
    """Return the axis of the first keyword contained in ``category``.

    Matching is case-sensitive substring containment, checked in list
    order. A category containing two keywords only ever gets the first one.
    """
    for entry in axis_keywords:
        if entry.keyword in category:
            return entry.axis
    return None


def summary_keyword(category: str, separator: str = " - ") -> Optional[str]:
    """Lower-cased sub-theme of a category name.

    ``"Diagnostic Stratégique - Gouvernance"`` gives ``"gouvernance"``.
    Names without a second segment give None.
    """
    parts = category.split(separator)
    if len(parts) < 2 or not parts[1].strip():
        return None
    return parts[1].strip().lower()


def select_summary(candidates: Sequence[str], keyword: str) -> Optional[str]:
    """First candidate whose lower-cased text contains ``keyword``."""
    for candidate in candidates:
        if keyword in candidate.lower():
            return candidate
    return None


class RecommendationGenerator:
    """Generates one recommendation per mappable category.

    - Tiered axes pick the low, mid or high string from the category score
    - Summary axes pick the first candidate mentioning the category's
      sub-theme
    - Categories without an axis, or without a matching candidate, are
      skipped silently
    """

    def __init__(self, taxonomy: Taxonomy, config: Optional[RecommendationConfig] = None):
        self.taxonomy = taxonomy
        self.config = config or get_config().recommendations

    def generate(self, scores_by_category: Mapping[str, float]) -> list[str]:
        """Build ``"<category>: <text>"`` strings in category order.

        Args:
            scores_by_category: Full-precision category scores.

        Returns:
            Recommendations, at most one per category.
        """
        recommendations = []
        for category, score in scores_by_category.items():
            text = self.recommend(category, score)
            if text is not None:
                recommendations.append(f"{category}: {text}")
        return recommendations

    def recommend(self, category: str, score: float) -> Optional[str]:
        """Recommendation text for one category, or None to skip it."""
        axis = self.resolve_axis(category)
        if axis is None:
            logger.debug("No recommendation axis for category '%s'", category)
            return None

        if axis.is_tiered:
            return axis.tiered[self.tier_for(score)]

        keyword = summary_keyword(category, self.config.summary_separator)
        if keyword is None:
            logger.debug("Category '%s' has no sub-theme for axis '%s'", category, axis.name)
            return None
        text = select_summary(axis.summary, keyword)
        if text is None:
            logger.debug("No '%s' recommendation mentions '%s'", axis.name, keyword)
        return text

    def resolve_axis(self, category: str) -> Optional[AxisRecommendations]:
        axis_name = match_axis_keyword(category, self.config.axis_keywords)
        if axis_name is None:
            return None
        return self.taxonomy.get_axis(axis_name)

    def tier_for(self, score: float) -> int:
        """0 (low), 1 (mid) or 2 (high); the thresholds are inclusive."""
        if score <= self.config.low_tier_max:
            return 0
        if score <= self.config.mid_tier_max:
            return 1
        return 2
