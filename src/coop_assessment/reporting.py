"""Reporting rollups over many stored assessment results.

Works on ``AssessmentResult`` objects or on persisted records (dicts with
the camelCase keys of ``AssessmentResult.to_record``). Nothing here feeds
back into per-record scoring.
"""

import json
import statistics
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Any, Optional, Union

from .interpreter import InterpretationClassifier
from .schema import (
    AssessmentResult,
    CategoryPerformance,
    CategoryPerformanceSummary,
    RecommendationFrequency,
)
from .scorer import round_half_up

ResultLike = Union[AssessmentResult, dict[str, Any]]

# Cooperative score buckets: (label, lower bound inclusive, upper bound inclusive)
COOPERATIVE_SCORE_BUCKETS = [
    ("0-19", 0, 19),
    ("20-39", 20, 39),
    ("40-59", 40, 59),
    ("60-79", 60, 79),
    ("80-100", 80, 100),
]


def _overall(result: ResultLike) -> Optional[float]:
    if isinstance(result, AssessmentResult):
        return result.overall_score
    score = result.get("overallScore")
    # DECIMAL columns come back as text
    return float(score) if score is not None else None


def _category_scores(result: ResultLike) -> dict[str, float]:
    if isinstance(result, AssessmentResult):
        return result.scores_by_category
    scores = result.get("scoresByCategory")
    # Some stores hand JSON columns back as text
    if isinstance(scores, str):
        scores = json.loads(scores)
    return {category: float(score) for category, score in (scores or {}).items()}


def _interpretation(result: ResultLike) -> Optional[str]:
    if isinstance(result, AssessmentResult):
        return result.interpretation
    return result.get("interpretation")


def _recommendations(result: ResultLike) -> list[str]:
    if isinstance(result, AssessmentResult):
        return result.recommendations
    recs = result.get("recommendations")
    if isinstance(recs, str):
        recs = json.loads(recs)
    return recs if isinstance(recs, list) else []


def _collect_category_scores(results: Iterable[ResultLike]) -> dict[str, list[float]]:
    collected: dict[str, list[float]] = {}
    for result in results:
        for category, score in _category_scores(result).items():
            collected.setdefault(category, []).append(score)
    return collected


def average_overall_score(results: Iterable[ResultLike]) -> float:
    """Mean overall score of results that have one; 0.0 when none do."""
    scores = [s for s in (_overall(r) for r in results) if s is not None]
    if not scores:
        return 0.0
    return round_half_up(statistics.fmean(scores), 2)


def average_scores_by_category(results: Iterable[ResultLike]) -> dict[str, float]:
    """Mean score per category across results, 2 decimals."""
    return {
        category: round_half_up(statistics.fmean(scores), 2)
        for category, scores in _collect_category_scores(results).items()
    }


def category_performance(
    results: Iterable[ResultLike],
    classifier: InterpretationClassifier,
) -> CategoryPerformanceSummary:
    """Per-category statistics, weakest category first.

    The performance level is the interpretation band of the rounded average.
    Standard deviation is the population one.
    """
    performances = []
    for category, scores in _collect_category_scores(results).items():
        average = round_half_up(statistics.fmean(scores), 2)
        performances.append(CategoryPerformance(
            category=category,
            average=average,
            min=min(scores),
            max=max(scores),
            standard_deviation=round_half_up(statistics.pstdev(scores), 2),
            assessment_count=len(scores),
            performance_level=classifier.classify(average),
        ))

    performances.sort(key=lambda p: p.average)

    return CategoryPerformanceSummary(
        categories=performances,
        total_categories=len(performances),
        weakest_category=performances[0] if performances else None,
        strongest_category=performances[-1] if performances else None,
    )


def overall_score_distribution(
    results: Iterable[ResultLike],
    classifier: InterpretationClassifier,
) -> dict[str, int]:
    """Count of results per interpretation band, bands in declared order.

    Every band is listed (zero counts included); the out-of-range bucket
    only appears when a stored score fell outside all bands.
    """
    distribution = {label: 0 for label in classifier.labels()}
    for result in results:
        score = _overall(result)
        if score is None:
            continue
        label = classifier.classify(score)
        distribution[label] = distribution.get(label, 0) + 1
    return distribution


def interpretation_distribution(results: Iterable[ResultLike]) -> dict[str, int]:
    """Count of results per stored interpretation label, most common first."""
    counts = Counter(
        label for label in (_interpretation(r) for r in results) if label
    )
    return dict(counts.most_common())


def recommendation_frequency(
    results: Iterable[ResultLike],
    top: Optional[int] = None,
) -> list[RecommendationFrequency]:
    """How often each category appears in issued recommendations.

    The category is the text before the first ``":"`` of a recommendation.
    Sorted by count, highest first.
    """
    counts: Counter[str] = Counter()
    for result in results:
        for recommendation in _recommendations(result):
            category = recommendation.split(":", 1)[0].strip()
            if category:
                counts[category] += 1

    total = sum(counts.values())
    frequencies = [
        RecommendationFrequency(
            category=category,
            count=count,
            percentage=round_half_up(count / total * 100, 2),
        )
        for category, count in counts.most_common()
    ]
    return frequencies[:top] if top is not None else frequencies


def cooperative_score_distribution(scores: Sequence[int]) -> dict[str, int]:
    """Bucket cooperative scores into 20-point ranges.

    Scores outside 0-100 are not counted.
    """
    distribution = {label: 0 for label, _, _ in COOPERATIVE_SCORE_BUCKETS}
    for score in scores:
        for label, low, high in COOPERATIVE_SCORE_BUCKETS:
            if low <= score <= high:
                distribution[label] += 1
                break
    return distribution
