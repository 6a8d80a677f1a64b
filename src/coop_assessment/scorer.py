"""Scoring Engine - per-category means and the overall mean of means."""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .config import ScoringConfig, get_config
from .exceptions import EmptyAnswerSet
from .schema import EnrichedAnswer, ScoreBreakdown


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero on the decimal representation.

    ``round()`` rounds ties to even: ``round(2.125, 2)`` gives 2.12 and
    ``round(50.5)`` gives 50, where stored scores expect 2.13 and 51.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class AssessmentScorer:
    """Scores enriched answers.

    Scoring principles:
    - A category score is the plain arithmetic mean of its answers
      (question weights are not applied)
    - The overall score is the mean of category scores, so every category
      counts equally whatever its number of questions
    - Category scores keep full precision; only the overall score is rounded
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or get_config().scoring

    def score(self, answers: Sequence[EnrichedAnswer]) -> ScoreBreakdown:
        """Compute per-category and overall scores.

        Args:
            answers: Non-empty sequence of enriched answers.

        Returns:
            ScoreBreakdown with categories in order of first appearance.

        Raises:
            EmptyAnswerSet: If ``answers`` is empty.
        """
        if not answers:
            raise EmptyAnswerSet()

        scores_by_category = self.category_scores(answers)
        overall = sum(scores_by_category.values()) / len(scores_by_category)

        return ScoreBreakdown(
            scores_by_category=scores_by_category,
            overall_score=round_half_up(overall, self.config.overall_precision),
        )

    def category_scores(self, answers: Sequence[EnrichedAnswer]) -> dict[str, float]:
        """Arithmetic mean of answer values per category."""
        values_by_category: dict[str, list[int]] = {}
        for answer in answers:
            values_by_category.setdefault(answer.category, []).append(answer.value)

        return {
            category: sum(values) / len(values)
            for category, values in values_by_category.items()
        }
