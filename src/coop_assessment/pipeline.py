"""Assessment Pipeline - scores one submission end to end.

Steps run strictly in order, each a hard precondition for the next:

1. The submission must be a non-empty list of answers
2. Every answer needs ``questionId`` and an integer ``value``
3. Missing categories are resolved from the taxonomy
4. Category and overall scores are computed
5. The overall score is mapped to an interpretation label
6. Recommendations are derived from the category scores
7. The result record is assembled, with the cooperative score

The pipeline holds no per-run state; persisting the result and writing the
cooperative score (both or neither) is the caller's job.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from .config import AssessmentConfig, get_config
from .exceptions import EmptyAnswerSet, InvalidAnswerValue, MissingAnswerField
from .interpreter import InterpretationClassifier
from .recommender import RecommendationGenerator
from .resolver import CategoryResolver
from .schema import AssessmentResult, Taxonomy
from .scorer import AssessmentScorer, round_half_up
from .taxonomy import load_default_taxonomy, load_taxonomy

logger = logging.getLogger(__name__)

REQUIRED_ANSWER_FIELDS = ("questionId", "value")


def cooperative_score(overall_score: float, factor: float = 20) -> int:
    """Cooperative score written alongside a result: ``round(overall * 20)``."""
    return int(round_half_up(overall_score * factor))


def parse_answer_value(index: int, value: Any) -> int:
    """Parse an answer value into an int.

    Accepts ints, integral floats and strings holding either.

    Raises:
        InvalidAnswerValue: For booleans, fractional numbers and
            non-numeric strings.
    """
    if isinstance(value, bool):
        raise InvalidAnswerValue(index, value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                raise InvalidAnswerValue(index, value)
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    raise InvalidAnswerValue(index, value)


def validate_answers(raw_answers: Any) -> list[dict[str, Any]]:
    """Check the submission shape and normalize each answer.

    Returns:
        Plain dicts with ``questionId`` (str), ``value`` (int) and the
        optional ``category``.

    Raises:
        EmptyAnswerSet: If the submission is not a non-empty list.
        MissingAnswerField: If an answer lacks a required field or carries
            a category that is not a string.
        InvalidAnswerValue: If a value is not an integer.
    """
    if (
        not isinstance(raw_answers, Sequence)
        or isinstance(raw_answers, (str, bytes))
        or len(raw_answers) == 0
    ):
        raise EmptyAnswerSet()

    validated = []
    for index, answer in enumerate(raw_answers):
        if not isinstance(answer, Mapping):
            raise MissingAnswerField(index, "questionId", f"Answer #{index} must be an object")
        for field in REQUIRED_ANSWER_FIELDS:
            if answer.get(field) is None or answer.get(field) == "":
                raise MissingAnswerField(index, field)
        category = answer.get("category") or None
        if category is not None and not isinstance(category, str):
            raise MissingAnswerField(
                index, "category", f"Answer #{index} has a non-string category: {category!r}"
            )
        validated.append({
            "questionId": str(answer["questionId"]),
            "value": parse_answer_value(index, answer["value"]),
            "category": category,
        })
    return validated


class AssessmentPipeline:
    """Runs submissions through resolver, scorer, classifier and recommender.

    The taxonomy is injected once; every component reads it, none mutate it.
    A pipeline can be shared across threads.
    """

    def __init__(self, taxonomy: Taxonomy, config: Optional[AssessmentConfig] = None):
        self.taxonomy = taxonomy
        self.config = config or get_config()
        self.resolver = CategoryResolver(taxonomy)
        self.scorer = AssessmentScorer(self.config.scoring)
        self.classifier = InterpretationClassifier(
            taxonomy.scale_bands,
            self.config.interpretation.out_of_range_label,
        )
        self.recommender = RecommendationGenerator(taxonomy, self.config.recommendations)

    @classmethod
    def from_config(cls, config: Optional[AssessmentConfig] = None) -> "AssessmentPipeline":
        """Build a pipeline on the configured (or packaged) taxonomy."""
        config = config or get_config()
        if config.taxonomy_path:
            taxonomy = load_taxonomy(config.taxonomy_path)
        else:
            taxonomy = load_default_taxonomy()
        return cls(taxonomy, config)

    def run(self, cooperative_id: Any, raw_answers: Any) -> AssessmentResult:
        """Score one submission.

        Args:
            cooperative_id: Owning cooperative, already checked by the caller.
            raw_answers: Sequence of ``{questionId, value, category?}``.

        Returns:
            The complete AssessmentResult.

        Raises:
            EmptyAnswerSet, MissingAnswerField, UnknownQuestionId: On
            invalid input. Nothing is returned in that case.
        """
        answers = validate_answers(raw_answers)
        enriched = self.resolver.enrich(answers)
        breakdown = self.scorer.score(enriched)
        interpretation = self.classifier.classify(breakdown.overall_score)
        recommendations = self.recommender.generate(breakdown.scores_by_category)

        result = AssessmentResult(
            cooperative_id=cooperative_id,
            answers=enriched,
            overall_score=breakdown.overall_score,
            scores_by_category=breakdown.scores_by_category,
            interpretation=interpretation,
            recommendations=recommendations,
            cooperative_score=cooperative_score(
                breakdown.overall_score,
                self.config.scoring.cooperative_score_factor,
            ),
        )
        logger.info(
            "Scored cooperative %s: %d answers, %d categories, overall %.2f (%s)",
            cooperative_id,
            len(enriched),
            len(breakdown.scores_by_category),
            result.overall_score,
            interpretation,
        )
        return result

    def rerun(self, previous: AssessmentResult, raw_answers: Any) -> AssessmentResult:
        """Recompute a stored result from new answers.

        Every derived field is replaced; only the owner and creation time
        carry over.
        """
        updated = self.run(previous.cooperative_id, raw_answers)
        return updated.model_copy(update={"created_at": previous.created_at})
