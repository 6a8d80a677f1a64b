"""Category Resolver - maps question ids to their owning category."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .exceptions import UnknownQuestionId
from .schema import EnrichedAnswer, Taxonomy

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Finds the category a question belongs to.

    Categories are scanned in declared order and questions within each
    category in declared order; the first exact id match wins. The lookup
    index is built once and keeps that first-match rule.
    """

    def __init__(self, taxonomy: Taxonomy):
        self.taxonomy = taxonomy
        self._index: dict[str, str] = {}
        for category in taxonomy.categories:
            for question in category.questions:
                self._index.setdefault(question.id, category.name)

    def resolve(self, question_id: str) -> str:
        """Return the category name owning ``question_id``.

        Raises:
            UnknownQuestionId: If no category contains the id.
        """
        try:
            return self._index[str(question_id)]
        except KeyError:
            raise UnknownQuestionId(str(question_id))

    def knows(self, question_id: str) -> bool:
        return str(question_id) in self._index

    def enrich(self, answers: Sequence[Mapping[str, Any]]) -> list[EnrichedAnswer]:
        """Attach a category to every answer.

        Answers are expected to be validated already (``questionId`` present,
        ``value`` an int). A category supplied on the answer is kept; missing
        ones are resolved. Any unknown id aborts the whole batch.
        """
        enriched = []
        for answer in answers:
            question_id = str(answer["questionId"])
            category = answer.get("category")
            if not category:
                category = self.resolve(question_id)
                logger.debug("Resolved %s -> %s", question_id, category)
            enriched.append(EnrichedAnswer(
                question_id=question_id,
                category=category,
                value=answer["value"],
            ))
        return enriched
