"""Pydantic models for the cooperative self-assessment engine.

Raw schemas mirror the taxonomy data feed exactly (``Questions`` /
``Scales.GeneralInterpretation`` / ``Scales.Axes``). Normalized schemas are
the frozen, typed structures the scoring components work on, plus the
records the pipeline and reporting layer produce.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_id(value: Any) -> Any:
    """Question ids are compared as strings; accept numeric ids from JSON."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# =============================================================================
# Raw Taxonomy Models (matching the taxonomy data feed)
# =============================================================================


class RawQuestion(BaseModel):
    """Raw question entry under a category."""
    model_config = ConfigDict(extra="allow")

    id: str
    question: str
    answer: Optional[str] = None
    weight: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, v: Any) -> Any:
        return _coerce_id(v)


class RawScaleEntry(BaseModel):
    """Raw interpretation band, e.g. ``{"range": "1.00 - 1.59", ...}``."""
    model_config = ConfigDict(extra="allow")

    range: str
    interpretation: str


class RawAxis(BaseModel):
    """Raw axis recommendation table.

    Exactly one of ``recommendations`` (three tiers) or
    ``recommendations_summary`` (keyword-matched list) is expected; the
    loader enforces it.
    """
    model_config = ConfigDict(extra="allow")

    recommendations: Optional[list[str]] = None
    recommendations_summary: Optional[list[str]] = None


class RawScales(BaseModel):
    """Raw ``Scales`` section."""
    model_config = ConfigDict(extra="allow")

    GeneralInterpretation: list[RawScaleEntry]
    Axes: dict[str, RawAxis] = Field(default_factory=dict)


class RawTaxonomy(BaseModel):
    """Raw taxonomy document.

    Note: ``Questions`` is a list of single-key mappings so that category
    order is part of the document.
    """
    model_config = ConfigDict(extra="allow")

    Questions: list[dict[str, list[RawQuestion]]]
    Scales: RawScales


# =============================================================================
# Normalized Taxonomy Models (immutable)
# =============================================================================


class Question(BaseModel):
    """A questionnaire item."""
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    expected_answer: str = ""
    weight: float = 1.0  # Reserved; scoring is an unweighted mean


class Category(BaseModel):
    """A named, ordered group of questions."""
    model_config = ConfigDict(frozen=True)

    name: str
    questions: tuple[Question, ...]

    def question_ids(self) -> list[str]:
        return [q.id for q in self.questions]


class ScaleBand(BaseModel):
    """A closed score range mapped to an interpretation label."""
    model_config = ConfigDict(frozen=True)

    range_min: float
    range_max: float
    label: str

    def contains(self, score: float) -> bool:
        """Inclusive on both ends."""
        return self.range_min <= score <= self.range_max


class AxisRecommendations(BaseModel):
    """Recommendation templates for one axis.

    ``tiered`` holds the low / mid / high strings; ``summary`` holds the
    candidates filtered by category keyword. Exactly one is set.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    tiered: Optional[tuple[str, str, str]] = None
    summary: Optional[tuple[str, ...]] = None

    @property
    def is_tiered(self) -> bool:
        return self.tiered is not None


class Taxonomy(BaseModel):
    """Read-only reference structure, loaded once per process.

    Built by ``taxonomy.build_taxonomy`` / ``taxonomy.load_taxonomy`` and
    injected into the resolver, classifier and recommender.
    """
    model_config = ConfigDict(frozen=True)

    categories: tuple[Category, ...]
    scale_bands: tuple[ScaleBand, ...]
    axes: tuple[AxisRecommendations, ...] = ()
    source: Optional[str] = None

    @property
    def question_count(self) -> int:
        return sum(len(c.questions) for c in self.categories)

    def category_names(self) -> list[str]:
        return [c.name for c in self.categories]

    def get_category(self, name: str) -> Optional[Category]:
        return next((c for c in self.categories if c.name == name), None)

    def axis_names(self) -> list[str]:
        return [a.name for a in self.axes]

    def get_axis(self, name: str) -> Optional[AxisRecommendations]:
        return next((a for a in self.axes if a.name == name), None)

    def questionnaire(self) -> list[dict[str, Any]]:
        """Questionnaire in declared order, in the data-feed vocabulary."""
        return [
            {
                "category": category.name,
                "questions": [
                    {"id": q.id, "question": q.text, "answer": q.expected_answer}
                    for q in category.questions
                ],
            }
            for category in self.categories
        ]


# =============================================================================
# Submission Models
# =============================================================================


class EnrichedAnswer(BaseModel):
    """An answer with its category resolved."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question_id: str = Field(alias="questionId")
    category: str
    value: int

    @field_validator("question_id", mode="before")
    @classmethod
    def normalize_id(cls, v: Any) -> Any:
        return _coerce_id(v)


class ScoreBreakdown(BaseModel):
    """Output of the scoring engine."""
    scores_by_category: dict[str, float]
    overall_score: float


class AssessmentResult(BaseModel):
    """One scored submission for one cooperative.

    Derived fields are only ever replaced as a whole by re-running the
    pipeline.
    """
    model_config = ConfigDict(populate_by_name=True)

    cooperative_id: Any = Field(alias="cooperativeId")
    answers: list[EnrichedAnswer]
    overall_score: float = Field(alias="overallScore")
    scores_by_category: dict[str, float] = Field(alias="scoresByCategory")
    interpretation: str
    recommendations: list[str] = Field(default_factory=list)
    cooperative_score: int = Field(
        alias="cooperativeScore",
        description="Score written back to the cooperative (overall x 20)",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt",
    )

    def to_record(self) -> dict[str, Any]:
        """Persisted field set, keyed the way the result store expects."""
        return {
            "cooperativeId": self.cooperative_id,
            "answers": [a.model_dump(by_alias=True) for a in self.answers],
            "overallScore": self.overall_score,
            "scoresByCategory": dict(self.scores_by_category),
            "interpretation": self.interpretation,
            "recommendations": list(self.recommendations),
            "createdAt": self.created_at.isoformat(),
        }


# =============================================================================
# Reporting Models
# =============================================================================


class CategoryPerformance(BaseModel):
    """Aggregate statistics for one category across many results."""
    category: str
    average: float
    min: float
    max: float
    standard_deviation: float
    assessment_count: int
    performance_level: str


class CategoryPerformanceSummary(BaseModel):
    """Category performance, weakest first, with the extremes called out."""
    categories: list[CategoryPerformance] = Field(default_factory=list)
    total_categories: int = 0
    weakest_category: Optional[CategoryPerformance] = None
    strongest_category: Optional[CategoryPerformance] = None


class RecommendationFrequency(BaseModel):
    """How often a category shows up in issued recommendations."""
    category: str
    count: int
    percentage: float
