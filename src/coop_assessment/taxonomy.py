"""Taxonomy Store - loads and validates the assessment reference document.

The document keeps its historical layout::

    {
      "Questions": [{"<category>": [{"id", "question", "answer"}, ...]}, ...],
      "Scales": {
        "GeneralInterpretation": [{"range": "1.00 - 1.59", "interpretation": "..."}],
        "Axes": {"<axis>": {"recommendations": [low, mid, high]}
                 | {"recommendations_summary": [...]}}
      }
    }

It is validated once into frozen models; schema drift fails here rather
than during scoring.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from .exceptions import TaxonomyLoadError
from .schema import (
    AxisRecommendations,
    Category,
    Question,
    RawAxis,
    RawTaxonomy,
    ScaleBand,
    Taxonomy,
)

logger = logging.getLogger(__name__)

DEFAULT_TAXONOMY_PATH = Path(__file__).parent / "data" / "taxonomy.json"

# Range strings are "min - max"; the separator is part of the data format.
RANGE_SEPARATOR = " - "

SCORE_DOMAIN = (1.0, 5.0)


def parse_range(value: str) -> tuple[float, float]:
    """Parse a ``"min - max"`` range string.

    Raises:
        TaxonomyLoadError: If the string does not hold two numbers or
            min exceeds max.
    """
    parts = value.split(RANGE_SEPARATOR)
    if len(parts) != 2:
        raise TaxonomyLoadError(
            f"Invalid range '{value}': expected 'min{RANGE_SEPARATOR}max'"
        )
    try:
        low, high = float(parts[0].strip()), float(parts[1].strip())
    except ValueError:
        raise TaxonomyLoadError(f"Invalid range '{value}': bounds must be numbers")
    if low > high:
        raise TaxonomyLoadError(f"Invalid range '{value}': min is greater than max")
    return low, high


def _build_categories(raw: RawTaxonomy) -> tuple[Category, ...]:
    categories: list[Category] = []
    seen_names: set[str] = set()
    first_owner: dict[str, str] = {}

    for index, entry in enumerate(raw.Questions):
        if len(entry) != 1:
            raise TaxonomyLoadError(
                f"Questions[{index}] must map exactly one category name to its questions"
            )
        name, raw_questions = next(iter(entry.items()))
        if not name.strip():
            raise TaxonomyLoadError(f"Questions[{index}] has an empty category name")
        if name in seen_names:
            raise TaxonomyLoadError(f"Duplicate category: {name}")
        if not raw_questions:
            raise TaxonomyLoadError(f"Category '{name}' has no questions")
        seen_names.add(name)

        questions = []
        for rq in raw_questions:
            if rq.id in first_owner:
                # Resolution is first-match, so the later entry is unreachable.
                logger.warning(
                    "Question id %s appears in '%s' and '%s'; '%s' wins",
                    rq.id, first_owner[rq.id], name, first_owner[rq.id],
                )
            else:
                first_owner[rq.id] = name
            questions.append(Question(
                id=rq.id,
                text=rq.question,
                expected_answer=rq.answer or "",
                weight=rq.weight if rq.weight is not None else 1.0,
            ))
        categories.append(Category(name=name, questions=tuple(questions)))

    if not categories:
        raise TaxonomyLoadError("Taxonomy defines no categories")
    return tuple(categories)


def _build_bands(raw: RawTaxonomy) -> tuple[ScaleBand, ...]:
    bands: list[ScaleBand] = []
    for entry in raw.Scales.GeneralInterpretation:
        low, high = parse_range(entry.range)
        if any(b.label == entry.interpretation for b in bands):
            raise TaxonomyLoadError(f"Duplicate interpretation label: {entry.interpretation}")
        if bands and low < bands[-1].range_max:
            raise TaxonomyLoadError(
                f"Band '{entry.range}' overlaps or precedes band "
                f"'{bands[-1].range_min} - {bands[-1].range_max}'; "
                "bands must be declared low to high without overlap"
            )
        bands.append(ScaleBand(range_min=low, range_max=high, label=entry.interpretation))

    if not bands:
        raise TaxonomyLoadError("Scales.GeneralInterpretation defines no bands")
    if bands[0].range_min > SCORE_DOMAIN[0] or bands[-1].range_max < SCORE_DOMAIN[1]:
        logger.warning(
            "Interpretation bands cover %s-%s, not the full %s-%s score domain",
            bands[0].range_min, bands[-1].range_max, *SCORE_DOMAIN,
        )
    return tuple(bands)


def _build_axis(name: str, raw: RawAxis) -> AxisRecommendations:
    has_tiers = raw.recommendations is not None
    has_summary = raw.recommendations_summary is not None
    if has_tiers == has_summary:
        raise TaxonomyLoadError(
            f"Axis '{name}' must define exactly one of "
            "'recommendations' or 'recommendations_summary'"
        )
    if has_tiers:
        if len(raw.recommendations) != 3:
            raise TaxonomyLoadError(
                f"Axis '{name}' must define exactly 3 tiered recommendations, "
                f"found {len(raw.recommendations)}"
            )
        return AxisRecommendations(name=name, tiered=tuple(raw.recommendations))
    if not raw.recommendations_summary:
        raise TaxonomyLoadError(f"Axis '{name}' has an empty recommendations_summary")
    return AxisRecommendations(name=name, summary=tuple(raw.recommendations_summary))


def build_taxonomy(data: Any, source: Optional[str] = None) -> Taxonomy:
    """Validate a raw taxonomy document and build the immutable Taxonomy.

    Args:
        data: Parsed document (dict) in the data-feed layout.
        source: Where the document came from, kept for diagnostics.

    Returns:
        The validated Taxonomy.

    Raises:
        TaxonomyLoadError: On any schema violation.
    """
    if not isinstance(data, dict):
        raise TaxonomyLoadError("Taxonomy document must be a JSON/YAML object")
    try:
        raw = RawTaxonomy.model_validate(data)
    except ValidationError as e:
        raise TaxonomyLoadError(f"Taxonomy schema validation failed: {e}")

    taxonomy = Taxonomy(
        categories=_build_categories(raw),
        scale_bands=_build_bands(raw),
        axes=tuple(_build_axis(name, axis) for name, axis in raw.Scales.Axes.items()),
        source=source,
    )
    logger.info(
        "Loaded taxonomy%s: %d categories, %d questions, %d bands, %d axes",
        f" from {source}" if source else "",
        len(taxonomy.categories),
        taxonomy.question_count,
        len(taxonomy.scale_bands),
        len(taxonomy.axes),
    )
    return taxonomy


def load_taxonomy(path: Union[str, Path]) -> Taxonomy:
    """Load a taxonomy from a JSON or YAML file.

    Raises:
        TaxonomyLoadError: If the file is missing, unparseable or invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise TaxonomyLoadError(f"Taxonomy file not found: {path}")

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TaxonomyLoadError(f"Error parsing taxonomy file {path}: {e}")

    if data is None:
        raise TaxonomyLoadError(f"Taxonomy file is empty: {path}")
    return build_taxonomy(data, source=str(path))


def load_default_taxonomy() -> Taxonomy:
    """Load the taxonomy shipped with the package."""
    return load_taxonomy(DEFAULT_TAXONOMY_PATH)


def validate_taxonomy(path: Union[str, Path]) -> tuple[bool, list[str]]:
    """Validate a taxonomy file.

    Returns:
        Tuple of (is_valid, issues).
    """
    try:
        load_taxonomy(path)
    except TaxonomyLoadError as e:
        return False, [e.message]
    return True, []
