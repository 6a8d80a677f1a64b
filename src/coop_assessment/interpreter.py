"""Interpretation Classifier - maps a score onto a scale band label."""

import logging
from collections.abc import Sequence
from typing import Optional

from .config import get_config
from .schema import ScaleBand

logger = logging.getLogger(__name__)


class InterpretationClassifier:
    """Classifies scores against ordered, non-overlapping bands.

    Bands are scanned in declared (low to high) order and the first band
    containing the score wins, so a value on a shared endpoint belongs to
    the lower band. A score outside every band gets the out-of-range label
    instead of an error: reporting over a corrupt record must not crash.
    """

    def __init__(
        self,
        bands: Sequence[ScaleBand],
        out_of_range_label: Optional[str] = None,
    ):
        self.bands = tuple(bands)
        if out_of_range_label is None:
            out_of_range_label = get_config().interpretation.out_of_range_label
        self.out_of_range_label = out_of_range_label

    def band_for(self, score: float) -> Optional[ScaleBand]:
        for band in self.bands:
            if band.contains(score):
                return band
        return None

    def classify(self, score: float) -> str:
        """Return the label of the first band containing ``score``."""
        band = self.band_for(score)
        if band is None:
            logger.warning("Score %s is outside every interpretation band", score)
            return self.out_of_range_label
        return band.label

    def labels(self) -> list[str]:
        """Band labels in declared order."""
        return [band.label for band in self.bands]
