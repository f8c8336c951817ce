"""
weights.py — Class/exam percentage split per class band.

The split doubles as the maximum points for each component at score entry,
so report headers and entry bounds both come from here.
"""

import logging
import os
from dataclasses import dataclass
from typing import Iterable, Tuple

from core.class_levels import grade_index
from core.errors import ScoreOutOfRange
from core.models import AssessmentConfig, ensure_collection, load_records

logger = logging.getLogger(__name__)

DEFAULT_CLASS_WEIGHT = int(os.getenv("DEFAULT_CLASS_WEIGHT", "40"))
DEFAULT_EXAM_WEIGHT = int(os.getenv("DEFAULT_EXAM_WEIGHT", "60"))


@dataclass(frozen=True)
class Weights:
    class_weight: int
    exam_weight: int
    matched: bool = True

    def as_dict(self):
        return {"class": self.class_weight, "exam": self.exam_weight, "matched": self.matched}


def resolve_weights(class_level: str, configs: Iterable) -> Weights:
    """First config whose level range covers the label's index, else 40/60."""
    index = grade_index(class_level)
    for config in load_records(ensure_collection(configs, "configs"), AssessmentConfig):
        if config.min_class_level <= index <= config.max_class_level:
            return Weights(config.class_score_weight, config.exam_score_weight)

    logger.debug("No assessment config for %r (index %d); using default split", class_level, index)
    return Weights(DEFAULT_CLASS_WEIGHT, DEFAULT_EXAM_WEIGHT, matched=False)


def validate_components(class_score: float, exam_score: float, weights: Weights) -> float:
    """Bound-check a score entry and return its recomputed total."""
    for component, value, maximum in (
        ("Class", class_score, weights.class_weight),
        ("Exam", exam_score, weights.exam_weight),
    ):
        if value is None:
            continue
        if value < 0 or value > maximum:
            raise ScoreOutOfRange(component, value, maximum)
    return (class_score or 0) + (exam_score or 0)


def column_headers(weights: Weights) -> Tuple[str, str]:
    return (
        f"Class Score ({weights.class_weight}%)",
        f"Exam Score ({weights.exam_weight}%)",
    )
