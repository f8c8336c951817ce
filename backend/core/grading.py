"""
grading.py — Grade lookup against administrator-defined grading scales.

Each scale band belongs to a stage ("primary" or "jhs"). A score is graded
against the bands of its class level's stage, highest band first. A score
no band covers yields the "N/A" / "Out of range" sentinel, which callers
render distinctly from a real grade.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from core.class_levels import GRADING_STAGES, stage_of
from core.errors import InvalidArgument
from core.models import GradingScale, ensure_collection, load_records

logger = logging.getLogger(__name__)

OUT_OF_RANGE = {"grade": "N/A", "description": "Out of range"}
NO_SCORE = "-"


def _bands_for_stage(stage: str, scales: Iterable) -> List[GradingScale]:
    records = load_records(ensure_collection(scales, "scales"), GradingScale)
    relevant = [s for s in records if s.stage == stage]
    # sorted() is stable: bands sharing a min_score keep their input order.
    return sorted(relevant, key=lambda s: s.min_score, reverse=True)


def resolve_grade(score: Optional[float], class_level: str, scales: Iterable) -> Dict[str, Any]:
    """Grade ``score`` for ``class_level``; sentinel when no band matches."""
    stage = stage_of(class_level)
    bands = _bands_for_stage(stage, scales)

    if score is not None:
        for band in bands:
            if band.min_score <= score <= band.max_score:
                return {
                    "grade": band.grade,
                    "description": band.description,
                    "stage": stage,
                    "in_range": True,
                }

    logger.debug("No %s grading band covers score %r (%s)", stage, score, class_level)
    return {**OUT_OF_RANGE, "stage": stage, "in_range": False}


def grade_badge(score: Optional[float], class_level: str, scales: Iterable) -> str:
    """Grade label for a report cell; "-" when nothing was entered."""
    if not score:
        return NO_SCORE
    return resolve_grade(score, class_level, scales)["grade"]


def grade_remark(score: Optional[float], class_level: str, scales: Iterable) -> str:
    """Band description for a report cell; "-" when nothing was entered."""
    if not score:
        return NO_SCORE
    return resolve_grade(score, class_level, scales)["description"]


def grade_legend(stage: str, scales: Iterable) -> List[Dict[str, Any]]:
    """Bands of one stage, high to low, for report legends."""
    if stage not in GRADING_STAGES:
        raise InvalidArgument(f"Unknown grading stage '{stage}'. Use one of {GRADING_STAGES}.")
    return [
        {
            "min": band.min_score,
            "max": band.max_score,
            "grade": band.grade,
            "description": band.description,
        }
        for band in _bands_for_stage(stage, scales)
    ]


def check_scale_coverage(stage: str, scales: Iterable) -> Dict[str, List[int]]:
    """
    Whole-number scores in 0-100 that no band covers ("gaps") or that
    more than one band covers ("overlaps"). The resolver tolerates both;
    this is for administrators editing scales.
    """
    if stage not in GRADING_STAGES:
        raise InvalidArgument(f"Unknown grading stage '{stage}'. Use one of {GRADING_STAGES}.")
    bands = _bands_for_stage(stage, scales)

    gaps, overlaps = [], []
    for score in range(0, 101):
        hits = sum(1 for b in bands if b.min_score <= score <= b.max_score)
        if hits == 0:
            gaps.append(score)
        elif hits > 1:
            overlaps.append(score)
    return {"gaps": gaps, "overlaps": overlaps}
