"""
ranking.py — Class positions, overall and per subject.

Only students with at least one entered score are ranked; everyone else has
no position (rendered "-"), never a fabricated last place.

Tie policies:
- "sequential" (default): tied students get distinct consecutive positions
  in the order they were supplied (Python's sort is stable).
- "shared": tied students share a position and the next one skips,
  e.g. 1, 1, 3.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

from core.aggregator import ScoreAggregator
from core.errors import InvalidArgument
from core.models import ensure_collection, entity_id

TIES_SEQUENTIAL = "sequential"
TIES_SHARED = "shared"
TIE_POLICIES = (TIES_SEQUENTIAL, TIES_SHARED)

logger = logging.getLogger(__name__)


def _default_ties(value: str) -> str:
    if value in TIE_POLICIES:
        return value
    logger.warning("Unknown RANK_TIES %r; using %r", value, TIES_SEQUENTIAL)
    return TIES_SEQUENTIAL


DEFAULT_TIES = _default_ties(os.getenv("RANK_TIES", TIES_SEQUENTIAL))

NO_POSITION = "-"


@dataclass(frozen=True)
class RankedEntry:
    student_id: str
    value: float
    position: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "student_id": self.student_id,
            "value": self.value,
            "position": self.position,
            "position_text": ordinal_suffix(self.position),
        }


def _assign_positions(pairs: List[tuple], ties: str) -> List[RankedEntry]:
    if ties not in TIE_POLICIES:
        raise InvalidArgument(f"Unknown tie policy '{ties}'. Use one of {TIE_POLICIES}.")

    ordered = sorted(pairs, key=lambda p: p[1], reverse=True)
    if not ordered:
        return []

    if ties == TIES_SHARED:
        values = pd.Series([value for _, value in ordered], dtype=float)
        positions = values.rank(ascending=False, method="min").astype(int).tolist()
    else:
        positions = range(1, len(ordered) + 1)

    return [
        RankedEntry(student_id=sid, value=value, position=int(pos))
        for (sid, value), pos in zip(ordered, positions)
    ]


def rank_class_overall(
    students, subjects, aggregator: ScoreAggregator, ties: str = DEFAULT_TIES
) -> List[RankedEntry]:
    """Rank students with any entered score by descending average."""
    subjects = ensure_collection(subjects, "subjects")
    pairs = [
        (sid, aggregator.calculate_average(sid, subjects))
        for sid in (entity_id(s) for s in ensure_collection(students, "students"))
        if aggregator.has_any_score(sid, subjects)
    ]
    return _assign_positions(pairs, ties)


def rank_by_subject(
    students, subject_id, aggregator: ScoreAggregator, ties: str = DEFAULT_TIES
) -> List[RankedEntry]:
    """Rank students with an entered score in one subject by that score."""
    pairs = []
    for sid in (entity_id(s) for s in ensure_collection(students, "students")):
        value = aggregator.get_score(sid, subject_id)
        if value > 0:
            pairs.append((sid, value))
    return _assign_positions(pairs, ties)


def position_of(student_id, ranked: List[RankedEntry]) -> Optional[int]:
    for entry in ensure_collection(ranked, "ranked"):
        if entry.student_id == str(student_id):
            return entry.position
    return None


def ordinal_suffix(position: int) -> str:
    """1 -> "1st", 11 -> "11th", 22 -> "22nd", 113 -> "113th"."""
    position = int(position)
    if position % 100 in (11, 12, 13):
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(position % 10, "th")
    return f"{position}{suffix}"


def format_position(position: Optional[int]) -> str:
    if not position:
        return NO_POSITION
    return ordinal_suffix(position)
