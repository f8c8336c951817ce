"""
aggregator.py — Per-student totals, averages and pass/fail.

All numbers come from a score lookup ``(student_id, subject_id) -> Score``.
A subject without a score row counts exactly like a subject scored 0: it
adds nothing to the total and does not count as an entered score.

Averages are rounded half-up, to one decimal for report cards and to a
whole number for dashboards. Both come from the same unrounded figure.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from core.errors import InvalidArgument
from core.models import Score, ensure_collection, entity_id, load_records

logger = logging.getLogger(__name__)

PASS = "Pass"
FAIL = "Fail"
DEFAULT_PASS_MARK = 50

Lookup = Callable[[str, str], Optional[Score]]


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a report card: 70.25 -> 70.3, 70.5 -> 71."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def _subject_ids(subjects) -> List[str]:
    return [entity_id(s) for s in ensure_collection(subjects, "subjects")]


def _check_student(student_id) -> str:
    if student_id is None:
        raise InvalidArgument("student_id must not be None.")
    return str(student_id)


class ScoreAggregator:
    """Read-only view over one term's scores."""

    def __init__(self, lookup: Lookup):
        if not callable(lookup):
            raise InvalidArgument("lookup must be callable.")
        self._lookup = lookup

    @classmethod
    def from_scores(cls, scores: Iterable) -> "ScoreAggregator":
        index: Dict[Tuple[str, str], Score] = {}
        for score in load_records(scores, Score):
            index[(score.student_id, score.subject_id)] = score
        logger.debug("Indexed %d score rows", len(index))
        return cls(lambda student_id, subject_id: index.get((student_id, subject_id)))

    def lookup(self, student_id, subject_id) -> Optional[Score]:
        """The stored row, for callers that show class/exam components."""
        return self._lookup(_check_student(student_id), str(subject_id))

    def get_score(self, student_id, subject_id) -> float:
        score = self.lookup(student_id, subject_id)
        if score is None:
            return 0
        return score.total_score or 0

    def _raw_total(self, student_id: str, subject_ids: List[str]) -> float:
        return sum(self.get_score(student_id, sid) for sid in subject_ids)

    def calculate_total(self, student_id, subjects) -> float:
        return self._raw_total(_check_student(student_id), _subject_ids(subjects))

    def _raw_average(self, student_id, subjects) -> Optional[float]:
        subject_ids = _subject_ids(subjects)
        if not subject_ids:
            logger.debug("No subjects to average for %s", student_id)
            return None
        return self._raw_total(_check_student(student_id), subject_ids) / len(subject_ids)

    def calculate_average(self, student_id, subjects) -> float:
        """Total over all listed subjects, one decimal place; 0 with no subjects."""
        average = self._raw_average(student_id, subjects)
        return 0 if average is None else round_half_up(average, 1)

    def average_rounded_int(self, student_id, subjects) -> int:
        average = self._raw_average(student_id, subjects)
        return 0 if average is None else round_half_up(average)

    def has_any_score(self, student_id, subjects) -> bool:
        student_id = _check_student(student_id)
        return any(self.get_score(student_id, sid) > 0 for sid in _subject_ids(subjects))

    def entered_average(self, student_id, subjects) -> Optional[int]:
        """Whole-number average over entered subjects only, for the overall grade."""
        student_id = _check_student(student_id)
        entered = [v for v in (self.get_score(student_id, sid) for sid in _subject_ids(subjects)) if v > 0]
        if not entered:
            return None
        return round_half_up(sum(entered) / len(entered))

    def pass_fail(self, student_id, subjects, pass_mark: float = DEFAULT_PASS_MARK) -> str:
        """Meaningful only for students with at least one entered score."""
        return PASS if self.calculate_average(student_id, subjects) >= pass_mark else FAIL
