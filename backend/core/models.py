"""
models.py — Records the engine reads.

Payloads arrive from storage or the browser in camelCase; every record
accepts either spelling through ``from_dict``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from core.errors import InvalidArgument


def _pick(data: Dict[str, Any], *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _num(value) -> float:
    """Coerce a stored component to a number; missing values are 0."""
    if value is None or value == "":
        return 0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0
    return int(num) if num.is_integer() else num


def ensure_collection(value, name: str) -> List[Any]:
    """Materialise an iterable argument, rejecting None and scalars."""
    if value is None or isinstance(value, (str, bytes, dict)):
        raise InvalidArgument(f"{name} must be a collection, got {type(value).__name__}.")
    try:
        return list(value)
    except TypeError:
        raise InvalidArgument(f"{name} must be a collection, got {type(value).__name__}.")


@dataclass
class GradingScale:
    stage: str
    min_score: float
    max_score: float
    grade: str
    description: str = ""
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GradingScale":
        return cls(
            id=_pick(data, "id"),
            stage=str(_pick(data, "stage", "type", default="")).strip().lower(),
            min_score=_num(_pick(data, "minScore", "min_score")),
            max_score=_num(_pick(data, "maxScore", "max_score")),
            grade=str(_pick(data, "grade", default="")),
            description=str(_pick(data, "description", default="")),
        )


@dataclass
class AssessmentConfig:
    min_class_level: int
    max_class_level: int
    class_score_weight: int
    exam_score_weight: int
    class_group: str = ""
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssessmentConfig":
        return cls(
            id=_pick(data, "id"),
            class_group=str(_pick(data, "classGroup", "class_group", default="")),
            min_class_level=int(_num(_pick(data, "minClassLevel", "min_class_level"))),
            max_class_level=int(_num(_pick(data, "maxClassLevel", "max_class_level"))),
            class_score_weight=int(_num(_pick(data, "classScoreWeight", "class_score_weight"))),
            exam_score_weight=int(_num(_pick(data, "examScoreWeight", "exam_score_weight"))),
        )


@dataclass
class Score:
    student_id: str
    subject_id: str
    term_id: Optional[str] = None
    class_score: float = 0
    exam_score: float = 0
    total_score: float = 0

    def __post_init__(self):
        self.total_score = self.class_score + self.exam_score

    @property
    def entered(self) -> bool:
        """Both components at zero means the score was never entered."""
        return not (self.class_score == 0 and self.exam_score == 0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Score":
        class_score = _pick(data, "classScore", "class_score")
        exam_score = _pick(data, "examScore", "exam_score")
        score = cls(
            student_id=str(_pick(data, "studentId", "student_id", default="")),
            subject_id=str(_pick(data, "subjectId", "subject_id", default="")),
            term_id=_pick(data, "termId", "term_id"),
            class_score=_num(class_score),
            exam_score=_num(exam_score),
        )
        # Rows carrying only a total (legacy imports) keep it.
        if class_score is None and exam_score is None:
            score.total_score = _num(_pick(data, "totalScore", "total_score"))
        return score


@dataclass
class Student:
    id: str
    name: str = ""
    class_level: str = ""
    student_code: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Student":
        return cls(
            id=str(_pick(data, "id", "studentId", "student_id", default="")),
            name=str(_pick(data, "name", default="")),
            class_level=str(_pick(data, "grade", "classLevel", "class_level", default="")),
            student_code=_pick(data, "studentCode", "student_code"),
        )


@dataclass
class Subject:
    id: str
    name: str = ""
    code: str = ""
    class_levels: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subject":
        return cls(
            id=str(_pick(data, "id", "subjectId", "subject_id", default="")),
            name=str(_pick(data, "name", default="")),
            code=str(_pick(data, "code", default="")),
            class_levels=_class_levels(_pick(data, "classLevels", "class_levels")),
        )


def _class_levels(value) -> List[str]:
    """A single label is one class level, not a sequence of characters."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return [str(level) for level in ensure_collection(value, "class_levels")]


def entity_id(item) -> str:
    """Id of a Student/Subject record, a dict carrying an id key, or a bare id."""
    if item is None:
        raise InvalidArgument("Record must not be None.")
    if isinstance(item, dict):
        value = _pick(item, "id", "studentId", "student_id", "subjectId", "subject_id")
        if value is None:
            raise InvalidArgument(f"Record has no id: {item!r}.")
        return str(value)
    if hasattr(item, "id"):
        return str(item.id)
    return str(item)


def load_records(rows: Iterable[Dict[str, Any]], model) -> List[Any]:
    """Build ``model`` records from raw dict rows, passing records through."""
    return [r if isinstance(r, model) else model.from_dict(r) for r in ensure_collection(rows, model.__name__)]
