"""
class_levels.py — Class-level labels ("KG 1", "Basic 7", "JHS 2").

Two facts are derived from a label:
- the numeric grade index (digits only), used to pick an assessment config
- the grading stage ("primary" or "jhs"), used to pick a grading scale

Digit stripping makes "KG 1" and "Basic 1" share index 1. ``ClassLevel``
keeps the school stage alongside the number so callers can tell them apart.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple

JHS_LEVELS = ("basic 7", "basic 8", "basic 9", "jhs 1", "jhs 2", "jhs 3")

STAGE_PRIMARY = "primary"
STAGE_JHS = "jhs"
GRADING_STAGES = (STAGE_PRIMARY, STAGE_JHS)


def grade_index(label: str) -> int:
    """Digits of the label as an integer; 0 when there are none."""
    digits = re.sub(r"[^0-9]", "", str(label or ""))
    return int(digits) if digits else 0


def is_jhs(label: str) -> bool:
    text = str(label or "").lower()
    return any(level in text for level in JHS_LEVELS)


def stage_of(label: str) -> str:
    """Grading stage for a label: "jhs" or "primary"."""
    return STAGE_JHS if is_jhs(label) else STAGE_PRIMARY


class SchoolStage(str, Enum):
    KG = "KG"
    PRIMARY = "Primary"
    JHS = "JHS"


@dataclass(frozen=True)
class ClassLevel:
    stage: SchoolStage
    level: int
    label: str = ""

    @classmethod
    def parse(cls, label: str) -> "ClassLevel":
        text = str(label or "").strip()
        if text.upper().startswith("KG"):
            stage = SchoolStage.KG
        elif is_jhs(text):
            stage = SchoolStage.JHS
        else:
            stage = SchoolStage.PRIMARY
        return cls(stage=stage, level=grade_index(text), label=text)

    @property
    def grading_stage(self) -> str:
        return STAGE_JHS if self.stage is SchoolStage.JHS else STAGE_PRIMARY

    def __str__(self) -> str:
        return self.label or f"{self.stage.value} {self.level}"


def class_sort_key(label: str) -> Tuple[int, int, str]:
    """KG first, then Basic, then everything else; by number, then suffix."""
    upper = str(label or "").upper()
    if upper.startswith("KG"):
        group = 1
    elif upper.startswith("BASIC"):
        group = 2
    else:
        group = 3

    match = re.search(r"\d+", upper)
    if match:
        return group, int(match.group()), upper[match.end():].strip()
    return group, 0, upper


def sort_class_names(labels: Iterable[str]) -> List[str]:
    return sorted(labels, key=class_sort_key)
