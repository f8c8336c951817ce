"""
broadsheet.py — Rows for class broadsheets and subject score sheets.

Builds the tabular data report builders render to PDF/Excel. Rendering
itself lives with the callers.
"""

import logging
from typing import Any, Dict, Iterable, List

import pandas as pd

from core.aggregator import DEFAULT_PASS_MARK, ScoreAggregator
from core.grading import NO_SCORE, grade_badge, grade_remark
from core.models import Student, Subject, ensure_collection, entity_id, load_records
from core.ranking import (
    DEFAULT_TIES,
    format_position,
    position_of,
    rank_by_subject,
    rank_class_overall,
)
from core.weights import resolve_weights

logger = logging.getLogger(__name__)

# Per-student columns; subject columns must not land on these.
ROW_COLUMNS = frozenset({
    "student_id", "student_code", "name", "total", "average",
    "position", "position_text", "grade", "remark", "status",
})


def subject_column_labels(subjects: List[Subject]) -> Dict[str, str]:
    """
    Column label per subject id: the code (or name, or id), with the id
    appended when that label is taken by another subject or a row column,
    e.g. two "ENG" subjects become "ENG" and "ENG (b)".
    """
    taken = set(ROW_COLUMNS)
    labels: Dict[str, str] = {}
    for subj in subjects:
        label = subj.code or subj.name or subj.id
        if label in taken or f"{label} grade" in taken:
            label = f"{label} ({subj.id})"
            suffix = 2
            while label in taken or f"{label} grade" in taken:
                label = f"{subj.code or subj.name or subj.id} ({subj.id}-{suffix})"
                suffix += 1
        taken.update((label, f"{label} grade"))
        labels[subj.id] = label
    return labels


def subjects_for_class(subjects: Iterable, class_level: str) -> List[Subject]:
    """Subjects offered to ``class_level``; all subjects if none are tagged for it."""
    records = load_records(subjects, Subject)
    filtered = [s for s in records if class_level in (s.class_levels or [])]
    return filtered or records


def subjects_for_teacher(subjects: Iterable, assignments: Iterable[Dict[str, Any]], class_level: str) -> List[Subject]:
    """
    Class teachers see every subject; subject teachers only the ones they
    are assigned for ``class_level``.
    """
    records = load_records(subjects, Subject)
    mine = [
        a for a in ensure_collection(assignments, "assignments")
        if a.get("classLevel", a.get("class_level")) == class_level
    ]
    if any(a.get("isClassTeacher", a.get("is_class_teacher")) for a in mine):
        return records
    assigned = {str(a.get("subjectId", a.get("subject_id"))) for a in mine}
    return [s for s in records if s.id in assigned]


def build_broadsheet(
    students: Iterable,
    subjects: Iterable,
    aggregator: ScoreAggregator,
    class_level: str,
    scales: Iterable,
    ties: str = DEFAULT_TIES,
    pass_mark: float = DEFAULT_PASS_MARK,
) -> pd.DataFrame:
    """
    One row per student: subject scores and grades, total, average,
    position, overall grade and status. Ranked students come first in
    position order; students with nothing entered follow in input order.
    """
    student_list = load_records(students, Student)
    subject_list = load_records(subjects, Subject)
    scales = ensure_collection(scales, "scales")
    labels = subject_column_labels(subject_list)

    ranked = rank_class_overall(student_list, subject_list, aggregator, ties=ties)
    by_id = {s.id: s for s in student_list}
    ranked_ids = [entry.student_id for entry in ranked]
    ranked_set = set(ranked_ids)
    unranked_ids = [s.id for s in student_list if s.id not in ranked_set]

    rows = []
    for sid in ranked_ids + unranked_ids:
        student = by_id[sid]
        scored = aggregator.has_any_score(sid, subject_list)
        row: Dict[str, Any] = {
            "student_id": sid,
            "student_code": student.student_code,
            "name": student.name,
        }
        for subj in subject_list:
            score = aggregator.get_score(sid, subj.id)
            row[labels[subj.id]] = score if score > 0 else None
            row[f"{labels[subj.id]} grade"] = grade_badge(score, class_level, scales)

        overall = aggregator.entered_average(sid, subject_list)
        row.update({
            "total": aggregator.calculate_total(sid, subject_list),
            "average": aggregator.calculate_average(sid, subject_list),
            "position": position_of(sid, ranked),
            "position_text": format_position(position_of(sid, ranked)),
            "grade": grade_badge(overall, class_level, scales),
            "remark": grade_remark(overall, class_level, scales),
            "status": aggregator.pass_fail(sid, subject_list, pass_mark) if scored else NO_SCORE,
        })
        rows.append(row)

    df = pd.DataFrame(rows)
    if not df.empty:
        df["position"] = df["position"].astype("Int64")
    logger.debug("Broadsheet for %s: %d ranked, %d without scores", class_level, len(ranked_ids), len(unranked_ids))
    return df


def build_subject_sheet(
    students: Iterable,
    subject_id: str,
    aggregator: ScoreAggregator,
    class_level: str,
    scales: Iterable,
    configs: Iterable,
    ties: str = DEFAULT_TIES,
) -> pd.DataFrame:
    """
    Per-subject sheet: class score, exam score, total, grade, remark and
    subject position. Column weights ride along in ``df.attrs``.
    """
    student_list = load_records(students, Student)
    scales = ensure_collection(scales, "scales")
    weights = resolve_weights(class_level, configs)
    ranked = rank_by_subject(student_list, subject_id, aggregator, ties=ties)

    rows = []
    for student in student_list:
        score = aggregator.lookup(student.id, entity_id(subject_id))
        total = aggregator.get_score(student.id, subject_id)
        rows.append({
            "student_id": student.id,
            "name": student.name,
            "class_score": score.class_score if score else 0,
            "exam_score": score.exam_score if score else 0,
            "total": total,
            "grade": grade_badge(total, class_level, scales),
            "remark": grade_remark(total, class_level, scales),
            "position": position_of(student.id, ranked),
            "position_text": format_position(position_of(student.id, ranked)),
        })

    df = pd.DataFrame(rows, columns=[
        "student_id", "name", "class_score", "exam_score", "total",
        "grade", "remark", "position", "position_text",
    ])
    df["position"] = df["position"].astype("Int64")
    df.attrs["class_weight"] = weights.class_weight
    df.attrs["exam_weight"] = weights.exam_weight
    return df
