"""
Ranking routes — broadsheets, subject sheets and class summaries.

Every request carries its own snapshot (students, subjects, scores, scales,
configs for one term); nothing is stored between calls.
"""

import json
import logging
import os

from fastapi import APIRouter, HTTPException

from core.aggregator import ScoreAggregator
from core.broadsheet import (
    build_broadsheet,
    build_subject_sheet,
    subject_column_labels,
    subjects_for_class,
    subjects_for_teacher,
)
from core.errors import InvalidArgument
from core.models import Student, load_records
from core.ranking import DEFAULT_TIES
from core.stats import compute_class_summary, compute_subject_summary

logger = logging.getLogger(__name__)

router = APIRouter()

PASS_MARK = int(os.getenv("PASS_MARK", "50"))


def _df_records(df):
    """
    Convert DataFrame rows to JSON-safe records.
    Ensures NaN/NA become null so FastAPI serialization won't raise 500.
    """
    return json.loads(df.to_json(orient="records"))


def _snapshot(payload: dict):
    """Class level, class roll, visible subjects and aggregator from a payload."""
    class_level = payload.get("class_level") or payload.get("classLevel")
    students = payload.get("students")
    if not class_level or not students:
        raise HTTPException(400, "No data provided.")

    try:
        roster = [
            s for s in load_records(students, Student)
            if not s.class_level or s.class_level == class_level
        ]
        subjects = subjects_for_class(payload.get("subjects", []), class_level)
        if payload.get("assignments") is not None:
            subjects = subjects_for_teacher(subjects, payload["assignments"], class_level)
        aggregator = ScoreAggregator.from_scores(payload.get("scores", []))
    except InvalidArgument as e:
        raise HTTPException(400, str(e))
    return class_level, roster, subjects, aggregator


@router.post("/broadsheet")
async def broadsheet(payload: dict):
    """Whole-class broadsheet: scores, totals, averages, positions, grades."""
    class_level, roster, subjects, aggregator = _snapshot(payload)
    try:
        df = build_broadsheet(
            roster, subjects, aggregator, class_level,
            payload.get("scales", []),
            ties=payload.get("ties", DEFAULT_TIES),
            pass_mark=PASS_MARK,
        )
    except InvalidArgument as e:
        raise HTTPException(400, str(e))

    labels = subject_column_labels(subjects)
    logger.info("Broadsheet built for %s (%d students, %d subjects)", class_level, len(roster), len(subjects))
    return {
        "class_level": class_level,
        "subjects": [
            {"id": s.id, "name": s.name, "code": s.code, "column": labels[s.id]} for s in subjects
        ],
        "rows": _df_records(df),
    }


@router.post("/subject/{subject_id}")
async def subject_sheet(subject_id: str, payload: dict):
    """Per-subject sheet with class/exam components and subject positions."""
    class_level, roster, _, aggregator = _snapshot(payload)
    try:
        df = build_subject_sheet(
            roster, subject_id, aggregator, class_level,
            payload.get("scales", []),
            payload.get("assessment_configs", []),
            ties=payload.get("ties", DEFAULT_TIES),
        )
    except InvalidArgument as e:
        raise HTTPException(400, str(e))

    logger.info("Subject sheet built for %s / %s", class_level, subject_id)
    return {
        "class_level": class_level,
        "subject_id": subject_id,
        "weights": {"class": df.attrs["class_weight"], "exam": df.attrs["exam_weight"]},
        "rows": _df_records(df),
    }


@router.post("/summary")
async def summary(payload: dict):
    """Dashboard KPIs for the class and each visible subject."""
    class_level, roster, subjects, aggregator = _snapshot(payload)
    return {
        "class_level": class_level,
        "class": compute_class_summary(roster, subjects, aggregator, pass_mark=PASS_MARK),
        "subjects": compute_subject_summary(roster, subjects, aggregator, pass_mark=PASS_MARK)["subjects"],
    }

