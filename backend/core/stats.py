"""
stats.py — Class and school-wide dashboard statistics.

Computes:
- Class summary (roll, students with scores, averages, pass rate, spread)
- Per-subject summary (entered count, mean, highest, lowest, pass rate)

Inclusion and rounding follow the per-student aggregator: a student counts
only when they have an entered score, and averages are reported both to one
decimal place and as a whole number.
"""

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from core.aggregator import DEFAULT_PASS_MARK, ScoreAggregator, round_half_up
from core.models import ensure_collection, entity_id


# ── Helpers ─────────────────────────────────────────────────────────

def _safe_float(val, places: int = 1) -> Optional[float]:
    """Half-up rounded float, or None for NaN/inf/garbage."""
    try:
        v = float(val)
    except (TypeError, ValueError):
        return None
    if np.isnan(v) or np.isinf(v):
        return None
    return round_half_up(v, places) if places else float(round_half_up(v))


def _sanitize(obj):
    """Recursively coerce numpy/pandas scalars to JSON-safe Python types."""
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_sanitize(v) for v in obj]
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, (np.floating, float)):
        v = float(obj)
        return None if (np.isnan(v) or np.isinf(v)) else v
    return obj


def _pass_rate(count: int, total: int) -> float:
    return _safe_float(count / total * 100) if total else 0


# ── Class Summary ───────────────────────────────────────────────────

def compute_class_summary(
    students, subjects, aggregator: ScoreAggregator, pass_mark: float = DEFAULT_PASS_MARK
) -> Dict[str, Any]:
    """Dashboard KPIs for one class (or a whole school when given everyone)."""
    student_ids = [entity_id(s) for s in ensure_collection(students, "students")]
    subjects = ensure_collection(subjects, "subjects")

    included = [sid for sid in student_ids if aggregator.has_any_score(sid, subjects)]
    # Unrounded per-student averages; each surface rounds once, at the end.
    averages = pd.Series(
        [aggregator.calculate_total(sid, subjects) / len(subjects) for sid in included] if subjects else [],
        index=included,
        dtype=float,
    )
    report_card = averages.map(lambda v: round_half_up(v, 1))

    pass_count = int((report_card >= pass_mark).sum())
    fail_count = len(report_card) - pass_count
    summary: Dict[str, Any] = {
        "total_students": len(student_ids),
        "students_with_scores": len(included),
        "students_without_scores": len(student_ids) - len(included),
        "total_subjects": len(subjects),
        "class_average": _safe_float(averages.mean()) if len(averages) else 0,
        "class_average_int": int(_safe_float(averages.mean(), 0)) if len(averages) else 0,
        "median_average": _safe_float(averages.median()) if len(averages) else 0,
        "highest_average": _safe_float(averages.max()) if len(averages) else 0,
        "lowest_average": _safe_float(averages.min()) if len(averages) else 0,
        "pass_count": pass_count,
        "fail_count": fail_count,
        "pass_rate": _pass_rate(pass_count, len(report_card)),
        "pass_rate_int": round_half_up(pass_count / len(report_card) * 100) if len(report_card) else 0,
        "pass_mark": pass_mark,
    }
    return _sanitize(summary)


# ── Subject Summary ─────────────────────────────────────────────────

def compute_subject_summary(
    students, subjects, aggregator: ScoreAggregator, pass_mark: float = DEFAULT_PASS_MARK
) -> Dict[str, Any]:
    """Per-subject statistics over entered scores only."""
    student_ids = [entity_id(s) for s in ensure_collection(students, "students")]
    subject_list = ensure_collection(subjects, "subjects")

    rows = [
        {"student_id": sid, "subject_id": entity_id(subj), "score": aggregator.get_score(sid, entity_id(subj))}
        for subj in subject_list
        for sid in student_ids
    ]
    df = pd.DataFrame(rows, columns=["student_id", "subject_id", "score"])
    entered = df[df["score"] > 0]

    subjects_data: List[Dict[str, Any]] = []
    for subj in subject_list:
        sid = entity_id(subj)
        scores = entered.loc[entered["subject_id"] == sid, "score"].astype(float)
        entry = {
            "subject_id": sid,
            "subject": getattr(subj, "name", None) or (subj.get("name") if isinstance(subj, dict) else None) or sid,
            "entered_count": len(scores),
            "mean": _safe_float(scores.mean()) if len(scores) else None,
            "highest": _safe_float(scores.max()) if len(scores) else None,
            "lowest": _safe_float(scores.min()) if len(scores) else None,
            "pass_count": int((scores >= pass_mark).sum()),
            "pass_rate": _pass_rate(int((scores >= pass_mark).sum()), len(scores)),
        }
        subjects_data.append(entry)

    subjects_data.sort(key=lambda x: x["mean"] if x["mean"] is not None else -1, reverse=True)
    return _sanitize({"subjects": subjects_data, "pass_mark": pass_mark})
