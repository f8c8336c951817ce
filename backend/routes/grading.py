"""
Grading routes — grade lookup, assessment weights and score-entry checks.
"""

from fastapi import APIRouter, HTTPException

from core.class_levels import ClassLevel, sort_class_names
from core.errors import InvalidArgument, ScoreOutOfRange
from core.grading import check_scale_coverage, grade_legend, resolve_grade
from core.weights import column_headers, resolve_weights, validate_components

router = APIRouter()


def _class_level(payload: dict) -> str:
    class_level = payload.get("class_level") or payload.get("classLevel")
    if not class_level:
        raise HTTPException(400, "No class level provided.")
    return str(class_level)


@router.post("/resolve")
async def resolve(payload: dict):
    """Grade and description for a score under the class level's stage."""
    if payload.get("score") is None:
        raise HTTPException(400, "No score provided.")
    try:
        score = float(payload["score"])
        return resolve_grade(score, _class_level(payload), payload.get("scales", []))
    except (TypeError, ValueError) as e:
        raise HTTPException(400, str(e))


@router.post("/weights")
async def weights(payload: dict):
    """Class/exam split and column headers for a class level."""
    class_level = _class_level(payload)
    try:
        result = resolve_weights(class_level, payload.get("assessment_configs", []))
    except InvalidArgument as e:
        raise HTTPException(400, str(e))
    class_header, exam_header = column_headers(result)
    level = ClassLevel.parse(class_level)
    return {
        **result.as_dict(),
        "headers": {"class": class_header, "exam": exam_header},
        "stage": level.stage.value,
        "level": level.level,
    }


@router.post("/validate-score")
async def validate_score(payload: dict):
    """Reject a class or exam score outside the configured weight."""
    class_level = _class_level(payload)
    try:
        result = resolve_weights(class_level, payload.get("assessment_configs", []))
        total = validate_components(payload.get("class_score"), payload.get("exam_score"), result)
    except ScoreOutOfRange as e:
        raise HTTPException(422, str(e))
    except (InvalidArgument, TypeError) as e:
        raise HTTPException(400, str(e))
    return {"valid": True, "total_score": total, "weights": result.as_dict()}


@router.post("/legend")
async def legend(payload: dict):
    """Grading bands for a stage, plus any gaps or overlaps in 0-100."""
    stage = str(payload.get("stage", "primary")).lower()
    scales = payload.get("scales", [])
    try:
        return {
            "stage": stage,
            "bands": grade_legend(stage, scales),
            "coverage": check_scale_coverage(stage, scales),
        }
    except InvalidArgument as e:
        raise HTTPException(400, str(e))


@router.post("/class-order")
async def class_order(payload: dict):
    """Sort class labels KG, then Basic, then others."""
    classes = payload.get("classes")
    if not isinstance(classes, list):
        raise HTTPException(400, "No classes provided.")
    return {"classes": sort_class_names(str(c) for c in classes)}
