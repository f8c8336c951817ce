"""
Tests for core/broadsheet.py — broadsheet rows, subject sheets, subject visibility.
"""

import os
import sys
import pytest
import pandas as pd

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.aggregator import ScoreAggregator
from core.errors import InvalidArgument
from core.broadsheet import (
    build_broadsheet,
    build_subject_sheet,
    subject_column_labels,
    subjects_for_class,
    subjects_for_teacher,
)
from core.models import Score, Student, Subject

CLASS_LEVEL = "Basic 5"

SCALES = [
    {"type": "primary", "minScore": 80, "maxScore": 100, "grade": "A", "description": "Excellent"},
    {"type": "primary", "minScore": 60, "maxScore": 79, "grade": "B", "description": "Very Good"},
    {"type": "primary", "minScore": 50, "maxScore": 59, "grade": "C", "description": "Credit"},
    {"type": "primary", "minScore": 0, "maxScore": 49, "grade": "F", "description": "Fail"},
]

CONFIGS = [
    {"minClassLevel": 1, "maxClassLevel": 6, "classScoreWeight": 40, "examScoreWeight": 60},
    {"minClassLevel": 7, "maxClassLevel": 9, "classScoreWeight": 30, "examScoreWeight": 70},
]


@pytest.fixture
def students():
    return [
        Student(id="s1", name="Ama Mensah", class_level=CLASS_LEVEL, student_code="STU001"),
        Student(id="s2", name="Kofi Asante", class_level=CLASS_LEVEL, student_code="STU002"),
        Student(id="s3", name="Esi Owusu", class_level=CLASS_LEVEL, student_code="STU003"),
        Student(id="s4", name="Yaw Boateng", class_level=CLASS_LEVEL, student_code="STU004"),
    ]


@pytest.fixture
def subjects():
    return [
        Subject(id="math", name="Mathematics", code="MATH", class_levels=[CLASS_LEVEL]),
        Subject(id="eng", name="English", code="ENG", class_levels=[CLASS_LEVEL]),
    ]


@pytest.fixture
def aggregator():
    return ScoreAggregator.from_scores([
        Score("s1", "math", "t1", 30, 50),   # 80
        Score("s1", "eng", "t1", 20, 40),    # 60 -> 70.0
        Score("s2", "math", "t1", 20, 30),   # 50
        Score("s2", "eng", "t1", 10, 30),    # 40 -> 45.0
        Score("s3", "math", "t1", 35, 55),   # 90
        Score("s3", "eng", "t1", 30, 50),    # 80 -> 85.0
    ])


class TestBuildBroadsheet:
    """Whole-class broadsheet rows."""

    def test_one_row_per_student(self, students, subjects, aggregator):
        df = build_broadsheet(students, subjects, aggregator, CLASS_LEVEL, SCALES)
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 4

    def test_ranked_first_then_unentered(self, students, subjects, aggregator):
        df = build_broadsheet(students, subjects, aggregator, CLASS_LEVEL, SCALES)
        assert df["student_id"].tolist() == ["s3", "s1", "s2", "s4"]
        assert df["position_text"].tolist() == ["1st", "2nd", "3rd", "-"]

    def test_unentered_student_row(self, students, subjects, aggregator):
        df = build_broadsheet(students, subjects, aggregator, CLASS_LEVEL, SCALES)
        row = df[df["student_id"] == "s4"].iloc[0]
        assert pd.isna(row["position"])
        assert pd.isna(row["MATH"])
        assert row["MATH grade"] == "-"
        assert row["grade"] == "-"
        assert row["status"] == "-"
        assert row["total"] == 0

    def test_totals_grades_and_status(self, students, subjects, aggregator):
        df = build_broadsheet(students, subjects, aggregator, CLASS_LEVEL, SCALES).set_index("student_id")
        assert df.loc["s1", "total"] == 140
        assert df.loc["s1", "average"] == 70.0
        assert df.loc["s1", "grade"] == "B"
        assert df.loc["s1", "remark"] == "Very Good"
        assert df.loc["s3", "MATH grade"] == "A"
        assert df.loc["s3", "status"] == "Pass"
        assert df.loc["s2", "status"] == "Fail"

    def test_empty_class(self, subjects, aggregator):
        df = build_broadsheet([], subjects, aggregator, CLASS_LEVEL, SCALES)
        assert df.empty



class TestSubjectColumns:
    """Each subject keeps its own broadsheet column."""

    def test_shared_code_keeps_both_scores(self):
        subjects = [Subject(id="a", name="English A", code="ENG"), Subject(id="b", name="English B", code="ENG")]
        agg = ScoreAggregator.from_scores([Score("s1", "a", "t1", 30, 50), Score("s1", "b", "t1", 10, 20)])
        df = build_broadsheet([Student(id="s1", name="Ama")], subjects, agg, CLASS_LEVEL, SCALES)
        row = df.iloc[0]
        assert row["ENG"] == 80
        assert row["ENG (b)"] == 30
        assert row["ENG (b) grade"] == "F"
        assert row["total"] == 110

    def test_code_matching_row_column_is_renamed(self):
        subjects = [Subject(id="t", name="Technical Drawing", code="total")]
        agg = ScoreAggregator.from_scores([Score("s1", "t", "t1", 30, 40)])
        df = build_broadsheet([Student(id="s1", name="Ama")], subjects, agg, CLASS_LEVEL, SCALES)
        row = df.iloc[0]
        assert row["total (t)"] == 70
        assert row["total"] == 70
        assert row["grade"] == "B"

    def test_labels_are_unique(self, subjects):
        labels = subject_column_labels(subjects + [Subject(id="m2", code="MATH")])
        assert labels == {"math": "MATH", "eng": "ENG", "m2": "MATH (m2)"}


class TestBuildSubjectSheet:
    """Per-subject sheet with components and positions."""

    def test_components_and_positions(self, students, aggregator):
        df = build_subject_sheet(students, "math", aggregator, CLASS_LEVEL, SCALES, CONFIGS).set_index("student_id")
        assert df.loc["s1", "class_score"] == 30
        assert df.loc["s1", "exam_score"] == 50
        assert df.loc["s3", "position_text"] == "1st"
        assert df.loc["s2", "position_text"] == "3rd"
        assert df.loc["s4", "position_text"] == "-"
        assert df.loc["s4", "grade"] == "-"

    def test_weights_attached(self, students, aggregator):
        df = build_subject_sheet(students, "math", aggregator, CLASS_LEVEL, SCALES, CONFIGS)
        assert df.attrs["class_weight"] == 40
        assert df.attrs["exam_weight"] == 60


class TestSubjectVisibility:
    """Class-level tagging and teacher role filters."""

    def test_subjects_for_class_filters_tagged(self, subjects):
        extra = Subject(id="fr", name="French", code="FR", class_levels=["Basic 8"])
        result = subjects_for_class(subjects + [extra], CLASS_LEVEL)
        assert [s.id for s in result] == ["math", "eng"]

    def test_subjects_for_class_falls_back_to_all(self, subjects):
        assert len(subjects_for_class(subjects, "Basic 2")) == 2

    def test_class_teacher_sees_all(self, subjects):
        assignments = [{"classLevel": CLASS_LEVEL, "subjectId": "math", "isClassTeacher": True}]
        assert len(subjects_for_teacher(subjects, assignments, CLASS_LEVEL)) == 2

    def test_subject_teacher_sees_assigned_only(self, subjects):
        assignments = [
            {"classLevel": CLASS_LEVEL, "subjectId": "eng", "isClassTeacher": False},
            {"classLevel": "Basic 6", "subjectId": "math", "isClassTeacher": True},
        ]
        result = subjects_for_teacher(subjects, assignments, CLASS_LEVEL)
        assert [s.id for s in result] == ["eng"]

    def test_single_label_string_is_one_class_level(self):
        rows = [
            {"id": "a", "classLevels": "Basic 1"},
            {"id": "b", "classLevels": ["Basic 7"]},
        ]
        result = subjects_for_class(rows, "Basic 1")
        assert [s.id for s in result] == ["a"]
        assert result[0].class_levels == ["Basic 1"]

    def test_malformed_class_levels_raise(self):
        with pytest.raises(InvalidArgument):
            subjects_for_class([{"id": "a", "classLevels": {"level": "Basic 1"}}], "Basic 1")
