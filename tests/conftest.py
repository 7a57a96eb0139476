"""
Configuration file for pytest.

This file contains fixtures for the Canvas Grades tests. All upstream
traffic goes to an in-memory fake Canvas API.
"""

import sys
from pathlib import Path

import pytest

# Add the project root directory to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from tests.fakes.fake_canvas_api import (
    FakeCanvasApi,
    course_payload,
    enrollment_payload,
    history_payload,
)

from canvas_grades.report import ReportService
from canvas_grades.resolvers import build_resolvers

TOKEN = "test-token"


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def fake_api() -> FakeCanvasApi:
    """Return an empty fake Canvas API."""
    return FakeCanvasApi()


@pytest.fixture
def seeded_api(fake_api: FakeCanvasApi) -> FakeCanvasApi:
    """Fake Canvas API with three courses that resolve fully."""
    fake_api.add_pages(
        "courses",
        [
            [
                course_payload(101, "Biology"),
                course_payload(102, "Chemistry"),
                course_payload(103, "Physics"),
            ]
        ],
    )
    grades = {101: ("A", 94.0), 102: ("B", 85.0), 103: ("C+", 78.5)}
    for course_id, (grade, score) in grades.items():
        fake_api.add(
            f"courses/{course_id}/enrollments",
            [enrollment_payload(grade=grade, score=score)],
        )
        fake_api.add_pages(
            f"courses/{course_id}/gradebook_history",
            [
                [
                    history_payload(
                        "Final Score",
                        "2026-09-01T10:00:00Z",
                        published_grade=grade,
                        published_score=score,
                    )
                ]
            ],
        )
        fake_api.add_pages(
            f"courses/{course_id}/assignments",
            [
                [
                    {
                        "id": course_id * 10 + 1,
                        "name": "Lab Report",
                        "points_possible": 20,
                        "submission": {
                            "assignment_id": course_id * 10 + 1,
                            "score": 18,
                            "workflow_state": "graded",
                        },
                    }
                ]
            ],
        )
    return fake_api


@pytest.fixture
def make_service():
    """Factory for a ReportService over a given fake API."""

    def _make(
        api: FakeCanvasApi,
        names=("history", "enrollment", "submissions"),
        **kwargs,
    ) -> ReportService:
        history_columns = kwargs.pop("history_columns", ("Final Score",))
        embed = kwargs.pop("embed_submissions", True)
        resolvers = build_resolvers(
            api, names, history_columns=history_columns, embed_submissions=embed
        )
        return ReportService(api, resolvers, **kwargs)

    return _make
