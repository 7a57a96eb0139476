"""
Unit tests for the report service: ordering, failure isolation and
terminal errors.
"""

import asyncio
import json
import threading
import time
from unittest.mock import MagicMock, patch

import pytest
from tests.fakes.fake_canvas_api import course_payload, enrollment_payload

from canvas_grades.exceptions import (
    IdentityUnresolved,
    MissingToken,
    UpstreamUnavailable,
)
from canvas_grades.report import ReportService, build_report
from canvas_grades.resolvers import EnrollmentGradeResolver


def _run(service: ReportService, token):
    return asyncio.run(service.build_report(token))


def test_one_record_per_course_in_discovery_order(seeded_api, make_service, token):
    records = _run(make_service(seeded_api), token)

    assert [r.to_dict() for r in records] == [
        {
            "courseId": 101,
            "courseName": "Biology",
            "grade": "A",
            "score": 94.0,
            "assignments": [
                {"name": "Lab Report", "score": 18.0, "possible": 20.0, "status": "graded"}
            ],
        },
        {
            "courseId": 102,
            "courseName": "Chemistry",
            "grade": "B",
            "score": 85.0,
            "assignments": [
                {"name": "Lab Report", "score": 18.0, "possible": 20.0, "status": "graded"}
            ],
        },
        {
            "courseId": 103,
            "courseName": "Physics",
            "grade": "C+",
            "score": 78.5,
            "assignments": [
                {"name": "Lab Report", "score": 18.0, "possible": 20.0, "status": "graded"}
            ],
        },
    ]


@pytest.mark.parametrize("token", ["", None, 42])
def test_missing_token(seeded_api, make_service, token):
    with pytest.raises(MissingToken):
        _run(make_service(seeded_api), token)
    assert seeded_api.calls == []


def test_course_list_failure_is_terminal(fake_api, make_service, token):
    fake_api.fail("courses", status=401)

    with pytest.raises(UpstreamUnavailable) as exc_info:
        _run(make_service(fake_api), token)

    assert exc_info.value.status == 401
    assert exc_info.value.stage == "courses"
    assert fake_api.calls_to("courses/101/enrollments") == []


def test_identity_failure_is_terminal(fake_api, make_service, token):
    fake_api.add_pages("courses", [[course_payload(101, "Biology", user_id=None)]])

    with pytest.raises(IdentityUnresolved):
        _run(make_service(fake_api), token)


def test_identity_failure_can_degrade(fake_api, make_service, token):
    fake_api.add_pages("courses", [[course_payload(101, "Biology", user_id=None)]])
    fake_api.add("courses/101/enrollments", [enrollment_payload(grade="B", score=88.0)])
    fake_api.add_pages("courses/101/assignments", [[]])

    records = _run(
        make_service(fake_api, degrade_on_identity_failure=True), token
    )

    assert len(records) == 1
    assert records[0].grade == "B"
    assert fake_api.calls_to("courses/101/gradebook_history") == []


def test_per_course_failure_is_isolated(seeded_api, make_service, token):
    seeded_api.fail("courses/102/enrollments", status=500)

    records = _run(make_service(seeded_api, names=("enrollment",)), token)

    assert [(r.course_id, r.grade, r.score) for r in records] == [
        (101, "A", 94.0),
        (102, "N/A", "N/A"),
        (103, "C+", 78.5),
    ]
    assert records[1].assignments == []


def test_all_sources_failing_still_reports_course(seeded_api, make_service, token):
    for path in (
        "courses/103/enrollments",
        "courses/103/gradebook_history",
        "courses/103/assignments",
    ):
        seeded_api.paged_routes.pop(path, None)
        seeded_api.fail(path, status=404)

    records = _run(make_service(seeded_api), token)

    assert len(records) == 3
    assert records[2].to_dict() == {
        "courseId": 103,
        "courseName": "Physics",
        "grade": "N/A",
        "score": "N/A",
        "assignments": [],
    }


def test_earlier_resolver_wins_per_field(seeded_api, make_service, token):
    seeded_api.add(
        "courses/101/enrollments", [enrollment_payload(grade="B-", score=80.0)]
    )

    history_first = _run(make_service(seeded_api), token)
    enrollment_first = _run(
        make_service(seeded_api, names=("enrollment", "history")), token
    )

    assert history_first[0].grade == "A"
    assert enrollment_first[0].grade == "B-"


def test_later_resolver_fills_unset_fields(seeded_api, make_service, token):
    seeded_api.add_pages("courses/102/gradebook_history", [[]])

    records = _run(make_service(seeded_api), token)

    assert records[1].grade == "B"
    assert records[1].score == 85.0


def test_report_is_idempotent(seeded_api, make_service, token):
    service = make_service(seeded_api)

    first = json.dumps([r.to_dict() for r in _run(service, token)])
    second = json.dumps([r.to_dict() for r in _run(service, token)])

    assert first == second


def test_concurrency_is_bounded(fake_api, token):
    fake_api.add_pages(
        "courses", [[course_payload(course_id, f"Course {course_id}") for course_id in range(1, 9)]]
    )
    for course_id in range(1, 9):
        fake_api.add(f"courses/{course_id}/enrollments", [enrollment_payload()])

    active = 0
    peak = 0
    lock = threading.Lock()

    class SlowResolver(EnrollmentGradeResolver):
        def _resolve(self, token, course, student_id):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            try:
                return super()._resolve(token, course, student_id)
            finally:
                with lock:
                    active -= 1

    service = ReportService(fake_api, [SlowResolver(fake_api)], max_concurrency=2)
    records = _run(service, token)

    assert len(records) == 8
    assert peak <= 2


def test_sync_build_report(seeded_api, make_service, token):
    records = build_report(token, make_service(seeded_api, names=("enrollment",)))

    assert [r.grade for r in records] == ["A", "B", "C+"]


def test_service_requires_resolvers(fake_api):
    with pytest.raises(ValueError):
        ReportService(fake_api, [])


def test_malformed_course_row_does_not_escape(seeded_api, make_service, token):
    seeded_api.add_pages(
        "courses", [[course_payload(101, "Biology"), {"name": "no id"}]]
    )

    records = _run(make_service(seeded_api, names=("enrollment",)), token)

    assert [(r.course_id, r.grade) for r in records] == [(101, "A")]


def test_sync_build_report_closes_configured_session(seeded_api, make_service, token):
    service = make_service(seeded_api, names=("enrollment",))
    seeded_api.session = MagicMock()

    with patch(
        "canvas_grades.report.service.ReportService.from_config",
        return_value=service,
    ):
        records = build_report(token)

    assert len(records) == 3
    seeded_api.session.close.assert_called_once()


def test_sync_build_report_leaves_caller_session_open(seeded_api, make_service, token):
    service = make_service(seeded_api, names=("enrollment",))
    seeded_api.session = MagicMock()

    build_report(token, service)

    seeded_api.session.close.assert_not_called()
