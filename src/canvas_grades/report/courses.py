"""
Course Discovery

Lists the courses the token's owner is enrolled in and derives the owner's
Canvas user id from the enrollments embedded in those courses.
"""

import logging
from collections.abc import Sequence

from pydantic import ValidationError

from canvas_grades.canvas_api_adapter import CanvasApiAdapter, fetch_all_pages
from canvas_grades.exceptions import IdentityError
from canvas_grades.models import Course, Identifier

# Configure logging
logger = logging.getLogger(__name__)


def list_courses(client: CanvasApiAdapter, token: str) -> list[Course]:
    """
    Fetch the caller's courses in upstream order.

    Raises:
        UpstreamError: If the course list cannot be fetched. Nothing
            downstream can run without it.
    """
    rows = fetch_all_pages(client, "courses", token, [("include[]", "total_scores")])
    courses = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            courses.append(Course.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping malformed course row: {e}")
    logger.info(f"Discovered {len(courses)} courses")
    return courses


def _first_student_id(courses: Sequence[Course]) -> Identifier | None:
    for course in courses:
        for enrollment in course.enrollments:
            if enrollment.is_student and enrollment.user_id is not None:
                return enrollment.user_id
    return None


def resolve_student_id(courses: Sequence[Course]) -> Identifier:
    """
    Return the user id of the first student enrollment.

    The first course is checked on its own before all courses are scanned;
    it almost always carries the caller's own enrollment.

    Raises:
        IdentityError: If no course has a student enrollment
    """
    student_id = _first_student_id(courses[:1])
    if student_id is None:
        student_id = _first_student_id(courses)
    if student_id is None:
        raise IdentityError(
            f"No student enrollment found across {len(courses)} courses"
        )
    return student_id
