"""
Grade Resolver base class and field extraction helpers.

A resolver turns one course into a partial CourseGradeRecord. Fields it
cannot determine stay None so a later resolver in the precedence list can
fill them. Failures never escape `resolve`.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from canvas_grades.canvas_api_adapter import CanvasApiAdapter
from canvas_grades.exceptions import UpstreamError
from canvas_grades.models import Course, CourseGradeRecord, Identifier

# Configure logging
logger = logging.getLogger(__name__)


def first_present(source: Any, rules: Sequence[str]) -> Any:
    """
    Evaluate extraction rules in priority order.

    Each rule names an attribute of `source`; the first one holding a value
    other than None or "" wins.

    Args:
        source: Object to read from (may be None)
        rules: Attribute names, highest priority first

    Returns:
        The first present value, or None
    """
    if source is None:
        return None
    for attribute in rules:
        value = getattr(source, attribute, None)
        if value is not None and value != "":
            return value
    return None


class GradeResolver(ABC):
    """Common contract for all grade sources."""

    name: str = "resolver"
    requires_student_id: bool = False

    def __init__(self, client: CanvasApiAdapter):
        self.client = client

    def resolve(
        self, token: str, course: Course, student_id: Identifier | None
    ) -> CourseGradeRecord:
        """
        Resolve one course. Never raises.

        Args:
            token: Caller's access token
            course: Course from discovery
            student_id: Resolved student id, or None when identity is degraded

        Returns:
            Partial record; unset fields are None
        """
        if self.requires_student_id and student_id is None:
            logger.info(
                f"Skipping {self.name} for course {course.id}: no student id"
            )
            return CourseGradeRecord.for_course(course)
        try:
            return self._resolve(token, course, student_id)
        except UpstreamError as e:
            logger.warning(
                f"{self.name} failed for course {course.id} (status={e.status})"
            )
        except ValidationError as e:
            logger.warning(
                f"{self.name} got a malformed payload for course {course.id}: {e}"
            )
        except Exception as e:
            logger.exception(
                f"Unexpected error in {self.name} for course {course.id}: {e}"
            )
        return CourseGradeRecord.for_course(course)

    @abstractmethod
    def _resolve(
        self, token: str, course: Course, student_id: Identifier | None
    ) -> CourseGradeRecord:
        """Fetch and extract; may raise."""
