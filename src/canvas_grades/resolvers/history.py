"""
Gradebook history grade.

Reads the paginated gradebook history feed for the student and takes the
most recent event recorded against a terminal grade column. Feed order is
not trusted; entries are re-sorted by timestamp before selection.
"""

import logging
from collections.abc import Sequence

from canvas_grades.canvas_api_adapter import CanvasApiAdapter, fetch_all_pages
from canvas_grades.models import Course, CourseGradeRecord, HistoryEntry, Identifier
from canvas_grades.resolvers.base import GradeResolver, first_present

logger = logging.getLogger(__name__)

FINAL_SCORE_COLUMN = "Final Score"

GRADE_RULES = ("published_grade", "new_grade")
SCORE_RULES = ("published_score",)


def latest_entry(
    entries: Sequence[HistoryEntry], column_titles: Sequence[str]
) -> HistoryEntry | None:
    """
    Return the most recent entry for the first column title that has any.

    Args:
        entries: History entries in any order
        column_titles: Terminal grade columns, highest priority first

    Returns:
        The newest matching entry, or None if no column matches
    """
    for title in column_titles:
        matching = [entry for entry in entries if entry.column_title == title]
        if matching:
            return sorted(matching, key=HistoryEntry.recency_key, reverse=True)[0]
    return None


class GradebookHistoryResolver(GradeResolver):
    name = "history"
    requires_student_id = True

    def __init__(
        self,
        client: CanvasApiAdapter,
        column_titles: Sequence[str] = (FINAL_SCORE_COLUMN,),
    ):
        super().__init__(client)
        self.column_titles = tuple(column_titles)

    def _resolve(
        self, token: str, course: Course, student_id: Identifier | None
    ) -> CourseGradeRecord:
        rows = fetch_all_pages(
            self.client,
            f"courses/{course.id}/gradebook_history",
            token,
            [("student[]", student_id)],
        )
        entries = [
            entry
            for entry in (HistoryEntry.model_validate(row) for row in rows)
            if entry.user_id is None or str(entry.user_id) == str(student_id)
        ]
        entry = latest_entry(entries, self.column_titles)
        if entry is None:
            logger.info(
                f"No {'/'.join(self.column_titles)} entry in {len(entries)} "
                f"history rows for course {course.id}"
            )
            return CourseGradeRecord.for_course(course)

        return CourseGradeRecord(
            course_id=course.id,
            course_name=course.name,
            grade=first_present(entry, GRADE_RULES),
            score=first_present(entry, SCORE_RULES),
        )
