"""
Assignment/submission join.

Produces the per-assignment list for a course. It never sets the overall
grade or score; those come from another resolver in the precedence list.
"""

import logging

from canvas_grades.canvas_api_adapter import CanvasApiAdapter, fetch_all_pages
from canvas_grades.models import (
    NOT_SUBMITTED,
    Assignment,
    AssignmentSummary,
    Course,
    CourseGradeRecord,
    Identifier,
    Submission,
)
from canvas_grades.resolvers.base import GradeResolver

logger = logging.getLogger(__name__)


def join_submissions(
    assignments: list[Assignment], submissions: dict[str, Submission]
) -> list[AssignmentSummary]:
    """
    Pair each assignment with its submission, keeping assignment order.

    Args:
        assignments: Assignments in upstream order
        submissions: Submissions keyed by str(assignment_id)

    Returns:
        One summary per assignment; submissions without an assignment are dropped
    """
    summaries = []
    for assignment in assignments:
        submission = submissions.get(str(assignment.id))
        # Canvas embeds an "unsubmitted" placeholder when nothing was turned in
        if submission is not None and (
            submission.workflow_state == "unsubmitted" and submission.score is None
        ):
            submission = None
        if submission is None:
            summaries.append(
                AssignmentSummary(
                    name=assignment.name,
                    score=None,
                    possible=assignment.points_possible,
                    status=NOT_SUBMITTED,
                )
            )
        else:
            summaries.append(
                AssignmentSummary(
                    name=assignment.name,
                    score=submission.score,
                    possible=assignment.points_possible,
                    status=submission.workflow_state,
                )
            )
    return summaries


class SubmissionResolver(GradeResolver):
    name = "submissions"

    def __init__(self, client: CanvasApiAdapter, embed: bool = True):
        """
        Args:
            client: Canvas API adapter
            embed: Read submissions embedded in the assignments list instead
                of issuing a separate submissions call
        """
        super().__init__(client)
        self.embed = embed

    def _resolve(
        self, token: str, course: Course, student_id: Identifier | None
    ) -> CourseGradeRecord:
        params = [("include[]", "submission")] if self.embed else []
        rows = fetch_all_pages(
            self.client, f"courses/{course.id}/assignments", token, params
        )
        assignments = [Assignment.model_validate(row) for row in rows]

        if self.embed:
            submissions = {
                str(a.id): a.submission for a in assignments if a.submission
            }
        else:
            submission_rows = fetch_all_pages(
                self.client,
                f"courses/{course.id}/students/submissions",
                token,
                [("student_ids[]", "self")],
            )
            submissions = {}
            for row in submission_rows:
                submission = Submission.model_validate(row)
                if submission.assignment_id is not None:
                    submissions[str(submission.assignment_id)] = submission

        logger.debug(
            f"Joined {len(submissions)} submissions onto {len(assignments)} "
            f"assignments for course {course.id}"
        )
        return CourseGradeRecord(
            course_id=course.id,
            course_name=course.name,
            assignments=join_submissions(assignments, submissions),
        )
