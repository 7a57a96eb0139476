"""Direct enrollment grade: the live current grade Canvas shows the student."""

import logging

from canvas_grades.models import Course, CourseGradeRecord, Enrollment, Identifier
from canvas_grades.resolvers.base import GradeResolver, first_present

logger = logging.getLogger(__name__)

GRADE_RULES = ("current_grade",)
SCORE_RULES = ("current_score",)


class EnrollmentGradeResolver(GradeResolver):
    name = "enrollment"

    def _resolve(
        self, token: str, course: Course, student_id: Identifier | None
    ) -> CourseGradeRecord:
        payload = self.client.fetch_json(
            f"courses/{course.id}/enrollments",
            token,
            [("type[]", "StudentEnrollment"), ("include[]", "grades")],
        )
        if not isinstance(payload, list):
            logger.warning(f"Unexpected enrollments payload for course {course.id}")
            return CourseGradeRecord.for_course(course)

        enrollments = [Enrollment.model_validate(row) for row in payload]
        students = [e for e in enrollments if e.is_student]
        student = next(
            (e for e in students if str(e.user_id) == str(student_id)),
            students[0] if students else None,
        )
        if student is None:
            logger.info(f"No student enrollment returned for course {course.id}")
            return CourseGradeRecord.for_course(course)

        return CourseGradeRecord(
            course_id=course.id,
            course_name=course.name,
            grade=first_present(student.grades, GRADE_RULES),
            score=first_present(student.grades, SCORE_RULES),
        )
