"""
Pydantic models for Canvas Grades data.

This module defines the upstream shapes read from the Canvas API and the
normalized CourseGradeRecord returned to callers. Upstream models ignore
unknown keys; several Canvas fields arrive under more than one name.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

SENTINEL = "N/A"
NOT_SUBMITTED = "not_submitted"

Identifier = int | str


class EnrollmentType(str, Enum):
    STUDENT = "Student"
    OTHER = "Other"


class EnrollmentGrades(BaseModel):
    """Grade block embedded in an enrollment when include[]=grades is sent."""

    current_grade: str | None = None
    current_score: float | None = None

    class Config:
        extra = "ignore"


class Enrollment(BaseModel):
    """Model for a Canvas enrollment record."""

    type: EnrollmentType = EnrollmentType.OTHER
    user_id: Identifier | None = None
    grades: EnrollmentGrades | None = None

    class Config:
        extra = "ignore"

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> EnrollmentType:
        """Map "StudentEnrollment" and the embedded "student" form to STUDENT."""
        if isinstance(v, EnrollmentType):
            return v
        if isinstance(v, str) and v.lower() in ("student", "studentenrollment"):
            return EnrollmentType.STUDENT
        return EnrollmentType.OTHER

    @property
    def is_student(self) -> bool:
        return self.type is EnrollmentType.STUDENT


class Course(BaseModel):
    """Model for a course as returned by the course list."""

    id: Identifier
    name: str = ""
    enrollments: list[Enrollment] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> str:
        # Date-restricted courses come back without a name
        return v if isinstance(v, str) else ""

    @field_validator("enrollments", mode="before")
    @classmethod
    def default_enrollments(cls, v: Any) -> list:
        return v if isinstance(v, list) else []


class HistoryWorkflowState(str, Enum):
    GRADED = "graded"
    OTHER = "other"


class HistoryEntry(BaseModel):
    """Model for one gradebook history event."""

    user_id: Identifier | None = None
    column_title: str | None = Field(
        None, validation_alias=AliasChoices("column_title", "assignment_name")
    )
    new_grade: str | None = None
    published_grade: str | None = None
    published_score: float | None = None
    workflow_state: HistoryWorkflowState = HistoryWorkflowState.OTHER
    recorded_at: datetime | None = Field(
        None, validation_alias=AliasChoices("recorded_at", "created_at")
    )

    class Config:
        extra = "ignore"

    @field_validator("workflow_state", mode="before")
    @classmethod
    def normalize_workflow_state(cls, v: Any) -> HistoryWorkflowState:
        if v == HistoryWorkflowState.GRADED.value:
            return HistoryWorkflowState.GRADED
        return HistoryWorkflowState.OTHER

    @field_validator("new_grade", "published_grade", mode="before")
    @classmethod
    def stringify_grade(cls, v: Any) -> str | None:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def recency_key(self) -> tuple[bool, datetime]:
        """Sort key; entries without a timestamp rank older than any other."""
        if self.recorded_at is None:
            return (False, datetime.min.replace(tzinfo=UTC))
        recorded_at = self.recorded_at
        if recorded_at.tzinfo is None:
            recorded_at = recorded_at.replace(tzinfo=UTC)
        return (True, recorded_at)


class Submission(BaseModel):
    """Model for a student's submission to an assignment."""

    assignment_id: Identifier | None = None
    score: float | None = None
    workflow_state: str = "unsubmitted"

    class Config:
        extra = "ignore"


class Assignment(BaseModel):
    """Model for a course assignment, optionally with its embedded submission."""

    id: Identifier
    name: str = ""
    points_possible: float | None = None
    submission: Submission | None = None

    class Config:
        extra = "ignore"


class AssignmentSummary(BaseModel):
    """One row of the assignments list in a CourseGradeRecord."""

    name: str
    score: float | None = None
    possible: float | None = None
    status: str = NOT_SUBMITTED


class CourseGradeRecord(BaseModel):
    """
    Normalized grade summary for one course.

    While resolvers are running a None field means "not yet known". The
    finalized record replaces unknown grade and score with the "N/A"
    sentinel and unknown assignments with an empty list.
    """

    course_id: Identifier = Field(..., alias="courseId")
    course_name: str = Field(..., alias="courseName")
    grade: str | None = None
    score: float | str | None = None
    assignments: list[AssignmentSummary] | None = None

    class Config:
        populate_by_name = True

    @classmethod
    def for_course(cls, course: Course) -> "CourseGradeRecord":
        """Return an all-unset record for the given course."""
        return cls(course_id=course.id, course_name=course.name)

    def merged(self, other: "CourseGradeRecord") -> "CourseGradeRecord":
        """Fill fields still unset here from `other`; set fields are never overwritten."""
        return self.model_copy(
            update={
                "grade": self.grade if self.grade is not None else other.grade,
                "score": self.score if self.score is not None else other.score,
                "assignments": (
                    self.assignments
                    if self.assignments is not None
                    else other.assignments
                ),
            }
        )

    def finalized(self) -> "CourseGradeRecord":
        return self.model_copy(
            update={
                "grade": SENTINEL if self.grade is None else self.grade,
                "score": SENTINEL if self.score is None else self.score,
                "assignments": [] if self.assignments is None else self.assignments,
            }
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
