"""
Canvas Grades Resolvers

Interchangeable grade sources and the registry that builds a deployment's
precedence list from resolver names.
"""

from collections.abc import Sequence

from canvas_grades.canvas_api_adapter import CanvasApiAdapter
from canvas_grades.resolvers.base import GradeResolver, first_present
from canvas_grades.resolvers.enrollment import EnrollmentGradeResolver
from canvas_grades.resolvers.history import (
    FINAL_SCORE_COLUMN,
    GradebookHistoryResolver,
    latest_entry,
)
from canvas_grades.resolvers.submissions import SubmissionResolver, join_submissions

RESOLVER_NAMES = ("enrollment", "history", "submissions")


def build_resolvers(
    client: CanvasApiAdapter,
    names: Sequence[str],
    history_columns: Sequence[str] = (FINAL_SCORE_COLUMN,),
    embed_submissions: bool = True,
) -> list[GradeResolver]:
    """
    Build resolvers in precedence order.

    Raises:
        ValueError: On an unknown or repeated resolver name, or an empty list
    """
    if not names:
        raise ValueError("At least one grade resolver must be configured")
    resolvers: list[GradeResolver] = []
    seen = set()
    for name in names:
        if name in seen:
            raise ValueError(f"Grade resolver listed twice: {name}")
        seen.add(name)
        if name == "enrollment":
            resolvers.append(EnrollmentGradeResolver(client))
        elif name == "history":
            resolvers.append(GradebookHistoryResolver(client, history_columns))
        elif name == "submissions":
            resolvers.append(SubmissionResolver(client, embed=embed_submissions))
        else:
            raise ValueError(
                f"Unknown grade resolver '{name}', expected one of {RESOLVER_NAMES}"
            )
    return resolvers


__all__ = [
    "GradeResolver",
    "EnrollmentGradeResolver",
    "GradebookHistoryResolver",
    "SubmissionResolver",
    "build_resolvers",
    "first_present",
    "join_submissions",
    "latest_entry",
    "RESOLVER_NAMES",
]
