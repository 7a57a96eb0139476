"""
Canvas Grade Report Service

This module provides the orchestrator that turns one access token into an
ordered list of CourseGradeRecord: course discovery, identity resolution,
then per-course grade resolution fanned out under a concurrency limit.
"""

import asyncio
import logging
from collections.abc import Sequence

from canvas_grades import config
from canvas_grades.canvas_api_adapter import CanvasApiAdapter
from canvas_grades.exceptions import (
    IdentityError,
    IdentityUnresolved,
    MissingToken,
    UpstreamError,
    UpstreamUnavailable,
)
from canvas_grades.models import Course, CourseGradeRecord, Identifier
from canvas_grades.report.courses import list_courses, resolve_student_id
from canvas_grades.resolvers import GradeResolver, build_resolvers

# Configure logging
logger = logging.getLogger(__name__)


class ReportService:
    """
    Service that builds grade reports against the Canvas API.

    The service itself is stateless across requests: the token, course list
    and student id of a report live only inside `build_report`.
    """

    def __init__(
        self,
        api_adapter: CanvasApiAdapter,
        resolvers: Sequence[GradeResolver],
        max_concurrency: int = 5,
        degrade_on_identity_failure: bool = False,
    ):
        """
        Initialize the report service.

        Args:
            api_adapter: Canvas API adapter for upstream calls
            resolvers: Grade resolvers in precedence order
            max_concurrency: Courses resolved at the same time
            degrade_on_identity_failure: Continue without a student id instead
                of failing the report when no student enrollment is found
        """
        if not resolvers:
            raise ValueError("ReportService needs at least one resolver")
        self.api_adapter = api_adapter
        self.resolvers = list(resolvers)
        self.max_concurrency = max(1, max_concurrency)
        self.degrade_on_identity_failure = degrade_on_identity_failure
        logger.info(
            f"Report service using resolvers {[r.name for r in self.resolvers]}, "
            f"concurrency limited to {self.max_concurrency} courses."
        )

    @classmethod
    def from_config(cls, api_adapter: CanvasApiAdapter | None = None) -> "ReportService":
        """Build a service from the environment configuration."""
        api_adapter = api_adapter or CanvasApiAdapter(
            config.API_URL, timeout=config.REQUEST_TIMEOUT
        )
        resolvers = build_resolvers(
            api_adapter,
            config.RESOLVERS,
            history_columns=config.HISTORY_COLUMNS,
            embed_submissions=config.EMBED_SUBMISSIONS,
        )
        return cls(
            api_adapter,
            resolvers,
            max_concurrency=config.MAX_CONCURRENCY,
            degrade_on_identity_failure=config.DEGRADE_ON_IDENTITY_FAILURE,
        )

    async def build_report(self, token: str) -> list[CourseGradeRecord]:
        """
        Build the grade report for the owner of `token`.

        Returns:
            One finalized record per discovered course, in discovery order

        Raises:
            MissingToken: If the token is empty or not a string
            UpstreamUnavailable: If the course list cannot be fetched
            IdentityUnresolved: If no student enrollment exists and the
                service is not configured to degrade
        """
        if not token or not isinstance(token, str):
            raise MissingToken()

        try:
            courses = await asyncio.to_thread(list_courses, self.api_adapter, token)
        except UpstreamError as e:
            logger.error(f"Course discovery failed with status {e.status}")
            raise UpstreamUnavailable(e.status) from e

        student_id: Identifier | None
        try:
            student_id = resolve_student_id(courses)
        except IdentityError as e:
            if not self.degrade_on_identity_failure:
                logger.error(f"Identity resolution failed: {e}")
                raise IdentityUnresolved() from e
            logger.warning(f"{e}; continuing without gradebook history")
            student_id = None

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            asyncio.create_task(
                self._resolve_course(semaphore, token, course, student_id)
            )
            for course in courses
        ]
        results_or_exceptions = await asyncio.gather(*tasks, return_exceptions=True)

        records = []
        for course, result in zip(courses, results_or_exceptions):
            if isinstance(result, BaseException):
                logger.warning(f"Grade resolution failed for course {course.id}: {result}")
                result = CourseGradeRecord.for_course(course)
            records.append(result.finalized())
        logger.info(f"Built grade report with {len(records)} courses")
        return records

    async def _resolve_course(
        self,
        semaphore: asyncio.Semaphore,
        token: str,
        course: Course,
        student_id: Identifier | None,
    ) -> CourseGradeRecord:
        """Run every resolver for one course, earlier resolvers winning per field."""
        record = CourseGradeRecord.for_course(course)
        async with semaphore:
            for resolver in self.resolvers:
                partial = await asyncio.to_thread(
                    resolver.resolve, token, course, student_id
                )
                record = record.merged(partial)
        return record


def build_report(token: str, service: ReportService | None = None) -> list[CourseGradeRecord]:
    """Synchronous entry point for callers without an event loop."""
    if service is not None:
        return asyncio.run(service.build_report(token))

    service = ReportService.from_config()
    try:
        return asyncio.run(service.build_report(token))
    finally:
        service.api_adapter.session.close()
