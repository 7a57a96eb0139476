"""
Canvas Grades Report Package

This package builds grade reports from the Canvas API.
"""

from canvas_grades.report.courses import list_courses, resolve_student_id
from canvas_grades.report.service import ReportService, build_report

__all__ = ["ReportService", "build_report", "list_courses", "resolve_student_id"]
