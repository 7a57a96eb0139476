"""
Canvas Grades Tools

This module contains the tool that builds a student's grade report.
"""

import logging
from typing import Any

from mcp.server.fastmcp import Context, FastMCP

from canvas_grades.exceptions import TerminalError

logger = logging.getLogger(__name__)


def register_grade_tools(mcp: FastMCP) -> None:
    """Register grade tools with the MCP server."""

    @mcp.tool()
    async def get_grade_report(
        ctx: Context, token: str
    ) -> list[dict[str, Any]] | dict[str, Any]:
        """
        Build the caller's grade report from Canvas.

        Every discovered course appears once, in Canvas order. Grades or
        scores that no source could provide are reported as "N/A".

        Args:
            ctx: Request context containing the report service
            token: The student's Canvas access token

        Returns:
            List of course grade records, or {"error", "stage"} when the
            report could not be built at all
        """
        report_service = ctx.request_context.lifespan_context["report_service"]
        try:
            records = await report_service.build_report(token)
        except TerminalError as e:
            logger.error(f"Grade report failed at stage '{e.stage}': {e}")
            return {"error": str(e), "stage": e.stage}
        return [record.to_dict() for record in records]
