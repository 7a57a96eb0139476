"""
Canvas Grades Server

This module provides the MCP server for Canvas Grades. It proxies a
student's access token to the Canvas API and returns a normalized grade
report, so the token never has to be used from a browser.
"""
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP

import canvas_grades.config as config
from canvas_grades.canvas_api_adapter import CanvasApiAdapter
from canvas_grades.report import ReportService
from canvas_grades.tools.grades import register_grade_tools

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("canvas_grades")


@asynccontextmanager
async def app_lifespan(_: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Manage application lifecycle with resources"""
    logger.info(f"Initializing Canvas API adapter for {config.API_URL}")
    api_adapter = CanvasApiAdapter(config.API_URL, timeout=config.REQUEST_TIMEOUT)
    report_service = ReportService.from_config(api_adapter)

    try:
        yield {"api_adapter": api_adapter, "report_service": report_service}
    finally:
        logger.info("Shutting down Canvas Grades server")
        api_adapter.session.close()


# Create an MCP server with lifespan
mcp = FastMCP(
    "Canvas Grades",
    instructions="Builds a student's Canvas grade report from their access token.",
    lifespan=app_lifespan,
)

register_grade_tools(mcp)


if __name__ == "__main__":
    mcp.run()
