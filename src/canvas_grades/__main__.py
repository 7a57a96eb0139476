"""
Main entry point for the canvas_grades package.
This allows running the package with `python -m canvas_grades`.
"""
import logging
import sys

from canvas_grades.server import mcp

logger = logging.getLogger("canvas_grades")


if __name__ == "__main__":
    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received. Exiting gracefully.")
        sys.exit(0)
